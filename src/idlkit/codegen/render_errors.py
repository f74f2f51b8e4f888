# Copyright 2026 idlkit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Rendering of program errors and of the program id module."""

from __future__ import annotations

from idlkit.codegen.emit import INDENT, ImportSet, render_module
from idlkit.codegen.naming import pascal_case
from idlkit.model.entities import ErrorDef

# ###############
# Public Interface
# ###############


def error_class_name(error: ErrorDef) -> str:
    """Return the generated class name of *error*, always ending in ``Error``."""
    name = pascal_case(error.name)
    return name if name.endswith("Error") else f"{name}Error"


def render_errors(errors: list[ErrorDef]) -> str:
    """Render ``errors/__init__.py``.

    Every error becomes a ``ProgramError`` subclass carrying its numeric code,
    name and message.  ``error_from_code`` and ``error_from_name`` return an
    instance for a known code or name, and ``None`` otherwise.
    """
    imports = ImportSet()
    imports.add("idlkit.runtime.errors", "ProgramError")
    blocks = [_error_class(error) for error in errors]
    by_code = "".join(f"{INDENT}{error.code}: {error_class_name(error)},\n" for error in errors)
    by_name = "".join(f'{INDENT}"{error.name}": {error_class_name(error)},\n' for error in errors)
    blocks.append(f"_ERRORS_BY_CODE: dict[int, type[ProgramError]] = {{\n{by_code}}}\n")
    blocks.append(f"_ERRORS_BY_NAME: dict[str, type[ProgramError]] = {{\n{by_name}}}\n")
    blocks.append(
        "def error_from_code(code: int) -> ProgramError | None:\n"
        f'{INDENT}"""Return the error the program reports with *code*, if it is known."""\n'
        f"{INDENT}error_class = _ERRORS_BY_CODE.get(code)\n"
        f"{INDENT}return error_class() if error_class is not None else None\n"
    )
    blocks.append(
        "def error_from_name(name: str) -> ProgramError | None:\n"
        f'{INDENT}"""Return the error declared as *name*, if it is known."""\n'
        f"{INDENT}error_class = _ERRORS_BY_NAME.get(name)\n"
        f"{INDENT}return error_class() if error_class is not None else None\n"
    )
    exports = [error_class_name(error) for error in errors] + ["error_from_code", "error_from_name"]
    return render_module("Errors the program can return.", imports, exports, blocks)


def render_program_id(program_address: str) -> str:
    """Render ``program_id.py`` holding the address of the program."""
    imports = ImportSet()
    imports.add("solders.pubkey", "Pubkey")
    blocks = [f'PROGRAM_ADDRESS = "{program_address}"\n\nPROGRAM_ID = Pubkey.from_string(PROGRAM_ADDRESS)\n']
    return render_module("Address of the program.", imports, ["PROGRAM_ADDRESS", "PROGRAM_ID"], blocks)


# ################
# Implementation
# ################


def _error_class(error: ErrorDef) -> str:
    message = error.message if error.message is not None else error.name
    return (
        f"class {error_class_name(error)}(ProgramError):\n"
        f"{INDENT}code = {error.code}\n"
        f"{INDENT}name = {error.name!r}\n"
        "\n"
        f"{INDENT}def __init__(self) -> None:\n"
        f"{INDENT * 2}super().__init__({message!r})\n"
    )
