# Copyright 2026 idlkit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Text emission helpers shared by the module renderers."""

from __future__ import annotations

from collections.abc import Iterable

from idlkit.codegen.primitives import CodecLibrary
from idlkit.codegen.registry import DefinedKind, DefinedTypeInfo

# ###############
# Public Interface
# ###############

GENERATED_HEADER = (
    "# This file was generated by idlkit. Do not edit it by hand;\n"
    "# change the IDL and rerun `idlkit generate` instead.\n"
)

INDENT = "    "


class ImportSet:
    """The ``from module import name`` statements of one generated module."""

    def __init__(self) -> None:
        self._names: dict[str, set[str]] = {}

    def add(self, module: str, *names: str) -> None:
        self._names.setdefault(module, set()).update(names)

    def add_libraries(self, libraries: Iterable[CodecLibrary]) -> None:
        """Import the runtime libraries, and ``Pubkey`` along with the address codecs."""
        for library in libraries:
            self.add("idlkit.runtime", library.value)
            if library is CodecLibrary.ADDRESS:
                self.add("solders.pubkey", "Pubkey")

    def add_defined(self, infos: Iterable[DefinedTypeInfo], package: str) -> None:
        """Import defined types from their generated modules, relative to *package*."""
        for info in infos:
            if info.package == package:
                module = f".{info.module}"
            else:
                module = f"..{info.package}.{info.module}"
            if info.kind is DefinedKind.SCALAR_ENUM:
                self.add(module, info.class_name)
            else:
                self.add(module, info.class_name, info.codec)

    def render(self) -> str:
        groups: list[list[str]] = [[], [], [], [], []]
        for module in sorted(self._names):
            line = f"from {module} import {', '.join(sorted(self._names[module]))}"
            groups[_group(module)].append(line)
        return "\n\n".join("\n".join(group) for group in groups if group)


def render_module(docstring: str, imports: ImportSet, exports: list[str], blocks: list[str]) -> str:
    """Assemble a generated module from its parts.

    Args:
        docstring: One-line module docstring.
        imports: Import statements; ``from __future__ import annotations`` is
            always added.
        exports: Names listed in ``__all__``.
        blocks: Top-level definitions, separated by two blank lines.
    """
    imports.add("__future__", "annotations")
    parts = [GENERATED_HEADER, f'"""{docstring}"""\n', imports.render() + "\n"]
    if exports:
        parts.append("__all__ = [\n" + "".join(f'{INDENT}"{name}",\n' for name in exports) + "]\n")
    text = "\n".join(parts)
    if blocks:
        text += "\n\n" + "\n\n\n".join(block.rstrip("\n") for block in blocks) + "\n"
    return text


def render_docs(docs: list[str], indent: str = "") -> str:
    """Render IDL doc lines as a docstring at *indent*, or nothing."""
    lines = [line.strip().replace("\\", "\\\\").replace('"', "'") for line in docs if line.strip()]
    if not lines:
        return ""
    if len(lines) == 1:
        return f'{indent}"""{lines[0]}"""\n'
    body = "".join(f"{indent}{line}\n" for line in lines)
    return f'{indent}"""\n{body}{indent}"""\n'


def render_index(modules: list[str], extra: str = "") -> str:
    """Render the ``__init__`` of a generated subpackage re-exporting *modules*."""
    text = GENERATED_HEADER + "\n"
    for module in modules:
        text += f"from .{module} import *  # noqa: F401,F403\n"
    if extra:
        text += "\n" + extra
    return text


# ################
# Implementation
# ################

_STDLIB = {"dataclasses", "enum", "importlib", "typing", "collections.abc"}


def _group(module: str) -> int:
    if module == "__future__":
        return 0
    if module.startswith("."):
        return 4
    if module.split(".")[0] in _STDLIB or module in _STDLIB:
        return 1
    if module.startswith("idlkit"):
        return 3
    return 2
