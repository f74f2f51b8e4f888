# Copyright 2026 idlkit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Generation workflow turning a parsed IDL into a Python client package.

Definitions are rendered in dependency order: a type or account is rendered
only after every type it references, so that the registry already knows
whether the referenced type has a fixed size.  Instructions come last and
the error and program id modules close the package.

The generated package looks like this::

    <output>/
        __init__.py
        program_id.py          (only when the program address is known)
        types/<type>.py
        accounts/<account>.py
        instructions/<instruction>.py
        errors/__init__.py
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import TypeVar

from idlkit.codegen.context import RenderContext
from idlkit.codegen.emit import GENERATED_HEADER, render_index
from idlkit.codegen.errors import DefinitionCycleError, GenerationError
from idlkit.codegen.registry import (
    ACCOUNTS_PACKAGE,
    INSTRUCTIONS_PACKAGE,
    TYPES_PACKAGE,
    TypeRegistry,
    definition_references,
)
from idlkit.codegen.render_account import render_account, render_account_index
from idlkit.codegen.render_errors import render_errors, render_program_id
from idlkit.codegen.render_instruction import render_instruction, render_instruction_index
from idlkit.codegen.render_type import RenderedModule, render_type
from idlkit.model.entities import AccountDef, Idl, TypeDef

logger = logging.getLogger(__name__)

_D = TypeVar("_D")

# ###############
# Public Interface
# ###############

ERRORS_PACKAGE = "errors"
GENERATED_PACKAGES = (TYPES_PACKAGE, ACCOUNTS_PACKAGE, INSTRUCTIONS_PACKAGE, ERRORS_PACKAGE)


class CompilerError(Exception):
    """Raised when the generated package cannot be written."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


@dataclass
class GeneratedProgram:
    """The sources of a generated client package.

    Attributes:
        files: Source text keyed by path relative to the package root,
            e.g. ``"types/side.py"``.
        failures: Errors of entities that could not be rendered, keyed by
            entity name.  Only filled when generating with ``fail_fast=False``.
    """

    files: dict[str, str] = field(default_factory=dict)
    failures: dict[str, GenerationError] = field(default_factory=dict)


def generate(idl: Idl, context: RenderContext | None = None, *, fail_fast: bool = True) -> GeneratedProgram:
    """Render every type, account, instruction and error of *idl*.

    Args:
        idl: The parsed program interface.
        context: Rendering settings; derived from the IDL metadata by default.
        fail_fast: Raise the first entity error instead of recording it and
            carrying on with the remaining entities.

    Returns:
        The generated sources.

    Raises:
        DefinitionCycleError: If types reference each other recursively.
        GenerationError: On the first entity that fails, when *fail_fast* is set.
    """
    context = context or RenderContext.for_idl(idl)
    registry = TypeRegistry.from_idl(idl)
    program = GeneratedProgram()

    types: list[RenderedModule] = []
    accounts: list[RenderedModule] = []
    for definition in _dependency_order(idl):
        if isinstance(definition, AccountDef):
            module = _render(program, definition.name, fail_fast, render_account, definition, registry, context)
            if module is None:
                continue
            accounts.append(module)
            program.files[f"{ACCOUNTS_PACKAGE}/{module.module}.py"] = module.code
            info = registry.lookup(definition.name)
            if info is not None and not info.resolved:
                registry.resolve(definition.name, fixable=module.fixable, byte_size=module.byte_size)
        else:
            module = _render(program, definition.name, fail_fast, render_type, definition, registry, context)
            if module is None:
                continue
            types.append(module)
            program.files[f"{TYPES_PACKAGE}/{module.module}.py"] = module.code
            registry.resolve(definition.name, fixable=module.fixable, byte_size=module.byte_size)

    instructions: list[RenderedModule] = []
    for instruction in idl.instructions:
        module = _render(program, instruction.name, fail_fast, render_instruction, instruction, registry, context)
        if module is not None:
            instructions.append(module)
            program.files[f"{INSTRUCTIONS_PACKAGE}/{module.module}.py"] = module.code

    types.sort(key=lambda module: module.module)
    accounts.sort(key=lambda module: module.module)
    program.files[f"{TYPES_PACKAGE}/__init__.py"] = render_index([module.module for module in types])
    program.files[f"{ACCOUNTS_PACKAGE}/__init__.py"] = render_account_index(accounts)
    program.files[f"{INSTRUCTIONS_PACKAGE}/__init__.py"] = render_instruction_index(instructions)
    program.files[f"{ERRORS_PACKAGE}/__init__.py"] = render_errors(idl.errors)
    modules = [ACCOUNTS_PACKAGE, ERRORS_PACKAGE, INSTRUCTIONS_PACKAGE, TYPES_PACKAGE]
    if context.program_address is not None:
        program.files["program_id.py"] = render_program_id(context.program_address)
        modules.append("program_id")
    program.files["__init__.py"] = render_index(modules)
    logger.debug("generated %d files for %s", len(program.files), idl.name)
    return program


def write_program(program: GeneratedProgram, output_dir: Path) -> list[Path]:
    """Write *program* below *output_dir*, replacing previously generated subpackages.

    Returns:
        The written paths, in the order they were written.

    Raises:
        CompilerError: If a file cannot be written.
    """
    written: list[Path] = []
    try:
        for package in GENERATED_PACKAGES:
            target = output_dir / package
            if target.is_dir() and _is_generated(target / "__init__.py"):
                shutil.rmtree(target)
        for relative, code in sorted(program.files.items()):
            path = output_dir / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(code, encoding="utf-8")
            written.append(path)
    except OSError as exc:
        raise CompilerError(f"Cannot write generated package to '{output_dir}': {exc}") from exc
    return written


# ################
# Implementation
# ################


def _is_generated(path: Path) -> bool:
    """Return True if *path* exists and starts with the generated-file header."""
    if not path.exists():
        return False
    return path.read_text(encoding="utf-8").startswith(GENERATED_HEADER)


def _render(
    program: GeneratedProgram,
    name: str,
    fail_fast: bool,
    renderer: Callable[[_D, TypeRegistry, RenderContext], RenderedModule],
    definition: _D,
    registry: TypeRegistry,
    context: RenderContext,
) -> RenderedModule | None:
    """Call *renderer*, recording its failure on *program* unless failing fast."""
    logger.debug("rendering %s", name)
    try:
        return renderer(definition, registry, context)
    except GenerationError as exc:
        if fail_fast:
            raise
        logger.warning("skipping %s: %s", name, exc)
        program.failures[name] = exc
        return None


def _dependency_order(idl: Idl) -> list[TypeDef | AccountDef]:
    """Return types and accounts so that every definition follows its dependencies.

    Raises:
        DefinitionCycleError: If definitions reference each other recursively.
    """
    nodes: dict[str, TypeDef | AccountDef] = {type_def.name: type_def for type_def in idl.types}
    # Accounts also declared as types are rendered last, once their type is known.
    shadowed: list[AccountDef] = []
    for account in idl.accounts:
        if account.name in nodes:
            shadowed.append(account)
        else:
            nodes[account.name] = account

    ordered: list[TypeDef | AccountDef] = []
    state: dict[str, int] = {}
    path: list[str] = []

    def visit(name: str) -> None:
        if name not in nodes or state.get(name) == 2:
            return
        if state.get(name) == 1:
            cycle = path[path.index(name) :] + [name]
            raise DefinitionCycleError(f"recursive type definitions: {' -> '.join(cycle)}", entity=name)
        state[name] = 1
        path.append(name)
        for dependency in definition_references(nodes[name]):
            visit(dependency)
        path.pop()
        state[name] = 2
        ordered.append(nodes[name])

    for name in nodes:
        visit(name)
    return ordered + shadowed
