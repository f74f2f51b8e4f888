# Copyright 2026 idlkit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Validation checks for IDL models.

These checks operate on models that passed semantic analysis and report
problems that affect the generated client rather than the IDL's structure.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from idlkit.codegen.pda import eligibility_problem
from idlkit.codegen.registry import definition_references, references
from idlkit.model.entities import Idl

# ###############
# Public Interface
# ###############


@dataclass(frozen=True)
class ValidationWarning:
    """A non-fatal issue detected during validation.

    The client can still be generated, but it may be less convenient than
    expected or contain unused code.

    Attributes:
        message: Human-readable description of the warning.
    """

    message: str


@dataclass(frozen=True)
class ValidationError:
    """A fatal issue detected during validation.

    No client can be generated until the IDL is corrected.

    Attributes:
        message: Human-readable description of the error.
    """

    message: str


@dataclass
class ValidationResult:
    """Result of running validation checks.

    Attributes:
        warnings: Non-fatal issues found during validation.
        errors: Fatal errors that prevent generation.
    """

    warnings: list[ValidationWarning] = field(default_factory=list)
    errors: list[ValidationError] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        """Return True if any fatal validation errors were found."""
        return len(self.errors) > 0


def validate(idl: Idl) -> ValidationResult:
    """Run all validation checks on a parsed IDL.

    Checks performed:

    1. **Type definition cycles** (error): a type that ultimately contains
       itself has no finite encoding.

    2. **Underivable addresses** (warning): instruction accounts with a seed
       formula that the generated builder cannot derive by itself, for
       example because a seed reads a field of another account.  Callers
       have to pass those addresses explicitly.

    3. **Unused types** (warning): types that no account, instruction or
       other type refers to.

    Args:
        idl: The parsed program interface.

    Returns:
        A :class:`ValidationResult` containing any warnings and errors found.
    """
    warnings: list[ValidationWarning] = []
    errors: list[ValidationError] = []

    errors.extend(_check_type_cycles(idl))
    warnings.extend(_check_derivable_addresses(idl))
    warnings.extend(_check_unused_types(idl))

    return ValidationResult(warnings=warnings, errors=errors)


# ################
# Implementation
# ################


def _detect_cycle(graph: dict[str, list[str]]) -> list[str] | None:
    """Return the first cycle found in *graph*, closed on its start node, or None.

    Names that only appear as neighbours have no outgoing edges.
    """
    WHITE, GREY, BLACK = 0, 1, 2
    color: dict[str, int] = {}
    path: list[str] = []

    def _dfs(node: str) -> list[str] | None:
        color[node] = GREY
        path.append(node)
        for neighbor in graph.get(node, []):
            state = color.get(neighbor, WHITE)
            if state == GREY:
                cycle_start = path.index(neighbor)
                return path[cycle_start:] + [neighbor]
            if state == WHITE:
                result = _dfs(neighbor)
                if result is not None:
                    return result
        path.pop()
        color[node] = BLACK
        return None

    for node in graph:
        if color.get(node, WHITE) == WHITE:
            result = _dfs(node)
            if result is not None:
                return result
    return None


def _check_type_cycles(idl: Idl) -> list[ValidationError]:
    """Return an error for the first recursive chain of type definitions."""
    graph: dict[str, list[str]] = {}
    for definition in [*idl.types, *idl.accounts]:
        graph.setdefault(definition.name, []).extend(definition_references(definition))
    cycle = _detect_cycle(graph)
    if cycle is None:
        return []
    cycle_str = " -> ".join(cycle)
    return [ValidationError(message=f"Recursive type definition cycle detected: {cycle_str}.")]


def _check_derivable_addresses(idl: Idl) -> list[ValidationWarning]:
    """Return warnings for seed formulas the generated builder cannot evaluate."""
    warnings: list[ValidationWarning] = []
    for ix in idl.instructions:
        for account in ix.accounts:
            if account.pda is None:
                continue
            problem = eligibility_problem(account, ix)
            if problem is not None:
                warnings.append(
                    ValidationWarning(
                        message=(
                            f"Account '{account.name}' of instruction '{ix.name}' must be supplied by the caller: "
                            f"{problem}."
                        )
                    )
                )
    return warnings


def _check_unused_types(idl: Idl) -> list[ValidationWarning]:
    """Return warnings for types nothing refers to."""
    used: set[str] = {a.name for a in idl.accounts}
    for definition in [*idl.types, *idl.accounts]:
        used.update(name for name in definition_references(definition) if name != definition.name)
    for ix in idl.instructions:
        for arg in ix.args:
            used.update(references(arg.type))
    return [
        ValidationWarning(message=f"Type '{t.name}' is never referenced by an account, instruction or type.")
        for t in idl.types
        if t.name not in used
    ]
