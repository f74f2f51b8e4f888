# Copyright 2026 idlkit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Semantic analysis for parsed IDL documents.

Checks structural correctness of the parsed model: duplicate names and
unresolved type references.  This is distinct from validation (checks such
as recursive types or accounts that cannot be derived), which reports
problems the generator can still work around or has to reject as a whole.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from idlkit.codegen import primitives
from idlkit.codegen.naming import python_name
from idlkit.codegen.render_instruction import REMAINING_ACCOUNTS_FIELD
from idlkit.model.entities import EnumDef, Idl
from idlkit.model.types import DefinedType, FieldDef, TypeDescriptor, leaf_types

# ###############
# Public Interface
# ###############


@dataclass(frozen=True)
class SemanticError:
    """A structural error detected during semantic analysis.

    Attributes:
        message: Human-readable description of the error.
    """

    message: str


def analyze(idl: Idl, *, type_aliases: Mapping[str, str] | None = None) -> list[SemanticError]:
    """Perform semantic analysis on a parsed IDL.

    Checks performed:
    - Duplicate type and account names, compared case-insensitively since
      they become module names.
    - Duplicate field names within a struct, account, variant or instruction,
      compared as the Python identifiers they become.
    - Duplicate variant names within an enum.
    - Duplicate instruction names and duplicate accounts within an instruction.
    - Instruction accounts must not take the name of the extra-accounts field.
    - Defined type references must resolve to a type, an account or an alias.
    - Primitive type tokens must be supported or resolve like a defined type.
    - Duplicate error codes and error names.

    Args:
        idl: The parsed program interface.
        type_aliases: Defined type name to primitive token, as configured.

    Returns:
        A list of :class:`SemanticError` instances. An empty list means no
        semantic errors were found.
    """
    aliases = dict(type_aliases or {})
    known = {t.name for t in idl.types} | {a.name for a in idl.accounts} | set(aliases)
    errors: list[SemanticError] = []

    errors.extend(
        _check_duplicate_names(
            [t.name.lower() for t in idl.types],
            "Duplicate type name '{}' (names are compared case-insensitively)",
        )
    )
    type_names = {t.name for t in idl.types}
    errors.extend(
        _check_duplicate_names(
            [a.name.lower() for a in idl.accounts if a.name not in type_names],
            "Duplicate account name '{}' (names are compared case-insensitively)",
        )
    )

    for type_def in idl.types:
        ctx = f"type '{type_def.name}'"
        if isinstance(type_def, EnumDef):
            errors.extend(
                _check_duplicate_names([v.name for v in type_def.variants], "Duplicate variant name '{}' in " + ctx)
            )
            for variant in type_def.variants:
                variant_ctx = f"variant '{type_def.name}.{variant.name}'"
                errors.extend(_check_fields(variant_ctx, variant.fields, known, aliases))
                for index, item in enumerate(variant.tuple_fields):
                    errors.extend(_check_type(f"{variant_ctx} field {index}", item, known, aliases))
        else:
            errors.extend(_check_fields(ctx, type_def.fields, known, aliases))

    for account in idl.accounts:
        errors.extend(_check_fields(f"account '{account.name}'", account.fields, known, aliases))

    errors.extend(_check_duplicate_names([ix.name for ix in idl.instructions], "Duplicate instruction name '{}'"))
    for ix in idl.instructions:
        ctx = f"instruction '{ix.name}'"
        errors.extend(_check_fields(ctx, ix.args, known, aliases))
        errors.extend(
            _check_duplicate_names([python_name(a.name) for a in ix.accounts], "Duplicate account '{}' in " + ctx)
        )
        errors.extend(
            SemanticError(f"Account '{a.name}' of {ctx} clashes with the reserved '{REMAINING_ACCOUNTS_FIELD}' field.")
            for a in ix.accounts
            if python_name(a.name) == REMAINING_ACCOUNTS_FIELD
        )

    errors.extend(_check_duplicate_names([str(e.code) for e in idl.errors], "Duplicate error code {}"))
    errors.extend(_check_duplicate_names([e.name for e in idl.errors], "Duplicate error name '{}'"))
    return errors


# ################
# Implementation
# ################


def _check_duplicate_names(names: list[str], fmt: str) -> list[SemanticError]:
    """Return a SemanticError for each name that appears more than once.

    Only one error per unique duplicate name is emitted (even if it appears
    three or more times).  *fmt* must contain a single ``{}`` placeholder
    that will be filled with the duplicate name.
    """
    seen: set[str] = set()
    reported: set[str] = set()
    errors: list[SemanticError] = []
    for name in names:
        if name in seen:
            if name not in reported:
                errors.append(SemanticError(fmt.format(name)))
                reported.add(name)
        else:
            seen.add(name)
    return errors


def _check_fields(ctx: str, fields: list[FieldDef], known: set[str], aliases: dict[str, str]) -> list[SemanticError]:
    """Check field names and field types of one struct-like definition."""
    errors = _check_duplicate_names([python_name(f.name) for f in fields], f"Duplicate field name '{{}}' in {ctx}")
    for f in fields:
        errors.extend(_check_type(f"field '{f.name}' of {ctx}", f.type, known, aliases))
    return errors


def _check_type(ctx: str, descriptor: TypeDescriptor, known: set[str], aliases: dict[str, str]) -> list[SemanticError]:
    errors: list[SemanticError] = []
    for leaf in leaf_types(descriptor):
        if isinstance(leaf, DefinedType):
            if leaf.name not in known:
                errors.append(SemanticError(f"Undefined type '{leaf.name}' in {ctx}"))
            elif leaf.name in aliases and primitives.lookup(aliases[leaf.name]) is None:
                errors.append(
                    SemanticError(f"Alias '{leaf.name}' in {ctx} points to unsupported type '{aliases[leaf.name]}'")
                )
        elif primitives.lookup(leaf.name) is None and leaf.name not in known:
            errors.append(SemanticError(f"Unsupported type '{leaf.name}' in {ctx}"))
    return errors
