# Copyright 2026 idlkit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Errors raised while deriving layouts and rendering client modules."""

from __future__ import annotations

# ###############
# Public Interface
# ###############


class GenerationError(Exception):
    """Base class for all generation failures.

    Attributes:
        entity: Name of the type, account, or instruction being rendered.
        field: Name of the field being mapped, if any.
        type_name: Spelling of the offending type, if any.
    """

    def __init__(
        self,
        message: str,
        *,
        entity: str | None = None,
        field: str | None = None,
        type_name: str | None = None,
    ) -> None:
        super().__init__(message)
        self.entity = entity
        self.field = field
        self.type_name = type_name


class UnsupportedTypeError(GenerationError):
    """A primitive type token is not in the primitive registry."""


class UnknownTypeError(GenerationError):
    """A defined-type reference does not resolve to any type or account."""


class UnsupportedNestingError(GenerationError):
    """A type nests a construct inside a container that cannot hold it."""


class SeedResolutionError(GenerationError):
    """A derived-address seed references an argument or account that is missing."""


class TypeOrderError(GenerationError):
    """A type was referenced before its own layout had been resolved."""


class EmptyStructError(GenerationError):
    """Instruction data would have no fields at all."""


class DefinitionCycleError(GenerationError):
    """Types reference each other recursively."""


def located(entity: str | None, field: str | None) -> str:
    """Return ``"Entity.field"`` style location text for error messages."""
    if entity and field:
        return f"{entity}.{field}"
    return entity or field or "<unknown>"
