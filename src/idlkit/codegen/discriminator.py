# Copyright 2026 idlkit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Derivation of the leading discriminator of instruction data and accounts.

Anchor programs use an implicit 8-byte discriminator: the first eight bytes of
``sha256("global:<snake_case instruction>")`` for instructions and of
``sha256("account:<PascalCase account>")`` for accounts.  Shank programs
declare an explicit discriminant per instruction and have no account
discriminator.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass

from idlkit.codegen import primitives
from idlkit.codegen.errors import UnsupportedTypeError
from idlkit.codegen.naming import constant_name, pascal_case, snake_case
from idlkit.model.entities import AccountDef, Dialect, Discriminant, Instruction
from idlkit.model.types import FixedArrayType, PrimitiveType, TypeDescriptor, describe

# ###############
# Public Interface
# ###############

DISCRIMINATOR_SIZE = 8
INSTRUCTION_DISCRIMINATOR_FIELD = "instruction_discriminator"
ACCOUNT_DISCRIMINATOR_FIELD = "account_discriminator"


@dataclass(frozen=True)
class DiscriminatorField:
    """The hidden first field of an instruction or account layout.

    Attributes:
        field_name: Name of the field in the struct codec.
        type: Wire type of the discriminator.
        value: The constant value, a byte list or an integer.
        constant: Name of the generated module constant holding the value.
    """

    field_name: str
    type: TypeDescriptor
    value: int | list[int]
    constant: str

    @property
    def literal(self) -> str:
        """Return the Python literal of the value."""
        return repr(self.value)


def sighash(namespace: str, name: str) -> bytes:
    """Return the first eight bytes of ``sha256("<namespace>:<name>")``."""
    return hashlib.sha256(f"{namespace}:{name}".encode()).digest()[:DISCRIMINATOR_SIZE]


def instruction_sighash(instruction_name: str) -> bytes:
    """Return the implicit discriminator of an instruction."""
    return sighash("global", snake_case(instruction_name))


def account_sighash(account_name: str) -> bytes:
    """Return the implicit discriminator of an account."""
    return sighash("account", pascal_case(account_name))


def instruction_discriminator(instruction: Instruction, dialect: Dialect) -> DiscriminatorField | None:
    """Return the discriminator field of *instruction*'s data.

    An explicit discriminant always wins.  Otherwise anchor instructions get
    the implicit hash and shank instructions get none.

    Raises:
        UnsupportedTypeError: If an explicit discriminant has a type that is
            neither an integer primitive nor a fixed array of ``u8``.
    """
    constant = f"{constant_name(instruction.name)}_INSTRUCTION_DISCRIMINATOR"
    if instruction.discriminant is not None:
        _check_explicit(instruction.discriminant, instruction.name)
        return DiscriminatorField(
            INSTRUCTION_DISCRIMINATOR_FIELD,
            instruction.discriminant.type,
            instruction.discriminant.value,
            constant,
        )
    if dialect is Dialect.SHANK:
        return None
    return DiscriminatorField(
        INSTRUCTION_DISCRIMINATOR_FIELD,
        _BYTE_ARRAY,
        list(instruction_sighash(instruction.name)),
        constant,
    )


def account_discriminator(account: AccountDef, dialect: Dialect) -> DiscriminatorField | None:
    """Return the discriminator field of *account*, or ``None`` for shank accounts."""
    if dialect is Dialect.SHANK:
        return None
    return DiscriminatorField(
        ACCOUNT_DISCRIMINATOR_FIELD,
        _BYTE_ARRAY,
        list(account_sighash(account.name)),
        f"{constant_name(account.name)}_DISCRIMINATOR",
    )


# ################
# Implementation
# ################

_BYTE_ARRAY = FixedArrayType(inner=PrimitiveType(name="u8"), length=DISCRIMINATOR_SIZE)


def _check_explicit(discriminant: Discriminant, owner: str) -> None:
    descriptor = discriminant.type
    if isinstance(descriptor, PrimitiveType) and primitives.integer_layout(descriptor.name) is not None:
        if isinstance(discriminant.value, int):
            return
    elif (
        isinstance(descriptor, FixedArrayType)
        and isinstance(descriptor.inner, PrimitiveType)
        and descriptor.inner.name == "u8"
        and isinstance(discriminant.value, list)
        and len(discriminant.value) == descriptor.length
    ):
        return
    raise UnsupportedTypeError(
        f"{owner}: discriminant of type '{describe(descriptor)}' with value {discriminant.value!r} is not supported",
        entity=owner,
        field=INSTRUCTION_DISCRIMINATOR_FIELD,
        type_name=describe(descriptor),
    )
