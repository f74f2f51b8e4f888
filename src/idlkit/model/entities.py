# Copyright 2026 idlkit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Program entities for the idlkit model: types, accounts, instructions, errors."""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import BaseModel
from pydantic import Field as _Field

from idlkit.model.types import FieldDef, TypeDescriptor

# ###############
# Public Interface
# ###############


class Dialect(Enum):
    """The IDL flavour, which decides how discriminators are derived."""

    ANCHOR = "anchor"
    SHANK = "shank"


class EnumVariant(BaseModel):
    """One variant of an enum: named fields, positional fields, or nothing."""

    name: str
    fields: list[FieldDef] = _Field(default_factory=list)
    tuple_fields: list[TypeDescriptor] = _Field(default_factory=list)

    @property
    def is_scalar(self) -> bool:
        """Return True if the variant carries no payload."""
        return not self.fields and not self.tuple_fields

    @property
    def is_tuple(self) -> bool:
        """Return True if the variant carries positional fields."""
        return bool(self.tuple_fields)


class StructDef(BaseModel):
    """A user-defined struct type."""

    kind: Literal["struct"] = "struct"
    name: str
    fields: list[FieldDef] = _Field(default_factory=list)
    docs: list[str] = _Field(default_factory=list)


class EnumDef(BaseModel):
    """A user-defined enum type. Variant order defines the discriminant."""

    kind: Literal["enum"] = "enum"
    name: str
    variants: list[EnumVariant] = _Field(default_factory=list)
    docs: list[str] = _Field(default_factory=list)

    @property
    def is_scalar(self) -> bool:
        """Return True if no variant carries a payload."""
        return all(variant.is_scalar for variant in self.variants)


TypeDef = Annotated[StructDef | EnumDef, _Field(discriminator="kind")]


class ConstSeed(BaseModel):
    """A seed whose bytes are a literal value."""

    kind: Literal["const"] = "const"
    type: TypeDescriptor
    value: Any


class ArgSeed(BaseModel):
    """A seed taken from an instruction argument."""

    kind: Literal["arg"] = "arg"
    type: TypeDescriptor
    path: str


class AccountSeed(BaseModel):
    """A seed taken from another account of the same instruction."""

    kind: Literal["account"] = "account"
    type: TypeDescriptor
    path: str
    account: str | None = None


Seed = Annotated[ConstSeed | ArgSeed | AccountSeed, _Field(discriminator="kind")]


class SeedFormula(BaseModel):
    """Seeds (and an optional owning program) that derive a program address."""

    seeds: list[Seed] = _Field(default_factory=list)
    program_id: Seed | None = None

    @property
    def is_constant(self) -> bool:
        """Return True if every seed and the program id are literal values."""
        return all(isinstance(seed, ConstSeed) for seed in self.seeds) and (
            self.program_id is None or isinstance(self.program_id, ConstSeed)
        )


class InstructionAccount(BaseModel):
    """An account an instruction reads or writes."""

    name: str
    is_mut: bool = False
    is_signer: bool = False
    is_optional: bool = False
    pda: SeedFormula | None = None
    docs: list[str] = _Field(default_factory=list)


class Discriminant(BaseModel):
    """An explicit instruction discriminant, as declared by shank programs."""

    type: TypeDescriptor
    value: int | list[int]


class Instruction(BaseModel):
    """An on-chain instruction: its accounts and its argument payload."""

    name: str
    accounts: list[InstructionAccount] = _Field(default_factory=list)
    args: list[FieldDef] = _Field(default_factory=list)
    discriminant: Discriminant | None = None
    docs: list[str] = _Field(default_factory=list)


class AccountDef(BaseModel):
    """A program-owned account layout."""

    name: str
    fields: list[FieldDef] = _Field(default_factory=list)
    docs: list[str] = _Field(default_factory=list)


class ErrorDef(BaseModel):
    """A custom program error code."""

    code: int
    name: str
    message: str | None = None


class Idl(BaseModel):
    """A parsed program interface description."""

    name: str
    version: str = "0.0.0"
    instructions: list[Instruction] = _Field(default_factory=list)
    accounts: list[AccountDef] = _Field(default_factory=list)
    types: list[TypeDef] = _Field(default_factory=list)
    errors: list[ErrorDef] = _Field(default_factory=list)
    address: str | None = None
    dialect: Dialect = Dialect.ANCHOR
    binary_version: str | None = None
    lib_version: str | None = None
