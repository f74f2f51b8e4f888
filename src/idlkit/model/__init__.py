# Copyright 2026 idlkit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Program model for idlkit (types, accounts, instructions, errors)."""

from idlkit.model.entities import (
    AccountDef,
    AccountSeed,
    ArgSeed,
    ConstSeed,
    Dialect,
    Discriminant,
    EnumDef,
    EnumVariant,
    ErrorDef,
    Idl,
    Instruction,
    InstructionAccount,
    Seed,
    SeedFormula,
    StructDef,
    TypeDef,
)
from idlkit.model.types import (
    BTreeMapType,
    COptionType,
    DefinedType,
    FieldDef,
    FixedArrayType,
    HashMapType,
    OptionType,
    PrimitiveType,
    TupleType,
    TypeDescriptor,
    VectorType,
)

__all__ = [
    # Type descriptors
    "PrimitiveType",
    "OptionType",
    "COptionType",
    "VectorType",
    "FixedArrayType",
    "HashMapType",
    "BTreeMapType",
    "TupleType",
    "DefinedType",
    "TypeDescriptor",
    "FieldDef",
    # Entities
    "Dialect",
    "EnumVariant",
    "StructDef",
    "EnumDef",
    "TypeDef",
    "ConstSeed",
    "ArgSeed",
    "AccountSeed",
    "Seed",
    "SeedFormula",
    "InstructionAccount",
    "Discriminant",
    "Instruction",
    "AccountDef",
    "ErrorDef",
    "Idl",
]
