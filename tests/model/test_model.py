# Copyright 2026 idlkit Contributors
# SPDX-License-Identifier: Apache-2.0

"""High-level tests demonstrating how to construct the idlkit program model."""

from idlkit.model import (
    AccountDef,
    AccountSeed,
    ArgSeed,
    BTreeMapType,
    ConstSeed,
    DefinedType,
    Dialect,
    EnumDef,
    EnumVariant,
    ErrorDef,
    FieldDef,
    FixedArrayType,
    HashMapType,
    Idl,
    Instruction,
    InstructionAccount,
    OptionType,
    PrimitiveType,
    SeedFormula,
    StructDef,
    TupleType,
    VectorType,
)
from idlkit.model.types import describe, leaf_types


def test_primitive_field() -> None:
    """A field can reference a primitive type token."""
    f = FieldDef(name="amount", type=PrimitiveType(name="u64"))
    assert f.name == "amount"
    assert isinstance(f.type, PrimitiveType)
    assert f.docs == []


def test_container_types() -> None:
    """Containers wrap other type descriptors."""
    vec = VectorType(inner=PrimitiveType(name="u8"))
    array = FixedArrayType(inner=PrimitiveType(name="u8"), length=32)
    option = OptionType(inner=DefinedType(name="Point"))

    assert vec.inner == PrimitiveType(name="u8")
    assert array.length == 32
    assert option.inner == DefinedType(name="Point")


def test_descriptors_are_discriminated_by_kind() -> None:
    """Descriptors validate from plain dicts through their ``kind``."""
    f = FieldDef.model_validate({"name": "points", "type": {"kind": "vec", "inner": {"kind": "defined", "name": "P"}}})
    assert f.type == VectorType(inner=DefinedType(name="P"))


def test_describe() -> None:
    """Type descriptors render in Rust-like notation for messages."""
    descriptor = HashMapType(
        key=PrimitiveType(name="string"),
        value=TupleType(items=[FixedArrayType(inner=PrimitiveType(name="u8"), length=4), DefinedType(name="Point")]),
    )
    assert describe(descriptor) == "HashMap<string, ([u8; 4], Point)>"
    assert describe(OptionType(inner=VectorType(inner=PrimitiveType(name="bool")))) == "Option<Vec<bool>>"


def test_leaf_types() -> None:
    """Leaf types are the primitives and references at the bottom of a descriptor."""
    descriptor = BTreeMapType(
        key=PrimitiveType(name="u8"),
        value=VectorType(inner=TupleType(items=[DefinedType(name="A"), PrimitiveType(name="bool")])),
    )
    assert leaf_types(descriptor) == [PrimitiveType(name="u8"), DefinedType(name="A"), PrimitiveType(name="bool")]


def test_scalar_enum() -> None:
    """An enum whose variants carry no data is scalar."""
    side = EnumDef(name="Side", variants=[EnumVariant(name="Buy"), EnumVariant(name="Sell")])
    assert side.is_scalar
    assert side.variants[0].is_scalar


def test_data_enum() -> None:
    """Variants carry named fields or positional fields."""
    action = EnumDef(
        name="Action",
        variants=[
            EnumVariant(name="Pay", fields=[FieldDef(name="amount", type=PrimitiveType(name="u64"))]),
            EnumVariant(name="Move", tuple_fields=[PrimitiveType(name="i32"), PrimitiveType(name="i32")]),
        ],
    )
    pay, move = action.variants
    assert not action.is_scalar
    assert not pay.is_tuple
    assert move.is_tuple


def test_seed_formula_constness() -> None:
    """A seed formula is constant only if every seed and its program id are literals."""
    const = ConstSeed(type=PrimitiveType(name="string"), value="vault")
    assert SeedFormula(seeds=[const]).is_constant
    assert SeedFormula(seeds=[const], program_id=const).is_constant
    assert not SeedFormula(seeds=[const, ArgSeed(type=PrimitiveType(name="u8"), path="index")]).is_constant
    owner = AccountSeed(type=PrimitiveType(name="publicKey"), path="owner")
    assert not SeedFormula(seeds=[const], program_id=owner).is_constant


def test_full_program() -> None:
    """A program combines types, accounts, instructions and errors."""
    vault = InstructionAccount(
        name="vault",
        is_mut=True,
        pda=SeedFormula(seeds=[ConstSeed(type=PrimitiveType(name="string"), value="vault")]),
    )
    idl = Idl(
        name="vault",
        types=[StructDef(name="Point", fields=[FieldDef(name="x", type=PrimitiveType(name="i32"))])],
        accounts=[AccountDef(name="Vault", fields=[FieldDef(name="amount", type=PrimitiveType(name="u64"))])],
        instructions=[Instruction(name="deposit", accounts=[vault])],
        errors=[ErrorDef(code=6000, name="Broke")],
    )
    assert idl.dialect is Dialect.ANCHOR
    assert idl.version == "0.0.0"
    assert idl.address is None
    assert idl.instructions[0].accounts[0].pda is not None
    assert not idl.instructions[0].accounts[0].is_signer
    assert idl.errors[0].message is None
