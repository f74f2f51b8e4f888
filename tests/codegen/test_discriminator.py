# Copyright 2026 idlkit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for instruction and account discriminators."""

import hashlib

import pytest

from idlkit.codegen.discriminator import (
    ACCOUNT_DISCRIMINATOR_FIELD,
    INSTRUCTION_DISCRIMINATOR_FIELD,
    account_discriminator,
    account_sighash,
    instruction_discriminator,
    instruction_sighash,
)
from idlkit.codegen.errors import UnsupportedTypeError
from idlkit.model.entities import AccountDef, Dialect, Discriminant, Instruction
from idlkit.model.types import FixedArrayType, PrimitiveType

# ###############
# Test Helpers
# ###############


def _sha(preimage: str) -> bytes:
    return hashlib.sha256(preimage.encode()).digest()[:8]


# ###############
# Sighash
# ###############


def test_instruction_sighash_uses_global_namespace() -> None:
    assert instruction_sighash("transfer") == _sha("global:transfer")


def test_instruction_sighash_snake_cases_the_name() -> None:
    assert instruction_sighash("initializeAccount") == _sha("global:initialize_account")


def test_account_sighash_pascal_cases_the_name() -> None:
    assert account_sighash("gameState") == _sha("account:GameState")
    assert account_sighash("GameState") == _sha("account:GameState")


def test_sighash_is_stable() -> None:
    assert instruction_sighash("transfer") == instruction_sighash("transfer")
    assert len(instruction_sighash("transfer")) == 8


# ###############
# Instruction Discriminators
# ###############


class TestInstructionDiscriminator:
    def test_anchor_uses_hash(self) -> None:
        field = instruction_discriminator(Instruction(name="transfer"), Dialect.ANCHOR)
        assert field is not None
        assert field.field_name == INSTRUCTION_DISCRIMINATOR_FIELD
        assert field.value == list(_sha("global:transfer"))
        assert field.constant == "TRANSFER_INSTRUCTION_DISCRIMINATOR"
        assert field.type == FixedArrayType(inner=PrimitiveType(name="u8"), length=8)

    def test_shank_without_discriminant_has_none(self) -> None:
        assert instruction_discriminator(Instruction(name="transfer"), Dialect.SHANK) is None

    def test_explicit_discriminant_wins(self) -> None:
        ix = Instruction(name="transfer", discriminant=Discriminant(type=PrimitiveType(name="u8"), value=3))
        for dialect in Dialect:
            field = instruction_discriminator(ix, dialect)
            assert field is not None
            assert field.value == 3
            assert field.literal == "3"

    def test_explicit_byte_array_discriminant(self) -> None:
        ix = Instruction(
            name="transfer",
            discriminant=Discriminant(type=FixedArrayType(inner=PrimitiveType(name="u8"), length=2), value=[1, 2]),
        )
        field = instruction_discriminator(ix, Dialect.SHANK)
        assert field is not None
        assert field.value == [1, 2]

    def test_unsupported_discriminant_type(self) -> None:
        ix = Instruction(name="transfer", discriminant=Discriminant(type=PrimitiveType(name="string"), value=1))
        with pytest.raises(UnsupportedTypeError):
            instruction_discriminator(ix, Dialect.SHANK)

    def test_discriminant_length_mismatch(self) -> None:
        ix = Instruction(
            name="transfer",
            discriminant=Discriminant(type=FixedArrayType(inner=PrimitiveType(name="u8"), length=4), value=[1]),
        )
        with pytest.raises(UnsupportedTypeError):
            instruction_discriminator(ix, Dialect.ANCHOR)


# ###############
# Account Discriminators
# ###############


def test_anchor_account_discriminator() -> None:
    field = account_discriminator(AccountDef(name="vault"), Dialect.ANCHOR)
    assert field is not None
    assert field.field_name == ACCOUNT_DISCRIMINATOR_FIELD
    assert field.value == list(_sha("account:Vault"))
    assert field.constant == "VAULT_DISCRIMINATOR"


def test_shank_account_has_no_discriminator() -> None:
    assert account_discriminator(AccountDef(name="vault"), Dialect.SHANK) is None
