# Copyright 2026 idlkit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for generating and writing a client package, and for using the result."""

from __future__ import annotations

import hashlib
import importlib
from pathlib import Path
from types import ModuleType
from typing import Any

import pytest
from solders.instruction import AccountMeta
from solders.pubkey import Pubkey

from idlkit.codegen.context import RenderContext
from idlkit.codegen.emit import GENERATED_HEADER
from idlkit.codegen.errors import DefinitionCycleError, UnsupportedTypeError
from idlkit.compiler.build import CompilerError, GeneratedProgram, generate, write_program
from idlkit.compiler.parser import parse_idl
from idlkit.model.entities import Idl

# ###############
# Test Helpers
# ###############

PROGRAM = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"
SYSTEM_PROGRAM = Pubkey.from_string("11111111111111111111111111111111")

_TRANSFER = {
    "name": "transfer",
    "accounts": [
        {"name": "from", "isMut": True, "isSigner": True},
        {"name": "to", "isMut": True, "isSigner": False},
        {"name": "systemProgram", "isMut": False, "isSigner": False},
    ],
    "args": [{"name": "amount", "type": "u64"}],
}


def _idl(**document: Any) -> Idl:
    return parse_idl({"name": "demo", "metadata": {"address": PROGRAM}, **document})


def _struct(type_name: str, /, **fields: Any) -> dict[str, Any]:
    body = [{"name": n, "type": t} for n, t in fields.items()]
    return {"name": type_name, "type": {"kind": "struct", "fields": body}}


def _load(
    program: GeneratedProgram,
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    package: str,
    module: str,
) -> ModuleType:
    """Write *program* as *package* below *tmp_path* and import one of its modules."""
    write_program(program, tmp_path / package)
    monkeypatch.syspath_prepend(str(tmp_path))
    importlib.invalidate_caches()
    return importlib.import_module(f"{package}.{module}")


# ###############
# Package Layout
# ###############


class TestGenerate:
    def test_files(self) -> None:
        idl = _idl(
            instructions=[_TRANSFER],
            accounts=[_struct("Vault", amount="u64")],
            types=[_struct("Point", x="i32")],
            errors=[{"code": 6000, "name": "Broke"}],
        )
        program = generate(idl)
        assert sorted(program.files) == [
            "__init__.py",
            "accounts/__init__.py",
            "accounts/vault.py",
            "errors/__init__.py",
            "instructions/__init__.py",
            "instructions/transfer.py",
            "program_id.py",
            "types/__init__.py",
            "types/point.py",
        ]
        assert all(code.startswith(GENERATED_HEADER) for code in program.files.values())
        assert program.failures == {}

    def test_without_address_there_is_no_program_id_module(self) -> None:
        program = generate(parse_idl({"name": "demo", "instructions": [_TRANSFER]}))
        assert "program_id.py" not in program.files
        assert "program_id" not in program.files["__init__.py"]

    def test_types_are_rendered_after_their_dependencies(self) -> None:
        idl = _idl(
            types=[
                _struct("Line", start={"defined": "Point"}, end={"defined": "Point"}),
                _struct("Point", x="i32", label="string"),
            ]
        )
        program = generate(idl)
        assert "codecs.FixableStruct(" in program.files["types/line.py"]

    def test_recursive_types(self) -> None:
        idl = _idl(types=[_struct("Node", next={"defined": "Link"}), _struct("Link", node={"defined": "Node"})])
        with pytest.raises(DefinitionCycleError, match="Node -> Link -> Node"):
            generate(idl)

    def test_fail_fast(self) -> None:
        idl = _idl(types=[_struct("Num", value="f128")])
        with pytest.raises(UnsupportedTypeError):
            generate(idl)

    def test_continue_on_error(self) -> None:
        idl = _idl(types=[_struct("Num", value="f128"), _struct("Point", x="i32")])
        program = generate(idl, fail_fast=False)
        assert list(program.failures) == ["Num"]
        assert "types/point.py" in program.files
        assert "types/num.py" not in program.files

    def test_type_referencing_failed_type_fails_too(self) -> None:
        idl = _idl(types=[_struct("Num", value="f128"), _struct("Pair", a={"defined": "Num"})])
        program = generate(idl, fail_fast=False)
        assert set(program.failures) == {"Num", "Pair"}

    def test_context_overrides_metadata(self) -> None:
        other = "11111111111111111111111111111111"
        program = generate(_idl(instructions=[_TRANSFER]), RenderContext(program_address=other))
        assert f'PROGRAM_ADDRESS = "{other}"' in program.files["program_id.py"]


# ###############
# Writing
# ###############


class TestWriteProgram:
    def test_writes_all_files(self, tmp_path: Path) -> None:
        program = generate(_idl(instructions=[_TRANSFER]))
        written = write_program(program, tmp_path / "client")
        assert len(written) == len(program.files)
        assert (tmp_path / "client" / "instructions" / "transfer.py").is_file()

    def test_removes_stale_generated_modules(self, tmp_path: Path) -> None:
        output = tmp_path / "client"
        write_program(generate(_idl(types=[_struct("Old", x="u8")])), output)
        assert (output / "types" / "old.py").exists()
        write_program(generate(_idl(types=[_struct("New", x="u8")])), output)
        assert not (output / "types" / "old.py").exists()
        assert (output / "types" / "new.py").exists()

    def test_keeps_hand_written_packages(self, tmp_path: Path) -> None:
        output = tmp_path / "client"
        (output / "types").mkdir(parents=True)
        (output / "types" / "__init__.py").write_text("# mine\n", encoding="utf-8")
        (output / "types" / "helpers.py").write_text("X = 1\n", encoding="utf-8")
        write_program(generate(_idl()), output)
        assert (output / "types" / "helpers.py").exists()

    def test_unwritable_output(self, tmp_path: Path) -> None:
        blocker = tmp_path / "client"
        blocker.write_text("not a directory", encoding="utf-8")
        with pytest.raises(CompilerError, match="Cannot write generated package"):
            write_program(generate(_idl()), blocker)


# ###############
# Generated Code
# ###############


class TestGeneratedClient:
    def test_transfer_instruction(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        program = generate(_idl(instructions=[_TRANSFER]))
        transfer = _load(program, tmp_path, monkeypatch, "transfer_client", "instructions.transfer")
        sender = Pubkey.new_unique()
        recipient = Pubkey.new_unique()

        ix = transfer.create_transfer_instruction(
            transfer.TransferInstructionAccounts(from_=sender, to=recipient),
            transfer.TransferInstructionArgs(amount=1_000),
        )

        expected = hashlib.sha256(b"global:transfer").digest()[:8] + (1_000).to_bytes(8, "little")
        assert bytes(ix.data) == expected
        assert ix.program_id == Pubkey.from_string(PROGRAM)
        assert list(ix.accounts) == [
            AccountMeta(pubkey=sender, is_signer=True, is_writable=True),
            AccountMeta(pubkey=recipient, is_signer=False, is_writable=True),
            AccountMeta(pubkey=SYSTEM_PROGRAM, is_signer=False, is_writable=False),
        ]

    def test_remaining_accounts_and_program_override(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        program = generate(_idl(instructions=[_TRANSFER]))
        transfer = _load(program, tmp_path, monkeypatch, "remaining_client", "instructions.transfer")
        extra = AccountMeta(pubkey=Pubkey.new_unique(), is_signer=False, is_writable=False)
        other_program = Pubkey.new_unique()

        ix = transfer.create_transfer_instruction(
            transfer.TransferInstructionAccounts(
                from_=Pubkey.new_unique(), to=Pubkey.new_unique(), remaining_accounts=[extra]
            ),
            transfer.TransferInstructionArgs(amount=1),
            program_id=other_program,
        )

        assert ix.program_id == other_program
        assert list(ix.accounts)[-1] == extra
        assert len(ix.accounts) == 4

    def test_derived_account(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        deposit = {
            "name": "deposit",
            "accounts": [
                {"name": "owner", "isMut": False, "isSigner": True},
                {
                    "name": "vault",
                    "isMut": True,
                    "isSigner": False,
                    "pda": {
                        "seeds": [
                            {"kind": "const", "value": "vault"},
                            {"kind": "account", "path": "owner"},
                            {"kind": "arg", "path": "index"},
                        ]
                    },
                },
            ],
            "args": [{"name": "index", "type": "u16"}],
        }
        program = generate(_idl(instructions=[deposit]))
        module = _load(program, tmp_path, monkeypatch, "derived_client", "instructions.deposit")
        owner = Pubkey.new_unique()

        ix = module.create_deposit_instruction(
            module.DepositInstructionAccounts(owner=owner), module.DepositInstructionArgs(index=3)
        )

        expected, _ = Pubkey.find_program_address(
            [b"vault", bytes(owner), (3).to_bytes(2, "little")], Pubkey.from_string(PROGRAM)
        )
        assert ix.accounts[1].pubkey == expected

        supplied = Pubkey.new_unique()
        ix = module.create_deposit_instruction(
            module.DepositInstructionAccounts(owner=owner, vault=supplied), module.DepositInstructionArgs(index=3)
        )
        assert ix.accounts[1].pubkey == supplied

    def test_optional_account_defaults_to_program(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        ix_def = {
            "name": "close",
            "accounts": [{"name": "referrer", "isMut": True, "isSigner": False, "isOptional": True}],
            "args": [],
        }
        program = generate(_idl(instructions=[ix_def]))
        module = _load(program, tmp_path, monkeypatch, "optional_client", "instructions.close")

        ix = module.create_close_instruction(module.CloseInstructionAccounts())

        assert ix.accounts[0] == AccountMeta(pubkey=Pubkey.from_string(PROGRAM), is_signer=False, is_writable=False)
        assert bytes(ix.data) == hashlib.sha256(b"global:close").digest()[:8]

    def test_account_round_trip(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        idl = _idl(accounts=[_struct("Vault", owner="publicKey", amount="u64")])
        module = _load(generate(idl), tmp_path, monkeypatch, "account_client", "accounts.vault")
        vault = module.Vault(owner=Pubkey.new_unique(), amount=5)

        data, length = vault.serialize()

        assert length == module.Vault.byte_size() == 48
        assert data[:8] == hashlib.sha256(b"account:Vault").digest()[:8]
        assert module.Vault.has_correct_byte_size(data)
        assert module.Vault.deserialize(data) == (vault, 48)
        assert vault.pretty() == {"owner": str(vault.owner), "amount": 5}

    def test_account_with_custom_serializer(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "vault_serde.py").write_text(
            "def serialize(value):\n    return b'custom', 6\n",
            encoding="utf-8",
        )
        idl = _idl(accounts=[_struct("Vault", amount="u64")])
        context = RenderContext.for_idl(idl, serializers={"Vault": "vault_serde"})
        module = _load(generate(idl, context), tmp_path, monkeypatch, "serde_client", "accounts.vault")
        vault = module.Vault(amount=5)

        assert vault.serialize() == (b"custom", 6)
        # Functions the serializer module leaves out fall back to the generated codec.
        data, _ = module.vault_codec.serialize(vault)
        assert module.Vault.deserialize(data) == (vault, 16)

    def test_data_enum_round_trip(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        action = {
            "name": "Action",
            "type": {
                "kind": "enum",
                "variants": [
                    {"name": "Close"},
                    {"name": "Pay", "fields": [{"name": "amount", "type": "u64"}, {"name": "memo", "type": "string"}]},
                    {"name": "Move", "fields": ["i32", "i32"]},
                ],
            },
        }
        module = _load(generate(_idl(types=[action])), tmp_path, monkeypatch, "enum_client", "types.action")
        pay = module.ActionPay(amount=7, memo="hi")

        encoded = module.action_codec.encode(pay)

        assert encoded == b"\x01" + (7).to_bytes(8, "little") + b"\x02\x00\x00\x00hi"
        assert module.action_codec.decode(encoded) == pay
        assert module.is_action_pay(pay)
        assert not module.is_action_close(pay)
        assert module.action_codec.decode(b"\x02\x01\x00\x00\x00\x02\x00\x00\x00") == module.ActionMove(fields=(1, 2))

    def test_errors_module(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        idl = _idl(errors=[{"code": 6000, "name": "InsufficientFunds", "msg": "Not enough funds"}])
        module = _load(generate(idl), tmp_path, monkeypatch, "errors_client", "errors")

        error = module.error_from_code(6000)

        assert isinstance(error, module.InsufficientFundsError)
        assert str(error) == "InsufficientFunds (0x1770): Not enough funds"
        assert module.error_from_code(1) is None
        assert isinstance(module.error_from_name("InsufficientFunds"), module.InsufficientFundsError)
