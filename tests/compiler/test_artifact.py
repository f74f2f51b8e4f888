# Copyright 2026 idlkit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for reading, writing and enhancing IDL files."""

import json
from pathlib import Path
from typing import Any

import pytest

from idlkit.compiler.artifact import deserialize, enhance_idl, read_idl, serialize, write_idl
from idlkit.compiler.parser import IdlParseError, parse_idl
from idlkit.model.entities import Dialect, Idl

# ###############
# Test Helpers
# ###############

ADDRESS = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"

_DOCUMENT: dict[str, Any] = {
    "version": "0.2.0",
    "name": "vault",
    "instructions": [
        {
            "name": "deposit",
            "docs": ["Move funds into the vault."],
            "accounts": [
                {"name": "owner", "isMut": True, "isSigner": True},
                {"name": "referrer", "isMut": False, "isSigner": False, "isOptional": True},
                {
                    "name": "vault",
                    "isMut": True,
                    "isSigner": False,
                    "pda": {
                        "seeds": [
                            {"kind": "const", "type": "string", "value": "vault"},
                            {"kind": "account", "type": "publicKey", "path": "owner", "account": "Vault"},
                            {"kind": "arg", "type": "u64", "path": "amount"},
                        ]
                    },
                },
            ],
            "args": [{"name": "amount", "type": "u64"}],
        },
        {"name": "reset", "accounts": [], "args": [], "discriminant": {"type": "u8", "value": 7}},
    ],
    "accounts": [
        {
            "name": "Vault",
            "type": {
                "kind": "struct",
                "fields": [
                    {"name": "owner", "type": "publicKey"},
                    {"name": "balances", "type": {"bTreeMap": ["publicKey", "u64"]}},
                ],
            },
        }
    ],
    "types": [
        {
            "name": "Action",
            "type": {
                "kind": "enum",
                "variants": [
                    {"name": "Close"},
                    {"name": "Pay", "fields": [{"name": "amount", "type": {"option": "u64"}}]},
                    {"name": "Move", "fields": [{"array": ["i32", 2]}, {"tuple": ["u8", "bool"]}]},
                ],
            },
        }
    ],
    "errors": [{"code": 6000, "name": "Broke", "msg": "No funds"}, {"code": 6001, "name": "Frozen"}],
    "metadata": {"address": ADDRESS, "origin": "anchor", "binaryVersion": "0.29.0"},
}


def _idl() -> Idl:
    return parse_idl(_DOCUMENT)


# ###############
# Serialization
# ###############


class TestSerialize:
    def test_round_trip(self) -> None:
        idl = _idl()
        assert deserialize(serialize(idl)) == idl

    def test_output_is_anchor_layout(self) -> None:
        document = json.loads(serialize(_idl()))
        owner = document["instructions"][0]["accounts"][0]
        assert owner == {"name": "owner", "isMut": True, "isSigner": True}
        assert document["metadata"]["address"] == ADDRESS
        assert document["errors"][1] == {"code": 6001, "name": "Frozen"}

    def test_matches_input_document(self) -> None:
        assert json.loads(serialize(_idl())) == _DOCUMENT

    def test_ends_with_newline(self) -> None:
        assert serialize(_idl()).endswith("}\n")

    def test_invalid_text(self) -> None:
        with pytest.raises(IdlParseError):
            deserialize("not json")


# ###############
# Files
# ###############


class TestFiles:
    def test_write_creates_directories(self, tmp_path: Path) -> None:
        path = tmp_path / "idl" / "vault.json"
        write_idl(_idl(), path)
        assert read_idl(path) == _idl()

    def test_read_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(IdlParseError, match="Cannot read IDL file"):
            read_idl(tmp_path / "missing.json")


# ###############
# Enhancement
# ###############


class TestEnhanceIdl:
    def _write(self, tmp_path: Path, document: dict[str, Any]) -> Path:
        path = tmp_path / "idl.json"
        path.write_text(json.dumps(document), encoding="utf-8")
        return path

    def test_adds_metadata(self, tmp_path: Path) -> None:
        path = self._write(tmp_path, {"name": "vault", "instructions": []})
        assert enhance_idl(path, ADDRESS, Dialect.SHANK)
        document = json.loads(path.read_text(encoding="utf-8"))
        assert document["metadata"] == {"origin": "shank", "address": ADDRESS}
        assert document["instructions"] == []

    def test_unchanged_file_is_not_rewritten(self, tmp_path: Path) -> None:
        path = self._write(tmp_path, {"name": "vault", "metadata": {"origin": "anchor", "address": ADDRESS}})
        before = path.read_text(encoding="utf-8")
        assert not enhance_idl(path, ADDRESS, Dialect.ANCHOR)
        assert path.read_text(encoding="utf-8") == before

    def test_without_address_only_records_origin(self, tmp_path: Path) -> None:
        path = self._write(tmp_path, {"name": "vault", "metadata": {"binaryVersion": "0.1"}})
        assert enhance_idl(path, None, Dialect.ANCHOR)
        metadata = json.loads(path.read_text(encoding="utf-8"))["metadata"]
        assert metadata == {"binaryVersion": "0.1", "origin": "anchor"}

    def test_not_an_object(self, tmp_path: Path) -> None:
        path = tmp_path / "idl.json"
        path.write_text("[]", encoding="utf-8")
        with pytest.raises(IdlParseError, match="does not hold a JSON object"):
            enhance_idl(path, ADDRESS, Dialect.ANCHOR)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(IdlParseError, match="Cannot read IDL file"):
            enhance_idl(tmp_path / "missing.json", ADDRESS, Dialect.ANCHOR)
