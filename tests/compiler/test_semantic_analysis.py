# Copyright 2026 idlkit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Unit tests for the idlkit semantic analysis module."""

from typing import Any

from idlkit.compiler.parser import parse_idl
from idlkit.compiler.semantic_analysis import SemanticError, analyze

# ###############
# Test Helpers
# ###############


def _analyze(type_aliases: dict[str, str] | None = None, **document: Any) -> list[SemanticError]:
    """Parse the document and run semantic analysis."""
    idl = parse_idl({"name": "demo", **document})
    return analyze(idl, type_aliases=type_aliases)


def _messages(errors: list[SemanticError]) -> list[str]:
    return [e.message for e in errors]


def _struct(name: str, *fields: tuple[str, Any]) -> dict[str, Any]:
    return {"name": name, "type": {"kind": "struct", "fields": [{"name": n, "type": t} for n, t in fields]}}


def _instruction(name: str, accounts: list[str] | None = None, args: list[tuple[str, Any]] | None = None) -> dict:
    return {
        "name": name,
        "accounts": [{"name": a, "isMut": False, "isSigner": False} for a in accounts or []],
        "args": [{"name": n, "type": t} for n, t in args or []],
    }


# ###############
# Valid Documents
# ###############


def test_empty_idl_has_no_errors() -> None:
    assert _analyze() == []


def test_valid_document() -> None:
    errors = _analyze(
        types=[_struct("Point", ("x", "i32"), ("y", "i32"))],
        accounts=[_struct("Vault", ("owner", "publicKey"), ("origin", {"defined": "Point"}))],
        instructions=[_instruction("deposit", ["vault", "owner"], [("amount", "u64")])],
        errors=[{"code": 6000, "name": "Broke"}, {"code": 6001, "name": "Frozen"}],
    )
    assert errors == []


def test_reference_to_account_is_known() -> None:
    errors = _analyze(
        accounts=[_struct("Vault", ("amount", "u64"))],
        instructions=[_instruction("restore", args=[("snapshot", {"defined": "Vault"})])],
    )
    assert errors == []


def test_account_redeclared_as_type_is_not_a_duplicate() -> None:
    errors = _analyze(types=[_struct("Vault", ("amount", "u64"))], accounts=[{"name": "Vault"}])
    assert errors == []


# ###############
# Duplicates
# ###############


class TestDuplicates:
    def test_type_names_are_case_insensitive(self) -> None:
        errors = _analyze(types=[_struct("Point", ("x", "u8")), _struct("point", ("x", "u8"))])
        assert _messages(errors) == ["Duplicate type name 'point' (names are compared case-insensitively)"]

    def test_account_names(self) -> None:
        errors = _analyze(accounts=[_struct("Vault", ("a", "u8")), _struct("vault", ("a", "u8"))])
        assert _messages(errors) == ["Duplicate account name 'vault' (names are compared case-insensitively)"]

    def test_field_names_compared_as_python_names(self) -> None:
        errors = _analyze(types=[_struct("Point", ("posX", "u8"), ("pos_x", "u8"))])
        assert _messages(errors) == ["Duplicate field name 'pos_x' in type 'Point'"]

    def test_reported_once(self) -> None:
        errors = _analyze(types=[_struct("Point", ("x", "u8"), ("x", "u8"), ("x", "u8"))])
        assert len(errors) == 1

    def test_variant_names(self) -> None:
        enum = {"name": "Side", "type": {"kind": "enum", "variants": [{"name": "Buy"}, {"name": "Buy"}]}}
        assert _messages(_analyze(types=[enum])) == ["Duplicate variant name 'Buy' in type 'Side'"]

    def test_instruction_names(self) -> None:
        errors = _analyze(instructions=[_instruction("deposit"), _instruction("deposit")])
        assert _messages(errors) == ["Duplicate instruction name 'deposit'"]

    def test_instruction_accounts(self) -> None:
        errors = _analyze(instructions=[_instruction("deposit", ["tokenProgram", "token_program"])])
        assert _messages(errors) == ["Duplicate account 'token_program' in instruction 'deposit'"]

    def test_account_named_like_remaining_accounts(self) -> None:
        errors = _analyze(instructions=[_instruction("deposit", ["owner", "remainingAccounts"])])
        assert _messages(errors) == [
            "Account 'remainingAccounts' of instruction 'deposit' clashes with the reserved "
            "'remaining_accounts' field."
        ]

    def test_error_codes_and_names(self) -> None:
        errors = _analyze(errors=[{"code": 1, "name": "A"}, {"code": 1, "name": "A"}])
        assert _messages(errors) == ["Duplicate error code 1", "Duplicate error name 'A'"]


# ###############
# Type References
# ###############


class TestTypeReferences:
    def test_undefined_type(self) -> None:
        errors = _analyze(types=[_struct("Line", ("start", {"defined": "Point"}))])
        assert _messages(errors) == ["Undefined type 'Point' in field 'start' of type 'Line'"]

    def test_undefined_type_inside_container(self) -> None:
        errors = _analyze(instructions=[_instruction("draw", args=[("points", {"vec": {"defined": "Point"}})])])
        assert _messages(errors) == ["Undefined type 'Point' in field 'points' of instruction 'draw'"]

    def test_unsupported_primitive(self) -> None:
        errors = _analyze(types=[_struct("Num", ("value", "f128"))])
        assert _messages(errors) == ["Unsupported type 'f128' in field 'value' of type 'Num'"]

    def test_variant_fields_are_checked(self) -> None:
        enum = {
            "name": "Action",
            "type": {"kind": "enum", "variants": [{"name": "Move", "fields": ["i32", {"defined": "Missing"}]}]},
        }
        errors = _analyze(types=[enum])
        assert _messages(errors) == ["Undefined type 'Missing' in variant 'Action.Move' field 1"]

    def test_alias_resolves_reference(self) -> None:
        errors = _analyze(
            type_aliases={"UnixTimestamp": "i64"},
            types=[_struct("Clock", ("now", {"defined": "UnixTimestamp"}))],
        )
        assert errors == []

    def test_alias_to_unsupported_type(self) -> None:
        errors = _analyze(
            type_aliases={"UnixTimestamp": "time"},
            types=[_struct("Clock", ("now", {"defined": "UnixTimestamp"}))],
        )
        assert _messages(errors) == [
            "Alias 'UnixTimestamp' in field 'now' of type 'Clock' points to unsupported type 'time'"
        ]

    def test_bare_token_naming_a_type_is_accepted(self) -> None:
        errors = _analyze(types=[_struct("Point", ("x", "u8")), _struct("Line", ("start", "Point"))])
        assert errors == []
