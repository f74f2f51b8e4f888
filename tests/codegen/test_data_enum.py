# Copyright 2026 idlkit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for enums whose variants carry data."""

from idlkit.codegen.data_enum import TUPLE_FIELD, data_enum_exports, emit_data_enum, render_data_enum
from idlkit.codegen.registry import TypeRegistry
from idlkit.codegen.type_mapper import TypeMapper
from idlkit.compiler.parser import parse_idl
from idlkit.model.entities import EnumDef

# ###############
# Test Helpers
# ###############


def _enum(*variants: dict[str, object]) -> EnumDef:
    body = {"kind": "enum", "variants": list(variants)}
    idl = parse_idl({"name": "demo", "types": [{"name": "Action", "type": body}]})
    enum_def = idl.types[0]
    assert isinstance(enum_def, EnumDef)
    return enum_def


def _mapper() -> TypeMapper:
    return TypeMapper(TypeRegistry(), owner="Action")


# ###############
# Fixability
# ###############


class TestFixability:
    def test_equal_fixed_variants_are_fixed(self) -> None:
        enum_def = _enum(
            {"name": "Deposit", "fields": [{"name": "amount", "type": "u32"}]},
            {"name": "Withdraw", "fields": [{"name": "amount", "type": "u32"}]},
        )
        mapper = _mapper()
        decl = render_data_enum(mapper, enum_def)
        assert not decl.fixable
        assert decl.byte_size == 5
        assert not mapper.used_fixable

    def test_different_payload_sizes_are_fixable(self) -> None:
        enum_def = _enum({"name": "Close"}, {"name": "Deposit", "fields": [{"name": "amount", "type": "u64"}]})
        mapper = _mapper()
        decl = render_data_enum(mapper, enum_def)
        assert decl.fixable
        assert decl.byte_size is None
        assert mapper.used_fixable

    def test_variants_are_mapped_independently(self) -> None:
        enum_def = _enum(
            {"name": "Deposit", "fields": [{"name": "amount", "type": "u64"}]},
            {"name": "Memo", "fields": [{"name": "text", "type": "string"}]},
        )
        decl = render_data_enum(_mapper(), enum_def)
        deposit, memo = decl.variants
        assert not deposit.fixable
        assert memo.fixable
        assert decl.fixable

    def test_all_unit_variants_sharing_a_size(self) -> None:
        enum_def = _enum({"name": "A"}, {"name": "B", "fields": [{"name": "x", "type": {"array": ["u8", 0]}}]})
        decl = render_data_enum(_mapper(), enum_def)
        assert not decl.fixable
        assert decl.byte_size == 1


# ###############
# Declarations
# ###############


def test_tuple_variant() -> None:
    enum_def = _enum({"name": "Move", "fields": ["i32", "i32"]})
    decl = render_data_enum(_mapper(), enum_def)
    (move,) = decl.variants
    assert move.is_tuple
    assert [f.name for f in move.fields] == [TUPLE_FIELD]
    assert move.fields[0].type_hint == "tuple[int, int]"
    assert move.byte_size == 8


def test_names() -> None:
    enum_def = _enum({"name": "transferAll"}, {"name": "Close"})
    decl = render_data_enum(_mapper(), enum_def)
    assert [v.class_name for v in decl.variants] == ["ActionTransferAll", "ActionClose"]
    assert [v.guard_name for v in decl.variants] == ["is_action_transfer_all", "is_action_close"]
    assert decl.var_name == "action_codec"
    assert data_enum_exports(decl) == [
        "Action",
        "ActionTransferAll",
        "is_action_transfer_all",
        "ActionClose",
        "is_action_close",
        "action_codec",
    ]


def test_emitted_source() -> None:
    enum_def = _enum({"name": "Close"}, {"name": "Deposit", "fields": [{"name": "amount", "type": "u64"}]})
    blocks = emit_data_enum(render_data_enum(_mapper(), enum_def))
    text = "\n\n".join(blocks)
    assert '    __kind__ = "Close"' in text
    assert "Action = ActionClose | ActionDeposit\n" in text
    assert "def is_action_deposit(value: Action) -> TypeGuard[ActionDeposit]:" in text
    assert text.count("codecs.Struct(") == 2
    assert "action_codec = codecs.data_enum(" in text
    compile(text, "<data enum>", "exec")
