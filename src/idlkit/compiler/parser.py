# Copyright 2026 idlkit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Parser for anchor and shank IDL documents.

Converts the JSON document into an :class:`~idlkit.model.entities.Idl`.
Both the legacy anchor layout (``isMut``/``isSigner`` flags, ``metadata.address``)
and the newer one (``writable``/``signer`` flags, top-level ``address``) are
accepted.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Mapping
from typing import Any

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

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############


class IdlParseError(Exception):
    """Raised when the IDL document does not have the expected shape.

    Attributes:
        path: Location of the offending value, e.g. ``instructions[0].args[1]``.
    """

    def __init__(self, message: str, path: str = "") -> None:
        super().__init__(f"{path}: {message}" if path else message)
        self.path = path


def parse_idl(source: str | Mapping[str, Any]) -> Idl:
    """Parse an IDL document into an :class:`Idl` model.

    Args:
        source: The JSON text of the IDL, or the already decoded document.

    Returns:
        The parsed program interface.

    Raises:
        IdlParseError: If the text is not JSON or the document is malformed.
    """
    if isinstance(source, str):
        try:
            document = json.loads(source)
        except json.JSONDecodeError as exc:
            raise IdlParseError(f"Invalid JSON: {exc}") from exc
    else:
        document = source
    if not isinstance(document, Mapping):
        raise IdlParseError("IDL document must be a JSON object")
    return _parse_document(document)


def parse_type(value: Any, path: str = "type") -> TypeDescriptor:
    """Parse one IDL type shape, e.g. ``"u8"`` or ``{"vec": "string"}``.

    Raises:
        IdlParseError: If the shape is not recognized.
    """
    if isinstance(value, str):
        return PrimitiveType(name=value)
    if not isinstance(value, Mapping) or len(value) != 1:
        raise IdlParseError(f"unrecognized type {value!r}", path)
    key, inner = next(iter(value.items()))
    if key == "option":
        return OptionType(inner=parse_type(inner, f"{path}.option"))
    if key == "coption":
        return COptionType(inner=parse_type(inner, f"{path}.coption"))
    if key == "vec":
        return VectorType(inner=parse_type(inner, f"{path}.vec"))
    if key == "array":
        if not isinstance(inner, list) or len(inner) != 2 or not isinstance(inner[1], int) or inner[1] < 0:
            raise IdlParseError(f"array type must be [type, length], got {inner!r}", path)
        return FixedArrayType(inner=parse_type(inner[0], f"{path}.array"), length=inner[1])
    if key in ("hashMap", "bTreeMap"):
        if not isinstance(inner, list) or len(inner) != 2:
            raise IdlParseError(f"{key} type must be [key, value], got {inner!r}", path)
        map_key = parse_type(inner[0], f"{path}.{key}[0]")
        map_value = parse_type(inner[1], f"{path}.{key}[1]")
        if key == "hashMap":
            return HashMapType(key=map_key, value=map_value)
        return BTreeMapType(key=map_key, value=map_value)
    if key == "tuple":
        if not isinstance(inner, list):
            raise IdlParseError(f"tuple type must be a list, got {inner!r}", path)
        return TupleType(items=[parse_type(item, f"{path}.tuple[{i}]") for i, item in enumerate(inner)])
    if key == "defined":
        return _parse_defined(inner, path)
    raise IdlParseError(f"unrecognized type {value!r}", path)


# ################
# Implementation
# ################

# Older anchor versions emit maps as defined types, e.g. {"defined": "HashMap<String,u64>"}.
_MAP_IN_DEFINED = re.compile(r"^(Hash|BTree)Map<\s*([^,\s]+)\s*,\s*([^>\s]+)\s*>$")

_RUST_PRIMITIVES = {"String": "string", "Pubkey": "publicKey", "publicKey": "publicKey"}


def _parse_defined(inner: Any, path: str) -> TypeDescriptor:
    name = inner.get("name") if isinstance(inner, Mapping) else inner
    if not isinstance(name, str) or not name:
        raise IdlParseError(f"defined type must name a type, got {inner!r}", path)
    match = _MAP_IN_DEFINED.match(name)
    if match is None:
        return DefinedType(name=name)
    kind, key, value = match.groups()
    logger.warning("%s: rewriting defined type '%s' as a %sMap", path, name, kind)
    key_type = PrimitiveType(name=_rust_primitive(key))
    value_type = PrimitiveType(name=_rust_primitive(value))
    if kind == "Hash":
        return HashMapType(key=key_type, value=value_type)
    return BTreeMapType(key=key_type, value=value_type)


def _rust_primitive(token: str) -> str:
    return _RUST_PRIMITIVES.get(token, token.lower())


def _require(mapping: Mapping[str, Any], key: str, path: str) -> Any:
    if key not in mapping:
        raise IdlParseError(f"missing required key '{key}'", path)
    return mapping[key]


def _require_name(mapping: Any, path: str) -> str:
    if not isinstance(mapping, Mapping):
        raise IdlParseError(f"expected an object, got {mapping!r}", path)
    name = _require(mapping, "name", path)
    if not isinstance(name, str) or not name:
        raise IdlParseError(f"'name' must be a non-empty string, got {name!r}", path)
    return name


def _list(mapping: Mapping[str, Any], key: str, path: str) -> list[Any]:
    value = mapping.get(key) or []
    if not isinstance(value, list):
        raise IdlParseError(f"'{key}' must be a list", path)
    return value


def _docs(mapping: Mapping[str, Any]) -> list[str]:
    return [str(line) for line in mapping.get("docs") or []]


def _parse_fields(items: list[Any], path: str) -> list[FieldDef]:
    fields = []
    for i, item in enumerate(items):
        item_path = f"{path}[{i}]"
        name = _require_name(item, item_path)
        field_type = parse_type(_require(item, "type", item_path), f"{item_path}.type")
        fields.append(FieldDef(name=name, type=field_type, docs=_docs(item)))
    return fields


def _parse_variant(item: Any, path: str) -> EnumVariant:
    name = _require_name(item, path)
    fields = item.get("fields") or []
    if not fields:
        return EnumVariant(name=name)
    if all(isinstance(f, Mapping) and "name" in f and "type" in f for f in fields):
        return EnumVariant(name=name, fields=_parse_fields(fields, f"{path}.fields"))
    tuple_fields = [parse_type(f, f"{path}.fields[{i}]") for i, f in enumerate(fields)]
    return EnumVariant(name=name, tuple_fields=tuple_fields)


def _parse_type_def(item: Any, path: str) -> TypeDef:
    name = _require_name(item, path)
    body = _require(item, "type", path)
    kind = body.get("kind") if isinstance(body, Mapping) else None
    if kind == "struct":
        fields = _parse_fields(_list(body, "fields", path), f"{path}.fields")
        return StructDef(name=name, fields=fields, docs=_docs(item))
    if kind == "enum":
        variants = [_parse_variant(v, f"{path}.variants[{i}]") for i, v in enumerate(_list(body, "variants", path))]
        return EnumDef(name=name, variants=variants, docs=_docs(item))
    raise IdlParseError(f"unsupported type kind {kind!r}", path)


def _parse_account(item: Any, path: str, types: dict[str, TypeDef]) -> AccountDef:
    name = _require_name(item, path)
    body = item.get("type")
    if body is None:
        # Newer anchor IDLs declare the account layout among the types.
        declared = types.get(name)
        if not isinstance(declared, StructDef):
            raise IdlParseError(f"account '{name}' has no layout", path)
        return AccountDef(name=name, fields=list(declared.fields), docs=_docs(item) or declared.docs)
    if not isinstance(body, Mapping) or body.get("kind") != "struct":
        raise IdlParseError("account type must be a struct", path)
    return AccountDef(name=name, fields=_parse_fields(_list(body, "fields", path), f"{path}.fields"), docs=_docs(item))


def _parse_seed(item: Any, path: str, args: list[FieldDef]) -> Seed:
    if not isinstance(item, Mapping):
        raise IdlParseError(f"expected a seed object, got {item!r}", path)
    kind = item.get("kind")
    declared = item.get("type")
    if kind == "const":
        value = _require(item, "value", path)
        if declared is not None:
            seed_type = parse_type(declared, f"{path}.type")
        elif isinstance(value, list):
            seed_type = FixedArrayType(inner=PrimitiveType(name="u8"), length=len(value))
        else:
            seed_type = PrimitiveType(name="string")
        return ConstSeed(type=seed_type, value=value)
    if kind in ("arg", "account"):
        seed_path = _require(item, "path", path)
        if not isinstance(seed_path, str) or not seed_path:
            raise IdlParseError(f"seed path must be a non-empty string, got {seed_path!r}", path)
        if declared is not None:
            seed_type = parse_type(declared, f"{path}.type")
        elif kind == "arg":
            arg = next((a for a in args if a.name == seed_path), None)
            seed_type = arg.type if arg is not None else PrimitiveType(name="bytes")
        else:
            seed_type = PrimitiveType(name="publicKey")
        if kind == "arg":
            return ArgSeed(type=seed_type, path=seed_path)
        return AccountSeed(type=seed_type, path=seed_path, account=item.get("account"))
    raise IdlParseError(f"unknown seed kind {kind!r}", path)


def _parse_pda(item: Any, path: str, args: list[FieldDef]) -> SeedFormula:
    if not isinstance(item, Mapping):
        raise IdlParseError(f"expected a pda object, got {item!r}", path)
    seeds = [_parse_seed(s, f"{path}.seeds[{i}]", args) for i, s in enumerate(_list(item, "seeds", path))]
    program = item.get("programId", item.get("program"))
    program_id = _parse_seed(program, f"{path}.programId", args) if program is not None else None
    return SeedFormula(seeds=seeds, program_id=program_id)


def _parse_instruction_accounts(items: list[Any], path: str, args: list[FieldDef]) -> list[InstructionAccount]:
    accounts = []
    for i, item in enumerate(items):
        item_path = f"{path}[{i}]"
        name = _require_name(item, item_path)
        if "accounts" in item:
            # Composite account groups are flattened in declaration order.
            accounts.extend(_parse_instruction_accounts(_list(item, "accounts", item_path), item_path, args))
            continue
        pda = item.get("pda")
        accounts.append(
            InstructionAccount(
                name=name,
                is_mut=bool(item.get("isMut", item.get("writable", False))),
                is_signer=bool(item.get("isSigner", item.get("signer", False))),
                is_optional=bool(item.get("isOptional", item.get("optional", False))),
                pda=_parse_pda(pda, f"{item_path}.pda", args) if pda is not None else None,
                docs=_docs(item),
            )
        )
    return accounts


def _parse_instruction(item: Any, path: str) -> Instruction:
    name = _require_name(item, path)
    args = _parse_fields(_list(item, "args", path), f"{path}.args")
    discriminant = None
    if "discriminant" in item:
        raw = item["discriminant"]
        if not isinstance(raw, Mapping):
            raise IdlParseError("discriminant must be an object", path)
        value = _require(raw, "value", f"{path}.discriminant")
        if not isinstance(value, (int, list)) or isinstance(value, bool):
            raise IdlParseError(f"discriminant value must be an integer or a byte list, got {value!r}", path)
        discriminant = Discriminant(
            type=parse_type(_require(raw, "type", f"{path}.discriminant"), f"{path}.discriminant.type"),
            value=value,
        )
    return Instruction(
        name=name,
        accounts=_parse_instruction_accounts(_list(item, "accounts", path), f"{path}.accounts", args),
        args=args,
        discriminant=discriminant,
        docs=_docs(item),
    )


def _parse_error(item: Any, path: str) -> ErrorDef:
    name = _require_name(item, path)
    code = _require(item, "code", path)
    if not isinstance(code, int) or isinstance(code, bool) or code < 0:
        raise IdlParseError(f"error code must be a non-negative integer, got {code!r}", path)
    message = item.get("msg")
    return ErrorDef(code=code, name=name, message=str(message) if message is not None else None)


def _parse_document(document: Mapping[str, Any]) -> Idl:
    metadata = document.get("metadata") or {}
    if not isinstance(metadata, Mapping):
        raise IdlParseError("'metadata' must be an object")
    name = document.get("name") or metadata.get("name")
    if not isinstance(name, str) or not name:
        raise IdlParseError("IDL must have a program name")

    types = [_parse_type_def(t, f"types[{i}]") for i, t in enumerate(_list(document, "types", ""))]
    types_by_name = {t.name: t for t in types}
    accounts = [
        _parse_account(a, f"accounts[{i}]", types_by_name) for i, a in enumerate(_list(document, "accounts", ""))
    ]
    instructions = [
        _parse_instruction(ix, f"instructions[{i}]") for i, ix in enumerate(_list(document, "instructions", ""))
    ]
    errors = [_parse_error(e, f"errors[{i}]") for i, e in enumerate(_list(document, "errors", ""))]

    origin = metadata.get("origin", "anchor")
    try:
        dialect = Dialect(origin)
    except ValueError as exc:
        raise IdlParseError(f"unknown IDL origin {origin!r}, expected 'anchor' or 'shank'", "metadata.origin") from exc
    return Idl(
        name=name,
        version=str(document.get("version") or metadata.get("version") or "0.0.0"),
        instructions=instructions,
        accounts=accounts,
        types=types,
        errors=errors,
        address=metadata.get("address") or document.get("address"),
        dialect=dialect,
        binary_version=metadata.get("binaryVersion"),
        lib_version=metadata.get("libVersion"),
    )
