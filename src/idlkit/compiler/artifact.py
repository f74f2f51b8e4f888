# Copyright 2026 idlkit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Reading, writing and enhancing IDL files.

:func:`serialize` writes the anchor layout (``isMut``/``isSigner`` flags,
``metadata.address``) so that the output can be read back by
:func:`deserialize` as well as by other anchor tooling.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from idlkit.compiler.parser import IdlParseError, parse_idl
from idlkit.model.entities import (
    AccountDef,
    AccountSeed,
    ConstSeed,
    Dialect,
    EnumDef,
    ErrorDef,
    Idl,
    Instruction,
    InstructionAccount,
    Seed,
    SeedFormula,
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

# ###############
# Public Interface
# ###############


def serialize(idl: Idl) -> str:
    """Serialize an Idl to indented anchor-style JSON."""
    return json.dumps(_idl_to_dict(idl), indent=2) + "\n"


def deserialize(data: str) -> Idl:
    """Deserialize an Idl from JSON text.

    Raises:
        IdlParseError: If the text is not a valid IDL document.
    """
    return parse_idl(data)


def write_idl(idl: Idl, path: Path) -> None:
    """Write *idl* to *path*, creating parent directories as needed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(serialize(idl), encoding="utf-8")


def read_idl(path: Path) -> Idl:
    """Read and parse the IDL file at *path*.

    Raises:
        IdlParseError: If the file cannot be read or is not a valid IDL.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise IdlParseError(f"Cannot read IDL file '{path}': {exc}") from exc
    return deserialize(text)


def enhance_idl(path: Path, program_address: str | None, dialect: Dialect) -> bool:
    """Record the program address and the IDL origin in the file's metadata.

    Only the ``metadata`` object is touched; the rest of the document is kept
    as written by the IDL generator.

    Returns:
        True if the file was changed.

    Raises:
        IdlParseError: If the file cannot be read or is not a JSON object.
    """
    try:
        document = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise IdlParseError(f"Cannot read IDL file '{path}': {exc}") from exc
    if not isinstance(document, dict):
        raise IdlParseError(f"IDL file '{path}' does not hold a JSON object")
    metadata = document.setdefault("metadata", {})
    wanted = {"origin": dialect.value}
    if program_address is not None:
        wanted["address"] = program_address
    if all(metadata.get(key) == value for key, value in wanted.items()):
        return False
    metadata.update(wanted)
    path.write_text(json.dumps(document, indent=2) + "\n", encoding="utf-8")
    return True


# ################
# Implementation
# ################


def _idl_to_dict(idl: Idl) -> dict[str, Any]:
    metadata: dict[str, Any] = {"origin": idl.dialect.value}
    if idl.address is not None:
        metadata["address"] = idl.address
    if idl.binary_version is not None:
        metadata["binaryVersion"] = idl.binary_version
    if idl.lib_version is not None:
        metadata["libVersion"] = idl.lib_version
    return {
        "version": idl.version,
        "name": idl.name,
        "instructions": [_instruction_to_dict(ix) for ix in idl.instructions],
        "accounts": [_account_to_dict(a) for a in idl.accounts],
        "types": [_type_def_to_dict(t) for t in idl.types],
        "errors": [_error_to_dict(e) for e in idl.errors],
        "metadata": metadata,
    }


def _type_to_json(descriptor: TypeDescriptor) -> Any:
    if isinstance(descriptor, PrimitiveType):
        return descriptor.name
    if isinstance(descriptor, OptionType):
        return {"option": _type_to_json(descriptor.inner)}
    if isinstance(descriptor, COptionType):
        return {"coption": _type_to_json(descriptor.inner)}
    if isinstance(descriptor, VectorType):
        return {"vec": _type_to_json(descriptor.inner)}
    if isinstance(descriptor, FixedArrayType):
        return {"array": [_type_to_json(descriptor.inner), descriptor.length]}
    if isinstance(descriptor, HashMapType):
        return {"hashMap": [_type_to_json(descriptor.key), _type_to_json(descriptor.value)]}
    if isinstance(descriptor, BTreeMapType):
        return {"bTreeMap": [_type_to_json(descriptor.key), _type_to_json(descriptor.value)]}
    if isinstance(descriptor, TupleType):
        return {"tuple": [_type_to_json(item) for item in descriptor.items]}
    assert isinstance(descriptor, DefinedType)
    return {"defined": descriptor.name}


def _with_docs(d: dict[str, Any], docs: list[str]) -> dict[str, Any]:
    if docs:
        d["docs"] = list(docs)
    return d


def _field_to_dict(f: FieldDef) -> dict[str, Any]:
    return _with_docs({"name": f.name, "type": _type_to_json(f.type)}, f.docs)


def _type_def_to_dict(type_def: TypeDef) -> dict[str, Any]:
    if isinstance(type_def, EnumDef):
        variants = []
        for variant in type_def.variants:
            v: dict[str, Any] = {"name": variant.name}
            if variant.fields:
                v["fields"] = [_field_to_dict(f) for f in variant.fields]
            elif variant.tuple_fields:
                v["fields"] = [_type_to_json(t) for t in variant.tuple_fields]
            variants.append(v)
        body: dict[str, Any] = {"kind": "enum", "variants": variants}
    else:
        body = {"kind": "struct", "fields": [_field_to_dict(f) for f in type_def.fields]}
    return _with_docs({"name": type_def.name, "type": body}, type_def.docs)


def _account_to_dict(account: AccountDef) -> dict[str, Any]:
    body = {"kind": "struct", "fields": [_field_to_dict(f) for f in account.fields]}
    return _with_docs({"name": account.name, "type": body}, account.docs)


def _seed_to_dict(seed: Seed) -> dict[str, Any]:
    d: dict[str, Any] = {"kind": seed.kind, "type": _type_to_json(seed.type)}
    if isinstance(seed, ConstSeed):
        d["value"] = seed.value
        return d
    d["path"] = seed.path
    if isinstance(seed, AccountSeed) and seed.account is not None:
        d["account"] = seed.account
    return d


def _pda_to_dict(pda: SeedFormula) -> dict[str, Any]:
    d: dict[str, Any] = {"seeds": [_seed_to_dict(s) for s in pda.seeds]}
    if pda.program_id is not None:
        d["programId"] = _seed_to_dict(pda.program_id)
    return d


def _instruction_account_to_dict(account: InstructionAccount) -> dict[str, Any]:
    d: dict[str, Any] = {"name": account.name, "isMut": account.is_mut, "isSigner": account.is_signer}
    if account.is_optional:
        d["isOptional"] = True
    if account.pda is not None:
        d["pda"] = _pda_to_dict(account.pda)
    return _with_docs(d, account.docs)


def _instruction_to_dict(ix: Instruction) -> dict[str, Any]:
    d: dict[str, Any] = {
        "name": ix.name,
        "accounts": [_instruction_account_to_dict(a) for a in ix.accounts],
        "args": [_field_to_dict(f) for f in ix.args],
    }
    if ix.discriminant is not None:
        d["discriminant"] = {"type": _type_to_json(ix.discriminant.type), "value": ix.discriminant.value}
    return _with_docs(d, ix.docs)


def _error_to_dict(error: ErrorDef) -> dict[str, Any]:
    d: dict[str, Any] = {"code": error.code, "name": error.name}
    if error.message is not None:
        d["msg"] = error.message
    return d
