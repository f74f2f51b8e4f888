# Copyright 2026 idlkit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Rendering of program accounts into ``accounts/<name>.py`` modules.

Each account becomes a dataclass with helpers to decode it from raw account
data, encode it back, and report its size.  Anchor accounts start with an
8-byte discriminator, which the codec writes and checks by itself.
"""

from __future__ import annotations

from idlkit.codegen.context import RenderContext
from idlkit.codegen.discriminator import account_discriminator
from idlkit.codegen.emit import INDENT, ImportSet, render_index, render_module
from idlkit.codegen.naming import codec_name, pascal_case, snake_case
from idlkit.codegen.registry import ACCOUNTS_PACKAGE, TypeRegistry
from idlkit.codegen.render_type import RenderedModule
from idlkit.codegen.structs import CodecField, StructCodecDecl, emit_dataclass, emit_struct_codec, render_struct_codec
from idlkit.codegen.type_mapper import TypeMapper
from idlkit.model.entities import AccountDef

# ###############
# Public Interface
# ###############


def render_account(account: AccountDef, registry: TypeRegistry, context: RenderContext | None = None) -> RenderedModule:
    """Render the module of one account.

    Raises:
        GenerationError: If a field type cannot be mapped.
    """
    context = context or RenderContext()
    mapper = TypeMapper(registry, context, owner=account.name)
    mapper.clear_usages()
    class_name = pascal_case(account.name)
    discriminator = account_discriminator(account, context.dialect)
    decl = render_struct_codec(
        mapper,
        account.fields,
        class_name,
        codec_name(account.name),
        discriminator=discriminator,
        construct=class_name,
    )

    imports = ImportSet()
    imports.add("dataclasses", "dataclass")
    imports.add("typing", "Any")
    imports.add_libraries(mapper.accumulator.libraries)
    imports.add_defined(mapper.accumulator.defined.values(), ACCOUNTS_PACKAGE)

    blocks = []
    exports = [class_name, decl.var_name]
    if discriminator is not None:
        blocks.append(f"{discriminator.constant} = {discriminator.literal}\n")
        exports.insert(0, discriminator.constant)
    serializer = context.serializers.get(account.name)
    methods = _methods(class_name, decl, custom=serializer is not None)
    blocks.append(emit_dataclass(class_name, decl.data_fields, docs=account.docs, body=methods))
    blocks.append(emit_struct_codec(decl))
    if serializer is not None:
        imports.add("importlib", "import_module")
        blocks.append(_custom_serializer(serializer, decl.var_name))
    code = render_module(f"The ``{account.name}`` account, its discriminator and its codec.", imports, exports, blocks)
    return RenderedModule(account.name, snake_case(account.name), code, exports, decl.fixable, decl.byte_size)


def render_account_index(accounts: list[RenderedModule]) -> str:
    """Render ``accounts/__init__.py`` with the ``ACCOUNT_PROVIDERS`` lookup."""
    lines = ["ACCOUNT_PROVIDERS = {"]
    lines.extend(f'{INDENT}"{module.name}": {pascal_case(module.name)},' for module in accounts)
    lines.append("}")
    return render_index([module.module for module in accounts], "\n".join(lines) + "\n")


# ################
# Implementation
# ################


def _methods(class_name: str, decl: StructCodecDecl, *, custom: bool = False) -> list[str]:
    codec = decl.var_name
    serialize = "_serialize" if custom else f"{codec}.serialize"
    deserialize = "_deserialize" if custom else f"{codec}.deserialize"
    methods = [
        f"{INDENT}@classmethod\n"
        f"{INDENT}def from_account_info(cls, info: Any, offset: int = 0) -> tuple[{class_name}, int]:\n"
        f'{INDENT * 2}"""Decode the account from an object with a ``data`` attribute, e.g. a solders ``Account``."""\n'
        f"{INDENT * 2}return cls.deserialize(bytes(info.data), offset)\n",
        f"{INDENT}@classmethod\n"
        f"{INDENT}def deserialize(cls, data: bytes, offset: int = 0) -> tuple[{class_name}, int]:\n"
        f'{INDENT * 2}"""Decode the account at *offset*; return it with the offset past it."""\n'
        f"{INDENT * 2}return {deserialize}(data, offset)\n",
        f"{INDENT}def serialize(self) -> tuple[bytes, int]:\n"
        f'{INDENT * 2}"""Encode the account, discriminator included."""\n'
        f"{INDENT * 2}return {serialize}(self)\n",
    ]
    if decl.fixable:
        methods.append(
            f"{INDENT}@classmethod\n"
            f"{INDENT}def byte_size(cls, args: {class_name}) -> int:\n"
            f'{INDENT * 2}"""Return the encoded size of *args*."""\n'
            f"{INDENT * 2}return {codec}.size_of(args)\n"
        )
    else:
        methods.append(
            f"{INDENT}@classmethod\n"
            f"{INDENT}def byte_size(cls) -> int:\n"
            f'{INDENT * 2}"""Return the encoded size of the account."""\n'
            f"{INDENT * 2}return {codec}.byte_size\n"
        )
        methods.append(
            f"{INDENT}@classmethod\n"
            f"{INDENT}def has_correct_byte_size(cls, data: bytes, offset: int = 0) -> bool:\n"
            f"{INDENT * 2}return len(data) - offset == {codec}.byte_size\n"
        )
    methods.append(_pretty(decl.data_fields))
    return methods


def _custom_serializer(module: str, codec: str) -> str:
    """Bind the functions of a hand-written serializer module, falling back to *codec*."""
    return (
        f'_custom_serializer = import_module("{module}")\n'
        f'_serialize = getattr(_custom_serializer, "serialize", {codec}.serialize)\n'
        f'_deserialize = getattr(_custom_serializer, "deserialize", {codec}.deserialize)\n'
    )


def _pretty(fields: list[CodecField]) -> str:
    lines = [
        f"{INDENT}def pretty(self) -> dict[str, Any]:",
        f'{INDENT * 2}"""Return the fields as a dict, with addresses in base58."""',
    ]
    if not fields:
        lines.append(f"{INDENT * 2}return {{}}")
        return "\n".join(lines) + "\n"
    lines.append(f"{INDENT * 2}return {{")
    for f in fields:
        value = f"str(self.{f.name})" if f.type_hint == "Pubkey" else f"self.{f.name}"
        lines.append(f'{INDENT * 3}"{f.name}": {value},')
    lines.append(f"{INDENT * 2}}}")
    return "\n".join(lines) + "\n"
