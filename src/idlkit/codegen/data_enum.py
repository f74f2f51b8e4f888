# Copyright 2026 idlkit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Rendering of enums whose variants carry data.

Each variant becomes a dataclass with a hidden ``__kind__`` attribute naming
the variant, the enum becomes the union of those classes, and every variant
gets an ``is_<enum>_<variant>`` type guard.  Variants are mapped on forked
mappers so that each variant's codec is fixed or fixable on its own merits;
the enum as a whole is fixable if any variant is, or if the variants encode
to different lengths.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from idlkit.codegen.emit import INDENT, render_docs
from idlkit.codegen.naming import codec_name, pascal_case, snake_case
from idlkit.codegen.primitives import CodecLibrary
from idlkit.codegen.structs import (
    CodecField,
    StructCodecDecl,
    emit_dataclass,
    render_struct_codec,
    struct_codec_expression,
)
from idlkit.codegen.type_mapper import TypeMapper
from idlkit.model.entities import EnumDef, EnumVariant
from idlkit.model.types import TupleType

# ###############
# Public Interface
# ###############

TUPLE_FIELD = "fields"


@dataclass(frozen=True)
class VariantDecl:
    """One rendered variant.

    Attributes:
        name: Variant name as declared, stored in ``__kind__``.
        class_name: Name of the variant dataclass.
        guard_name: Name of the type guard function.
        is_tuple: Whether the payload is a positional ``fields`` tuple.
        codec: Payload codec of the variant (without the variant index).
    """

    name: str
    class_name: str
    guard_name: str
    is_tuple: bool
    codec: StructCodecDecl
    docs: list[str] = field(default_factory=list)

    @property
    def fields(self) -> list[CodecField]:
        return self.codec.fields

    @property
    def fixable(self) -> bool:
        return self.codec.fixable

    @property
    def byte_size(self) -> int | None:
        return self.codec.byte_size


@dataclass(frozen=True)
class DataEnumDecl:
    """A rendered data enum, ready for emission."""

    name: str
    class_name: str
    var_name: str
    variants: list[VariantDecl]
    fixable: bool
    byte_size: int | None
    docs: list[str] = field(default_factory=list)


def render_data_enum(mapper: TypeMapper, enum_def: EnumDef) -> DataEnumDecl:
    """Build the declaration of a data enum.

    Every variant is mapped on ``mapper.fork()`` and merged back afterwards.
    If the enum turns out fixable, *mapper* is marked fixable too.
    """
    enum_class = pascal_case(enum_def.name)
    variants = []
    for variant in enum_def.variants:
        child = mapper.fork()
        variants.append(_render_variant(child, enum_def, enum_class, variant))
        mapper.merge(child)

    sizes = {variant.byte_size for variant in variants}
    fixable = any(variant.fixable for variant in variants) or len(sizes) != 1
    if fixable:
        mapper.mark_fixable()
    mapper.use_library(CodecLibrary.CORE)
    byte_size = None
    if not fixable:
        payload = sizes.pop()
        byte_size = None if payload is None else 1 + payload
    return DataEnumDecl(
        name=enum_def.name,
        class_name=enum_class,
        var_name=codec_name(enum_def.name),
        variants=variants,
        fixable=fixable,
        byte_size=byte_size,
        docs=enum_def.docs,
    )


def emit_data_enum(decl: DataEnumDecl) -> list[str]:
    """Return the top-level source blocks of a data enum."""
    blocks = []
    for variant in decl.variants:
        kind = f'{INDENT}__kind__ = "{variant.name}"'
        blocks.append(emit_dataclass(variant.class_name, variant.fields, docs=variant.docs, body=[kind]))

    union = " | ".join(variant.class_name for variant in decl.variants) or "object"
    docstring = render_docs(decl.docs)
    blocks.append(f"{decl.class_name} = {union}\n" + docstring)

    for variant in decl.variants:
        blocks.append(
            f"def {variant.guard_name}(value: {decl.class_name}) -> TypeGuard[{variant.class_name}]:\n"
            f'{INDENT}return value.__kind__ == "{variant.name}"\n'
        )

    lines = [f"{decl.var_name} = codecs.data_enum(", f"{INDENT}["]
    for variant in decl.variants:
        indent = INDENT * 3
        lines.append(f"{INDENT * 2}(")
        lines.append(f'{indent}"{variant.name}",')
        lines.append(f"{indent}{variant.class_name},")
        lines.append(f"{indent}{struct_codec_expression(variant.codec, indent)},")
        lines.append(f"{INDENT * 2}),")
    lines.append(f"{INDENT}]")
    lines.append(")")
    blocks.append("\n".join(lines) + "\n")
    return blocks


def data_enum_exports(decl: DataEnumDecl) -> list[str]:
    """Return the public names a data enum module defines."""
    names = [decl.class_name]
    for variant in decl.variants:
        names.extend([variant.class_name, variant.guard_name])
    names.append(decl.var_name)
    return names


# ################
# Implementation
# ################


def _render_variant(child: TypeMapper, enum_def: EnumDef, enum_class: str, variant: EnumVariant) -> VariantDecl:
    class_name = f"{enum_class}{pascal_case(variant.name)}"
    guard_name = f"is_{snake_case(enum_def.name)}_{snake_case(variant.name)}"
    if variant.is_tuple:
        mapped = child.map(TupleType(items=variant.tuple_fields), variant.name)
        child.use_library(CodecLibrary.CORE)
        codec = StructCodecDecl(
            var_name=class_name,
            description=class_name,
            fields=[CodecField(TUPLE_FIELD, mapped.type_hint, mapped.codec, mapped.byte_size)],
            fixable=child.used_fixable,
            construct=class_name,
        )
    else:
        codec = render_struct_codec(child, variant.fields, class_name, class_name, construct=class_name)
    return VariantDecl(variant.name, class_name, guard_name, variant.is_tuple, codec)
