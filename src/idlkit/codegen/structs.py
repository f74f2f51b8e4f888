# Copyright 2026 idlkit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Struct codec declarations and their emission as Python source.

:func:`render_struct_codec` builds a structured :class:`StructCodecDecl`;
:func:`emit_struct_codec` turns it into text.  A struct is fixable, and uses
``codecs.FixableStruct``, iff any of its fields mapped to a type with a
value-dependent size.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from idlkit.codegen.discriminator import DiscriminatorField
from idlkit.codegen.emit import INDENT, render_docs
from idlkit.codegen.errors import EmptyStructError
from idlkit.codegen.naming import python_name
from idlkit.codegen.primitives import CodecLibrary
from idlkit.codegen.type_mapper import TypeMapper
from idlkit.model.types import FieldDef

# ###############
# Public Interface
# ###############


@dataclass(frozen=True)
class CodecField:
    """One field of a struct codec."""

    name: str
    type_hint: str
    codec: str
    byte_size: int | None
    docs: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class StructCodecDecl:
    """A struct codec ready for emission.

    Attributes:
        var_name: Module variable the codec is assigned to.
        description: Name used by the codec in error messages.
        fields: Fields in wire order; the discriminator, if any, comes first.
        fixable: Whether the encoded size depends on the value.
        construct: Class the decoded fields are passed to, if any.
        discriminator: The leading discriminator, if any.
    """

    var_name: str
    description: str
    fields: list[CodecField]
    fixable: bool
    construct: str | None = None
    discriminator: DiscriminatorField | None = None

    @property
    def constructor(self) -> str:
        return "codecs.FixableStruct" if self.fixable else "codecs.Struct"

    @property
    def data_fields(self) -> list[CodecField]:
        """Return the fields that belong to the data class (no discriminator)."""
        return self.fields[1:] if self.discriminator is not None else list(self.fields)

    @property
    def byte_size(self) -> int | None:
        if self.fixable:
            return None
        return sum(f.byte_size or 0 for f in self.fields)


def map_fields(mapper: TypeMapper, fields: list[FieldDef]) -> list[CodecField]:
    """Map *fields* in declaration order."""
    result = []
    for field_def in fields:
        mapped = mapper.map(field_def.type, field_def.name)
        result.append(
            CodecField(python_name(field_def.name), mapped.type_hint, mapped.codec, mapped.byte_size, field_def.docs)
        )
    return result


def render_struct_codec(
    mapper: TypeMapper,
    fields: list[FieldDef],
    owner: str,
    var_name: str,
    *,
    discriminator: DiscriminatorField | None = None,
    construct: str | None = None,
    require_fields: bool = False,
) -> StructCodecDecl:
    """Build the codec declaration of a struct.

    The fixable flag is read from the mapper after mapping, so the mapper
    should have been cleared for this entity beforehand.

    Args:
        mapper: Mapper recording usages of the current entity.
        fields: Fields in declaration order.
        owner: Name of the struct, used as the codec description.
        var_name: Module variable to assign the codec to.
        discriminator: Leading discriminator field, if any.
        construct: Class to build from decoded fields, if any.
        require_fields: Raise instead of producing a zero-length codec.

    Raises:
        EmptyStructError: If *require_fields* is set and there is nothing to encode.
    """
    if require_fields and not fields and discriminator is None:
        raise EmptyStructError(f"{owner}: instruction data has neither a discriminator nor arguments", entity=owner)
    codec_fields: list[CodecField] = []
    if discriminator is not None:
        mapped = mapper.map(discriminator.type, discriminator.field_name)
        codec_fields.append(CodecField(discriminator.field_name, mapped.type_hint, mapped.codec, mapped.byte_size))
    codec_fields.extend(map_fields(mapper, fields))
    mapper.use_library(CodecLibrary.CORE)
    return StructCodecDecl(
        var_name=var_name,
        description=owner,
        fields=codec_fields,
        fixable=mapper.used_fixable,
        construct=construct,
        discriminator=discriminator,
    )


def struct_codec_expression(decl: StructCodecDecl, indent: str = "") -> str:
    """Return the constructor call of *decl*, with continuation lines at *indent*."""
    inner = indent + INDENT
    lines = [f"{decl.constructor}("]
    if decl.fields:
        lines.append(f"{inner}[")
        lines.extend(f'{inner}{INDENT}("{f.name}", {f.codec}),' for f in decl.fields)
        lines.append(f"{inner}],")
    else:
        lines.append(f"{inner}[],")
    lines.append(f'{inner}"{decl.description}",')
    if decl.construct is not None:
        lines.append(f"{inner}construct={decl.construct},")
    if decl.discriminator is not None:
        lines.append(f"{inner}discriminator={decl.discriminator.constant},")
    lines.append(f"{indent})")
    return "\n".join(lines)


def emit_struct_codec(decl: StructCodecDecl) -> str:
    """Return the module-level assignment of *decl*'s codec."""
    return f"{decl.var_name} = {struct_codec_expression(decl)}\n"


def emit_dataclass(
    class_name: str,
    fields: list[CodecField],
    *,
    docs: list[str] | None = None,
    decorator: str = "@dataclass",
    body: list[str] | None = None,
) -> str:
    """Return a dataclass definition with one annotated attribute per field.

    Args:
        class_name: Name of the class.
        fields: Fields to declare, in order.
        docs: Doc lines for the class docstring.
        decorator: Decorator line, e.g. ``"@dataclass(kw_only=True)"``.
        body: Extra indented source blocks (class attributes, methods).
    """
    lines = [decorator, f"class {class_name}:"]
    sections = []
    docstring = render_docs(docs or [], INDENT)
    if docstring:
        sections.append(docstring.rstrip("\n"))
    if fields:
        sections.append("\n".join(f"{INDENT}{f.name}: {f.type_hint}" for f in fields))
    sections.extend(block.rstrip("\n") for block in body or [])
    if not sections:
        sections.append(f"{INDENT}pass")
    return "\n".join(lines) + "\n" + "\n\n".join(sections) + "\n"
