# Copyright 2026 idlkit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Rendering of user-defined types into ``types/<name>.py`` modules."""

from __future__ import annotations

from dataclasses import dataclass, field

from idlkit.codegen.context import RenderContext
from idlkit.codegen.data_enum import data_enum_exports, emit_data_enum, render_data_enum
from idlkit.codegen.emit import INDENT, ImportSet, render_docs, render_module
from idlkit.codegen.naming import codec_name, member_name, pascal_case, snake_case
from idlkit.codegen.registry import TYPES_PACKAGE, TypeRegistry
from idlkit.codegen.structs import emit_dataclass, emit_struct_codec, render_struct_codec
from idlkit.codegen.type_mapper import TypeMapper
from idlkit.model.entities import EnumDef, StructDef, TypeDef

# ###############
# Public Interface
# ###############


@dataclass(frozen=True)
class RenderedModule:
    """Source of one generated module.

    Attributes:
        name: Name of the rendered entity as declared.
        module: Python module name (without package or suffix).
        code: Module source.
        exports: Public names the module defines.
        fixable: Whether the entity's encoded size depends on the value.
        byte_size: Encoded size when fixed.
    """

    name: str
    module: str
    code: str
    exports: list[str] = field(default_factory=list)
    fixable: bool = False
    byte_size: int | None = None


def render_type(type_def: TypeDef, registry: TypeRegistry, context: RenderContext | None = None) -> RenderedModule:
    """Render a struct or enum definition.

    Raises:
        GenerationError: If a field type cannot be mapped.
    """
    mapper = TypeMapper(registry, context, owner=type_def.name)
    mapper.clear_usages()
    if isinstance(type_def, EnumDef) and type_def.is_scalar:
        return _render_scalar_enum(mapper, type_def)
    if isinstance(type_def, EnumDef):
        return _render_data_enum(mapper, type_def)
    return _render_struct(mapper, type_def)


# ################
# Implementation
# ################


def _render_struct(mapper: TypeMapper, struct_def: StructDef) -> RenderedModule:
    class_name = pascal_case(struct_def.name)
    decl = render_struct_codec(
        mapper,
        struct_def.fields,
        class_name,
        codec_name(struct_def.name),
        construct=class_name,
    )
    imports = ImportSet()
    imports.add("dataclasses", "dataclass")
    imports.add_libraries(mapper.accumulator.libraries)
    imports.add_defined(mapper.accumulator.defined.values(), TYPES_PACKAGE)
    exports = [class_name, decl.var_name]
    blocks = [emit_dataclass(class_name, decl.data_fields, docs=struct_def.docs), emit_struct_codec(decl)]
    code = render_module(f"The ``{struct_def.name}`` struct and its codec.", imports, exports, blocks)
    return RenderedModule(struct_def.name, snake_case(struct_def.name), code, exports, decl.fixable, decl.byte_size)


def _render_scalar_enum(mapper: TypeMapper, enum_def: EnumDef) -> RenderedModule:
    mapped = mapper.map_scalar_enum(enum_def)
    imports = ImportSet()
    imports.add("enum", "IntEnum")
    imports.add_libraries(mapper.accumulator.libraries)
    blocks = []
    for class_name, variants in mapper.accumulator.scalar_enums.items():
        lines = [f"class {class_name}(IntEnum):"]
        docstring = render_docs(enum_def.docs, INDENT)
        if docstring:
            lines.append(docstring)
        lines.extend(f"{INDENT}{member_name(variant)} = {index}" for index, variant in enumerate(variants))
        if not variants:
            lines.append(f"{INDENT}pass")
        blocks.append("\n".join(lines) + "\n")
    var_name = codec_name(enum_def.name)
    blocks.append(f"{var_name} = {mapped.codec}\n")
    exports = [mapped.type_hint, var_name]
    code = render_module(f"The ``{enum_def.name}`` enum and its codec.", imports, exports, blocks)
    return RenderedModule(enum_def.name, snake_case(enum_def.name), code, exports, False, 1)


def _render_data_enum(mapper: TypeMapper, enum_def: EnumDef) -> RenderedModule:
    decl = render_data_enum(mapper, enum_def)
    imports = ImportSet()
    imports.add("dataclasses", "dataclass")
    imports.add("typing", "TypeGuard")
    imports.add_libraries(mapper.accumulator.libraries)
    imports.add_defined(mapper.accumulator.defined.values(), TYPES_PACKAGE)
    exports = data_enum_exports(decl)
    code = render_module(
        f"The ``{enum_def.name}`` data enum, its variants and its codec.",
        imports,
        exports,
        emit_data_enum(decl),
    )
    return RenderedModule(enum_def.name, snake_case(enum_def.name), code, exports, decl.fixable, decl.byte_size)
