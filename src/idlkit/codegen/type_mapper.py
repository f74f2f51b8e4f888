# Copyright 2026 idlkit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Recursive mapping of type descriptors to Python types and codec expressions.

A :class:`TypeMapper` maps one top-level entity at a time.  While mapping, it
records in its :class:`UsageAccumulator` which runtime libraries were needed,
which defined types were touched (so the emitter can import them), which
scalar enums were seen, and whether any mapped type has a value-dependent
size.  That last flag decides between a fixed and a fixable struct codec.

Renderers that need an independent view of part of an entity, such as one
variant of a data enum, :meth:`~TypeMapper.fork` the mapper, map on the child
and :meth:`~TypeMapper.merge` it back.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import assert_never

from idlkit.codegen import primitives
from idlkit.codegen.context import RenderContext
from idlkit.codegen.errors import (
    TypeOrderError,
    UnknownTypeError,
    UnsupportedNestingError,
    UnsupportedTypeError,
    located,
)
from idlkit.codegen.naming import pascal_case
from idlkit.codegen.primitives import CodecLibrary
from idlkit.codegen.registry import DefinedKind, DefinedTypeInfo, TypeRegistry
from idlkit.model.entities import EnumDef
from idlkit.model.types import (
    BTreeMapType,
    COptionType,
    DefinedType,
    FixedArrayType,
    HashMapType,
    OptionType,
    PrimitiveType,
    TupleType,
    TypeDescriptor,
    VectorType,
    describe,
)

# ###############
# Public Interface
# ###############


@dataclass(frozen=True)
class MappedType:
    """The Python view of one type descriptor.

    Attributes:
        type_hint: Structural type, e.g. ``"list[int]"``.
        codec: Codec expression, e.g. ``"codecs.array(codecs.u8)"``.
        byte_size: Encoded size, or ``None`` when it depends on the value.
    """

    type_hint: str
    codec: str
    byte_size: int | None

    @property
    def fixable(self) -> bool:
        return self.byte_size is None


@dataclass
class UsageAccumulator:
    """Everything one entity's mapping touched."""

    libraries: set[CodecLibrary] = field(default_factory=set)
    scalar_enums: dict[str, list[str]] = field(default_factory=dict)
    defined: dict[str, DefinedTypeInfo] = field(default_factory=dict)
    used_fixable: bool = False

    def fork(self) -> UsageAccumulator:
        """Return an independent child seeded with this accumulator's usages.

        The child starts with ``used_fixable`` unset so that its flag reflects
        only what is mapped on the child.
        """
        return UsageAccumulator(
            libraries=set(self.libraries),
            scalar_enums=dict(self.scalar_enums),
            defined=dict(self.defined),
        )

    def merge(self, child: UsageAccumulator) -> None:
        """Fold a forked child's usages back into this accumulator."""
        self.libraries |= child.libraries
        self.scalar_enums.update(child.scalar_enums)
        self.defined.update(child.defined)
        self.used_fixable = self.used_fixable or child.used_fixable

    def clear(self) -> None:
        self.libraries.clear()
        self.scalar_enums.clear()
        self.defined.clear()
        self.used_fixable = False


class TypeMapper:
    """Maps type descriptors of one entity against a program registry.

    Args:
        registry: Defined types and accounts of the program.
        context: Rendering settings (type aliases in particular).
        owner: Name of the entity being mapped, used in error messages.
        accumulator: Usage accumulator to record into; a fresh one by default.
    """

    def __init__(
        self,
        registry: TypeRegistry,
        context: RenderContext | None = None,
        owner: str | None = None,
        accumulator: UsageAccumulator | None = None,
    ) -> None:
        self.registry = registry
        self.context = context or RenderContext()
        self.owner = owner
        self.accumulator = accumulator if accumulator is not None else UsageAccumulator()

    @property
    def used_fixable(self) -> bool:
        return self.accumulator.used_fixable

    def clear_usages(self) -> None:
        self.accumulator.clear()

    def mark_fixable(self) -> None:
        self.accumulator.used_fixable = True

    def use_library(self, library: CodecLibrary) -> None:
        self.accumulator.libraries.add(library)

    def fork(self) -> TypeMapper:
        """Return a mapper for the same entity that records into a forked accumulator."""
        return TypeMapper(self.registry, self.context, self.owner, self.accumulator.fork())

    def merge(self, child: TypeMapper) -> None:
        """Fold the usages recorded by a forked mapper back into this one."""
        self.accumulator.merge(child.accumulator)

    def map(self, descriptor: TypeDescriptor, field_name: str | None = None) -> MappedType:
        """Map *descriptor* to its Python type and codec, recording usages.

        Args:
            descriptor: The type to map.
            field_name: Name of the field being mapped, for error messages.

        Returns:
            The mapped type.

        Raises:
            UnsupportedTypeError: A primitive token is unknown.
            UnknownTypeError: A defined reference does not resolve.
            UnsupportedNestingError: A container holds something it cannot.
            TypeOrderError: A referenced type has no resolved layout yet.
        """
        if isinstance(descriptor, PrimitiveType):
            return self._map_primitive_token(descriptor.name, field_name)
        if isinstance(descriptor, OptionType):
            return self._map_option(descriptor, field_name)
        if isinstance(descriptor, COptionType):
            return self._map_coption(descriptor, field_name)
        if isinstance(descriptor, VectorType):
            inner = self.map(descriptor.inner, field_name)
            self.use_library(CodecLibrary.CORE)
            self.mark_fixable()
            return MappedType(f"list[{inner.type_hint}]", f"codecs.array({inner.codec})", None)
        if isinstance(descriptor, FixedArrayType):
            inner = self.map(descriptor.inner, field_name)
            self.use_library(CodecLibrary.CORE)
            size = None if inner.byte_size is None else inner.byte_size * descriptor.length
            return MappedType(
                f"list[{inner.type_hint}]",
                f"codecs.fixed_size_array({inner.codec}, {descriptor.length})",
                size,
            )
        if isinstance(descriptor, (HashMapType, BTreeMapType)):
            return self._map_map(descriptor, field_name)
        if isinstance(descriptor, TupleType):
            return self._map_tuple(descriptor, field_name)
        if isinstance(descriptor, DefinedType):
            return self._map_defined(descriptor.name, field_name)
        assert_never(descriptor)

    def map_scalar_enum(self, enum_def: EnumDef) -> MappedType:
        """Map an enum definition without payloads to its ``IntEnum`` class."""
        class_name = pascal_case(enum_def.name)
        self.accumulator.scalar_enums[class_name] = [variant.name for variant in enum_def.variants]
        self.use_library(CodecLibrary.CORE)
        return MappedType(class_name, f"codecs.fixed_scalar_enum({class_name})", 1)

    def _map_primitive_token(self, name: str, field_name: str | None) -> MappedType:
        entry = primitives.lookup(name)
        if entry is not None:
            return self._use_primitive(entry)
        if name in self.context.type_aliases or self.registry.lookup(name) is not None:
            return self._map_defined(name, field_name)
        raise UnsupportedTypeError(
            f"{located(self.owner, field_name)}: unsupported type '{name}', "
            f"expected one of: {', '.join(primitives.supported_primitives())}",
            entity=self.owner,
            field=field_name,
            type_name=name,
        )

    def _use_primitive(self, entry: primitives.PrimitiveEntry) -> MappedType:
        self.use_library(entry.library)
        if entry.fixable:
            self.mark_fixable()
        return MappedType(entry.type_hint, entry.codec, entry.byte_size)

    def _map_option(self, descriptor: OptionType, field_name: str | None) -> MappedType:
        self._require_simple_inner(descriptor.inner, "Option", field_name)
        inner = self.map(descriptor.inner, field_name)
        self.use_library(CodecLibrary.CORE)
        self.mark_fixable()
        return MappedType(f"{inner.type_hint} | None", f"codecs.option({inner.codec})", None)

    def _map_coption(self, descriptor: COptionType, field_name: str | None) -> MappedType:
        self._require_simple_inner(descriptor.inner, "COption", field_name)
        inner = self.map(descriptor.inner, field_name)
        if inner.byte_size is None:
            raise UnsupportedNestingError(
                f"{located(self.owner, field_name)}: COption needs a fixed-size payload, "
                f"got '{describe(descriptor.inner)}'",
                entity=self.owner,
                field=field_name,
                type_name=describe(descriptor),
            )
        self.use_library(CodecLibrary.CORE)
        return MappedType(f"{inner.type_hint} | None", f"codecs.coption({inner.codec})", 4 + inner.byte_size)

    def _map_map(self, descriptor: HashMapType | BTreeMapType, field_name: str | None) -> MappedType:
        if not self._is_hashable_key(descriptor.key):
            raise UnsupportedNestingError(
                f"{located(self.owner, field_name)}: map key '{describe(descriptor.key)}' "
                "must be a primitive, a scalar enum or a tuple of those",
                entity=self.owner,
                field=field_name,
                type_name=describe(descriptor),
            )
        key = self.map(descriptor.key, field_name)
        value = self.map(descriptor.value, field_name)
        self.use_library(CodecLibrary.CORE)
        self.mark_fixable()
        sort = ", sort_keys=True" if isinstance(descriptor, BTreeMapType) else ""
        return MappedType(
            f"dict[{key.type_hint}, {value.type_hint}]",
            f"codecs.map_({key.codec}, {value.codec}{sort})",
            None,
        )

    def _map_tuple(self, descriptor: TupleType, field_name: str | None) -> MappedType:
        base = field_name or "tuple"
        items = [self.map(item, f"{base}[{index}]") for index, item in enumerate(descriptor.items)]
        self.use_library(CodecLibrary.CORE)
        hints = ", ".join(item.type_hint for item in items) or "()"
        sizes = [item.byte_size for item in items]
        size = None if any(s is None for s in sizes) else sum(s for s in sizes if s is not None)
        return MappedType(
            f"tuple[{hints}]",
            "codecs.tuple_([" + ", ".join(item.codec for item in items) + "])",
            size,
        )

    def _map_defined(self, name: str, field_name: str | None) -> MappedType:
        alias = self.context.type_aliases.get(name)
        if alias is not None:
            entry = primitives.lookup(alias)
            if entry is None:
                raise UnsupportedTypeError(
                    f"{located(self.owner, field_name)}: alias '{name}' points to unsupported type '{alias}'",
                    entity=self.owner,
                    field=field_name,
                    type_name=alias,
                )
            return self._use_primitive(entry)
        info = self.registry.lookup(name)
        if info is None:
            raise UnknownTypeError(
                f"{located(self.owner, field_name)}: unknown type '{name}'",
                entity=self.owner,
                field=field_name,
                type_name=name,
            )
        if not info.resolved:
            raise TypeOrderError(
                f"{located(self.owner, field_name)}: type '{name}' is referenced before its layout is known",
                entity=self.owner,
                field=field_name,
                type_name=name,
            )
        self.accumulator.defined[info.name] = info
        if info.kind is DefinedKind.SCALAR_ENUM:
            self.accumulator.scalar_enums[info.class_name] = list(info.variants)
            self.use_library(CodecLibrary.CORE)
            return MappedType(info.class_name, f"codecs.fixed_scalar_enum({info.class_name})", 1)
        if info.fixable:
            self.mark_fixable()
        return MappedType(info.class_name, info.codec, info.byte_size)

    def _resolves_to_primitive(self, descriptor: TypeDescriptor) -> bool:
        if isinstance(descriptor, PrimitiveType) and primitives.lookup(descriptor.name) is not None:
            return True
        if isinstance(descriptor, (PrimitiveType, DefinedType)):
            return primitives.lookup(self.context.type_aliases.get(descriptor.name, "")) is not None
        return False

    def _is_scalar_enum(self, descriptor: TypeDescriptor) -> bool:
        if not isinstance(descriptor, (PrimitiveType, DefinedType)):
            return False
        info = self.registry.lookup(descriptor.name)
        return info is not None and info.kind is DefinedKind.SCALAR_ENUM

    def _require_simple_inner(self, inner: TypeDescriptor, container: str, field_name: str | None) -> None:
        if self._resolves_to_primitive(inner) or self._is_scalar_enum(inner):
            return
        if isinstance(inner, (PrimitiveType, DefinedType)) and self.registry.lookup(inner.name) is None:
            # Let the regular mapping report the unknown name.
            return
        raise UnsupportedNestingError(
            f"{located(self.owner, field_name)}: {container}<{describe(inner)}> is not supported, "
            f"{container} may only hold primitives and scalar enums",
            entity=self.owner,
            field=field_name,
            type_name=f"{container}<{describe(inner)}>",
        )

    def _is_hashable_key(self, descriptor: TypeDescriptor) -> bool:
        if isinstance(descriptor, TupleType):
            return all(self._is_hashable_key(item) for item in descriptor.items)
        if self._resolves_to_primitive(descriptor) or self._is_scalar_enum(descriptor):
            return True
        # Unknown names are reported by the regular mapping.
        return isinstance(descriptor, (PrimitiveType, DefinedType)) and self.registry.lookup(descriptor.name) is None
