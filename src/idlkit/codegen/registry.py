# Copyright 2026 idlkit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Program-wide registry of defined types and accounts.

The registry is filled in two steps.  :meth:`TypeRegistry.from_idl` records
every type and account with its kind; scalar enums are resolved immediately
because they are always one byte.  Structs, data enums and accounts are
resolved by :meth:`TypeRegistry.resolve` once they have been rendered, which
is why rendering follows the dependency order of the definitions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from idlkit.codegen import primitives
from idlkit.codegen.naming import codec_name, pascal_case, snake_case
from idlkit.model.entities import AccountDef, EnumDef, Idl, TypeDef
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
)

# ###############
# Public Interface
# ###############

TYPES_PACKAGE = "types"
ACCOUNTS_PACKAGE = "accounts"
INSTRUCTIONS_PACKAGE = "instructions"


class DefinedKind(Enum):
    """What a defined name refers to."""

    STRUCT = "struct"
    SCALAR_ENUM = "scalar_enum"
    DATA_ENUM = "data_enum"
    ACCOUNT = "account"


@dataclass
class DefinedTypeInfo:
    """What generated code needs to know about a defined type or account.

    ``fixable`` and ``byte_size`` stay unset until the definition is rendered.
    """

    name: str
    kind: DefinedKind
    package: str
    variants: list[str] = field(default_factory=list)
    fixable: bool | None = None
    byte_size: int | None = None

    @property
    def class_name(self) -> str:
        return pascal_case(self.name)

    @property
    def module(self) -> str:
        return snake_case(self.name)

    @property
    def codec(self) -> str:
        return codec_name(self.name)

    @property
    def resolved(self) -> bool:
        return self.fixable is not None


class TypeRegistry:
    """Lookup of defined names to :class:`DefinedTypeInfo`."""

    def __init__(self, infos: list[DefinedTypeInfo] | None = None) -> None:
        self._infos: dict[str, DefinedTypeInfo] = {}
        for info in infos or []:
            self.add(info)

    @classmethod
    def from_idl(cls, idl: Idl) -> TypeRegistry:
        """Create a registry holding every type and account of *idl*."""
        registry = cls()
        for type_def in idl.types:
            if isinstance(type_def, EnumDef) and type_def.is_scalar:
                registry.add(
                    DefinedTypeInfo(
                        name=type_def.name,
                        kind=DefinedKind.SCALAR_ENUM,
                        package=TYPES_PACKAGE,
                        variants=[variant.name for variant in type_def.variants],
                        fixable=False,
                        byte_size=1,
                    )
                )
            elif isinstance(type_def, EnumDef):
                registry.add(DefinedTypeInfo(type_def.name, DefinedKind.DATA_ENUM, TYPES_PACKAGE))
            else:
                registry.add(DefinedTypeInfo(type_def.name, DefinedKind.STRUCT, TYPES_PACKAGE))
        for account in idl.accounts:
            if account.name not in registry:
                registry.add(DefinedTypeInfo(account.name, DefinedKind.ACCOUNT, ACCOUNTS_PACKAGE))
        return registry

    def add(self, info: DefinedTypeInfo) -> None:
        self._infos[info.name] = info

    def lookup(self, name: str) -> DefinedTypeInfo | None:
        return self._infos.get(name)

    def resolve(self, name: str, *, fixable: bool, byte_size: int | None) -> None:
        """Record the layout of a rendered definition."""
        info = self._infos[name]
        info.fixable = fixable
        info.byte_size = None if fixable else byte_size

    def __contains__(self, name: object) -> bool:
        return name in self._infos


def references(descriptor: TypeDescriptor) -> list[str]:
    """Return every name in *descriptor* that resolves through the defined registry.

    Primitive tokens that are not known primitives are included, since the
    mapper falls back to the defined registry for them.
    """
    if isinstance(descriptor, DefinedType):
        return [descriptor.name]
    if isinstance(descriptor, PrimitiveType):
        return [] if primitives.lookup(descriptor.name) is not None else [descriptor.name]
    if isinstance(descriptor, (OptionType, COptionType, VectorType, FixedArrayType)):
        return references(descriptor.inner)
    if isinstance(descriptor, (HashMapType, BTreeMapType)):
        return references(descriptor.key) + references(descriptor.value)
    assert isinstance(descriptor, TupleType)
    return [name for item in descriptor.items for name in references(item)]


def definition_references(definition: TypeDef | AccountDef) -> list[str]:
    """Return the defined names referenced by the fields of *definition*, in field order."""
    if isinstance(definition, EnumDef):
        descriptors: list[TypeDescriptor] = []
        for variant in definition.variants:
            descriptors.extend(f.type for f in variant.fields)
            descriptors.extend(variant.tuple_fields)
    else:
        descriptors = [f.type for f in definition.fields]
    return [name for descriptor in descriptors for name in references(descriptor)]
