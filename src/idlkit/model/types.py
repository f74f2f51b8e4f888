# Copyright 2026 idlkit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Type descriptors for the idlkit program model."""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel
from pydantic import Field as _Field

# ###############
# Public Interface
# ###############


class PrimitiveType(BaseModel):
    """Reference to a primitive type token such as ``u64`` or ``publicKey``."""

    kind: Literal["primitive"] = "primitive"
    name: str


class OptionType(BaseModel):
    """Reference to a Borsh ``Option<T>`` (one-byte tag, payload when present)."""

    kind: Literal["option"] = "option"
    inner: TypeDescriptor


class COptionType(BaseModel):
    """Reference to a C-compatible ``COption<T>`` (four-byte tag, payload always present)."""

    kind: Literal["coption"] = "coption"
    inner: TypeDescriptor


class VectorType(BaseModel):
    """Reference to a length-prefixed ``Vec<T>``."""

    kind: Literal["vec"] = "vec"
    inner: TypeDescriptor


class FixedArrayType(BaseModel):
    """Reference to a fixed-length ``[T; N]`` array."""

    kind: Literal["array"] = "array"
    inner: TypeDescriptor
    length: int


class HashMapType(BaseModel):
    """Reference to a ``HashMap<K, V>``."""

    kind: Literal["hash_map"] = "hash_map"
    key: TypeDescriptor
    value: TypeDescriptor


class BTreeMapType(BaseModel):
    """Reference to a ``BTreeMap<K, V>``; entries are serialized in key order."""

    kind: Literal["btree_map"] = "btree_map"
    key: TypeDescriptor
    value: TypeDescriptor


class TupleType(BaseModel):
    """Reference to an anonymous tuple of heterogeneous items."""

    kind: Literal["tuple"] = "tuple"
    items: list[TypeDescriptor]


class DefinedType(BaseModel):
    """Reference to a user-defined type or account by name."""

    kind: Literal["defined"] = "defined"
    name: str


# A field type: a primitive token, a container over other descriptors, or a
# reference to a defined type. `kind` makes the union closed and unambiguous.
TypeDescriptor = Annotated[
    PrimitiveType
    | OptionType
    | COptionType
    | VectorType
    | FixedArrayType
    | HashMapType
    | BTreeMapType
    | TupleType
    | DefinedType,
    _Field(discriminator="kind"),
]


class FieldDef(BaseModel):
    """A named, typed field of a struct, account, variant, or instruction."""

    name: str
    type: TypeDescriptor
    docs: list[str] = _Field(default_factory=list)


def describe(descriptor: TypeDescriptor) -> str:
    """Return the IDL-style spelling of a descriptor, used in diagnostics."""
    if isinstance(descriptor, PrimitiveType):
        return descriptor.name
    if isinstance(descriptor, OptionType):
        return f"Option<{describe(descriptor.inner)}>"
    if isinstance(descriptor, COptionType):
        return f"COption<{describe(descriptor.inner)}>"
    if isinstance(descriptor, VectorType):
        return f"Vec<{describe(descriptor.inner)}>"
    if isinstance(descriptor, FixedArrayType):
        return f"[{describe(descriptor.inner)}; {descriptor.length}]"
    if isinstance(descriptor, HashMapType):
        return f"HashMap<{describe(descriptor.key)}, {describe(descriptor.value)}>"
    if isinstance(descriptor, BTreeMapType):
        return f"BTreeMap<{describe(descriptor.key)}, {describe(descriptor.value)}>"
    if isinstance(descriptor, TupleType):
        return "(" + ", ".join(describe(item) for item in descriptor.items) + ")"
    assert isinstance(descriptor, DefinedType)
    return descriptor.name


def leaf_types(descriptor: TypeDescriptor) -> list[PrimitiveType | DefinedType]:
    """Return the primitive and defined leaves of *descriptor*, in order."""
    if isinstance(descriptor, (PrimitiveType, DefinedType)):
        return [descriptor]
    if isinstance(descriptor, (OptionType, COptionType, VectorType, FixedArrayType)):
        return leaf_types(descriptor.inner)
    if isinstance(descriptor, (HashMapType, BTreeMapType)):
        return leaf_types(descriptor.key) + leaf_types(descriptor.value)
    return [leaf for item in descriptor.items for leaf in leaf_types(item)]


# Resolve forward references for models that use TypeDescriptor.
OptionType.model_rebuild()
COptionType.model_rebuild()
VectorType.model_rebuild()
FixedArrayType.model_rebuild()
HashMapType.model_rebuild()
BTreeMapType.model_rebuild()
TupleType.model_rebuild()
FieldDef.model_rebuild()
