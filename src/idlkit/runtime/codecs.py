# Copyright 2026 idlkit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Composable Borsh codecs used by generated client code.

Every codec writes a value into a growing ``bytearray`` and reads a value back
from a ``bytes`` buffer at an offset, returning the value together with the
offset just past it.  Codecs whose encoded length never depends on the value
derive from :class:`FixedSizeCodec` and expose ``byte_size``; all others derive
from :class:`FixableCodec` and only know their size once given a value.

Integers are little-endian.  Lengths of strings, byte buffers, vectors and maps
are ``u32`` prefixes.  Enum discriminants are a single byte.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping, Sequence
from enum import IntEnum
from typing import Any, Generic, TypeVar

T = TypeVar("T")

# Integers wider than 32 bits.  Python ints are unbounded, so this alias only
# marks the arbitrary-precision fields in generated type hints.
bignum = int

# ###############
# Public Interface
# ###############


class CodecError(Exception):
    """Raised when a value cannot be encoded or a buffer cannot be decoded."""


class Codec(ABC, Generic[T]):
    """Base class for all codecs."""

    description: str = "codec"

    @property
    def is_fixed(self) -> bool:
        """Return True if the encoded length never depends on the value."""
        return False

    @abstractmethod
    def write(self, out: bytearray, value: T) -> None:
        """Append the encoding of *value* to *out*."""

    @abstractmethod
    def read(self, data: bytes, offset: int) -> tuple[T, int]:
        """Decode a value at *offset*; return it with the offset past it."""

    def encode(self, value: T) -> bytes:
        """Return the encoding of *value*."""
        out = bytearray()
        self.write(out, value)
        return bytes(out)

    def decode(self, data: bytes, offset: int = 0) -> T:
        """Decode a value at *offset*, ignoring any trailing bytes."""
        value, _ = self.read(data, offset)
        return value

    def size_of(self, value: T) -> int:
        """Return the encoded length of *value*."""
        return len(self.encode(value))

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.description}>"


class FixedSizeCodec(Codec[T]):
    """A codec whose encoded length is the same for every value."""

    byte_size: int = 0

    @property
    def is_fixed(self) -> bool:
        return True

    def size_of(self, value: T) -> int:
        return self.byte_size


class FixableCodec(Codec[T]):
    """A codec whose encoded length depends on the value."""


def option(inner: Codec[T]) -> FixableCodec[T | None]:
    """Return a codec for ``Option<T>``: a ``0``/``1`` byte, then the payload if present."""
    return _Option(inner)


def coption(inner: Codec[T]) -> FixedSizeCodec[T | None]:
    """Return a codec for ``COption<T>``: a ``u32`` tag, then a zero-filled or real payload.

    Raises:
        CodecError: If *inner* is not fixed-size.
    """
    if not isinstance(inner, FixedSizeCodec):
        raise CodecError(f"COption requires a fixed-size inner codec, got {inner.description}")
    return _COption(inner)


def array(inner: Codec[T]) -> FixableCodec[list[T]]:
    """Return a codec for ``Vec<T>``: a ``u32`` count followed by the items."""
    return _Vector(inner)


def fixed_size_array(inner: Codec[T], length: int) -> Codec[list[T]]:
    """Return a codec for ``[T; length]``; fixed-size iff *inner* is."""
    if isinstance(inner, FixedSizeCodec):
        return _UniformFixedSizeArray(inner, length)
    return _FixableFixedSizeArray(inner, length)


def map_(key: Codec[Any], value: Codec[Any], sort_keys: bool = False) -> FixableCodec[dict[Any, Any]]:
    """Return a codec for a map: a ``u32`` count followed by key/value pairs.

    Args:
        key: Codec for the keys.
        value: Codec for the values.
        sort_keys: Write entries in ascending key order, as ``BTreeMap`` does.
            Otherwise entries are written in insertion order.
    """
    return _Map(key, value, sort_keys)


def tuple_(items: Sequence[Codec[Any]]) -> Codec[tuple[Any, ...]]:
    """Return a codec for a tuple; fixed-size iff every item codec is."""
    if all(isinstance(item, FixedSizeCodec) for item in items):
        return _FixedTuple(items)
    return _FixableTuple(items)


def fixed_scalar_enum(enum_class: type[IntEnum]) -> FixedSizeCodec[IntEnum]:
    """Return a one-byte codec for a payload-free enum."""
    return _ScalarEnum(enum_class)


def data_enum(variants: Sequence[tuple[str, type, Codec[Any]]]) -> Codec[Any]:
    """Return a codec for an enum whose variants carry data.

    Each variant is ``(kind, variant_class, payload_codec)``.  Values are
    matched on their ``__kind__`` attribute; the variant index is written as a
    single byte before the payload.  The result is fixed-size only if every
    payload codec is fixed-size and all payloads have the same length.
    """
    sizes = {codec.byte_size for _, _, codec in variants if isinstance(codec, FixedSizeCodec)}
    if variants and len(sizes) == 1 and all(isinstance(codec, FixedSizeCodec) for _, _, codec in variants):
        return _FixedDataEnum(variants, 1 + sizes.pop())
    return _FixableDataEnum(variants)


class Struct(FixedSizeCodec[Any]):
    """A struct of fixed-size fields, serialized in declaration order.

    Args:
        fields: ``(name, codec)`` pairs in wire order.
        description: Name used in error messages.
        construct: Callable receiving the decoded fields as keyword arguments.
            Without it, :meth:`read` returns a ``dict``.
        discriminator: Constant value of the first field.  It is written
            automatically, checked when reading, and not passed to *construct*.

    Raises:
        CodecError: If any field codec is variable-size.
    """

    def __init__(
        self,
        fields: Sequence[tuple[str, Codec[Any]]],
        description: str,
        construct: Callable[..., Any] | None = None,
        discriminator: Any = None,
    ) -> None:
        for name, codec in fields:
            if not isinstance(codec, FixedSizeCodec):
                raise CodecError(f"{description}: field '{name}' is variable-size, use FixableStruct")
        _init_struct(self, fields, description, construct, discriminator)
        self.byte_size = sum(codec.byte_size for _, codec in fields)

    def write(self, out: bytearray, value: Any) -> None:
        _write_struct(self, out, value)

    def read(self, data: bytes, offset: int) -> tuple[Any, int]:
        return _read_struct(self, data, offset)

    def serialize(self, value: Any) -> tuple[bytes, int]:
        """Encode *value*; return the bytes and their length."""
        encoded = self.encode(value)
        return encoded, len(encoded)

    def deserialize(self, data: bytes, offset: int = 0) -> tuple[Any, int]:
        """Decode a value at *offset*; return it with the offset past it."""
        return self.read(data, offset)


class FixableStruct(FixableCodec[Any]):
    """A struct with at least one variable-size field.

    Takes the same arguments as :class:`Struct`.
    """

    def __init__(
        self,
        fields: Sequence[tuple[str, Codec[Any]]],
        description: str,
        construct: Callable[..., Any] | None = None,
        discriminator: Any = None,
    ) -> None:
        _init_struct(self, fields, description, construct, discriminator)

    def write(self, out: bytearray, value: Any) -> None:
        _write_struct(self, out, value)

    def read(self, data: bytes, offset: int) -> tuple[Any, int]:
        return _read_struct(self, data, offset)

    def serialize(self, value: Any) -> tuple[bytes, int]:
        """Encode *value*; return the bytes and their length."""
        encoded = self.encode(value)
        return encoded, len(encoded)

    def deserialize(self, data: bytes, offset: int = 0) -> tuple[Any, int]:
        """Decode a value at *offset*; return it with the offset past it."""
        return self.read(data, offset)


# ################
# Implementation
# ################


def _require(data: bytes, offset: int, size: int, description: str) -> None:
    if offset < 0 or offset + size > len(data):
        raise CodecError(f"{description}: need {size} byte(s) at offset {offset}, buffer has {len(data)}")


class _Integer(FixedSizeCodec[int]):
    """Little-endian integer of a fixed bit width."""

    def __init__(self, bits: int, signed: bool) -> None:
        self.byte_size = bits // 8
        self.signed = signed
        self.description = f"{'i' if signed else 'u'}{bits}"

    def write(self, out: bytearray, value: int) -> None:
        if isinstance(value, bool) or not isinstance(value, int):
            raise CodecError(f"{self.description}: expected int, got {type(value).__name__}")
        try:
            out += value.to_bytes(self.byte_size, "little", signed=self.signed)
        except OverflowError:
            raise CodecError(f"{self.description}: value {value} out of range") from None

    def read(self, data: bytes, offset: int) -> tuple[int, int]:
        _require(data, offset, self.byte_size, self.description)
        end = offset + self.byte_size
        return int.from_bytes(data[offset:end], "little", signed=self.signed), end


u8 = _Integer(8, False)
u16 = _Integer(16, False)
u32 = _Integer(32, False)
u64 = _Integer(64, False)
u128 = _Integer(128, False)
u256 = _Integer(256, False)
u512 = _Integer(512, False)
i8 = _Integer(8, True)
i16 = _Integer(16, True)
i32 = _Integer(32, True)
i64 = _Integer(64, True)
i128 = _Integer(128, True)
i256 = _Integer(256, True)
i512 = _Integer(512, True)


class _Bool(FixedSizeCodec[bool]):
    byte_size = 1
    description = "bool"

    def write(self, out: bytearray, value: bool) -> None:
        out.append(1 if value else 0)

    def read(self, data: bytes, offset: int) -> tuple[bool, int]:
        _require(data, offset, 1, self.description)
        raw = data[offset]
        if raw > 1:
            raise CodecError(f"bool: invalid byte {raw} at offset {offset}")
        return raw == 1, offset + 1


bool_ = _Bool()


class _Utf8String(FixableCodec[str]):
    description = "string"

    def write(self, out: bytearray, value: str) -> None:
        encoded = value.encode("utf-8")
        u32.write(out, len(encoded))
        out += encoded

    def read(self, data: bytes, offset: int) -> tuple[str, int]:
        length, offset = u32.read(data, offset)
        _require(data, offset, length, self.description)
        try:
            return data[offset : offset + length].decode("utf-8"), offset + length
        except UnicodeDecodeError as exc:
            raise CodecError(f"string: invalid utf-8 at offset {offset}: {exc}") from exc


utf8_string = _Utf8String()


class _Bytes(FixableCodec[bytes]):
    description = "bytes"

    def write(self, out: bytearray, value: bytes) -> None:
        u32.write(out, len(value))
        out += value

    def read(self, data: bytes, offset: int) -> tuple[bytes, int]:
        length, offset = u32.read(data, offset)
        _require(data, offset, length, self.description)
        return bytes(data[offset : offset + length]), offset + length


bytes_ = _Bytes()


class _Option(FixableCodec[Any]):
    def __init__(self, inner: Codec[Any]) -> None:
        self.inner = inner
        self.description = f"Option<{inner.description}>"

    def write(self, out: bytearray, value: Any) -> None:
        if value is None:
            out.append(0)
            return
        out.append(1)
        self.inner.write(out, value)

    def read(self, data: bytes, offset: int) -> tuple[Any, int]:
        _require(data, offset, 1, self.description)
        tag = data[offset]
        if tag == 0:
            return None, offset + 1
        if tag != 1:
            raise CodecError(f"{self.description}: invalid tag {tag} at offset {offset}")
        return self.inner.read(data, offset + 1)


class _COption(FixedSizeCodec[Any]):
    def __init__(self, inner: FixedSizeCodec[Any]) -> None:
        self.inner = inner
        self.byte_size = 4 + inner.byte_size
        self.description = f"COption<{inner.description}>"

    def write(self, out: bytearray, value: Any) -> None:
        if value is None:
            u32.write(out, 0)
            out += bytes(self.inner.byte_size)
            return
        u32.write(out, 1)
        self.inner.write(out, value)

    def read(self, data: bytes, offset: int) -> tuple[Any, int]:
        _require(data, offset, self.byte_size, self.description)
        tag, offset = u32.read(data, offset)
        if tag == 0:
            return None, offset + self.inner.byte_size
        if tag != 1:
            raise CodecError(f"{self.description}: invalid tag {tag}")
        return self.inner.read(data, offset)


class _Vector(FixableCodec[list[Any]]):
    def __init__(self, inner: Codec[Any]) -> None:
        self.inner = inner
        self.description = f"Vec<{inner.description}>"

    def write(self, out: bytearray, value: Sequence[Any]) -> None:
        u32.write(out, len(value))
        for item in value:
            self.inner.write(out, item)

    def read(self, data: bytes, offset: int) -> tuple[list[Any], int]:
        count, offset = u32.read(data, offset)
        items = []
        for _ in range(count):
            item, offset = self.inner.read(data, offset)
            items.append(item)
        return items, offset


class _ArrayMixin:
    inner: Codec[Any]
    length: int
    description: str

    def write(self, out: bytearray, value: Sequence[Any]) -> None:
        if len(value) != self.length:
            raise CodecError(f"{self.description}: expected {self.length} item(s), got {len(value)}")
        for item in value:
            self.inner.write(out, item)

    def read(self, data: bytes, offset: int) -> tuple[list[Any], int]:
        items = []
        for _ in range(self.length):
            item, offset = self.inner.read(data, offset)
            items.append(item)
        return items, offset


class _UniformFixedSizeArray(_ArrayMixin, FixedSizeCodec[list[Any]]):
    def __init__(self, inner: FixedSizeCodec[Any], length: int) -> None:
        self.inner = inner
        self.length = length
        self.byte_size = inner.byte_size * length
        self.description = f"[{inner.description}; {length}]"


class _FixableFixedSizeArray(_ArrayMixin, FixableCodec[list[Any]]):
    def __init__(self, inner: Codec[Any], length: int) -> None:
        self.inner = inner
        self.length = length
        self.description = f"[{inner.description}; {length}]"


def _ordering_key(key: Any) -> Any:
    # Addresses order by their raw bytes, as [u8; 32] does.
    if hasattr(key, "__bytes__") and not isinstance(key, (bytes, bytearray)):
        return bytes(key)
    return key


class _Map(FixableCodec[dict[Any, Any]]):
    def __init__(self, key: Codec[Any], value: Codec[Any], sort_keys: bool) -> None:
        self.key = key
        self.value = value
        self.sort_keys = sort_keys
        name = "BTreeMap" if sort_keys else "HashMap"
        self.description = f"{name}<{key.description}, {value.description}>"

    def write(self, out: bytearray, value: Mapping[Any, Any]) -> None:
        entries = list(value.items())
        if self.sort_keys:
            entries.sort(key=lambda entry: _ordering_key(entry[0]))
        u32.write(out, len(entries))
        for k, v in entries:
            self.key.write(out, k)
            self.value.write(out, v)

    def read(self, data: bytes, offset: int) -> tuple[dict[Any, Any], int]:
        count, offset = u32.read(data, offset)
        result: dict[Any, Any] = {}
        for _ in range(count):
            k, offset = self.key.read(data, offset)
            v, offset = self.value.read(data, offset)
            result[k] = v
        return result, offset


class _TupleMixin:
    items: list[Codec[Any]]
    description: str

    def write(self, out: bytearray, value: Sequence[Any]) -> None:
        if len(value) != len(self.items):
            raise CodecError(f"{self.description}: expected {len(self.items)} item(s), got {len(value)}")
        for codec, item in zip(self.items, value):
            codec.write(out, item)

    def read(self, data: bytes, offset: int) -> tuple[tuple[Any, ...], int]:
        values = []
        for codec in self.items:
            item, offset = codec.read(data, offset)
            values.append(item)
        return tuple(values), offset


class _FixedTuple(_TupleMixin, FixedSizeCodec[tuple[Any, ...]]):
    def __init__(self, items: Sequence[Codec[Any]]) -> None:
        self.items = list(items)
        self.byte_size = sum(item.byte_size for item in self.items if isinstance(item, FixedSizeCodec))
        self.description = "(" + ", ".join(item.description for item in self.items) + ")"


class _FixableTuple(_TupleMixin, FixableCodec[tuple[Any, ...]]):
    def __init__(self, items: Sequence[Codec[Any]]) -> None:
        self.items = list(items)
        self.description = "(" + ", ".join(item.description for item in self.items) + ")"


class _ScalarEnum(FixedSizeCodec[IntEnum]):
    byte_size = 1

    def __init__(self, enum_class: type[IntEnum]) -> None:
        self.enum_class = enum_class
        self.description = enum_class.__name__

    def write(self, out: bytearray, value: IntEnum) -> None:
        try:
            member = self.enum_class(value)
        except ValueError:
            raise CodecError(f"{self.description}: invalid variant {value!r}") from None
        out.append(int(member))

    def read(self, data: bytes, offset: int) -> tuple[IntEnum, int]:
        _require(data, offset, 1, self.description)
        try:
            return self.enum_class(data[offset]), offset + 1
        except ValueError:
            raise CodecError(f"{self.description}: invalid discriminant {data[offset]}") from None


class _DataEnumMixin:
    description: str

    def _init_variants(self, variants: Sequence[tuple[str, type, Codec[Any]]]) -> None:
        self.variants = list(variants)
        self._by_kind = {kind: (index, codec) for index, (kind, _, codec) in enumerate(self.variants)}
        self.description = "|".join(kind for kind, _, _ in self.variants) or "enum"

    def write(self, out: bytearray, value: Any) -> None:
        kind = getattr(value, "__kind__", None)
        if kind not in self._by_kind:
            raise CodecError(f"{self.description}: unknown variant {kind!r}")
        index, codec = self._by_kind[kind]
        out.append(index)
        codec.write(out, value)

    def read(self, data: bytes, offset: int) -> tuple[Any, int]:
        _require(data, offset, 1, self.description)
        index = data[offset]
        if index >= len(self.variants):
            raise CodecError(f"{self.description}: invalid discriminant {index} at offset {offset}")
        return self.variants[index][2].read(data, offset + 1)


class _FixedDataEnum(_DataEnumMixin, FixedSizeCodec[Any]):
    def __init__(self, variants: Sequence[tuple[str, type, Codec[Any]]], byte_size: int) -> None:
        self._init_variants(variants)
        self.byte_size = byte_size


class _FixableDataEnum(_DataEnumMixin, FixableCodec[Any]):
    def __init__(self, variants: Sequence[tuple[str, type, Codec[Any]]]) -> None:
        self._init_variants(variants)


def _init_struct(
    struct: Any,
    fields: Sequence[tuple[str, Codec[Any]]],
    description: str,
    construct: Callable[..., Any] | None,
    discriminator: Any,
) -> None:
    if discriminator is not None and not fields:
        raise CodecError(f"{description}: a discriminator needs a leading field")
    struct.fields = list(fields)
    struct.description = description
    struct.construct = construct
    struct.discriminator = discriminator


def _field_value(value: Any, name: str, description: str) -> Any:
    try:
        if isinstance(value, Mapping):
            return value[name]
        return getattr(value, name)
    except (KeyError, AttributeError):
        raise CodecError(f"{description}: missing field '{name}'") from None


def _write_struct(struct: Any, out: bytearray, value: Any) -> None:
    for index, (name, codec) in enumerate(struct.fields):
        if index == 0 and struct.discriminator is not None:
            codec.write(out, struct.discriminator)
            continue
        try:
            codec.write(out, _field_value(value, name, struct.description))
        except CodecError as exc:
            raise CodecError(f"{struct.description}.{name}: {exc}") from exc


def _read_struct(struct: Any, data: bytes, offset: int) -> tuple[Any, int]:
    values: dict[str, Any] = {}
    for name, codec in struct.fields:
        values[name], offset = codec.read(data, offset)
    if struct.discriminator is not None:
        name = struct.fields[0][0]
        if not _matches(values[name], struct.discriminator):
            raise CodecError(f"{struct.description}: discriminator mismatch, got {values[name]!r}")
        if struct.construct is not None:
            del values[name]
    if struct.construct is None:
        return values, offset
    return struct.construct(**values), offset


def _matches(decoded: Any, expected: Any) -> bool:
    if isinstance(expected, (list, tuple, bytes, bytearray)):
        return list(decoded) == list(expected)
    return bool(decoded == expected)
