# Copyright 2026 idlkit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Registry of primitive type tokens and their Python types and codecs.

The registry is the union of two fixed tables: the core table (integers,
``bool``, ``string``, ``bytes``), served by :mod:`idlkit.runtime.codecs`, and
the address table (``publicKey``), served by :mod:`idlkit.runtime.address`.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

# ###############
# Public Interface
# ###############


class CodecLibrary(Enum):
    """A runtime module that generated code imports codecs from."""

    CORE = "codecs"
    ADDRESS = "address"

    @property
    def module(self) -> str:
        """Return the dotted module path of the library."""
        return f"idlkit.runtime.{self.value}"


@dataclass(frozen=True)
class PrimitiveEntry:
    """How one primitive token maps to Python.

    Attributes:
        name: The IDL token, e.g. ``"u64"``.
        type_hint: Python structural type, e.g. ``"codecs.bignum"``.
        codec: Codec expression, e.g. ``"codecs.u64"``.
        library: Runtime library providing the codec.
        byte_size: Encoded size, or ``None`` when the length varies.
    """

    name: str
    type_hint: str
    codec: str
    library: CodecLibrary
    byte_size: int | None

    @property
    def fixable(self) -> bool:
        """Return True if the encoded length depends on the value."""
        return self.byte_size is None


def lookup(name: str) -> PrimitiveEntry | None:
    """Return the registry entry for *name*, or ``None`` if it is not a primitive."""
    return _REGISTRY.get(name)


def supported_primitives() -> list[str]:
    """Return every primitive token, sorted."""
    return sorted(_REGISTRY)


def integer_layout(name: str) -> tuple[int, bool] | None:
    """Return ``(byte_width, signed)`` for an integer token, else ``None``."""
    if name[:1] not in ("u", "i") or not name[1:].isdigit():
        return None
    bits = int(name[1:])
    if bits not in _INTEGER_WIDTHS:
        return None
    return bits // 8, name[0] == "i"


def is_address(name: str) -> bool:
    """Return True if *name* is an address token."""
    entry = lookup(name)
    return entry is not None and entry.library is CodecLibrary.ADDRESS


# ################
# Implementation
# ################

_INTEGER_WIDTHS = (8, 16, 32, 64, 128, 256, 512)

# Above this width integers take the arbitrary-precision structural type.
_NATIVE_INTEGER_BITS = 32


def _integer_entries() -> dict[str, PrimitiveEntry]:
    entries = {}
    for prefix in ("u", "i"):
        for bits in _INTEGER_WIDTHS:
            name = f"{prefix}{bits}"
            type_hint = "int" if bits <= _NATIVE_INTEGER_BITS else "codecs.bignum"
            entries[name] = PrimitiveEntry(name, type_hint, f"codecs.{name}", CodecLibrary.CORE, bits // 8)
    return entries


_CORE_TABLE: dict[str, PrimitiveEntry] = {
    **_integer_entries(),
    "bool": PrimitiveEntry("bool", "bool", "codecs.bool_", CodecLibrary.CORE, 1),
    "string": PrimitiveEntry("string", "str", "codecs.utf8_string", CodecLibrary.CORE, None),
    "bytes": PrimitiveEntry("bytes", "bytes", "codecs.bytes_", CodecLibrary.CORE, None),
}

_ADDRESS_TABLE: dict[str, PrimitiveEntry] = {
    "publicKey": PrimitiveEntry("publicKey", "Pubkey", "address.public_key", CodecLibrary.ADDRESS, 32),
    "pubkey": PrimitiveEntry("pubkey", "Pubkey", "address.public_key", CodecLibrary.ADDRESS, 32),
}

_REGISTRY: dict[str, PrimitiveEntry] = {**_CORE_TABLE, **_ADDRESS_TABLE}
