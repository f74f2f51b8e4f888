# Copyright 2026 idlkit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Address codec: 32-byte ed25519 public keys as :class:`solders.pubkey.Pubkey`."""

from __future__ import annotations

from solders.pubkey import Pubkey

from idlkit.runtime.codecs import CodecError, FixedSizeCodec

# ###############
# Public Interface
# ###############

PUBLIC_KEY_LENGTH = 32


class PublicKeyCodec(FixedSizeCodec[Pubkey]):
    """Reads and writes the raw 32 bytes of a public key."""

    byte_size = PUBLIC_KEY_LENGTH
    description = "publicKey"

    def write(self, out: bytearray, value: Pubkey) -> None:
        if not isinstance(value, Pubkey):
            raise CodecError(f"publicKey: expected Pubkey, got {type(value).__name__}")
        out += bytes(value)

    def read(self, data: bytes, offset: int) -> tuple[Pubkey, int]:
        end = offset + PUBLIC_KEY_LENGTH
        if offset < 0 or end > len(data):
            raise CodecError(f"publicKey: need 32 byte(s) at offset {offset}, buffer has {len(data)}")
        return Pubkey.from_bytes(bytes(data[offset:end])), end


public_key = PublicKeyCodec()
