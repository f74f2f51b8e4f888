# Copyright 2026 idlkit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Explicit configuration threaded into every renderer."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from idlkit.codegen.naming import python_name
from idlkit.model.entities import Dialect, Idl

# ###############
# Public Interface
# ###############

# Well-known program and sysvar addresses, keyed by Python account name.
DEFAULT_KNOWN_ADDRESSES: Mapping[str, str] = MappingProxyType(
    {
        "system_program": "11111111111111111111111111111111",
        "token_program": "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA",
        "associated_token_program": "ATokenGPvbdGVxr1b2hvZbsiqW5xWH25efTNsLJA8knL",
        "ata_program": "ATokenGPvbdGVxr1b2hvZbsiqW5xWH25efTNsLJA8knL",
        "rent": "SysvarRent111111111111111111111111111111111",
    }
)


@dataclass(frozen=True)
class RenderContext:
    """Program-wide settings for rendering.

    Attributes:
        program_address: Base58 address of the program, if known.
        dialect: The IDL flavour; decides how discriminators are derived.
        known_addresses: Account name to base58 address; instruction accounts
            with these names default to the given address.
        type_aliases: Defined type name to primitive token; references to an
            alias are mapped as the primitive.
        serializers: Account name to the dotted path of a module whose
            ``serialize`` and ``deserialize`` functions replace the generated codec.
    """

    program_address: str | None = None
    dialect: Dialect = Dialect.ANCHOR
    known_addresses: Mapping[str, str] = field(default_factory=lambda: dict(DEFAULT_KNOWN_ADDRESSES))
    type_aliases: Mapping[str, str] = field(default_factory=dict)
    serializers: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def for_idl(
        cls,
        idl: Idl,
        *,
        program_address: str | None = None,
        known_addresses: Mapping[str, str] | None = None,
        type_aliases: Mapping[str, str] | None = None,
        serializers: Mapping[str, str] | None = None,
    ) -> RenderContext:
        """Build a context for *idl*, layering overrides on top of its metadata."""
        addresses = dict(DEFAULT_KNOWN_ADDRESSES)
        for name, address in (known_addresses or {}).items():
            addresses[python_name(name)] = address
        return cls(
            program_address=program_address or idl.address,
            dialect=idl.dialect,
            known_addresses=addresses,
            type_aliases=dict(type_aliases or {}),
            serializers=dict(serializers or {}),
        )

    def known_address(self, account_name: str) -> str | None:
        """Return the well-known address for an instruction account, if any."""
        return self.known_addresses.get(python_name(account_name))
