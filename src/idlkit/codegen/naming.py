# Copyright 2026 idlkit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Name conversions between IDL identifiers and Python identifiers."""

from __future__ import annotations

import keyword
import re

_ACRONYM_BOUNDARY = re.compile(r"([A-Z]+)([A-Z][a-z])")
_WORD_BOUNDARY = re.compile(r"([a-z\d])([A-Z])")
_SEPARATORS = re.compile(r"[_\-\s]+")

# ###############
# Public Interface
# ###############


def snake_case(name: str) -> str:
    """Convert ``initializeAccountV2`` or ``HTTPServer`` to snake case.

    Digits stay attached to the preceding word, matching the conversion the
    Rust tooling applies to instruction names.
    """
    value = _ACRONYM_BOUNDARY.sub(r"\1_\2", name)
    value = _WORD_BOUNDARY.sub(r"\1_\2", value)
    return _SEPARATORS.sub("_", value).strip("_").lower()


def pascal_case(name: str) -> str:
    """Convert a name to PascalCase, keeping runs of capitals (``NFTData``) intact."""
    parts = [part for part in _SEPARATORS.split(name) if part]
    return "".join(part[:1].upper() + part[1:] for part in parts)


def python_name(name: str) -> str:
    """Return the snake-case Python identifier for an IDL field or account name."""
    value = snake_case(name)
    if not value or value[0].isdigit():
        value = f"_{value}"
    if keyword.iskeyword(value):
        value = f"{value}_"
    return value


def member_name(name: str) -> str:
    """Return an enum member identifier for a variant name, keeping its case."""
    value = re.sub(r"\W", "_", name)
    if not value or value[0].isdigit():
        value = f"_{value}"
    if keyword.iskeyword(value):
        value = f"{value}_"
    return value


def constant_name(name: str) -> str:
    """Return the SCREAMING_SNAKE_CASE form of *name*."""
    return snake_case(name).upper()


def codec_name(name: str) -> str:
    """Return the module-level variable holding the codec of a type or account."""
    return f"{snake_case(name)}_codec"
