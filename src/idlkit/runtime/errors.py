# Copyright 2026 idlkit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Base class for the custom program errors of generated clients."""

from __future__ import annotations

# ###############
# Public Interface
# ###############


class ProgramError(Exception):
    """A custom error returned by an on-chain program.

    Generated subclasses set ``code`` and ``name`` as class attributes and
    pass the program's message to the constructor.
    """

    code: int = -1
    name: str = "ProgramError"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.name)
        self.message = message

    def __str__(self) -> str:
        suffix = f": {self.message}" if self.message else ""
        return f"{self.name} (0x{self.code:x}){suffix}"
