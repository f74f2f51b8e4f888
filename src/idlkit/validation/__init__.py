# Copyright 2026 idlkit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Consistency checks for IDL models (recursive types, underivable addresses, etc.)."""

from idlkit.validation.checks import (
    ValidationError,
    ValidationResult,
    ValidationWarning,
    validate,
)

__all__ = [
    "ValidationError",
    "ValidationResult",
    "ValidationWarning",
    "validate",
]
