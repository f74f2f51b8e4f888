# Copyright 2026 idlkit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Rendering of IDL definitions into Python source code."""

from idlkit.codegen.context import DEFAULT_KNOWN_ADDRESSES, RenderContext
from idlkit.codegen.errors import (
    DefinitionCycleError,
    EmptyStructError,
    GenerationError,
    SeedResolutionError,
    TypeOrderError,
    UnknownTypeError,
    UnsupportedNestingError,
    UnsupportedTypeError,
)
from idlkit.codegen.registry import TypeRegistry
from idlkit.codegen.render_account import render_account
from idlkit.codegen.render_errors import render_errors, render_program_id
from idlkit.codegen.render_instruction import render_instruction
from idlkit.codegen.render_type import RenderedModule, render_type
from idlkit.codegen.type_mapper import TypeMapper, UsageAccumulator

__all__ = [
    "DEFAULT_KNOWN_ADDRESSES",
    "RenderContext",
    "TypeRegistry",
    "TypeMapper",
    "UsageAccumulator",
    "RenderedModule",
    "render_type",
    "render_account",
    "render_instruction",
    "render_errors",
    "render_program_id",
    "GenerationError",
    "UnsupportedTypeError",
    "UnknownTypeError",
    "UnsupportedNestingError",
    "SeedResolutionError",
    "TypeOrderError",
    "EmptyStructError",
    "DefinitionCycleError",
]
