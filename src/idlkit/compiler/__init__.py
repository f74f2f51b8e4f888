# Copyright 2026 idlkit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Compiler pipeline for IDL files: parsing, semantic analysis and generation."""

from idlkit.compiler.artifact import deserialize, enhance_idl, read_idl, serialize, write_idl
from idlkit.compiler.build import CompilerError, GeneratedProgram, generate, write_program
from idlkit.compiler.parser import IdlParseError, parse_idl, parse_type
from idlkit.compiler.semantic_analysis import SemanticError, analyze

__all__ = [
    "parse_idl",
    "parse_type",
    "IdlParseError",
    "analyze",
    "SemanticError",
    "serialize",
    "deserialize",
    "write_idl",
    "read_idl",
    "enhance_idl",
    "generate",
    "write_program",
    "GeneratedProgram",
    "CompilerError",
]
