# Copyright 2026 idlkit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Entry point for the idlkit command-line interface."""

import argparse
import dataclasses
import logging
import sys
from pathlib import Path

from idlkit.codegen.context import RenderContext
from idlkit.codegen.errors import GenerationError
from idlkit.compiler.artifact import enhance_idl, read_idl
from idlkit.compiler.build import CompilerError, generate, write_program
from idlkit.compiler.parser import IdlParseError
from idlkit.compiler.semantic_analysis import analyze
from idlkit.model.entities import Idl
from idlkit.validation.checks import validate
from idlkit.workspace.config import (
    CONFIG_FILE_NAME,
    ConfigError,
    GeneratorConfig,
    load_generator_config,
    render_config_template,
)

# ###############
# Public Interface
# ###############


def main() -> None:
    """Run the idlkit CLI."""
    parser = argparse.ArgumentParser(
        prog="idlkit",
        description="idlkit: Python client generator for Solana program IDLs",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log generation progress to stderr",
    )
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    # init subcommand
    init_parser = subparsers.add_parser(
        "init",
        help="Create a generator configuration file",
        description=f"Write a {CONFIG_FILE_NAME} template into a directory.",
    )
    init_parser.add_argument(
        "directory",
        nargs="?",
        default=".",
        help="Directory to create the configuration in (default: current directory)",
    )
    init_parser.add_argument(
        "--program-name",
        default=None,
        help="Name of the program (default: name of the directory)",
    )

    # check subcommand
    check_parser = subparsers.add_parser(
        "check",
        help="Check the IDL for errors",
        description="Parse the configured IDL and report semantic and validation issues.",
    )
    check_parser.add_argument(
        "directory",
        nargs="?",
        default=".",
        help=f"Directory containing {CONFIG_FILE_NAME} (default: current directory)",
    )

    # generate subcommand
    generate_parser = subparsers.add_parser(
        "generate",
        help="Generate the Python client package",
        description="Check the configured IDL and write the generated client package.",
    )
    generate_parser.add_argument(
        "directory",
        nargs="?",
        default=".",
        help=f"Directory containing {CONFIG_FILE_NAME} (default: current directory)",
    )

    args = parser.parse_args()
    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    sys.exit(_dispatch(args))


# ################
# Implementation
# ################


def _dispatch(args: argparse.Namespace) -> int:
    """Dispatch to the appropriate subcommand handler."""
    if args.command == "init":
        return _cmd_init(args)
    if args.command == "check":
        return _cmd_check(args)
    if args.command == "generate":
        return _cmd_generate(args)
    return 0


def _cmd_init(args: argparse.Namespace) -> int:
    """Handle the init subcommand."""
    directory = Path(args.directory).resolve()

    if not directory.exists():
        print(f"Error: directory '{directory}' does not exist.", file=sys.stderr)
        return 1

    config_file = directory / CONFIG_FILE_NAME

    if config_file.exists():
        print(
            f"Error: configuration already exists at '{config_file}'.",
            file=sys.stderr,
        )
        return 1

    program_name = args.program_name or directory.name
    config_file.write_text(render_config_template(program_name), encoding="utf-8")
    print(f"Initialized idlkit configuration at '{config_file}'.")
    return 0


def _cmd_check(args: argparse.Namespace) -> int:
    """Handle the check subcommand."""
    loaded = _load(Path(args.directory))
    if loaded is None:
        return 1
    _, config, idl = loaded

    print(f"Checking IDL of '{config.program_name}'...")
    if not _report_issues(idl, config):
        return 1

    print("No issues found.")
    return 0


def _cmd_generate(args: argparse.Namespace) -> int:
    """Handle the generate subcommand."""
    loaded = _load(Path(args.directory))
    if loaded is None:
        return 1
    directory, config, idl = loaded

    if not _report_issues(idl, config):
        return 1

    program_address = config.program_id or idl.address
    if config.enhance_idl:
        try:
            if enhance_idl(directory / config.idl_path, program_address, config.idl_generator):
                print(f"Updated metadata of '{config.idl_path}'.")
        except IdlParseError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return 1

    context = RenderContext.for_idl(
        idl,
        program_address=program_address,
        known_addresses=config.known_addresses,
        type_aliases=config.type_aliases,
        serializers=config.serializers,
    )
    context = dataclasses.replace(context, dialect=config.idl_generator)

    print(f"Generating client for '{config.program_name}'...")
    try:
        program = generate(idl, context, fail_fast=not config.continue_on_error)
    except GenerationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    output_dir = directory / config.output_directory
    try:
        written = write_program(program, output_dir)
    except CompilerError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    for name, failure in program.failures.items():
        print(f"Error: skipped '{name}': {failure}", file=sys.stderr)

    print(f"Wrote {len(written)} file(s) to '{output_dir}'.")
    return 1 if program.failures else 0


def _load(directory: Path) -> tuple[Path, GeneratorConfig, Idl] | None:
    """Load the configuration and the IDL it points to, printing any error."""
    directory = directory.resolve()

    if not directory.exists():
        print(f"Error: directory '{directory}' does not exist.", file=sys.stderr)
        return None

    config_file = directory / CONFIG_FILE_NAME
    if not config_file.exists():
        print(
            f"Error: no idlkit configuration found at '{directory}'. Run 'idlkit init' to create one.",
            file=sys.stderr,
        )
        return None

    try:
        config = load_generator_config(config_file)
        idl = read_idl(directory / config.idl_path)
    except (ConfigError, IdlParseError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return None
    return directory, config, idl


def _report_issues(idl: Idl, config: GeneratorConfig) -> bool:
    """Print semantic and validation issues; return False if any is fatal."""
    semantic_errors = analyze(idl, type_aliases=config.type_aliases)
    for error in semantic_errors:
        print(f"Error: {error.message}", file=sys.stderr)
    if semantic_errors:
        return False

    result = validate(idl)
    for warning in result.warnings:
        print(f"Warning: {warning.message}")
    accounts = {account.name for account in idl.accounts}
    for name in config.serializers:
        if name not in accounts:
            print(f"Warning: Serializer configured for unknown account '{name}'.")
    for validation_error in result.errors:
        print(f"Error: {validation_error.message}", file=sys.stderr)
    return not result.has_errors
