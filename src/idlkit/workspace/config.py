# Copyright 2026 idlkit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Data model and YAML parser for the idlkit generator configuration file."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml

from idlkit.model.entities import Dialect

# ###############
# Public Interface
# ###############

CONFIG_FILE_NAME = ".idlkit.yaml"


class ConfigError(Exception):
    """Raised when a generator configuration file is invalid or cannot be loaded."""


@dataclass
class GeneratorConfig:
    """The parsed configuration for generating one program client.

    Attributes:
        program_name: Name of the program; used in log and status output.
        idl_path: Path of the IDL file, relative to the config directory.
        output_directory: Directory of the generated package, relative to the
            config directory.
        idl_generator: The tool that produced the IDL.
        program_id: Base58 program address; overrides the IDL metadata.
        known_addresses: Account name to base58 address used as default for
            instruction accounts of that name.
        type_aliases: Defined type name to the primitive type it stands for.
        serializers: Account name to the dotted module path of a hand-written
            serializer used instead of the generated codec.
        continue_on_error: Keep generating the remaining entities when one fails.
        enhance_idl: Record the program address and origin in the IDL file.
    """

    program_name: str
    idl_path: str
    output_directory: str
    idl_generator: Dialect = Dialect.ANCHOR
    program_id: str | None = None
    known_addresses: dict[str, str] = field(default_factory=dict)
    type_aliases: dict[str, str] = field(default_factory=dict)
    serializers: dict[str, str] = field(default_factory=dict)
    continue_on_error: bool = False
    enhance_idl: bool = True


def load_generator_config(path: Path) -> GeneratorConfig:
    """Load and parse an idlkit generator configuration file.

    Args:
        path: Path to the `.idlkit.yaml` file.

    Returns:
        A GeneratorConfig instance populated from the file.

    Raises:
        ConfigError: If the file cannot be read or the configuration is invalid.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise ConfigError(f"Generator config file not found: {path}") from None
    except OSError as exc:
        raise ConfigError(f"Cannot read generator config file: {exc}") from exc

    return _parse_generator_config(text, source_label=str(path))


def render_config_template(program_name: str) -> str:
    """Return the content of a fresh configuration file for *program_name*."""
    return (
        "# idlkit generator configuration\n"
        "\n"
        f"program-name: {program_name}\n"
        f"idl-path: idl/{program_name}.json\n"
        "output-directory: generated\n"
        "idl-generator: anchor\n"
        "# program-id: <base58 address>\n"
        "# known-addresses:\n"
        "#   fee_vault: <base58 address>\n"
        "# type-aliases:\n"
        "#   UnixTimestamp: i64\n"
        "# serializers:\n"
        "#   Vault: my_project.serializers.vault\n"
    )


# ################
# Implementation
# ################


def _parse_generator_config(text: str, source_label: str = "<string>") -> GeneratorConfig:
    """Parse generator config YAML text into a GeneratorConfig.

    Args:
        text: Raw YAML content.
        source_label: Human-readable label used in error messages (e.g. the file path).

    Returns:
        A GeneratorConfig instance.

    Raises:
        ConfigError: If the YAML is invalid or required fields are missing.
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {source_label}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError(f"{source_label}: generator config must be a YAML mapping")

    config = GeneratorConfig(
        program_name=_require_string(data, "program-name", source_label),
        idl_path=_require_string(data, "idl-path", source_label),
        output_directory=_require_string(data, "output-directory", source_label),
    )

    if "idl-generator" in data:
        generator = _require_string(data, "idl-generator", source_label)
        try:
            config.idl_generator = Dialect(generator)
        except ValueError:
            choices = ", ".join(d.value for d in Dialect)
            raise ConfigError(f"{source_label}: 'idl-generator' must be one of {choices}, got '{generator}'") from None

    if data.get("program-id") is not None:
        config.program_id = _address(data["program-id"], "program-id", source_label)

    for name, address in _mapping(data, "known-addresses", source_label).items():
        if not isinstance(name, str):
            raise ConfigError(f"{source_label}: 'known-addresses' keys must be account names")
        config.known_addresses[name] = _address(address, f"known-addresses.{name}", source_label)
    config.type_aliases = _string_mapping(data, "type-aliases", source_label)
    config.serializers = _string_mapping(data, "serializers", source_label)
    for name, module in config.serializers.items():
        if not all(part.isidentifier() for part in module.split(".")):
            raise ConfigError(f"{source_label}: serializer of '{name}' must be a dotted module path, got '{module}'")
    config.continue_on_error = _optional_bool(data, "continue-on-error", False, source_label)
    config.enhance_idl = _optional_bool(data, "enhance-idl", True, source_label)
    return config


def _require_string(mapping: dict[str, object], key: str, source_label: str) -> str:
    """Extract a required string field from a mapping, raising ConfigError if missing."""
    if key not in mapping:
        raise ConfigError(f"{source_label}: missing required field '{key}'")
    value = mapping[key]
    if not isinstance(value, str):
        raise ConfigError(f"{source_label}: '{key}' must be a string")
    return value


def _mapping(mapping: dict[str, object], key: str, source_label: str) -> dict[object, object]:
    """Extract an optional mapping."""
    value = mapping.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"{source_label}: '{key}' must be a YAML mapping")
    return value


def _string_mapping(mapping: dict[str, object], key: str, source_label: str) -> dict[str, str]:
    """Extract an optional mapping of strings to strings."""
    result: dict[str, str] = {}
    for name, item in _mapping(mapping, key, source_label).items():
        if not isinstance(name, str) or not isinstance(item, str):
            raise ConfigError(f"{source_label}: '{key}' entries must map strings to strings")
        result[name] = item
    return result


def _address(value: object, key: str, source_label: str) -> str:
    """Return a base58 address; YAML reads all-digit addresses such as the system program as integers."""
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    if not isinstance(value, str):
        raise ConfigError(f"{source_label}: '{key}' must be a base58 address")
    return value


def _optional_bool(mapping: dict[str, object], key: str, default: bool, source_label: str) -> bool:
    value = mapping.get(key, default)
    if not isinstance(value, bool):
        raise ConfigError(f"{source_label}: '{key}' must be true or false")
    return value
