# Copyright 2026 idlkit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Generator configuration for idlkit."""

from idlkit.workspace.config import (
    CONFIG_FILE_NAME,
    ConfigError,
    GeneratorConfig,
    load_generator_config,
    render_config_template,
)

__all__ = [
    "CONFIG_FILE_NAME",
    "ConfigError",
    "GeneratorConfig",
    "load_generator_config",
    "render_config_template",
]
