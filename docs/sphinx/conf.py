# Copyright 2026 idlkit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Sphinx configuration for the idlkit API reference."""

project = "idlkit"
author = "idlkit Contributors"
release = "0.1.0"

extensions: list[str] = ["sphinx.ext.autodoc", "sphinx.ext.napoleon"]

# Docstrings follow the Google style.
napoleon_google_docstring = True
napoleon_numpy_docstring = False
autodoc_member_order = "bysource"
autodoc_typehints = "description"

html_theme = "alabaster"
