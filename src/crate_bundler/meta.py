# src/crate_bundler/meta.py

"""Centralized program identity constants for Crate Bundler."""

from typing import NamedTuple

_BASE = "crate-bundler"

# CLI script name (the executable or `poetry run` entrypoint)
PROGRAM_SCRIPT = _BASE

# Human-readable name for banners, help text, etc.
PROGRAM_DISPLAY = _BASE.replace("-", " ").title()

# Python package / import name
PROGRAM_PACKAGE = _BASE.replace("-", "_")

# Environment variable prefix (used for CRATE_BUNDLER_LOG_LEVEL, etc.)
PROGRAM_ENV = _BASE.replace("-", "_").upper()

# Short tagline or description for help screens and metadata
DESCRIPTION = "Bundle a multi-file Rust crate into one self-contained source file."


class Metadata(NamedTuple):
    version: str
    commit: str
