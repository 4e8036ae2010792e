# src/crate_bundler/__init__.py

"""Crate Bundler — fold a multi-file Rust crate into one source file.

Full developer API
==================
This package re-exports all non-private symbols from its submodules,
making it suitable for programmatic use, custom integrations, or plugins.
Anything prefixed with "_" is considered internal and may change.

Highlights:
    - main()              → CLI entrypoint
    - Bundler             → Inline a crate and write the bundle
    - resolve_config()    → Merge CLI args with config files
    - get_metadata()      → Retrieve version / commit info
"""

from .actions import (
    get_metadata,
    run_selftest,
    watch_for_changes,
)
from .buffer import OutputBuffer
from .bundler import BundleResult, Bundler
from .cargo import crate_name_from_manifest, find_crate_name
from .cli import (
    main,
)
from .config import (
    determine_log_level,
    find_config,
    load_and_validate_config,
    load_config,
    parse_config,
)
from .config_resolve import resolve_config
from .config_validate import ValidationSummary, validate_config
from .constants import (
    DEFAULT_BIN_FILE,
    DEFAULT_LOG_LEVEL,
    DEFAULT_ONE_LINE,
    DEFAULT_OUT_FILE,
    DEFAULT_SRC_DIR,
    DEFAULT_STRICT_CONFIG,
    DEFAULT_WATCH_INTERVAL,
)
from .logs import (
    LEVEL_ORDER,
    RESET,
    colorize,
    get_logger,
)
from .meta import (
    PROGRAM_DISPLAY,
    PROGRAM_ENV,
    PROGRAM_PACKAGE,
    PROGRAM_SCRIPT,
    Metadata,
)
from .resolver import ModuleNotFoundInTreeError, resolve_module
from .runtime import Runtime, current_runtime
from .transform import (
    find_block_range,
    find_test_blocks,
    minify,
    prune_test_blocks,
    rewrite_path_qualifiers,
)
from .types import (
    BundleConfig,
    BundleConfigInput,
    MetaBundleConfig,
    OriginType,
)
from .utils import (
    load_jsonc,
    read_source_lines,
    should_use_color,
)


__all__ = [  # noqa: RUF022
    # --- CLI / Actions ---
    "get_metadata",  # version info
    "main",
    "run_selftest",
    "watch_for_changes",
    #
    # --- Bundling Engine ---
    "BundleResult",
    "Bundler",
    "ModuleNotFoundInTreeError",
    "OutputBuffer",
    "find_block_range",
    "find_test_blocks",
    "minify",
    "prune_test_blocks",
    "resolve_module",
    "rewrite_path_qualifiers",
    #
    # --- Config Handling ---
    "crate_name_from_manifest",
    "determine_log_level",
    "find_config",
    "find_crate_name",
    "load_and_validate_config",
    "load_config",
    "parse_config",
    "resolve_config",
    "validate_config",
    "ValidationSummary",
    #
    # --- Constants / Metadata / Runtime ---
    "DEFAULT_BIN_FILE",
    "DEFAULT_LOG_LEVEL",
    "DEFAULT_ONE_LINE",
    "DEFAULT_OUT_FILE",
    "DEFAULT_SRC_DIR",
    "DEFAULT_STRICT_CONFIG",
    "DEFAULT_WATCH_INTERVAL",
    "Metadata",
    "PROGRAM_DISPLAY",
    "PROGRAM_ENV",
    "PROGRAM_PACKAGE",
    "PROGRAM_SCRIPT",
    "current_runtime",
    #
    # --- utils ---
    "LEVEL_ORDER",
    "RESET",
    "colorize",
    "get_logger",
    "load_jsonc",
    "read_source_lines",
    "should_use_color",
    #
    # --- Types ---
    "BundleConfig",
    "BundleConfigInput",
    "MetaBundleConfig",
    "OriginType",
    "Runtime",
]
