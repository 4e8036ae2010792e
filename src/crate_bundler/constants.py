# src/crate_bundler/constants.py
"""
Central constants used across the project.
"""

# --- env keys ---
DEFAULT_ENV_LOG_LEVEL: str = "LOG_LEVEL"
DEFAULT_ENV_WATCH_INTERVAL: str = "WATCH_INTERVAL"

# --- config defaults ---
DEFAULT_STRICT_CONFIG: bool = True
DEFAULT_LOG_LEVEL: str = "info"
DEFAULT_SRC_DIR: str = "src"
DEFAULT_BIN_FILE: str = "src/bin/main.rs"
DEFAULT_OUT_FILE: str = "main-bundle.rs"
DEFAULT_ONE_LINE: bool = False
DEFAULT_WATCH_INTERVAL: float = 1.0  # seconds
DEFAULT_HINT_CUTOFF: float = 0.6

# --- crate layout ---
LIB_ROOT_NAME: str = "lib"
MODULE_EXT: str = ".rs"
MODULE_INDEX_FILE: str = "mod.rs"
CARGO_MANIFEST: str = "Cargo.toml"

# --- output ---
INDENT: str = "\t"
TEST_MODULE_MARKER: str = "tests"
PATH_ROOT_TOKEN: str = "crate::"
