# src/crate_bundler/types.py
from __future__ import annotations

from pathlib import Path
from typing import Literal, TypedDict

from typing_extensions import NotRequired

OriginType = Literal["cli", "config", "cargo", "default", "code", "test"]


class MetaBundleConfig(TypedDict):
    # sources of parameters
    cli_root: Path
    config_root: Path
    crate_name_origin: OriginType


class BundleConfigInput(TypedDict, total=False):
    crate_name: str
    src_dir: str
    bin: str
    out: str
    banner: str | None
    one_line: bool

    # runtime behavior
    log_level: str
    strict_config: bool
    watch_interval: float


class BundleConfig(TypedDict):
    crate_name: str  # wrapper module name, also used for `crate::` rewriting
    src_dir: Path  # directory holding lib.rs (or lib/mod.rs)
    bin: Path  # entry point appended after the library block
    out: Path
    banner: NotRequired[Path | None]
    one_line: bool

    log_level: str
    watch_interval: float

    # runtime flag (CLI only, not persisted in normal configs)
    dry_run: bool

    # provenance (optional, for audit/debug)
    __meta__: MetaBundleConfig
