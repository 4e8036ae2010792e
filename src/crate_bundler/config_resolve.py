# src/crate_bundler/config_resolve.py


import argparse
import os
from pathlib import Path
from typing import Any

from .cargo import find_crate_name
from .config import determine_log_level
from .constants import (
    CARGO_MANIFEST,
    DEFAULT_BIN_FILE,
    DEFAULT_ENV_WATCH_INTERVAL,
    DEFAULT_ONE_LINE,
    DEFAULT_OUT_FILE,
    DEFAULT_SRC_DIR,
    DEFAULT_WATCH_INTERVAL,
)
from .logs import get_logger, set_log_level
from .meta import PROGRAM_ENV
from .types import (
    BundleConfig,
    BundleConfigInput,
    MetaBundleConfig,
    OriginType,
)

# --------------------------------------------------------------------------- #
# helpers
# --------------------------------------------------------------------------- #


def _resolve_path(raw: Path | str, context_root: Path) -> Path:
    """Absolute paths stay as-is; relative ones hang off context_root."""
    path = Path(raw).expanduser()
    resolved = path if path.is_absolute() else context_root / path
    get_logger().trace("Normalized: raw=%r → %s", raw, resolved)
    return resolved


def _pick_path(
    key: str,
    args: argparse.Namespace,
    cfg: dict[str, Any],
    default: str,
    *,
    config_dir: Path,
    cwd: Path,
) -> Path:
    """CLI (relative to cwd) → config (relative to config dir) → default."""
    cli_val = getattr(args, key, None)
    if cli_val:
        return _resolve_path(cli_val, cwd)
    if cfg.get(key):
        return _resolve_path(cfg[key], config_dir)
    return _resolve_path(default, config_dir)


def _resolve_watch_interval(args: argparse.Namespace, cfg: dict[str, Any]) -> float:
    """CLI → env → config → default."""
    logger = get_logger()
    cli_val = getattr(args, "watch", None)
    if cli_val is not None:
        return float(cli_val)

    env_val = os.getenv(f"{PROGRAM_ENV}_{DEFAULT_ENV_WATCH_INTERVAL}") or os.getenv(
        DEFAULT_ENV_WATCH_INTERVAL
    )
    if env_val:
        try:
            return float(env_val)
        except ValueError:
            logger.warning(
                "Invalid %s=%r, using default.", DEFAULT_ENV_WATCH_INTERVAL, env_val
            )

    if "watch_interval" in cfg:
        return float(cfg["watch_interval"])
    return DEFAULT_WATCH_INTERVAL


def _resolve_crate_name(
    args: argparse.Namespace,
    cfg: dict[str, Any],
    config_dir: Path,
    cwd: Path,
) -> tuple[str, OriginType]:
    cli_val = getattr(args, "crate_name", None)
    if cli_val:
        return str(cli_val), "cli"
    if cfg.get("crate_name"):
        return str(cfg["crate_name"]), "config"

    name = find_crate_name(config_dir, cwd)
    if name:
        return name, "cargo"

    xmsg = (
        "Could not determine the crate name: pass --crate-name, set `crate_name`"
        f" in the config, or run next to a {CARGO_MANIFEST}."
    )
    raise ValueError(xmsg)


# --------------------------------------------------------------------------- #
# main resolver
# --------------------------------------------------------------------------- #


def resolve_config(
    cfg_input: BundleConfigInput | None,
    args: argparse.Namespace,
    config_dir: Path,
    cwd: Path,
) -> BundleConfig:
    """Merge CLI args, config file values and defaults into a BundleConfig."""
    logger = get_logger()
    cfg: dict[str, Any] = dict(cfg_input or {})

    crate_name, crate_name_origin = _resolve_crate_name(args, cfg, config_dir, cwd)
    if not crate_name.isidentifier():
        xmsg = f"Invalid crate name {crate_name!r}: must be a valid identifier"
        raise ValueError(xmsg)

    meta: MetaBundleConfig = {
        "cli_root": cwd,
        "config_root": config_dir,
        "crate_name_origin": crate_name_origin,
    }

    paths = {"config_dir": config_dir, "cwd": cwd}
    src_dir = _pick_path("src_dir", args, cfg, DEFAULT_SRC_DIR, **paths)
    bin_file = _pick_path("bin", args, cfg, DEFAULT_BIN_FILE, **paths)
    out_file = _pick_path("out", args, cfg, DEFAULT_OUT_FILE, **paths)

    banner: Path | None = None
    if getattr(args, "banner", None):
        banner = _resolve_path(args.banner, cwd)
    elif cfg.get("banner"):
        banner = _resolve_path(cfg["banner"], config_dir)

    one_line: bool = DEFAULT_ONE_LINE
    if getattr(args, "one_line", None) is not None:
        one_line = bool(args.one_line)
    elif "one_line" in cfg:
        one_line = bool(cfg["one_line"])

    log_level = determine_log_level(args, cfg.get("log_level"))
    set_log_level(log_level)

    resolved: BundleConfig = {
        "crate_name": crate_name,
        "src_dir": src_dir,
        "bin": bin_file,
        "out": out_file,
        "banner": banner,
        "one_line": one_line,
        "log_level": log_level,
        "watch_interval": _resolve_watch_interval(args, cfg),
        "dry_run": bool(getattr(args, "dry_run", False)),
        "__meta__": meta,
    }
    logger.trace("[RESOLVE] %s", resolved)
    return resolved
