# src/crate_bundler/config.py


import argparse
import os
import sys
import traceback
from pathlib import Path
from typing import Any, cast

from .config_validate import ValidationSummary, validate_config
from .constants import DEFAULT_ENV_LOG_LEVEL, DEFAULT_LOG_LEVEL
from .logs import get_logger, set_log_level
from .meta import PROGRAM_ENV, PROGRAM_SCRIPT
from .types import BundleConfigInput
from .utils import cast_hint, load_jsonc, plural, remove_path_in_error_message


def determine_log_level(
    args: argparse.Namespace,
    config_log_level: str | None = None,
) -> str:
    """Resolve log level from CLI → env → config → default."""
    if getattr(args, "log_level", None):
        return cast_hint(str, args.log_level)

    env_log_level = os.getenv(f"{PROGRAM_ENV}_{DEFAULT_ENV_LOG_LEVEL}") or os.getenv(
        DEFAULT_ENV_LOG_LEVEL
    )
    if env_log_level:
        return env_log_level

    if config_log_level:
        return config_log_level

    return DEFAULT_LOG_LEVEL


def find_config(
    args: argparse.Namespace,
    cwd: Path,
    *,
    missing_level: str = "debug",
) -> Path | None:
    """Locate a configuration file.

    missing_level: log-level for failing to find a configuration file.

    Search order:
      1. Explicit path from CLI (--config)
      2. Default candidates in the current working directory:
         .{PROGRAM_SCRIPT}.py, .{PROGRAM_SCRIPT}.jsonc, .{PROGRAM_SCRIPT}.json

    Returns the first matching path, or None if no config was found.
    """
    logger = get_logger()

    # --- 1. Explicit config path ---
    if getattr(args, "config", None):
        config = Path(args.config).expanduser().resolve()
        if not config.exists():
            # Explicit path → hard failure
            xmsg = f"Specified config file not found: {config}"
            raise FileNotFoundError(xmsg)
        if config.is_dir():
            xmsg = f"Specified config path is a directory, not a file: {config}"
            raise ValueError(xmsg)
        return config

    # --- 2. Default candidate files ---
    candidates: list[Path] = [
        cwd / f".{PROGRAM_SCRIPT}.py",
        cwd / f".{PROGRAM_SCRIPT}.jsonc",
        cwd / f".{PROGRAM_SCRIPT}.json",
    ]
    found = [p for p in candidates if p.exists()]

    if not found:
        # CLI flags and defaults are enough to run
        getattr(logger, missing_level)("No config file found in %s", cwd)
        return None

    # --- 3. Handle multiple matches ---
    if len(found) > 1:
        names = ", ".join(p.name for p in found)
        logger.warning(
            "Multiple config files detected (%s); using %s.", names, found[0].name
        )
    return found[0]


def load_config(config_path: Path) -> dict[str, Any] | list[Any] | None:
    """Load configuration data from a file.

    Supports:
      - Python configs: .py files exporting `config`
      - JSON/JSONC configs: .json, .jsonc files

    Returns:
        The raw object defined in the config (dict, list, or None).
        Returns None for intentionally empty configs
          (e.g. empty files or `config = None`).

    Raises:
        ValueError if a .py config does not define `config`.

    """
    logger = get_logger()

    # --- Python config ---
    if config_path.suffix == ".py":
        config_globals: dict[str, Any] = {}

        # Allow local imports in Python configs (e.g. from ./helpers import foo)
        parent_dir = str(config_path.parent)
        added_to_sys_path = parent_dir not in sys.path
        if added_to_sys_path:
            sys.path.insert(0, parent_dir)

        try:
            source = config_path.read_text(encoding="utf-8")
            exec(compile(source, str(config_path), "exec"), config_globals)  # noqa: S102
            logger.trace("[EXEC] globals after exec: %s", list(config_globals.keys()))
        except Exception as e:
            tb = traceback.format_exc()
            xmsg = (
                f"Error while executing Python config: {config_path.name}\n"
                f"{type(e).__name__}: {e}\n{tb}"
            )
            # Raise a generic runtime error for main() to catch and print cleanly
            raise RuntimeError(xmsg) from e
        finally:
            # Only remove if we actually inserted it
            if added_to_sys_path and sys.path[0] == parent_dir:
                sys.path.pop(0)

        if "config" in config_globals:
            result = config_globals["config"]
            if not isinstance(result, (dict, type(None))):
                xmsg = (
                    f"config in {config_path.name} must be a dict or None"
                    f", not {type(result).__name__}"
                )
                raise TypeError(xmsg)
            return cast("dict[str, Any] | None", result)

        xmsg = f"{config_path.name} did not define `config`"
        raise ValueError(xmsg)

    # JSONC / JSON fallback
    try:
        return load_jsonc(config_path)
    except ValueError as e:
        clean_msg = remove_path_in_error_message(str(e), config_path)
        xmsg = (
            f"Error while loading configuration file '{config_path.name}': {clean_msg}"
        )
        raise ValueError(xmsg) from e


def parse_config(
    raw_config: dict[str, Any] | list[Any] | None,
) -> dict[str, Any] | None:
    """Normalize user config into a flat dict (no filesystem work).

    Accepted forms:
      - None / {}                 → no config
      - {...}                     → bundle options
      - {"bundle": {...}, ...}    → bundle options nested under `bundle`,
                                    other root keys merged in

    Unknown keys are preserved for the validation phase.
    """
    if not raw_config:  # handles None, [], {}
        return None

    if not isinstance(raw_config, dict):
        xmsg = (
            f"Invalid top-level value: {type(raw_config).__name__} "
            "(expected an object with named keys)"
        )
        raise TypeError(xmsg)

    bundle_val = raw_config.get("bundle")
    if bundle_val is None:
        return dict(raw_config)

    if not isinstance(bundle_val, dict):
        xmsg = f"`bundle` must be an object, not {type(bundle_val).__name__}"
        raise TypeError(xmsg)

    root = {k: v for k, v in raw_config.items() if k != "bundle"}
    overlap = root.keys() & bundle_val.keys()
    if overlap:
        get_logger().warning(
            "Key%s %s set both at the root and in `bundle`; using the `bundle` value.",
            plural(overlap),
            ", ".join(sorted(overlap)),
        )
    root.update(bundle_val)
    return root


def _validation_summary(
    summary: ValidationSummary,
    config_path: Path,
) -> None:
    """Pretty-print a validation summary through the logger."""
    logger = get_logger()
    mode = "strict mode" if summary.strict else "lenient mode"

    # --- Build concise counts line ---
    counts: list[str] = []
    if summary.errors:
        counts.append(f"{len(summary.errors)} error{plural(summary.errors)}")
    if summary.strict_warnings:
        counts.append(
            f"{len(summary.strict_warnings)} strict warning"
            f"{plural(summary.strict_warnings)}",
        )
    if summary.warnings:
        counts.append(
            f"{len(summary.warnings)} normal warning{plural(summary.warnings)}",
        )
    counts_msg = f"\nFound {', '.join(counts)}." if counts else ""

    # --- Header (single icon) ---
    if not summary.valid:
        logger.error(
            "Failed to validate configuration file %s (%s).%s",
            config_path.name,
            mode,
            counts_msg,
        )
    elif counts:
        logger.warning(
            "Validated configuration file %s (%s) with warnings.%s",
            config_path.name,
            mode,
            counts_msg,
        )
    else:
        logger.debug("Validated %s (%s) successfully.", config_path.name, mode)

    # --- Detailed sections ---
    if summary.errors:
        logger.error("\nErrors:\n  • %s", "\n  • ".join(summary.errors))
    if summary.strict_warnings:
        logger.error(
            "\nStrict warnings (treated as errors):\n  • %s",
            "\n  • ".join(summary.strict_warnings),
        )
    if summary.warnings:
        logger.warning(
            "\nWarnings (non-fatal):\n  • %s", "\n  • ".join(summary.warnings)
        )


def load_and_validate_config(
    args: argparse.Namespace,
) -> tuple[Path, BundleConfigInput] | None:
    """Find, load, parse, and validate the user's configuration.

    Also determines the effective log level (from CLI/env/config/default)
    early, so logging can initialize as soon as possible.

    Returns:
        (config_path, config) if a config file was found and valid,
        or None if no config was found.

    """
    # --- initialize logging without config ---
    set_log_level(determine_log_level(args))

    cwd = Path.cwd().resolve()
    config_path = find_config(args, cwd)
    if config_path is None:
        return None

    raw_config = load_config(config_path)
    if raw_config is None:
        return None

    try:
        parsed_cfg = parse_config(raw_config)
    except TypeError as e:
        xmsg = f"Could not parse config {config_path.name}: {e}"
        raise TypeError(xmsg) from e
    if parsed_cfg is None:
        return None

    # --- Early peek for log_level before validating ---
    raw_log_level = parsed_cfg.get("log_level")
    if isinstance(raw_log_level, str) and raw_log_level:
        set_log_level(determine_log_level(args, raw_log_level))

    validation_result = validate_config(parsed_cfg)
    _validation_summary(validation_result, config_path)
    if not validation_result.valid:
        xmsg = f"Configuration file {config_path.name} contains validation errors."
        exception = ValueError(xmsg)
        exception.silent = True  # type: ignore[attr-defined]
        exception.data = validation_result  # type: ignore[attr-defined]
        raise exception

    return config_path, cast_hint(BundleConfigInput, parsed_cfg)
