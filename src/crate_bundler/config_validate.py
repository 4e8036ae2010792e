# src/crate_bundler/config_validate.py

from dataclasses import dataclass
from difflib import get_close_matches
from typing import Any

from .constants import DEFAULT_HINT_CUTOFF, DEFAULT_STRICT_CONFIG
from .logs import LEVEL_ORDER
from .types import BundleConfigInput
from .utils import plural

# --- dataclasses ------------------------------------------------------


@dataclass
class ValidationSummary:
    valid: bool
    errors: list[str]
    strict_warnings: list[str]
    warnings: list[str]
    strict: bool


# --- constants ------------------------------------------------------

CONFIG_SCHEMA: dict[str, tuple[type, ...]] = {
    "crate_name": (str,),
    "src_dir": (str,),
    "bin": (str,),
    "out": (str,),
    "banner": (str, type(None)),
    "one_line": (bool,),
    "log_level": (str,),
    "strict_config": (bool,),
    "watch_interval": (int, float),
}

# sanity check
assert set(CONFIG_SCHEMA) == set(BundleConfigInput.__annotations__), (  # noqa: S101
    "CONFIG_SCHEMA out of sync with BundleConfigInput"
)

DRYRUN_KEYS = {"dry-run", "dry_run", "dryrun", "no-op", "no_op", "noop"}
DRYRUN_MSG = (
    "Ignored config key(s) {keys}: this tool has no config option for it. "
    "Use the CLI flag '--dry-run' instead."
)


# --- helpers --------------------------------------------------------


def collect_msg(
    strict: bool,
    msg: str,
    summary: ValidationSummary,  # modified in function, not returned
    *,
    is_error: bool = False,
) -> None:
    """
    Route a message to the appropriate bucket.
    Errors are always fatal.
    Warnings may escalate to strict_warnings in strict mode.
    """
    if is_error:
        summary.errors.append(msg)
    elif strict:
        summary.strict_warnings.append(msg)
    else:
        summary.warnings.append(msg)


def _type_label(types: tuple[type, ...]) -> str:
    return " | ".join("null" if t is type(None) else t.__name__ for t in types)


def _check_value(key: str, val: Any, summary: ValidationSummary) -> None:
    expected = CONFIG_SCHEMA[key]
    # bool is an int subclass; only accept it where bool is expected
    type_ok = isinstance(val, expected) and (
        bool in expected or not isinstance(val, bool)
    )
    if not type_ok:
        collect_msg(
            True,
            f"key `{key}` expected {_type_label(expected)}, got {type(val).__name__}",
            summary,
            is_error=True,
        )
        return

    if key == "log_level" and val.lower() not in LEVEL_ORDER:
        collect_msg(
            True,
            f"key `log_level` must be one of {', '.join(LEVEL_ORDER)}, got {val!r}",
            summary,
            is_error=True,
        )
    elif key == "crate_name" and not val.isidentifier():
        collect_msg(
            True,
            f"key `crate_name` must be a valid identifier, got {val!r}",
            summary,
            is_error=True,
        )
    elif key == "watch_interval" and val <= 0:
        collect_msg(
            True,
            f"key `watch_interval` must be positive, got {val!r}",
            summary,
            is_error=True,
        )


# ---------------------------------------------------------------------------
# main validator
# ---------------------------------------------------------------------------


def validate_config(
    parsed_cfg: dict[str, Any], *, strict: bool | None = None
) -> ValidationSummary:
    """Validate a parsed config dict.

    strict=True  →  warnings become fatal, but still listed separately
    strict=False →  warnings remain non-fatal
    strict=None  →  use the config's own `strict_config` (default strict)
    """
    summary = ValidationSummary(
        valid=True,
        errors=[],
        strict_warnings=[],
        warnings=[],
        strict=DEFAULT_STRICT_CONFIG,
    )

    strict_from_cfg: Any = parsed_cfg.get("strict_config")
    if strict is not None:
        summary.strict = strict
    elif isinstance(strict_from_cfg, bool):
        summary.strict = strict_from_cfg

    # --- dry-run keys get their own message ---
    cfg_keys_lower = {k.lower(): k for k in parsed_cfg}
    dry_found = sorted(cfg_keys_lower[k] for k in DRYRUN_KEYS & cfg_keys_lower.keys())
    if dry_found:
        collect_msg(
            summary.strict,
            DRYRUN_MSG.format(keys=", ".join(f"`{k}`" for k in dry_found)),
            summary,
        )

    # --- known keys ---
    for key in CONFIG_SCHEMA:
        if key in parsed_cfg:
            _check_value(key, parsed_cfg[key], summary)

    # --- unknown keys ---
    unknown = [k for k in parsed_cfg if k not in CONFIG_SCHEMA and k not in dry_found]
    if unknown:
        joined = ", ".join(f"`{u}`" for u in unknown)
        msg = f"Unknown key{plural(unknown)} {joined} in configuration."

        hints: list[str] = []
        for k in unknown:
            close = get_close_matches(k, CONFIG_SCHEMA, n=1, cutoff=DEFAULT_HINT_CUTOFF)
            if close:
                hints.append(f"'{k}' → '{close[0]}'")
        if hints:
            msg += "\nHint: did you mean " + ", ".join(hints) + "?"
        collect_msg(summary.strict, msg, summary)

    summary.valid = not summary.errors and not summary.strict_warnings
    return summary
