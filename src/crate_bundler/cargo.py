# src/crate_bundler/cargo.py

from pathlib import Path
from typing import Any

try:
    import tomllib  # Python 3.11+
except ImportError:  # pragma: no cover
    import tomli as tomllib  # type: ignore[no-redef]

from .constants import CARGO_MANIFEST
from .logs import get_logger


def _table_name(manifest: dict[str, Any], table: str) -> str | None:
    section = manifest.get(table)
    if not isinstance(section, dict):
        return None
    name = section.get("name")
    return name if isinstance(name, str) and name else None


def crate_name_from_manifest(manifest: Path) -> str | None:
    """Read the library crate name from a Cargo.toml.

    Uses `[lib] name` when set, otherwise `[package] name` with dashes
    turned into underscores, which is how cargo names the library crate.
    """
    logger = get_logger()
    if not manifest.is_file():
        logger.trace("[CARGO] no manifest at %s", manifest)
        return None

    try:
        with manifest.open("rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        xmsg = f"Invalid TOML in {manifest}: {e}"
        raise ValueError(xmsg) from e

    name = _table_name(data, "lib") or _table_name(data, "package")
    if name is None:
        logger.debug("No crate name found in %s", manifest)
        return None

    crate_name = name.replace("-", "_")
    logger.trace("[CARGO] crate name from %s: %s", manifest, crate_name)
    return crate_name


def find_crate_name(*roots: Path) -> str | None:
    """Try the Cargo.toml in each root directory, first hit wins."""
    for root in roots:
        name = crate_name_from_manifest(root / CARGO_MANIFEST)
        if name:
            return name
    return None
