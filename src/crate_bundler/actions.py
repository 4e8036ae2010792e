# src/crate_bundler/actions.py
import re
import shutil
import subprocess
import tempfile
import time
from collections.abc import Callable
from contextlib import suppress
from pathlib import Path

from .bundler import Bundler
from .constants import DEFAULT_WATCH_INTERVAL, MODULE_EXT
from .logs import get_logger
from .meta import PROGRAM_DISPLAY, PROGRAM_SCRIPT, Metadata
from .types import BundleConfig


def _collect_watched_files(cfg: BundleConfig) -> list[Path]:
    """Every source file that can change the bundle's output."""
    files: set[Path] = set()

    src_dir = cfg["src_dir"]
    if src_dir.is_dir():
        files.update(p.resolve() for p in src_dir.rglob(f"*{MODULE_EXT}") if p.is_file())

    for extra in (cfg["bin"], cfg.get("banner")):
        if extra is not None and extra.is_file():
            files.add(extra.resolve())

    out = cfg["out"].resolve()
    files.discard(out)
    return sorted(files)


def watch_for_changes(
    rebuild_func: Callable[[], None],
    cfg: BundleConfig,
    interval: float = DEFAULT_WATCH_INTERVAL,
) -> None:
    """Poll file modification times and rebundle when changes are detected.

    Features:
    - Never watches the output file itself.
    - Re-scans the source directory every loop to detect new modules.
    - Keeps watching after a failed rebuild.
    Stops on KeyboardInterrupt.
    """
    logger = get_logger()
    logger.info(
        "👀 Watching for changes (interval=%.2fs)... Press Ctrl+C to stop.", interval
    )

    watched = _collect_watched_files(cfg)
    logger.trace("[WATCH] initial files: %s", [str(f) for f in watched])
    mtimes: dict[Path, float] = {}
    for f in watched:
        m = _mtime(f)
        if m is not None:
            mtimes[f] = m

    _rebuild_logged(rebuild_func)  # initial build

    try:
        while True:
            time.sleep(interval)

            # 🔁 re-scan every tick so new/removed files are tracked
            watched = _collect_watched_files(cfg)
            changed: list[Path] = [f for f in mtimes if f not in watched]
            for f in changed:
                mtimes.pop(f, None)

            for f in watched:
                new_m = _mtime(f)
                if new_m is None:
                    # deleted since the scan; picked up as removed next tick
                    continue
                old_m = mtimes.get(f)
                if old_m is None or new_m > old_m:
                    changed.append(f)
                    mtimes[f] = new_m

            if changed:
                logger.info(
                    "\n🔁 Detected %d modified file(s). Rebundling...", len(changed)
                )
                _rebuild_logged(rebuild_func)
    except KeyboardInterrupt:
        logger.info("\n🛑 Watch stopped.")


def _mtime(path: Path) -> float | None:
    """Modification time, or None if the file vanished."""
    try:
        return path.stat().st_mtime
    except FileNotFoundError:
        return None


def _rebuild_logged(rebuild_func: Callable[[], None]) -> None:
    """Run one rebuild; report controlled failures without ending the watch."""
    logger = get_logger()
    try:
        rebuild_func()
    except (FileNotFoundError, ValueError, RuntimeError) as e:
        logger.error_if_not_debug(str(e))


def _get_version_from_pyproject(root: Path) -> str:
    pyproject = root / "pyproject.toml"
    if not pyproject.exists():
        return "unknown"
    text = pyproject.read_text(encoding="utf-8")
    match = re.search(r'(?m)^\s*version\s*=\s*["\']([^"\']+)["\']', text)
    return match.group(1) if match else "unknown"


def get_metadata() -> Metadata:
    """Return (version, commit) for this tool.

    Version comes from pyproject.toml, commit from git; either falls back
    to "unknown".
    """
    logger = get_logger()
    root = Path(__file__).resolve().parents[2]

    logger.trace("trying to read metadata from %s", root)
    version = _get_version_from_pyproject(root)
    if version == "unknown":
        with suppress(Exception):
            from importlib.metadata import version as dist_version  # noqa: PLC0415

            version = dist_version(PROGRAM_SCRIPT)

    commit = "unknown"
    with suppress(Exception):
        result = subprocess.run(
            ["git", "rev-parse", "--short", "HEAD"],  # noqa: S607
            cwd=root,
            capture_output=True,
            text=True,
            check=True,
        )
        commit = result.stdout.strip() or "unknown"

    logger.trace("got package version %s with commit %s", version, commit)
    return Metadata(version, commit)


_SELFTEST_FILES = {
    "src/lib.rs": "pub mod math;\n",
    "src/math.rs": (
        "// helpers\n"
        "pub fn add(a: i32, b: i32) -> i32 { a + b }\n"
        "pub fn twice(a: i32) -> i32 { crate::math::add(a, a) }\n"
        "\n"
        "#[cfg(test)]\n"
        "mod tests {\n"
        "    #[test]\n"
        "    fn it_adds() { assert_eq!(super::add(1, 1), 2); }\n"
        "}\n"
    ),
    "src/bin/main.rs": (
        "fn main() {\n    println!(\"{}\", selftest::math::twice(21));\n}\n"
    ),
}


def run_selftest() -> bool:
    """Bundle a tiny throwaway crate and check the result."""
    logger = get_logger()
    logger.info("🧪 Running self-test...")

    tmp_dir: Path | None = None
    try:
        tmp_dir = Path(tempfile.mkdtemp(prefix=f"{PROGRAM_SCRIPT}-selftest-"))
        for rel, content in _SELFTEST_FILES.items():
            path = tmp_dir / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")

        out = tmp_dir / "bundle.rs"
        logger.debug("[SELFTEST] using temp dir: %s", tmp_dir)

        for dry_run in (True, False):
            bundler = Bundler(
                "selftest",
                tmp_dir / "src/bin/main.rs",
                out,
                src_dir=tmp_dir / "src",
                dry_run=dry_run,
            )
            bundler.run()

        text = out.read_text(encoding="utf-8") if out.exists() else ""
        if (
            "pub mod selftest {" in text
            and "crate::selftest::math::add(a, a)" in text
            and "mod tests" not in text
            and "// helpers" not in text
        ):
            logger.info(
                "✅ Self-test passed — %s is working correctly.", PROGRAM_DISPLAY
            )
            return True

        logger.error("Self-test failed: bundled output missing or invalid.")
        return False

    except PermissionError:
        logger.error("Self-test failed: insufficient permissions.")  # noqa: TRY400
        return False
    except FileNotFoundError:
        logger.error("Self-test failed: missing file or directory.")  # noqa: TRY400
        return False
    except Exception:
        # unexpected bug: show traceback and ask for a bug report
        logger.exception(
            "Unexpected self-test failure. "
            "Please report this issue with the following traceback:"
        )
        return False

    finally:
        if tmp_dir and tmp_dir.exists():
            shutil.rmtree(tmp_dir, ignore_errors=True)
