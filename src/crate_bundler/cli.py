# src/crate_bundler/cli.py

import argparse
import platform
import sys
from difflib import get_close_matches
from pathlib import Path

from .actions import get_metadata, run_selftest, watch_for_changes
from .bundler import Bundler
from .config import determine_log_level, load_and_validate_config
from .config_resolve import resolve_config
from .constants import (
    DEFAULT_BIN_FILE,
    DEFAULT_OUT_FILE,
    DEFAULT_SRC_DIR,
    DEFAULT_WATCH_INTERVAL,
)
from .logs import GREEN, LEVEL_ORDER, colorize, get_logger, set_log_level
from .meta import (
    DESCRIPTION,
    PROGRAM_DISPLAY,
    PROGRAM_SCRIPT,
)
from .runtime import current_runtime
from .types import BundleConfigInput
from .utils import get_sys_version_info, safe_log


# --------------------------------------------------------------------------- #
# CLI setup and helpers
# --------------------------------------------------------------------------- #


class HintingArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> None:  # type: ignore[override]
        # Build known option strings: ["-v", "--verbose", "--log-level", ...]
        known_opts: list[str] = []
        for action in self._actions:
            known_opts.extend([s for s in action.option_strings if s])

        hint_lines: list[str] = []
        # Argparse message for bad flags is typically
        # "unrecognized arguments: --one-lien ..."
        if "unrecognized arguments:" in message:
            bad = message.split("unrecognized arguments:", 1)[1].strip()
            # Split conservatively on whitespace
            bad_args = [tok for tok in bad.split() if tok.startswith("-")]
            for arg in bad_args:
                close = get_close_matches(arg, known_opts, n=1, cutoff=0.6)
                if close:
                    hint_lines.append(f"Hint: did you mean {close[0]}?")

        # Print usage + the original error
        self.print_usage(sys.stderr)
        full = f"{self.prog}: error: {message}"
        if hint_lines:
            full += "\n" + "\n".join(hint_lines)
        self.exit(2, full + "\n")


def _setup_parser() -> argparse.ArgumentParser:
    """Define and return the CLI argument parser."""
    parser = HintingArgumentParser(prog=PROGRAM_SCRIPT, description=DESCRIPTION)

    # --- Positional shorthand ---
    parser.add_argument(
        "positional_bin",
        nargs="?",
        metavar="BIN",
        help=f"Entry-point file appended after the library (default: {DEFAULT_BIN_FILE}).",
    )

    # --- Bundle options ---
    parser.add_argument("--bin", help="Entry-point file (same as BIN).")
    parser.add_argument(
        "-o", "--out", help=f"Output file (default: {DEFAULT_OUT_FILE})."
    )
    parser.add_argument(
        "-n",
        "--crate-name",
        help="Wrapper module name (default: library name from Cargo.toml).",
    )
    parser.add_argument(
        "--src-dir",
        help=f"Directory holding lib.rs (default: {DEFAULT_SRC_DIR}).",
    )
    parser.add_argument(
        "--banner",
        metavar="FILE",
        help="File copied verbatim (comments kept) to the top of the output.",
    )

    one_line = parser.add_mutually_exclusive_group()
    one_line.add_argument(
        "--one-line",
        dest="one_line",
        action="store_const",
        const=True,
        help="Collapse the bundled library to a single line.",
    )
    one_line.add_argument(
        "--multi-line",
        dest="one_line",
        action="store_const",
        const=False,
        help="Keep the bundled library line by line (default).",
    )
    one_line.set_defaults(one_line=None)

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Assemble the bundle without writing the output file.",
    )
    parser.add_argument("-c", "--config", help="Path to bundle config file.")

    parser.add_argument(
        "--watch",
        nargs="?",
        type=float,
        metavar="SECONDS",
        const=None,
        default=argparse.SUPPRESS,
        help=(
            "Rebundle automatically on changes. "
            "Optionally specify interval in seconds"
            f" (default config or: {DEFAULT_WATCH_INTERVAL})."
        ),
    )

    # --- Color ---
    color = parser.add_mutually_exclusive_group()
    color.add_argument(
        "--no-color",
        dest="use_color",
        action="store_const",
        const=False,
        help="Disable ANSI color output.",
    )
    color.add_argument(
        "--color",
        dest="use_color",
        action="store_const",
        const=True,
        help="Force-enable ANSI color output (overrides auto-detect).",
    )
    color.set_defaults(use_color=None)

    # --- Version and verbosity ---
    parser.add_argument("--version", action="store_true", help="Show version info.")

    log_level = parser.add_mutually_exclusive_group()
    log_level.add_argument(
        "-q",
        "--quiet",
        action="store_const",
        const="warning",
        dest="log_level",
        help="Suppress non-critical output (same as --log-level warning).",
    )
    log_level.add_argument(
        "-v",
        "--verbose",
        action="store_const",
        const="debug",
        dest="log_level",
        help="Verbose output (same as --log-level debug).",
    )
    log_level.add_argument(
        "--log-level",
        choices=LEVEL_ORDER,
        default=None,
        dest="log_level",
        help="Set log verbosity level.",
    )
    parser.add_argument(
        "--selftest",
        action="store_true",
        help="Run a built-in sanity test to verify tool correctness.",
    )
    return parser


def _normalize_positional_args(
    args: argparse.Namespace,
    parser: argparse.ArgumentParser,
) -> None:
    """Fold the positional BIN into --bin."""
    bin_pos: str | None = getattr(args, "positional_bin", None)
    if not bin_pos:
        return
    if getattr(args, "bin", None):
        parser.error("Cannot give the entry point both positionally and with --bin.")
    args.bin = bin_pos


# --------------------------------------------------------------------------- #
# Main entry
# --------------------------------------------------------------------------- #


def main(argv: list[str] | None = None) -> int:  # noqa: PLR0911
    logger = get_logger()  # init (use env + defaults)

    try:
        parser = _setup_parser()
        args = parser.parse_args(argv)

        # --- Early runtime init (use CLI + env + defaults) ---
        set_log_level(determine_log_level(args))
        if args.use_color is not None:
            current_runtime["use_color"] = args.use_color
        logger = get_logger()
        logger.trace("[BOOT] log-level initialized: %s", logger.level_name)

        logger.debug(
            "Runtime: Python %s (%s)\n    %s",
            platform.python_version(),
            platform.python_implementation(),
            sys.version.replace("\n", " "),
        )

        # --- Version flag ---
        if getattr(args, "version", None):
            meta = get_metadata()
            logger.info("%s %s (%s)", PROGRAM_DISPLAY, meta.version, meta.commit)
            return 0

        # --- Python version check ---
        if get_sys_version_info() < (3, 10):
            logger.error("%s requires Python 3.10 or newer.", PROGRAM_DISPLAY)
            return 1

        # --- Self-test mode ---
        if getattr(args, "selftest", None):
            return 0 if run_selftest() else 1

        # --- Load configuration ---
        config_path: Path | None = None
        cfg_input: BundleConfigInput | None = None
        config_result = load_and_validate_config(args)
        if config_result is not None:
            config_path, cfg_input = config_result
        logger = get_logger()  # log-level may have come from the config file

        _normalize_positional_args(args, parser)
        cwd = Path.cwd().resolve()
        config_dir = config_path.parent if config_path else cwd

        resolved = resolve_config(cfg_input, args, config_dir, cwd)
        logger = get_logger()

        # --- Config summary ---
        if config_path:
            logger.info("🔧 Using config: %s", config_path.name)
        else:
            logger.debug("🔧 Running in CLI-only mode (no config file).")
        logger.debug("📁 Config root: %s", config_dir)
        logger.debug("📂 Invoked from: %s", cwd)
        logger.info("🦀 Crate: %s", resolved["crate_name"])

        if resolved["dry_run"]:
            logger.info("🧪 Dry-run mode: the output file will not be written.")

        # --- Watch or run ---
        if hasattr(args, "watch"):

            def _rebundle() -> None:
                Bundler.from_config(resolved).run()

            watch_for_changes(
                _rebundle,
                resolved,
                interval=resolved["watch_interval"],
            )
            return 0

        result = Bundler.from_config(resolved).run()
        if not result.dry_run:
            logger.info(colorize("✅ Bundle written to %s", GREEN), result.out)

    except (FileNotFoundError, ValueError, TypeError, RuntimeError) as e:
        # controlled termination
        silent = getattr(e, "silent", False)
        if not silent:
            try:
                logger.error_if_not_debug(str(e))
            except Exception:  # noqa: BLE001
                safe_log(f"[FATAL] Logging failed while reporting: {e}")
        return getattr(e, "code", 1)

    except Exception as e:  # noqa: BLE001
        # unexpected internal error
        try:
            logger.critical_if_not_debug("Unexpected internal error: %s", e)
        except Exception:  # noqa: BLE001
            safe_log(f"[FATAL] Logging failed while reporting: {e}")

        return getattr(e, "code", 1)

    else:
        return 0
