# src/crate_bundler/logs.py
"""Package logger: a TRACE level, tagged output, stdout/stderr split.

The effective level always comes from `current_runtime["log_level"]`;
`get_logger()` re-syncs it on every call so CLI, env and config changes
take effect without passing the logger around.
"""

import logging
import sys
from typing import Any, TextIO, cast

from .meta import PROGRAM_PACKAGE
from .runtime import current_runtime

# --- ANSI colors -------------------------------------------------------------

RESET = "\033[0m"
CYAN = "\033[36m"
RED = "\033[91m"
GREEN = "\033[92m"
GRAY = "\033[90m"

# --- levels ------------------------------------------------------------------

TRACE_LEVEL = logging.DEBUG - 5
SILENT_LEVEL = logging.CRITICAL + 1
logging.addLevelName(TRACE_LEVEL, "TRACE")

# lowest to highest; "silent" disables all output
_LEVELS: dict[str, int] = {
    "trace": TRACE_LEVEL,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
    "silent": SILENT_LEVEL,
}
LEVEL_ORDER = list(_LEVELS)

# levelname → (color, tag); info has no tag
TAG_STYLES = {
    "TRACE": (GRAY, "[TRACE]"),
    "DEBUG": (CYAN, "[DEBUG]"),
    "WARNING": ("", "⚠️ "),
    "ERROR": ("", "❌ "),
    "CRITICAL": ("", "💥 "),
}


class LoggerWithTrace(logging.Logger):
    def trace(self, msg: str, *args: Any, **kwargs: Any) -> None:
        if self.isEnabledFor(TRACE_LEVEL):
            self._log(TRACE_LEVEL, msg, args, **kwargs)

    def error_if_not_debug(self, msg: str, *args: Any) -> None:
        """Log an error; include the active traceback when debugging."""
        self.error(msg, *args, exc_info=self.isEnabledFor(logging.DEBUG))

    def critical_if_not_debug(self, msg: str, *args: Any) -> None:
        """Log a critical error; include the active traceback when debugging."""
        self.critical(msg, *args, exc_info=self.isEnabledFor(logging.DEBUG))

    @property
    def level_name(self) -> str:
        return logging.getLevelName(self.getEffectiveLevel()).lower()


logging.setLoggerClass(LoggerWithTrace)


# --- output ------------------------------------------------------------------


class TagFormatter(logging.Formatter):
    """Prefix each message with its level tag, colored when enabled."""

    def format(self, record: logging.LogRecord) -> str:
        msg = super().format(record)
        color, tag = TAG_STYLES.get(record.levelname, ("", ""))
        if not tag:
            return msg
        return f"{colorize(tag, color) if color else tag} {msg}"


class DualStreamHandler(logging.StreamHandler[TextIO]):
    """Send info/debug/trace to stdout, everything else to stderr."""

    def __init__(self) -> None:
        super().__init__(stream=sys.stdout)

    def emit(self, record: logging.LogRecord) -> None:
        # looked up per record so captured/redirected streams are honoured
        self.stream = sys.stderr if record.levelno >= logging.WARNING else sys.stdout
        super().emit(record)


_logger = cast("LoggerWithTrace", logging.getLogger(PROGRAM_PACKAGE))
_handler = DualStreamHandler()
_handler.setFormatter(TagFormatter("%(message)s"))
_logger.addHandler(_handler)
_logger.propagate = False


def _sync_level() -> None:
    # unknown names fall back to info; the CLI and config validate earlier
    name = str(current_runtime.get("log_level") or "info").lower()
    _logger.setLevel(_LEVELS.get(name, logging.INFO))


def get_logger() -> LoggerWithTrace:
    """Return the crate_bundler logger at the current runtime level."""
    _sync_level()
    return _logger


def set_log_level(level: str) -> None:
    """Make `level` the program-wide log level."""
    current_runtime["log_level"] = level
    _sync_level()


def colorize(text: str, color: str, *, use_color: bool | None = None) -> str:
    if use_color is None:
        use_color = current_runtime["use_color"]
    return f"{color}{text}{RESET}" if use_color else text
