# src/crate_bundler/transform.py
"""Whole-buffer passes applied after the library block is assembled.

All passes take and return plain line lists so they can be chained and
tested without a bundler instance.
"""

import re

from .constants import PATH_ROOT_TOKEN
from .logs import get_logger
from .patterns import is_decoration, is_test_mod_opener

OPEN_DELIM = "{"
CLOSE_DELIM = "}"


# --------------------------------------------------------------------------- #
# test-block pruning
# --------------------------------------------------------------------------- #


def find_block_range(lines: list[str], lineno: int) -> tuple[int, int]:
    """Return the inclusive (start, end) range of the block opened at `lineno`.

    start walks back over attribute and blank lines directly above the
    opener. end is the first line where the running `{` minus `}` count is
    back to zero after the block has opened. Braces are counted textually,
    so braces inside string literals or block comments will throw this off.
    """
    start = lineno
    while start >= 1 and is_decoration(lines[start - 1]):
        start -= 1

    depth = 0
    opened = False
    end = lineno
    while end < len(lines):
        line = lines[end]
        opens = line.count(OPEN_DELIM)
        depth += opens - line.count(CLOSE_DELIM)
        opened = opened or opens > 0
        if opened and depth <= 0:
            return start, end
        end += 1

    logger = get_logger()
    logger.warning(
        "Unbalanced braces after line %d (%r); removing through end of bundle.",
        lineno + 1,
        lines[lineno].strip(),
    )
    return start, len(lines) - 1


def find_test_blocks(lines: list[str]) -> list[tuple[int, int]]:
    """Locate every test-only module block, in buffer order."""
    ranges: list[tuple[int, int]] = []
    i = 0
    while i < len(lines):
        if is_test_mod_opener(lines[i]):
            start, end = find_block_range(lines, i)
            ranges.append((start, end))
            i = end
        i += 1
    return ranges


def prune_test_blocks(lines: list[str]) -> tuple[list[str], int]:
    """Delete test-only module blocks (with their leading attributes).

    Returns the pruned lines and the number of blocks removed.
    """
    logger = get_logger()
    ranges = find_test_blocks(lines)
    result = list(lines)

    # last to first so earlier indices stay valid
    for start, end in reversed(ranges):
        logger.debug(
            "✂️  Pruned test block %r (lines %d-%d)",
            _opener_text(lines, start, end),
            start + 1,
            end + 1,
        )
        del result[start : end + 1]

    return result, len(ranges)


def _opener_text(lines: list[str], start: int, end: int) -> str:
    for line in lines[start : end + 1]:
        if is_test_mod_opener(line):
            return line.strip()
    return lines[start].strip()


# --------------------------------------------------------------------------- #
# path qualifier rewriting
# --------------------------------------------------------------------------- #


def rewrite_path_qualifiers(lines: list[str], crate_name: str) -> list[str]:
    """Point `crate::` paths through the wrapper module.

    Only the whole `crate::` token is rewritten; identifiers that merely end
    in `crate` (e.g. `my_crate::`) are left alone.
    """
    pattern = re.compile(rf"\b{re.escape(PATH_ROOT_TOKEN)}")
    replacement = f"{PATH_ROOT_TOKEN}{crate_name}::"
    return [pattern.sub(replacement, line) for line in lines]


# --------------------------------------------------------------------------- #
# minify
# --------------------------------------------------------------------------- #


def minify(lines: list[str]) -> list[str]:
    """Collapse all lines into one, separated by single spaces.

    Only safe once line comments are gone; anything after a `//` would
    swallow the rest of the bundle.
    """
    parts = [line.strip() for line in lines]
    parts = [p for p in parts if p]
    if not parts:
        return []
    return [" ".join(parts)]
