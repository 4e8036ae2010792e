# src/crate_bundler/patterns.py
"""Line classification rules.

Every structural decision the bundler makes is a regex match on a single
line. Nothing here understands Rust beyond these shapes.
"""

import re

from .constants import TEST_MODULE_MARKER

# `pub`, `pub(crate)`, `pub(super)`, `pub(in some::path)`
_VISIBILITY = r"(?:pub(?:\s*\([^)]*\))?\s+)?"

# 1. (pub) mod name;
MOD_DECLARATION = re.compile(
    rf"^\s*{_VISIBILITY}mod\s+(?P<modname>\w+)\s*;\s*$",
)

# 2. (pub) mod name {   -- or a bare `mod name` with the brace on the next line
MOD_OPENER = re.compile(
    rf"^\s*{_VISIBILITY}mod\s+(?P<modname>\w+)(?:\s*\{{)?\s*$",
)

COMMENT = re.compile(r"^\s*//.*$")
ATTRIBUTE = re.compile(r"^\s*#\[.+\]$")
BLANK = re.compile(r"^\s*$")


def match_mod_declaration(line: str) -> str | None:
    """Return the declared submodule name if `line` is `mod name;`."""
    m = MOD_DECLARATION.match(line)
    return m.group("modname") if m else None


def is_test_mod_opener(line: str) -> bool:
    m = MOD_OPENER.match(line)
    return bool(m and TEST_MODULE_MARKER in m.group("modname"))


def is_comment(line: str) -> bool:
    return COMMENT.match(line) is not None


def is_attribute(line: str) -> bool:
    return ATTRIBUTE.match(line) is not None


def is_blank(line: str) -> bool:
    return BLANK.match(line) is not None


def is_decoration(line: str) -> bool:
    """Attribute or blank line that belongs to the block following it."""
    return is_attribute(line) or is_blank(line)
