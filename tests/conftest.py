# tests/conftest.py
"""
Shared test setup for project.

Every test starts from the same runtime state (info log level, no color)
so log assertions do not depend on the developer's environment.
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

import crate_bundler.runtime as mod_runtime
from tests.utils import make_trace, write_tree

TRACE = make_trace("⚡️")


@pytest.fixture(autouse=True)
def _clean_runtime(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Reset shared runtime settings and env overrides for each test."""
    for var in (
        "LOG_LEVEL",
        "CRATE_BUNDLER_LOG_LEVEL",
        "WATCH_INTERVAL",
        "CRATE_BUNDLER_WATCH_INTERVAL",
    ):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setitem(mod_runtime.current_runtime, "log_level", "info")
    monkeypatch.setitem(mod_runtime.current_runtime, "use_color", False)
    yield


@pytest.fixture
def simple_crate(tmp_path: Path) -> Path:
    """A lib with two flat submodules, one of which carries a test module."""
    TRACE("simple_crate", tmp_path)
    return write_tree(
        tmp_path,
        {
            "Cargo.toml": """
                [package]
                name = "my-lib"
                version = "0.1.0"
            """,
            "src/lib.rs": """
                // library root
                pub mod a;
                pub mod b;
            """,
            "src/a.rs": """
                pub fn one() -> i32 { 1 }
            """,
            "src/b.rs": """
                pub fn two() -> i32 { crate::a::one() + 1 }

                #[cfg(test)]
                mod tests {
                    #[test]
                    fn it_works() { assert_eq!(super::two(), 2); }
                }
            """,
            "src/bin/main.rs": """
                // entry point
                fn main() { println!("{}", my_lib::b::two()); }
            """,
        },
    )
