# tests/_60_config_tests/test_config_load.py
"""Tests for finding, loading and parsing config files (crate_bundler.config)."""

import argparse
from pathlib import Path

import pytest

import crate_bundler.config as mod_config
import crate_bundler.runtime as mod_runtime


def _args(**kwargs: object) -> argparse.Namespace:
    return argparse.Namespace(**kwargs)


# --- determine_log_level ------------------------------------------------------


def test_log_level_cli_beats_env_and_config(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOG_LEVEL", "warning")
    level = mod_config.determine_log_level(_args(log_level="trace"), "error")
    assert level == "trace"


def test_log_level_prefixed_env_beats_plain_env(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("LOG_LEVEL", "warning")
    monkeypatch.setenv("CRATE_BUNDLER_LOG_LEVEL", "debug")
    assert mod_config.determine_log_level(_args(log_level=None), "error") == "debug"


def test_log_level_config_then_default() -> None:
    assert mod_config.determine_log_level(_args(), "error") == "error"
    assert mod_config.determine_log_level(_args()) == "info"


# --- find_config --------------------------------------------------------------


def test_find_config_none_found(tmp_path: Path) -> None:
    assert mod_config.find_config(_args(config=None), tmp_path) is None


def test_find_config_prefers_python_over_jsonc(
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    # --- setup ---
    (tmp_path / ".crate-bundler.py").write_text("config = {}\n")
    (tmp_path / ".crate-bundler.jsonc").write_text("{}\n")

    # --- execute ---
    found = mod_config.find_config(_args(config=None), tmp_path)

    # --- verify ---
    assert found == tmp_path / ".crate-bundler.py"
    assert "Multiple config files detected" in capsys.readouterr().err


def test_find_config_explicit_path(tmp_path: Path) -> None:
    cfg = tmp_path / "custom.json"
    cfg.write_text("{}")
    found = mod_config.find_config(_args(config=str(cfg)), tmp_path / "elsewhere")
    assert found == cfg.resolve()


def test_find_config_explicit_missing_is_fatal(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError, match="not found"):
        mod_config.find_config(_args(config=str(tmp_path / "nope.json")), tmp_path)


def test_find_config_explicit_directory_is_fatal(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="directory"):
        mod_config.find_config(_args(config=str(tmp_path)), tmp_path)


# --- load_config --------------------------------------------------------------


def test_load_python_config(tmp_path: Path) -> None:
    cfg = tmp_path / ".crate-bundler.py"
    cfg.write_text("NAME = 'pylib'\nconfig = {'crate_name': NAME, 'one_line': True}\n")
    assert mod_config.load_config(cfg) == {"crate_name": "pylib", "one_line": True}


def test_load_python_config_without_config_name(tmp_path: Path) -> None:
    cfg = tmp_path / ".crate-bundler.py"
    cfg.write_text("settings = {}\n")
    with pytest.raises(ValueError, match="did not define `config`"):
        mod_config.load_config(cfg)


def test_load_python_config_wrong_type(tmp_path: Path) -> None:
    cfg = tmp_path / ".crate-bundler.py"
    cfg.write_text("config = ['a']\n")
    with pytest.raises(TypeError, match="must be a dict or None"):
        mod_config.load_config(cfg)


def test_load_python_config_that_raises(tmp_path: Path) -> None:
    cfg = tmp_path / ".crate-bundler.py"
    cfg.write_text("config = 1 / 0\n")
    with pytest.raises(RuntimeError, match="ZeroDivisionError"):
        mod_config.load_config(cfg)


def test_load_jsonc_config_error_mentions_name_once(tmp_path: Path) -> None:
    cfg = tmp_path / ".crate-bundler.jsonc"
    cfg.write_text("{ not json }")
    with pytest.raises(ValueError, match="'.crate-bundler.jsonc'") as exc_info:
        mod_config.load_config(cfg)
    assert str(tmp_path) not in str(exc_info.value)


# --- parse_config -------------------------------------------------------------


@pytest.mark.parametrize("raw", [None, {}, []])
def test_parse_config_empty(raw: object) -> None:
    assert mod_config.parse_config(raw) is None  # type: ignore[arg-type]


def test_parse_config_flat() -> None:
    raw = {"crate_name": "x", "whatever": 1}
    assert mod_config.parse_config(raw) == raw


def test_parse_config_nested_bundle_wins(capsys: pytest.CaptureFixture[str]) -> None:
    # --- execute ---
    parsed = mod_config.parse_config(
        {"bundle": {"out": "inner.rs"}, "out": "outer.rs", "log_level": "debug"}
    )

    # --- verify ---
    assert parsed == {"out": "inner.rs", "log_level": "debug"}
    assert "Key out set both" in capsys.readouterr().err


def test_parse_config_rejects_list() -> None:
    with pytest.raises(TypeError, match="list"):
        mod_config.parse_config(["crate_name"])


def test_parse_config_rejects_non_object_bundle() -> None:
    with pytest.raises(TypeError, match="`bundle` must be an object"):
        mod_config.parse_config({"bundle": 5})


# --- load_and_validate_config -------------------------------------------------


def test_load_and_validate_no_config(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.chdir(tmp_path)
    assert mod_config.load_and_validate_config(_args(config=None)) is None


def test_load_and_validate_valid_config(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    # --- setup ---
    cfg = tmp_path / ".crate-bundler.jsonc"
    cfg.write_text('{\n  // debug this crate\n  "log_level": "debug",\n  "one_line": true,\n}\n')
    monkeypatch.chdir(tmp_path)

    # --- execute ---
    result = mod_config.load_and_validate_config(_args(config=None, log_level=None))

    # --- verify ---
    assert result is not None
    path, parsed = result
    assert path == cfg.resolve()
    assert parsed == {"log_level": "debug", "one_line": True}
    assert mod_runtime.current_runtime["log_level"] == "debug"


def test_load_and_validate_invalid_config_is_silent_error(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    # --- setup ---
    (tmp_path / ".crate-bundler.json").write_text('{"one_lien": true}')
    monkeypatch.chdir(tmp_path)

    # --- execute ---
    with pytest.raises(ValueError, match="validation errors") as exc_info:
        mod_config.load_and_validate_config(_args(config=None, log_level=None))

    # --- verify ---
    assert getattr(exc_info.value, "silent", False) is True
    err = capsys.readouterr().err
    assert "Unknown key `one_lien`" in err
    assert "'one_lien' → 'one_line'" in err


def test_load_and_validate_empty_python_config(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    (tmp_path / ".crate-bundler.py").write_text("config = None\n")
    monkeypatch.chdir(tmp_path)
    assert mod_config.load_and_validate_config(_args(config=None)) is None
