# tests/_40_bundler_tests/test_bundler_run.py
"""End-to-end tests for crate_bundler.bundler.Bundler on real temp crates."""

from pathlib import Path

import pytest

import crate_bundler.bundler as mod_bundler
from tests.utils import make_bundle_cfg, output_lines, write_tree

EXPECTED_SIMPLE = [
    "pub mod my_lib {",
    "\tpub mod a {",
    "\t\tpub fn one() -> i32 { 1 }",
    "\t}",
    "\tpub mod b {",
    "\t\tpub fn two() -> i32 { crate::my_lib::a::one() + 1 }",
    "\t}",
    "}",
    'fn main() { println!("{}", my_lib::b::two()); }',
]


def _bundler(root: Path, **kwargs: object) -> mod_bundler.Bundler:
    return mod_bundler.Bundler(
        kwargs.pop("crate_name", "my_lib"),  # type: ignore[arg-type]
        root / "src" / "bin" / "main.rs",
        root / "main-bundle.rs",
        src_dir=root / "src",
        **kwargs,  # type: ignore[arg-type]
    )


def test_bundles_simple_crate(simple_crate: Path) -> None:
    # --- execute ---
    result = _bundler(simple_crate).run()

    # --- verify ---
    assert output_lines(simple_crate / "main-bundle.rs") == EXPECTED_SIMPLE
    assert result.modules == 3
    assert result.pruned_blocks == 1
    assert result.lines == len(EXPECTED_SIMPLE)
    assert result.text == "\n".join(EXPECTED_SIMPLE) + "\n"
    assert result.dry_run is False


def test_modules_emitted_in_declaration_order(tmp_path: Path) -> None:
    # --- setup ---
    write_tree(
        tmp_path,
        {
            "src/lib.rs": "mod a;\nmod b;\n",
            "src/a.rs": "const A: i32 = 1;\n",
            "src/b.rs": "const B: i32 = 2;\n",
            "src/bin/main.rs": "fn main() {}\n",
        },
    )

    # --- execute ---
    _bundler(tmp_path, crate_name="lib").run()

    # --- verify ---
    assert output_lines(tmp_path / "main-bundle.rs") == [
        "pub mod lib {",
        "\tmod a {",
        "\t\tconst A: i32 = 1;",
        "\t}",
        "\tmod b {",
        "\t\tconst B: i32 = 2;",
        "\t}",
        "}",
        "fn main() {}",
    ]


def test_indentation_tracks_declaration_depth(tmp_path: Path) -> None:
    # --- setup ---
    write_tree(
        tmp_path,
        {
            "src/lib.rs": "pub mod outer;\nfn root() {}\n",
            "src/outer/mod.rs": "pub mod inner;\npub fn o() {}\n",
            "src/outer/inner.rs": "pub fn i() {}\n",
            "src/bin/main.rs": "fn main() {}\n",
        },
    )

    # --- execute ---
    _bundler(tmp_path, crate_name="c").run()

    # --- verify ---
    assert output_lines(tmp_path / "main-bundle.rs") == [
        "pub mod c {",
        "\tpub mod outer {",
        "\t\tpub mod inner {",
        "\t\t\tpub fn i() {}",
        "\t\t}",
        "\t\tpub fn o() {}",
        "\t}",
        "\tfn root() {}",
        "}",
        "fn main() {}",
    ]


def test_directory_form_is_inlined_when_both_exist(tmp_path: Path) -> None:
    write_tree(
        tmp_path,
        {
            "src/lib.rs": "mod m;\n",
            "src/m.rs": "fn flat() {}\n",
            "src/m/mod.rs": "fn dir() {}\n",
            "src/bin/main.rs": "fn main() {}\n",
        },
    )

    text = _bundler(tmp_path).run().text

    assert "fn dir() {}" in text
    assert "fn flat() {}" not in text


def test_lib_root_may_use_directory_form(tmp_path: Path) -> None:
    write_tree(
        tmp_path,
        {
            "src/lib/mod.rs": "mod x;\n",
            "src/lib/x.rs": "fn x() {}\n",
            "src/bin/main.rs": "fn main() {}\n",
        },
    )

    lines = _bundler(tmp_path).run().text.splitlines()

    assert lines[1:4] == ["\tmod x {", "\t\tfn x() {}", "\t}"]


def test_inline_modules_are_copied_verbatim(tmp_path: Path) -> None:
    write_tree(
        tmp_path,
        {
            "src/lib.rs": "mod util {\n    pub fn y() {}\n}\n",
            "src/bin/main.rs": "fn main() {}\n",
        },
    )

    lines = _bundler(tmp_path).run().text.splitlines()

    assert lines[1:4] == ["\tmod util {", "\t    pub fn y() {}", "\t}"]


def test_test_module_with_attribute_is_removed(tmp_path: Path) -> None:
    """A `..._tests` block and its attribute line never reach the output."""
    write_tree(
        tmp_path,
        {
            "src/lib.rs": "pub mod calc;\n",
            "src/calc.rs": """
                pub fn add(a: i32, b: i32) -> i32 { a + b }
                #[cfg(test)]
                mod calc_tests {
                    use super::*;
                }
            """,
            "src/bin/main.rs": "fn main() {}\n",
        },
    )

    text = _bundler(tmp_path).run().text

    assert "calc_tests" not in text
    assert "#[cfg(test)]" not in text
    assert "use super::*;" not in text
    assert "pub fn add(a: i32, b: i32) -> i32 { a + b }" in text


def test_flat_test_submodule_is_inlined_then_removed(tmp_path: Path) -> None:
    write_tree(
        tmp_path,
        {
            "src/lib.rs": "pub fn keep() {}\n#[cfg(test)]\nmod tests;\n",
            "src/tests.rs": "#[test]\nfn t() { assert!(true); }\n",
            "src/bin/main.rs": "fn main() {}\n",
        },
    )

    result = _bundler(tmp_path).run()

    assert result.pruned_blocks == 1
    assert result.text.splitlines() == [
        "pub mod my_lib {",
        "\tpub fn keep() {}",
        "}",
        "fn main() {}",
    ]


def test_comments_stripped_from_library_and_entry(simple_crate: Path) -> None:
    text = _bundler(simple_crate).run().text
    assert "// library root" not in text
    assert "// entry point" not in text


def test_banner_is_verbatim_and_first(simple_crate: Path) -> None:
    # --- setup ---
    banner = simple_crate / "banner.rs"
    banner.write_text(
        "// Author: someone\n// mod tests {\n#![allow(unused)]\n// crate::x\n"
    )
    bundler = _bundler(simple_crate)
    bundler.set_banner(banner)

    # --- execute ---
    bundler.run()

    # --- verify ---
    lines = output_lines(simple_crate / "main-bundle.rs")
    assert lines[:4] == [
        "// Author: someone",
        "// mod tests {",
        "#![allow(unused)]",
        "// crate::x",
    ]
    assert lines[4:] == EXPECTED_SIMPLE


def test_banner_from_constructor(simple_crate: Path) -> None:
    banner = simple_crate / "banner.rs"
    banner.write_text("// hello\n")

    bundler = mod_bundler.Bundler(
        "my_lib",
        simple_crate / "src/bin/main.rs",
        simple_crate / "out.rs",
        False,
        banner,
        src_dir=simple_crate / "src",
    )
    result = bundler.run()

    assert result.text.startswith("// hello\npub mod my_lib {\n")


def test_one_line_collapses_library_only(simple_crate: Path) -> None:
    # --- execute ---
    result = _bundler(simple_crate, one_line=True).run()

    # --- verify ---
    lines = output_lines(simple_crate / "main-bundle.rs")
    assert lines == [
        "pub mod my_lib { pub mod a { pub fn one() -> i32 { 1 } } "
        "pub mod b { pub fn two() -> i32 { crate::my_lib::a::one() + 1 } } }",
        'fn main() { println!("{}", my_lib::b::two()); }',
    ]
    assert result.lines == 2


def test_dry_run_writes_nothing(simple_crate: Path) -> None:
    result = _bundler(simple_crate, dry_run=True).run()

    assert not (simple_crate / "main-bundle.rs").exists()
    assert result.dry_run is True
    assert result.text.splitlines() == EXPECTED_SIMPLE


def test_output_parent_directories_created(simple_crate: Path) -> None:
    bundler = mod_bundler.Bundler(
        "my_lib",
        simple_crate / "src/bin/main.rs",
        simple_crate / "dist" / "nested" / "bundle.rs",
        src_dir=simple_crate / "src",
    )
    bundler.run()
    assert (simple_crate / "dist" / "nested" / "bundle.rs").is_file()


def test_missing_submodule_is_fatal_and_truncates_output(tmp_path: Path) -> None:
    # --- setup ---
    write_tree(
        tmp_path,
        {
            "src/lib.rs": "pub mod present;\npub mod absent;\n",
            "src/present.rs": "fn p() {}\n",
            "src/bin/main.rs": "fn main() {}\n",
            "main-bundle.rs": "stale content from last run\n",
        },
    )

    # --- execute and verify ---
    with pytest.raises(FileNotFoundError, match="absent"):
        _bundler(tmp_path).run()

    assert (tmp_path / "main-bundle.rs").read_text() == ""


def test_missing_entry_point_is_fatal(tmp_path: Path) -> None:
    write_tree(tmp_path, {"src/lib.rs": "fn x() {}\n"})

    with pytest.raises(FileNotFoundError, match="main.rs"):
        _bundler(tmp_path).run()


def test_missing_banner_is_fatal(simple_crate: Path) -> None:
    bundler = _bundler(simple_crate)
    bundler.set_banner(simple_crate / "nope.txt")

    with pytest.raises(FileNotFoundError, match="nope.txt"):
        bundler.run()


def test_module_cycle_is_reported(tmp_path: Path) -> None:
    write_tree(
        tmp_path,
        {
            "src/lib.rs": "mod a;\n",
            "src/a.rs": "mod a;\n",
            "src/bin/main.rs": "fn main() {}\n",
        },
    )

    with pytest.raises(RuntimeError, match="cycle"):
        _bundler(tmp_path).run()


def test_non_utf8_source_is_reported(tmp_path: Path) -> None:
    write_tree(tmp_path, {"src/bin/main.rs": "fn main() {}\n"})
    (tmp_path / "src" / "lib.rs").write_bytes(b"\xff\xfe\xfa")

    with pytest.raises(RuntimeError, match="lib.rs"):
        _bundler(tmp_path).run()


def test_block_opener_rewrite() -> None:
    src = Path("lib.rs")
    assert mod_bundler._to_block_opener("pub mod foo;", src, 1) == "pub mod foo {"
    assert mod_bundler._to_block_opener("  mod foo ;  ", src, 1) == "  mod foo  {"


def test_block_opener_without_terminator_is_malformed() -> None:
    with pytest.raises(ValueError, match="line 7"):
        mod_bundler._to_block_opener("pub mod foo", Path("lib.rs"), 7)


def test_from_config(simple_crate: Path) -> None:
    cfg = make_bundle_cfg(simple_crate, crate_name="my_lib", one_line=True)
    bundler = mod_bundler.Bundler.from_config(cfg)

    assert bundler.crate_name == "my_lib"
    assert bundler.one_line is True
    assert bundler.src_dir == simple_crate / "src"
    assert bundler.banner_file is None


def test_rerun_after_failure_starts_clean(tmp_path: Path) -> None:
    # --- setup ---
    write_tree(
        tmp_path,
        {"src/lib.rs": "pub mod a;\n", "src/bin/main.rs": "fn main() {}\n"},
    )
    bundler = _bundler(tmp_path)
    with pytest.raises(FileNotFoundError):
        bundler.run()
    write_tree(tmp_path, {"src/a.rs": "fn a() {}\n"})

    # --- execute ---
    result = bundler.run()

    # --- verify ---
    assert result.text.splitlines() == [
        "pub mod my_lib {",
        "\tpub mod a {",
        "\t\tfn a() {}",
        "\t}",
        "}",
        "fn main() {}",
    ]
    assert result.modules == 2


def test_crate_name_containing_tests_keeps_library(tmp_path: Path) -> None:
    write_tree(
        tmp_path,
        {
            "src/lib.rs": "pub fn f() {}\n#[cfg(test)]\nmod tests {\n}\n",
            "src/bin/main.rs": "fn main() {}\n",
        },
    )

    result = _bundler(tmp_path, crate_name="contests").run()

    assert result.pruned_blocks == 1
    assert result.text.splitlines() == [
        "pub mod contests {",
        "\tpub fn f() {}",
        "}",
        "fn main() {}",
    ]


def test_failed_run_with_banner_leaves_empty_output(tmp_path: Path) -> None:
    # --- setup ---
    write_tree(
        tmp_path,
        {
            "banner.rs": "// hi\n",
            "src/lib.rs": "pub mod missing;\n",
            "src/bin/main.rs": "fn main() {}\n",
        },
    )
    bundler = _bundler(tmp_path)
    bundler.set_banner(tmp_path / "banner.rs")

    # --- execute ---
    with pytest.raises(FileNotFoundError):
        bundler.run()

    # --- verify ---
    assert (tmp_path / "main-bundle.rs").read_text() == ""
