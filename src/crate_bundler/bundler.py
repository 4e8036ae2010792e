# src/crate_bundler/bundler.py

import io
from dataclasses import dataclass
from pathlib import Path
from typing import TextIO

from .buffer import OutputBuffer
from .constants import DEFAULT_SRC_DIR, LIB_ROOT_NAME
from .logs import get_logger
from .patterns import match_mod_declaration
from .resolver import resolve_module
from .transform import minify, prune_test_blocks, rewrite_path_qualifiers
from .types import BundleConfig
from .utils import plural, read_source_lines


# --------------------------------------------------------------------------- #
# types
# --------------------------------------------------------------------------- #


@dataclass
class BundleResult:
    """What a single bundling run produced."""

    out: Path
    modules: int  # module files inlined, library root included
    pruned_blocks: int
    lines: int  # lines written after the banner
    dry_run: bool
    text: str  # full output, banner included


# --------------------------------------------------------------------------- #
# internal helper
# --------------------------------------------------------------------------- #


def _to_block_opener(line: str, source: Path, lineno: int) -> str:
    """Turn `pub mod foo;` into `pub mod foo {`."""
    cut = line.rstrip().rfind(";")
    if cut == -1:
        xmsg = (
            f"Malformed module declaration in {source} line {lineno}: "
            f"{line.strip()!r} has no ';'"
        )
        raise ValueError(xmsg)
    return line[:cut] + " {"


# --------------------------------------------------------------------------- #
# bundler
# --------------------------------------------------------------------------- #


class Bundler:
    """Inline a library crate's module tree into a single source file.

    One instance owns one OutputBuffer; call run() once per output.
    """

    def __init__(  # noqa: PLR0913
        self,
        crate_name: str,
        bin_file: Path | str,
        target_file: Path | str,
        one_line: bool = False,  # noqa: FBT001, FBT002
        banner_file: Path | str | None = None,
        *,
        src_dir: Path | str = DEFAULT_SRC_DIR,
        dry_run: bool = False,
    ) -> None:
        self.crate_name = crate_name
        self.bin_file = Path(bin_file)
        self.target_file = Path(target_file)
        self.one_line = one_line
        self.banner_file = Path(banner_file) if banner_file is not None else None
        self.src_dir = Path(src_dir)
        self.dry_run = dry_run

        self.buffer = OutputBuffer()
        self._modules_inlined = 0
        self._active: set[Path] = set()

    @classmethod
    def from_config(cls, cfg: BundleConfig) -> "Bundler":
        return cls(
            cfg["crate_name"],
            cfg["bin"],
            cfg["out"],
            cfg["one_line"],
            cfg.get("banner"),
            src_dir=cfg["src_dir"],
            dry_run=cfg["dry_run"],
        )

    def set_banner(self, banner: Path | str) -> None:
        self.banner_file = Path(banner)

    # --- recursive inliner -------------------------------------------------

    def inline_module(self, directory: Path | str, name: str, depth: int) -> None:
        """Emit module `name` at `depth`, recursing into each `mod x;` it declares."""
        logger = get_logger()
        module_file, child_dir = resolve_module(directory, name)

        key = module_file.resolve()
        if key in self._active:
            xmsg = f"Module cycle detected: {module_file} is already being inlined"
            raise RuntimeError(xmsg)
        self._active.add(key)
        self._modules_inlined += 1
        logger.debug("📄 %s%s", "  " * max(depth - 1, 0), module_file)

        try:
            for lineno, line in enumerate(read_source_lines(module_file), start=1):
                submodule = match_mod_declaration(line)
                if submodule is None:
                    self.buffer.write(line, depth)
                    continue

                logger.trace("[INLINE] %s:%d mod %s", module_file, lineno, submodule)
                self.buffer.write(_to_block_opener(line, module_file, lineno), depth)
                self.inline_module(child_dir, submodule, depth + 1)
                self.buffer.write("}", depth)
        finally:
            self._active.discard(key)

    # --- pipeline steps ----------------------------------------------------

    def _render_banner(self) -> str:
        """Return the banner verbatim, comments kept, as its own flush."""
        if self.banner_file is None:
            return ""
        logger = get_logger()
        logger.debug("🏷️  Banner: %s", self.banner_file)
        self.buffer.write_all(read_source_lines(self.banner_file), keep_comments=True)
        return self.buffer.flush(None)

    def bundle_library(self) -> int:
        """Assemble the wrapped library block in the buffer.

        Returns the number of pruned test blocks.
        """
        wrapper_open = f"pub mod {self.crate_name} {{"
        self.buffer.write(wrapper_open, 0)
        self.inline_module(self.src_dir, LIB_ROOT_NAME, 1)
        self.buffer.write("}", 0)

        # only the library body is pruned; the wrapper is named after the crate
        body, pruned = prune_test_blocks(self.buffer.lines[1:-1])
        lines = rewrite_path_qualifiers([wrapper_open, *body, "}"], self.crate_name)
        if self.one_line:
            lines = minify(lines)
        self.buffer.replace(lines)
        return pruned

    def _append_entry_point(self) -> None:
        get_logger().debug("🚀 Entry point: %s", self.bin_file)
        self.buffer.write_all(read_source_lines(self.bin_file))

    # --- main entry --------------------------------------------------------

    def run(self) -> BundleResult:
        """Bundle banner, library and entry point into the target file."""
        logger = get_logger()
        self._modules_inlined = 0
        self._active.clear()
        self.buffer.replace([])

        if self.dry_run:
            return self._run_into(io.StringIO(), log_prefix="🧪 [dry-run] ")

        self.target_file.parent.mkdir(parents=True, exist_ok=True)
        # truncate before anything else so a failed run never leaves stale output
        with self.target_file.open("w", encoding="utf-8", newline="\n") as out:
            result = self._run_into(out, log_prefix="")
        logger.trace("[BUNDLE] wrote %d bytes", len(result.text.encode("utf-8")))
        return result

    def _run_into(self, stream: TextIO, *, log_prefix: str) -> BundleResult:
        logger = get_logger()
        banner_text = self._render_banner()

        pruned = self.bundle_library()
        self._append_entry_point()
        line_count = len(self.buffer)
        body = self.buffer.flush(None)

        # nothing reaches the stream until every step has succeeded
        stream.write(banner_text)
        stream.write(body)

        logger.info(
            "%s📦 Bundled %d module%s into %s (%d line%s, %d test block%s pruned)",
            log_prefix,
            self._modules_inlined,
            plural(self._modules_inlined),
            self.target_file,
            line_count,
            plural(line_count),
            pruned,
            plural(pruned),
        )
        return BundleResult(
            out=self.target_file,
            modules=self._modules_inlined,
            pruned_blocks=pruned,
            lines=line_count,
            dry_run=self.dry_run,
            text=banner_text + body,
        )
