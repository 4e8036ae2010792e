# src/crate_bundler/resolver.py

from pathlib import Path

from .constants import MODULE_EXT, MODULE_INDEX_FILE
from .logs import get_logger


class ModuleNotFoundInTreeError(FileNotFoundError):
    """A declared module has neither a flat file nor a directory form."""

    def __init__(self, name: str, candidates: list[Path]) -> None:
        self.name = name
        self.candidates = candidates
        joined = ", ".join(str(c) for c in candidates)
        super().__init__(f"Cannot find module file for `{name}`: tried {joined}")


def module_candidates(directory: Path, name: str) -> list[Path]:
    """Return the lookup order for a module: flat file, then directory form."""
    return [
        directory / f"{name}{MODULE_EXT}",
        directory / name / MODULE_INDEX_FILE,
    ]


def resolve_module(directory: Path | str, name: str) -> tuple[Path, Path]:
    """Map (directory, module name) to the file defining it.

    Both candidates are checked and the last one that exists wins, so when
    `name.rs` and `name/mod.rs` are both present the directory form is used.

    Returns:
        (module_file, child_directory) where child_directory is where the
        module's own `mod x;` declarations are looked up.

    Raises:
        ModuleNotFoundInTreeError if neither candidate exists.
    """
    logger = get_logger()
    directory = Path(directory)
    candidates = module_candidates(directory, name)

    selected: int | None = None
    for i, candidate in enumerate(candidates):
        if candidate.is_file():
            selected = i

    if selected is None:
        raise ModuleNotFoundInTreeError(name, candidates)

    if selected == 1 and candidates[0].is_file():
        logger.debug(
            "Module `%s` has both %s and %s; using the directory form.",
            name,
            candidates[0],
            candidates[1],
        )

    module_file = candidates[selected]
    child_dir = directory if selected == 0 else directory / name
    logger.trace("[RESOLVE] %s in %s → %s", name, directory, module_file)
    return module_file, child_dir
