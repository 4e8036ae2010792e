# tests/utils/__init__.py

from .bundleconfig import make_bundle_cfg, make_bundle_input, make_meta
from .crate_tree import output_lines, write_tree
from .force_mtime_advance import force_mtime_advance
from .patch_everywhere import patch_everywhere
from .trace import TRACE, make_trace

__all__ = [
    "TRACE",
    "force_mtime_advance",
    "make_bundle_cfg",
    "make_bundle_input",
    "make_meta",
    "make_trace",
    "output_lines",
    "patch_everywhere",
    "write_tree",
]
