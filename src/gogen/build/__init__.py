"""Directory discovery with go/build file selection rules."""

from gogen.build.constraints import BuildContext, parse_expr, parse_plus_build
from gogen.build.discovery import import_dir, read_header

__all__ = [
    "BuildContext",
    "import_dir",
    "parse_expr",
    "parse_plus_build",
    "read_header",
]
