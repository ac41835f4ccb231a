"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages.
"""

import sys
from pathlib import Path

import pytest

# Insert local src directory at the beginning of sys.path
# This ensures that the local gogen package is used, not any installed one
_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

# Force reimport of gogen modules if already imported
for module_name in list(sys.modules.keys()):
    if module_name.startswith("gogen"):
        del sys.modules[module_name]


@pytest.fixture
def go_dir(tmp_path: Path):
    """Factory writing Go files into a fresh directory.

    Usage: ``d = go_dir({"a.go": "package p\\n"})``.
    """

    def make(files: dict[str, str]) -> Path:
        for name, content in files.items():
            path = tmp_path / name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content)
        return tmp_path

    return make
