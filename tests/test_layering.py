"""
tests/test_layering.py
Enforce architectural layering:
  core       → may NOT import cache, dashboard, reporting
  utils      → may NOT import core, cache, dashboard, reporting
  cache      → may NOT import dashboard, reporting
  reporting  → may NOT import cache, dashboard

Run: pytest tests/test_layering.py -v
"""

import sys, os, ast
from pathlib import Path

ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(ROOT))


def get_imports(filepath: Path) -> list[str]:
    """Extract all imported module names from a Python file."""
    try:
        tree = ast.parse(filepath.read_text(encoding="utf-8"))
    except SyntaxError:
        return []
    imports = []
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                imports.append(alias.name)
        elif isinstance(node, ast.ImportFrom):
            if node.module:
                imports.append(node.module)
    return imports


def all_py_files(pkg_dir: Path):
    return list(pkg_dir.rglob("*.py"))


FORBIDDEN = {
    "core":      {"cache", "dashboard", "reporting"},
    "utils":     {"core", "cache", "dashboard", "reporting"},
    "cache":     {"dashboard", "reporting"},
    "reporting": {"cache", "dashboard"},
}


class TestLayering:
    def _check(self, package: str, forbidden: set[str]):
        pkg_dir = ROOT / package
        assert pkg_dir.exists(), f"package {package!r} missing"
        for pyfile in all_py_files(pkg_dir):
            imports = get_imports(pyfile)
            for imp in imports:
                top = imp.split(".")[0]
                assert top not in forbidden, (
                    f"LAYERING VIOLATION in {pyfile.relative_to(ROOT)}: "
                    f"'{package}' imports '{top}' — "
                    f"forbidden packages: {forbidden}"
                )

    def test_core_does_not_import_cache(self):
        self._check("core", {"cache"})

    def test_core_does_not_import_dashboard(self):
        self._check("core", {"dashboard"})

    def test_core_does_not_import_reporting(self):
        self._check("core", {"reporting"})

    def test_utils_is_a_leaf(self):
        self._check("utils", FORBIDDEN["utils"])

    def test_cache_does_not_import_presentation(self):
        self._check("cache", FORBIDDEN["cache"])

    def test_reporting_does_not_import_cache_or_dashboard(self):
        self._check("reporting", FORBIDDEN["reporting"])

    def test_no_module_imports_main(self):
        for package in ("core", "utils", "cache", "reporting", "dashboard"):
            self._check(package, {"main"})


if __name__ == "__main__":
    import pytest
    pytest.main([__file__, "-v"])
