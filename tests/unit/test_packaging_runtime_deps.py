"""Tests for parity between package imports and declared runtime dependencies."""

from __future__ import annotations

import ast
import re
import sys
import tomllib
from pathlib import Path

# Import name -> distribution name, where they differ.
DISTRIBUTION_NAMES = {"tomli_w": "tomli-w"}


def _repo_root() -> Path:
    return Path(__file__).resolve().parents[2]


def _requirement_name(requirement: str) -> str:
    match = re.match(r"[A-Za-z0-9_.-]+", requirement)
    assert match is not None
    return match.group(0).lower().replace("_", "-")


def _third_party_imports(package_dir: Path) -> set[str]:
    names: set[str] = set()
    for path in package_dir.rglob("*.py"):
        tree = ast.parse(path.read_text(encoding="utf-8"))
        for node in ast.walk(tree):
            if isinstance(node, ast.Import):
                names.update(alias.name.split(".")[0] for alias in node.names)
            elif isinstance(node, ast.ImportFrom) and node.level == 0 and node.module:
                names.add(node.module.split(".")[0])
    return {
        name
        for name in names
        if name not in sys.stdlib_module_names and name not in {"scout_elastic", "__future__"}
    }


def test_pyproject_declares_every_runtime_import() -> None:
    """Every third-party import in the package must be a declared dependency."""
    repo_root = _repo_root()

    pyproject_data = tomllib.loads((repo_root / "pyproject.toml").read_text(encoding="utf-8"))
    dependency_names = {
        _requirement_name(requirement)
        for requirement in pyproject_data["project"]["dependencies"]
    }

    for import_name in sorted(_third_party_imports(repo_root / "scout_elastic")):
        distribution = DISTRIBUTION_NAMES.get(import_name, import_name).lower()
        assert distribution in dependency_names, (
            f"'{import_name}' is imported by scout_elastic but '{distribution}' is missing "
            "from pyproject.toml dependencies."
        )
