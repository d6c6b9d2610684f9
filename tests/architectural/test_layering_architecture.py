"""Architectural tests for module layering.

The parsing and translation core must stay free of web and storage imports so
it can run inside any caller. Routes reach the database only through the
repository modules. Checks use static AST inspection; nothing is imported.
"""

from __future__ import annotations

import ast
from pathlib import Path
from typing import Iterable, Set

import pytest


PACKAGE = Path(__file__).resolve().parents[2] / "preop_review"

CORE_MODULES = [
    "logic/grouping.py",
    "logic/question_builder.py",
    "logic/enable_when.py",
    "logic/characteristics.py",
    "logic/translation.py",
    "logic/question_records.py",
    "logic/csv_io.py",
    "logic/validation.py",
    "models/question.py",
    "models/characteristics.py",
    "models/item_type.py",
    "models/suggestion.py",
]

FORBIDDEN_IN_CORE = {"fastapi", "starlette", "sqlalchemy", "preop_review.db", "preop_review.routes", "preop_review.http"}


def imported_modules(path: Path) -> Set[str]:
    tree = ast.parse(path.read_text(encoding="utf-8"), filename=str(path))
    names: Set[str] = set()
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            names.update(alias.name for alias in node.names)
        elif isinstance(node, ast.ImportFrom) and node.module:
            names.add(node.module)
    return names


def _violations(names: Iterable[str], forbidden: Set[str]) -> list[str]:
    return sorted(n for n in names if any(n == f or n.startswith(f + ".") for f in forbidden))


@pytest.mark.parametrize("rel_path", CORE_MODULES)
def test_core_modules_have_no_web_or_storage_imports(rel_path):
    path = PACKAGE / rel_path
    assert path.exists(), f"Missing core module: {rel_path}"
    bad = _violations(imported_modules(path), FORBIDDEN_IN_CORE)
    assert not bad, f"{rel_path} imports {bad}"


def test_routes_do_not_touch_sqlalchemy_directly():
    for path in sorted((PACKAGE / "routes").glob("*.py")):
        bad = _violations(imported_modules(path), {"sqlalchemy", "preop_review.db"})
        assert not bad, f"{path.name} imports {bad}"


def test_migrations_ship_with_the_package():
    sql_files = sorted((PACKAGE / "db" / "migrations").glob("*.sql"))
    assert sql_files, "No SQL migrations found"
    assert sql_files[0].name.startswith("001_")
