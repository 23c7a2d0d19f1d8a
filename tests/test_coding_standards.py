"""
Tests that enforce coding standards.

Import conventions:
- ``import X as _x`` for external modules
- ``import skillhub.x as x`` for internal modules
- ``from X import Y`` only in ``__init__.py`` re-exports, for
  ``__future__``, and inside ``TYPE_CHECKING`` blocks

Library code writes output through click or logging, never print(), and
every module logger is named after its module.
"""

import ast as _ast
import pathlib as _pathlib

import pytest as _pytest

ROOT = _pathlib.Path(__file__).parent.parent
SRC_DIR = ROOT / "src" / "skillhub"
TESTS_DIR = ROOT / "tests"

INTERNAL_PACKAGE = "skillhub"


def _python_files(directory: _pathlib.Path) -> list[_pathlib.Path]:
    return sorted(directory.rglob("*.py"))


def _is_type_checking_guard(node: _ast.If) -> bool:
    test = node.test
    if isinstance(test, _ast.Name):
        return test.id == "TYPE_CHECKING"
    if isinstance(test, _ast.Attribute):
        return test.attr == "TYPE_CHECKING"
    return False


def _walk_outside_type_checking(tree: _ast.AST) -> list[_ast.AST]:
    """All nodes except those under an ``if TYPE_CHECKING:`` body."""
    nodes: list[_ast.AST] = []
    pending: list[_ast.AST] = [tree]
    while pending:
        node = pending.pop()
        nodes.append(node)
        if isinstance(node, _ast.If) and _is_type_checking_guard(node):
            pending.extend(node.orelse)
            continue
        pending.extend(_ast.iter_child_nodes(node))
    return nodes


def from_import_violations(source: str) -> list[tuple[int, str]]:
    """
    Find forbidden ``from X import Y`` statements.

    Returns:
        (line number, module) for each violation.
    """
    found = []
    for node in _walk_outside_type_checking(_ast.parse(source)):
        if isinstance(node, _ast.ImportFrom) and node.module != "__future__":
            found.append((node.lineno, f"from {node.module or '.'} import ..."))
    return sorted(found)


def alias_violations(source: str) -> list[tuple[int, str]]:
    """
    Find external ``import X`` statements without an underscore alias.

    ``import skillhub`` and ``import skillhub.x as x`` are internal and
    allowed.
    """
    found = []
    for node in _walk_outside_type_checking(_ast.parse(source)):
        if not isinstance(node, _ast.Import):
            continue
        for alias in node.names:
            if alias.name.split(".")[0] == INTERNAL_PACKAGE:
                continue
            if alias.asname is None or not alias.asname.startswith("_"):
                found.append((node.lineno, f"import {alias.name}"))
    return sorted(found)


def print_calls(source: str) -> list[int]:
    """Line numbers of calls to the builtin print()."""
    return sorted(
        node.lineno
        for node in _ast.walk(_ast.parse(source))
        if isinstance(node, _ast.Call)
        and isinstance(node.func, _ast.Name)
        and node.func.id == "print"
    )


def unnamed_loggers(source: str) -> list[int]:
    """Line numbers of getLogger() calls not given ``__name__``."""
    found = []
    for node in _ast.walk(_ast.parse(source)):
        if not (
            isinstance(node, _ast.Call)
            and isinstance(node.func, _ast.Attribute)
            and node.func.attr == "getLogger"
        ):
            continue
        args = node.args
        if len(args) != 1 or not (isinstance(args[0], _ast.Name) and args[0].id == "__name__"):
            found.append(node.lineno)
    return sorted(found)


def _report(title: str, violations: list[str], hint: str) -> None:
    if violations:
        _pytest.fail(f"{title}:\n" + "\n".join(f"  {v}" for v in violations) + f"\n\n{hint}")


class TestImportStyle:
    """Tests for import style compliance."""

    @_pytest.mark.parametrize("directory", [SRC_DIR, TESTS_DIR], ids=["src", "tests"])
    def test_no_from_imports(self, directory: _pathlib.Path) -> None:
        """Modules other than __init__.py do not use 'from X import Y'."""
        violations = [
            f"{path.relative_to(ROOT)}:{line}: {text}"
            for path in _python_files(directory)
            if path.name != "__init__.py"
            for line, text in from_import_violations(path.read_text())
        ]
        _report(
            "Found forbidden 'from X import Y' imports",
            violations,
            "Use 'import X as _x' (external) or 'import X as x' (internal) instead.",
        )

    @_pytest.mark.parametrize("directory", [SRC_DIR, TESTS_DIR], ids=["src", "tests"])
    def test_external_imports_aliased(self, directory: _pathlib.Path) -> None:
        """External modules are bound to private names."""
        violations = [
            f"{path.relative_to(ROOT)}:{line}: {text}"
            for path in _python_files(directory)
            for line, text in alias_violations(path.read_text())
        ]
        _report(
            "Found external imports without an underscore alias",
            violations,
            "Use 'import X as _x'.",
        )


class TestLibraryOutput:
    """Library code reports through click and logging."""

    def test_no_print_calls(self) -> None:
        """print() is not used under src/."""
        violations = [
            f"{path.relative_to(ROOT)}:{line}"
            for path in _python_files(SRC_DIR)
            for line in print_calls(path.read_text())
        ]
        _report("Found print() calls", violations, "Use click.echo() or a module logger.")

    def test_loggers_named_after_module(self) -> None:
        """Every getLogger() call passes __name__."""
        violations = [
            f"{path.relative_to(ROOT)}:{line}"
            for path in _python_files(SRC_DIR)
            for line in unnamed_loggers(path.read_text())
        ]
        _report(
            "Found loggers not named after their module",
            violations,
            "Use '_logger = _logging.getLogger(__name__)'.",
        )


class TestChecks:
    """Tests for the checks themselves."""

    def test_detects_from_import(self) -> None:
        """Basic from-imports are reported with their line."""
        assert from_import_violations("import os as _os\nfrom pathlib import Path\n") == [
            (2, "from pathlib import ...")
        ]

    def test_allows_future_imports(self) -> None:
        """__future__ imports are allowed."""
        assert from_import_violations("from __future__ import annotations\n") == []

    def test_type_checking_block_ignored_but_not_what_follows(self) -> None:
        """Imports under TYPE_CHECKING are allowed; later ones are not."""
        source = (
            "import typing as _typing\n"
            "\n"
            "if _typing.TYPE_CHECKING:\n"
            "    from allowed import Type\n"
            "\n"
            "from forbidden import Other\n"
        )
        assert from_import_violations(source) == [(6, "from forbidden import ...")]

    def test_alias_rules(self) -> None:
        """Internal imports need no alias; external ones need an underscore alias."""
        source = (
            "import json\n"
            "import yaml as yml\n"
            "import click as _click\n"
            "import skillhub\n"
            "import skillhub.models as models\n"
        )
        assert alias_violations(source) == [(1, "import json"), (2, "import yaml")]

    def test_print_detection(self) -> None:
        """Method calls named print are not the builtin."""
        source = "console.print('x')\nprint('y')\n"
        assert print_calls(source) == [2]

    def test_logger_name_detection(self) -> None:
        """Only getLogger(__name__) passes."""
        source = (
            "_a = _logging.getLogger(__name__)\n"
            "_b = _logging.getLogger('skillhub')\n"
            "_c = _logging.getLogger()\n"
        )
        assert unnamed_loggers(source) == [2, 3]
