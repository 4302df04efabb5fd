from __future__ import annotations

import ast
from pathlib import Path


ROOT = Path(__file__).resolve().parents[1]


def _line_count(path: Path) -> int:
    return len(path.read_text(encoding="utf-8", errors="ignore").splitlines())


def _python_files(root: Path):
    for path in root.rglob("*.py"):
        # Keep architecture checks focused on source/test code, not packaged artifacts.
        if "dist" in path.parts or "build" in path.parts:
            continue
        yield path


def _imported_modules(path: Path):
    tree = ast.parse(path.read_text(encoding="utf-8", errors="ignore"))
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                yield alias.name
        elif isinstance(node, ast.ImportFrom):
            yield node.module or ""


def test_no_python_module_exceeds_hard_line_limit():
    offenders = []
    for path in _python_files(ROOT):
        lines = _line_count(path)
        if lines > 1200:
            offenders.append((str(path.relative_to(ROOT)), lines))
    assert not offenders, f"Modules exceed hard 1200-line limit: {offenders}"


def test_core_layer_does_not_import_infra_layer():
    violations: list[tuple[str, str]] = []
    for path in _python_files(ROOT / "core"):
        for name in _imported_modules(path):
            if name == "infra" or name.startswith("infra."):
                violations.append((str(path.relative_to(ROOT)), name))

    assert not violations, f"Core layer imports infra layer: {violations}"


def test_core_layer_is_qt_free():
    violations: list[tuple[str, str]] = []
    for path in _python_files(ROOT / "core"):
        for name in _imported_modules(path):
            if name.startswith("PySide6"):
                violations.append((str(path.relative_to(ROOT)), name))

    assert not violations, f"Core layer imports Qt: {violations}"


def test_criticality_components_have_growth_budgets():
    # Guardrail budgets: traversal modules stay small enough to review in one sitting.
    budgets = {
        "core/services/criticality/engine.py": 260,
        "core/services/criticality/tracing.py": 300,
        "core/services/criticality/chains.py": 180,
        "core/services/criticality/graph.py": 180,
        "core/services/criticality/models.py": 240,
        "infra/operational_support.py": 260,
    }

    breaches = []
    for rel_path, max_lines in budgets.items():
        lines = _line_count(ROOT / rel_path)
        if lines > max_lines:
            breaches.append((rel_path, lines, max_lines))

    assert not breaches, f"Large-module budgets exceeded: {breaches}"
