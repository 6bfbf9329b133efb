"""Policy tests to keep ledger code aligned with transaction conventions."""

from __future__ import annotations

import ast
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[2]


def _ledger_source_roots() -> tuple[Path, ...]:
    package = REPO_ROOT / "poker_ledger"
    return (package / "routes", package / "services")


def test_ledger_code_has_no_explicit_commit_or_rollback() -> None:
    """Routes and services should leave commit()/rollback() to transaction blocks."""
    violations: list[str] = []
    for root in _ledger_source_roots():
        for path in root.rglob("*.py"):
            tree = ast.parse(path.read_text(encoding="utf-8"), filename=str(path))
            for node in ast.walk(tree):
                if not isinstance(node, ast.Call):
                    continue
                func = node.func
                if not isinstance(func, ast.Attribute):
                    continue
                if func.attr not in {"commit", "rollback"}:
                    continue
                violations.append(f"{path.relative_to(REPO_ROOT)}:{node.lineno}")

    assert not violations, (
        "Explicit commit()/rollback() calls found in ledger code:\n"
        + "\n".join(sorted(violations))
    )


def test_every_ledger_operation_runs_in_a_transaction() -> None:
    """Each public TournamentLedger coroutine should open store.transaction()."""
    path = REPO_ROOT / "poker_ledger" / "services" / "tournament_ledger.py"
    tree = ast.parse(path.read_text(encoding="utf-8"), filename=str(path))
    ledger_class = next(
        node
        for node in tree.body
        if isinstance(node, ast.ClassDef) and node.name == "TournamentLedger"
    )

    missing: list[str] = []
    for node in ledger_class.body:
        if not isinstance(node, ast.AsyncFunctionDef) or node.name.startswith("_"):
            continue
        opens_transaction = any(
            isinstance(stmt, ast.AsyncWith)
            and any(
                isinstance(item.context_expr, ast.Call)
                and isinstance(item.context_expr.func, ast.Attribute)
                and item.context_expr.func.attr == "transaction"
                for item in stmt.items
            )
            for stmt in node.body
        )
        if not opens_transaction:
            missing.append(node.name)

    assert not missing, "Ledger operations outside a transaction: " + ", ".join(missing)
