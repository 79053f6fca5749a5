"""Architecture boundary checks: the domain package stays pure."""

from __future__ import annotations

import ast
from pathlib import Path

_PACKAGE = Path(__file__).resolve().parents[1]
_FORBIDDEN_PREFIXES = ("assetscan.runtime", "assetscan.application", "assetscan.cli")
_FORBIDDEN_THIRD_PARTY = {"httpx", "fastapi", "uvicorn", "pydantic"}


def _imports(path: Path) -> list[str]:
    tree = ast.parse(path.read_text(encoding="utf-8"), filename=str(path))
    result: list[str] = []
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                result.append(alias.name)
        elif isinstance(node, ast.ImportFrom):
            base = "." * node.level + (node.module or "")
            result.append(base)
    return result


def test_domain_does_not_import_runtime_or_workflows() -> None:
    violations: list[str] = []
    for path in sorted((_PACKAGE / "domain").rglob("*.py")):
        for mod in _imports(path):
            if mod.startswith(_FORBIDDEN_PREFIXES) or mod.split(".")[0] in _FORBIDDEN_THIRD_PARTY:
                violations.append(f"{path.name}: {mod}")
    assert not violations, "Domain import violations:\n" + "\n".join(violations)


def test_runtime_store_and_client_do_not_import_workflows() -> None:
    violations: list[str] = []
    for name in ("record_store.py", "catalog_client.py", "busy.py", "settings.py"):
        path = _PACKAGE / "runtime" / name
        for mod in _imports(path):
            if mod.startswith(("assetscan.application", "assetscan.cli")):
                violations.append(f"{name}: {mod}")
    assert not violations, "Runtime -> workflow import violations:\n" + "\n".join(violations)
