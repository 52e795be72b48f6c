"""Architecture boundary checks between the pure and privileged layers."""

from __future__ import annotations

import ast
from pathlib import Path

_ROOT = Path(__file__).resolve().parents[1]
_PURE_PACKAGES = ("domain", "receipt")
_PRIVILEGED_PREFIXES = ("billbeam.runtime", "billbeam.application", "billbeam.cli")
_IMPURE_MODULES = {"logging", "httpx", "fastapi", "uvicorn", "os"}


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


def _pure_files() -> list[Path]:
    return [path for package in _PURE_PACKAGES for path in sorted((_ROOT / package).rglob("*.py"))]


def test_pure_layers_do_not_import_privileged_layers() -> None:
    violations: list[str] = []
    for path in _pure_files():
        for mod in _imports(path):
            if mod.startswith(_PRIVILEGED_PREFIXES):
                violations.append(f"{path}: {mod}")
    assert not violations, "Pure -> privileged import violations:\n" + "\n".join(violations)


def test_pure_layers_do_no_io_or_logging() -> None:
    violations: list[str] = []
    for path in _pure_files():
        for mod in _imports(path):
            if mod.split(".")[0] in _IMPURE_MODULES:
                violations.append(f"{path}: {mod}")
    assert not violations, "Pure layer impurity violations:\n" + "\n".join(violations)


def test_domain_does_not_import_receipt_package() -> None:
    violations: list[str] = []
    for path in sorted((_ROOT / "domain").rglob("*.py")):
        for mod in _imports(path):
            if mod == "billbeam.receipt" or mod.startswith("billbeam.receipt."):
                violations.append(f"{path}: {mod}")
    assert not violations, "Domain -> receipt import violations:\n" + "\n".join(violations)
