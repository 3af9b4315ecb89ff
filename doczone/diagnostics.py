"""Environment and configuration diagnostics for DocZone.

This module inspects required dependencies and the DOCZONE_* environment
so users get actionable guidance instead of cryptic errors.
"""

from __future__ import annotations

from dataclasses import dataclass
import importlib.util
import os
from typing import Dict, List

from .config import (
    DEFAULT_MAX_BLOCKS,
    DEFAULT_MAX_TOKENS,
    ENV_MAX_BLOCKS,
    ENV_MAX_TOKENS,
    int_from_env,
)
from .pipeline import ENV_INDENT
from .taxonomy import TAXONOMIES


@dataclass
class CheckResult:
    """Represents a diagnostic check with status and human-readable detail."""

    name: str
    status: str  # ok | warn | error
    detail: str


def _module_available(module_name: str) -> bool:
    return importlib.util.find_spec(module_name) is not None


def _check_dependency(module: str, friendly: str, required: bool = False) -> CheckResult:
    available = _module_available(module)
    status = "ok" if available else ("error" if required else "warn")
    detail = f"{friendly} available" if available else f"{friendly} missing"
    return CheckResult(friendly, status, detail)


def _check_env(name: str, default: int) -> CheckResult:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return CheckResult(name, "ok", f"Not set, using {default}")
    try:
        value = int_from_env(name, default)
    except ValueError as e:
        return CheckResult(name, "error", str(e))
    if value < 0:
        return CheckResult(name, "error", f"Must not be negative, got {value}")
    return CheckResult(name, "ok", f"Set to {value}")


def _check_taxonomies() -> CheckResult:
    detail = ", ".join(f"{name} ({len(t)} labels)" for name, t in sorted(TAXONOMIES.items()))
    return CheckResult("Taxonomies", "ok", detail)


def collect_diagnostics() -> List[CheckResult]:
    """Run a series of lightweight checks and return their results."""
    checks: List[CheckResult] = []

    # Core dependencies
    checks.append(_check_dependency("fitz", "PyMuPDF", required=True))
    checks.append(_check_dependency("typer", "Typer", required=True))
    checks.append(_check_dependency("rich", "Rich", required=True))

    # Configuration
    checks.append(_check_env(ENV_MAX_BLOCKS, DEFAULT_MAX_BLOCKS))
    checks.append(_check_env(ENV_MAX_TOKENS, DEFAULT_MAX_TOKENS))
    checks.append(_check_env(ENV_INDENT, 0))

    # Resources
    checks.append(_check_taxonomies())

    return checks


def summarize_checks(checks: List[CheckResult]) -> Dict[str, int]:
    summary = {"ok": 0, "warn": 0, "error": 0}
    for c in checks:
        if c.status in summary:
            summary[c.status] += 1
    return summary
