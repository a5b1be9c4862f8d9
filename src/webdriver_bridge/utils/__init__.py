"""Utility helpers: bounded retry and diagnostics."""

from .retry import retry_op
from .diagnostics import collect_diagnostics

__all__ = [
    "retry_op",
    "collect_diagnostics",
]
