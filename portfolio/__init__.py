"""Single-instrument cash account with order placement."""

from __future__ import annotations

__all__ = [
    "account",
    "contracts",
]
