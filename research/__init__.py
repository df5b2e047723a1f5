"""Research utilities package.

Offline tools for looking at finished backtests side-by-side.

Quick start:
    >>> from research import StrategyComparison
    >>> comparison = StrategyComparison.from_engine(engine)
    >>> comparison.compare_metrics()
"""

from __future__ import annotations

from .comparison import StrategyComparison

__all__ = [
    "StrategyComparison",
]

__version__ = "0.1.0"
