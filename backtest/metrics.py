"""Performance metrics calculation for backtests."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from backtest.contracts import StrategyReport

if TYPE_CHECKING:
    from strategies.base import TradingStrategy


def calculate_max_drawdown(equity_curve: Sequence[int | float]) -> float:
    """Calculate maximum drawdown percentage.

    The running peak starts unset and is taken from the first point. Points
    are only measured against a positive peak.

    Args:
        equity_curve: Equity values in tick order

    Returns:
        Max drawdown as positive percentage (0.0 for an empty curve)
    """
    peak: int | float | None = None
    max_drawdown = 0.0

    for equity in equity_curve:
        if peak is None or equity > peak:
            peak = equity
        if peak > 0:
            drawdown = (peak - equity) / peak
            max_drawdown = max(max_drawdown, drawdown)

    return max_drawdown * 100.0


def calculate_total_return(initial_cash: int, final_equity: int) -> float:
    """Calculate total return percentage.

    Args:
        initial_cash: Starting cash
        final_equity: Equity at the end of the run

    Returns:
        Total return as percentage (0.0 when initial cash is 0)
    """
    if initial_cash == 0:
        return 0.0
    return (final_equity - initial_cash) / initial_cash * 100.0


def build_report(
    strategy: TradingStrategy,
    initial_cash: int,
    last_price: int,
) -> StrategyReport:
    """Snapshot a finished strategy into a report.

    Args:
        strategy: Strategy after the replay loop
        initial_cash: Cash every strategy started with
        last_price: Terminal price used to mark holdings

    Returns:
        StrategyReport for the strategy
    """
    final_equity = strategy.total_value(last_price)
    return StrategyReport(
        strategy_id=strategy.strategy_id,
        name=strategy.name,
        initial_cash=initial_cash,
        final_equity=final_equity,
        total_return_pct=calculate_total_return(initial_cash, final_equity),
        max_drawdown_pct=calculate_max_drawdown(strategy.equity.equity_curve),
        buy_count=strategy.buy_count,
        sell_count=strategy.sell_count,
        final_shares=strategy.shares,
        avg_cost=strategy.avg_cost,
    )
