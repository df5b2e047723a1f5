"""Equity curve tracking for strategy valuation."""

from __future__ import annotations


class EquityTracker:
    """Track total value once per tick during a backtest."""

    def __init__(self, initial_cash: int) -> None:
        """Initialize equity tracker.

        Args:
            initial_cash: Starting cash
        """
        self.initial_cash = initial_cash
        self.equity_curve: list[int] = []

    def record(self, cash: int, shares: int, price: int) -> int:
        """Record equity snapshot for the current tick.

        Args:
            cash: Available cash
            shares: Shares held
            price: Current price

        Returns:
            The recorded equity
        """
        equity = cash + shares * price
        self.equity_curve.append(equity)
        return equity

    def get_equity_curve(self) -> list[int]:
        """Get the complete equity curve.

        Returns:
            Equity values in tick order
        """
        return self.equity_curve.copy()

    def get_final_equity(self) -> int:
        """Get the final equity value.

        Returns:
            Final equity, or initial cash if no records
        """
        if not self.equity_curve:
            return self.initial_cash
        return self.equity_curve[-1]

    def get_peak_equity(self) -> int:
        """Get the peak equity value.

        Returns:
            Maximum equity reached, or initial cash if no records
        """
        if not self.equity_curve:
            return self.initial_cash
        return max(self.equity_curve)

    def get_current_drawdown(self) -> float:
        """Get the current drawdown from peak.

        Returns:
            Current drawdown as positive percentage
        """
        if not self.equity_curve:
            return 0.0

        peak = self.get_peak_equity()
        if peak <= 0:
            return 0.0

        drawdown = ((peak - self.equity_curve[-1]) / peak) * 100.0
        return max(0.0, drawdown)

    def __len__(self) -> int:
        return len(self.equity_curve)
