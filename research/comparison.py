"""Strategy comparison tools for research analysis."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING

import pandas as pd

from backtest.contracts import StrategyReport

if TYPE_CHECKING:
    from backtest.engine import BacktestEngine


class StrategyComparison:
    """Compare the habits of one run side-by-side."""

    def __init__(
        self,
        reports: Sequence[StrategyReport],
        equity_curves: Mapping[str, Sequence[int]] | None = None,
    ) -> None:
        self.reports = list(reports)
        self.equity_curves = dict(equity_curves or {})

    @classmethod
    def from_engine(cls, engine: BacktestEngine) -> StrategyComparison:
        """Collect reports and equity curves from a finished engine."""
        curves = {s.strategy_id: s.equity_curve for s in engine.strategies}
        return cls(engine.results, curves)

    def compare_metrics(self) -> pd.DataFrame:
        """Return DataFrame comparing all metrics across strategies.

        Returns:
            DataFrame with strategies as rows (registration order) and
            metrics as columns, plus a 1-based ``rank`` by total return
        """
        if not self.reports:
            return pd.DataFrame()

        result_df = pd.DataFrame([r.to_dict() for r in self.reports]).set_index("strategy_id")
        result_df["rank"] = (
            result_df["total_return_pct"].rank(ascending=False, method="first").astype(int)
        )
        return result_df

    def equity_frame(self) -> pd.DataFrame:
        """Equity curves as columns, indexed by tick."""
        if not self.equity_curves:
            return pd.DataFrame()

        frame = pd.DataFrame(
            {sid: pd.Series(curve, dtype="int64") for sid, curve in self.equity_curves.items()}
        )
        frame.index.name = "tick"
        return frame

    def drawdown_frame(self) -> pd.DataFrame:
        """Drawdown from running peak (percent, non-negative) per strategy."""
        equity = self.equity_frame()
        if equity.empty:
            return equity

        running_peak = equity.cummax()
        drawdown = (running_peak - equity) / running_peak.where(running_peak > 0)
        return (drawdown * 100.0).fillna(0.0)

    def identify_divergence_periods(
        self,
        threshold: float = 0.1,
    ) -> list[tuple[int, int, str, str]]:
        """Identify tick ranges where strategies diverged significantly.

        Args:
            threshold: Minimum cumulative return gap (e.g., 0.1 = 10%)

        Returns:
            List of (start_tick, end_tick, outperformer, underperformer) tuples
        """
        equity_df = self.equity_frame()
        if equity_df.empty or len(equity_df.columns) < 2:
            return []

        first = equity_df.iloc[0].where(equity_df.iloc[0] != 0)
        cumulative_returns = (equity_df / first - 1).fillna(0.0)

        divergence_periods: list[tuple[int, int, str, str]] = []
        start_tick: int | None = None
        outperformer = ""
        underperformer = ""

        for tick, row in cumulative_returns.iterrows():
            difference = float(row.max() - row.min())
            if difference >= threshold:
                if start_tick is None:
                    start_tick = int(tick)
                outperformer = str(row.idxmax())
                underperformer = str(row.idxmin())
            elif start_tick is not None:
                divergence_periods.append((start_tick, int(tick) - 1, outperformer, underperformer))
                start_tick = None

        # Handle open divergence at end
        if start_tick is not None:
            last_tick = int(cumulative_returns.index[-1])
            divergence_periods.append((start_tick, last_tick, outperformer, underperformer))

        return divergence_periods
