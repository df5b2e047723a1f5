"""Backtest engine replaying one price series through several habits."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

import structlog

from backtest.contracts import BacktestConfig, StrategyReport
from backtest.metrics import build_report
from strategies.base import TradingStrategy

logger = structlog.get_logger(__name__)


def change_rate(price: int, prev_price: int) -> float:
    """Percent change from ``prev_price`` to ``price`` (0 if prev is 0)."""
    if prev_price == 0:
        return 0.0
    return (price - prev_price) / prev_price * 100.0


class BacktestEngine:
    """Deterministic lock-step backtest engine.

    Every registered strategy sees the same ticks in chronological order,
    in registration order within a tick.
    """

    def __init__(
        self,
        prices: Sequence[int],
        config: BacktestConfig | None = None,
        strategies: Iterable[TradingStrategy] = (),
    ) -> None:
        """Initialize backtest engine.

        Args:
            prices: Chronological price history (e.g. a PriceSeries)
            config: Backtest configuration (defaults if omitted)
            strategies: Strategies to register, in order
        """
        self.prices = prices
        self.config = config or BacktestConfig()
        self._strategies: list[TradingStrategy] = []
        self._results: list[StrategyReport] = []
        self._has_run = False

        for strategy in strategies:
            self.add_strategy(strategy)

    def add_strategy(self, strategy: TradingStrategy) -> None:
        """Register a strategy. Registration order is report order."""
        if self._has_run:
            raise RuntimeError("Cannot add strategies after the backtest has run")
        if strategy.initial_cash != self.config.initial_cash:
            raise ValueError(
                f"{strategy.strategy_id} starts with {strategy.initial_cash} cash, "
                f"engine config has {self.config.initial_cash}"
            )
        self._strategies.append(strategy)

    @property
    def strategies(self) -> list[TradingStrategy]:
        return list(self._strategies)

    @property
    def results(self) -> list[StrategyReport]:
        return list(self._results)

    def run(self) -> list[StrategyReport]:
        """Replay every tick to every strategy and build reports.

        Returns:
            One report per strategy in registration order, or an empty list
            when the price series is empty
        """
        if self._has_run:
            raise RuntimeError("Backtest has already run")

        n_ticks = len(self.prices)
        if n_ticks == 0:
            logger.info("backtest_skipped", reason="empty_price_series")
            return []

        self._has_run = True
        logger.info(
            "backtest_start",
            ticks=n_ticks,
            strategies=[s.strategy_id for s in self._strategies],
            initial_cash=self.config.initial_cash,
        )

        prev_price = self.prices[0]
        for idx in range(n_ticks):
            price = self.prices[idx]
            rate = 0.0 if idx == 0 else change_rate(price, prev_price)

            for strategy in self._strategies:
                strategy.on_tick(idx, price, rate)

            prev_price = price

        last_price = self.prices[n_ticks - 1]
        for strategy in self._strategies:
            strategy.on_finish(last_price)
            self._results.append(build_report(strategy, strategy.initial_cash, last_price))

        logger.info(
            "backtest_complete",
            ticks=n_ticks,
            final_equity={r.strategy_id: r.final_equity for r in self._results},
        )
        return self.results
