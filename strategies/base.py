from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

import structlog

from backtest.equity_tracker import EquityTracker
from core.ledger import CostBasisLedger

if TYPE_CHECKING:
    from backtest.contracts import BacktestConfig

__all__ = ["TradingStrategy"]

logger = structlog.get_logger(__name__)


class TradingStrategy(ABC):
    """Base interface for per-tick trading habits.

    Each instance owns its ledger and equity curve. ``on_tick`` lets the
    subclass decide, then records the tick's total value, so every tick
    produces exactly one equity point.
    """

    strategy_id: str
    name: str

    def __init__(self, initial_cash: int, fee_rate: float) -> None:
        self.initial_cash = initial_cash
        self.fee_rate = fee_rate
        self.ledger = CostBasisLedger(initial_cash)
        self.equity = EquityTracker(initial_cash)
        self.buy_count = 0
        self.sell_count = 0
        self.finished = False

    @classmethod
    @abstractmethod
    def from_config(cls, config: BacktestConfig) -> TradingStrategy:
        """Build the strategy from shared backtest parameters."""
        raise NotImplementedError

    @abstractmethod
    def decide(self, index: int, price: int, change_rate: float) -> None:
        """Buy or sell for the current tick (may do nothing)."""
        raise NotImplementedError

    def on_tick(self, index: int, price: int, change_rate: float) -> None:
        """Handle one price tick and record equity."""
        if self.finished:
            raise RuntimeError(f"{self.strategy_id} already finished")
        self.decide(index, price, change_rate)
        self.equity.record(self.ledger.cash, self.ledger.shares, price)

    def on_finish(self, last_price: int) -> None:
        """Called once after the last tick. State is read-only afterwards."""
        self.finished = True

    def total_value(self, price: int) -> int:
        return self.ledger.total_value(price)

    @property
    def cash(self) -> int:
        return self.ledger.cash

    @property
    def shares(self) -> int:
        return self.ledger.shares

    @property
    def avg_cost(self) -> int:
        return self.ledger.avg_cost

    @property
    def equity_curve(self) -> list[int]:
        return self.equity.get_equity_curve()

    def _buy(self, index: int, price: int, quantity: int) -> bool:
        if not self.ledger.buy(price, quantity, self.fee_rate):
            return False
        self.buy_count += 1
        logger.debug(
            "strategy_buy",
            strategy_id=self.strategy_id,
            index=index,
            price=price,
            qty=quantity,
            avg_cost=self.ledger.avg_cost,
            cash=self.ledger.cash,
        )
        return True

    def _liquidate(self, index: int, price: int) -> bool:
        shares = self.ledger.shares
        if not self.ledger.liquidate_all(price, self.fee_rate):
            return False
        self.sell_count += 1
        logger.debug(
            "strategy_liquidate",
            strategy_id=self.strategy_id,
            index=index,
            price=price,
            qty=shares,
            cash=self.ledger.cash,
        )
        return True

    def __repr__(self) -> str:
        return f"{type(self).__name__}(strategy_id={self.strategy_id!r}, ledger={self.ledger!r})"
