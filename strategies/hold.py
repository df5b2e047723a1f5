from __future__ import annotations

from backtest.contracts import DEFAULT_FEE_RATE, DEFAULT_HOLD_BUY_RATIO, BacktestConfig
from strategies.base import TradingStrategy

__all__ = ["HoldStrategy"]


class HoldStrategy(TradingStrategy):
    """Buy once with a fixed share of cash and never touch the position again."""

    strategy_id = "hold"
    name = "Buy & Hold"

    def __init__(
        self,
        initial_cash: int,
        *,
        buy_ratio: float = DEFAULT_HOLD_BUY_RATIO,
        fee_rate: float = DEFAULT_FEE_RATE,
    ) -> None:
        super().__init__(initial_cash, fee_rate)
        self.buy_ratio = buy_ratio
        self.has_bought = False

    @classmethod
    def from_config(cls, config: BacktestConfig) -> HoldStrategy:
        return cls(config.initial_cash, buy_ratio=config.hold_buy_ratio, fee_rate=config.fee_rate)

    def decide(self, index: int, price: int, change_rate: float) -> None:
        if self.has_bought or self.ledger.cash < price:
            return

        budget = int(self.ledger.cash * self.buy_ratio)
        qty = self.ledger.max_affordable(price, self.fee_rate, budget)
        if qty > 0:
            self._buy(index, price, qty)
            self.has_bought = True
