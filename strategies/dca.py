from __future__ import annotations

from backtest.contracts import (
    DEFAULT_DCA_BUY_RATIO,
    DEFAULT_DCA_DROP_RATE,
    DEFAULT_DCA_INTERVAL,
    DEFAULT_FEE_RATE,
    BacktestConfig,
)
from strategies.base import TradingStrategy

__all__ = ["DCAStrategy"]


class DCAStrategy(TradingStrategy):
    """Dollar-cost averaging: buy in slices on a schedule or on dips.

    The first affordable tick always buys. Later ticks buy when ``interval``
    ticks have passed since the last buy, or when the price sits at least
    ``drop_rate`` below the last buy price. Each buy spends ``buy_ratio`` of
    current cash, or all of it when that slice cannot cover one share.
    """

    strategy_id = "dca"
    name = "DCA Coach"

    def __init__(
        self,
        initial_cash: int,
        *,
        drop_rate: float = DEFAULT_DCA_DROP_RATE,
        interval: int = DEFAULT_DCA_INTERVAL,
        buy_ratio: float = DEFAULT_DCA_BUY_RATIO,
        fee_rate: float = DEFAULT_FEE_RATE,
    ) -> None:
        super().__init__(initial_cash, fee_rate)
        self.drop_rate = drop_rate
        self.interval = interval
        self.buy_ratio = buy_ratio
        self.last_buy_index = -1
        self.last_buy_price = 0

    @classmethod
    def from_config(cls, config: BacktestConfig) -> DCAStrategy:
        return cls(
            config.initial_cash,
            drop_rate=config.dca_drop_rate,
            interval=config.dca_interval,
            buy_ratio=config.dca_buy_ratio,
            fee_rate=config.fee_rate,
        )

    def should_buy(self, index: int, price: int) -> bool:
        if self.ledger.cash < price:
            return False
        if self.last_buy_index < 0:
            return True

        interval_met = index - self.last_buy_index >= self.interval
        drop_met = (
            self.last_buy_price > 0
            and (price - self.last_buy_price) / self.last_buy_price <= self.drop_rate
        )
        return interval_met or drop_met

    def decide(self, index: int, price: int, change_rate: float) -> None:
        if not self.should_buy(index, price):
            return

        budget = int(self.ledger.cash * self.buy_ratio)
        if budget < price:
            budget = self.ledger.cash

        qty = self.ledger.max_affordable(price, self.fee_rate, budget)
        if qty > 0:
            self._buy(index, price, qty)
            self.last_buy_index = index
            self.last_buy_price = price
