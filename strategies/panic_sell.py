from __future__ import annotations

from backtest.contracts import DEFAULT_FEE_RATE, DEFAULT_PANIC_THRESHOLD, BacktestConfig
from strategies.base import TradingStrategy

__all__ = ["PanicSellStrategy"]


class PanicSellStrategy(TradingStrategy):
    """Go all in on the first affordable tick, then dump everything on a loss.

    The stop fires when ``(price - avg_cost) / avg_cost <= threshold``. After
    that single liquidation the strategy stays in cash for the rest of the run.
    """

    strategy_id = "panic_sell"
    name = "Panic Seller"

    def __init__(
        self,
        initial_cash: int,
        *,
        threshold: float = DEFAULT_PANIC_THRESHOLD,
        fee_rate: float = DEFAULT_FEE_RATE,
    ) -> None:
        super().__init__(initial_cash, fee_rate)
        self.threshold = threshold
        self.has_bought = False

    @classmethod
    def from_config(cls, config: BacktestConfig) -> PanicSellStrategy:
        return cls(config.initial_cash, threshold=config.panic_threshold, fee_rate=config.fee_rate)

    def decide(self, index: int, price: int, change_rate: float) -> None:
        ledger = self.ledger
        if not self.has_bought:
            if ledger.cash >= price:
                qty = ledger.max_affordable(price, self.fee_rate)
                if qty > 0:
                    # entry is spent even if the ledger rejects the fee
                    self._buy(index, price, qty)
                    self.has_bought = True
            return

        if ledger.shares > 0 and ledger.avg_cost > 0:
            profit_rate = (price - ledger.avg_cost) / ledger.avg_cost
            if profit_rate <= self.threshold:
                self._liquidate(index, price)
