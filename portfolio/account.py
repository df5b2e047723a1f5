"""Cash account with order placement and execution for one instrument."""

from __future__ import annotations

import itertools
import time
from collections.abc import Callable

import structlog

from backtest.contracts import DEFAULT_FEE_RATE
from core.ledger import CostBasisLedger, calculate_fee
from core.market import PriceSeries
from portfolio.contracts import Order, OrderSide, PriceType, Transaction

logger = structlog.get_logger(__name__)


class Account:
    """Brokerage account holding cash and a single-instrument position.

    Order and transaction ids are sequential per account. Execution failures
    (unknown order, wrong instrument, insufficient cash or shares, limit not
    reached) return False and leave the order pending.
    """

    def __init__(
        self,
        account_number: str,
        symbol: str,
        balance: int = 0,
        *,
        fee_rate: float = DEFAULT_FEE_RATE,
        clock: Callable[[], int] | None = None,
    ) -> None:
        self.account_number = account_number
        self.symbol = symbol
        self.fee_rate = fee_rate
        self.ledger = CostBasisLedger(balance)
        self._clock = clock or time.time_ns
        self._order_ids = itertools.count(1)
        self._transaction_ids = itertools.count(1)
        self._orders: dict[int, Order] = {}
        self._transactions: list[Transaction] = []
        self._last_price = 0

    # ---------------------------------------------------------------------
    # Cash
    # ---------------------------------------------------------------------

    def deposit(self, amount: int) -> None:
        self.ledger.deposit(amount)

    def withdraw(self, amount: int) -> bool:
        return self.ledger.withdraw(amount)

    @property
    def balance(self) -> int:
        return self.ledger.cash

    # ---------------------------------------------------------------------
    # Orders
    # ---------------------------------------------------------------------

    def place_order(
        self,
        side: OrderSide,
        quantity: int,
        *,
        price_type: PriceType = "market",
        requested_price: int = 0,
    ) -> Order:
        """Queue a new pending order and return it."""
        order = Order(
            order_id=next(self._order_ids),
            symbol=self.symbol,
            side=side,
            price_type=price_type,
            requested_price=requested_price,
            quantity=quantity,
            ts_ns=self._clock(),
        )
        self._orders[order.order_id] = order
        return order

    def cancel_order(self, order_id: int) -> bool:
        order = self._orders.get(order_id)
        if order is None or not order.is_pending:
            return False
        self._orders[order_id] = order.cancelled()
        return True

    def get_order(self, order_id: int) -> Order | None:
        return self._orders.get(order_id)

    @property
    def orders(self) -> list[Order]:
        return list(self._orders.values())

    @property
    def transactions(self) -> list[Transaction]:
        return list(self._transactions)

    def execute_order(self, order_id: int, series: PriceSeries) -> bool:
        """Fill a pending order at the current quote of ``series``.

        Args:
            order_id: Order to execute
            series: Price source for the order's instrument

        Returns:
            True if the order was filled
        """
        order = self._orders.get(order_id)
        if order is None or not order.is_pending or series.code != order.symbol:
            return False

        price = series.current_price
        if not self._limit_reached(order, price):
            return False

        if order.side == "buy":
            filled = self.ledger.buy(price, order.quantity, self.fee_rate)
        else:
            filled = self.ledger.sell(price, order.quantity, self.fee_rate)
        if not filled:
            logger.debug("order_rejected", order_id=order_id, side=order.side, price=price)
            return False

        self._last_price = price
        self._orders[order_id] = order.completed()

        amount = price * order.quantity
        transaction = Transaction(
            transaction_id=next(self._transaction_ids),
            order_id=order_id,
            symbol=series.code,
            name=series.name,
            side=order.side,
            quantity=order.quantity,
            price=price,
            amount=amount,
            fee=calculate_fee(amount, self.fee_rate),
            ts_ns=self._clock(),
        )
        self._transactions.append(transaction)
        logger.info(
            "order_executed",
            account=self.account_number,
            order_id=order_id,
            side=order.side,
            qty=order.quantity,
            price=price,
            net_amount=transaction.net_amount,
        )
        return True

    @staticmethod
    def _limit_reached(order: Order, price: int) -> bool:
        if order.price_type == "market":
            return True
        if order.side == "buy":
            return price <= order.requested_price
        return price >= order.requested_price

    # ---------------------------------------------------------------------
    # Valuation
    # ---------------------------------------------------------------------

    @property
    def shares(self) -> int:
        return self.ledger.shares

    @property
    def avg_cost(self) -> int:
        return self.ledger.avg_cost

    def position_value(self, price: int | None = None) -> int:
        """Holdings marked at ``price`` (defaults to the last fill price)."""
        mark = self._last_price if price is None else price
        return self.ledger.shares * mark

    def total_asset_value(self, price: int | None = None) -> int:
        return self.ledger.cash + self.position_value(price)

    def profit(self, price: int | None = None) -> int:
        """Unrealized profit of the open position."""
        return self.position_value(price) - self.ledger.cost_basis()

    def profit_rate(self, price: int | None = None) -> float:
        """Unrealized profit as a percentage of cost basis."""
        invested = self.ledger.cost_basis()
        if invested == 0:
            return 0.0
        return self.profit(price) / invested * 100.0
