"""Order and transaction contracts for the account ledger."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Literal

OrderSide = Literal["buy", "sell"]
PriceType = Literal["market", "limit"]
OrderStatus = Literal["pending", "completed", "cancelled"]


@dataclass(frozen=True)
class Order:
    """Order placed against an account.

    Attributes:
        order_id: Sequential id assigned by the owning account
        symbol: Instrument code
        side: ``"buy"`` or ``"sell"``
        price_type: ``"market"`` fills at the current quote; ``"limit"`` only
            when the quote is at or better than ``requested_price``
        requested_price: Limit price (ignored for market orders)
        quantity: Whole shares
        status: Lifecycle state
        ts_ns: Creation time in epoch nanoseconds
    """

    order_id: int
    symbol: str
    side: OrderSide
    price_type: PriceType
    requested_price: int
    quantity: int
    status: OrderStatus = "pending"
    ts_ns: int = 0

    def __post_init__(self) -> None:
        """Validate order parameters."""
        if self.side not in ("buy", "sell"):
            raise ValueError(f"Unsupported order side '{self.side}'")
        if self.price_type not in ("market", "limit"):
            raise ValueError(f"Unsupported price type '{self.price_type}'")
        if self.quantity <= 0:
            raise ValueError(f"quantity must be positive, got {self.quantity}")
        if self.price_type == "limit" and self.requested_price <= 0:
            raise ValueError("limit orders need a positive requested_price")

    @property
    def is_pending(self) -> bool:
        return self.status == "pending"

    def completed(self) -> Order:
        return replace(self, status="completed")

    def cancelled(self) -> Order:
        return replace(self, status="cancelled")


@dataclass(frozen=True)
class Transaction:
    """Executed fill for an order."""

    transaction_id: int
    order_id: int
    symbol: str
    name: str
    side: OrderSide
    quantity: int
    price: int
    amount: int  # price * quantity
    fee: int
    ts_ns: int = 0

    @property
    def net_amount(self) -> int:
        """Cash moved by the fill: paid on a buy, received on a sell."""
        if self.side == "buy":
            return self.amount + self.fee
        return self.amount - self.fee
