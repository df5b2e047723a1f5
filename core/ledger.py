"""Fee-aware average-cost position ledger for a single instrument."""

from __future__ import annotations

__all__ = ["CostBasisLedger", "calculate_fee"]


def calculate_fee(notional: int, fee_rate: float) -> int:
    """Return the commission charged on ``notional``, truncated toward zero."""
    return int(notional * fee_rate)


class CostBasisLedger:
    """Track cash, shares held and the weighted-average purchase price.

    All amounts are integer currency units. ``avg_cost`` is 0 whenever
    ``shares`` is 0.
    """

    def __init__(self, cash: int) -> None:
        """Initialize ledger.

        Args:
            cash: Starting cash
        """
        self.cash = int(cash)
        self.shares = 0
        self.avg_cost = 0

    def buy(self, price: int, quantity: int, fee_rate: float) -> bool:
        """Buy ``quantity`` shares at ``price``.

        Args:
            price: Fill price per share
            quantity: Number of shares
            fee_rate: Commission as a fraction of notional

        Returns:
            True if the buy was applied, False if skipped
        """
        if quantity <= 0:
            return False

        cost = price * quantity
        fee = calculate_fee(cost, fee_rate)
        if self.cash < cost + fee:
            return False

        total_cost = self.avg_cost * self.shares + cost
        self.shares += quantity
        self.avg_cost = total_cost // self.shares
        self.cash -= cost + fee
        return True

    def sell(self, price: int, quantity: int, fee_rate: float) -> bool:
        """Sell part of the position. Average cost is unchanged.

        Args:
            price: Fill price per share
            quantity: Number of shares to sell
            fee_rate: Commission as a fraction of notional

        Returns:
            True if the sell was applied, False if skipped
        """
        if quantity <= 0 or quantity > self.shares:
            return False

        revenue = price * quantity
        self.cash += revenue - calculate_fee(revenue, fee_rate)
        self.shares -= quantity
        if self.shares == 0:
            self.avg_cost = 0
        return True

    def liquidate_all(self, price: int, fee_rate: float) -> bool:
        """Sell every held share at ``price``.

        Returns:
            True if shares were sold, False if nothing was held
        """
        if self.shares == 0:
            return False
        return self.sell(price, self.shares, fee_rate)

    def deposit(self, amount: int) -> None:
        """Add cash. Non-positive amounts are ignored."""
        if amount > 0:
            self.cash += amount

    def withdraw(self, amount: int) -> bool:
        """Remove cash if the balance covers it."""
        if amount <= 0 or self.cash < amount:
            return False
        self.cash -= amount
        return True

    def max_affordable(self, price: int, fee_rate: float, budget: int | None = None) -> int:
        """Return how many whole shares ``budget`` covers including per-share fee.

        Args:
            price: Price per share
            fee_rate: Commission as a fraction of notional
            budget: Amount to spend (defaults to all cash)

        Returns:
            Whole share count, 0 if nothing is affordable
        """
        if budget is None:
            budget = self.cash
        unit_cost = price + calculate_fee(price, fee_rate)
        if unit_cost <= 0 or budget <= 0:
            return 0
        return budget // unit_cost

    def total_value(self, price: int) -> int:
        """Cash plus holdings marked at ``price``."""
        return self.cash + self.shares * price

    def cost_basis(self) -> int:
        """Total purchase cost attributed to held shares."""
        return self.shares * self.avg_cost

    def __repr__(self) -> str:
        return (
            f"CostBasisLedger(cash={self.cash}, shares={self.shares}, "
            f"avg_cost={self.avg_cost})"
        )
