"""Price source and random price-path simulator."""

from __future__ import annotations

import random
from collections.abc import Iterable, Iterator, Sequence
from typing import overload

import structlog

__all__ = ["MarketSimulator", "PriceSeries"]

logger = structlog.get_logger(__name__)


class PriceSeries(Sequence[int]):
    """Single instrument with a current quote and an ordered price history.

    Behaves as a read-only sequence over the history so it can be handed
    straight to the backtest engine.
    """

    def __init__(
        self,
        code: str,
        name: str,
        price: int,
        history: Iterable[int] | None = None,
    ) -> None:
        if price < 0:
            raise ValueError("price cannot be negative")
        self.code = code
        self.name = name
        self.current_price = int(price)
        self.previous_price = int(price)
        self._history: list[int] = [int(p) for p in history] if history is not None else []

    @classmethod
    def from_prices(cls, code: str, name: str, prices: Iterable[int]) -> PriceSeries:
        """Build a series whose current quote is the last historical price."""
        history = [int(p) for p in prices]
        return cls(code, name, history[-1] if history else 0, history)

    def update_price(self, new_price: int) -> None:
        """Move the current quote, keeping the old one as previous."""
        self.previous_price = self.current_price
        self.current_price = int(new_price)

    def add_price(self, price: int) -> None:
        """Append a price to the history."""
        self._history.append(int(price))

    def change_rate(self) -> float:
        """Percent change from previous to current quote (0 if previous is 0)."""
        if self.previous_price == 0:
            return 0.0
        return (self.current_price - self.previous_price) / self.previous_price * 100.0

    def price_at(self, idx: int) -> int:
        """Historical price at ``idx``, or -1 when out of range."""
        if idx < 0 or idx >= len(self._history):
            return -1
        return self._history[idx]

    @property
    def history(self) -> list[int]:
        return self._history.copy()

    @overload
    def __getitem__(self, idx: int) -> int: ...

    @overload
    def __getitem__(self, idx: slice) -> list[int]: ...

    def __getitem__(self, idx: int | slice) -> int | list[int]:
        return self._history[idx]

    def __len__(self) -> int:
        return len(self._history)

    def __iter__(self) -> Iterator[int]:
        return iter(self._history)

    def __repr__(self) -> str:
        return (
            f"PriceSeries(code={self.code!r}, name={self.name!r}, "
            f"current_price={self.current_price}, ticks={len(self._history)})"
        )


class MarketSimulator:
    """Random-walk quote generator with occasional crash days.

    Each step draws a normal move in [-3%, +3%] with probability
    ``1 - crash_probability``, otherwise a crash move in [-15%, -5%]. Moves are
    quantised to 0.01% and the resulting price never drops below 1.
    """

    def __init__(
        self,
        *,
        seed: int | None = None,
        rng: random.Random | None = None,
        crash_probability: float = 0.05,
    ) -> None:
        if not 0.0 <= crash_probability <= 1.0:
            raise ValueError("crash_probability must be between 0 and 1")
        self._rng = rng or random.Random(seed)
        self.crash_probability = crash_probability

    def next_rate(self) -> float:
        """Draw the fractional price change for one step."""
        if self._rng.random() >= self.crash_probability:
            return self._rng.randint(-300, 300) / 10_000
        return -self._rng.randint(500, 1500) / 10_000

    def step(self, series: PriceSeries) -> int:
        """Advance the current quote of ``series`` by one simulated move."""
        rate = self.next_rate()
        new_price = max(int(series.current_price * (1 + rate)), 1)
        series.update_price(new_price)
        return new_price

    def generate(self, series: PriceSeries, steps: int) -> list[int]:
        """Simulate ``steps`` moves and append each new price to the history.

        Args:
            series: Instrument to move
            steps: Number of simulated ticks

        Returns:
            The generated prices in order
        """
        if steps < 0:
            raise ValueError("steps cannot be negative")

        generated: list[int] = []
        for _ in range(steps):
            price = self.step(series)
            series.add_price(price)
            generated.append(price)

        logger.debug("price_path_generated", code=series.code, steps=steps)
        return generated
