"""Backtest contracts and data structures."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass

DEFAULT_INITIAL_CASH = 10_000_000
DEFAULT_FEE_RATE = 0.00015  # 0.015%
DEFAULT_PANIC_THRESHOLD = -0.10  # -10% stop-loss
DEFAULT_DCA_DROP_RATE = -0.05  # -5% dip re-buy
DEFAULT_DCA_INTERVAL = 5  # ticks
DEFAULT_DCA_BUY_RATIO = 0.25
DEFAULT_HOLD_BUY_RATIO = 0.50


@dataclass(frozen=True)
class BacktestConfig:
    """Tunable parameters shared by every strategy in a run."""

    initial_cash: int = DEFAULT_INITIAL_CASH
    fee_rate: float = DEFAULT_FEE_RATE  # fraction of trade notional
    panic_threshold: float = DEFAULT_PANIC_THRESHOLD  # negative fraction
    dca_drop_rate: float = DEFAULT_DCA_DROP_RATE  # negative fraction
    dca_interval: int = DEFAULT_DCA_INTERVAL
    dca_buy_ratio: float = DEFAULT_DCA_BUY_RATIO  # fraction of current cash
    hold_buy_ratio: float = DEFAULT_HOLD_BUY_RATIO  # fraction of current cash

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.initial_cash < 0:
            raise ValueError("initial_cash cannot be negative")
        if not 0.0 <= self.fee_rate < 1.0:
            raise ValueError("fee_rate must be in [0, 1)")
        if self.panic_threshold > 0:
            raise ValueError("panic_threshold must be zero or negative")
        if self.dca_drop_rate > 0:
            raise ValueError("dca_drop_rate must be zero or negative")
        if self.dca_interval < 0:
            raise ValueError("dca_interval cannot be negative")
        if not 0.0 <= self.dca_buy_ratio <= 1.0:
            raise ValueError("dca_buy_ratio must be in [0, 1]")
        if not 0.0 <= self.hold_buy_ratio <= 1.0:
            raise ValueError("hold_buy_ratio must be in [0, 1]")


@dataclass(frozen=True)
class StrategyReport:
    """Final statistics for one strategy after a run."""

    strategy_id: str
    name: str
    initial_cash: int
    final_equity: int
    total_return_pct: float
    max_drawdown_pct: float
    buy_count: int
    sell_count: int
    final_shares: int
    avg_cost: int

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary."""
        return asdict(self)

    def to_json(self) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), separators=(",", ":"), ensure_ascii=False)

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> StrategyReport:
        """Create from dictionary."""
        return cls(**data)  # type: ignore[arg-type]

    @classmethod
    def from_json(cls, json_str: str) -> StrategyReport:
        """Deserialize from JSON string."""
        return cls.from_dict(json.loads(json_str))
