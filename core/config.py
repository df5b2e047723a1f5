from __future__ import annotations

from pathlib import Path
from typing import Any, ClassVar, cast

from pydantic import BaseModel, Field

from backtest.contracts import (
    DEFAULT_DCA_BUY_RATIO,
    DEFAULT_DCA_DROP_RATE,
    DEFAULT_DCA_INTERVAL,
    DEFAULT_FEE_RATE,
    DEFAULT_HOLD_BUY_RATIO,
    DEFAULT_INITIAL_CASH,
    DEFAULT_PANIC_THRESHOLD,
    BacktestConfig,
)
from strategies.registry import DEFAULT_LINEUP


class AppCfg(BaseModel):
    model_config: ClassVar[dict[str, Any]] = {"extra": "forbid"}

    name: str
    env: str = "dev"


class LoggingCfg(BaseModel):
    model_config: ClassVar[dict[str, Any]] = {"extra": "forbid"}

    level: str = "INFO"
    json_logs: bool = False
    log_dir: Path | None = None


class BacktestCfg(BaseModel):
    model_config: ClassVar[dict[str, Any]] = {"extra": "forbid"}

    initial_cash: int = Field(default=DEFAULT_INITIAL_CASH, ge=0)
    fee_rate: float = Field(default=DEFAULT_FEE_RATE, ge=0.0, lt=1.0)
    panic_threshold: float = Field(default=DEFAULT_PANIC_THRESHOLD, le=0.0)
    dca_drop_rate: float = Field(default=DEFAULT_DCA_DROP_RATE, le=0.0)
    dca_interval: int = Field(default=DEFAULT_DCA_INTERVAL, ge=0)
    dca_buy_ratio: float = Field(default=DEFAULT_DCA_BUY_RATIO, ge=0.0, le=1.0)
    hold_buy_ratio: float = Field(default=DEFAULT_HOLD_BUY_RATIO, ge=0.0, le=1.0)
    strategies: list[str] = Field(default_factory=lambda: list(DEFAULT_LINEUP))

    def to_backtest_config(self) -> BacktestConfig:
        return BacktestConfig(
            initial_cash=self.initial_cash,
            fee_rate=self.fee_rate,
            panic_threshold=self.panic_threshold,
            dca_drop_rate=self.dca_drop_rate,
            dca_interval=self.dca_interval,
            dca_buy_ratio=self.dca_buy_ratio,
            hold_buy_ratio=self.hold_buy_ratio,
        )


class MarketCfg(BaseModel):
    model_config: ClassVar[dict[str, Any]] = {"extra": "forbid"}

    code: str
    name: str
    prices: list[int] = Field(default_factory=list)
    seed: int | None = None


class Config(BaseModel):
    model_config: ClassVar[dict[str, Any]] = {"extra": "forbid"}

    app: AppCfg
    logging: LoggingCfg = Field(default_factory=LoggingCfg)
    backtest: BacktestCfg = Field(default_factory=BacktestCfg)
    market: MarketCfg


def _read_yaml(path: Path) -> dict[str, Any]:
    """Safe YAML read; returns {} if file missing/empty."""
    import yaml  # lazy import

    if not path.exists():
        return {}
    text = path.read_text(encoding="utf-8")
    data = yaml.safe_load(text)
    return data or {}


def load_config(base_dir: str | Path) -> Config:
    """Load config models from ./config/base.yaml."""

    base_path = Path(base_dir)
    base_yaml = base_path / "config" / "base.yaml"
    data = _read_yaml(base_yaml)
    if not data:
        msg = f"Missing or empty config file: {base_yaml}"
        raise FileNotFoundError(msg)

    return cast(Config, Config.model_validate(data))
