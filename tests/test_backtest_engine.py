from __future__ import annotations

import pytest

from backtest.contracts import BacktestConfig
from backtest.engine import BacktestEngine, change_rate
from backtest.report import summary_comment
from core.market import PriceSeries
from strategies.base import TradingStrategy
from strategies.dca import DCAStrategy
from strategies.hold import HoldStrategy
from strategies.panic_sell import PanicSellStrategy
from strategies.registry import StrategyRegistry

SAMPLE_PRICES = [
    70000, 71000, 69500, 68000, 65000, 62000, 58000, 55000, 53000, 50000,
    48000, 49000, 51000, 52000, 54000, 56000, 58000, 60000, 62000, 64000,
    65000, 67000, 68000, 70000, 72000, 74000, 75000, 76000, 78000, 80000,
]  # fmt: skip


class RecordingStrategy(TradingStrategy):
    """Strategy that never trades and logs every callback."""

    strategy_id = "recording"
    name = "Recording"

    def __init__(
        self,
        initial_cash: int,
        calls: list[tuple[str, int, int, float]],
        tag: str,
    ) -> None:
        super().__init__(initial_cash, 0.0)
        self.calls = calls
        self.tag = tag
        self.finish_prices: list[int] = []

    @classmethod
    def from_config(cls, config: BacktestConfig) -> RecordingStrategy:
        return cls(config.initial_cash, [], "cfg")

    def decide(self, index: int, price: int, change_rate: float) -> None:
        self.calls.append((self.tag, index, price, change_rate))

    def on_finish(self, last_price: int) -> None:
        self.finish_prices.append(last_price)
        super().on_finish(last_price)


def test_change_rate() -> None:
    assert change_rate(110, 100) == pytest.approx(10.0)
    assert change_rate(99, 110) == pytest.approx(-10.0)
    assert change_rate(50, 0) == 0.0


def test_empty_price_series_produces_no_reports() -> None:
    strategy = HoldStrategy(1000)
    engine = BacktestEngine([], BacktestConfig(initial_cash=1000), [strategy])

    assert engine.run() == []
    assert engine.results == []
    assert strategy.equity_curve == []
    assert strategy.finished is False


def test_every_strategy_sees_identical_ticks_in_order() -> None:
    calls: list[tuple[str, int, int, float]] = []
    first = RecordingStrategy(1000, calls, "a")
    second = RecordingStrategy(1000, calls, "b")
    engine = BacktestEngine([100, 110, 99], BacktestConfig(initial_cash=1000))
    engine.add_strategy(first)
    engine.add_strategy(second)

    engine.run()

    assert [c[:3] for c in calls] == [
        ("a", 0, 100),
        ("b", 0, 100),
        ("a", 1, 110),
        ("b", 1, 110),
        ("a", 2, 99),
        ("b", 2, 99),
    ]
    rates = [c[3] for c in calls[::2]]
    assert rates == pytest.approx([0.0, 10.0, -10.0])
    assert first.finish_prices == [99]
    assert second.finish_prices == [99]


def test_equity_length_matches_ticks() -> None:
    config = BacktestConfig()
    strategies = StrategyRegistry.with_defaults().build(config)
    engine = BacktestEngine(SAMPLE_PRICES, config, strategies)

    engine.run()

    for strategy in engine.strategies:
        assert len(strategy.equity_curve) == len(SAMPLE_PRICES)


def test_reports_follow_registration_order() -> None:
    config = BacktestConfig(initial_cash=1000, fee_rate=0.0)
    engine = BacktestEngine(
        [100, 90, 81],
        config,
        [HoldStrategy.from_config(config), PanicSellStrategy.from_config(config)],
    )

    reports = engine.run()

    assert [r.strategy_id for r in reports] == ["hold", "panic_sell"]


def test_panic_scenario_report() -> None:
    config = BacktestConfig(initial_cash=1000, fee_rate=0.0, panic_threshold=-0.10)
    engine = BacktestEngine([100, 90, 81], config, [PanicSellStrategy.from_config(config)])

    (report,) = engine.run()

    assert report.initial_cash == 1000
    assert report.final_equity == 900
    assert report.total_return_pct == pytest.approx(-10.0)
    assert report.max_drawdown_pct == pytest.approx(10.0)
    assert report.buy_count == 1
    assert report.sell_count == 1
    assert report.final_shares == 0
    assert report.avg_cost == 0


def test_hold_scenario_report() -> None:
    config = BacktestConfig(initial_cash=1000, fee_rate=0.0, hold_buy_ratio=0.5)
    engine = BacktestEngine([100, 100, 100], config, [HoldStrategy.from_config(config)])

    (report,) = engine.run()

    assert report.final_shares == 5
    assert report.final_equity == 1000
    assert report.total_return_pct == 0.0
    assert report.max_drawdown_pct == 0.0


def test_price_series_input() -> None:
    series = PriceSeries.from_prices("005930", "Samsung Electronics", SAMPLE_PRICES)
    config = BacktestConfig()
    engine = BacktestEngine(series, config, StrategyRegistry.with_defaults().build(config))

    reports = {r.strategy_id: r for r in engine.run()}

    # -11.4% at 62,000 trips the -10% stop once
    assert reports["panic_sell"].buy_count == 1
    assert reports["panic_sell"].sell_count == 1
    assert reports["panic_sell"].final_shares == 0
    assert reports["panic_sell"].total_return_pct < 0

    # 5,000,000 // (70,000 + 10 fee) = 71 shares, never sold
    assert reports["hold"].final_shares == 71
    assert reports["hold"].avg_cost == 70000
    assert reports["hold"].sell_count == 0

    assert reports["dca"].sell_count == 0
    assert reports["dca"].buy_count > 1
    assert reports["dca"].total_return_pct > reports["panic_sell"].total_return_pct
    assert summary_comment(engine.results).startswith("The DCA strategy beat")


def test_run_twice_raises() -> None:
    config = BacktestConfig(initial_cash=1000)
    engine = BacktestEngine([100], config, [DCAStrategy.from_config(config)])
    engine.run()

    with pytest.raises(RuntimeError, match="already run"):
        engine.run()


def test_add_strategy_after_run_raises() -> None:
    config = BacktestConfig(initial_cash=1000)
    engine = BacktestEngine([100], config, [DCAStrategy.from_config(config)])
    engine.run()

    with pytest.raises(RuntimeError):
        engine.add_strategy(HoldStrategy.from_config(config))


def test_default_config_is_used() -> None:
    engine = BacktestEngine([100])

    assert engine.config == BacktestConfig()
    assert engine.run() == []


def test_add_strategy_with_different_starting_cash_raises() -> None:
    engine = BacktestEngine([100], BacktestConfig(initial_cash=1000))

    with pytest.raises(ValueError, match="hold starts with 2000 cash"):
        engine.add_strategy(HoldStrategy(2000))

    assert engine.strategies == []
