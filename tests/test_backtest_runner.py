"""Tests for backtest runner CLI."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from pathlib import Path

import pytest
import structlog
import yaml  # type: ignore[import-untyped]

from backtest.contracts import BacktestConfig
from backtest.runner import (
    SAMPLE_PRICES,
    build_config,
    build_series,
    main,
    parse_args,
    parse_prices,
    run_account_demo,
)
from core.config import load_config
from core.market import PriceSeries


def repo_root() -> Path:
    return Path(__file__).resolve().parents[1]


@pytest.fixture(autouse=True)
def reset_logging() -> Iterator[None]:
    yield
    logging.getLogger().handlers.clear()
    structlog.reset_defaults()


# Argument parsing tests


def test_parse_args_defaults() -> None:
    """Test default argument values."""
    args = parse_args([])

    assert args.config is None
    assert args.prices is None
    assert args.simulate is None
    assert args.capital is None
    assert args.fee is None
    assert args.strategies is None
    assert args.log_level is None
    assert args.json_logs is None
    assert args.account_demo is False


def test_parse_prices() -> None:
    assert parse_prices("100, 90,81") == [100, 90, 81]
    assert parse_prices("") == []


@pytest.mark.parametrize("raw", ["100,abc", "100,-5", "1.5"])
def test_parse_prices_invalid(raw: str) -> None:
    with pytest.raises(ValueError):
        parse_prices(raw)


# Input assembly tests


def test_build_series_defaults_to_sample() -> None:
    series = build_series(parse_args([]), None)

    assert list(series) == list(SAMPLE_PRICES)
    assert series.code == "005930"


def test_build_series_prices_flag_wins_over_config() -> None:
    config = load_config(repo_root())

    series = build_series(parse_args(["--prices", "5,6,7"]), config)

    assert list(series) == [5, 6, 7]
    assert series.name == "Samsung Electronics"


def test_build_series_simulated_path_is_seeded() -> None:
    args = parse_args(["--prices", "1000", "--simulate", "10", "--seed", "9"])

    first = build_series(args, None)
    second = build_series(args, None)

    assert len(first) == 11
    assert first[0] == 1000
    assert list(first) == list(second)


def test_build_series_simulate_without_start_price() -> None:
    with pytest.raises(ValueError, match="starting price"):
        build_series(parse_args(["--prices", "", "--simulate", "3"]), None)


def test_build_config_overrides() -> None:
    config = build_config(parse_args(["--capital", "5000", "--fee", "0.001"]), None)

    assert config == BacktestConfig(initial_cash=5000, fee_rate=0.001)


# Account demo tests


def test_run_account_demo() -> None:
    series = PriceSeries("005930", "Samsung Electronics", 70000)

    lines = run_account_demo(series, 0.0)

    assert lines[0] == "Account 005930_ACC | cash: 10,000,000"
    assert lines[1] == "Order #1 buy 10 @ 70,000: filled"
    assert lines[2].startswith("Order #2 sell 5 @ ")
    assert lines[2].endswith("filled")
    assert lines[3].startswith("Cash: ")
    assert "shares: 5 @ 70,000" in lines[3]


# End-to-end tests


def test_main_with_price_path(capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = main(["--prices", "100,90,81", "--capital", "1000", "--fee", "0"])

    out = capsys.readouterr().out
    assert exit_code == 0
    assert "=== Habit Backtest Report ===" in out
    assert "Initial cash: 1,000" in out
    assert "[Panic Seller]" in out
    # DCA -5.6%, hold -9.5%, panic -10%
    assert "Winner: DCA Coach" in out
    assert "by 4.40%p" in out


def test_main_with_sample_data(capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = main([])

    out = capsys.readouterr().out
    assert exit_code == 0
    assert "Instrument: Samsung Electronics" in out
    assert "The DCA strategy beat the panic-selling strategy" in out


def test_main_with_config(capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = main(["--config", str(repo_root())])

    assert exit_code == 0
    assert "Initial cash: 10,000,000" in capsys.readouterr().out


def test_main_strategy_subset(capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = main(["--prices", "100,110", "--strategies", "hold"])

    out = capsys.readouterr().out
    assert exit_code == 0
    assert "[Buy & Hold]" in out
    assert "[DCA Coach]" not in out
    assert "No comparable strategies to compare." in out


def test_main_empty_price_path(capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = main(["--prices", ""])

    out = capsys.readouterr().out
    assert exit_code == 0
    assert "Ranking: (no results)" in out


def test_main_account_demo(capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = main(["--prices", "70000,71000", "--account-demo"])

    out = capsys.readouterr().out
    assert exit_code == 0
    assert "Order #1 buy 10 @ 70,000: filled" in out
    assert out.index("Account 005930_ACC") < out.index("=== Habit Backtest Report ===")


def test_main_unknown_strategy(capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = main(["--prices", "100", "--strategies", "dca,yolo"])

    err = capsys.readouterr().err
    assert exit_code == 1
    assert "Strategy not found: yolo" in err
    assert "panic_sell" in err


@pytest.mark.parametrize(
    "argv",
    [
        ["--prices", "100,abc"],
        ["--capital", "-5"],
        ["--fee", "1.5"],
    ],
)
def test_main_invalid_input(argv: list[str], capsys: pytest.CaptureFixture[str]) -> None:
    assert main(argv) == 1
    assert capsys.readouterr().err.startswith("Error:")


def test_main_missing_config(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--config", str(tmp_path)]) == 1
    assert "Missing or empty config file" in capsys.readouterr().err


def test_main_json_logs(tmp_path: Path) -> None:
    log_dir = tmp_path / "logs"

    exit_code = main(["--prices", "100,90", "--json-logs", str(log_dir), "--log-level", "INFO"])

    assert exit_code == 0
    lines = (log_dir / "app.ndjson").read_text(encoding="utf-8").splitlines()
    events = [json.loads(line)["event"] for line in lines]
    assert "backtest_finished" in events


def test_main_json_logs_from_config(tmp_path: Path) -> None:
    log_dir = tmp_path / "var" / "log"
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    (config_dir / "base.yaml").write_text(
        yaml.safe_dump(
            {
                "app": {"name": "habitlab"},
                "logging": {"level": "INFO", "json_logs": True, "log_dir": str(log_dir)},
                "market": {"code": "X", "name": "Test", "prices": [100, 110, 120]},
            }
        ),
        encoding="utf-8",
    )

    assert main(["--config", str(tmp_path)]) == 0

    events = [
        json.loads(line)["event"]
        for line in (log_dir / "app.ndjson").read_text(encoding="utf-8").splitlines()
    ]
    assert "backtest_finished" in events
