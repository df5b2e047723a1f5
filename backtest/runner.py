"""Backtest runner CLI comparing trading habits on one price series."""

from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from pathlib import Path

from pydantic import ValidationError

from backtest.contracts import BacktestConfig
from backtest.engine import BacktestEngine
from backtest.report import render_ranking, render_summary, summary_comment
from core.config import Config, load_config
from core.logging import setup_console_logging, setup_json_logging
from core.market import MarketSimulator, PriceSeries
from portfolio.account import Account
from strategies.registry import DEFAULT_LINEUP, StrategyRegistry

# 30 trading days: slide, crash, bottom, recovery, new high
SAMPLE_PRICES: tuple[int, ...] = (
    70000, 71000, 69500, 68000, 65000,
    62000, 58000, 55000, 53000, 50000,
    48000, 49000, 51000, 52000, 54000,
    56000, 58000, 60000, 62000, 64000,
    65000, 67000, 68000, 70000, 72000,
    74000, 75000, 76000, 78000, 80000,
)  # fmt: skip
SAMPLE_CODE = "005930"
SAMPLE_NAME = "Samsung Electronics"


def parse_args(args: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        args: Optional argument list (for testing)

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(
        description="Replay a price series through panic-sell, DCA and buy-and-hold habits",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Project directory containing config/base.yaml",
    )
    parser.add_argument(
        "--prices",
        default=None,
        help="Comma-separated price path (e.g., 100,90,81)",
    )
    parser.add_argument(
        "--simulate",
        type=int,
        default=None,
        metavar="TICKS",
        help="Append TICKS random-walk prices after the starting price",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for --simulate",
    )
    parser.add_argument(
        "--capital",
        type=int,
        default=None,
        help="Initial cash per strategy (default: 10,000,000)",
    )
    parser.add_argument(
        "--fee",
        type=float,
        default=None,
        help="Fee rate (default: 0.00015 = 0.015%%)",
    )
    parser.add_argument(
        "--strategies",
        default=None,
        help=f"Comma-separated strategy ids (default: {','.join(DEFAULT_LINEUP)})",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level (default: config logging.level, else WARNING)",
    )
    parser.add_argument(
        "--json-logs",
        type=Path,
        default=None,
        metavar="DIR",
        help="Write NDJSON logs into DIR instead of stderr",
    )
    parser.add_argument(
        "--account-demo",
        action="store_true",
        help="Also run a buy/sell order demo against a cash account",
    )

    return parser.parse_args(args)


def parse_prices(prices_str: str) -> list[int]:
    """Parse a comma-separated price path.

    Raises:
        ValueError: If any entry is not a non-negative integer
    """
    try:
        prices = [int(p.strip()) for p in prices_str.split(",") if p.strip()]
    except ValueError as e:
        raise ValueError(f"Invalid price list '{prices_str}': {e}") from e
    if any(p < 0 for p in prices):
        raise ValueError("Prices cannot be negative")
    return prices


def build_series(parsed_args: argparse.Namespace, config: Config | None) -> PriceSeries:
    """Pick the price path from CLI flags, config, or the built-in sample."""
    code, name = SAMPLE_CODE, SAMPLE_NAME
    prices: list[int] = list(SAMPLE_PRICES)
    seed = parsed_args.seed

    if config is not None:
        code, name = config.market.code, config.market.name
        if config.market.prices:
            prices = list(config.market.prices)
        if seed is None:
            seed = config.market.seed

    if parsed_args.prices is not None:
        prices = parse_prices(parsed_args.prices)

    series = PriceSeries.from_prices(code, name, prices)
    if parsed_args.simulate:
        if not prices:
            raise ValueError("--simulate needs a starting price")
        series = PriceSeries(code, name, prices[0], [prices[0]])
        MarketSimulator(seed=seed).generate(series, parsed_args.simulate)
    return series


def build_config(parsed_args: argparse.Namespace, config: Config | None) -> BacktestConfig:
    backtest_config = config.backtest.to_backtest_config() if config else BacktestConfig()
    overrides: dict[str, object] = {}
    if parsed_args.capital is not None:
        overrides["initial_cash"] = parsed_args.capital
    if parsed_args.fee is not None:
        overrides["fee_rate"] = parsed_args.fee
    return replace(backtest_config, **overrides) if overrides else backtest_config


def run_account_demo(series: PriceSeries, fee_rate: float) -> list[str]:
    """Deposit, buy 10 shares, move the market once, sell 5.

    Returns:
        Lines describing each step
    """
    account = Account(f"{series.code}_ACC", series.code, fee_rate=fee_rate)
    account.deposit(10_000_000)
    lines = [f"Account {account.account_number} | cash: {account.balance:,}"]

    buy = account.place_order("buy", 10)
    filled = account.execute_order(buy.order_id, series)
    lines.append(
        f"Order #{buy.order_id} buy 10 @ {series.current_price:,}: "
        f"{'filled' if filled else 'rejected'}"
    )

    MarketSimulator(seed=0).step(series)
    sell = account.place_order("sell", 5)
    filled = account.execute_order(sell.order_id, series)
    lines.append(
        f"Order #{sell.order_id} sell 5 @ {series.current_price:,}: "
        f"{'filled' if filled else 'rejected'}"
    )
    lines.append(
        f"Cash: {account.balance:,} | shares: {account.shares} @ {account.avg_cost:,} | "
        f"total: {account.total_asset_value(series.current_price):,} | "
        f"P&L: {account.profit_rate(series.current_price):.2f}%"
    )
    return lines


def main(args: list[str] | None = None) -> int:
    """Main entry point for backtest runner.

    Args:
        args: Optional argument list (for testing)

    Returns:
        Exit code (0 for success, 1 for error)
    """
    parsed_args = parse_args(args)

    try:
        config = load_config(parsed_args.config) if parsed_args.config is not None else None

        log_level = parsed_args.log_level or (config.logging.level if config else "WARNING")
        log_dir = parsed_args.json_logs
        if log_dir is None and config is not None and config.logging.json_logs:
            log_dir = config.logging.log_dir
        if log_dir is not None:
            logger = setup_json_logging(str(log_dir), log_level)
        else:
            logger = setup_console_logging(log_level)

        series = build_series(parsed_args, config)
        backtest_config = build_config(parsed_args, config)

        if parsed_args.strategies is not None:
            strategy_ids = [s.strip() for s in parsed_args.strategies.split(",") if s.strip()]
        elif config is not None:
            strategy_ids = config.backtest.strategies
        else:
            strategy_ids = list(DEFAULT_LINEUP)

        registry = StrategyRegistry.with_defaults()
        try:
            strategies = registry.build(backtest_config, strategy_ids)
        except KeyError as e:
            print(f"Error: {e.args[0]}", file=sys.stderr)
            print(f"Available strategies: {registry.ids()}", file=sys.stderr)
            return 1

        if parsed_args.account_demo and len(series) > 0:
            demo_series = PriceSeries(series.code, series.name, series.price_at(0))
            for line in run_account_demo(demo_series, backtest_config.fee_rate):
                print(line)
            print()

        engine = BacktestEngine(series, backtest_config, strategies)
        reports = engine.run()
        logger.info("backtest_finished", ticks=len(series), reports=len(reports))

    except (FileNotFoundError, ValueError, ValidationError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(render_summary(reports, series.name))
    print()
    print(render_ranking(reports))
    print()
    print(summary_comment(reports))
    return 0


if __name__ == "__main__":
    sys.exit(main())
