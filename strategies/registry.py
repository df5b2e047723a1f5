from __future__ import annotations

import importlib
import inspect
import logging
import pkgutil
from collections.abc import Iterable
from typing import TYPE_CHECKING

from strategies.dca import DCAStrategy
from strategies.hold import HoldStrategy
from strategies.panic_sell import PanicSellStrategy

if TYPE_CHECKING:
    from backtest.contracts import BacktestConfig
    from strategies.base import TradingStrategy

__all__ = ["DEFAULT_LINEUP", "StrategyRegistry"]

logger = logging.getLogger(__name__)

DEFAULT_LINEUP: tuple[str, ...] = ("panic_sell", "dca", "hold")


class StrategyRegistry:
    """Registry for trading habit classes."""

    def __init__(self) -> None:
        self._strategies: dict[str, type[TradingStrategy]] = {}

    @classmethod
    def with_defaults(cls) -> StrategyRegistry:
        """Registry preloaded with the built-in habits."""
        registry = cls()
        for strategy_class in (PanicSellStrategy, DCAStrategy, HoldStrategy):
            registry.register(strategy_class)
        return registry

    def register(self, strategy_class: type[TradingStrategy]) -> None:
        """Register a strategy class by its strategy_id."""
        if not hasattr(strategy_class, "strategy_id"):
            raise ValueError(f"{strategy_class.__name__} missing strategy_id attribute")

        strategy_id = strategy_class.strategy_id
        if strategy_id in self._strategies:
            logger.warning(f"Overwriting existing strategy: {strategy_id}")

        self._strategies[strategy_id] = strategy_class
        logger.debug(f"Registered strategy: {strategy_id} ({strategy_class.__name__})")

    def get(self, strategy_id: str) -> type[TradingStrategy]:
        """Retrieve a strategy class by ID."""
        if strategy_id not in self._strategies:
            raise KeyError(f"Strategy not found: {strategy_id}")
        return self._strategies[strategy_id]

    def ids(self) -> list[str]:
        return list(self._strategies)

    def build(
        self,
        config: BacktestConfig,
        strategy_ids: Iterable[str] = DEFAULT_LINEUP,
    ) -> list[TradingStrategy]:
        """Instantiate strategies in the given order, all seeded from ``config``."""
        return [self.get(strategy_id).from_config(config) for strategy_id in strategy_ids]

    def discover(self, package: str = "strategies") -> None:
        """Auto-discover strategies in package."""
        try:
            pkg = importlib.import_module(package)
        except ImportError as e:
            logger.warning(f"Failed to import package {package}: {e}")
            return

        if not hasattr(pkg, "__path__"):
            logger.warning(f"Package {package} has no __path__, skipping discovery")
            return

        from strategies.base import TradingStrategy

        for _importer, modname, _ispkg in pkgutil.iter_modules(pkg.__path__):
            full_name = f"{package}.{modname}"
            try:
                mod = importlib.import_module(full_name)
            except Exception as e:
                logger.warning(f"Failed to import {full_name}: {e}")
                continue

            for _name, obj in inspect.getmembers(mod, inspect.isclass):
                if obj.__module__ != full_name:
                    continue
                if (
                    issubclass(obj, TradingStrategy)
                    and obj is not TradingStrategy
                    and not inspect.isabstract(obj)
                ):
                    try:
                        self.register(obj)
                    except ValueError as e:
                        logger.warning(f"Failed to register {obj.__name__}: {e}")
