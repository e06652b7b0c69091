"""
Strategy registry.

Built-in strategies register themselves with a decorator; every engine
instantiates the registered set. Host strategies are instances handed to
one engine and never touch the registry.

Usage:
    class BetaTestersStrategy(Strategy):
        name = "betaTesters"

        def is_enabled(self, parameters, context):
            return context.get("tier") == "beta"

    engine = FeatureEngine(repository, strategies=[BetaTestersStrategy()])
"""

import logging
from typing import Any, Callable, Iterable, Type

from .base import Parameters, Strategy
from ..context import Context

logger = logging.getLogger(__name__)


class InvalidStrategyError(ValueError):
    """A strategy handed to the engine has no name or no is_enabled()."""


class StrategyAdapter(Strategy):
    """Wraps any object exposing ``name`` and ``is_enabled(parameters, context)``."""

    def __init__(self, delegate: Any):
        self.name = delegate.name
        self._delegate = delegate

    def is_enabled(self, parameters: Parameters, context: Context) -> bool:
        return bool(self._delegate.is_enabled(parameters, context))


class StrategyRegistry:
    """
    Central registry for built-in strategy classes.

    Components register themselves using decorators.
    """

    _strategies: dict[str, Type[Strategy]] = {}

    @classmethod
    def strategy(cls, name: str) -> Callable[[Type[Strategy]], Type[Strategy]]:
        """
        Decorator to register a strategy class.

        Usage:
            @StrategyRegistry.strategy("userWithId")
            class UserWithIdStrategy(Strategy):
                ...
        """
        def decorator(strategy_class: Type[Strategy]) -> Type[Strategy]:
            strategy_class.name = name
            cls._strategies[name] = strategy_class
            return strategy_class
        return decorator

    @classmethod
    def get(cls, name: str, **kwargs: Any) -> Strategy:
        """
        Instantiate a registered strategy.

        Raises:
            ValueError: If the strategy is not registered
        """
        strategy_class = cls._strategies.get(name)
        if not strategy_class:
            available = list(cls._strategies.keys())
            raise ValueError(
                f"Unknown strategy: '{name}'. "
                f"Available: {available}"
            )
        return strategy_class(**kwargs)

    @classmethod
    def defaults(cls, config: dict[str, dict[str, Any]] | None = None) -> list[Strategy]:
        """
        Instantiate every registered strategy.

        Args:
            config: Constructor arguments keyed by strategy name

        Raises:
            InvalidStrategyError: If a registered class cannot be constructed
        """
        config = config or {}
        strategies = []
        for name in list(cls._strategies):
            try:
                strategies.append(cls.get(name, **config.get(name, {})))
            except TypeError as e:
                raise InvalidStrategyError(
                    f"Registered strategy {name!r} cannot be built with {config.get(name, {})!r}: {e}"
                ) from e
        return strategies

    @classmethod
    def unregister(cls, name: str) -> bool:
        """Remove a registered strategy class."""
        return cls._strategies.pop(name, None) is not None

    @classmethod
    def list_strategies(cls) -> list[str]:
        """List all registered strategy names."""
        return list(cls._strategies.keys())

    @classmethod
    def has(cls, name: str) -> bool:
        """Check if a strategy is registered."""
        return name in cls._strategies


def validate_strategy(strategy: Any) -> Strategy:
    """
    Check a host-supplied strategy.

    Raises:
        InvalidStrategyError: If ``name`` or ``is_enabled`` is missing
    """
    name = getattr(strategy, "name", None)
    if not isinstance(name, str) or not name:
        raise InvalidStrategyError(f"Invalid strategy data / interface: missing name on {strategy!r}")
    if not callable(getattr(strategy, "is_enabled", None)):
        raise InvalidStrategyError(f"Invalid strategy data / interface: {name!r} has no is_enabled()")

    if isinstance(strategy, Strategy):
        return strategy
    return StrategyAdapter(strategy)


def build_strategy_map(
    defaults: Iterable[Strategy],
    custom: Iterable[Any] | None = None,
) -> dict[str, Strategy]:
    """Merge default and host strategies; host strategies replace same-named defaults."""
    strategies = {strategy.name: strategy for strategy in defaults}

    for candidate in custom or ():
        strategy = validate_strategy(candidate)
        if strategy.name in strategies:
            logger.warning(f"Overwriting existing strategy: {strategy.name}")
        strategies[strategy.name] = strategy

    return strategies
