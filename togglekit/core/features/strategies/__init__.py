"""
Activation strategies.

Importing this package registers the built-in strategies.
"""

from .base import Strategy, parameter_list, parameter_number
from .registry import (
    InvalidStrategyError,
    StrategyAdapter,
    StrategyRegistry,
    build_strategy_map,
    validate_strategy,
)
from .builtin import (
    ApplicationHostnameStrategy,
    DefaultStrategy,
    FlexibleRolloutStrategy,
    RemoteAddressStrategy,
    UserWithIdStrategy,
)

__all__ = [
    "ApplicationHostnameStrategy",
    "DefaultStrategy",
    "FlexibleRolloutStrategy",
    "InvalidStrategyError",
    "RemoteAddressStrategy",
    "Strategy",
    "StrategyAdapter",
    "StrategyRegistry",
    "UserWithIdStrategy",
    "build_strategy_map",
    "parameter_list",
    "parameter_number",
    "validate_strategy",
]
