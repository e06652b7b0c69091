"""togglekit: feature toggle evaluation engine."""

from togglekit.core.config import EngineSettings, get_settings
from togglekit.core.hooks import EngineEvent, HookManager, ImpressionEvent
from togglekit.core.logging import configure_logging
from togglekit.core.features import (
    DEFAULT_VARIANT,
    Context,
    FeatureDefinition,
    FeatureEngine,
    InvalidStrategyError,
    MemoryFeatureRepository,
    Segment,
    Strategy,
    StrategyRegistry,
    Variant,
    VariantDefinition,
)

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_VARIANT",
    "Context",
    "EngineEvent",
    "EngineSettings",
    "FeatureDefinition",
    "FeatureEngine",
    "HookManager",
    "ImpressionEvent",
    "InvalidStrategyError",
    "MemoryFeatureRepository",
    "Segment",
    "Strategy",
    "StrategyRegistry",
    "Variant",
    "VariantDefinition",
    "configure_logging",
    "get_settings",
]
