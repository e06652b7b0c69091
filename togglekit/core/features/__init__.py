"""
Feature Evaluation Engine.

Evaluates feature toggles against a request context:
- Pluggable strategies (rollout, user lists, IP ranges, host names)
- Constraints and shared segments
- Parent feature dependencies
- Sticky weighted variants with overrides

Usage Levels:

Level 1 - Simple check:
    from togglekit.core.features import FeatureEngine, MemoryFeatureRepository

    repository = MemoryFeatureRepository()
    repository.load(definitions)  # {"features": [...], "segments": [...]}

    engine = FeatureEngine(repository)
    if engine.is_enabled("new_checkout", Context(user_id="u1")):
        ...

Level 2 - Fallback for unknown features:
    engine.is_enabled("not_published_yet", context, fallback=True)

Level 3 - Variants:
    variant = engine.get_variant("button_color", Context(user_id="u1"))
    if variant.feature_enabled and variant.name == "blue":
        ...

Level 4 - Custom strategies:
    class TierStrategy(Strategy):
        name = "tier"

        def is_enabled(self, parameters, context):
            return context.get("tier") in parameter_list(parameters, "tiers")

    engine = FeatureEngine(repository, strategies=[TierStrategy()])

Level 5 - Events:
    hooks = HookManager()
    hooks.register(EngineEvent.IMPRESSION, audit.record)
    hooks.register(EngineEvent.WARN, alerts.notify)
    engine = FeatureEngine(repository, hooks=hooks)
"""

from .context import Context
from .interfaces import (
    DEFAULT_VARIANT,
    Constraint,
    EvaluationResult,
    FeatureDefinition,
    FeatureEngineBase,
    FeatureRepository,
    Override,
    ParentDependency,
    Payload,
    PayloadType,
    Segment,
    StrategySelector,
    Variant,
    VariantDefinition,
)

from .constraints import ConstraintResolver, UnresolvedSegment, constraints_match
from .dependencies import DependencyResolver
from .hashing import normalized_strategy_value, normalized_value, normalized_variant_value
from .variants import select_variant, select_variant_definition

from .strategies import (
    ApplicationHostnameStrategy,
    DefaultStrategy,
    FlexibleRolloutStrategy,
    InvalidStrategyError,
    RemoteAddressStrategy,
    Strategy,
    StrategyRegistry,
    UserWithIdStrategy,
    parameter_list,
)

from .service import FeatureEngine, MalformedFeatureError

from .backends import MemoryFeatureRepository, Snapshot

__all__ = [
    # Data model
    "Context",
    "Constraint",
    "DEFAULT_VARIANT",
    "EvaluationResult",
    "FeatureDefinition",
    "Override",
    "ParentDependency",
    "Payload",
    "PayloadType",
    "Segment",
    "StrategySelector",
    "Variant",
    "VariantDefinition",
    # Contracts
    "FeatureEngineBase",
    "FeatureRepository",
    # Engine
    "FeatureEngine",
    "MalformedFeatureError",
    "ConstraintResolver",
    "DependencyResolver",
    "UnresolvedSegment",
    "constraints_match",
    "normalized_strategy_value",
    "normalized_value",
    "normalized_variant_value",
    "select_variant",
    "select_variant_definition",
    # Strategies
    "ApplicationHostnameStrategy",
    "DefaultStrategy",
    "FlexibleRolloutStrategy",
    "InvalidStrategyError",
    "RemoteAddressStrategy",
    "Strategy",
    "StrategyRegistry",
    "UserWithIdStrategy",
    "parameter_list",
    # Backends
    "MemoryFeatureRepository",
    "Snapshot",
]
