"""
Parent feature dependencies.

A feature may require other features to be on (or off, or on a given
variant). Only one level is supported: a parent that itself declares
dependencies never satisfies its children.
"""

from typing import Protocol

import structlog

from togglekit.core.hooks import EngineEvent, HookManager

from .context import Context
from .interfaces import (
    EvaluationResult,
    Fallback,
    FeatureDefinition,
    FeatureRepository,
    ParentDependency,
    Variant,
)

logger = structlog.get_logger(__name__)


def _never() -> bool:
    return False


class ParentEvaluator(Protocol):
    """What the resolver needs from the engine to evaluate parents."""

    def evaluate(
        self,
        feature: FeatureDefinition | None,
        context: Context,
        fallback: Fallback,
    ) -> EvaluationResult: ...

    def resolve_variant(
        self,
        feature: FeatureDefinition | None,
        context: Context,
        check_toggle: bool = True,
        fallback_variant: Variant | None = None,
    ) -> Variant: ...


class DependencyResolver:
    """
    Decides whether a feature's parent requirements hold.

    Parent evaluations go through the engine's internal entry points, so
    they never emit impressions.
    """

    def __init__(
        self,
        repository: FeatureRepository,
        hooks: HookManager,
        evaluator: ParentEvaluator,
    ):
        self.repository = repository
        self.hooks = hooks
        self.evaluator = evaluator

    def satisfied(self, feature: FeatureDefinition, context: Context) -> bool:
        """True if every declared dependency holds (trivially true for none)."""
        if not feature.dependencies:
            return True
        return all(self._parent_satisfied(feature, parent, context) for parent in feature.dependencies)

    def _parent_satisfied(
        self,
        feature: FeatureDefinition,
        dependency: ParentDependency,
        context: Context,
    ) -> bool:
        parent = self.repository.get_toggle(dependency.feature)

        if parent is None:
            self._warn_missing(dependency.feature, feature.name)
            return False

        # Chains deeper than one hop are rejected
        if parent.dependencies:
            return False

        parent_context = context.for_feature(parent.name)

        if dependency.enabled:
            if dependency.variants:
                variant = self.evaluator.resolve_variant(parent, parent_context)
                return variant.feature_enabled and variant.name in dependency.variants
            return self.evaluator.evaluate(parent, parent_context, _never).enabled

        return not self.evaluator.evaluate(parent, parent_context, _never).enabled

    def _warn_missing(self, parent_name: str, child_name: str) -> None:
        message = f'Missing dependency "{parent_name}" for toggle "{child_name}"'
        if self.hooks.trigger_once(f"dependency:{parent_name}:{child_name}", EngineEvent.WARN, message):
            logger.warning("missing_dependency", dependency=parent_name, feature=child_name)
