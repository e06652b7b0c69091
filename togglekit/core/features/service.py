"""
Feature Engine - Main evaluation logic.

Evaluates feature toggles with support for:
- Ordered strategies (first success wins)
- Inline constraints and shared segments
- Parent feature dependencies (one level)
- Weighted, sticky variants with overrides
- Strategy-scoped variants
"""

from dataclasses import replace
from typing import Any, Iterable, Mapping

import structlog

from togglekit.core.config import EngineSettings, get_settings
from togglekit.core.hooks import EngineEvent, HookManager, ImpressionEvent, ImpressionType

from .constraints import ConstraintResolver
from .context import Context
from .dependencies import DependencyResolver
from .interfaces import (
    DEFAULT_VARIANT,
    EvaluationResult,
    Fallback,
    FeatureDefinition,
    FeatureEngineBase,
    FeatureRepository,
    StrategySelector,
    Variant,
)
from .strategies import Strategy, StrategyRegistry, build_strategy_map
from .variants import RandomSeed, random_seed, select_variant, to_variant

logger = structlog.get_logger(__name__)


class MalformedFeatureError(ValueError):
    """A feature definition cannot be evaluated as published."""


def _as_fallback(fallback: Fallback | bool | None) -> Fallback:
    if callable(fallback):
        return fallback
    value = bool(fallback)
    return lambda: value


class FeatureEngine(FeatureEngineBase):
    """
    Feature toggle evaluation engine.

    Evaluation order for one feature:
    1. Unknown feature: caller fallback
    2. Parent dependencies and the global enabled flag
    3. Strategies in declared order; the first success wins
    4. Variant: the winning strategy's variant, else the feature's weighted variants

    The engine holds no per-call state. It reads the repository's current
    snapshot and can be shared across threads.
    """

    def __init__(
        self,
        repository: FeatureRepository,
        strategies: Iterable[Any] | None = None,
        *,
        hooks: HookManager | None = None,
        settings: EngineSettings | None = None,
        random_source: RandomSeed = random_seed,
    ):
        """
        Args:
            repository: Source of feature definitions and segments
            strategies: Host strategies, added to (or replacing) the built-ins
            hooks: Receives warn / error / impression events
            settings: Engine settings (defaults to the environment)
            random_source: Seed for variant draws without a sticky identity

        Raises:
            InvalidStrategyError: If a host strategy has no name or is_enabled()
        """
        self.repository = repository
        self.settings = settings or get_settings()
        self.hooks = hooks or HookManager()
        self._random_source = random_source

        defaults = StrategyRegistry.defaults(
            config={"applicationHostname": {"hostname": self.settings.hostname}}
        )
        self._strategies = build_strategy_map(defaults, strategies)
        self._static_context = self.settings.static_context()

        self.constraints = ConstraintResolver(repository)
        self.dependencies = DependencyResolver(repository, self.hooks, evaluator=self)

    @property
    def strategies(self) -> Mapping[str, Strategy]:
        return dict(self._strategies)

    # ============================================================
    # PUBLIC API
    # ============================================================

    def is_enabled(
        self,
        name: str,
        context: Context | Mapping[str, Any] | None = None,
        fallback: Fallback | bool | None = None,
    ) -> bool:
        """
        Check if a feature is enabled.

        Args:
            name: Feature name
            context: Request context (or its wire-shaped mapping)
            fallback: Value, or callable, used only when the feature is unknown

        Returns:
            True if the feature is enabled for this context
        """
        feature = self.repository.get_toggle(name)
        ctx = self._context_for(name, context)
        enabled = self.evaluate(feature, ctx, _as_fallback(fallback)).enabled

        if feature is not None and feature.impression_data:
            self._emit_impression("isEnabled", name, ctx, enabled)

        return enabled

    def get_variant(
        self,
        name: str,
        context: Context | Mapping[str, Any] | None = None,
        fallback_variant: Variant | None = None,
    ) -> Variant:
        """
        Resolve the variant of a feature.

        The toggle is evaluated exactly once; if the winning strategy picks
        a strategy-scoped variant, that variant is returned as-is.
        """
        feature = self.repository.get_toggle(name)
        ctx = self._context_for(name, context)
        variant = self.resolve_variant(feature, ctx, True, fallback_variant)

        if feature is not None and feature.impression_data:
            self._emit_impression("getVariant", name, ctx, variant.enabled, variant.name)

        return variant

    def force_get_variant(
        self,
        name: str,
        context: Context | Mapping[str, Any] | None = None,
        fallback_variant: Variant | None = None,
    ) -> Variant:
        """
        Resolve the weighted variant without evaluating the toggle.

        For callers that already know the feature is enabled. No impression
        is emitted.
        """
        feature = self.repository.get_toggle(name)
        return self.resolve_variant(feature, self._context_for(name, context), False, fallback_variant)

    def get_feature_definition(self, name: str) -> FeatureDefinition | None:
        """Get a feature definition by name."""
        return self.repository.get_toggle(name)

    def get_feature_definitions(self, with_full_segments: bool = False) -> list[FeatureDefinition]:
        """
        List all feature definitions.

        With ``with_full_segments``, segment references are inlined into each
        strategy's constraints; ids that cannot be resolved stay referenced.
        """
        features = self.repository.list_toggles()
        if not with_full_segments:
            return features
        return [self._inline_segments(feature) for feature in features]

    # ============================================================
    # STRATEGY DISPATCH
    # ============================================================

    def evaluate(
        self,
        feature: FeatureDefinition | None,
        context: Context,
        fallback: Fallback,
    ) -> EvaluationResult:
        """
        Run a feature's strategies against ``context``.

        ``context`` must already be bound to the feature (see Context.for_feature).
        """
        if feature is None:
            return EvaluationResult(enabled=bool(fallback()))

        if not self.dependencies.satisfied(feature, context) or not feature.enabled:
            return EvaluationResult.no()

        if not feature.has_valid_strategies():
            self._report_malformed(feature)
            return EvaluationResult.no()

        if len(feature.strategies) == 0:
            return EvaluationResult(enabled=feature.enabled)

        for selector in feature.strategies:
            strategy = self._strategies.get(selector.name)
            if strategy is None:
                self._warn_missing_strategy(selector.name, feature)
                continue

            result = strategy.get_result(
                selector.parameters,
                context,
                self.constraints.constraints_for(selector),
                selector.variants,
                self._random_source,
            )
            if result.enabled:
                return result

        return EvaluationResult.no()

    # ============================================================
    # VARIANT RESOLUTION
    # ============================================================

    def resolve_variant(
        self,
        feature: FeatureDefinition | None,
        context: Context,
        check_toggle: bool = True,
        fallback_variant: Variant | None = None,
    ) -> Variant:
        """
        Resolve a variant, optionally evaluating the toggle first.

        The returned variant's ``feature_enabled`` is the same evaluation
        that chose it.
        """
        fallback = fallback_variant or DEFAULT_VARIANT

        if feature is None:
            return replace(fallback, feature_enabled=False)

        feature_enabled = not check_toggle
        if check_toggle:
            result = self.evaluate(
                feature,
                context,
                lambda: bool(fallback_variant and fallback_variant.enabled),
            )
            feature_enabled = result.enabled

            if result.enabled and result.variant is not None:
                return replace(result.variant, feature_enabled=True)

            if not result.enabled:
                return replace(fallback, feature_enabled=False)

        if not feature.variants:
            return replace(fallback, feature_enabled=feature_enabled)

        definition = select_variant(feature, context, self._random_source)
        if definition is None:
            return replace(fallback, feature_enabled=feature_enabled)

        return to_variant(definition, feature_enabled)

    # ============================================================
    # HELPERS
    # ============================================================

    def _context_for(self, name: str, context: Context | Mapping[str, Any] | None) -> Context:
        if context is None:
            context = Context()
        elif not isinstance(context, Context):
            context = Context.from_dict(context)
        return context.merged_with(self._static_context).for_feature(name)

    def _inline_segments(self, feature: FeatureDefinition) -> FeatureDefinition:
        if not feature.has_valid_strategies():
            return feature

        strategies = []
        for selector in feature.strategies:
            constraints = list(selector.constraints)
            missing = []
            for segment_id in selector.segments:
                segment = self.repository.get_segment(segment_id)
                if segment is None:
                    missing.append(segment_id)
                else:
                    constraints.extend(segment.constraints)
            strategies.append(
                StrategySelector(
                    name=selector.name,
                    parameters=selector.parameters,
                    constraints=tuple(constraints),
                    segments=tuple(missing),
                    variants=selector.variants,
                )
            )
        return replace(feature, strategies=tuple(strategies))

    def _warn_missing_strategy(self, strategy_name: str, feature: FeatureDefinition) -> None:
        names = ", ".join(s.name for s in feature.strategies)
        message = (
            f'Missing strategy "{strategy_name}" for toggle "{feature.name}". '
            f'Ensure that "{names}" are supported before using this toggle'
        )
        if self.hooks.trigger_once(f"strategy:{strategy_name}:{feature.name}", EngineEvent.WARN, message):
            logger.warning("missing_strategy", strategy=strategy_name, feature=feature.name)

    def _report_malformed(self, feature: FeatureDefinition) -> None:
        error = MalformedFeatureError(
            f"Malformed feature {feature.name!r}: strategies is not a list of strategy "
            f"definitions, got {type(feature.strategies).__name__}"
        )
        logger.error("malformed_feature", feature=feature.name, error=str(error))
        self.hooks.trigger(EngineEvent.ERROR, error)

    def _emit_impression(
        self,
        event_type: ImpressionType,
        name: str,
        context: Context,
        enabled: bool,
        variant: str | None = None,
    ) -> None:
        event = ImpressionEvent(
            event_type=event_type,
            feature_name=name,
            context=context,
            enabled=enabled,
            variant=variant,
        )
        logger.debug("impression", feature=name, event_type=event_type, enabled=enabled, variant=variant)
        self.hooks.trigger(EngineEvent.IMPRESSION, event)
