"""
Strategy base class.

A strategy is a named predicate over opaque parameters and the request
context. Constraint checks and strategy-scoped variant selection are shared
by every strategy through get_result().
"""

from abc import ABC, abstractmethod
from typing import Any, Iterable, Mapping, Sequence

from ..constraints import ConstraintSource, constraints_match
from ..context import Context
from ..interfaces import EvaluationResult, VariantDefinition
from ..variants import RandomSeed, random_seed, select_variant_definition, to_variant

Parameters = Mapping[str, Any]


def parameter_list(parameters: Parameters, key: str) -> list[str]:
    """Split a comma-separated parameter into trimmed, non-empty items."""
    raw = parameters.get(key)
    if not raw:
        return []
    return [item.strip() for item in str(raw).split(",") if item.strip()]


def parameter_number(parameters: Parameters, key: str) -> float:
    """Numeric parameter; missing or unparseable values count as 0."""
    try:
        return float(parameters.get(key) or 0)
    except (TypeError, ValueError):
        return 0.0


class Strategy(ABC):
    """
    Abstract activation strategy.

    Subclasses implement is_enabled(); registration happens through
    StrategyRegistry.strategy(name).

    Implementations:
    - DefaultStrategy: always on
    - UserWithIdStrategy: userId allow-list
    - RemoteAddressStrategy: IP / CIDR match
    - ApplicationHostnameStrategy: host name allow-list
    - FlexibleRolloutStrategy: sticky percentage rollout
    """

    name: str = ""

    @abstractmethod
    def is_enabled(self, parameters: Parameters, context: Context) -> bool:
        """
        Decide activation from parameters and context alone.

        Missing parameters must be treated as empty, never raise.
        """
        pass

    def is_enabled_with_constraints(
        self,
        parameters: Parameters,
        context: Context,
        constraints: Iterable[ConstraintSource] | None,
    ) -> bool:
        return constraints_match(constraints, context) and self.is_enabled(parameters, context)

    def get_result(
        self,
        parameters: Parameters | None,
        context: Context,
        constraints: Iterable[ConstraintSource] | None = None,
        variants: Sequence[VariantDefinition] | None = None,
        random_source: RandomSeed = random_seed,
    ) -> EvaluationResult:
        """
        Evaluate the strategy and, on success, its strategy-scoped variants.

        Variants are bucketed on ``groupId`` (or the feature name) with the
        first variant's stickiness.
        """
        parameters = parameters or {}
        if not self.is_enabled_with_constraints(parameters, context, constraints):
            return EvaluationResult.no()

        if variants:
            group_id = str(parameters.get("groupId") or context.feature_toggle or "")
            definition = select_variant_definition(
                group_id, variants[0].stickiness, variants, context, random_source
            )
            if definition is not None:
                return EvaluationResult.yes(to_variant(definition, feature_enabled=True))

        return EvaluationResult.yes()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r}>"
