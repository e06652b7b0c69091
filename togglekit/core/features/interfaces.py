"""
Feature Engine Interfaces - Core abstractions.

Feature definitions are owned by a repository snapshot; the engine only
reads them. The ``from_dict`` constructors accept the camelCase mappings
used by the definitions API.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Mapping

from .context import Context


# ============================================================
# CONSTRAINTS AND SEGMENTS
# ============================================================

@dataclass(frozen=True)
class Constraint:
    """
    A single comparison between a context field and expected values.

    Attributes:
        context_name: Context field to read (e.g. "userId", "region")
        operator: Operator name (IN, NOT_IN, STR_*, NUM_*, DATE_*, SEMVER_*)
        values: Accepted values for multi-value operators
        value: Operand for single-value operators
        case_insensitive: Compare strings ignoring case
        inverted: Negate the outcome
    """
    context_name: str
    operator: str
    values: tuple[str, ...] = ()
    value: str | None = None
    case_insensitive: bool = False
    inverted: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Constraint":
        value = data.get("value")
        return cls(
            context_name=data.get("contextName", ""),
            operator=data.get("operator", ""),
            values=tuple(str(v) for v in data.get("values") or ()),
            value=str(value) if value is not None else None,
            case_insensitive=bool(data.get("caseInsensitive", False)),
            inverted=bool(data.get("inverted", False)),
        )


@dataclass(frozen=True)
class Segment:
    """Reusable, named bundle of constraints."""
    id: int | str
    constraints: tuple[Constraint, ...] = ()
    name: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Segment":
        return cls(
            id=data["id"],
            name=data.get("name"),
            constraints=tuple(Constraint.from_dict(c) for c in data.get("constraints") or ()),
        )


# ============================================================
# VARIANTS
# ============================================================

class PayloadType(str, Enum):
    STRING = "string"
    JSON = "json"
    CSV = "csv"
    NUMBER = "number"


@dataclass(frozen=True)
class Payload:
    type: PayloadType
    value: str

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Payload":
        return cls(type=PayloadType(data.get("type", "string")), value=str(data.get("value", "")))


@dataclass(frozen=True)
class Override:
    """Forces a variant when ``context_name`` resolves to one of ``values``."""
    context_name: str
    values: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Override":
        return cls(
            context_name=data.get("contextName", ""),
            values=tuple(str(v) for v in data.get("values") or ()),
        )


def _weight(value: Any) -> int:
    """Non-negative integer weight; missing or unparseable values count as 0."""
    try:
        return max(0, int(float(value or 0)))
    except (TypeError, ValueError, OverflowError):
        return 0


@dataclass(frozen=True)
class VariantDefinition:
    """
    Weighted variant option.

    Attributes:
        name: Variant name
        weight: Non-negative share of the total weight
        stickiness: Context field used for bucketing ("default" = userId,
            sessionId, remoteAddress, then random)
        payload: Optional typed payload
        overrides: Context matches that select this variant regardless of weight
    """
    name: str
    weight: int = 0
    stickiness: str | None = None
    payload: Payload | None = None
    overrides: tuple[Override, ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "VariantDefinition":
        payload = data.get("payload")
        return cls(
            name=data["name"],
            weight=_weight(data.get("weight")),
            stickiness=data.get("stickiness"),
            payload=Payload.from_dict(payload) if payload else None,
            overrides=tuple(Override.from_dict(o) for o in data.get("overrides") or ()),
        )


@dataclass(frozen=True)
class Variant:
    """
    Resolved variant returned to the caller.

    ``enabled`` belongs to the variant itself; ``feature_enabled`` reports
    whether the feature was on. The "disabled" variant can come back for an
    enabled feature that has no variants.
    """
    name: str
    enabled: bool
    payload: Payload | None = None
    feature_enabled: bool = False


DEFAULT_VARIANT = Variant(name="disabled", enabled=False, feature_enabled=False)


# ============================================================
# FEATURE DEFINITIONS
# ============================================================

@dataclass(frozen=True)
class StrategySelector:
    """
    A strategy attached to a feature.

    Attributes:
        name: Registered strategy name
        parameters: Opaque strategy parameters
        constraints: Inline constraints
        segments: Segment ids resolved through the repository
        variants: Strategy-scoped variants, chosen when this strategy wins
    """
    name: str
    parameters: Mapping[str, Any] = field(default_factory=dict)
    constraints: tuple[Constraint, ...] = ()
    segments: tuple[int | str, ...] = ()
    variants: tuple[VariantDefinition, ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "StrategySelector":
        return cls(
            name=data.get("name", ""),
            parameters=dict(data.get("parameters") or {}),
            constraints=tuple(Constraint.from_dict(c) for c in data.get("constraints") or ()),
            segments=tuple(data.get("segments") or ()),
            variants=tuple(VariantDefinition.from_dict(v) for v in data.get("variants") or ()),
        )


@dataclass(frozen=True)
class ParentDependency:
    """
    Requirement on another feature.

    Attributes:
        feature: Parent feature name
        enabled: Parent must be enabled (True) or disabled (False)
        variants: When set, the parent must resolve to one of these variants
    """
    feature: str
    enabled: bool = True
    variants: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ParentDependency":
        return cls(
            feature=data["feature"],
            enabled=data.get("enabled") is not False,
            variants=tuple(data.get("variants") or ()),
        )


@dataclass(frozen=True)
class FeatureDefinition:
    """
    Feature toggle definition.

    Attributes:
        name: Unique feature name
        enabled: Global on/off switch
        strategies: Ordered strategies; first success wins
        variants: Feature-level weighted variants
        dependencies: Parent feature requirements
        impression_data: Emit an impression event per evaluation
    """
    name: str
    enabled: bool = False
    strategies: Any = ()
    variants: tuple[VariantDefinition, ...] = ()
    dependencies: tuple[ParentDependency, ...] = ()
    impression_data: bool = False
    description: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FeatureDefinition":
        strategies = data.get("strategies", [])
        # Malformed strategy lists are kept as-is for the engine to report
        if isinstance(strategies, list) and all(isinstance(s, Mapping) for s in strategies):
            strategies = tuple(StrategySelector.from_dict(s) for s in strategies)
        return cls(
            name=data["name"],
            enabled=bool(data.get("enabled", False)),
            strategies=strategies,
            variants=tuple(VariantDefinition.from_dict(v) for v in data.get("variants") or ()),
            dependencies=tuple(ParentDependency.from_dict(d) for d in data.get("dependencies") or ()),
            impression_data=bool(data.get("impressionData", False)),
            description=data.get("description"),
        )

    def has_valid_strategies(self) -> bool:
        return isinstance(self.strategies, (list, tuple)) and all(
            isinstance(s, StrategySelector) for s in self.strategies
        )


# ============================================================
# EVALUATION RESULT
# ============================================================

@dataclass(frozen=True)
class EvaluationResult:
    """
    Outcome of dispatching a feature's strategies.

    ``variant`` is set only when the winning strategy selected one of its
    strategy-scoped variants.
    """
    enabled: bool
    variant: Variant | None = None

    @classmethod
    def yes(cls, variant: Variant | None = None) -> "EvaluationResult":
        return cls(enabled=True, variant=variant)

    @classmethod
    def no(cls) -> "EvaluationResult":
        return cls(enabled=False)


Fallback = Callable[[], bool]


# ============================================================
# CONTRACTS
# ============================================================

class FeatureRepository(ABC):
    """
    Read access to the latest published definitions snapshot.

    Implementations must be safe for concurrent reads while the snapshot is
    replaced; lookups never block.
    """

    @abstractmethod
    def get_toggle(self, name: str) -> FeatureDefinition | None:
        """Get a feature definition by name."""
        pass

    @abstractmethod
    def get_segment(self, segment_id: int | str) -> Segment | None:
        """Get a segment by id."""
        pass

    @abstractmethod
    def list_toggles(self) -> list[FeatureDefinition]:
        """List all feature definitions."""
        pass


class FeatureEngineBase(ABC):
    """
    Abstract feature engine.

    This is the main entry point for feature checks.
    """

    @abstractmethod
    def is_enabled(
        self,
        name: str,
        context: Context | None = None,
        fallback: Fallback | bool | None = None,
    ) -> bool:
        """
        Check if a feature is enabled.

        Args:
            name: Feature name
            context: Request context
            fallback: Value (or callable) used when the feature is unknown

        Returns:
            True if the feature is enabled for this context
        """
        pass

    @abstractmethod
    def get_variant(
        self,
        name: str,
        context: Context | None = None,
        fallback_variant: Variant | None = None,
    ) -> Variant:
        """Resolve the variant of a feature for this context."""
        pass

    @abstractmethod
    def force_get_variant(
        self,
        name: str,
        context: Context | None = None,
        fallback_variant: Variant | None = None,
    ) -> Variant:
        """Resolve the weighted variant without evaluating the toggle."""
        pass
