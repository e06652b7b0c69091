"""
Constraint assembly and matching.

A strategy must satisfy its inline constraints followed by the constraints
of every segment it references. A segment id that the repository cannot
resolve yields an UnresolvedSegment marker, which never matches.

Operators:
- IN, NOT_IN: membership of the stringified context value
- STR_CONTAINS, STR_STARTS_WITH, STR_ENDS_WITH: substring checks (optionally case-insensitive)
- NUM_EQ, NUM_GT, NUM_GTE, NUM_LT, NUM_LTE: numeric comparison against ``value``
- DATE_AFTER, DATE_BEFORE: ISO-8601 comparison (currentTime defaults to now)
- SEMVER_EQ, SEMVER_GT, SEMVER_LT: semantic version comparison

A missing context value fails every operator except NOT_IN.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Iterator

import semver
import structlog

from .context import Context
from .interfaces import Constraint, FeatureRepository, StrategySelector

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class UnresolvedSegment:
    """Stands in for a segment id missing from the repository."""
    segment_id: int | str


ConstraintSource = Constraint | UnresolvedSegment


# ============================================================
# RESOLUTION
# ============================================================

class ConstraintResolver:
    """Assembles the ordered constraints a strategy selector must satisfy."""

    def __init__(self, repository: FeatureRepository):
        self.repository = repository

    def constraints_for(self, selector: StrategySelector) -> Iterator[ConstraintSource]:
        """
        Yield inline constraints, then each referenced segment's constraints.

        Every call starts a fresh pass over the current snapshot.
        """
        yield from selector.constraints

        for segment_id in selector.segments:
            segment = self.repository.get_segment(segment_id)
            if segment is None:
                yield UnresolvedSegment(segment_id)
            else:
                yield from segment.constraints


# ============================================================
# MATCHING
# ============================================================

def constraints_match(constraints: Iterable[ConstraintSource] | None, context: Context) -> bool:
    """True if every constraint matches; an unresolved segment fails the lot."""
    if constraints is None:
        return True

    for constraint in constraints:
        if not isinstance(constraint, Constraint):
            return False
        if not constraint_matches(constraint, context):
            return False
    return True


def constraint_matches(constraint: Constraint, context: Context) -> bool:
    operator = OPERATORS.get(constraint.operator)
    if operator is None:
        logger.debug("unknown_constraint_operator", operator=constraint.operator)
        return False

    result = operator(constraint, context)
    return not result if constraint.inverted else result


def _in(constraint: Constraint, context: Context) -> bool:
    return context.get_str(constraint.context_name) in constraint.values


def _not_in(constraint: Constraint, context: Context) -> bool:
    return not _in(constraint, context)


def _string_operator(check: Callable[[str, str], bool]) -> Callable[[Constraint, Context], bool]:
    def evaluate(constraint: Constraint, context: Context) -> bool:
        value = context.get_str(constraint.context_name)
        if value is None:
            return False

        candidates: Iterable[str] = constraint.values
        if constraint.case_insensitive:
            value = value.lower()
            candidates = [c.lower() for c in candidates]
        return any(check(value, candidate) for candidate in candidates)
    return evaluate


def _numeric_operator(compare: Callable[[float, float], bool]) -> Callable[[Constraint, Context], bool]:
    def evaluate(constraint: Constraint, context: Context) -> bool:
        try:
            actual = float(context.get(constraint.context_name))
            expected = float(constraint.value)
        except (TypeError, ValueError):
            return False
        return compare(actual, expected)
    return evaluate


def _parse_datetime(value: Any) -> datetime:
    if not isinstance(value, datetime):
        value = datetime.fromisoformat(str(value))
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def _date_operator(compare: Callable[[datetime, datetime], bool]) -> Callable[[Constraint, Context], bool]:
    def evaluate(constraint: Constraint, context: Context) -> bool:
        actual = context.get(constraint.context_name)
        if actual is None and constraint.context_name == "currentTime":
            actual = datetime.now(timezone.utc)
        if actual is None or constraint.value is None:
            return False
        try:
            return compare(_parse_datetime(actual), _parse_datetime(constraint.value))
        except (TypeError, ValueError):
            return False
    return evaluate


def _semver_operator(compare: Callable[[semver.Version, semver.Version], bool]) -> Callable[[Constraint, Context], bool]:
    def evaluate(constraint: Constraint, context: Context) -> bool:
        actual = context.get_str(constraint.context_name)
        if actual is None or constraint.value is None:
            return False
        try:
            return compare(semver.Version.parse(actual), semver.Version.parse(constraint.value))
        except (TypeError, ValueError):
            return False
    return evaluate


OPERATORS: dict[str, Callable[[Constraint, Context], bool]] = {
    "IN": _in,
    "NOT_IN": _not_in,
    "STR_CONTAINS": _string_operator(lambda value, c: c in value),
    "STR_STARTS_WITH": _string_operator(lambda value, c: value.startswith(c)),
    "STR_ENDS_WITH": _string_operator(lambda value, c: value.endswith(c)),
    "NUM_EQ": _numeric_operator(lambda a, b: a == b),
    "NUM_GT": _numeric_operator(lambda a, b: a > b),
    "NUM_GTE": _numeric_operator(lambda a, b: a >= b),
    "NUM_LT": _numeric_operator(lambda a, b: a < b),
    "NUM_LTE": _numeric_operator(lambda a, b: a <= b),
    "DATE_AFTER": _date_operator(lambda a, b: a > b),
    "DATE_BEFORE": _date_operator(lambda a, b: a < b),
    "SEMVER_EQ": _semver_operator(lambda a, b: a == b),
    "SEMVER_GT": _semver_operator(lambda a, b: a > b),
    "SEMVER_LT": _semver_operator(lambda a, b: a < b),
}
