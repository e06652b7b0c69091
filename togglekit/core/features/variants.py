"""
Weighted variant selection.

Selection order:
1. No positive total weight: nothing can be selected
2. Override match (first variant, in declared order, with a matching override)
3. Sticky bucket: hash the stickiness seed into 1..total_weight and walk the
   variants accumulating weight; zero-weight variants are never drawn
"""

import random
from typing import Callable, Sequence

from .context import Context
from .hashing import normalized_variant_value
from .interfaces import FeatureDefinition, Override, Variant, VariantDefinition

DEFAULT_STICKINESS = "default"

# Fields tried, in order, for default stickiness
STICKINESS_FIELDS = ("userId", "sessionId", "remoteAddress")

RandomSeed = Callable[[], str]


def random_seed() -> str:
    return str(random.randint(0, 100000))


def get_seed(
    context: Context,
    stickiness: str | None = DEFAULT_STICKINESS,
    random_source: RandomSeed = random_seed,
) -> str:
    """Resolve the identity a variant draw is bucketed on."""
    if stickiness and stickiness != DEFAULT_STICKINESS:
        return context.get_str(stickiness) or random_source()

    for name in STICKINESS_FIELDS:
        value = context.get_str(name)
        if value:
            return value
    return random_source()


def _override_matches(override: Override, context: Context) -> bool:
    value = context.get_str(override.context_name)
    return value is not None and value in override.values


def find_override(variants: Sequence[VariantDefinition], context: Context) -> VariantDefinition | None:
    for variant in variants:
        if any(_override_matches(o, context) for o in variant.overrides):
            return variant
    return None


def select_variant_definition(
    group_id: str,
    stickiness: str | None,
    variants: Sequence[VariantDefinition],
    context: Context,
    random_source: RandomSeed = random_seed,
) -> VariantDefinition | None:
    """
    Pick a variant definition for ``context``.

    Args:
        group_id: Hash group (the feature name, or a strategy's groupId)
        stickiness: Context field to bucket on
        variants: Candidates in declared order
        context: Request context
        random_source: Seed used when no sticky identity is available

    Returns:
        The selected definition, or None if no distribution exists
    """
    total_weight = sum(v.weight for v in variants)
    if total_weight <= 0:
        return None

    override = find_override(variants, context)
    if override is not None:
        return override

    target = normalized_variant_value(get_seed(context, stickiness, random_source), group_id, total_weight)

    counter = 0
    for variant in variants:
        if variant.weight == 0:
            continue
        counter += variant.weight
        if counter >= target:
            return variant
    return None


def select_variant(
    feature: FeatureDefinition,
    context: Context,
    random_source: RandomSeed = random_seed,
) -> VariantDefinition | None:
    """Select among a feature's own variants, bucketed on the feature name."""
    variants = feature.variants or ()
    stickiness = variants[0].stickiness if variants else None
    return select_variant_definition(feature.name, stickiness, variants, context, random_source)


def to_variant(definition: VariantDefinition, feature_enabled: bool = False) -> Variant:
    return Variant(
        name=definition.name,
        enabled=True,
        payload=definition.payload,
        feature_enabled=feature_enabled,
    )
