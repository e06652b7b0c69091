"""
Tests for variant selection and get_variant / force_get_variant.
"""

from collections import Counter

from togglekit.core.features import (
    DEFAULT_VARIANT,
    Context,
    FeatureEngine,
    Override,
    Payload,
    PayloadType,
    Strategy,
    StrategySelector,
    Variant,
    VariantDefinition,
    select_variant_definition,
)
from togglekit.core.features.variants import get_seed


class CountingStrategy(Strategy):
    name = "counting"

    def __init__(self):
        self.calls = 0

    def is_enabled(self, parameters, context):
        self.calls += 1
        return True


def weighted(*pairs, stickiness=None):
    return [VariantDefinition(name=name, weight=weight, stickiness=stickiness) for name, weight in pairs]


# ============================================================
# SELECTION
# ============================================================


def test_override_wins_regardless_of_weight():
    """A matching override selects its variant even with weight 0."""
    variants = [
        VariantDefinition(name="heavy", weight=100),
        VariantDefinition(
            name="forced",
            weight=0,
            overrides=(Override(context_name="userId", values=("vip",)),),
        ),
    ]

    selected = select_variant_definition("feature", None, variants, Context(user_id="vip"))
    assert selected.name == "forced"

    selected = select_variant_definition("feature", None, variants, Context(user_id="regular"))
    assert selected.name == "heavy"


def test_first_matching_override_in_declared_order():
    override = (Override(context_name="tier", values=("gold",)),)
    variants = [
        VariantDefinition(name="a", weight=1, overrides=override),
        VariantDefinition(name="b", weight=1, overrides=override),
    ]

    selected = select_variant_definition("f", None, variants, Context(properties={"tier": "gold"}))
    assert selected.name == "a"


def test_zero_total_weight_selects_nothing():
    assert select_variant_definition("f", None, weighted(("a", 0), ("b", 0)), Context(user_id="u1")) is None
    assert select_variant_definition("f", None, [], Context(user_id="u1")) is None


def test_zero_weight_variants_are_never_drawn():
    variants = weighted(("a", 1), ("never", 0), ("c", 1))

    names = {
        select_variant_definition("f", None, variants, Context(user_id=str(i))).name
        for i in range(500)
    }
    assert names == {"a", "c"}


def test_weighted_distribution():
    """Weights 30/30/40 over 100k identities land within 2%."""
    variants = weighted(("a", 30), ("b", 30), ("c", 40))
    total = 100_000

    counts = Counter(
        select_variant_definition("distribution", None, variants, Context(user_id=f"user-{i}")).name
        for i in range(total)
    )

    assert abs(counts["a"] / total - 0.30) < 0.02
    assert abs(counts["b"] / total - 0.30) < 0.02
    assert abs(counts["c"] / total - 0.40) < 0.02


def test_selection_is_sticky():
    variants = weighted(("a", 50), ("b", 50))
    ctx = Context(user_id="sticky")

    names = {select_variant_definition("f", None, variants, ctx).name for _ in range(20)}
    assert len(names) == 1


def test_custom_stickiness_field():
    """Users sharing the stickiness field share the variant."""
    variants = weighted(("a", 50), ("b", 50), stickiness="tenant")

    names = {
        select_variant_definition("f", "tenant", variants, Context(user_id=str(i), properties={"tenant": "acme"})).name
        for i in range(50)
    }
    assert len(names) == 1


# ============================================================
# STICKINESS SEED
# ============================================================


def test_default_seed_priority():
    def no_random():
        raise AssertionError("random seed should not be needed")

    assert get_seed(Context(user_id="u", session_id="s", remote_address="r"), "default", no_random) == "u"
    assert get_seed(Context(session_id="s", remote_address="r"), "default", no_random) == "s"
    assert get_seed(Context(remote_address="r"), None, no_random) == "r"
    assert get_seed(Context(), "default", lambda: "random") == "random"


def test_named_seed_falls_back_to_random():
    assert get_seed(Context(properties={"tenant": "acme"}), "tenant") == "acme"
    assert get_seed(Context(user_id="u1"), "tenant", lambda: "random") == "random"


# ============================================================
# ENGINE
# ============================================================


def test_get_variant(engine, feature_factory):
    payload = Payload(type=PayloadType.JSON, value='{"color": "blue"}')
    feature_factory.create(
        "colors",
        variants=[VariantDefinition(name="blue", weight=1, payload=payload)],
    )

    variant = engine.get_variant("colors", Context(user_id="u1"))

    assert variant.name == "blue"
    assert variant.enabled is True
    assert variant.feature_enabled is True
    assert variant.payload == payload


def test_get_variant_unknown_feature(engine):
    assert engine.get_variant("missing") == DEFAULT_VARIANT

    fallback = Variant(name="fallback", enabled=True)
    variant = engine.get_variant("missing", fallback_variant=fallback)
    assert variant.name == "fallback"
    assert variant.enabled is True
    assert variant.feature_enabled is False


def test_get_variant_disabled_feature(engine, feature_factory):
    feature_factory.create("off", enabled=False, variants=weighted(("a", 1)))

    variant = engine.get_variant("off", Context(user_id="u1"))

    assert variant.name == "disabled"
    assert variant.feature_enabled is False


def test_enabled_feature_without_variants(engine, feature_factory):
    """The feature is on even though no variant is available."""
    feature_factory.create("plain")

    variant = engine.get_variant("plain")

    assert variant.name == "disabled"
    assert variant.enabled is False
    assert variant.feature_enabled is True


def test_zero_total_weight_returns_fallback(engine, feature_factory):
    feature_factory.create("weightless", variants=weighted(("a", 0)))

    variant = engine.get_variant("weightless", Context(user_id="u1"))

    assert variant.name == "disabled"
    assert variant.feature_enabled is True


def test_strategy_variant_evaluates_toggle_once(repository, hooks, settings, feature_factory):
    """The strategy-scoped variant is returned from the same single evaluation."""
    strategy = CountingStrategy()
    engine = FeatureEngine(repository, [strategy], hooks=hooks, settings=settings)
    feature_factory.create(
        "scoped",
        strategies=[
            StrategySelector(name="counting", variants=(VariantDefinition(name="from-strategy", weight=1),)),
        ],
        variants=[VariantDefinition(name="from-feature", weight=1)],
    )

    variant = engine.get_variant("scoped", Context(user_id="u1"))

    assert variant.name == "from-strategy"
    assert variant.feature_enabled is True
    assert strategy.calls == 1


def test_feature_variants_when_winning_strategy_has_none(engine, feature_factory):
    feature_factory.create(
        "mixed",
        strategies=[StrategySelector(name="default")],
        variants=[VariantDefinition(name="from-feature", weight=1)],
    )

    assert engine.get_variant("mixed", Context(user_id="u1")).name == "from-feature"


def test_get_variant_impression(engine, feature_factory, recorder):
    feature_factory.create("tracked", variants=weighted(("a", 1)), impression_data=True)

    engine.get_variant("tracked", Context(user_id="u1"))

    event = recorder.impressions[0]
    assert event.event_type == "getVariant"
    assert event.enabled is True
    assert event.variant == "a"


def test_get_variant_impression_without_variants(engine, feature_factory, recorder):
    """The impression reports the returned variant's flag, not the feature's."""
    feature_factory.create("plain_tracked", impression_data=True)

    variant = engine.get_variant("plain_tracked", Context(user_id="u1"))

    assert variant.name == "disabled"
    assert variant.feature_enabled is True
    event = recorder.impressions[0]
    assert event.enabled is False
    assert event.variant == "disabled"


def test_force_get_variant_skips_toggle(repository, hooks, recorder, settings, feature_factory):
    """Weighted selection only; no strategy runs and no impression is emitted."""
    strategy = CountingStrategy()
    engine = FeatureEngine(repository, [strategy], hooks=hooks, settings=settings)
    feature_factory.create(
        "forced",
        strategies=[StrategySelector(name="counting")],
        variants=weighted(("a", 1)),
        impression_data=True,
    )

    variant = engine.force_get_variant("forced", Context(user_id="u1"))

    assert variant.name == "a"
    assert variant.feature_enabled is True
    assert strategy.calls == 0
    assert recorder.impressions == []


def test_force_get_variant_unknown_feature(engine):
    variant = engine.force_get_variant("missing")
    assert variant.name == "disabled"
    assert variant.feature_enabled is False
