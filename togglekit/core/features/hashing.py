"""
Deterministic bucketing.

Uses 32-bit MurmurHash3 (x86) over ``"{group_id}:{identity}"`` so the same
identity lands in the same bucket across restarts and across the other
client implementations that read the same definitions.
"""

import mmh3

STRATEGY_SEED = 0
VARIANT_SEED = 86028157


def normalized_value(identity: str, group_id: str, normalizer: int, seed: int = STRATEGY_SEED) -> int:
    """Map ``identity`` within ``group_id`` to a bucket in 1..normalizer."""
    hash_value = mmh3.hash(f"{group_id}:{identity}", seed=seed, signed=False)
    return hash_value % normalizer + 1


def normalized_strategy_value(identity: str, group_id: str) -> int:
    """Rollout bucket in 1..100."""
    return normalized_value(identity, group_id, 100, STRATEGY_SEED)


def normalized_variant_value(identity: str, group_id: str, total_weight: int) -> int:
    """Variant bucket in 1..total_weight."""
    # 1-based like the other clients; the variant walk selects on cumulative weight >= bucket
    return normalized_value(identity, group_id, total_weight, VARIANT_SEED)
