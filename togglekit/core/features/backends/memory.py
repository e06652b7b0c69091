"""
In-memory repository for feature definitions.

Holds the snapshot the engine reads. A fetcher (or a test) publishes new
definitions with replace() / load(); readers always see either the old or
the new snapshot, never a mix.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterable, Mapping

from ..interfaces import FeatureDefinition, FeatureRepository, Segment


@dataclass(frozen=True)
class Snapshot:
    """Immutable view of all definitions at one point in time."""
    features: Mapping[str, FeatureDefinition] = field(default_factory=lambda: MappingProxyType({}))
    segments: Mapping[int | str, Segment] = field(default_factory=lambda: MappingProxyType({}))


class MemoryFeatureRepository(FeatureRepository):
    """
    In-memory feature definition storage.

    Useful for:
    - Hosts that fetch definitions themselves and hand them over
    - Unit testing
    - Local development
    """

    def __init__(
        self,
        features: Iterable[FeatureDefinition] | None = None,
        segments: Iterable[Segment] | None = None,
    ):
        self._snapshot = Snapshot()
        if features or segments:
            self.replace(features or (), segments or ())

    @property
    def snapshot(self) -> Snapshot:
        return self._snapshot

    # ============================================================
    # READS
    # ============================================================

    def get_toggle(self, name: str) -> FeatureDefinition | None:
        """Get a feature definition by name."""
        return self._snapshot.features.get(name)

    def get_segment(self, segment_id: int | str) -> Segment | None:
        """Get a segment by id."""
        return self._snapshot.segments.get(segment_id)

    def list_toggles(self) -> list[FeatureDefinition]:
        """List all feature definitions."""
        return list(self._snapshot.features.values())

    # ============================================================
    # PUBLISHING
    # ============================================================

    def replace(
        self,
        features: Iterable[FeatureDefinition],
        segments: Iterable[Segment] = (),
    ) -> Snapshot:
        """Publish a complete new set of definitions."""
        snapshot = Snapshot(
            features=MappingProxyType({f.name: f for f in features}),
            segments=MappingProxyType({s.id: s for s in segments}),
        )
        # Single reference assignment; in-flight reads keep the old snapshot
        self._snapshot = snapshot
        return snapshot

    def load(self, payload: Mapping[str, Any]) -> Snapshot:
        """
        Publish definitions from a wire-shaped mapping.

        Expected shape:
            {"features": [{"name": ..., "enabled": ..., "strategies": [...]}],
             "segments": [{"id": 1, "constraints": [...]}]}
        """
        features = [FeatureDefinition.from_dict(f) for f in payload.get("features") or ()]
        segments = [Segment.from_dict(s) for s in payload.get("segments") or ()]
        return self.replace(features, segments)

    # ============================================================
    # TEST HELPERS
    # ============================================================

    def seed(self, features: list[FeatureDefinition], segments: list[Segment] | None = None) -> None:
        """Add definitions on top of the current snapshot. Useful for testing."""
        current = self._snapshot
        merged_features = {**current.features, **{f.name: f for f in features}}
        merged_segments = {**current.segments, **{s.id: s for s in segments or ()}}
        self.replace(merged_features.values(), merged_segments.values())

    def clear(self) -> None:
        """Clear all data. Useful for testing."""
        self._snapshot = Snapshot()
