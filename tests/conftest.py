"""
Pytest fixtures for testing.

Provides:
- In-memory repository and engine wired together
- Event recorder capturing warn / error / impression events
- Factory fixtures for creating feature definitions
"""

from typing import Any

import pytest

from togglekit.core.config import EngineSettings
from togglekit.core.features import (
    FeatureDefinition,
    FeatureEngine,
    MemoryFeatureRepository,
    ParentDependency,
    Segment,
    StrategySelector,
    VariantDefinition,
)
from togglekit.core.hooks import EngineEvent, HookManager, ImpressionEvent


# ============ Settings ============


@pytest.fixture
def settings() -> EngineSettings:
    """Settings isolated from the host environment."""
    return EngineSettings(
        app_name="test-app",
        environment="test",
        hostname="test-host",
    )


# ============ Events ============


class EventRecorder:
    """Collects engine events for assertions."""

    def __init__(self, hooks: HookManager):
        self.warnings: list[str] = []
        self.errors: list[Exception] = []
        self.impressions: list[ImpressionEvent] = []

        hooks.register(EngineEvent.WARN, self.warnings.append)
        hooks.register(EngineEvent.ERROR, self.errors.append)
        hooks.register(EngineEvent.IMPRESSION, self.impressions.append)

    def clear(self) -> None:
        self.warnings.clear()
        self.errors.clear()
        self.impressions.clear()


@pytest.fixture
def hooks() -> HookManager:
    return HookManager()


@pytest.fixture
def recorder(hooks: HookManager) -> EventRecorder:
    return EventRecorder(hooks)


# ============ Repository / Engine ============


@pytest.fixture
def repository() -> MemoryFeatureRepository:
    return MemoryFeatureRepository()


@pytest.fixture
def engine(
    repository: MemoryFeatureRepository,
    hooks: HookManager,
    recorder: EventRecorder,
    settings: EngineSettings,
) -> FeatureEngine:
    """Engine with built-in strategies and recorded events."""
    return FeatureEngine(repository, hooks=hooks, settings=settings)


# ============ Factory Fixtures ============


class FeatureFactory:
    """Factory for publishing test feature definitions."""

    def __init__(self, repository: MemoryFeatureRepository):
        self.repository = repository

    def create(
        self,
        name: str,
        *,
        enabled: bool = True,
        strategies: Any = None,
        variants: list[VariantDefinition] | None = None,
        dependencies: list[ParentDependency] | None = None,
        impression_data: bool = False,
    ) -> FeatureDefinition:
        """Create a feature and add it to the repository."""
        if strategies is None:
            strategies = [StrategySelector(name="default")]
        elif isinstance(strategies, list):
            strategies = tuple(strategies)

        feature = FeatureDefinition(
            name=name,
            enabled=enabled,
            strategies=strategies,
            variants=tuple(variants or ()),
            dependencies=tuple(dependencies or ()),
            impression_data=impression_data,
        )
        self.repository.seed([feature])
        return feature

    def segment(self, segment_id: int, constraints: list) -> Segment:
        """Create a segment and add it to the repository."""
        segment = Segment(id=segment_id, constraints=tuple(constraints))
        self.repository.seed([], [segment])
        return segment


@pytest.fixture
def feature_factory(repository: MemoryFeatureRepository) -> FeatureFactory:
    """Fixture that provides FeatureFactory."""
    return FeatureFactory(repository)
