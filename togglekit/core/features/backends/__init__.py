"""
Feature definition repository implementations.
"""

from .memory import MemoryFeatureRepository, Snapshot

__all__ = [
    "MemoryFeatureRepository",
    "Snapshot",
]
