"""
Engine event types.

Three kinds of events leave the engine:
- warn: a referenced strategy or parent feature is missing (de-duplicated per key)
- error: a feature definition is malformed
- impression: one record per evaluation of a feature that opted in
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Literal
import uuid

if TYPE_CHECKING:
    from togglekit.core.features.context import Context


class EngineEvent(str, Enum):
    WARN = "warn"
    ERROR = "error"
    IMPRESSION = "impression"


ImpressionType = Literal["isEnabled", "getVariant"]


@dataclass
class ImpressionEvent:
    """Audit record of a single isEnabled / getVariant call."""
    event_type: ImpressionType
    feature_name: str
    context: "Context"
    enabled: bool
    variant: str | None = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict:
        data = {
            "eventType": self.event_type,
            "featureName": self.feature_name,
            "enabled": self.enabled,
            "context": self.context.to_dict(),
            "id": self.id,
            "timestamp": self.timestamp.isoformat(),
        }
        if self.variant is not None:
            data["variant"] = self.variant
        return data
