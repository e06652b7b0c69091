"""
Evaluation context.

A Context carries the request-scoped identity and environment fields a
strategy may look at. Constraint definitions refer to fields by their wire
names (``userId``, ``remoteAddress``, ...); anything that is not a standard
field is looked up in ``properties``.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Mapping


# Wire name -> attribute name
STANDARD_FIELDS: dict[str, str] = {
    "userId": "user_id",
    "sessionId": "session_id",
    "remoteAddress": "remote_address",
    "environment": "environment",
    "appName": "app_name",
    "currentTime": "current_time",
    "featureToggle": "feature_toggle",
}
_ATTRIBUTES = set(STANDARD_FIELDS.values())


def stringify(value: Any) -> str | None:
    """Render a context value the way constraint values are written."""
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


@dataclass(frozen=True)
class Context:
    """
    Request-scoped evaluation context.

    Attributes:
        user_id: Identifier of the current user
        session_id: Identifier of the current session
        remote_address: Client IP address
        environment: Deployment environment
        app_name: Calling application
        current_time: Point in time for date constraints (now if unset)
        feature_toggle: Name of the feature being evaluated (set by the engine)
        properties: Custom fields
    """
    user_id: str | None = None
    session_id: str | None = None
    remote_address: str | None = None
    environment: str | None = None
    app_name: str | None = None
    current_time: datetime | None = None
    feature_toggle: str | None = None
    properties: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "Context":
        """Build a context from a wire-shaped mapping (``{"userId": ...}``)."""
        if not data:
            return cls()
        values: dict[str, Any] = {}
        properties = dict(data.get("properties") or {})
        for key, value in data.items():
            if key == "properties":
                continue
            attr = STANDARD_FIELDS.get(key, key)
            if attr in _ATTRIBUTES:
                values[attr] = value
            else:
                # Unknown top-level fields are treated as custom properties
                properties.setdefault(key, value)
        return cls(**values, properties=properties)

    def get(self, name: str) -> Any:
        """Resolve a field by wire name, attribute name or custom property."""
        attr = STANDARD_FIELDS.get(name, name)
        if attr in _ATTRIBUTES:
            value = getattr(self, attr)
            if value is not None:
                return value
        return self.properties.get(name)

    def get_str(self, name: str) -> str | None:
        return stringify(self.get(name))

    def merged_with(self, defaults: Mapping[str, Any]) -> "Context":
        """Fill unset standard fields from ``defaults`` (attribute names)."""
        updates = {
            attr: value
            for attr, value in defaults.items()
            if attr in _ATTRIBUTES and getattr(self, attr) is None
        }
        return replace(self, **updates) if updates else self

    def for_feature(self, feature_name: str) -> "Context":
        """Copy of this context bound to the feature being evaluated."""
        return replace(self, feature_toggle=feature_name)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        for wire, attr in STANDARD_FIELDS.items():
            value = getattr(self, attr)
            if value is not None:
                data[wire] = stringify(value) if attr == "current_time" else value
        if self.properties:
            data["properties"] = dict(self.properties)
        return data
