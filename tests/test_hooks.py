"""
Tests for the hook manager, engine events and logging setup.
"""

import json
import logging

import structlog

from togglekit.core.features import Context
from togglekit.core.hooks import EngineEvent, HookManager, HookPriority, ImpressionEvent
from togglekit.core.logging import configure_logging


def test_trigger_calls_handlers_by_priority():
    hooks = HookManager()
    calls = []

    hooks.register("evt", lambda: calls.append("low"), priority=HookPriority.LATE)
    hooks.register("evt", lambda: calls.append("high"), priority=HookPriority.EARLY)
    hooks.register("evt", lambda: calls.append("normal"))

    hooks.trigger("evt")

    assert calls == ["high", "normal", "low"]


def test_enum_and_string_names_are_equivalent():
    hooks = HookManager()
    received = []

    hooks.register(EngineEvent.WARN, received.append)
    hooks.trigger("warn", "message")

    assert received == ["message"]
    assert hooks.has_handlers("warn")


def test_handler_errors_are_captured():
    """A failing handler does not stop the others or raise."""
    hooks = HookManager()
    received = []

    def broken(_):
        raise RuntimeError("handler failed")

    hooks.register(EngineEvent.ERROR, broken, source="broken-handler")
    hooks.register(EngineEvent.ERROR, received.append, priority=HookPriority.LATE)

    result = hooks.trigger(EngineEvent.ERROR, "payload")

    assert received == ["payload"]
    assert result.errors[0][0] == "broken-handler"
    assert isinstance(result.errors[0][1], RuntimeError)


def test_stop_on_error():
    hooks = HookManager()
    received = []

    def broken():
        raise RuntimeError("stop")

    hooks.register("evt", broken, priority=HookPriority.EARLY)
    hooks.register("evt", lambda: received.append(True))

    result = hooks.trigger("evt", stop_on_error=True)

    assert result.stopped is True
    assert received == []


def test_once_handler_runs_once():
    hooks = HookManager()
    calls = []

    hooks.register("evt", lambda: calls.append(True), once=True)
    hooks.trigger("evt")
    hooks.trigger("evt")

    assert calls == [True]
    assert not hooks.has_handlers("evt")


def test_on_decorator_and_unregister():
    hooks = HookManager()
    calls = []

    @hooks.on(EngineEvent.IMPRESSION)
    def record(event):
        calls.append(event)

    hooks.trigger(EngineEvent.IMPRESSION, "first")
    assert hooks.unregister(EngineEvent.IMPRESSION, record) is True
    hooks.trigger(EngineEvent.IMPRESSION, "second")

    assert calls == ["first"]
    assert hooks.unregister(EngineEvent.IMPRESSION, record) is False


def test_trigger_once_deduplicates_by_key():
    hooks = HookManager()
    warnings = []
    hooks.register(EngineEvent.WARN, warnings.append)

    assert hooks.trigger_once("strategy:x:f", EngineEvent.WARN, "first") is True
    assert hooks.trigger_once("strategy:x:f", EngineEvent.WARN, "again") is False
    assert hooks.trigger_once("strategy:y:f", EngineEvent.WARN, "other") is True

    assert warnings == ["first", "other"]


def test_clear_forgets_keys():
    hooks = HookManager()
    hooks.trigger_once("key", EngineEvent.WARN)
    hooks.clear()

    assert hooks.trigger_once("key", EngineEvent.WARN) is True


def test_impression_event_to_dict():
    event = ImpressionEvent(
        event_type="getVariant",
        feature_name="colors",
        context=Context(user_id="u1", feature_toggle="colors"),
        enabled=True,
        variant="blue",
    )

    data = event.to_dict()

    assert data["eventType"] == "getVariant"
    assert data["featureName"] == "colors"
    assert data["variant"] == "blue"
    assert data["context"] == {"userId": "u1", "featureToggle": "colors"}
    assert data["id"] == event.id


def test_configure_logging_json(caplog):
    caplog.set_level(logging.INFO)
    configure_logging(level="INFO", fmt="json")
    try:
        structlog.get_logger("togglekit.test").info("evaluated", feature="checkout")

        payload = json.loads(caplog.records[-1].getMessage())
        assert payload["event"] == "evaluated"
        assert payload["feature"] == "checkout"
        assert payload["level"] == "info"
    finally:
        structlog.reset_defaults()
