"""
Hook manager for engine events.
"""
from __future__ import annotations

from typing import Callable, Any
from dataclasses import dataclass, field
from enum import Enum, IntEnum
import threading

import structlog

logger = structlog.get_logger(__name__)

Handler = Callable[..., Any]


def _key(name: str | Enum) -> str:
    return name.value if isinstance(name, Enum) else name


class HookPriority(IntEnum):
    """Order in which handlers of one event run (lower first)."""
    FIRST = 0
    EARLY = 25
    NORMAL = 50
    LATE = 75
    LAST = 100


@dataclass(frozen=True)
class Hook:
    """One handler subscribed to one event."""
    name: str
    handler: Handler
    priority: HookPriority = HookPriority.NORMAL
    once: bool = False
    source: str = ""

    @property
    def label(self) -> str:
        return self.source or getattr(self.handler, "__qualname__", repr(self.handler))


@dataclass
class HookResult:
    """Outcome of dispatching one event."""
    hook_name: str
    results: list[Any] = field(default_factory=list)
    errors: list[tuple[str, Exception]] = field(default_factory=list)
    stopped: bool = False

    @property
    def ok(self) -> bool:
        return not self.errors


class HookManager:
    """
    Dispatches engine events to registered handlers.

    Handlers run synchronously on the evaluating thread, so they must be
    quick. A failing handler is logged and recorded in the HookResult; it
    never interrupts evaluation.

    Events:
    - warn: message string (missing strategy / missing dependency)
    - error: exception describing malformed feature data
    - impression: ImpressionEvent

    Example usage:
    ```python
    hooks = HookManager()

    @hooks.on(EngineEvent.IMPRESSION)
    def record(event: ImpressionEvent):
        audit_log.append(event.to_dict())

    engine = FeatureEngine(repository, hooks=hooks)
    ```

    Keys passed to trigger_once() are remembered for the lifetime of the
    manager and never evicted.
    """

    def __init__(self):
        # Per-event handler tuples, swapped wholesale under the lock
        self._subscriptions: dict[str, tuple[Hook, ...]] = {}
        self._seen_keys: set[str] = set()
        self._lock = threading.Lock()

    def register(
        self,
        name: str | Enum,
        handler: Handler,
        *,
        priority: HookPriority = HookPriority.NORMAL,
        once: bool = False,
        source: str = "",
    ) -> Hook:
        """Subscribe ``handler`` to event ``name``."""
        hook = Hook(_key(name), handler, priority, once, source)

        with self._lock:
            current = self._subscriptions.get(hook.name, ())
            self._subscriptions[hook.name] = tuple(
                sorted((*current, hook), key=lambda h: h.priority)
            )

        logger.debug("hook_registered", hook=hook.name, priority=int(priority))
        return hook

    def unregister(self, name: str | Enum, handler: Handler) -> bool:
        """Remove the first subscription of ``handler``; False if absent."""
        event = _key(name)
        with self._lock:
            current = self._subscriptions.get(event, ())
            for hook in current:
                if hook.handler is handler:
                    self._subscriptions[event] = tuple(h for h in current if h is not hook)
                    return True
        return False

    def _discard(self, event: str, hook: Hook) -> bool:
        with self._lock:
            current = self._subscriptions.get(event, ())
            if hook not in current:
                return False
            self._subscriptions[event] = tuple(h for h in current if h is not hook)
            return True

    def on(
        self,
        name: str | Enum,
        *,
        priority: HookPriority = HookPriority.NORMAL,
        once: bool = False,
    ) -> Callable[[Handler], Handler]:
        """Decorator form of register()."""
        def decorator(func: Handler) -> Handler:
            self.register(name, func, priority=priority, once=once)
            return func
        return decorator

    def has_handlers(self, name: str | Enum) -> bool:
        return bool(self._subscriptions.get(_key(name)))

    def trigger(
        self,
        name: str | Enum,
        *args,
        stop_on_error: bool = False,
        **kwargs,
    ) -> HookResult:
        """
        Call every handler of ``name`` in priority order.

        Args:
            name: Event to dispatch
            stop_on_error: Skip the remaining handlers after a failure
            *args, **kwargs: Passed to handlers
        """
        event = _key(name)
        outcome = HookResult(hook_name=event)

        for hook in self._subscriptions.get(event, ()):
            # A once-handler fires for whichever dispatch removes it first
            if hook.once and not self._discard(event, hook):
                continue

            try:
                outcome.results.append(hook.handler(*args, **kwargs))
            except Exception as e:
                outcome.errors.append((hook.label, e))
                logger.error("hook_handler_failed", hook=event, handler=hook.label, error=str(e))
                if stop_on_error:
                    outcome.stopped = True
                    break

        return outcome

    def trigger_once(self, key: str, name: str | Enum, *args, **kwargs) -> bool:
        """
        Dispatch ``name`` only the first time ``key`` is seen.

        Returns True if the event was dispatched.
        """
        with self._lock:
            if key in self._seen_keys:
                return False
            self._seen_keys.add(key)

        self.trigger(name, *args, **kwargs)
        return True

    def clear(self) -> None:
        """Drop all subscriptions and forget de-duplication keys."""
        with self._lock:
            self._subscriptions.clear()
            self._seen_keys.clear()
