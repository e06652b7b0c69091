"""
Engine event hooks.

Usage:
    from togglekit.core.hooks import HookManager, EngineEvent

    hooks = HookManager()
    hooks.register(EngineEvent.WARN, lambda message: print(message))
"""

from .events import EngineEvent, ImpressionEvent, ImpressionType
from .manager import Hook, HookManager, HookPriority, HookResult

__all__ = [
    "EngineEvent",
    "Hook",
    "HookManager",
    "HookPriority",
    "HookResult",
    "ImpressionEvent",
    "ImpressionType",
]
