"""
Built-in strategies.

These are registered with StrategyRegistry on import and make up the
default strategy set of every engine.

Usage (feature definition):
    {"name": "userWithId", "parameters": {"userIds": "u1,u2"}}
    {"name": "flexibleRollout", "parameters": {"rollout": "25", "stickiness": "default", "groupId": "checkout"}}
"""

import ipaddress
import os
import random
import socket
from typing import Callable

from .base import Parameters, Strategy, parameter_list, parameter_number
from .registry import StrategyRegistry
from ..context import Context
from ..hashing import normalized_strategy_value


@StrategyRegistry.strategy("default")
class DefaultStrategy(Strategy):
    """On for everyone; constraints still apply."""

    def is_enabled(self, parameters: Parameters, context: Context) -> bool:
        return True


@StrategyRegistry.strategy("userWithId")
class UserWithIdStrategy(Strategy):
    """
    On for an explicit list of users.

    Parameters:
        userIds: Comma-separated user ids
    """

    def is_enabled(self, parameters: Parameters, context: Context) -> bool:
        user_id = context.get_str("userId")
        return user_id is not None and user_id in parameter_list(parameters, "userIds")


@StrategyRegistry.strategy("remoteAddress")
class RemoteAddressStrategy(Strategy):
    """
    On for clients whose address equals, or falls inside, a listed entry.

    Parameters:
        IPs: Comma-separated addresses and CIDR ranges (IPv4 or IPv6)

    Entries that do not parse are skipped.
    """

    def is_enabled(self, parameters: Parameters, context: Context) -> bool:
        remote = context.get_str("remoteAddress")
        if not remote:
            return False

        for entry in parameter_list(parameters, "IPs"):
            if entry == remote:
                return True
            try:
                if ipaddress.ip_address(remote) in ipaddress.ip_network(entry, strict=False):
                    return True
            except ValueError:
                continue
        return False


@StrategyRegistry.strategy("applicationHostname")
class ApplicationHostnameStrategy(Strategy):
    """
    On for processes running on a listed host.

    Parameters:
        hostNames: Comma-separated host names (case-insensitive)
    """

    def __init__(self, hostname: str | None = None):
        resolved = hostname or os.environ.get("HOSTNAME") or socket.gethostname() or "undefined"
        self.hostname = resolved.lower()

    def is_enabled(self, parameters: Parameters, context: Context) -> bool:
        host_names = [name.lower() for name in parameter_list(parameters, "hostNames")]
        return self.hostname in host_names


@StrategyRegistry.strategy("flexibleRollout")
class FlexibleRolloutStrategy(Strategy):
    """
    Sticky percentage rollout.

    Parameters:
        rollout: Percentage (0-100)
        stickiness: "default" (userId, then sessionId, then random),
            "random", or the name of any context field
        groupId: Hash group; defaults to the feature name

    An empty stickiness identity turns the strategy off.
    """

    STICKINESS_DEFAULT = "default"
    STICKINESS_RANDOM = "random"

    def __init__(self, random_generator: Callable[[], str] | None = None):
        self.random_generator = random_generator or self._random_identity

    @staticmethod
    def _random_identity() -> str:
        return str(random.randint(1, 10001))

    def resolve_stickiness(self, stickiness: str, context: Context) -> str:
        if stickiness == self.STICKINESS_DEFAULT:
            return (
                context.get_str("userId")
                or context.get_str("sessionId")
                or self.random_generator()
            )
        if stickiness == self.STICKINESS_RANDOM:
            return self.random_generator()
        return context.get_str(stickiness) or ""

    def is_enabled(self, parameters: Parameters, context: Context) -> bool:
        group_id = str(parameters.get("groupId") or context.feature_toggle or "")
        rollout = parameter_number(parameters, "rollout")
        stickiness = parameters.get("stickiness") or self.STICKINESS_DEFAULT

        identity = self.resolve_stickiness(stickiness, context)
        if not identity:
            return False

        return rollout > 0 and normalized_strategy_value(identity, group_id) <= rollout
