"""Endpoint and connection configuration.

The controller advertises its port inside a user-agent style string
(``... port/9974 ...``). It is read once at startup; everything else has a
fixed default that the CLI may override.
"""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 9974
DEFAULT_RECONNECT_DELAY = 1.0

USER_AGENT_ENV = "WEBVIEW_BRIDGE_USER_AGENT"
PORT_PATTERN = re.compile(r"port/(\d+)")


def parse_port(user_agent: str | None, default: int = DEFAULT_PORT) -> int:
    """Extract the controller port from a user-agent style string.

    Falls back to ``default`` when the string is missing, has no
    ``port/<n>`` token, or names a number outside the TCP port range.
    """
    if not user_agent:
        return default

    match = PORT_PATTERN.search(user_agent)
    if match is None:
        return default

    port = int(match.group(1))
    if not 0 < port < 65536:
        return default
    return port


@dataclass(frozen=True)
class BridgeConfig:
    """Connection settings for the message center client."""

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT

    # Reconnection: fixed delay, no backoff
    reconnect_delay: float = DEFAULT_RECONNECT_DELAY

    # WebSocket settings
    open_timeout: float | None = 10.0
    ping_interval: float | None = 30.0
    ping_timeout: float | None = 10.0

    @property
    def url(self) -> str:
        return f"ws://{self.host}:{self.port}"

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        **overrides: Any,
    ) -> BridgeConfig:
        """Build a config from the process environment.

        Args:
            environ: Environment mapping (default: ``os.environ``)
            **overrides: Field values that win over the environment
        """
        env = os.environ if environ is None else environ
        config = cls(port=parse_port(env.get(USER_AGENT_ENV)))
        overrides = {k: v for k, v in overrides.items() if v is not None}
        return replace(config, **overrides) if overrides else config
