"""webview-bridge - drive a host application from an external controller.

A reconnecting WebSocket client exchanges JSON messages with a controller on
a local port; a command router turns ``{command, data}`` messages into host
actions (open a file, switch the color theme, change the locale).
"""

from .app import CHANNEL_NAME, Bridge, create_bridge, run_bridge
from .client import MessageCenterClient, TransportState
from .config import BridgeConfig, parse_port
from .router import CommandRouter
from .session_token import PromptTokenProvider, StaticTokenProvider, TokenProvider

__version__ = "0.1.0"

__all__ = [
    # Client
    "MessageCenterClient",
    "TransportState",
    # Configuration
    "BridgeConfig",
    "parse_port",
    # Tokens
    "TokenProvider",
    "PromptTokenProvider",
    "StaticTokenProvider",
    # Router & assembly
    "CommandRouter",
    "Bridge",
    "CHANNEL_NAME",
    "create_bridge",
    "run_bridge",
]
