"""Transport layer for the message center client.

- base: ``Connection`` / ``Connector`` protocols
- websocket: production transport over the ``websockets`` package
- mock: in-memory transport for tests
"""

from .base import Connection, Connector, Frame
from .mock import MockConnection, MockConnector
from .websocket import WebSocketConnection, WebSocketConnector

__all__ = [
    # Protocols
    "Connection",
    "Connector",
    "Frame",
    # WebSocket implementation
    "WebSocketConnection",
    "WebSocketConnector",
    # Mock implementation
    "MockConnection",
    "MockConnector",
]
