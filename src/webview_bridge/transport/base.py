"""Transport abstraction for the message center client.

The client only needs three things from a transport:
- open a connection to a URL, negotiating one subprotocol value
- push text frames without waiting
- iterate inbound frames until the peer goes away

Implementations handle the wire details (``websocket.py``) or keep
everything in memory (``mock.py``).
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Protocol, runtime_checkable

Frame = str | bytes


@runtime_checkable
class Connection(Protocol):
    """A live, already-open transport connection."""

    def send(self, text: str) -> None:
        """Queue a text frame for transmission. Must not block."""
        ...

    def __aiter__(self) -> AsyncIterator[Frame]:
        """Yield inbound frames in arrival order.

        Iteration ends on a clean close; transport errors are raised.
        """
        ...

    async def close(self) -> None:
        """Close the connection."""
        ...


@runtime_checkable
class Connector(Protocol):
    """Factory for connections to a single endpoint."""

    async def open(self, url: str, subprotocol: str) -> Connection:
        """Open a connection.

        Args:
            url: Endpoint URL (``ws://host:port``)
            subprotocol: Value offered in the subprotocol negotiation

        Raises:
            OSError: If the endpoint is unreachable
            Exception: Any other handshake failure
        """
        ...
