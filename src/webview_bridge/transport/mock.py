"""In-memory transport for testing.

No actual I/O - frames are recorded and injected through plain method
calls.

Usage:
    connector = MockConnector()
    client = MessageCenterClient("EXTENSION_EDITOR", connector=connector, ...)
    await client.connect()

    connection = connector.latest
    connection.feed('{"command": "updateTheme", "data": "theme-2"}')
    connection.drop()  # simulate the controller going away

    assert connection.sent == ['{"a": 1}']
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import AsyncIterator

from .base import Frame

_CLOSE = object()


class MockConnection:
    """Connection double that records sent frames."""

    def __init__(self, url: str, subprotocol: str) -> None:
        self.url = url
        self.subprotocol = subprotocol
        self.sent: list[str] = []
        self.closed = False
        self._inbound: asyncio.Queue[object] = asyncio.Queue()

    @property
    def sent_messages(self) -> list[object]:
        """Sent frames decoded from JSON."""
        return [json.loads(text) for text in self.sent]

    def send(self, text: str) -> None:
        self.sent.append(text)

    def feed(self, frame: Frame) -> None:
        """Deliver an inbound frame to the reader."""
        self._inbound.put_nowait(frame)

    def drop(self) -> None:
        """End the inbound stream as a clean close would."""
        self._inbound.put_nowait(_CLOSE)

    def fail(self, error: BaseException) -> None:
        """End the inbound stream with a transport error."""
        self._inbound.put_nowait(error)

    async def __aiter__(self) -> AsyncIterator[Frame]:
        while True:
            item = await self._inbound.get()
            if item is _CLOSE:
                self.closed = True
                return
            if isinstance(item, BaseException):
                raise item
            yield item  # type: ignore[misc]

    async def close(self) -> None:
        self.closed = True
        self._inbound.put_nowait(_CLOSE)


class MockConnector:
    """Connector double that hands out ``MockConnection`` objects."""

    def __init__(self) -> None:
        self.attempts: list[tuple[str, str]] = []
        self.connections: list[MockConnection] = []
        self._failures: list[BaseException] = []

    @property
    def latest(self) -> MockConnection:
        """Most recently opened connection."""
        if not self.connections:
            raise LookupError("No connection has been opened")
        return self.connections[-1]

    def fail_next(self, count: int = 1, error: BaseException | None = None) -> None:
        """Make the next ``count`` open attempts raise."""
        for _ in range(count):
            self._failures.append(error or ConnectionRefusedError("Connection refused"))

    async def open(self, url: str, subprotocol: str) -> MockConnection:
        self.attempts.append((url, subprotocol))
        if self._failures:
            raise self._failures.pop(0)

        connection = MockConnection(url, subprotocol)
        self.connections.append(connection)
        return connection
