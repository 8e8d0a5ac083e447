"""WebSocket transport built on the ``websockets`` package.

Outgoing frames go through a per-connection outbox drained by a single
sender task, so ``send`` stays synchronous and frames leave in call order.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator
from typing import Any

import websockets
from websockets.exceptions import ConnectionClosed
from websockets.typing import Subprotocol

from .base import Frame

logger = logging.getLogger(__name__)


class WebSocketConnection:
    """Wraps an open ``websockets`` client connection."""

    def __init__(self, websocket: Any) -> None:
        self._websocket = websocket
        self._outbox: asyncio.Queue[str] = asyncio.Queue()
        self._sender_task = asyncio.create_task(self._sender())

    @property
    def subprotocol(self) -> str | None:
        """Subprotocol selected by the server, if any."""
        return self._websocket.subprotocol

    def send(self, text: str) -> None:
        self._outbox.put_nowait(text)

    async def __aiter__(self) -> AsyncIterator[Frame]:
        try:
            async for frame in self._websocket:
                yield frame
        finally:
            self._sender_task.cancel()

    async def close(self) -> None:
        self._sender_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._sender_task
        await self._websocket.close()

    async def _sender(self) -> None:
        while True:
            text = await self._outbox.get()
            try:
                await self._websocket.send(text)
            except ConnectionClosed as e:
                # The reader sees the same close and drives the reconnect
                logger.debug(f"Send stopped, connection closed: {e}")
                return


class WebSocketConnector:
    """Opens WebSocket connections with a single offered subprotocol."""

    def __init__(
        self,
        open_timeout: float | None = 10.0,
        ping_interval: float | None = 30.0,
        ping_timeout: float | None = 10.0,
    ) -> None:
        self.open_timeout = open_timeout
        self.ping_interval = ping_interval
        self.ping_timeout = ping_timeout

    async def open(self, url: str, subprotocol: str) -> WebSocketConnection:
        websocket = await websockets.connect(
            url,
            subprotocols=[Subprotocol(subprotocol)],
            open_timeout=self.open_timeout,
            ping_interval=self.ping_interval,
            ping_timeout=self.ping_timeout,
        )
        logger.debug(f"WebSocket handshake complete: {url}")
        return WebSocketConnection(websocket)
