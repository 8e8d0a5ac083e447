"""Reconnecting message center client.

Keeps one logical connection to the controller endpoint, re-establishes it
after loss, buffers messages sent while disconnected, and fans inbound
messages out to registered listeners.

State machine:

    IDLE -> HANDSHAKE -> OPEN -> CLOSED -> (HANDSHAKE after delay) ...

- HANDSHAKE asks the token provider for a session token, then opens the
  connection with subprotocol ``"<channel>#<token>#"``.
- A missing token returns to IDLE and schedules nothing.
- Any close or open failure lands in CLOSED and schedules exactly one new
  attempt after ``reconnect_delay``. Retries never stop on their own.
- ``stop()`` moves to the terminal STOPPED state.

All transitions run on the event loop that called ``start()``/``connect()``;
``send`` and ``register_listener`` are plain synchronous calls on the same
loop, so the connection, queue and listener list need no locking.
"""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
from collections.abc import Callable
from enum import Enum
from typing import Any

from .config import BridgeConfig
from .session_token import PromptTokenProvider, TokenProvider
from .transport.base import Connection, Connector, Frame
from .transport.websocket import WebSocketConnector

logger = logging.getLogger(__name__)

Listener = Callable[[Any], Any]


class TransportState(str, Enum):
    """Connection state machine."""

    IDLE = "idle"
    HANDSHAKE = "handshake"
    OPEN = "open"
    CLOSED = "closed"
    STOPPED = "stopped"


class MessageCenterClient:
    """Client side of the controller message channel.

    Usage:
        client = MessageCenterClient("EXTENSION_EDITOR")
        client.register_listener(handle_message)
        client.start()  # first attempt on the next loop iteration

        client.send({"command": "ready"})  # queued until the channel is open

    Or as an async context manager, which stops the client on exit:
        async with MessageCenterClient("EXTENSION_EDITOR") as client:
            ...
    """

    def __init__(
        self,
        channel: str,
        *,
        config: BridgeConfig | None = None,
        connector: Connector | None = None,
        token_provider: TokenProvider | None = None,
    ) -> None:
        self._channel = channel
        self.config = config or BridgeConfig.from_env()
        self._connector = connector or WebSocketConnector(
            open_timeout=self.config.open_timeout,
            ping_interval=self.config.ping_interval,
            ping_timeout=self.config.ping_timeout,
        )
        self._token_provider = token_provider or PromptTokenProvider()

        self._state = TransportState.IDLE
        self._connection: Connection | None = None
        self._queue: list[Any] = []
        self._listeners: list[Listener] = []

        self._reader_task: asyncio.Task[None] | None = None
        self._attempt_task: asyncio.Task[None] | None = None
        self._ready_task: asyncio.Task[None] | None = None
        self._reconnect_handle: asyncio.Handle | None = None

    # --- Introspection ---

    @property
    def channel(self) -> str:
        return self._channel

    @property
    def state(self) -> TransportState:
        """Current connection state."""
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._state == TransportState.OPEN

    @property
    def pending_messages(self) -> list[Any]:
        """Messages waiting for the connection to open (copy)."""
        return list(self._queue)

    def subprotocol_for(self, token: str) -> str:
        """Handshake subprotocol carrying channel and token in-band."""
        return f"{self._channel}#{token}#"

    # --- Lifecycle ---

    def start(self, ready: asyncio.Event | None = None) -> None:
        """Schedule the first connection attempt.

        Args:
            ready: Set by the host once it has finished starting up. When
                omitted or already set, the attempt runs on the next loop
                iteration.

        Ignored unless the client is idle with no first attempt pending.
        """
        if self._state != TransportState.IDLE:
            logger.debug(f"start() ignored in state {self._state.value}")
            return
        if self._ready_task is not None or self._reconnect_handle is not None:
            logger.debug("start() ignored, first attempt already scheduled")
            return

        if ready is None or ready.is_set():
            self._reconnect_handle = asyncio.get_running_loop().call_soon(self._begin_attempt)
        else:
            self._ready_task = asyncio.create_task(self._connect_when_ready(ready))

    async def connect(self) -> None:
        """Run one connection attempt.

        Returns once the connection is open, the attempt failed (a retry is
        then scheduled), or no token was available (nothing is scheduled).
        """
        if self._state in (TransportState.HANDSHAKE, TransportState.OPEN):
            logger.debug(f"connect() ignored in state {self._state.value}")
            return
        if self._state == TransportState.STOPPED:
            return

        self._cancel_reconnect()
        self._state = TransportState.HANDSHAKE

        try:
            token = await self._token_provider.get_token()
        except Exception as e:
            logger.error(f"Token prompt failed: {e}")
            token = None

        if self._state != TransportState.HANDSHAKE:
            return
        if token is None:
            logger.error("Failed to get message token.")
            self._state = TransportState.IDLE
            return

        url = self.config.url
        try:
            connection = await self._connector.open(url, self.subprotocol_for(token))
        except Exception as e:
            logger.warning(f"Failed to connect to {url}: {e}")
            self._handle_closed(None)
            return

        if self._state != TransportState.HANDSHAKE:
            # Stopped while the handshake was in progress
            await connection.close()
            return

        self._handle_open(connection)
        self._reader_task = asyncio.create_task(self._read_loop(connection))

    async def stop(self) -> None:
        """Stop the client for good.

        Cancels a pending reconnect and any attempt in progress, and closes
        the open connection. Queued messages stay queued.
        """
        if self._state == TransportState.STOPPED:
            return

        self._state = TransportState.STOPPED
        self._cancel_reconnect()
        connection, self._connection = self._connection, None

        current = asyncio.current_task()
        for task in (self._ready_task, self._attempt_task, self._reader_task):
            if task is not None and task is not current and not task.done():
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task
        self._ready_task = self._attempt_task = self._reader_task = None

        if connection is not None:
            await self._close_connection(connection)

        logger.info(f"Message center client stopped (channel={self._channel})")

    # --- Messaging ---

    def send(self, message: Any) -> None:
        """Send a message now, or queue it until the connection opens.

        Never raises and never blocks.
        """
        if self._state == TransportState.OPEN and self._connection is not None:
            try:
                text = json.dumps(message, allow_nan=False)
            except (TypeError, ValueError) as e:
                logger.error(f"Dropping message that cannot be serialized: {e}")
                return
            self._connection.send(text)
        else:
            self._queue.append(message)

    def register_listener(self, callback: Listener) -> None:
        """Add a callback that receives every parsed inbound message."""
        if not callable(callback):
            logger.warning(f"Ignoring non-callable listener: {callback!r}")
            return
        self._listeners.append(callback)

    # --- State transitions ---

    def _handle_open(self, connection: Connection) -> None:
        self._connection = connection
        self._state = TransportState.OPEN
        logger.info(f"Connected to {self.config.url} (channel={self._channel})")

        queued, self._queue = self._queue, []
        if queued:
            logger.debug(f"Replaying {len(queued)} queued message(s)")
        for message in queued:
            self.send(message)

    def _handle_frame(self, frame: Frame) -> None:
        try:
            text = frame.decode("utf-8") if isinstance(frame, bytes) else frame
            message = json.loads(text)
        except (UnicodeDecodeError, ValueError, RecursionError) as e:
            logger.error(f"Failed to parse message: {e}")
            return

        for listener in list(self._listeners):
            try:
                listener(message)
            except Exception:
                logger.exception("Error in message listener")

    def _handle_closed(self, connection: Connection | None) -> None:
        if connection is not None and connection is not self._connection:
            return

        self._connection = None
        self._reader_task = None
        if self._state == TransportState.STOPPED:
            return

        self._state = TransportState.CLOSED
        self._schedule_reconnect()

    # --- Internal tasks ---

    async def _read_loop(self, connection: Connection) -> None:
        try:
            async for frame in connection:
                self._handle_frame(frame)
            logger.info(f"Connection to {self.config.url} closed")
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.warning(f"Connection to {self.config.url} lost: {e}")
        finally:
            current = connection is self._connection
            self._handle_closed(connection)
            if current:
                await self._close_connection(connection)

    async def _close_connection(self, connection: Connection) -> None:
        try:
            await connection.close()
        except Exception as e:
            logger.debug(f"Error closing connection: {e}")

    async def _connect_when_ready(self, ready: asyncio.Event) -> None:
        await ready.wait()
        self._ready_task = None
        self._begin_attempt()

    def _begin_attempt(self) -> None:
        self._reconnect_handle = None
        if self._state == TransportState.STOPPED:
            return
        self._attempt_task = asyncio.create_task(self.connect())

    def _schedule_reconnect(self) -> None:
        self._cancel_reconnect()
        delay = self.config.reconnect_delay
        logger.info(f"Reconnecting in {delay:g}s")
        self._reconnect_handle = asyncio.get_running_loop().call_later(
            delay, self._begin_attempt
        )

    def _cancel_reconnect(self) -> None:
        if self._reconnect_handle is not None:
            self._reconnect_handle.cancel()
            self._reconnect_handle = None

    async def __aenter__(self) -> MessageCenterClient:
        self.start()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.stop()
