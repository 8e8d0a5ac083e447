"""Bridge assembly: one client, one router, the host services."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from .client import MessageCenterClient
from .config import BridgeConfig
from .router import CommandRouter
from .services import (
    ConfigurationService,
    EditorService,
    ThemeService,
    WorkspaceContext,
)
from .session_token import TokenProvider
from .transport.base import Connector

logger = logging.getLogger(__name__)

CHANNEL_NAME = "EXTENSION_EDITOR"


@dataclass
class Bridge:
    """A message center client with the command router attached."""

    client: MessageCenterClient
    router: CommandRouter


def create_bridge(
    *,
    workspace: WorkspaceContext,
    editor: EditorService,
    themes: ThemeService,
    configuration: ConfigurationService,
    config: BridgeConfig | None = None,
    token_provider: TokenProvider | None = None,
    connector: Connector | None = None,
    channel: str = CHANNEL_NAME,
) -> Bridge:
    """Build a client for ``channel`` and attach a router to it.

    Nothing connects until ``run_bridge`` (or ``client.start()``) runs.
    """
    client = MessageCenterClient(
        channel,
        config=config,
        connector=connector,
        token_provider=token_provider,
    )
    router = CommandRouter(workspace, editor, themes, configuration)
    router.attach(client)
    return Bridge(client=client, router=router)


async def run_bridge(
    bridge: Bridge,
    stop: asyncio.Event | None = None,
    ready: asyncio.Event | None = None,
) -> None:
    """Run the bridge until ``stop`` is set or the task is cancelled.

    Args:
        bridge: Bridge from ``create_bridge``
        stop: Set to shut down (default: run until cancelled)
        ready: Host readiness signal, see ``MessageCenterClient.start``
    """
    stop = stop or asyncio.Event()
    client = bridge.client

    logger.info(f"Bridge starting: {client.config.url} (channel={client.channel})")
    client.start(ready)
    try:
        await stop.wait()
    finally:
        await client.stop()
        await bridge.router.wait_idle()
