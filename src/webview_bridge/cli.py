"""webview-bridge CLI.

Connects to the controller and applies its commands to a local workspace.

Usage:
    webview-bridge                                # prompt for the token
    webview-bridge --token abc123                 # non-interactive token
    webview-bridge --workspace ~/project          # workspace root for openFile
    webview-bridge --settings ~/.bridge.yaml      # persist updateLocale
    webview-bridge --user-agent "Host port/9980"  # port from a user agent

The controller port comes from $WEBVIEW_BRIDGE_USER_AGENT (``port/<n>``)
unless --user-agent or --port is given.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import signal
import sys
from pathlib import Path

import click

from .app import CHANNEL_NAME, Bridge, create_bridge, run_bridge
from .config import USER_AGENT_ENV, BridgeConfig, parse_port
from .services import (
    InMemoryThemeService,
    LaunchingEditorService,
    LocalWorkspace,
    YamlSettingsService,
)
from .session_token import PromptTokenProvider, StaticTokenProvider

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str) -> None:
    """Send all logging to stderr at the given level."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format=LOG_FORMAT,
        stream=sys.stderr,
    )


def build_config(
    user_agent: str | None,
    host: str | None,
    port: int | None,
    reconnect_delay: float | None,
) -> BridgeConfig:
    """Resolve the endpoint from CLI options over the environment."""
    if user_agent is not None and port is None:
        port = parse_port(user_agent)
    return BridgeConfig.from_env(host=host, port=port, reconnect_delay=reconnect_delay)


@click.command()
@click.option("--host", default=None, help="Controller host (default: 127.0.0.1)")
@click.option("--port", type=click.IntRange(1, 65535), default=None, help="Controller port")
@click.option(
    "--user-agent",
    default=None,
    help=f"User agent string carrying port/<n> (default: ${USER_AGENT_ENV})",
)
@click.option("--channel", default=CHANNEL_NAME, show_default=True, help="Channel name")
@click.option("--token", default=None, help="Session token (prompted when omitted)")
@click.option(
    "--workspace",
    "workspaces",
    multiple=True,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Workspace root folder (repeatable, first one is used for openFile)",
)
@click.option(
    "--settings",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="YAML file persisting settings such as the locale",
)
@click.option(
    "--reconnect-delay",
    type=click.FloatRange(min=0),
    default=None,
    help="Seconds between reconnect attempts (default: 1.0)",
)
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default="info",
    show_default=True,
)
def main(
    host: str | None,
    port: int | None,
    user_agent: str | None,
    channel: str,
    token: str | None,
    workspaces: tuple[Path, ...],
    settings: Path | None,
    reconnect_delay: float | None,
    log_level: str,
) -> None:
    """Bridge controller commands into the local host application."""
    configure_logging(log_level)

    try:
        configuration = YamlSettingsService(settings)
    except (OSError, ValueError) as e:
        raise click.UsageError(f"Cannot load settings: {e}") from e

    bridge = create_bridge(
        workspace=LocalWorkspace(workspaces or [Path.cwd()]),
        editor=LaunchingEditorService(),
        themes=InMemoryThemeService(),
        configuration=configuration,
        config=build_config(user_agent, host, port, reconnect_delay),
        token_provider=StaticTokenProvider(token) if token is not None else PromptTokenProvider(),
        channel=channel,
    )

    asyncio.run(_serve(bridge))


async def _serve(bridge: Bridge) -> None:
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        # add_signal_handler is unavailable on Windows; Ctrl+C still cancels
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(sig, stop.set)

    await run_bridge(bridge, stop)


if __name__ == "__main__":
    main()
