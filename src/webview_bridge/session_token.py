"""Session token providers.

A token is requested once per connection attempt and never cached by the
client. ``None`` means the token is unavailable (the user cancelled), which
ends that attempt without a retry.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Protocol, runtime_checkable

import click

logger = logging.getLogger(__name__)

TOKEN_PROMPT = "GET_MESSAGE_TOKEN"


@runtime_checkable
class TokenProvider(Protocol):
    async def get_token(self) -> str | None:
        """Return a session token, or None if none can be obtained."""
        ...


class PromptTokenProvider:
    """Ask the user for a token on the terminal.

    The prompt blocks on stdin, so it runs in a daemon thread: the event
    loop stays responsive, and a process shutting down mid-prompt does not
    wait for the user.
    """

    def __init__(self, prompt: str = TOKEN_PROMPT, hide_input: bool = True) -> None:
        self.prompt = prompt
        self.hide_input = hide_input

    async def get_token(self) -> str | None:
        loop = asyncio.get_running_loop()
        future: asyncio.Future[str | None] = loop.create_future()

        def _run() -> None:
            try:
                result = self._ask()
            except Exception as e:
                loop.call_soon_threadsafe(_set_exception, future, e)
            else:
                loop.call_soon_threadsafe(_set_result, future, result)

        threading.Thread(target=_run, name="token-prompt", daemon=True).start()
        return await future

    def _ask(self) -> str | None:
        try:
            return click.prompt(self.prompt, hide_input=self.hide_input, err=True)
        except (click.Abort, EOFError):
            logger.debug("Token prompt cancelled")
            return None


class StaticTokenProvider:
    """Always hand out the same token (``--token`` on the command line)."""

    def __init__(self, token: str | None) -> None:
        self._token = token

    async def get_token(self) -> str | None:
        return self._token


def _set_result(future: asyncio.Future[str | None], result: str | None) -> None:
    if not future.done():
        future.set_result(result)


def _set_exception(future: asyncio.Future[str | None], error: Exception) -> None:
    if not future.done():
        future.set_exception(error)
