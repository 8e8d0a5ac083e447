"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import asyncio
from collections.abc import Callable

import pytest

from webview_bridge.client import MessageCenterClient
from webview_bridge.config import BridgeConfig
from webview_bridge.transport.mock import MockConnector

CHANNEL = "EXTENSION_EDITOR"


class ScriptedTokenProvider:
    """Hands out tokens from a list, repeating the last one."""

    def __init__(self, *tokens: str | None) -> None:
        self._tokens = list(tokens) or ["secret"]
        self.calls = 0

    async def get_token(self) -> str | None:
        self.calls += 1
        if len(self._tokens) > 1:
            return self._tokens.pop(0)
        return self._tokens[0]


async def _wait_until(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    deadline = asyncio.get_running_loop().time() + timeout
    while not predicate():
        if asyncio.get_running_loop().time() > deadline:
            raise AssertionError("Condition not met before timeout")
        await asyncio.sleep(0.005)


@pytest.fixture
def wait_until():
    """Poll until predicate() is true, failing the test on timeout."""
    return _wait_until


@pytest.fixture
def fast_config() -> BridgeConfig:
    """Config with a short reconnect delay."""
    return BridgeConfig(reconnect_delay=0.02)


@pytest.fixture
def connector() -> MockConnector:
    return MockConnector()


@pytest.fixture
def tokens() -> ScriptedTokenProvider:
    return ScriptedTokenProvider("secret")


@pytest.fixture
def client(
    fast_config: BridgeConfig,
    connector: MockConnector,
    tokens: ScriptedTokenProvider,
) -> MessageCenterClient:
    """Disconnected client on the mock transport."""
    return MessageCenterClient(
        CHANNEL,
        config=fast_config,
        connector=connector,
        token_provider=tokens,
    )


@pytest.fixture
def make_client(fast_config: BridgeConfig, connector: MockConnector):
    """Build a client on the mock transport with scripted tokens."""

    def _make(*token_values: str | None) -> tuple[MessageCenterClient, ScriptedTokenProvider]:
        provider = ScriptedTokenProvider(*token_values)
        client = MessageCenterClient(
            CHANNEL,
            config=fast_config,
            connector=connector,
            token_provider=provider,
        )
        return client, provider

    return _make
