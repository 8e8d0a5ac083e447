"""Tests for session token providers."""

from __future__ import annotations

import click
import pytest

from webview_bridge.session_token import (
    TOKEN_PROMPT,
    PromptTokenProvider,
    StaticTokenProvider,
    TokenProvider,
)


class TestPromptTokenProvider:
    """Tests for the interactive prompt."""

    @pytest.mark.asyncio
    async def test_returns_entered_token(self, monkeypatch) -> None:
        calls: list[tuple[str, dict]] = []

        def fake_prompt(text: str, **kwargs) -> str:
            calls.append((text, kwargs))
            return "abc123"

        monkeypatch.setattr(click, "prompt", fake_prompt)

        token = await PromptTokenProvider().get_token()

        assert token == "abc123"
        assert calls == [(TOKEN_PROMPT, {"hide_input": True, "err": True})]

    @pytest.mark.asyncio
    async def test_prompt_text(self, monkeypatch) -> None:
        seen: list[str] = []
        monkeypatch.setattr(click, "prompt", lambda text, **kw: seen.append(text) or "t")

        await PromptTokenProvider(prompt="Token?", hide_input=False).get_token()

        assert seen == ["Token?"]
        assert TOKEN_PROMPT == "GET_MESSAGE_TOKEN"

    @pytest.mark.asyncio
    async def test_cancelled_prompt_returns_none(self, monkeypatch) -> None:
        def cancel(text: str, **kwargs) -> str:
            raise click.Abort()

        monkeypatch.setattr(click, "prompt", cancel)

        assert await PromptTokenProvider().get_token() is None

    @pytest.mark.asyncio
    async def test_closed_stdin_returns_none(self, monkeypatch) -> None:
        def eof(text: str, **kwargs) -> str:
            raise EOFError()

        monkeypatch.setattr(click, "prompt", eof)

        assert await PromptTokenProvider().get_token() is None

    @pytest.mark.asyncio
    async def test_unexpected_error_propagates(self, monkeypatch) -> None:
        def broken(text: str, **kwargs) -> str:
            raise RuntimeError("no tty")

        monkeypatch.setattr(click, "prompt", broken)

        with pytest.raises(RuntimeError, match="no tty"):
            await PromptTokenProvider().get_token()

    def test_satisfies_protocol(self) -> None:
        assert isinstance(PromptTokenProvider(), TokenProvider)


class TestStaticTokenProvider:
    @pytest.mark.asyncio
    async def test_returns_token(self) -> None:
        provider = StaticTokenProvider("fixed")

        assert await provider.get_token() == "fixed"
        assert await provider.get_token() == "fixed"

    @pytest.mark.asyncio
    async def test_empty_token_is_a_token(self) -> None:
        assert await StaticTokenProvider("").get_token() == ""

    @pytest.mark.asyncio
    async def test_none(self) -> None:
        assert await StaticTokenProvider(None).get_token() is None

    def test_satisfies_protocol(self) -> None:
        assert isinstance(StaticTokenProvider("x"), TokenProvider)
