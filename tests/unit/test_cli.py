"""Tests for the webview-bridge command line."""

from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner

from webview_bridge import cli
from webview_bridge.app import Bridge
from webview_bridge.config import USER_AGENT_ENV
from webview_bridge.services import LocalWorkspace, YamlSettingsService
from webview_bridge.session_token import PromptTokenProvider, StaticTokenProvider


@pytest.fixture
def served(monkeypatch) -> list[Bridge]:
    """Capture the bridge main() would run instead of connecting."""
    bridges: list[Bridge] = []

    async def fake_serve(bridge: Bridge) -> None:
        bridges.append(bridge)

    monkeypatch.setattr(cli, "_serve", fake_serve)
    monkeypatch.setattr(cli, "configure_logging", lambda level: None)
    return bridges


class TestBuildConfig:
    """Tests for resolving the endpoint from options and environment."""

    def test_defaults(self, monkeypatch) -> None:
        monkeypatch.delenv(USER_AGENT_ENV, raising=False)

        config = cli.build_config(None, None, None, None)

        assert config.url == "ws://127.0.0.1:9974"
        assert config.reconnect_delay == 1.0

    def test_environment(self, monkeypatch) -> None:
        monkeypatch.setenv(USER_AGENT_ENV, "Host port/9000")

        assert cli.build_config(None, None, None, None).port == 9000

    def test_user_agent_option_beats_environment(self, monkeypatch) -> None:
        monkeypatch.setenv(USER_AGENT_ENV, "Host port/9000")

        assert cli.build_config("Other port/9100", None, None, None).port == 9100

    def test_port_option_beats_user_agent(self, monkeypatch) -> None:
        monkeypatch.delenv(USER_AGENT_ENV, raising=False)

        config = cli.build_config("Other port/9100", "localhost", 9200, 0.25)

        assert config.url == "ws://localhost:9200"
        assert config.reconnect_delay == 0.25


class TestMain:
    """Tests for the click command."""

    def test_help(self) -> None:
        result = CliRunner().invoke(cli.main, ["--help"])

        assert result.exit_code == 0
        assert "--user-agent" in result.output
        assert "--workspace" in result.output

    def test_builds_bridge(self, served, tmp_path: Path, monkeypatch) -> None:
        monkeypatch.delenv(USER_AGENT_ENV, raising=False)

        result = CliRunner().invoke(
            cli.main,
            ["--token", "abc", "--workspace", str(tmp_path), "--port", "9300"],
        )

        assert result.exit_code == 0, result.output
        [bridge] = served
        assert bridge.client.channel == "EXTENSION_EDITOR"
        assert bridge.client.config.url == "ws://127.0.0.1:9300"
        assert isinstance(bridge.client._token_provider, StaticTokenProvider)
        assert isinstance(bridge.router._workspace, LocalWorkspace)
        assert bridge.router._workspace.folders() == [tmp_path.resolve()]

    def test_prompts_without_token(self, served) -> None:
        result = CliRunner().invoke(cli.main, ["--channel", "OTHER"])

        assert result.exit_code == 0, result.output
        [bridge] = served
        assert bridge.client.channel == "OTHER"
        assert isinstance(bridge.client._token_provider, PromptTokenProvider)

    def test_settings_file(self, served, tmp_path: Path) -> None:
        path = tmp_path / "settings.yaml"
        path.write_text("locale: zh-CN\n", encoding="utf-8")

        result = CliRunner().invoke(cli.main, ["--token", "t", "--settings", str(path)])

        assert result.exit_code == 0, result.output
        configuration = served[0].router._configuration
        assert isinstance(configuration, YamlSettingsService)
        assert configuration.get("locale") == "zh-CN"

    def test_invalid_settings_file(self, served, tmp_path: Path) -> None:
        path = tmp_path / "settings.yaml"
        path.write_text("[1, 2]\n", encoding="utf-8")

        result = CliRunner().invoke(cli.main, ["--token", "t", "--settings", str(path)])

        assert result.exit_code == 2
        assert "Cannot load settings" in result.output
        assert served == []

    def test_rejects_bad_port(self, served) -> None:
        result = CliRunner().invoke(cli.main, ["--port", "70000"])

        assert result.exit_code == 2
        assert served == []
