"""Host application services driven by router commands.

The router only talks to the protocols below. The concrete classes are the
local implementations used by the ``webview-bridge`` command; an embedding
application passes its own.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

import click
import yaml

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ColorTheme:
    """A color theme known to the theme service."""

    settings_id: str
    label: str = ""
    kind: str = "dark"  # "dark" | "light" | "hc"


BUILTIN_THEMES: tuple[ColorTheme, ...] = (
    ColorTheme("Default Dark+", "Dark+", "dark"),
    ColorTheme("Default Light+", "Light+", "light"),
    ColorTheme("Visual Studio Dark", "Dark (Visual Studio)", "dark"),
    ColorTheme("Visual Studio Light", "Light (Visual Studio)", "light"),
    ColorTheme("Default High Contrast", "Dark High Contrast", "hc"),
)


# =============================================================================
# Protocols
# =============================================================================


@runtime_checkable
class WorkspaceContext(Protocol):
    def folders(self) -> list[Path]:
        """Workspace root folders, first one is the primary root."""
        ...


@runtime_checkable
class EditorService(Protocol):
    async def open_editor(self, resource: Path, *, pinned: bool = False) -> None:
        """Open a file in an editor tab."""
        ...


@runtime_checkable
class ThemeService(Protocol):
    async def get_color_themes(self) -> list[ColorTheme]: ...

    async def set_color_theme(self, theme: ColorTheme, target: str = "auto") -> None: ...


@runtime_checkable
class ConfigurationService(Protocol):
    async def update_value(self, key: str, value: Any) -> None:
        """Persist a user setting."""
        ...


# =============================================================================
# Local implementations
# =============================================================================


class LocalWorkspace:
    """Workspace backed by directories on the local filesystem."""

    def __init__(self, folders: Iterable[Path | str]) -> None:
        self._folders = [Path(f).resolve() for f in folders]

    def folders(self) -> list[Path]:
        return list(self._folders)


class LaunchingEditorService:
    """Opens files with the operating system's default application."""

    def __init__(self) -> None:
        self.opened: list[Path] = []

    async def open_editor(self, resource: Path, *, pinned: bool = False) -> None:
        if not resource.is_file():
            raise FileNotFoundError(f"No such file: {resource}")

        await asyncio.to_thread(click.launch, str(resource))
        self.opened.append(resource)
        logger.info(f"Opened {resource}{' (pinned)' if pinned else ''}")


class InMemoryThemeService:
    """Theme registry holding the built-in themes and the active one."""

    def __init__(
        self,
        themes: Iterable[ColorTheme] = BUILTIN_THEMES,
        current: str = "Default Dark+",
    ) -> None:
        self._themes = list(themes)
        self.current: ColorTheme | None = next(
            (t for t in self._themes if t.settings_id == current), None
        )

    async def get_color_themes(self) -> list[ColorTheme]:
        return list(self._themes)

    async def set_color_theme(self, theme: ColorTheme, target: str = "auto") -> None:
        self.current = theme
        logger.info(f"Color theme set to {theme.settings_id} (target={target})")


class YamlSettingsService:
    """User settings kept in memory, optionally persisted to a YAML file."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = path
        self.values: dict[str, Any] = {}

        if path is not None and path.exists():
            try:
                with open(path, encoding="utf-8") as f:
                    loaded = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ValueError(f"Settings file {path} is not valid YAML: {e}") from e
            if not isinstance(loaded, dict):
                raise ValueError(f"Settings file {path} must contain a mapping")
            self.values.update(loaded)

    def get(self, key: str, default: Any = None) -> Any:
        return self.values.get(key, default)

    async def update_value(self, key: str, value: Any) -> None:
        self.values[key] = value
        if self.path is not None:
            await asyncio.to_thread(self._write, self.path)
        logger.info(f"Setting {key!r} updated to {value!r}")

    def _write(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            yaml.safe_dump(self.values, f, sort_keys=True)
