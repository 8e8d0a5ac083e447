"""Command router - maps controller commands onto host services.

The router is a plain listener on the message center client. It validates
each message against the command schema and runs the matching action as a
task; failures are logged where they happen and never reach the client.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from .protocol.commands import (
    BridgeCommand,
    OpenFileCommand,
    UpdateLocaleCommand,
    UpdateThemeCommand,
    parse_command,
)
from .services import (
    ConfigurationService,
    EditorService,
    ThemeService,
    WorkspaceContext,
)

if TYPE_CHECKING:
    from .client import MessageCenterClient

logger = logging.getLogger(__name__)

LOCALE_SETTING = "locale"


class CommandRouter:
    """Dispatches ``{command, data}`` messages to host actions.

    Usage:
        router = CommandRouter(workspace, editor, themes, settings)
        router.attach(client)

    Unknown commands are ignored. Each recognized command runs as its own
    task on the running loop; ``wait_idle()`` waits for those in flight.
    """

    def __init__(
        self,
        workspace: WorkspaceContext,
        editor: EditorService,
        themes: ThemeService,
        configuration: ConfigurationService,
    ) -> None:
        self._workspace = workspace
        self._editor = editor
        self._themes = themes
        self._configuration = configuration
        self._tasks: set[asyncio.Task[None]] = set()

    def attach(self, client: MessageCenterClient) -> None:
        """Register this router as a listener on the client."""
        client.register_listener(self.dispatch)

    def dispatch(self, message: Any) -> asyncio.Task[None] | None:
        """Start the action for one inbound message.

        Returns:
            The task running the action, or None if nothing was started
        """
        try:
            command = parse_command(message)
        except ValidationError as e:
            logger.error(f"Invalid payload for {message.get('command')}: {e}")
            return None

        if command is None:
            logger.debug(f"Ignoring message: {str(message)[:80]}")
            return None

        task = asyncio.get_running_loop().create_task(self.execute(command))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def execute(self, command: BridgeCommand) -> None:
        """Run the action for an already validated command."""
        logger.debug(f"Handling command: {command.command}")

        match command:
            case OpenFileCommand():
                await self.open_file(command.data.file_path)

            case UpdateThemeCommand():
                await self.change_theme(command.theme_id)

            case UpdateLocaleCommand():
                await self.change_language(command.locale)

    async def wait_idle(self) -> None:
        """Wait for all running actions to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # --- Actions ---

    async def open_file(self, file_path: str) -> None:
        """Open a file relative to the first workspace folder, pinned."""
        folders = self._workspace.folders()
        if not folders:
            logger.error(f"Failed to open {file_path}: no workspace folder")
            return

        resource = _join_relative(folders[0], file_path)
        try:
            await self._editor.open_editor(resource, pinned=True)
        except Exception as e:
            logger.error(f"Failed to open {file_path}: {e}")

    async def change_theme(self, settings_id: str) -> None:
        """Apply the color theme with the given settings id."""
        try:
            themes = await self._themes.get_color_themes()
            theme = next((t for t in themes if t.settings_id == settings_id), None)
            if theme is None:
                logger.error(f"Failed to find theme {settings_id}")
                return
            await self._themes.set_color_theme(theme, "auto")
        except Exception as e:
            logger.error(f"Failed to set theme {settings_id}: {e}")

    async def change_language(self, locale: str) -> None:
        """Persist the display language setting."""
        try:
            await self._configuration.update_value(LOCALE_SETTING, locale)
        except Exception as e:
            logger.error(f"Failed to set locale to {locale}: {e}")


def _join_relative(root: Path, file_path: str) -> Path:
    """Join a controller path onto a root, always treating it as relative."""
    parts = [p for p in PurePosixPath(file_path.replace("\\", "/")).parts if p != "/"]
    return root.joinpath(*parts)
