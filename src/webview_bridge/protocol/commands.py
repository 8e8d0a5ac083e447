"""Command envelopes sent by the controller.

Every inbound message the router acts on has the shape:

    {"command": "<name>", "data": <payload>}

The known commands form a tagged union on ``command``. Anything else is not
a command for this bridge and is ignored by the router.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

# Theme identifiers (ColorTheme.settings_id)
LIGHT_THEME_KEY = "theme-2"
LIGHT_THEME_ID = "Visual Studio Light"
DEFAULT_THEME_ID = "Default Dark+"

# Locale codes
SUPPORTED_LOCALE = "zh-CN"
DEFAULT_LOCALE = "en"


class CommandType(str, Enum):
    """All supported command names."""

    OPEN_FILE = "openFile"
    UPDATE_THEME = "updateTheme"
    UPDATE_LOCALE = "updateLocale"


class OpenFileParams(BaseModel):
    """Payload of ``openFile``."""

    model_config = ConfigDict(populate_by_name=True)

    file_path: str = Field(alias="filePath")


class OpenFileCommand(BaseModel):
    """Open a workspace-relative file as a pinned editor tab."""

    command: Literal["openFile"]
    data: OpenFileParams


class UpdateThemeCommand(BaseModel):
    """Switch the color theme.

    Only ``"theme-2"`` selects the light theme; any other payload selects
    the default dark theme.
    """

    command: Literal["updateTheme"]
    data: Any = None

    @property
    def theme_id(self) -> str:
        return LIGHT_THEME_ID if self.data == LIGHT_THEME_KEY else DEFAULT_THEME_ID


class UpdateLocaleCommand(BaseModel):
    """Change the display language, persisted as the ``locale`` setting."""

    command: Literal["updateLocale"]
    data: Any = None

    @property
    def locale(self) -> str:
        return SUPPORTED_LOCALE if self.data == SUPPORTED_LOCALE else DEFAULT_LOCALE


BridgeCommand = Annotated[
    OpenFileCommand | UpdateThemeCommand | UpdateLocaleCommand,
    Field(discriminator="command"),
]

_command_adapter: TypeAdapter[BridgeCommand] = TypeAdapter(BridgeCommand)

KNOWN_COMMANDS = frozenset(c.value for c in CommandType)


def is_command(message: Any) -> bool:
    """True if the message names one of the known commands."""
    if not isinstance(message, dict):
        return False
    command = message.get("command")
    return isinstance(command, str) and command in KNOWN_COMMANDS


def parse_command(message: Any) -> BridgeCommand | None:
    """Validate an inbound message against the command schema.

    Returns:
        The typed command, or None if the message is not a known command

    Raises:
        pydantic.ValidationError: If a known command has an invalid payload
    """
    if not is_command(message):
        return None
    return _command_adapter.validate_python(message)
