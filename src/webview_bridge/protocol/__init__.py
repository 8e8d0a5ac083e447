"""Message schema for the controller channel."""

from .commands import (
    DEFAULT_LOCALE,
    DEFAULT_THEME_ID,
    LIGHT_THEME_ID,
    BridgeCommand,
    CommandType,
    OpenFileCommand,
    OpenFileParams,
    UpdateLocaleCommand,
    UpdateThemeCommand,
    is_command,
    parse_command,
)

__all__ = [
    "BridgeCommand",
    "CommandType",
    "OpenFileCommand",
    "OpenFileParams",
    "UpdateThemeCommand",
    "UpdateLocaleCommand",
    "is_command",
    "parse_command",
    "DEFAULT_LOCALE",
    "DEFAULT_THEME_ID",
    "LIGHT_THEME_ID",
]
