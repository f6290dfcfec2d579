from __future__ import annotations

from typing import Final

# Discord limits
MAX_EMBED_DESCRIPTION: Final[int] = 4096
MAX_EMBED_TITLE: Final[int] = 256
MAX_FIELD_VALUE: Final[int] = 1024
MAX_NAME_LENGTH: Final[int] = 100
MAX_THEME_LENGTH: Final[int] = 300

DEFAULT_ROLE_COLOR: Final[str] = "#99AAB5"

# Colors (hex values)
COLORS = {
    "default": 0x5865F2,
    "success": 0x00FF00,
    "warning": 0xFFA500,
    "pending": 0xFFFF00,
    "error": 0xFF0000,
    "muted": 0x95A5A6,
}

ERROR_MESSAGES = {
    "missing_permissions": "You don't have permission to use this command.",
    "bot_missing_permissions": "The bot lacks required permissions to run this command.",
    "guild_only": "This command can only be used in a server.",
    "unexpected": "There was an error while executing this command!",
}
