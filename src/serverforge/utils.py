from __future__ import annotations

import logging
from typing import Any

import discord

from .constants import COLORS, MAX_EMBED_DESCRIPTION, MAX_EMBED_TITLE, MAX_FIELD_VALUE

log = logging.getLogger("serverforge.utils")


def truncate_text(text: str, max_length: int = MAX_FIELD_VALUE) -> str:
    """Truncate text to maximum length with ellipsis."""
    if len(text) <= max_length:
        return text
    return text[:max_length - 1] + "…"


def safe_embed(title: str, description: str, color: int = COLORS["default"]) -> discord.Embed:
    """Create an embed with safe length limits."""
    return discord.Embed(
        title=truncate_text(title, MAX_EMBED_TITLE),
        description=truncate_text(description, MAX_EMBED_DESCRIPTION),
        color=color,
        timestamp=discord.utils.utcnow(),
    )


def error_embed(message: str, title: str = "Error") -> discord.Embed:
    return safe_embed(title, message, COLORS["error"])


async def safe_response(
    interaction: discord.Interaction,
    content: str | None = None,
    embed: discord.Embed | None = None,
    ephemeral: bool = True,
    **kwargs: Any,
) -> bool:
    """Respond to an interaction whether or not it has already been answered."""
    if embed is not None:
        kwargs["embed"] = embed
    try:
        if interaction.response.is_done():
            await interaction.followup.send(content=content, ephemeral=ephemeral, **kwargs)
        else:
            await interaction.response.send_message(content=content, ephemeral=ephemeral, **kwargs)
        return True
    except discord.HTTPException as e:
        log.error("Failed to send response: %s", e)
        return False
