from __future__ import annotations

import logging

import discord
from discord import app_commands
from discord.ext import commands

from .constants import ERROR_MESSAGES
from .utils import error_embed, safe_response

log = logging.getLogger("serverforge.error_handlers")


class ErrorHandler:
    """Centralized slash command error handling."""

    def __init__(self, bot: commands.Bot) -> None:
        self.bot = bot

    async def on_app_command_error(
        self,
        interaction: discord.Interaction,
        error: app_commands.AppCommandError,
    ) -> None:
        if isinstance(error, app_commands.MissingPermissions):
            await safe_response(interaction, embed=error_embed(ERROR_MESSAGES["missing_permissions"], "Permission Denied"))
            return

        if isinstance(error, app_commands.BotMissingPermissions):
            await safe_response(interaction, embed=error_embed(ERROR_MESSAGES["bot_missing_permissions"]))
            return

        if isinstance(error, app_commands.CommandOnCooldown):
            await safe_response(
                interaction,
                embed=error_embed(f"This command is on cooldown. Try again in {error.retry_after:.1f}s"),
            )
            return

        if isinstance(error, app_commands.NoPrivateMessage):
            await safe_response(interaction, embed=error_embed(ERROR_MESSAGES["guild_only"]))
            return

        if isinstance(error, app_commands.CheckFailure):
            await safe_response(interaction, embed=error_embed(str(error) or ERROR_MESSAGES["missing_permissions"]))
            return

        command_name = interaction.command.name if interaction.command else "unknown"
        log.exception("Error executing command /%s", command_name, exc_info=error)
        await safe_response(interaction, embed=error_embed(ERROR_MESSAGES["unexpected"]))


async def setup_error_handlers(bot: commands.Bot) -> None:
    handler = ErrorHandler(bot)
    bot.tree.on_error = handler.on_app_command_error
