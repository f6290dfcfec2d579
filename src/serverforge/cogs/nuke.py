"""
Nuke Command Cog

Clears the guild back to a minimal baseline behind a confirmation prompt.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

import aiosqlite
import discord
from discord import app_commands
from discord.ext import commands

from ..builder.engine import NukeResult, ServerBuilder
from ..builder.reporting import nuke_result_embed
from ..constants import COLORS
from ..utils import safe_embed

if TYPE_CHECKING:
    from ..bot import ForgeBot

log = logging.getLogger("serverforge.cogs.nuke")


class NukeConfirmationView(discord.ui.View):
    """Confirm/cancel buttons usable only by the invoking user."""

    def __init__(self, author_id: int, timeout: float = 30.0) -> None:
        super().__init__(timeout=timeout)
        self.author_id = author_id
        self.value: Optional[bool] = None

    async def interaction_check(self, interaction: discord.Interaction) -> bool:
        if interaction.user.id != self.author_id:
            await interaction.response.send_message(
                "Only the command user can confirm this action.", ephemeral=True
            )
            return False
        return True

    @discord.ui.button(label="Yes, Nuke Server", style=discord.ButtonStyle.danger)
    async def confirm(self, interaction: discord.Interaction, button: discord.ui.Button) -> None:
        self.value = True
        self.stop()
        await interaction.response.edit_message(
            embed=safe_embed("Nuking Server...", "Please wait while I delete channels and roles...", COLORS["pending"]),
            view=None,
        )

    @discord.ui.button(label="Cancel", style=discord.ButtonStyle.secondary)
    async def cancel(self, interaction: discord.Interaction, button: discord.ui.Button) -> None:
        self.value = False
        self.stop()
        await interaction.response.edit_message(
            embed=safe_embed("Nuke Cancelled", "Server nuke has been cancelled. No changes were made.", COLORS["muted"]),
            view=None,
        )


class NukeCog(commands.Cog):
    """Full server reset."""

    def __init__(self, bot: "ForgeBot") -> None:
        self.bot = bot

    async def _record(self, guild_id: int, actor_id: int, result: NukeResult) -> None:
        try:
            await self.bot.history_store.record(
                guild_id,
                actor_id,
                "nuke",
                result.status.value,
                created=len(result.created_roles),
                deleted=result.channels_deleted + result.roles_deleted,
                errors=len(result.errors),
            )
        except aiosqlite.Error as e:
            log.error("Failed to record nuke run for guild %s: %s", guild_id, e)

    @app_commands.command(
        name="nuke",
        description="Delete all channels and roles except general, then create basic roles",
    )
    @app_commands.guild_only()
    @app_commands.default_permissions(administrator=True)
    @app_commands.checks.has_permissions(administrator=True)
    async def nuke(self, interaction: discord.Interaction) -> None:
        guild = interaction.guild
        if guild is None:
            return

        protected = self.bot.settings.protected_channel_name
        embed = safe_embed(
            "DANGER: Server Nuke",
            "**This action will:**\n\n"
            f"• Delete ALL channels (except #{protected})\n"
            "• Delete ALL categories\n"
            "• Delete ALL custom roles\n"
            "• Create basic roles (Member, Moderator, Admin)\n\n"
            "**This action cannot be undone!**",
            COLORS["error"],
        )
        embed.set_footer(text="Are you absolutely sure?")

        view = NukeConfirmationView(interaction.user.id, timeout=self.bot.settings.nuke_confirm_timeout_seconds)
        await interaction.response.send_message(embed=embed, view=view, ephemeral=True)
        await view.wait()

        if view.value is None:
            try:
                await interaction.edit_original_response(
                    embed=safe_embed(
                        "Confirmation Timeout",
                        "Nuke confirmation timed out. No changes were made.",
                        COLORS["muted"],
                    ),
                    view=None,
                )
            except discord.HTTPException:
                log.debug("Timeout handler: interaction already handled")
            return
        if not view.value:
            return

        builder = ServerBuilder(guild, protected_channel_name=protected)
        result = await builder.nuke_server()
        log.info(
            "/nuke by %s in %s (%s): status=%s channels=%d roles=%d errors=%d",
            interaction.user, guild.name, guild.id, result.status.value,
            result.channels_deleted, result.roles_deleted, len(result.errors),
        )

        await self._record(guild.id, interaction.user.id, result)
        try:
            await interaction.edit_original_response(embed=nuke_result_embed(result), view=None)
        except discord.HTTPException as e:
            log.warning("Failed to send nuke summary: %s", e)


async def setup(bot: commands.Bot) -> None:
    await bot.add_cog(NukeCog(bot))  # type: ignore[arg-type]
