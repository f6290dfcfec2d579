"""
Build Cog

Slash commands that generate a themed layout and apply it to the guild.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import aiosqlite
import discord
from discord import app_commands
from discord.ext import commands

from ..builder.engine import BuildResult, ServerBuilder
from ..builder.reporting import build_result_embed, structure_preview_embed
from ..constants import COLORS, MAX_THEME_LENGTH
from ..utils import error_embed, safe_embed, safe_response

if TYPE_CHECKING:
    from ..bot import ForgeBot

log = logging.getLogger("serverforge.cogs.build")


async def _edit(interaction: discord.Interaction, embed: discord.Embed) -> None:
    try:
        await interaction.edit_original_response(embed=embed)
    except discord.HTTPException as e:
        log.warning("Failed to update build status message: %s", e)


class BuildCog(commands.Cog):
    """Themed server generation and building."""

    def __init__(self, bot: "ForgeBot") -> None:
        self.bot = bot

    async def _check_cooldown(self, interaction: discord.Interaction) -> bool:
        remaining = self.bot.cooldowns.remaining(interaction.user.id)
        if remaining > 0:
            await safe_response(
                interaction,
                embed=error_embed(f"This command is on cooldown. Try again in {remaining:.0f}s", "Slow Down"),
            )
            return False
        self.bot.cooldowns.touch(interaction.user.id)
        return True

    async def _record(self, guild_id: int, actor_id: int, theme: str, result: BuildResult) -> None:
        try:
            await self.bot.history_store.record(
                guild_id,
                actor_id,
                "build",
                result.status.value,
                theme=theme,
                created=result.created_count,
                errors=len(result.errors),
            )
        except aiosqlite.Error as e:
            log.error("Failed to record build run for guild %s: %s", guild_id, e)

    @app_commands.command(name="build", description="Build a themed Discord server structure")
    @app_commands.describe(theme='Describe your ideal server theme (e.g., "gaming community with tournaments")')
    @app_commands.guild_only()
    @app_commands.default_permissions(manage_channels=True)
    @app_commands.checks.has_permissions(manage_channels=True)
    async def build(
        self,
        interaction: discord.Interaction,
        theme: app_commands.Range[str, 1, MAX_THEME_LENGTH],
    ) -> None:
        guild = interaction.guild
        if guild is None:
            return
        if not await self._check_cooldown(interaction):
            return

        await interaction.response.defer(ephemeral=True, thinking=True)
        await _edit(interaction, safe_embed(
            "Building Server...",
            f"Generating server structure for theme: **{theme}**",
            COLORS["pending"],
        ))

        structure = await self.bot.generator.generate(theme)

        await _edit(interaction, safe_embed(
            "Creating Channels & Roles...",
            f"Creating {len(structure.categories)} categories, {structure.channel_count} channels, "
            f"and {len(structure.roles)} roles",
            COLORS["success"],
        ))

        builder = ServerBuilder(guild, protected_channel_name=self.bot.settings.protected_channel_name)
        result = await builder.build_server(structure)
        log.info(
            "/build by %s in %s (%s): status=%s errors=%d",
            interaction.user, guild.name, guild.id, result.status.value, len(result.errors),
        )

        await self._record(guild.id, interaction.user.id, theme, result)
        await _edit(interaction, build_result_embed(theme, result))

    @app_commands.command(name="preview", description="Preview a themed server structure without building it")
    @app_commands.describe(theme="Describe the server theme to preview")
    @app_commands.guild_only()
    @app_commands.default_permissions(manage_channels=True)
    @app_commands.checks.has_permissions(manage_channels=True)
    async def preview(
        self,
        interaction: discord.Interaction,
        theme: app_commands.Range[str, 1, MAX_THEME_LENGTH],
    ) -> None:
        if not await self._check_cooldown(interaction):
            return

        await interaction.response.defer(ephemeral=True, thinking=True)
        structure = await self.bot.generator.generate(theme)
        await _edit(interaction, structure_preview_embed(theme, structure))

    @app_commands.command(name="history", description="Show recent build and nuke runs in this server")
    @app_commands.guild_only()
    @app_commands.default_permissions(manage_channels=True)
    @app_commands.checks.has_permissions(manage_channels=True)
    async def history(self, interaction: discord.Interaction) -> None:
        guild = interaction.guild
        if guild is None:
            return

        runs = await self.bot.history_store.recent(guild.id, limit=5)
        if not runs:
            await safe_response(interaction, embed=safe_embed("Run History", "No runs recorded yet.", COLORS["muted"]))
            return

        lines = []
        for run in runs:
            label = f"/{run.kind}" + (f" “{run.theme}”" if run.theme else "")
            lines.append(
                f"<t:{run.created_at}:R> {label} by <@{run.actor_id}>: **{run.status}** "
                f"(created {run.created}, deleted {run.deleted}, errors {run.errors})"
            )
        await safe_response(interaction, embed=safe_embed("Run History", "\n".join(lines), COLORS["default"]))


async def setup(bot: commands.Bot) -> None:
    await bot.add_cog(BuildCog(bot))  # type: ignore[arg-type]
