"""
Result Reporting

Renders build/nuke results and structure previews as embeds that respect
Discord's length limits.
"""

from __future__ import annotations

from typing import List, Sequence

import discord

from ..constants import COLORS, MAX_EMBED_DESCRIPTION, MAX_FIELD_VALUE
from ..structure.schema import ServerStructure
from ..utils import safe_embed, truncate_text
from .engine import BuildResult, NukeResult, RunStatus

STATUS_COLORS = {
    RunStatus.COMPLETE: COLORS["success"],
    RunStatus.PARTIAL: COLORS["warning"],
    RunStatus.FAILED: COLORS["error"],
}


def summarize_errors(errors: Sequence[str], limit: int = 3) -> str:
    """First ``limit`` errors, one per line, plus a count of the rest."""
    if not errors:
        return ""
    lines = list(errors[:limit])
    if len(errors) > limit:
        lines.append(f"...and {len(errors) - limit} more")
    return truncate_text("\n".join(lines), MAX_FIELD_VALUE)


def _add_warnings(embed: discord.Embed, errors: Sequence[str]) -> None:
    if errors:
        embed.add_field(name="Warnings", value=summarize_errors(errors), inline=False)


def build_result_embed(theme: str, result: BuildResult) -> discord.Embed:
    title = {
        RunStatus.COMPLETE: "Server Built Successfully!",
        RunStatus.PARTIAL: "Server Built with Warnings",
        RunStatus.FAILED: "Build Failed",
    }[result.status]
    embed = safe_embed(title, f"**Theme:** {theme}", STATUS_COLORS[result.status])
    embed.add_field(name="Categories", value=str(len(result.categories)), inline=True)
    embed.add_field(name="Channels", value=str(len(result.channels)), inline=True)
    embed.add_field(name="Roles", value=str(len(result.roles)), inline=True)
    _add_warnings(embed, result.errors)
    return embed


def nuke_result_embed(result: NukeResult) -> discord.Embed:
    title = {
        RunStatus.COMPLETE: "Server Nuked Successfully!",
        RunStatus.PARTIAL: "Server Nuked with Warnings",
        RunStatus.FAILED: "Nuke Failed",
    }[result.status]
    embed = safe_embed(title, "Server has been reset to basic configuration.", STATUS_COLORS[result.status])
    embed.add_field(name="Channels Deleted", value=str(result.channels_deleted), inline=True)
    embed.add_field(name="Roles Deleted", value=str(result.roles_deleted), inline=True)
    embed.add_field(name="Basic Roles Created", value=str(len(result.created_roles)), inline=True)
    _add_warnings(embed, result.errors)
    return embed


def structure_outline(structure: ServerStructure) -> str:
    lines: List[str] = []
    for category in structure.categories:
        lines.append(f"**{category.name}**")
        for channel in category.channels:
            marker = "🔊" if channel.is_voice else "#"
            lines.append(f"  {marker} {channel.name}")
    lines.append("")
    lines.append("**Roles:** " + ", ".join(r.name for r in structure.roles))
    return "\n".join(lines)


def structure_preview_embed(theme: str, structure: ServerStructure) -> discord.Embed:
    summary = (
        f"{len(structure.categories)} categories, {structure.channel_count} channels "
        f"({structure.voice_count} voice), {len(structure.roles)} roles"
    )
    body = f"**Theme:** {theme}\n{summary}\n\n{structure_outline(structure)}"
    return safe_embed("Server Preview", truncate_text(body, MAX_EMBED_DESCRIPTION), COLORS["default"])
