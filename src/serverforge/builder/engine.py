from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Sequence

import aiohttp
import discord

from ..permissions import resolve_safe
from ..structure.schema import CategorySpec, ChannelSpec, RoleSpec, ServerStructure

log = logging.getLogger("serverforge.builder")

BUILD_REASON = "Server build - Auto-generated"
NUKE_REASON = "Server nuke command"

# Failures of a single API call; recorded against the item, the run continues.
ITEM_ERRORS = (discord.HTTPException, aiohttp.ClientError, OSError, asyncio.TimeoutError)

BASELINE_ROLES: List[RoleSpec] = [
    RoleSpec("Member", "#95A5A6", frozenset({"SEND_MESSAGES", "VIEW_CHANNEL"})),
    RoleSpec("Moderator", "#3498DB", frozenset({"MANAGE_MESSAGES", "SEND_MESSAGES", "VIEW_CHANNEL"})),
    RoleSpec("Admin", "#E74C3C", frozenset({"MANAGE_CHANNELS", "MANAGE_ROLES", "KICK_MEMBERS"})),
]


class RunStatus(Enum):
    COMPLETE = "complete"
    PARTIAL = "partial"
    FAILED = "failed"


@dataclass
class BuildResult:
    roles: List[discord.Role] = field(default_factory=list)
    categories: List[discord.CategoryChannel] = field(default_factory=list)
    channels: List[discord.abc.GuildChannel] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    aborted: bool = False

    @property
    def created_count(self) -> int:
        return len(self.roles) + len(self.categories) + len(self.channels)

    @property
    def status(self) -> RunStatus:
        # an aborted run that already changed the guild is still partial
        if self.errors or self.aborted:
            return RunStatus.PARTIAL if self.created_count else RunStatus.FAILED
        return RunStatus.COMPLETE


@dataclass
class NukeResult:
    deleted_channels: List[str] = field(default_factory=list)
    deleted_roles: List[str] = field(default_factory=list)
    created_roles: List[discord.Role] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    aborted: bool = False

    @property
    def channels_deleted(self) -> int:
        return len(self.deleted_channels)

    @property
    def roles_deleted(self) -> int:
        return len(self.deleted_roles)

    @property
    def status(self) -> RunStatus:
        touched = self.channels_deleted + self.roles_deleted + len(self.created_roles)
        if self.errors or self.aborted:
            return RunStatus.PARTIAL if touched else RunStatus.FAILED
        return RunStatus.COMPLETE


def _reason_text(error: BaseException) -> str:
    text = error.text if isinstance(error, discord.HTTPException) else str(error)
    return text or str(error) or type(error).__name__


class ServerBuilder:
    """Applies a ServerStructure to a live guild, and clears a guild back to a baseline.

    Every mutation is awaited before the next one is issued. Per-item
    API failures (``ITEM_ERRORS``) are recorded and skipped; nothing is
    retried or rolled back.
    """

    def __init__(self, guild: discord.Guild, *, protected_channel_name: str = "general") -> None:
        self.guild = guild
        self.protected_channel_name = protected_channel_name

    async def build_server(self, structure: ServerStructure) -> BuildResult:
        result = BuildResult()
        try:
            grantor = self.guild.me.guild_permissions
            result.roles.extend(
                await self._create_roles(
                    structure.roles, grantor, result.errors, label="role", reason=f"{BUILD_REASON} role"
                )
            )

            for category_spec in structure.categories:
                await self._create_category(category_spec, result)
        except Exception as e:
            log.exception("Server build failed in guild %s", self.guild.id)
            result.errors.append(f"Server build failed: {e}")
            result.aborted = True

        log.info(
            "Build finished in guild %s: %d roles, %d categories, %d channels, %d errors",
            self.guild.id, len(result.roles), len(result.categories), len(result.channels), len(result.errors),
        )
        return result

    async def _create_roles(
        self,
        specs: Sequence[RoleSpec],
        grantor: discord.Permissions,
        errors: List[str],
        *,
        label: str,
        reason: str,
    ) -> List[discord.Role]:
        created: List[discord.Role] = []
        for spec in specs:
            try:
                role = await self.guild.create_role(
                    name=spec.name,
                    colour=spec.colour,
                    permissions=resolve_safe(spec.permissions, grantor),
                    reason=reason,
                )
            except ITEM_ERRORS as e:
                log.warning("Failed to create %s %s: %s", label, spec.name, e)
                errors.append(f"Failed to create {label} {spec.name}: {_reason_text(e)}")
                continue
            created.append(role)
            log.info("Created %s: %s", label, role.name)
        return created

    async def _create_category(self, spec: CategorySpec, result: BuildResult) -> None:
        try:
            category = await self.guild.create_category(spec.name, reason=f"{BUILD_REASON} category")
        except ITEM_ERRORS as e:
            # Its channels have no parent to live under; skip them with this single error.
            log.warning("Failed to create category %s: %s", spec.name, e)
            result.errors.append(f"Failed to create category {spec.name}: {_reason_text(e)}")
            return

        result.categories.append(category)
        log.info("Created category: %s", category.name)

        for channel_spec in spec.channels:
            await self._create_channel(channel_spec, category, result)

    async def _create_channel(
        self,
        spec: ChannelSpec,
        category: discord.CategoryChannel,
        result: BuildResult,
    ) -> None:
        create = self.guild.create_voice_channel if spec.is_voice else self.guild.create_text_channel
        try:
            channel = await create(spec.name, category=category, reason=f"{BUILD_REASON} channel")
        except ITEM_ERRORS as e:
            log.warning("Failed to create channel %s: %s", spec.name, e)
            result.errors.append(f"Failed to create channel {spec.name}: {_reason_text(e)}")
            return
        result.channels.append(channel)
        log.info("Created channel: %s (%s)", channel.name, spec.kind.value)

    def is_protected_channel(self, channel: discord.abc.GuildChannel) -> bool:
        if channel.name == self.protected_channel_name and channel.type == discord.ChannelType.text:
            return True
        # Community servers refuse deletion of their rules / updates channels.
        required = (self.guild.rules_channel, self.guild.public_updates_channel)
        return any(c is not None and c.id == channel.id for c in required)

    def deletable_roles(self) -> List[discord.Role]:
        top = self.guild.me.top_role
        return [
            role for role in self.guild.roles
            if not role.is_default()
            and not role.managed
            and role.position < top.position
        ]

    async def nuke_server(self) -> NukeResult:
        result = NukeResult()
        try:
            channels = [c for c in list(self.guild.channels) if not self.is_protected_channel(c)]
            for channel in channels:
                name = channel.name
                try:
                    await channel.delete(reason=NUKE_REASON)
                except ITEM_ERRORS as e:
                    log.warning("Failed to delete channel %s: %s", name, e)
                    result.errors.append(f"Failed to delete channel {name}: {_reason_text(e)}")
                    continue
                result.deleted_channels.append(name)
                log.info("Deleted channel: %s", name)

            for role in self.deletable_roles():
                name = role.name
                try:
                    await role.delete(reason=NUKE_REASON)
                except ITEM_ERRORS as e:
                    log.warning("Failed to delete role %s: %s", name, e)
                    result.errors.append(f"Failed to delete role {name}: {_reason_text(e)}")
                    continue
                result.deleted_roles.append(name)
                log.info("Deleted role: %s", name)

            grantor = self.guild.me.guild_permissions
            result.created_roles.extend(
                await self._create_roles(BASELINE_ROLES, grantor, result.errors, label="basic role", reason=NUKE_REASON)
            )
        except Exception as e:
            log.exception("Server nuke failed in guild %s", self.guild.id)
            result.errors.append(f"Server nuke failed: {e}")
            result.aborted = True

        log.info(
            "Nuke finished in guild %s: %d channels deleted, %d roles deleted, %d errors",
            self.guild.id, result.channels_deleted, result.roles_deleted, len(result.errors),
        )
        return result
