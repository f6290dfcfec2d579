"""
Safe permission resolution for generated roles.

A generated role may only receive capabilities from a fixed allow-list, and
only those the bot itself already holds in the guild, so a build can never
grant more than the bot has.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional

import discord

log = logging.getLogger("serverforge.permissions")


class SafePermission(Enum):
    """Permission names a generated role may request, mapped to discord.py flag names."""
    MANAGE_CHANNELS = "manage_channels"
    MANAGE_ROLES = "manage_roles"
    MANAGE_MESSAGES = "manage_messages"
    KICK_MEMBERS = "kick_members"
    BAN_MEMBERS = "ban_members"
    SEND_MESSAGES = "send_messages"
    READ_MESSAGE_HISTORY = "read_message_history"
    VIEW_CHANNEL = "view_channel"
    CONNECT = "connect"
    SPEAK = "speak"
    MUTE_MEMBERS = "mute_members"
    DEAFEN_MEMBERS = "deafen_members"
    MOVE_MEMBERS = "move_members"
    ADD_REACTIONS = "add_reactions"
    ATTACH_FILES = "attach_files"
    EMBED_LINKS = "embed_links"

    @property
    def flag(self) -> discord.Permissions:
        return discord.Permissions(**{self.value: True})

    @classmethod
    def lookup(cls, name: str) -> Optional["SafePermission"]:
        key = str(name).strip().upper().replace(" ", "_").replace("-", "_")
        return cls.__members__.get(key)


class PermissionOutcome(Enum):
    GRANTED = "granted"
    WITHHELD = "withheld"            # allow-listed, but the grantor lacks it
    UNRECOGNIZED = "unrecognized"    # not on the allow-list


def allowed_permission_names() -> List[str]:
    return list(SafePermission.__members__)


def classify(name: str, grantor: discord.Permissions) -> PermissionOutcome:
    perm = SafePermission.lookup(name)
    if perm is None:
        return PermissionOutcome.UNRECOGNIZED
    if perm.flag.is_subset(grantor):
        return PermissionOutcome.GRANTED
    return PermissionOutcome.WITHHELD


@dataclass
class PermissionResolution:
    permissions: discord.Permissions = field(default_factory=discord.Permissions.none)
    withheld: List[str] = field(default_factory=list)
    unrecognized: List[str] = field(default_factory=list)


def resolve(requested: Iterable[str], grantor: discord.Permissions) -> PermissionResolution:
    result = PermissionResolution()
    for name in sorted(set(requested or ())):
        outcome = classify(name, grantor)
        if outcome is PermissionOutcome.GRANTED:
            result.permissions.value |= SafePermission.lookup(name).flag.value
        elif outcome is PermissionOutcome.WITHHELD:
            result.withheld.append(name)
        else:
            result.unrecognized.append(name)
    return result


def resolve_safe(requested: Iterable[str], grantor: discord.Permissions) -> discord.Permissions:
    """Union of the requested capabilities the grantor is allowed to hand out."""
    resolution = resolve(requested, grantor)
    if resolution.withheld:
        log.debug("Withheld permissions (bot lacks them): %s", ", ".join(resolution.withheld))
    if resolution.unrecognized:
        log.debug("Skipped unrecognized permissions: %s", ", ".join(resolution.unrecognized))
    return resolution.permissions
