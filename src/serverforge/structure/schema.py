"""
Server Structure Schema

The document shape a generated server layout must satisfy before it is
applied to a guild: categories holding channels, plus roles.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional

import discord

from ..constants import DEFAULT_ROLE_COLOR, MAX_NAME_LENGTH


class StructureError(ValueError):
    """Raised when a decoded document is not a usable server structure."""


class ChannelKind(Enum):
    """Channel type enumeration."""
    TEXT = "text"
    VOICE = "voice"

    @classmethod
    def parse(cls, value: Any) -> "ChannelKind":
        if isinstance(value, str) and value.strip().lower() == cls.VOICE.value:
            return cls.VOICE
        return cls.TEXT


@dataclass
class ChannelSpec:
    """Channel specification."""
    name: str
    kind: ChannelKind = ChannelKind.TEXT

    @property
    def is_voice(self) -> bool:
        return self.kind is ChannelKind.VOICE


@dataclass
class CategorySpec:
    """Category specification."""
    name: str
    channels: List[ChannelSpec] = field(default_factory=list)


@dataclass
class RoleSpec:
    """Role specification."""
    name: str
    color: str = DEFAULT_ROLE_COLOR
    permissions: FrozenSet[str] = frozenset()
    description: Optional[str] = None

    @property
    def colour(self) -> discord.Colour:
        return discord.Colour(int(self.color.lstrip("#"), 16))


@dataclass
class ServerStructure:
    """A full server layout: ordered categories and ordered roles."""
    categories: List[CategorySpec]
    roles: List[RoleSpec]

    @property
    def channel_count(self) -> int:
        return sum(len(c.channels) for c in self.categories)

    @property
    def voice_count(self) -> int:
        return sum(1 for c in self.categories for ch in c.channels if ch.is_voice)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "categories": [
                {
                    "name": c.name,
                    "channels": [{"name": ch.name, "type": ch.kind.value} for ch in c.channels],
                }
                for c in self.categories
            ],
            "roles": [
                {
                    "name": r.name,
                    "color": r.color,
                    "permissions": sorted(r.permissions),
                    **({"description": r.description} if r.description else {}),
                }
                for r in self.roles
            ],
        }


_HEX_COLOR = re.compile(r"^#?([0-9a-fA-F]{6})$")


def normalize_color(value: Any) -> str:
    """Return ``#RRGGBB`` for a valid hex color, the default color otherwise."""
    if isinstance(value, str):
        match = _HEX_COLOR.match(value.strip())
        if match:
            return f"#{match.group(1).upper()}"
    return DEFAULT_ROLE_COLOR


def _clean_name(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    name = value.strip()[:MAX_NAME_LENGTH].strip()
    return name or None


def _parse_channel(raw: Any) -> Optional[ChannelSpec]:
    if not isinstance(raw, dict):
        return None
    name = _clean_name(raw.get("name"))
    if name is None:
        return None
    return ChannelSpec(name, ChannelKind.parse(raw.get("type", raw.get("kind"))))


def _parse_category(raw: Any) -> Optional[CategorySpec]:
    if not isinstance(raw, dict):
        return None
    name = _clean_name(raw.get("name"))
    if name is None:
        return None
    channels_raw = raw.get("channels")
    if not isinstance(channels_raw, list):
        channels_raw = []
    channels = [ch for ch in (_parse_channel(c) for c in channels_raw) if ch is not None]
    return CategorySpec(name, channels)


def _parse_role(raw: Any) -> Optional[RoleSpec]:
    if not isinstance(raw, dict):
        return None
    name = _clean_name(raw.get("name"))
    if name is None:
        return None
    perms_raw = raw.get("permissions")
    if not isinstance(perms_raw, list):
        perms_raw = []
    permissions = frozenset(p.strip() for p in perms_raw if isinstance(p, str) and p.strip())
    description = raw.get("description") if isinstance(raw.get("description"), str) else None
    return RoleSpec(name, normalize_color(raw.get("color")), permissions, description)


def parse_structure(data: Any) -> ServerStructure:
    """Validate a decoded JSON value and build a ServerStructure.

    Malformed entries (non-objects, missing names) are dropped. The document is
    rejected when ``categories`` or ``roles`` is absent, not a list, or empty
    once those entries are gone.
    """
    if not isinstance(data, dict):
        raise StructureError(f"expected a JSON object, got {type(data).__name__}")

    categories_raw = data.get("categories")
    roles_raw = data.get("roles")
    if not isinstance(categories_raw, list) or not categories_raw:
        raise StructureError("'categories' must be a non-empty array")
    if not isinstance(roles_raw, list) or not roles_raw:
        raise StructureError("'roles' must be a non-empty array")

    categories = [c for c in (_parse_category(raw) for raw in categories_raw) if c is not None]
    roles = [r for r in (_parse_role(raw) for raw in roles_raw) if r is not None]
    if not categories:
        raise StructureError("no usable categories in document")
    if not roles:
        raise StructureError("no usable roles in document")

    return ServerStructure(categories=categories, roles=roles)
