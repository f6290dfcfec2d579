"""
Fallback Structure

Hand-authored layout used whenever generation fails. Deterministic for a
given theme and always valid: non-empty categories and roles, well under the
channel cap, at least one voice channel.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Tuple

from .schema import CategorySpec, ChannelKind, ChannelSpec, RoleSpec, ServerStructure


@dataclass(frozen=True)
class ThemeFlavor:
    emoji: str
    member_role: str
    color: str


DEFAULT_FLAVOR = ThemeFlavor("✨", "Member", "#95A5A6")

# First matching keyword wins.
FLAVORS: List[Tuple[Tuple[str, ...], ThemeFlavor]] = [
    (("gaming", "gamer", "game", "esports", "fps", "minecraft"), ThemeFlavor("🎮", "Gamer", "#9B59B6")),
    (("music", "band", "beat", "producer", "rap", "dj"), ThemeFlavor("🎵", "Musician", "#1ABC9C")),
    (("anime", "manga", "otaku"), ThemeFlavor("🍥", "Otaku", "#E91E63")),
    (("coding", "code", "programming", "developer", "dev", "tech"), ThemeFlavor("💻", "Developer", "#3498DB")),
    (("art", "drawing", "design", "creative"), ThemeFlavor("🎨", "Artist", "#E67E22")),
    (("study", "school", "homework", "learning", "university"), ThemeFlavor("📚", "Scholar", "#2ECC71")),
    (("crypto", "trading", "stocks", "finance"), ThemeFlavor("📈", "Trader", "#F1C40F")),
    (("fitness", "gym", "workout", "sports"), ThemeFlavor("💪", "Athlete", "#E74C3C")),
]

_NON_SLUG = re.compile(r"[^a-z0-9]+")


def theme_slug(theme: str, max_length: int = 24) -> str:
    slug = _NON_SLUG.sub("-", (theme or "").lower()).strip("-")
    slug = slug[:max_length].rstrip("-")
    return slug or "community"


def pick_flavor(theme: str) -> ThemeFlavor:
    words = set(_NON_SLUG.split((theme or "").lower()))
    for keywords, flavor in FLAVORS:
        if words.intersection(keywords):
            return flavor
    return DEFAULT_FLAVOR


def fallback_structure(theme: str) -> ServerStructure:
    slug = theme_slug(theme)
    flavor = pick_flavor(theme)

    categories = [
        CategorySpec("📢-welcome", [
            ChannelSpec("👋welcome"),
            ChannelSpec("📜rules"),
            ChannelSpec("📢announcements"),
        ]),
        CategorySpec("💬-general", [
            ChannelSpec("💬general-chat"),
            ChannelSpec("🎯discussion"),
            ChannelSpec("🎨showcase"),
        ]),
        CategorySpec(f"{flavor.emoji}-{slug}", [
            ChannelSpec(f"{flavor.emoji}{slug}-chat"),
            ChannelSpec(f"{flavor.emoji}{slug}-resources"),
        ]),
        CategorySpec("🎤-voice", [
            ChannelSpec("🎤general-voice", ChannelKind.VOICE),
            ChannelSpec("🎵music-lounge", ChannelKind.VOICE),
        ]),
    ]

    roles = [
        RoleSpec("Admin", "#E74C3C", frozenset({"MANAGE_MESSAGES", "KICK_MEMBERS"})),
        RoleSpec("Moderator", "#3498DB", frozenset({"MANAGE_MESSAGES"})),
        RoleSpec(flavor.member_role, flavor.color, frozenset({"SEND_MESSAGES", "VIEW_CHANNEL"})),
    ]

    return ServerStructure(categories=categories, roles=roles)
