from __future__ import annotations

import copy
import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from .schema import CategorySpec, ChannelKind, ChannelSpec, ServerStructure

log = logging.getLogger("serverforge.quotas")

SYNTHETIC_VOICE_NAME = "🎤general-voice"


class VoicePolicy(Enum):
    """How the per-generation voice channel target is chosen."""
    RANDOM = "random"    # uniform in [min_voice, max_voice]
    CEILING = "ceiling"  # always max_voice

    @classmethod
    def parse(cls, value: str) -> "VoicePolicy":
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            log.warning("Unknown voice policy %r, using %s", value, cls.RANDOM.value)
            return cls.RANDOM


@dataclass(frozen=True)
class QuotaLimits:
    max_channels: int
    voice_target: int
    min_voice: int = 1


@dataclass(frozen=True)
class QuotaPolicy:
    max_channels: int = 20
    min_voice: int = 1
    max_voice: int = 3
    voice_policy: VoicePolicy = VoicePolicy.RANDOM

    def limits(self, rng: Optional[random.Random] = None) -> QuotaLimits:
        low = max(1, self.min_voice)
        high = max(low, self.max_voice)
        if self.voice_policy is VoicePolicy.RANDOM:
            target = (rng or random).randint(low, high)
        else:
            target = high
        return QuotaLimits(max_channels=self.max_channels, voice_target=target, min_voice=low)


def _trim_total(categories: List[CategorySpec], cap: int) -> None:
    excess = sum(len(c.channels) for c in categories) - cap
    if excess <= 0:
        return

    # Each category keeps its first channel on the first pass.
    for category in reversed(categories):
        if excess <= 0:
            break
        removable = min(excess, len(category.channels) - 1)
        if removable > 0:
            del category.channels[-removable:]
            excess -= removable

    for category in reversed(categories):
        if excess <= 0:
            break
        if category.channels:
            category.channels.pop()
            excess -= 1


def _trim_voice(categories: List[CategorySpec], target: int) -> None:
    excess = sum(1 for c in categories for ch in c.channels if ch.is_voice) - target
    for category in categories:
        if excess <= 0:
            break
        for i in range(len(category.channels) - 1, -1, -1):
            if excess <= 0:
                break
            if category.channels[i].is_voice:
                del category.channels[i]
                excess -= 1


def _drop_last_text(categories: List[CategorySpec]) -> bool:
    for category in reversed(categories):
        for i in range(len(category.channels) - 1, -1, -1):
            if not category.channels[i].is_voice:
                del category.channels[i]
                return True
    return False


def _ensure_voice(categories: List[CategorySpec], minimum: int, cap: int) -> None:
    voice = sum(1 for c in categories for ch in c.channels if ch.is_voice)
    added = 0
    while voice < minimum:
        total = sum(len(c.channels) for c in categories)
        if total >= cap and not _drop_last_text(categories):
            break
        name = SYNTHETIC_VOICE_NAME if added == 0 else f"{SYNTHETIC_VOICE_NAME}-{added + 1}"
        categories[-1].channels.append(ChannelSpec(name, ChannelKind.VOICE))
        voice += 1
        added += 1


def enforce_quotas(structure: ServerStructure, limits: QuotaLimits) -> ServerStructure:
    """Return a copy of ``structure`` trimmed to fit ``limits``.

    Enforcing an already compliant structure returns an equal structure.
    """
    result = copy.deepcopy(structure)
    if not result.categories:
        return result

    before_total, before_voice = result.channel_count, result.voice_count
    target = max(limits.voice_target, limits.min_voice)

    _trim_total(result.categories, limits.max_channels)
    _trim_voice(result.categories, target)
    _ensure_voice(result.categories, limits.min_voice, limits.max_channels)

    if (result.channel_count, result.voice_count) != (before_total, before_voice):
        log.info(
            "Quota enforcement: channels %d -> %d, voice %d -> %d (cap=%d, voice target=%d)",
            before_total, result.channel_count, before_voice, result.voice_count,
            limits.max_channels, target,
        )
    return result
