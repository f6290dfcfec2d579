"""
Structure Generator

Turns a free-text theme into a validated, quota-bounded ServerStructure.
The external model is unreliable (rate limits, refusals, malformed JSON), so
``generate`` never raises: every failure degrades to the fallback layout.
"""

from __future__ import annotations

import json
import logging
import random
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

from ..llm.openrouter import CompletionClient, CompletionError
from ..permissions import allowed_permission_names
from .extraction import extract_json
from .fallback import fallback_structure
from .quotas import QuotaLimits, QuotaPolicy, VoicePolicy, enforce_quotas
from .schema import ServerStructure, StructureError, parse_structure

if TYPE_CHECKING:
    from ..config import Settings

log = logging.getLogger("serverforge.generator")

MAX_ENHANCED_THEME_LENGTH = 400

_LABEL = re.compile(r"^\s*(enhanced|rewritten)\s+theme\s*:\s*", re.IGNORECASE)

ENHANCE_PROMPT = """Rewrite this Discord server theme to be more specific and detailed: "{theme}"

Make it clear what type of community this is, what activities they do, and what channels they might need.

Examples:
"gaming" → "PC gaming community focused on competitive FPS games, streaming, and tournament participation"
"music" → "hip-hop music production community for beat makers, rappers, and audio engineers to collaborate"
"anime" → "anime discussion community for seasonal anime reviews, manga discussions, and fan art sharing"

Rewrite: "{theme}"
Enhanced theme:"""

_EXAMPLE_SHAPE = {
    "categories": [
        {
            "name": "category-name",
            "channels": [
                {"name": "🎯channel-name", "type": "text"},
                {"name": "🎤voice-name", "type": "voice"},
            ],
        }
    ],
    "roles": [
        {"name": "Role Name", "color": "#hex", "permissions": ["SEND_MESSAGES", "VIEW_CHANNEL"]}
    ],
}


@dataclass(frozen=True)
class GenerationOptions:
    structure_model: str = "anthropic/claude-3.5-haiku"
    structure_temperature: float = 0.7
    structure_max_tokens: int = 1800
    enhance_enabled: bool = True
    enhance_model: str = "openai/gpt-3.5-turbo"
    enhance_temperature: float = 0.3
    enhance_max_tokens: int = 150
    quotas: QuotaPolicy = field(default_factory=QuotaPolicy)

    @classmethod
    def from_settings(cls, settings: "Settings") -> "GenerationOptions":
        return cls(
            structure_model=settings.structure_model,
            structure_temperature=settings.structure_temperature,
            structure_max_tokens=settings.structure_max_tokens,
            enhance_enabled=settings.theme_enhancement_enabled,
            enhance_model=settings.enhance_model,
            enhance_temperature=settings.enhance_temperature,
            enhance_max_tokens=settings.enhance_max_tokens,
            quotas=QuotaPolicy(
                max_channels=settings.max_channels,
                min_voice=settings.min_voice_channels,
                max_voice=settings.max_voice_channels,
                voice_policy=VoicePolicy.parse(settings.voice_policy),
            ),
        )


def build_prompt(theme: str, limits: QuotaLimits) -> str:
    if limits.voice_target > limits.min_voice:
        voice_rule = f"{limits.min_voice}-{limits.voice_target} voice channels"
    else:
        voice_rule = f"exactly {limits.min_voice} voice channel" + ("s" if limits.min_voice > 1 else "")
    return (
        f'Design a creative Discord server for: "{theme}"\n\n'
        "Create categories, channels, and roles that perfectly match this theme. "
        "Be imaginative and specific to the theme.\n\n"
        "Respond with a single JSON object in this format:\n"
        f"{json.dumps(_EXAMPLE_SHAPE, indent=2, ensure_ascii=False)}\n\n"
        f"Limits: {limits.max_channels} channels max, {voice_rule}. "
        f"Role permissions may only use: {', '.join(allowed_permission_names())}. "
        "Use emojis. Make it themed and unique!"
    )


def clean_enhanced_theme(text: str) -> str:
    cleaned = _LABEL.sub("", text.strip())
    cleaned = cleaned.strip().strip('"').strip("'").strip()
    return cleaned[:MAX_ENHANCED_THEME_LENGTH]


class StructureGenerator:
    """Generates server layouts from a theme via a completion service."""

    def __init__(
        self,
        client: CompletionClient,
        options: Optional[GenerationOptions] = None,
        *,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.client = client
        self.options = options or GenerationOptions()
        self.rng = rng or random.Random()

    async def enhance_theme(self, theme: str) -> str:
        """Best-effort rewrite of the theme; returns the original on any failure."""
        if not self.options.enhance_enabled:
            return theme
        try:
            text = await self.client.complete(
                self.options.enhance_model,
                ENHANCE_PROMPT.format(theme=theme),
                temperature=self.options.enhance_temperature,
                max_tokens=self.options.enhance_max_tokens,
            )
        except CompletionError as e:
            log.warning("Theme enhancement failed, using original: %s", e)
            return theme
        except Exception:
            log.exception("Unexpected error during theme enhancement, using original")
            return theme

        enhanced = clean_enhanced_theme(text)
        return enhanced or theme

    def parse_response(self, text: str, limits: QuotaLimits) -> ServerStructure:
        structure = parse_structure(extract_json(text))
        return enforce_quotas(structure, limits)

    async def generate(self, theme: str) -> ServerStructure:
        limits = self.options.quotas.limits(self.rng)
        log.info("Generating structure for theme: %s", theme)

        try:
            enhanced = await self.enhance_theme(theme)
            if enhanced != theme:
                log.info("Enhanced theme: %s", enhanced)

            text = await self.client.complete(
                self.options.structure_model,
                build_prompt(enhanced, limits),
                temperature=self.options.structure_temperature,
                max_tokens=self.options.structure_max_tokens,
            )
            log.info("Model responded with %d chars", len(text))
            structure = self.parse_response(text, limits)
        except (CompletionError, StructureError) as e:
            log.warning("AI generation failed (%s); using fallback structure", e)
            return self.fallback(theme, limits)
        except Exception:
            log.exception("Unexpected error during generation; using fallback structure")
            return self.fallback(theme, limits)

        log.info(
            "Generated structure: %d categories, %d channels, %d voice, %d roles",
            len(structure.categories), structure.channel_count,
            structure.voice_count, len(structure.roles),
        )
        return structure

    def fallback(self, theme: str, limits: QuotaLimits) -> ServerStructure:
        return enforce_quotas(fallback_structure(theme), limits)
