from __future__ import annotations

import os
from dataclasses import dataclass


def _get_str(name: str, default: str) -> str:
    return os.getenv(name, "").strip() or default


def _get_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _get_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _get_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name, "").strip().lower()
    if not raw:
        return default
    return raw in {"1", "true", "yes", "y", "on"}


@dataclass(frozen=True)
class Settings:
    token: str
    sync_guild_id: int
    log_level: str
    sqlite_path: str

    # Completion service (OpenRouter chat completions)
    openrouter_api_key: str
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    openrouter_referer: str = "https://github.com/serverforge/serverforge"
    openrouter_title: str = "Discord Server Builder Bot"
    llm_timeout_seconds: float = 60.0

    structure_model: str = "anthropic/claude-3.5-haiku"
    structure_temperature: float = 0.7
    structure_max_tokens: int = 1800

    # Optional rewrite of the raw theme before generation
    theme_enhancement_enabled: bool = True
    enhance_model: str = "openai/gpt-3.5-turbo"
    enhance_temperature: float = 0.3
    enhance_max_tokens: int = 150

    # Quotas applied after generation
    max_channels: int = 20
    min_voice_channels: int = 1
    max_voice_channels: int = 3
    voice_policy: str = "random"  # "random" | "ceiling"

    build_cooldown_seconds: int = 120
    nuke_confirm_timeout_seconds: int = 30
    protected_channel_name: str = "general"


def load_settings() -> Settings:
    token = os.getenv("DISCORD_TOKEN", "").strip()
    if not token:
        raise RuntimeError("DISCORD_TOKEN is required")

    max_channels = max(1, _get_int("MAX_CHANNELS", 20))
    min_voice = min(max(1, _get_int("MIN_VOICE_CHANNELS", 1)), max_channels)
    max_voice = min(max(min_voice, _get_int("MAX_VOICE_CHANNELS", 3)), max_channels)

    return Settings(
        token=token,
        sync_guild_id=_get_int("SYNC_GUILD_ID", 0),
        log_level=_get_str("LOG_LEVEL", "INFO"),
        sqlite_path=_get_str("SQLITE_PATH", "serverforge.sqlite3"),
        openrouter_api_key=os.getenv("OPENROUTER_API_KEY", "").strip(),
        openrouter_base_url=_get_str("OPENROUTER_BASE_URL", "https://openrouter.ai/api/v1"),
        openrouter_referer=_get_str("OPENROUTER_REFERER", "https://github.com/serverforge/serverforge"),
        openrouter_title=_get_str("OPENROUTER_TITLE", "Discord Server Builder Bot"),
        llm_timeout_seconds=_get_float("LLM_TIMEOUT_SECONDS", 60.0),
        structure_model=_get_str("STRUCTURE_MODEL", "anthropic/claude-3.5-haiku"),
        structure_temperature=_get_float("STRUCTURE_TEMPERATURE", 0.7),
        structure_max_tokens=_get_int("STRUCTURE_MAX_TOKENS", 1800),
        theme_enhancement_enabled=_get_bool("THEME_ENHANCEMENT_ENABLED", True),
        enhance_model=_get_str("ENHANCE_MODEL", "openai/gpt-3.5-turbo"),
        enhance_temperature=_get_float("ENHANCE_TEMPERATURE", 0.3),
        enhance_max_tokens=_get_int("ENHANCE_MAX_TOKENS", 150),
        max_channels=max_channels,
        min_voice_channels=min_voice,
        max_voice_channels=max_voice,
        voice_policy=_get_str("VOICE_POLICY", "random").lower(),
        build_cooldown_seconds=max(0, _get_int("BUILD_COOLDOWN_SECONDS", 120)),
        nuke_confirm_timeout_seconds=max(5, _get_int("NUKE_CONFIRM_TIMEOUT_SECONDS", 30)),
        protected_channel_name=_get_str("PROTECTED_CHANNEL_NAME", "general"),
    )
