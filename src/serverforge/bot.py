from __future__ import annotations

import asyncio
import logging

import discord
from discord.ext import commands

from .config import Settings
from .database import initialize_database
from .error_handlers import setup_error_handlers
from .llm.openrouter import OpenRouterClient
from .services.cooldowns import CooldownTracker
from .services.history_store import BuildHistoryStore
from .structure.generator import GenerationOptions, StructureGenerator

log = logging.getLogger("serverforge.bot")


class _CommandSyncManager:
    def __init__(self, bot: "ForgeBot") -> None:
        self.bot = bot
        self._lock = asyncio.Lock()

    async def sync_startup(self) -> None:
        if self.bot.settings.sync_guild_id:
            await self.sync_guild(self.bot.settings.sync_guild_id)
        else:
            await self.sync_global()

    async def sync_global(self) -> None:
        async with self._lock:
            synced = await self.bot.tree.sync()
            log.info("Commands synced globally: %s", ", ".join(f"/{c.name}" for c in synced))

    async def sync_guild(self, guild_id: int) -> None:
        async with self._lock:
            guild = discord.Object(id=guild_id)
            self.bot.tree.copy_global_to(guild=guild)
            synced = await self.bot.tree.sync(guild=guild)
            log.info("Commands synced to guild %d: %s", guild_id, ", ".join(f"/{c.name}" for c in synced))


class ForgeBot(commands.Bot):
    def __init__(self, settings: Settings) -> None:
        intents = discord.Intents.default()
        super().__init__(
            command_prefix=commands.when_mentioned,
            intents=intents,
            allowed_mentions=discord.AllowedMentions.none(),
            help_command=None,
        )

        self.settings = settings

        self.completion_client = OpenRouterClient(
            settings.openrouter_api_key,
            base_url=settings.openrouter_base_url,
            referer=settings.openrouter_referer,
            title=settings.openrouter_title,
            timeout_seconds=settings.llm_timeout_seconds,
        )
        self.generator = StructureGenerator(self.completion_client, GenerationOptions.from_settings(settings))
        self.cooldowns = CooldownTracker(settings.build_cooldown_seconds)
        self.history_store = BuildHistoryStore(settings.sqlite_path)
        self._sync_mgr = _CommandSyncManager(self)

    async def setup_hook(self) -> None:
        await initialize_database(self.settings.sqlite_path, [self.history_store])
        await setup_error_handlers(self)

        loaded: list[str] = []
        failed: list[str] = []

        # One bad cog must not prevent the others from registering.
        async def _load(extension: str) -> None:
            try:
                await self.load_extension(extension)
                loaded.append(extension)
                log.info("Loaded extension: %s", extension)
            except commands.ExtensionError:
                log.exception("Failed to load extension: %s", extension)
                failed.append(extension)

        await _load("serverforge.cogs.build")
        await _load("serverforge.cogs.nuke")

        log.info("Extensions loaded: %d ok, %d failed", len(loaded), len(failed))

        try:
            await self._sync_mgr.sync_startup()
        except discord.HTTPException:
            log.exception("Command registration failed")

    async def on_ready(self) -> None:
        log.info("%s is online - serving %d servers", self.user, len(self.guilds))
        await self.change_presence(activity=discord.Game(name="Building Discord Servers"))

    async def on_guild_join(self, guild: discord.Guild) -> None:
        log.info("Joined new guild: %s (%s) with %s members", guild.name, guild.id, guild.member_count)

    async def on_guild_remove(self, guild: discord.Guild) -> None:
        log.info("Left guild: %s (%s)", guild.name, guild.id)

    async def close(self) -> None:
        await self.completion_client.close()
        await super().close()
