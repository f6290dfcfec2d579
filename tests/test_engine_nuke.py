from __future__ import annotations

import discord

from serverforge.builder.engine import RunStatus, ServerBuilder
from serverforge.testing.fakes import http_error


def _populate(guild):
    for name in ("general", "off-topic", "memes", "announcements"):
        guild.add_channel(name)
    guild.add_channel("Lounge", discord.ChannelType.voice)


async def test_nuke_keeps_general_and_deletes_the_rest(guild):
    _populate(guild)

    result = await ServerBuilder(guild).nuke_server()

    assert result.channels_deleted == 4
    assert [c.name for c in guild.channels if c.type != discord.ChannelType.category] == ["general"]
    assert "general" not in guild.attempted("delete_channel")


async def test_voice_channel_named_general_is_not_protected(guild):
    guild.add_channel("general", discord.ChannelType.voice)

    result = await ServerBuilder(guild).nuke_server()

    assert result.deleted_channels == ["general"]


async def test_protected_name_is_configurable(guild):
    _populate(guild)

    await ServerBuilder(guild, protected_channel_name="memes").nuke_server()

    assert "memes" not in guild.attempted("delete_channel")
    assert "general" in guild.attempted("delete_channel")


async def test_community_channels_are_kept(guild):
    _populate(guild)
    guild.rules_channel = guild.add_channel("rules")
    guild.public_updates_channel = guild.add_channel("mod-updates")

    await ServerBuilder(guild).nuke_server()

    attempted = guild.attempted("delete_channel")
    assert "rules" not in attempted
    assert "mod-updates" not in attempted


async def test_roles_at_or_above_the_bot_are_never_touched(guild):
    guild.add_role("Owner", position=15)
    guild.add_role("Peer", position=10)
    guild.add_role("Helper", position=3)
    guild.add_role("Twitch Sub", position=2, managed=True)

    result = await ServerBuilder(guild).nuke_server()

    attempted = guild.attempted("delete_role")
    assert attempted == ["Helper"]
    assert result.deleted_roles == ["Helper"]
    assert "@everyone" not in attempted
    assert "ServerForge" not in attempted


async def test_baseline_roles_are_created(guild):
    result = await ServerBuilder(guild).nuke_server()

    assert [r.name for r in result.created_roles] == ["Member", "Moderator", "Admin"]
    assert result.status is RunStatus.COMPLETE


async def test_failures_are_recorded_and_nuke_continues(guild):
    _populate(guild)
    guild.add_role("Helper", position=3)
    guild.fail_on["memes"] = http_error(403)
    guild.fail_on["Helper"] = http_error(404, "Unknown Role")
    guild.fail_on["Moderator"] = http_error(403, "Missing Permissions")

    result = await ServerBuilder(guild).nuke_server()

    assert result.channels_deleted == 3
    assert result.roles_deleted == 0
    assert [r.name for r in result.created_roles] == ["Member", "Admin"]
    assert result.errors == [
        "Failed to delete channel memes: Missing Permissions",
        "Failed to delete role Helper: Unknown Role",
        "Failed to create basic role Moderator: Missing Permissions",
    ]
    assert result.status is RunStatus.PARTIAL


async def test_transport_failure_on_one_channel_does_not_stop_the_nuke(guild):
    _populate(guild)
    guild.fail_on["off-topic"] = ConnectionResetError("connection reset")

    result = await ServerBuilder(guild).nuke_server()

    assert not result.aborted
    assert result.deleted_channels == ["memes", "announcements", "Lounge"]
    assert result.errors == ["Failed to delete channel off-topic: connection reset"]
    assert [r.name for r in result.created_roles] == ["Member", "Moderator", "Admin"]
    assert result.status is RunStatus.PARTIAL


async def test_unusable_bot_member_aborts_nuke(guild):
    _populate(guild)
    guild.me = None

    result = await ServerBuilder(guild).nuke_server()

    assert result.aborted
    assert result.errors[-1].startswith("Server nuke failed:")
    assert guild.attempted("delete_role") == []
    assert guild.attempted("create_role") == []
    # channels were already gone before the abort
    assert result.channels_deleted == 4
    assert result.status is RunStatus.PARTIAL


async def test_abort_before_any_change_reports_failed(guild):
    guild.me = None

    result = await ServerBuilder(guild).nuke_server()

    assert result.aborted
    assert result.status is RunStatus.FAILED
