from __future__ import annotations

import discord
import pytest

from serverforge.permissions import (
    PermissionOutcome,
    SafePermission,
    allowed_permission_names,
    classify,
    resolve,
    resolve_safe,
)


def test_unrecognized_names_are_ignored():
    grantor = discord.Permissions(send_messages=True)
    result = resolve_safe({"SEND_MESSAGES", "UNKNOWN_PERM"}, grantor)
    assert result == discord.Permissions(send_messages=True)


def test_permissions_the_bot_lacks_are_withheld():
    grantor = discord.Permissions(send_messages=True)
    assert resolve_safe({"BAN_MEMBERS"}, grantor) == discord.Permissions.none()


def test_administrator_is_never_grantable():
    assert resolve_safe({"ADMINISTRATOR"}, discord.Permissions.all()) == discord.Permissions.none()


def test_result_is_subset_of_grantor():
    grantor = discord.Permissions(send_messages=True, kick_members=True, connect=True)
    result = resolve_safe(allowed_permission_names(), grantor)
    assert result.is_subset(grantor)
    assert result == grantor


def test_resolve_reports_withheld_and_unrecognized():
    resolution = resolve(["KICK_MEMBERS", "SPEAK", "FLY"], discord.Permissions(speak=True))
    assert resolution.permissions == discord.Permissions(speak=True)
    assert resolution.withheld == ["KICK_MEMBERS"]
    assert resolution.unrecognized == ["FLY"]


@pytest.mark.parametrize("name,outcome", [
    ("SEND_MESSAGES", PermissionOutcome.GRANTED),
    ("send messages", PermissionOutcome.GRANTED),
    ("send-messages", PermissionOutcome.GRANTED),
    ("BAN_MEMBERS", PermissionOutcome.WITHHELD),
    ("ADMINISTRATOR", PermissionOutcome.UNRECOGNIZED),
    ("", PermissionOutcome.UNRECOGNIZED),
])
def test_classify(name, outcome):
    assert classify(name, discord.Permissions(send_messages=True)) is outcome


def test_every_allowed_name_maps_to_a_real_flag():
    for name in allowed_permission_names():
        perm = SafePermission.lookup(name)
        assert perm is not None
        assert perm.flag.value != 0
    assert len(allowed_permission_names()) == 16
