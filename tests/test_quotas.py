from __future__ import annotations

import random

from serverforge.structure.quotas import (
    SYNTHETIC_VOICE_NAME,
    QuotaLimits,
    QuotaPolicy,
    VoicePolicy,
    enforce_quotas,
)
from serverforge.structure.schema import CategorySpec, ChannelKind, ChannelSpec, RoleSpec, ServerStructure


def _structure(*categories):
    return ServerStructure(
        categories=[
            CategorySpec(f"cat-{i}", [ChannelSpec(n, ChannelKind.VOICE if n.startswith("v") else ChannelKind.TEXT) for n in names])
            for i, names in enumerate(categories)
        ],
        roles=[RoleSpec("Member")],
    )


def _names(structure):
    return [[ch.name for ch in c.channels] for c in structure.categories]


def test_compliant_structure_is_unchanged():
    s = _structure(["t1", "t2", "v1"], ["t3"])
    assert enforce_quotas(s, QuotaLimits(max_channels=20, voice_target=3)) == s


def test_enforcement_does_not_mutate_input():
    s = _structure(["t1", "t2", "t3"], ["t4", "t5"])
    enforce_quotas(s, QuotaLimits(max_channels=2, voice_target=1))
    assert _names(s) == [["t1", "t2", "t3"], ["t4", "t5"]]


def test_total_cap_trims_from_last_category_first_keeping_first_channels():
    s = _structure(["a1", "a2", "a3", "v1"], ["b1", "b2", "b3"], ["c1", "c2", "c3"])
    out = enforce_quotas(s, QuotaLimits(max_channels=7, voice_target=3))
    # 10 channels, cap 7: category c loses 2, category b loses 1
    assert _names(out) == [["a1", "a2", "a3", "v1"], ["b1", "b2"], ["c1"]]


def test_total_cap_empties_trailing_categories_when_needed():
    s = _structure(["v1"], ["b1"], ["c1"], ["d1"])
    out = enforce_quotas(s, QuotaLimits(max_channels=2, voice_target=1))
    assert _names(out) == [["v1"], ["b1"], [], []]
    assert out.channel_count == 2


def test_excess_voice_removed_from_end_of_each_category_in_order():
    s = _structure(["t1", "v1", "v2"], ["v3", "t2"], ["v4"])
    out = enforce_quotas(s, QuotaLimits(max_channels=20, voice_target=1))
    assert _names(out) == [["t1"], ["t2"], ["v4"]]
    assert out.voice_count == 1


def test_missing_voice_appends_synthetic_channel_to_last_category():
    s = _structure(["t1"], ["t2", "t3"])
    out = enforce_quotas(s, QuotaLimits(max_channels=20, voice_target=2))
    last = out.categories[-1].channels[-1]
    assert last.name == SYNTHETIC_VOICE_NAME
    assert last.kind is ChannelKind.VOICE
    assert out.voice_count == 1


def test_missing_voice_at_cap_replaces_last_text_channel():
    s = _structure(["t1", "t2"], ["t3", "t4"])
    out = enforce_quotas(s, QuotaLimits(max_channels=4, voice_target=1))
    assert _names(out) == [["t1", "t2"], ["t3", SYNTHETIC_VOICE_NAME]]
    assert out.channel_count == 4


def test_enforcement_is_idempotent():
    s = _structure(["t%d" % i for i in range(12)], ["v1", "v2", "v3", "v4"], ["t%d" % i for i in range(20, 30)])
    limits = QuotaLimits(max_channels=20, voice_target=2)
    once = enforce_quotas(s, limits)
    assert enforce_quotas(once, limits) == once
    assert once.channel_count <= 20
    assert 1 <= once.voice_count <= 2


def test_random_policy_targets_stay_in_range():
    policy = QuotaPolicy(max_channels=20, min_voice=1, max_voice=3, voice_policy=VoicePolicy.RANDOM)
    rng = random.Random(7)
    targets = {policy.limits(rng).voice_target for _ in range(200)}
    assert targets == {1, 2, 3}


def test_ceiling_policy_uses_max_voice():
    policy = QuotaPolicy(max_channels=20, min_voice=1, max_voice=5, voice_policy=VoicePolicy.CEILING)
    assert policy.limits().voice_target == 5


def test_voice_policy_parse_defaults_to_random():
    assert VoicePolicy.parse("CEILING") is VoicePolicy.CEILING
    assert VoicePolicy.parse("whatever") is VoicePolicy.RANDOM
