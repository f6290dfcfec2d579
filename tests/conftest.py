from __future__ import annotations

import random

import pytest

from serverforge.structure.quotas import QuotaPolicy, VoicePolicy
from serverforge.structure.generator import GenerationOptions
from serverforge.testing.fakes import FakeGuild


@pytest.fixture
def guild() -> FakeGuild:
    return FakeGuild()


@pytest.fixture
def options() -> GenerationOptions:
    # Fixed voice target and no enhancement call, so replies map 1:1 to prompts.
    return GenerationOptions(
        enhance_enabled=False,
        quotas=QuotaPolicy(max_channels=20, min_voice=1, max_voice=3, voice_policy=VoicePolicy.CEILING),
    )


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)
