from __future__ import annotations

import pytest

from serverforge.structure.fallback import DEFAULT_FLAVOR, fallback_structure, pick_flavor, theme_slug


@pytest.mark.parametrize("theme,slug", [
    ("Retro Gaming Club!", "retro-gaming-club"),
    ("   ", "community"),
    ("", "community"),
    ("a very long theme name that keeps going", "a-very-long-theme-name-t"),
    ("日本語", "community"),
])
def test_theme_slug(theme, slug):
    assert theme_slug(theme) == slug


def test_pick_flavor_by_keyword():
    assert pick_flavor("competitive gaming crew").member_role == "Gamer"
    assert pick_flavor("lofi music producers").emoji == "🎵"
    assert pick_flavor("knitting circle") is DEFAULT_FLAVOR


def test_pick_flavor_matches_whole_words_only():
    # "heart" contains "art" but is not an art theme
    assert pick_flavor("heart health") is DEFAULT_FLAVOR


@pytest.mark.parametrize("theme", ["", "gaming", "x" * 300, "🍕 pizza lovers", "anime & manga"])
def test_fallback_structure_is_always_valid(theme):
    structure = fallback_structure(theme)
    assert structure.categories
    assert structure.roles
    assert structure.channel_count <= 20
    assert structure.voice_count >= 1
    assert all(c.name for c in structure.categories)
    assert all(ch.name for c in structure.categories for ch in c.channels)


def test_fallback_structure_is_deterministic_and_themed():
    first = fallback_structure("gaming tournaments")
    assert first == fallback_structure("gaming tournaments")
    assert any("gaming-tournaments" in c.name for c in first.categories)
    assert [r.name for r in first.roles] == ["Admin", "Moderator", "Gamer"]
