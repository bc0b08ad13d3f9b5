"""Tests for the tiered category matching rules."""

from __future__ import annotations

import pytest

from app.errors import InvalidArgumentError
from app.models import CatalogCandidate
from app.services.category_matching import (
    MatchKind,
    find_best_match,
    resolve_match,
)


def _candidates(*names: str) -> list[CatalogCandidate]:
    return [CatalogCandidate(id=str(index + 1), name=name) for index, name in enumerate(names)]


SAMPLE = _candidates(
    "Balrog Sampler",
    "Baltron",
    "Ballotron Oceans",
    "Ball Rows",
    "Balatro",
    "Balavour",
)


def test_exact_match_ignores_case() -> None:
    assert find_best_match("BALATRO", SAMPLE).name == "Balatro"


def test_exact_match_beats_longer_titles_listed_first() -> None:
    candidates = _candidates("Minecraft Dungeons", "Minecraft")

    match = resolve_match("Minecraft", candidates)

    assert match is not None
    assert match.candidate.name == "Minecraft"
    assert match.kind is MatchKind.EXACT


def test_candidate_extending_target_uses_input_order() -> None:
    candidates = _candidates("Super Mario Bros", "Mario Kart", "Mario Party")

    match = resolve_match("Mario", candidates)

    assert match.candidate.name == "Mario Kart"
    assert match.kind is MatchKind.CANDIDATE_EXTENDS_TARGET


def test_first_prefix_candidate_wins() -> None:
    assert find_best_match("Bal", SAMPLE).name == "Balrog Sampler"


def test_target_extending_candidate() -> None:
    candidates = _candidates("Minecraft", "Terraria")

    match = resolve_match("Minecraft Dungeons", candidates)

    assert match.candidate.name == "Minecraft"
    assert match.kind is MatchKind.TARGET_EXTENDS_CANDIDATE


def test_abbreviation_candidates_resolve_to_first_listed() -> None:
    assert find_best_match("World of Warcraft", _candidates("WoW", "LoL")).name == "WoW"
    assert (
        find_best_match("Call of Duty: Modern Warfare", _candidates("CoD", "PUBG", "GTA")).name
        == "CoD"
    )
    assert (
        find_best_match("LEAGUE OF LEGENDS: WILD RIFT", _candidates("lol", "wow", "dota")).name
        == "lol"
    )


def test_whole_word_match_when_no_prefix_applies() -> None:
    candidates = _candidates(
        "Gaming Adventure Quest", "Super Mario World", "Exciting Zelda Adventure"
    )

    match = resolve_match("Mario", candidates)

    assert match.candidate.name == "Super Mario World"
    assert match.kind is MatchKind.WHOLE_WORD


def test_whole_word_match_handles_punctuation_in_candidate() -> None:
    candidates = _candidates("Warhammer: Chaosbane", "Modern Warfare")

    match = resolve_match("Call of Duty: Modern Warfare", candidates)

    assert match.candidate.name == "Modern Warfare"
    assert match.kind is MatchKind.WHOLE_WORD


def test_whole_word_match_rejects_partial_words() -> None:
    candidates = _candidates("Supermarioland", "Smariott")

    match = resolve_match("Mario", candidates)

    assert match.kind is MatchKind.FALLBACK
    assert match.candidate.name == "Supermarioland"


def test_prefix_tier_wins_over_whole_word_tier() -> None:
    candidates = _candidates("Another Gaming Test", "Testing Game Extended", "Game Test 2")

    assert find_best_match("Test", candidates).name == "Testing Game Extended"


def test_exact_tier_wins_over_everything() -> None:
    candidates = _candidates(
        "Starting with Test Game", "Test", "Game with Test word", "ts", "xyz"
    )

    assert find_best_match("Test", candidates).name == "Test"


def test_character_subset_counts_each_character_individually() -> None:
    match = resolve_match("banana", _candidates("aab", "xyz"))

    assert match.candidate.name == "aab"
    assert match.kind is MatchKind.CHARACTER_SUBSET


def test_character_subset_requires_candidate_not_longer_than_target() -> None:
    match = resolve_match("abc", _candidates("verylongname", "short"))

    assert match.candidate.name == "verylongname"
    assert match.kind is MatchKind.FALLBACK


def test_fallback_returns_first_candidate() -> None:
    match = resolve_match("NonExistentGame", SAMPLE)

    assert match.candidate.name == "Balrog Sampler"
    assert match.is_fallback is True


def test_empty_target_falls_back_to_first_candidate() -> None:
    match = resolve_match("", _candidates("Test Game", "Other"))

    assert match.candidate.name == "Test Game"
    assert match.kind is MatchKind.FALLBACK


def test_whitespace_is_trimmed_but_original_candidate_returned() -> None:
    candidates = _candidates("  Spaced Game  ", "Another Game")

    assert find_best_match("  spaced game  ", candidates).name == "  Spaced Game  "


def test_special_characters_match_literally() -> None:
    candidates = _candidates("Game [HD]", "Game (Remastered)", "Game {Special}")

    assert find_best_match("Game (Remastered)", candidates).name == "Game (Remastered)"


@pytest.mark.parametrize("candidates", [[], None])
def test_no_candidates_returns_none(candidates) -> None:
    assert find_best_match("Balatro", candidates) is None
    assert resolve_match("Balatro", candidates) is None


def test_none_target_is_rejected() -> None:
    with pytest.raises(InvalidArgumentError):
        find_best_match(None, _candidates("Test"))  # type: ignore[arg-type]


def test_matching_is_deterministic() -> None:
    first = resolve_match("Ball", SAMPLE)
    second = resolve_match("Ball", SAMPLE)

    assert first == second
    assert first.candidate.name == "Ballotron Oceans"
