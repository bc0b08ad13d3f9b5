"""Select the catalog category that best fits a reported game title."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Sequence

from ..errors import InvalidArgumentError
from ..models import CatalogCandidate
from ..utils import is_whole_word_match, normalize_title


class MatchKind(str, Enum):
    """Which rule selected a candidate, strongest first."""

    EXACT = "exact"
    CANDIDATE_EXTENDS_TARGET = "candidate_extends_target"
    TARGET_EXTENDS_CANDIDATE = "target_extends_candidate"
    WHOLE_WORD = "whole_word"
    CHARACTER_SUBSET = "character_subset"
    FALLBACK = "fallback"


@dataclass(frozen=True, slots=True)
class CategoryMatch:
    candidate: CatalogCandidate
    kind: MatchKind

    @property
    def is_fallback(self) -> bool:
        return self.kind is MatchKind.FALLBACK


def _exact(target: str, name: str) -> bool:
    return name == target


def _candidate_extends_target(target: str, name: str) -> bool:
    return bool(target) and name.startswith(target)


def _target_extends_candidate(target: str, name: str) -> bool:
    return bool(name) and target.startswith(name)


def _whole_word(target: str, name: str) -> bool:
    return is_whole_word_match(target, name) or is_whole_word_match(name, target)


def _character_subset(target: str, name: str) -> bool:
    # Each character is looked up on its own, so repeats need not repeat in target.
    return bool(name) and len(name) <= len(target) and all(char in target for char in name)


_TIERS: tuple[tuple[MatchKind, Callable[[str, str], bool]], ...] = (
    (MatchKind.EXACT, _exact),
    (MatchKind.CANDIDATE_EXTENDS_TARGET, _candidate_extends_target),
    (MatchKind.TARGET_EXTENDS_CANDIDATE, _target_extends_candidate),
    (MatchKind.WHOLE_WORD, _whole_word),
    (MatchKind.CHARACTER_SUBSET, _character_subset),
)


def resolve_match(
    target_title: str, candidates: Sequence[CatalogCandidate] | None
) -> CategoryMatch | None:
    """Apply the tiered rules and report which one picked the candidate.

    Tiers are evaluated in order and the first candidate satisfying the first
    successful tier wins. When nothing qualifies the first candidate is
    returned tagged as ``FALLBACK``; an empty candidate list yields ``None``.
    """

    if target_title is None:
        raise InvalidArgumentError("target_title must be a string, not None")
    if not isinstance(target_title, str):
        raise InvalidArgumentError(
            f"target_title must be a string, not {type(target_title).__name__}"
        )
    if not candidates:
        return None

    target = normalize_title(target_title)
    names = [normalize_title(candidate.name) for candidate in candidates]

    for kind, rule in _TIERS:
        for candidate, name in zip(candidates, names):
            if rule(target, name):
                return CategoryMatch(candidate=candidate, kind=kind)

    return CategoryMatch(candidate=candidates[0], kind=MatchKind.FALLBACK)


def find_best_match(
    target_title: str, candidates: Sequence[CatalogCandidate] | None
) -> CatalogCandidate | None:
    """Return the best candidate for the title, or ``None`` when there are none."""

    match = resolve_match(target_title, candidates)
    return match.candidate if match else None
