"""Utility helpers for the ExtraLife helper service."""

from __future__ import annotations


BODY_PREVIEW_LIMIT = 200


def normalize_title(value: str) -> str:
    """Lower-case and trim a title for comparison."""

    return value.lower().strip()


def truncate_text(value: str, limit: int = BODY_PREVIEW_LIMIT) -> str:
    """Return at most ``limit`` characters, marking truncation with an ellipsis."""

    if len(value) <= limit:
        return value
    return value[:limit] + "..."


def mask_identifier(value: str | None, visible: int = 8) -> str:
    """Return a log-safe prefix of a client identifier."""

    if not value:
        return "undefined"
    return value[:visible] + "..."


def is_whole_word_match(needle: str, haystack: str) -> bool:
    """Return whether ``needle`` occurs in ``haystack`` bounded by non-alphanumerics.

    Both ends of every occurrence are checked, so punctuation such as ``:``,
    ``-`` or parentheses inside the needle is matched literally.
    """

    if not needle:
        return False
    start = haystack.find(needle)
    while start != -1:
        end = start + len(needle)
        before_ok = start == 0 or not haystack[start - 1].isalnum()
        after_ok = end == len(haystack) or not haystack[end].isalnum()
        if before_ok and after_ok:
            return True
        start = haystack.find(needle, start + 1)
    return False
