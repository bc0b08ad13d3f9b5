"""Built-in corrections for titles the category catalog lists under another name."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable


@dataclass(frozen=True)
class OverrideEntry:
    """Maps a reported game title to the category name used for search."""

    title_pattern: str
    category_name: str

    def matches(self, title: str) -> bool:
        """Return whether the title equals the pattern, ignoring case and padding."""

        return title.strip().casefold() == self.title_pattern.strip().casefold()


JACKBOX_FAMILY = "Jackbox Party Packs"

DEFAULT_CATEGORY_OVERRIDES: tuple[OverrideEntry, ...] = (
    OverrideEntry(title_pattern="The Jackbox Party Pack", category_name=JACKBOX_FAMILY),
    *(
        OverrideEntry(
            title_pattern=f"The Jackbox Party Pack {number}",
            category_name=JACKBOX_FAMILY,
        )
        for number in range(2, 11)
    ),
    *(
        OverrideEntry(
            title_pattern=f"Jackbox Party Pack {number}",
            category_name=JACKBOX_FAMILY,
        )
        for number in range(1, 11)
    ),
    OverrideEntry(title_pattern="The Jackbox Party Starter", category_name=JACKBOX_FAMILY),
    OverrideEntry(title_pattern="The Jackbox Naughty Pack", category_name=JACKBOX_FAMILY),
    OverrideEntry(title_pattern="The Jackbox Survey Scramble", category_name=JACKBOX_FAMILY),
)


def find_override(
    title: str, entries: Iterable[OverrideEntry]
) -> OverrideEntry | None:
    """Return the first override entry matching the title."""

    for entry in entries:
        if entry.matches(title):
            return entry
    return None
