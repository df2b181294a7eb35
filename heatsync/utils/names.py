"""Swimmer name canonicalization.

Names arrive as free text in either "First Last" or "Last, First" form, and
the model may echo them back in either form. Both cache keys and the
post-extraction filter compare names only through this module.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class NormalizedName:
    """Both canonical renderings of a swimmer name."""

    first_last: str
    last_first: str

    @property
    def cache_key(self) -> str:
        """Case-folded "First Last" form used as the extraction cache key."""
        return self.first_last.casefold()


def normalize_swimmer_name(name: str) -> NormalizedName:
    """Canonicalize a human-entered swimmer name.

    "Smith, John" and "John Smith" both yield
    NormalizedName(first_last="John Smith", last_first="Smith, John").
    Multi-word first names are kept together ("Mary Ann Smith" ->
    "Smith, Mary Ann"); a single token is used verbatim for both forms.
    """
    trimmed = " ".join(name.split())

    if "," in trimmed:
        # Anything after a second comma ("Smith, John, Jr.") is a suffix.
        last, first = (part.strip() for part in trimmed.split(",")[:2])
        if not first or not last:
            single = first or last
            return NormalizedName(first_last=single, last_first=single)
        return NormalizedName(first_last=f"{first} {last}", last_first=f"{last}, {first}")

    parts = trimmed.split(" ")
    if len(parts) >= 2:
        first = " ".join(parts[:-1])
        last = parts[-1]
        return NormalizedName(first_last=trimmed, last_first=f"{last}, {first}")

    return NormalizedName(first_last=trimmed, last_first=trimmed)


def names_match(a: str, b: str) -> bool:
    """True when two free-text names refer to the same swimmer."""
    return normalize_swimmer_name(a).cache_key == normalize_swimmer_name(b).cache_key
