"""Locale-style string ordering shared by aggregation and chart sorting."""

from __future__ import annotations

import unicodedata


def _strip_marks(text: str) -> str:
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def text_sort_key(text: str) -> tuple[str, str, str, str]:
    """Return a deterministic, locale-style sort key for a string.

    Strings compare first ignoring accents and case, then by accents, and
    then lowercase before uppercase. The key does not depend on the
    process locale, so ordering is identical on every host.

    Args:
        text: String to order.

    Returns:
        A tuple usable as a `sorted(..., key=...)` key.
    """

    folded = text.casefold()
    return (_strip_marks(folded), unicodedata.normalize("NFKD", folded), text.swapcase(), text)
