"""File-name helpers for dashboard titles and export names."""

from __future__ import annotations

import re


def file_name_without_extension(file_name: str) -> str:
    """Strip the last extension from a file name.

    `"my-data.xlsx"` becomes `"my-data"`. Names whose stem would be empty
    (`".csv"`) or that have no dot are returned unchanged.
    """

    stem, dot, _ = file_name.rpartition(".")
    if not dot or not stem:
        return file_name
    return stem


def safe_file_name(title: str, fallback: str = "file") -> str:
    """Return a lowercase name with every non-alphanumeric character replaced by `_`."""

    return re.sub(r"[^a-z0-9]", "_", title, flags=re.IGNORECASE).lower() or fallback
