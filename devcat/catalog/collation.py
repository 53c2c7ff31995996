"""Collation keys for display names and facet values.

Comparison ignores case and diacritics ("Élan" sorts with "elan"). Strings
that collate equal are ordered by their raw value so sorting stays
deterministic.
"""

from __future__ import annotations

import unicodedata


def fold(value: str) -> str:
    """Case- and accent-folded form of ``value``."""
    decomposed = unicodedata.normalize("NFKD", value)
    stripped = "".join(c for c in decomposed if not unicodedata.combining(c))
    return stripped.casefold()


def collation_key(value: str | None) -> tuple[int, str, str]:
    """Sort key; missing or empty values sort before every present value."""
    if not value:
        return (0, "", "")
    return (1, fold(value), value)
