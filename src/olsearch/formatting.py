"""Rendering of search entries as single display lines."""

from __future__ import annotations

from olsearch.models import Entry

AUTHOR_FALLBACK = "Автор не указан"
YEAR_FALLBACK = "?"


def format_entry(entry: Entry) -> str:
    """Render *entry* as ``"<title> — <authors> (<year>)"``.

    Absent or empty authors become :data:`AUTHOR_FALLBACK`, an absent year
    becomes :data:`YEAR_FALLBACK`. The title has no fallback: an absent title
    renders as empty text.
    """
    authors = ", ".join(entry.authors) if entry.authors else AUTHOR_FALLBACK
    year = YEAR_FALLBACK if entry.first_publish_year is None else str(entry.first_publish_year)
    title = entry.title if entry.title is not None else ""
    return f"{title} — {authors} ({year})"
