"""Build comment bodies that credit the original author.

The destination cannot create notes on behalf of another user or backdate
them, so every migrated note starts with a visible attribution line.
"""

from __future__ import annotations

import datetime as dt
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import Note

ATTRIBUTION_TIMESTAMP_FORMAT = "%d %b %Y, %H:%M"


def format_timestamp(iso_timestamp: str) -> str:
    """Format ISO 8601 timestamp as day, abbreviated month, year and time.

    Args:
        iso_timestamp: ISO 8601 formatted timestamp string

    Returns:
        Formatted timestamp (e.g., "15 Jan 2024, 10:30") in the timestamp's own offset.
        Returns original value if parsing fails.
    """
    if not iso_timestamp:
        return iso_timestamp

    try:
        return dt.datetime.fromisoformat(iso_timestamp).strftime(ATTRIBUTION_TIMESTAMP_FORMAT)
    except (ValueError, AttributeError):
        return iso_timestamp


def build_note_body(note: Note) -> str:
    """Prefix the note body with the original author and creation time."""
    body = f"_Original comment by {note.author_username} on {format_timestamp(note.created_at)}_\n\n"
    body += "---\n\n"
    body += note.body
    return body
