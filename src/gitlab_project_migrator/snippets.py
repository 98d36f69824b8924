"""
Snippet and snippet comment migration between GitLab instances.
"""

from __future__ import annotations

import logging
import re
from functools import partial
from typing import TYPE_CHECKING

from .attribution import build_note_body
from .exceptions import TransportError
from .models import Note, Snippet
from .pagination import fetch_all
from .stages import SNIPPET_NOTES, SNIPPETS

if TYPE_CHECKING:
    from .context import MigrationContext

logger: logging.Logger = logging.getLogger(__name__)

# GitLab only accepts letters, digits, '_', '-', '@' and '.' in snippet file names
_INVALID_FILE_NAME_CHARS = re.compile(r"[^A-Za-z0-9_\-@.]")


def snippet_file_name(snippet: Snippet) -> str:
    """Return the snippet's file name, deriving one from title and id when it has none."""
    if snippet.file_name:
        return snippet.file_name
    return f"{_INVALID_FILE_NAME_CHARS.sub('', snippet.title)}.{snippet.id}"


def migrate_snippets(ctx: MigrationContext) -> None:
    logger.info("Migrating snippets")
    rows = fetch_all(partial(ctx.source.fetch_page, "snippets", (ctx.source_project.id,)))

    for snippet in map(Snippet.from_api, rows):
        logger.debug(f"Snippet: '{snippet.title}'")
        try:
            content = ctx.source.get_snippet_content(ctx.source_project.id, snippet.id)
        except TransportError as e:
            SNIPPETS.fail(snippet.id, e, ctx.stats)
            continue

        created = SNIPPETS.create(
            ctx.destination,
            (ctx.project.id,),
            {
                "title": snippet.title,
                "file_name": snippet_file_name(snippet),
                "content": content,
                "visibility": snippet.visibility,
            },
            source_id=snippet.id,
            stats=ctx.stats,
        )
        if created is not None:
            migrate_snippet_notes(ctx, snippet, created["id"])

    logger.info(f"Snippets migrated: {ctx.stats.created[SNIPPETS.entity_kind]} of {len(rows)}")


def migrate_snippet_notes(ctx: MigrationContext, snippet: Snippet, destination_id: int) -> None:
    logger.debug(f"Migrating snippet notes for snippet {snippet.id}")
    rows = fetch_all(partial(ctx.source.fetch_page, "snippet_notes", (ctx.source_project.id, snippet.id)))

    for note in sorted(map(Note.from_api, rows), key=lambda n: n.id):
        _ = SNIPPET_NOTES.create(
            ctx.destination,
            (ctx.project.id, destination_id),
            {"body": build_note_body(note)},
            source_id=f"{note.id} on snippet {snippet.id}",
            stats=ctx.stats,
        )
