"""
Issue and issue comment migration between GitLab instances.
"""

from __future__ import annotations

import logging
from functools import partial
from typing import TYPE_CHECKING, Any

from .attribution import build_note_body
from .models import Issue, Note
from .pagination import fetch_all
from .stages import ISSUE_NOTES, ISSUES

if TYPE_CHECKING:
    from collections.abc import Mapping

    from .context import MigrationContext

logger: logging.Logger = logging.getLogger(__name__)


def build_issue_attributes(
    issue: Issue,
    identity_map: Mapping[int, int],
    milestone_map: Mapping[int, int],
) -> dict[str, Any]:
    """Translate a source issue into the attributes of the destination create call.

    An assignee without a known destination user is left out rather than guessed.
    """
    assignee_id = identity_map.get(issue.assignee_id) if issue.assignee_id is not None else None
    milestone_id = milestone_map.get(issue.milestone_id) if issue.milestone_id is not None else None
    if issue.milestone_id is not None and milestone_id is None:
        logger.warning(f"Issue #{issue.iid} references milestone {issue.milestone_id} that was not migrated")

    return {
        "title": issue.title,
        "description": issue.description,
        "assignee_id": assignee_id,
        "milestone_id": milestone_id,
        "labels": ",".join(issue.labels),
        "due_date": issue.due_date,
        "created_at": issue.created_at,
        "updated_at": issue.updated_at,
    }


def migrate_issues(ctx: MigrationContext) -> None:
    """Create the source issues in the destination, in ascending source id order, with their comments.

    Issues cannot be created closed; closed ones get a follow-up state transition.
    A failure on any issue stops the run.
    """
    logger.info("Creating issues")
    logger.debug(f"Usermap: {dict(ctx.identity_map)}")
    logger.debug(f"Milestonemap: {dict(ctx.milestone_map)}")

    rows = fetch_all(partial(ctx.source.fetch_page, "issues", (ctx.source_project.id,)))
    issues = sorted(map(Issue.from_api, rows), key=lambda i: i.id)

    for issue in issues:
        created = ISSUES.create(
            ctx.destination,
            (ctx.project.id,),
            build_issue_attributes(issue, ctx.identity_map, ctx.milestone_map),
            source_id=issue.iid,
            stats=ctx.stats,
        )
        assert created is not None  # ABORT policy raises instead
        if issue.is_closed:
            _ = ISSUES.close(ctx.destination, (ctx.project.id,), created["iid"], source_id=issue.iid, stats=ctx.stats)
        migrate_issue_notes(ctx, issue, created["iid"])
        logger.debug(f"Created issue #{created['iid']}: {issue.title}")

    logger.info(f"Issues created: {len(issues)}")


def migrate_issue_notes(ctx: MigrationContext, issue: Issue, destination_iid: int) -> None:
    """Copy the comments of one issue in ascending source id order, so their order is preserved."""
    logger.debug(f"Migrating issue notes for issue #{issue.iid}")
    rows = fetch_all(partial(ctx.source.fetch_page, "issue_notes", (ctx.source_project.id, issue.iid)))
    notes = sorted(map(Note.from_api, rows), key=lambda n: n.id)

    for note in notes:
        _ = ISSUE_NOTES.create(
            ctx.destination,
            (ctx.project.id, destination_iid),
            {"body": build_note_body(note)},
            source_id=f"{note.id} on issue #{issue.iid}",
            stats=ctx.stats,
        )

    logger.debug(f"Migrated {len(notes)} issue notes for issue #{issue.iid}")
