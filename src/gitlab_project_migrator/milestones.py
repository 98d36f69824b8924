"""
Milestone migration between GitLab instances.
"""

from __future__ import annotations

import logging
from functools import partial
from types import MappingProxyType
from typing import TYPE_CHECKING

from .models import Milestone
from .pagination import fetch_all
from .stages import MILESTONES

if TYPE_CHECKING:
    from collections.abc import Mapping

    from .context import MigrationContext

logger: logging.Logger = logging.getLogger(__name__)


def migrate_milestones(ctx: MigrationContext) -> Mapping[int, int]:
    """Create the source milestones in the destination, in ascending source id order.

    Milestones are later referenced by id, so the mapping from source milestone
    id to destination milestone id is returned. Milestones cannot be created
    closed; closed ones get a follow-up state transition. Any failure stops the
    run, since a missing mapping would silently drop issue milestone links.
    """
    logger.info("Migrating milestones")
    rows = fetch_all(partial(ctx.source.fetch_page, "milestones", (ctx.source_project.id,)))
    milestones = sorted(map(Milestone.from_api, rows), key=lambda m: m.id)

    milestone_map: dict[int, int] = {}
    for milestone in milestones:
        created = MILESTONES.create(
            ctx.destination,
            (ctx.project.id,),
            {"title": milestone.title, "description": milestone.description, "due_date": milestone.due_date},
            source_id=milestone.id,
            stats=ctx.stats,
        )
        assert created is not None  # ABORT policy raises instead
        if milestone.is_closed:
            _ = MILESTONES.close(
                ctx.destination, (ctx.project.id,), created["id"], source_id=milestone.id, stats=ctx.stats
            )
        milestone_map[milestone.id] = created["id"]

    logger.info(f"Milestones migrated, milestone map generated: {milestone_map}")
    return MappingProxyType(milestone_map)
