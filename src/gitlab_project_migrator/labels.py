"""
Label migration between GitLab instances.
"""

from __future__ import annotations

import logging
from functools import partial
from typing import TYPE_CHECKING

from .models import Label
from .pagination import fetch_all
from .stages import LABELS

if TYPE_CHECKING:
    from .context import MigrationContext

logger: logging.Logger = logging.getLogger(__name__)


def migrate_labels(ctx: MigrationContext) -> None:
    """Create every source project label in the destination project.

    Issues reference labels by name, so no id mapping is kept. A label that
    fails to be created is reported and the remaining labels are still migrated.
    """
    logger.info("Creating labels")
    rows = fetch_all(partial(ctx.source.fetch_page, "labels", (ctx.source_project.id,)))

    for label in map(Label.from_api, rows):
        _ = LABELS.create(
            ctx.destination,
            (ctx.project.id,),
            {"name": label.name, "color": label.color, "description": label.description or None},
            source_id=label.name,
            stats=ctx.stats,
        )

    logger.info(f"Labels created: {ctx.stats.created[LABELS.entity_kind]} of {len(rows)}")
