"""Deploy key migration between GitLab instances."""

from __future__ import annotations

import logging
from functools import partial
from typing import TYPE_CHECKING

from .models import DeployKey
from .pagination import fetch_all
from .stages import DEPLOY_KEYS

if TYPE_CHECKING:
    from .context import MigrationContext

logger: logging.Logger = logging.getLogger(__name__)


def migrate_deploy_keys(ctx: MigrationContext) -> None:
    logger.info("Creating deploy keys")
    rows = fetch_all(partial(ctx.source.fetch_page, "deploy_keys", (ctx.source_project.id,)))

    for key in map(DeployKey.from_api, rows):
        _ = DEPLOY_KEYS.create(
            ctx.destination,
            (ctx.project.id,),
            {"title": key.title, "key": key.key, "can_push": key.can_push},
            source_id=key.title,
            stats=ctx.stats,
        )

    logger.info(f"Deploy keys created: {ctx.stats.created[DEPLOY_KEYS.entity_kind]} of {len(rows)}")
