"""Seeding a newly created destination group with the source group's members."""

from __future__ import annotations

import logging
from functools import partial
from typing import TYPE_CHECKING

from .models import Member
from .pagination import fetch_all
from .stages import GROUP_MEMBERS

if TYPE_CHECKING:
    from .context import MigrationContext

logger: logging.Logger = logging.getLogger(__name__)


def migrate_group_members(ctx: MigrationContext) -> None:
    """Add the source group's members to the destination group with their access level.

    Only members with a destination identity are added. The user mapping is a
    heuristic, so users must already exist in the destination with a matching
    name or username.
    """
    source_namespace = ctx.source_project.namespace
    if source_namespace.kind != "group":
        logger.info(f"Source namespace {source_namespace.full_path} is not a group, no members to copy")
        return

    logger.info(f"Copying members of {source_namespace.full_path} to {ctx.group.full_path}")
    rows = fetch_all(partial(ctx.source.fetch_page, "group_members", (source_namespace.id,)))

    for member in map(Member.from_api, rows):
        user_id = ctx.identity_map.get(member.id)
        if user_id is None:
            logger.debug(f"Skipping group member {member.username}: no destination user")
            continue
        _ = GROUP_MEMBERS.create(
            ctx.destination,
            (ctx.group.id,),
            {"user_id": user_id, "access_level": member.access_level},
            source_id=member.username,
            stats=ctx.stats,
        )

    logger.info(f"Group members added: {ctx.stats.created[GROUP_MEMBERS.entity_kind]}")
