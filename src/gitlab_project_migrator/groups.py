"""Finding or creating the destination namespace that will own the project."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import partial
from typing import TYPE_CHECKING

from .exceptions import PreconditionError
from .models import Namespace
from .pagination import fetch_all

if TYPE_CHECKING:
    from .protocols import ProjectClient

logger: logging.Logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GroupResolution:
    namespace: Namespace
    created: bool


def namespace_path(project_path: str) -> str:
    """Return the namespace part of a full project path ("a/b/project" -> "a/b")."""
    group_path, sep, project_name = project_path.rpartition("/")
    if not sep or not group_path or not project_name:
        msg = f"Invalid project path '{project_path}': expected <group-path>/<project>"
        raise ValueError(msg)
    return group_path


def _list_groups(client: ProjectClient) -> list[Namespace]:
    rows = fetch_all(partial(client.fetch_page, "groups", ()))
    return [Namespace.from_api(row) for row in rows]


def resolve_group(client: ProjectClient, name: str, path: str) -> GroupResolution:
    """Find the destination group whose full path equals ``path``, creating it if absent.

    A personal (``user`` kind) namespace with that path is reused as well,
    since no group can be created with a username's path. For nested paths the
    parent group must already exist.

    This is not safe against concurrent runs targeting the same path: both may
    see no group and both try to create it. The server's uniqueness check then
    rejects the second create, which surfaces as a TransportError and ends the run.
    """
    logger.info(f"Searching for group with name '{name}' and path '{path}'")

    all_groups = _list_groups(client)
    groups = [g for g in all_groups if g.full_path == path]
    if groups:
        logger.info(f"Existing group '{groups[0].name}' found")
        return GroupResolution(groups[0], created=False)

    rows = fetch_all(partial(client.fetch_page, "namespaces", ()))
    namespaces = [ns for ns in map(Namespace.from_api, rows) if ns.kind == "user" and ns.full_path == path]
    if namespaces:
        namespace = namespaces[0]
        logger.info(f"Existing namespace id '{namespace.id}' path '{namespace.path}' kind '{namespace.kind}'")
        return GroupResolution(namespace, created=False)

    parent_path, _, group_path = path.rpartition("/")
    parent_id: int | None = None
    if parent_path:
        parents = [g for g in all_groups if g.full_path == parent_path]
        if len(parents) != 1:
            msg = f"Parent group '{parent_path}' for '{path}' not found (got {len(parents)} matches)"
            raise PreconditionError(msg)
        parent_id = parents[0].id

    logger.info(f"Group '{name}' does not yet exist, will be created now")
    created = client.create(
        "group",
        (),
        {"name": name, "path": group_path, "parent_id": parent_id, "visibility": "private"},
    )
    return GroupResolution(Namespace.from_api(created), created=True)
