"""Loading the source project and finding or creating the destination project."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .exceptions import PreconditionError
from .models import Project

if TYPE_CHECKING:
    from .models import Namespace
    from .protocols import ProjectClient

logger: logging.Logger = logging.getLogger(__name__)

REQUIRED_VISIBILITY = "private"


def load_source_project(client: ProjectClient, path_or_id: str | int) -> Project:
    data = client.get_project(path_or_id)
    if data is None:
        msg = f"Source project {path_or_id} not found"
        raise PreconditionError(msg)
    return Project.from_api(data)


def find_destination_project(client: ProjectClient, project_path: str) -> Project | None:
    """Return the existing destination project, after checking it is safe to migrate into."""
    data = client.get_project(project_path)
    if data is None:
        logger.debug(f"Destination project {project_path} does not exist yet")
        return None

    project = Project.from_api(data)
    logger.info(f"Found existing destination project {project.path_with_namespace} (id {project.id})")
    # Sanity check
    if project.visibility != REQUIRED_VISIBILITY:
        msg = f"Project not private: {project.path_with_namespace} has visibility '{project.visibility}'"
        raise PreconditionError(msg)
    return project


def create_destination_project(
    client: ProjectClient,
    source_project: Project,
    namespace: Namespace,
    project_path: str,
) -> Project:
    """Create a private project in ``namespace`` mirroring the source project's settings."""
    path = project_path.rpartition("/")[2]
    logger.info(f"Creating project {project_path} in namespace {namespace.full_path}")
    attributes = {
        "name": source_project.name,
        "path": path,
        "namespace_id": namespace.id,
        "description": source_project.description,
        "visibility": REQUIRED_VISIBILITY,
        **source_project.features,
    }
    project = Project.from_api(client.create("project", (), attributes))
    logger.info(f"Created project {project.path_with_namespace} (id {project.id})")
    return project
