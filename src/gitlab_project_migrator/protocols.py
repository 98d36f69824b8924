"""Protocol defining the contract the migration pipeline needs from a GitLab instance.

The pipeline never talks HTTP itself. It reads pages of collections, creates
entities and closes milestones/issues through an object implementing
``ProjectClient``. ``gitlab_utils.GitlabClient`` is the python-gitlab backed
implementation; tests use an in-memory one.

Collections and entity kinds are identified by name. ``parent_ids`` scopes the
request, e.g. ``(project_id,)`` for labels or ``(project_id, issue_iid)`` for
issue notes.
"""

from __future__ import annotations

from typing import Any, Protocol


class ProjectClient(Protocol):
    """Read and write access to one GitLab instance."""

    def fetch_page(
        self,
        collection: str,
        parent_ids: tuple[int, ...],
        page: int,
        page_size: int,
    ) -> list[dict[str, Any]]:
        """Return one page of ``collection``.

        Raises:
            TransportError: If the request fails
        """
        ...

    def create(
        self,
        entity_kind: str,
        parent_ids: tuple[int, ...],
        attributes: dict[str, Any],
    ) -> dict[str, Any]:
        """Create an entity and return the record the server sent back.

        Raises:
            TransportError: If the request fails
        """
        ...

    def update_state(
        self,
        entity_kind: str,
        parent_ids: tuple[int, ...],
        entity_id: int,
        target_state: str,
    ) -> None:
        """Transition a milestone or issue to ``target_state`` (only ``closed`` is used).

        Raises:
            TransportError: If the request fails
        """
        ...

    def get_project(self, path_or_id: str | int) -> dict[str, Any] | None:
        """Return a project by full path or id, or None if it does not exist."""
        ...

    def get_snippet_content(self, project_id: int, snippet_id: int) -> str:
        """Return the raw content of a project snippet."""
        ...
