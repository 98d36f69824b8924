"""
Pytest configuration and fixtures.

``FakeGitlab`` is an in-memory ``ProjectClient``: collections are seeded per
(collection, parent ids) and served page by page, and every create and state
transition is recorded in ``calls`` in the order it happened.
"""

from __future__ import annotations

import itertools
from typing import TYPE_CHECKING, Any

import pytest

from gitlab_project_migrator.context import MigrationContext
from gitlab_project_migrator.exceptions import TransportError
from gitlab_project_migrator.models import Project

if TYPE_CHECKING:
    from collections.abc import Callable

SOURCE_PROJECT_ID = 10
DESTINATION_PROJECT_ID = 500


def make_namespace(ns_id: int, path: str, *, kind: str = "group", name: str | None = None) -> dict[str, Any]:
    short_path = path.rpartition("/")[2]
    return {"id": ns_id, "name": name or short_path, "path": short_path, "full_path": path, "kind": kind}


def make_project(
    project_id: int,
    path_with_namespace: str,
    *,
    namespace: dict[str, Any] | None = None,
    visibility: str = "private",
) -> dict[str, Any]:
    group_path, _, path = path_with_namespace.rpartition("/")
    return {
        "id": project_id,
        "name": path.title(),
        "path": path,
        "path_with_namespace": path_with_namespace,
        "namespace": namespace or make_namespace(project_id + 1000, group_path),
        "description": f"{path} description",
        "visibility": visibility,
        "web_url": f"https://gitlab.example.com/{path_with_namespace}",
        "issues_enabled": True,
        "wiki_enabled": False,
    }


def make_user(user_id: int, username: str, name: str | None = None) -> dict[str, Any]:
    return {"id": user_id, "username": username, "name": name or username.title()}


def make_note(note_id: int, username: str, body: str, created_at: str = "2024-01-15T10:30:45.123Z") -> dict[str, Any]:
    return {"id": note_id, "author": {"id": 1, "username": username}, "body": body, "created_at": created_at}


class FakeGitlab:
    """In-memory GitLab instance implementing ``ProjectClient``."""

    def __init__(self) -> None:
        self.collections: dict[tuple[str, tuple[int, ...]], list[dict[str, Any]]] = {}
        self.projects: dict[str | int, dict[str, Any]] = {}
        self.snippet_contents: dict[tuple[int, int], str] = {}
        self.calls: list[tuple[Any, ...]] = []
        self.page_requests: list[tuple[str, tuple[int, ...], int]] = []
        self.fail_when: Callable[[str, dict[str, Any]], bool] | None = None
        self.fail_fetch: set[str] = set()
        self._ids = itertools.count(1000)
        self._iids: dict[int, itertools.count[int]] = {}

    def add(self, collection: str, parent_ids: tuple[int, ...], rows: list[dict[str, Any]]) -> None:
        self.collections.setdefault((collection, parent_ids), []).extend(rows)

    def add_project(self, project: dict[str, Any]) -> None:
        self.projects[project["id"]] = project
        self.projects[project["path_with_namespace"]] = project

    def creates(self, kind: str | None = None) -> list[tuple[Any, ...]]:
        return [c for c in self.calls if c[0] == "create" and (kind is None or c[1] == kind)]

    def transitions(self, kind: str | None = None) -> list[tuple[Any, ...]]:
        return [c for c in self.calls if c[0] == "update_state" and (kind is None or c[1] == kind)]

    def fetch_page(
        self, collection: str, parent_ids: tuple[int, ...], page: int, page_size: int
    ) -> list[dict[str, Any]]:
        self.page_requests.append((collection, parent_ids, page))
        if collection in self.fail_fetch:
            msg = f"Failed to fetch page {page} of {collection}"
            raise TransportError(msg)
        rows = self.collections.get((collection, parent_ids), [])
        start = (page - 1) * page_size
        return [dict(row) for row in rows[start : start + page_size]]

    def create(self, entity_kind: str, parent_ids: tuple[int, ...], attributes: dict[str, Any]) -> dict[str, Any]:
        self.calls.append(("create", entity_kind, parent_ids, dict(attributes)))
        if self.fail_when is not None and self.fail_when(entity_kind, attributes):
            msg = f"Failed to create {entity_kind}: 400 Bad Request"
            raise TransportError(msg)

        record = {key: value for key, value in attributes.items() if value is not None}
        record["id"] = next(self._ids)
        if entity_kind == "issue":
            record["iid"] = next(self._iids.setdefault(parent_ids[0], itertools.count(1)))
        elif entity_kind == "group":
            parent = self._find_namespace(attributes.get("parent_id"))
            record["full_path"] = f"{parent['full_path']}/{attributes['path']}" if parent else attributes["path"]
            self.add("groups", (), [record])
        elif entity_kind == "project":
            namespace = self._find_namespace(attributes["namespace_id"])
            assert namespace is not None
            path_with_namespace = f"{namespace['full_path']}/{attributes['path']}"
            record = make_project(DESTINATION_PROJECT_ID, path_with_namespace, namespace=namespace)
            record["name"] = attributes["name"]
            self.add_project(record)
        return record

    def update_state(self, entity_kind: str, parent_ids: tuple[int, ...], entity_id: int, target_state: str) -> None:
        self.calls.append(("update_state", entity_kind, parent_ids, entity_id, target_state))

    def get_project(self, path_or_id: str | int) -> dict[str, Any] | None:
        return self.projects.get(path_or_id)

    def get_snippet_content(self, project_id: int, snippet_id: int) -> str:
        return self.snippet_contents[(project_id, snippet_id)]

    def _find_namespace(self, ns_id: int | None) -> dict[str, Any] | None:
        for key in (("groups", ()), ("namespaces", ())):
            for row in self.collections.get(key, []):
                if row["id"] == ns_id:
                    return row
        return None


@pytest.fixture
def source() -> FakeGitlab:
    fake = FakeGitlab()
    namespace = make_namespace(7, "old-group", name="Old Group")
    fake.add_project(make_project(SOURCE_PROJECT_ID, "old-group/app", namespace=namespace))
    return fake


@pytest.fixture
def destination() -> FakeGitlab:
    return FakeGitlab()


@pytest.fixture
def ctx(source: FakeGitlab, destination: FakeGitlab) -> MigrationContext:
    """A context whose destination project already exists, as the entity migrators expect."""
    return MigrationContext(
        source=source,
        destination=destination,
        source_project=Project.from_api(source.projects[SOURCE_PROJECT_ID]),
        destination_path="new-group/app",
        destination_project=Project.from_api(make_project(DESTINATION_PROJECT_ID, "new-group/app")),
    )
