"""Records read from and written to the GitLab REST API.

The transport client hands out plain JSON dictionaries. The migrators convert
them into these dataclasses at the point of reading, so that the pipeline only
depends on the handful of attributes it actually uses and tests can build
records without a GitLab instance.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Self

CLOSED_STATE = "closed"

PROJECT_FEATURE_FLAGS: tuple[str, ...] = (
    "issues_enabled",
    "merge_requests_enabled",
    "wiki_enabled",
    "snippets_enabled",
)


def _nested_id(data: dict[str, Any], key: str) -> int | None:
    """Return ``data[key]["id"]`` for optional embedded objects like ``assignee``."""
    nested = data.get(key)
    if not nested:
        return None
    return nested.get("id")


@dataclass(frozen=True)
class Namespace:
    """A group or personal namespace that can own projects."""

    id: int
    name: str
    path: str
    full_path: str
    kind: str = "group"  # "group" or "user"

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Self:
        return cls(
            id=data["id"],
            name=data.get("name") or data["path"],
            path=data["path"],
            full_path=data.get("full_path") or data["path"],
            kind=data.get("kind", "group"),
        )


@dataclass(frozen=True)
class User:
    id: int
    username: str
    name: str

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Self:
        return cls(id=data["id"], username=data["username"], name=data.get("name", ""))


@dataclass(frozen=True)
class Member:
    """A group membership: a user plus its access level in that group."""

    id: int
    username: str
    access_level: int

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Self:
        return cls(id=data["id"], username=data["username"], access_level=data["access_level"])


@dataclass(frozen=True)
class Label:
    name: str
    color: str  # Hex color including '#' prefix, as GitLab returns it
    description: str = ""

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Self:
        return cls(name=data["name"], color=data["color"], description=data.get("description") or "")


@dataclass(frozen=True)
class Milestone:
    """A project milestone.

    GitLab reports open milestones as ``active``; only ``closed`` matters here.
    """

    id: int
    iid: int
    title: str
    description: str = ""
    due_date: str | None = None
    state: str = "active"

    @property
    def is_closed(self) -> bool:
        return self.state == CLOSED_STATE

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Self:
        return cls(
            id=data["id"],
            iid=data.get("iid", data["id"]),
            title=data["title"],
            description=data.get("description") or "",
            due_date=data.get("due_date"),
            state=data.get("state", "active"),
        )


@dataclass(frozen=True)
class Issue:
    """A project issue.

    ``id`` is instance-wide and drives ordering; ``iid`` is the project-scoped
    number used in every issue URL, including notes and state transitions.
    """

    id: int
    iid: int
    title: str
    description: str = ""
    state: str = "opened"
    labels: tuple[str, ...] = field(default_factory=tuple)
    assignee_id: int | None = None
    milestone_id: int | None = None
    due_date: str | None = None
    created_at: str | None = None
    updated_at: str | None = None

    @property
    def is_closed(self) -> bool:
        return self.state == CLOSED_STATE

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Self:
        return cls(
            id=data["id"],
            iid=data["iid"],
            title=data["title"],
            description=data.get("description") or "",
            state=data.get("state", "opened"),
            labels=tuple(data.get("labels") or ()),
            assignee_id=_nested_id(data, "assignee"),
            milestone_id=_nested_id(data, "milestone"),
            due_date=data.get("due_date"),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )


@dataclass(frozen=True)
class Note:
    """A comment on an issue or snippet."""

    id: int
    author_username: str
    body: str
    created_at: str
    system: bool = False

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Self:
        author = data.get("author") or {}
        return cls(
            id=data["id"],
            author_username=author.get("username", "unknown"),
            body=data.get("body") or "",
            created_at=data["created_at"],
            system=bool(data.get("system", False)),
        )


@dataclass(frozen=True)
class Snippet:
    id: int
    title: str
    file_name: str = ""
    visibility: str = "private"

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Self:
        return cls(
            id=data["id"],
            title=data["title"],
            file_name=data.get("file_name") or "",
            visibility=data.get("visibility") or "private",
        )


@dataclass(frozen=True)
class DeployKey:
    title: str
    key: str
    can_push: bool = False

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Self:
        return cls(title=data["title"], key=data["key"], can_push=bool(data.get("can_push", False)))


@dataclass(frozen=True)
class Project:
    """A project on either instance."""

    id: int
    name: str
    path: str
    path_with_namespace: str
    namespace: Namespace
    description: str = ""
    visibility: str = "private"
    web_url: str = ""
    features: dict[str, bool] = field(default_factory=dict)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Self:
        return cls(
            id=data["id"],
            name=data["name"],
            path=data["path"],
            path_with_namespace=data["path_with_namespace"],
            namespace=Namespace.from_api(data["namespace"]),
            description=data.get("description") or "",
            visibility=data.get("visibility", "private"),
            web_url=data.get("web_url", ""),
            features={flag: bool(data[flag]) for flag in PROJECT_FEATURE_FLAGS if flag in data},
        )
