"""Tests for finding or creating the destination group."""

from __future__ import annotations

import pytest
from conftest import FakeGitlab, make_namespace

from gitlab_project_migrator.exceptions import PreconditionError, TransportError
from gitlab_project_migrator.groups import namespace_path, resolve_group


@pytest.mark.unit
class TestNamespacePath:
    def test_top_level_group(self) -> None:
        assert namespace_path("group/project") == "group"

    def test_nested_group(self) -> None:
        assert namespace_path("a/b/project") == "a/b"

    @pytest.mark.parametrize("path", ["project", "/project", "group/"])
    def test_invalid_path(self, path: str) -> None:
        with pytest.raises(ValueError, match="Invalid project path"):
            namespace_path(path)


@pytest.mark.unit
class TestResolveGroup:
    def test_existing_group_is_reused(self, destination: FakeGitlab) -> None:
        destination.add("groups", (), [make_namespace(1, "other"), make_namespace(2, "team")])

        result = resolve_group(destination, "Team", "team")

        assert result.namespace.id == 2
        assert not result.created
        assert destination.creates() == []

    def test_group_found_beyond_first_page(self, destination: FakeGitlab) -> None:
        destination.add("groups", (), [make_namespace(i, f"group-{i}") for i in range(1, 31)])

        result = resolve_group(destination, "Group 25", "group-25")

        assert result.namespace.id == 25
        assert [p for c, _, p in destination.page_requests if c == "groups"] == [1, 2]

    def test_match_is_on_path_not_name(self, destination: FakeGitlab) -> None:
        destination.add("groups", (), [make_namespace(1, "team-x", name="Team")])

        result = resolve_group(destination, "Team", "team")

        assert result.created
        assert destination.creates("group")[0][3]["path"] == "team"

    def test_user_namespace_is_reused(self, destination: FakeGitlab) -> None:
        destination.add("namespaces", (), [make_namespace(5, "alice", kind="user")])

        result = resolve_group(destination, "alice", "alice")

        assert result.namespace.id == 5
        assert result.namespace.kind == "user"
        assert destination.creates() == []

    def test_group_created_when_absent(self, destination: FakeGitlab) -> None:
        destination.add("groups", (), [make_namespace(1, "other")])

        result = resolve_group(destination, "Team", "team")

        assert result.created
        assert result.namespace.full_path == "team"
        (call,) = destination.creates("group")
        assert call[3] == {"name": "Team", "path": "team", "parent_id": None, "visibility": "private"}

    def test_nested_group_created_under_parent(self, destination: FakeGitlab) -> None:
        destination.add("groups", (), [make_namespace(1, "org")])

        result = resolve_group(destination, "Team", "org/team")

        assert result.created
        assert result.namespace.full_path == "org/team"
        assert destination.creates("group")[0][3]["parent_id"] == 1

    def test_nested_group_without_parent(self, destination: FakeGitlab) -> None:
        with pytest.raises(PreconditionError, match="Parent group 'org'"):
            resolve_group(destination, "Team", "org/team")
        assert destination.creates() == []

    def test_create_conflict_is_fatal(self, destination: FakeGitlab) -> None:
        destination.fail_when = lambda kind, _attrs: kind == "group"

        with pytest.raises(TransportError):
            resolve_group(destination, "Team", "team")

    def test_lookup_failure_aborts(self, destination: FakeGitlab) -> None:
        destination.fail_fetch.add("groups")

        with pytest.raises(TransportError):
            resolve_group(destination, "Team", "team")
        assert destination.creates() == []
