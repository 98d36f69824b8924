from __future__ import annotations

import pytest
from conftest import DESTINATION_PROJECT_ID, SOURCE_PROJECT_ID, FakeGitlab, make_note

from gitlab_project_migrator.context import MigrationContext
from gitlab_project_migrator.models import Snippet
from gitlab_project_migrator.snippets import migrate_snippets, snippet_file_name


@pytest.mark.unit
class TestSnippetFileName:
    def test_existing_file_name(self) -> None:
        assert snippet_file_name(Snippet(3, "Build script", "build.sh")) == "build.sh"

    def test_derived_from_title_and_id(self) -> None:
        assert snippet_file_name(Snippet(3, "Build script", "")) == "Buildscript.3"

    def test_derived_name_drops_invalid_characters(self) -> None:
        assert snippet_file_name(Snippet(12, "Fix: löad/save (v2)", "")) == "Fixladsavev2.12"


@pytest.mark.unit
class TestMigrateSnippets:
    def test_snippet_with_notes(self, ctx: MigrationContext, source: FakeGitlab, destination: FakeGitlab) -> None:
        source.add("snippets", (SOURCE_PROJECT_ID,), [{"id": 3, "title": "Setup", "file_name": "setup.sh"}])
        source.snippet_contents[(SOURCE_PROJECT_ID, 3)] = "echo setup\n"
        source.add(
            "snippet_notes",
            (SOURCE_PROJECT_ID, 3),
            [make_note(9, "bob", "later"), make_note(2, "alice", "earlier")],
        )

        migrate_snippets(ctx)

        (snippet_call,) = destination.creates("snippet")
        assert snippet_call[3] == {
            "title": "Setup",
            "file_name": "setup.sh",
            "content": "echo setup\n",
            "visibility": "private",
        }
        assert ctx.stats.created["snippet"] == 1
        notes = destination.creates("snippet_note")
        assert [c[3]["body"].rsplit("\n", 1)[1] for c in notes] == ["earlier", "later"]
        assert notes[0][3]["body"].startswith("_Original comment by alice on ")
        assert all(c[2][0] == DESTINATION_PROJECT_ID for c in notes)

    def test_failed_snippet_skips_its_notes(
        self, ctx: MigrationContext, source: FakeGitlab, destination: FakeGitlab
    ) -> None:
        source.add("snippets", (SOURCE_PROJECT_ID,), [{"id": 3, "title": "A"}, {"id": 4, "title": "B"}])
        source.snippet_contents[(SOURCE_PROJECT_ID, 3)] = "a"
        source.snippet_contents[(SOURCE_PROJECT_ID, 4)] = "b"
        source.add("snippet_notes", (SOURCE_PROJECT_ID, 3), [make_note(1, "alice", "note")])
        destination.fail_when = lambda kind, attrs: kind == "snippet" and attrs["title"] == "A"

        migrate_snippets(ctx)

        assert len(destination.creates("snippet")) == 2
        assert destination.creates("snippet_note") == []
        assert [(f.entity_kind, f.source_id) for f in ctx.stats.failures] == [("snippet", 3)]
