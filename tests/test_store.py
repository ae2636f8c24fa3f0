"""
SQLite project store tests.
"""
import re

import pytest

from uigen.core.exceptions import ConflictError, NotFoundError
from uigen.db import ProjectStore


TIMESTAMP = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z$")


@pytest.fixture
def store(tmp_path):
    return ProjectStore(tmp_path / "nested" / "store.db")


class TestProjects:
    def test_create_and_get(self, store):
        project = store.create_project("Landing page", "Marketing site")
        assert TIMESTAMP.match(project.created_at)
        fetched = store.get_project(project.id)
        assert fetched.name == "Landing page"
        assert fetched.description == "Marketing site"
        assert fetched.files == []

    def test_list_oldest_first(self, store):
        first = store.create_project("First")
        second = store.create_project("Second")
        assert [p.id for p in store.list_projects()] == [first.id, second.id]

    def test_update_is_partial(self, store):
        project = store.create_project("Name", "Keep me")
        updated = store.update_project(project.id, name="Renamed")
        assert updated.name == "Renamed"
        assert updated.description == "Keep me"
        assert updated.updated_at > project.updated_at

    def test_update_can_clear_description(self, store):
        project = store.create_project("Name", "Drop me")
        assert store.update_project(project.id, description=None).description is None

    def test_missing_project(self, store):
        assert store.get_project("missing") is None
        with pytest.raises(NotFoundError):
            store.update_project("missing", name="x")
        assert store.delete_project("missing") is False

    def test_delete_cascades_to_files(self, store):
        project = store.create_project("Doomed")
        record = store.create_file(project.id, "App.vue", "<template/>")
        assert store.delete_project(project.id) is True
        assert store.get_file(record.id) is None


class TestFiles:
    def test_create_and_list(self, store):
        project = store.create_project("P")
        store.create_file(project.id, "App.vue", "<template/>")
        store.create_file(project.id, "main.ts", "import App")
        assert [f.name for f in store.list_files(project.id)] == ["App.vue", "main.ts"]
        assert [f.name for f in store.get_project(project.id).files] == ["App.vue", "main.ts"]

    def test_duplicate_name_conflicts(self, store):
        project = store.create_project("P")
        store.create_file(project.id, "App.vue", "a")
        with pytest.raises(ConflictError):
            store.create_file(project.id, "App.vue", "b")

    def test_same_name_in_other_project(self, store):
        one, two = store.create_project("One"), store.create_project("Two")
        store.create_file(one.id, "App.vue", "a")
        assert store.create_file(two.id, "App.vue", "b").project_id == two.id

    def test_unknown_project(self, store):
        with pytest.raises(NotFoundError):
            store.create_file("missing", "App.vue", "a")
        with pytest.raises(NotFoundError):
            store.list_files("missing")

    def test_update_bumps_timestamps(self, store):
        project = store.create_project("P")
        record = store.create_file(project.id, "App.vue", "a")
        updated = store.update_file(record.id, "b")
        assert updated.content == "b"
        assert updated.updated_at > record.updated_at
        assert store.get_project(project.id).updated_at > project.updated_at

    def test_update_missing_file(self, store):
        with pytest.raises(NotFoundError):
            store.update_file("missing", "x")

    def test_delete_file(self, store):
        project = store.create_project("P")
        record = store.create_file(project.id, "App.vue", "a")
        assert store.delete_file(record.id) is True
        assert store.delete_file(record.id) is False

    def test_to_dict_is_camel_case(self, store):
        project = store.create_project("P")
        record = store.create_file(project.id, "App.vue", "a")
        assert set(record.to_dict()) == {"id", "name", "content", "projectId", "createdAt", "updatedAt"}
        assert "files" not in store.get_project(project.id).to_dict(include_files=False)


class TestReplaceFiles:
    def test_applies_create_update_delete(self, store):
        project = store.create_project("P")
        store.create_file(project.id, "keep.ts", "same")
        store.create_file(project.id, "edit.ts", "old")
        store.create_file(project.id, "drop.ts", "bye")

        changes = store.replace_files(project.id, {
            "keep.ts": "same",
            "edit.ts": "new",
            "src/added.vue": "<template/>",
        })

        assert changes == {"created": ["src/added.vue"], "updated": ["edit.ts"], "deleted": ["drop.ts"]}
        files = {f.name: f.content for f in store.list_files(project.id)}
        assert files == {"keep.ts": "same", "edit.ts": "new", "src/added.vue": "<template/>"}

    def test_no_changes(self, store):
        project = store.create_project("P")
        store.create_file(project.id, "a.ts", "x")
        assert store.replace_files(project.id, {"a.ts": "x"}) == {"created": [], "updated": [], "deleted": []}
