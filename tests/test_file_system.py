"""
Virtual file system tests: paths, CRUD, moves, search, snapshots, watchers.
"""
import pytest

from uigen.core.exceptions import (
    DirectoryNotEmptyError,
    InvalidPathError,
    NotFoundError,
    PathExistsError,
    PathNotFoundError,
    ValidationError,
)
from uigen.lib.file_system import VirtualFileSystem, infer_file_type
from uigen.models.common import FileType
from uigen.models.file_system import (
    FileSearchOptions,
    FileSystemEventType,
    FileSystemOperationType,
)


class TestPaths:
    @pytest.mark.parametrize("raw,expected", [
        ("", "/"),
        ("/", "/"),
        ("src/App.vue", "/src/App.vue"),
        ("//src///components//", "/src/components"),
        ("\\src\\main.ts", "/src/main.ts"),
    ])
    def test_normalize_path(self, raw, expected):
        assert VirtualFileSystem.normalize_path(raw) == expected

    @pytest.mark.parametrize("raw", ["/src/../etc", "./App.vue", "/a/./b"])
    def test_relative_segments_rejected(self, raw):
        with pytest.raises(InvalidPathError):
            VirtualFileSystem.normalize_path(raw)

    def test_parse_path(self):
        assert VirtualFileSystem.parse_path("/src/App.vue") == ("/src", "App.vue")
        assert VirtualFileSystem.parse_path("/App.vue") == ("/", "App.vue")

    def test_infer_file_type(self):
        assert infer_file_type("App.vue") == FileType.VUE
        assert infer_file_type("style.CSS") == FileType.CSS
        assert infer_file_type("Makefile") == FileType.TYPESCRIPT


class TestFiles:
    def test_create_and_read(self, vfs):
        file = vfs.create_file("/src/App.vue", "<template/>")
        assert file.name == "App.vue"
        assert file.type == FileType.VUE
        assert file.size == len("<template/>")
        assert file.metadata.mime_type == "text/x-vue"
        assert vfs.read_file("src/App.vue") == "<template/>"

    def test_create_makes_parent_directories(self, vfs):
        vfs.create_file("/a/b/c.ts", "x")
        assert vfs.is_directory("/a")
        assert vfs.is_directory("/a/b")
        assert vfs.get_stats()["totalDirectories"] == 3  # root, a, b

    def test_create_existing_file_fails(self, vfs):
        vfs.create_file("/a.ts", "x")
        with pytest.raises(PathExistsError):
            vfs.create_file("/a.ts", "y")

    def test_create_file_over_directory_fails(self, vfs):
        vfs.create_directory("/src")
        with pytest.raises(PathExistsError):
            vfs.create_file("/src", "x")

    def test_update_file(self, vfs):
        vfs.create_file("/a.ts", "x")
        updated = vfs.update_file("/a.ts", "héllo")
        assert updated.content == "héllo"
        assert updated.size == 6  # utf-8 bytes

    def test_update_missing_file(self, vfs):
        with pytest.raises(PathNotFoundError):
            vfs.update_file("/missing.ts", "x")

    def test_delete_file(self, populated_vfs):
        assert populated_vfs.delete_file("/README.md") is True
        assert populated_vfs.delete_file("/README.md") is False
        assert not populated_vfs.exists("/README.md")
        assert all(child.name != "README.md" for child in populated_vfs.list_directory("/"))

    def test_copy_file(self, populated_vfs):
        copy = populated_vfs.copy_file("/src/App.vue", "/backup/App.vue")
        assert copy.content == populated_vfs.read_file("/src/App.vue")
        assert copy.id != populated_vfs.get_file("/src/App.vue").id

    def test_copy_missing_source(self, vfs):
        with pytest.raises(PathNotFoundError):
            vfs.copy_file("/nope.ts", "/copy.ts")


class TestDirectories:
    def test_create_directory_twice_fails(self, vfs):
        vfs.create_directory("/src")
        with pytest.raises(PathExistsError):
            vfs.create_directory("/src")

    def test_delete_non_empty_requires_recursive(self, populated_vfs):
        with pytest.raises(DirectoryNotEmptyError):
            populated_vfs.delete_directory("/src")
        assert populated_vfs.delete_directory("/src", recursive=True) is True
        assert not populated_vfs.exists("/src/components/Button.vue")
        assert populated_vfs.get_stats()["totalFiles"] == 1

    def test_cannot_delete_root(self, vfs):
        with pytest.raises(InvalidPathError):
            vfs.delete_directory("/", recursive=True)

    def test_list_directory_of_file_fails(self, populated_vfs):
        with pytest.raises(InvalidPathError):
            populated_vfs.list_directory("/README.md")

    def test_file_tree_is_a_copy(self, populated_vfs):
        tree = populated_vfs.get_file_tree()
        tree.children.clear()
        assert len(populated_vfs.list_directory("/")) == 2


class TestMoveAndRename:
    def test_move_file(self, populated_vfs):
        assert populated_vfs.move("/README.md", "/docs/README.md") is True
        moved = populated_vfs.get_file("/docs/README.md")
        assert moved.name == "README.md"
        assert not populated_vfs.exists("/README.md")

    def test_move_directory_rebases_children(self, populated_vfs):
        populated_vfs.move("/src", "/app")
        assert populated_vfs.read_file("/app/components/Button.vue").startswith("<template>")
        assert not populated_vfs.exists("/src/App.vue")

    def test_move_into_itself_fails(self, populated_vfs):
        with pytest.raises(InvalidPathError):
            populated_vfs.move("/src", "/src/inner")

    def test_move_onto_existing_fails(self, populated_vfs):
        with pytest.raises(PathExistsError):
            populated_vfs.move("/README.md", "/src/App.vue")

    def test_move_to_same_path_is_noop(self, populated_vfs):
        before = len(populated_vfs.get_operations())
        assert populated_vfs.move("/README.md", "/README.md") is True
        assert len(populated_vfs.get_operations()) == before

    def test_rename_updates_name(self, populated_vfs):
        populated_vfs.rename("/src/App.vue", "Main.vue")
        renamed = populated_vfs.get_file("/src/Main.vue")
        assert renamed.name == "Main.vue"
        assert populated_vfs.get_operations()[-1].type == FileSystemOperationType.RENAME_FILE

    def test_rename_rejects_slash(self, populated_vfs):
        with pytest.raises(InvalidPathError):
            populated_vfs.rename("/src/App.vue", "x/y.vue")


class TestSearch:
    def test_filename_match_outranks_content(self, populated_vfs):
        results = populated_vfs.search_files(FileSearchOptions(query="app", include_content=True))
        assert results[0].file.path == "/src/App.vue"
        assert results[0].matches[0].line == 0

    def test_content_matches_have_line_numbers(self, populated_vfs):
        results = populated_vfs.search_files(FileSearchOptions(query="Hello", include_content=True))
        assert len(results) == 1
        match = results[0].matches[0]
        assert match.line == 2
        assert match.context == "<div>Hello World</div>"

    def test_case_sensitive(self, populated_vfs):
        options = FileSearchOptions(query="hello", include_content=True, case_sensitive=True)
        assert populated_vfs.search_files(options) == []

    def test_file_type_filter(self, populated_vfs):
        options = FileSearchOptions(query="i", file_types=[FileType.TYPESCRIPT], include_content=True)
        assert {r.file.path for r in populated_vfs.search_files(options)} == {"/src/main.ts"}

    def test_regex(self, populated_vfs):
        options = FileSearchOptions(query=r"<button>\w+", include_content=True, use_regex=True)
        results = populated_vfs.search_files(options)
        assert results[0].matches[0].text == "<button>Click"

    def test_invalid_regex(self, populated_vfs):
        with pytest.raises(ValidationError):
            populated_vfs.search_files(FileSearchOptions(query="(", use_regex=True))

    def test_empty_query(self, populated_vfs):
        with pytest.raises(ValidationError):
            populated_vfs.search_files(FileSearchOptions(query=""))

    def test_stops_after_max_results_and_sorts_by_score(self, vfs):
        # Scores grow with each file; the last two are past the cap
        for count in range(1, 6):
            vfs.create_file(f"/f{count}.ts", " ".join(["x"] * count))

        results = vfs.search_files(FileSearchOptions(query="x", include_content=True, max_results=3))

        assert len(results) == 3
        assert [r.score for r in results] == [3, 2, 1]
        assert [r.file.path for r in results] == ["/f3.ts", "/f2.ts", "/f1.ts"]

    def test_files_without_matches_do_not_count_toward_the_cap(self, vfs):
        vfs.create_file("/a.ts", "nothing here")
        vfs.create_file("/b.ts", "y")
        vfs.create_file("/c.ts", "y y")

        results = vfs.search_files(FileSearchOptions(query="y", include_content=True, max_results=2))
        assert [r.file.path for r in results] == ["/c.ts", "/b.ts"]


class TestFileMaps:
    def test_round_trip_through_file_map(self, populated_vfs):
        files = populated_vfs.to_file_map()
        assert files["src/App.vue"].startswith("<template>")

        other = VirtualFileSystem()
        other.load_file_map(files)
        assert other.to_file_map() == files

    def test_load_overwrites_existing(self, populated_vfs):
        populated_vfs.load_file_map({"README.md": "# New"})
        assert populated_vfs.read_file("/README.md") == "# New"

    def test_file_map_under_root(self, populated_vfs):
        assert populated_vfs.to_file_map("/src/components") == {
            "Button.vue": "<template><button>Click</button></template>"
        }


class TestSnapshots:
    def test_restore_undoes_changes(self, populated_vfs):
        snapshot = populated_vfs.create_snapshot("before edit")
        populated_vfs.update_file("/README.md", "changed")
        populated_vfs.delete_directory("/src", recursive=True)

        populated_vfs.restore_snapshot(snapshot.id)
        assert populated_vfs.read_file("/README.md") == "# Test project"
        assert populated_vfs.exists("/src/components/Button.vue")

    def test_snapshot_is_isolated_from_later_edits(self, populated_vfs):
        snapshot = populated_vfs.create_snapshot()
        populated_vfs.update_file("/README.md", "changed")
        assert any(f.content == "# Test project" for f in snapshot.files.values())

    def test_restored_tree_shares_file_objects(self, populated_vfs):
        snapshot = populated_vfs.create_snapshot()
        populated_vfs.restore_snapshot(snapshot.id)
        populated_vfs.update_file("/README.md", "edited after restore")
        listed = [c for c in populated_vfs.list_directory("/") if c.name == "README.md"][0]
        assert listed.content == "edited after restore"

    def test_restore_twice(self, populated_vfs):
        snapshot = populated_vfs.create_snapshot()
        populated_vfs.restore_snapshot(snapshot.id)
        populated_vfs.update_file("/README.md", "changed")
        populated_vfs.restore_snapshot(snapshot.id)
        assert populated_vfs.read_file("/README.md") == "# Test project"

    def test_unknown_snapshot(self, vfs):
        with pytest.raises(NotFoundError):
            vfs.restore_snapshot("nope")


class TestWatchers:
    def test_recursive_watcher(self, vfs):
        events = []
        vfs.add_watcher("/src", events.append)
        vfs.create_file("/src/deep/App.vue", "x")
        vfs.create_file("/srcx/other.ts", "x")
        assert [e.path for e in events if e.type == FileSystemEventType.FILE_CREATED] == ["/src/deep/App.vue"]

    def test_non_recursive_watcher_sees_direct_children_only(self, vfs):
        events = []
        vfs.add_watcher("/src", events.append, recursive=False)
        vfs.create_file("/src/App.vue", "x")
        vfs.create_file("/src/deep/Nested.vue", "x")
        created = [e.path for e in events if e.type == FileSystemEventType.FILE_CREATED]
        assert created == ["/src/App.vue"]

    def test_event_filter(self, vfs):
        events = []
        vfs.add_watcher("/", events.append, events=[FileSystemEventType.FILE_UPDATED])
        vfs.create_file("/a.ts", "x")
        vfs.update_file("/a.ts", "y")
        assert [e.type for e in events] == [FileSystemEventType.FILE_UPDATED]

    def test_move_notifies_watcher_of_destination(self, populated_vfs):
        events = []
        populated_vfs.add_watcher("/docs", events.append)
        populated_vfs.move("/README.md", "/docs/README.md")
        moved = [e for e in events if e.type == FileSystemEventType.FILE_MOVED]
        assert moved[0].new_path == "/docs/README.md"

    def test_failing_callback_does_not_break_operation(self, vfs):
        def boom(event):
            raise RuntimeError("callback failed")

        vfs.add_watcher("/", boom)
        vfs.create_file("/a.ts", "x")
        assert vfs.exists("/a.ts")

    def test_remove_watcher(self, vfs):
        events = []
        watcher_id = vfs.add_watcher("/", events.append)
        assert vfs.remove_watcher(watcher_id) is True
        vfs.create_file("/a.ts", "x")
        assert events == []


class TestHistory:
    def test_operation_history_is_capped(self):
        vfs = VirtualFileSystem(max_operation_history=3)
        for i in range(5):
            vfs.create_file(f"/f{i}.ts", "x")
        operations = vfs.get_operations()
        assert len(operations) == 3
        assert operations[-1].path == "/f4.ts"

    def test_stats(self, populated_vfs):
        stats = populated_vfs.get_stats()
        assert stats["totalFiles"] == 4
        assert stats["totalDirectories"] == 3
        assert stats["totalSize"] > 0
