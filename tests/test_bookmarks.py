import pytest

from file_commander.bookmarks import BookmarkManager
from file_commander.errors import FileOperationError, InvalidArgumentError, NotFoundError


class TestBookmarkManager:
    """Test session bookmarks."""

    def test_add_and_get(self, sample_tree):
        manager = BookmarkManager()
        bookmark = manager.add("docs", sample_tree / "docs")
        assert bookmark.path == (sample_tree / "docs").resolve()
        assert manager.get("docs") == bookmark.path

    def test_list_in_insertion_order(self, sample_tree):
        manager = BookmarkManager()
        manager.add("work", sample_tree)
        manager.add("docs", sample_tree / "docs")
        assert [b.name for b in manager.list()] == ["work", "docs"]

    def test_duplicate_name(self, sample_tree):
        manager = BookmarkManager()
        manager.add("work", sample_tree)
        with pytest.raises(InvalidArgumentError):
            manager.add("work", sample_tree / "docs")

    def test_empty_name(self, sample_tree):
        with pytest.raises(InvalidArgumentError):
            BookmarkManager().add("", sample_tree)

    def test_target_must_be_directory(self, sample_tree):
        manager = BookmarkManager()
        with pytest.raises(FileOperationError):
            manager.add("f", sample_tree / "file1.txt")
        with pytest.raises(NotFoundError):
            manager.add("m", sample_tree / "missing")

    def test_remove(self, sample_tree):
        manager = BookmarkManager()
        manager.add("work", sample_tree)
        manager.remove("work")
        assert manager.list() == []
        with pytest.raises(NotFoundError):
            manager.remove("work")
        with pytest.raises(NotFoundError):
            manager.get("work")
