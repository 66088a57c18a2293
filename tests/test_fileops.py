import os
import stat

import pytest

from file_commander.errors import FileOperationError, NotFoundError
from file_commander.fileops import FileOperator


@pytest.fixture
def operator(trash):
    return FileOperator(trash)


class TestCreate:
    """Test file and directory creation."""

    def test_create_file(self, operator, workdir):
        path = operator.create_file(workdir / "new.txt")
        assert path.is_file()
        assert path.stat().st_size == 0

    def test_create_existing_file(self, operator, sample_tree):
        with pytest.raises(FileOperationError):
            operator.create_file(sample_tree / "file1.txt")
        assert (sample_tree / "file1.txt").read_text() == "hello world\n"

    def test_create_nested_directory(self, operator, workdir):
        path = operator.create_directory(workdir / "a" / "b" / "c")
        assert path.is_dir()


class TestCopy:
    """Test copying files and directory trees."""

    def test_copy_file(self, operator, sample_tree):
        dest = operator.copy(sample_tree / "file1.txt", sample_tree / "copy.txt")
        assert dest.read_text() == "hello world\n"
        assert (sample_tree / "file1.txt").exists()

    def test_copy_file_into_directory(self, operator, sample_tree):
        dest = operator.copy(sample_tree / "file1.txt", sample_tree / "docs")
        assert dest == sample_tree / "docs" / "file1.txt"
        assert dest.exists()

    def test_copy_keeps_mode(self, operator, sample_tree):
        src = sample_tree / "file1.txt"
        os.chmod(src, 0o640)
        dest = operator.copy(src, sample_tree / "copy.txt")
        assert stat.S_IMODE(dest.stat().st_mode) == 0o640

    def test_copy_directory(self, operator, sample_tree, tmp_path):
        dest = operator.copy(sample_tree / "docs", tmp_path / "docs-copy")
        assert (dest / "notes.md").read_text() == "# Notes\nTODO: write more\n"
        assert (dest / "data.csv").exists()

    def test_copy_directory_into_itself(self, operator, sample_tree):
        with pytest.raises(FileOperationError):
            operator.copy(sample_tree / "docs", sample_tree / "docs" / "inner")

    def test_copy_missing_source(self, operator, workdir):
        with pytest.raises(NotFoundError):
            operator.copy(workdir / "missing", workdir / "dest")


class TestMoveAndDelete:
    """Test moving, trashing and permanent directory removal."""

    def test_move_rename(self, operator, sample_tree):
        dest = operator.move(sample_tree / "file1.txt", sample_tree / "renamed.txt")
        assert dest.read_text() == "hello world\n"
        assert not (sample_tree / "file1.txt").exists()

    def test_move_into_directory(self, operator, sample_tree):
        dest = operator.move(sample_tree / "file2.txt", sample_tree / "docs")
        assert dest == sample_tree / "docs" / "file2.txt"
        assert dest.exists()

    def test_move_missing(self, operator, workdir):
        with pytest.raises(NotFoundError):
            operator.move(workdir / "missing", workdir / "dest")

    def test_delete_file_goes_to_trash(self, operator, trash, sample_tree):
        name = operator.delete_file(sample_tree / "file1.txt")
        assert name == "file1.txt"
        assert not (sample_tree / "file1.txt").exists()
        assert "file1.txt" in trash.list_trash()

    def test_delete_directory(self, operator, sample_tree):
        operator.delete_directory(sample_tree / "docs")
        assert not (sample_tree / "docs").exists()

    def test_delete_directory_rejects_file(self, operator, sample_tree):
        with pytest.raises(FileOperationError):
            operator.delete_directory(sample_tree / "file1.txt")

    def test_delete_directory_missing(self, operator, workdir):
        with pytest.raises(NotFoundError):
            operator.delete_directory(workdir / "missing")
