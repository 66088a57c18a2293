import pytest

from file_commander.errors import BinaryFileError, FileOperationError, NotFoundError
from file_commander.viewer import FileViewer, is_binary


@pytest.fixture
def numbered(workdir):
    path = workdir / "numbers.txt"
    path.write_text("".join(f"line {i}\n" for i in range(50)))
    return path


class TestIsBinary:
    """Test binary content detection."""

    def test_text(self):
        assert not is_binary(b"plain text\twith tabs\r\n")

    def test_nul_bytes(self):
        assert is_binary(b"\x00\x00\x00abc")

    def test_empty(self):
        assert not is_binary(b"")


class TestFileViewer:
    """Test paged text viewing."""

    def test_first_page(self, numbered):
        lines = FileViewer().view_text_file(numbered, 0, 20)
        assert len(lines) == 20
        assert lines[0] == "line 0"
        assert lines[-1] == "line 19"

    def test_offset(self, numbered):
        assert FileViewer().view_text_file(numbered, 45, 20) == [f"line {i}" for i in range(45, 50)]

    def test_read_to_end(self, numbered):
        assert len(FileViewer().view_text_file(numbered, 10, 0)) == 40

    def test_truncates_long_lines(self, workdir):
        path = workdir / "wide.txt"
        path.write_text("x" * 30 + "\n")
        assert FileViewer(max_line_length=10).view_text_file(path) == ["x" * 10 + "..."]

    def test_binary_rejected(self, workdir):
        path = workdir / "blob.bin"
        path.write_bytes(b"\x00\x01\x02\x00" * 64)
        with pytest.raises(BinaryFileError):
            FileViewer().view_text_file(path)

    def test_missing(self, workdir):
        with pytest.raises(NotFoundError):
            FileViewer().view_text_file(workdir / "missing.txt")

    def test_directory(self, sample_tree):
        with pytest.raises(FileOperationError):
            FileViewer().view_text_file(sample_tree / "docs")

    def test_total_lines(self, numbered):
        assert FileViewer().total_lines(numbered) == 50

    def test_format(self):
        assert FileViewer().format_text_content(["a", "b"], 4) == "    4 | a\n    5 | b"
