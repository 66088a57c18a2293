import pytest

from file_commander.errors import InvalidArgumentError, NotFoundError
from file_commander.search import Searcher


class TestSearcher:
    """Test name, content and regex search."""

    def test_by_name(self, sample_tree):
        results = Searcher().search_by_name(sample_tree, "*.txt")
        assert results == [str(sample_tree / "file1.txt"), str(sample_tree / "file2.txt")]

    def test_by_name_matches_directories(self, sample_tree):
        assert Searcher().search_by_name(sample_tree, "do*") == [str(sample_tree / "docs")]

    def test_by_content(self, sample_tree):
        results = Searcher().search_by_content(sample_tree, "TODO")
        assert results == [str(sample_tree / "docs" / "notes.md")]

    def test_by_regex(self, sample_tree):
        results = Searcher().search_by_regex(sample_tree, r"^\d+,\d+$")
        assert results == [str(sample_tree / "docs" / "data.csv")]

    def test_invalid_regex(self, sample_tree):
        with pytest.raises(InvalidArgumentError):
            Searcher().search_by_regex(sample_tree, "([")

    def test_skips_large_files(self, sample_tree):
        (sample_tree / "big.log").write_text("needle\n" * 100)
        assert Searcher(max_file_size=50).search_by_content(sample_tree, "needle") == []

    def test_missing_root(self, tmp_path):
        with pytest.raises(NotFoundError):
            Searcher().search_by_name(tmp_path / "missing", "*")
