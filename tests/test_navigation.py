import os
from datetime import datetime, timedelta

import pytest

from file_commander.errors import FileOperationError, InvalidArgumentError, NotFoundError
from file_commander.navigation import FilterOptions, Navigator, apply_filter, parse_filter_args


def _names(entries):
    return [entry.name for entry in entries]


class TestNavigator:
    """Test current-directory tracking."""

    def test_list_directory_dirs_first(self, sample_tree):
        nav = Navigator(sample_tree)
        assert _names(nav.list_directory()) == ["docs", ".hidden", "file1.txt", "file2.txt"]

    def test_list_other_directory(self, sample_tree):
        nav = Navigator(sample_tree)
        assert _names(nav.list_directory("docs")) == ["data.csv", "notes.md"]

    def test_list_missing_directory(self, sample_tree):
        with pytest.raises(NotFoundError):
            Navigator(sample_tree).list_directory("nowhere")

    def test_change_directory_relative(self, sample_tree):
        nav = Navigator(sample_tree)
        nav.change_directory("docs")
        assert nav.current_dir == sample_tree / "docs"
        nav.change_directory("..")
        assert nav.current_dir == sample_tree

    def test_change_directory_home(self, sample_tree, monkeypatch, tmp_path):
        monkeypatch.setenv("HOME", str(tmp_path))
        nav = Navigator(sample_tree)
        nav.change_directory("~")
        assert nav.current_dir == tmp_path

    def test_change_directory_errors(self, sample_tree):
        nav = Navigator(sample_tree)
        with pytest.raises(NotFoundError):
            nav.change_directory("missing")
        with pytest.raises(FileOperationError):
            nav.change_directory("file1.txt")
        assert nav.current_dir == sample_tree

    def test_resolve_absolute(self, sample_tree, tmp_path):
        nav = Navigator(sample_tree)
        assert nav.resolve(str(tmp_path)) == tmp_path
        assert nav.resolve("docs/../file1.txt") == sample_tree / "file1.txt"


class TestFilter:
    """Test listing filters."""

    def _entries(self, path):
        with os.scandir(path) as it:
            return sorted(it, key=lambda e: e.name)

    def test_default_hides_dotfiles(self, sample_tree):
        result = apply_filter(self._entries(sample_tree), FilterOptions())
        assert _names(result) == ["docs", "file1.txt", "file2.txt"]

    def test_extension(self, sample_tree):
        options = FilterOptions(extensions=["txt"])
        assert _names(apply_filter(self._entries(sample_tree), options)) == ["file1.txt", "file2.txt"]

    def test_name_pattern(self, sample_tree):
        options = FilterOptions(name_pattern="*2*")
        assert _names(apply_filter(self._entries(sample_tree), options)) == ["file2.txt"]

    def test_size_range(self, sample_tree):
        options = FilterOptions(min_size=20)
        assert _names(apply_filter(self._entries(sample_tree), options)) == ["file2.txt"]

    def test_files_only_with_hidden(self, sample_tree):
        options = FilterOptions(show_dirs=False, show_hidden=True)
        assert _names(apply_filter(self._entries(sample_tree), options)) == [".hidden", "file1.txt", "file2.txt"]

    def test_modified_range(self, sample_tree):
        old = (datetime.now() - timedelta(days=30)).timestamp()
        os.utime(sample_tree / "file1.txt", (old, old))
        options = FilterOptions(modified_after=datetime.now() - timedelta(days=1), show_dirs=False)
        assert _names(apply_filter(self._entries(sample_tree), options)) == ["file2.txt"]


class TestParseFilterArgs:
    """Test parsing of filter command arguments."""

    def test_all_flags(self):
        options = parse_filter_args(
            ["--ext=txt,md", "--name=rep*", "--size=10-2048", "--date=2024-01-01-2024-12-31", "--type=fh"]
        )
        assert options.extensions == ["txt", "md"]
        assert options.name_pattern == "rep*"
        assert (options.min_size, options.max_size) == (10, 2048)
        assert options.modified_after == datetime(2024, 1, 1)
        assert options.modified_before == datetime(2024, 12, 31, 23, 59, 59)
        assert options.show_files and options.show_hidden and not options.show_dirs

    def test_open_ranges(self):
        options = parse_filter_args(["--size=100-", "--date=-2024-06-30"])
        assert options.min_size == 100 and options.max_size is None
        assert options.modified_after is None
        assert options.modified_before == datetime(2024, 6, 30, 23, 59, 59)

    def test_no_args_is_default(self):
        assert parse_filter_args([]).is_default

    @pytest.mark.parametrize(
        "arg",
        ["--size=abc-10", "--size=100", "--date=2024-13-01-", "--date=yesterday", "--color=red", "txt"],
    )
    def test_invalid(self, arg):
        with pytest.raises(InvalidArgumentError):
            parse_filter_args([arg])
