"""
Shared fixtures for the File Commander test suite.
"""

import io

import pytest
from rich.console import Console

from file_commander.app import App
from file_commander.config import AppConfig
from file_commander.oplog import setup_logging, shutdown_logging
from file_commander.trash import FreedesktopTrash


@pytest.fixture
def trash_root(tmp_path):
    return tmp_path / "trash"


@pytest.fixture
def trash(trash_root):
    return FreedesktopTrash(root=trash_root)


@pytest.fixture
def workdir(tmp_path):
    path = tmp_path / "work"
    path.mkdir()
    return path


@pytest.fixture
def sample_tree(workdir):
    """
    work/
      .hidden
      docs/
        data.csv
        notes.md
      file1.txt
      file2.txt
    """
    (workdir / "file1.txt").write_text("hello world\n")
    (workdir / "file2.txt").write_text("second file\nwith two lines\n")
    docs = workdir / "docs"
    docs.mkdir()
    (docs / "notes.md").write_text("# Notes\nTODO: write more\n")
    (docs / "data.csv").write_text("id,value\n1,42\n")
    (workdir / ".hidden").write_text("secret\n")
    return workdir


@pytest.fixture
def config(tmp_path, trash_root, monkeypatch):
    monkeypatch.setenv("FILE_COMMANDER_HOME", str(tmp_path / "home"))
    return AppConfig(
        config_dir=tmp_path / "config",
        trash_root=trash_root,
        use_colors=False,
    )


@pytest.fixture
def output():
    return io.StringIO()


@pytest.fixture
def app(config, trash, sample_tree, output):
    """An App rooted at the sample tree, writing to a recording console."""
    journal = setup_logging(config)
    console = Console(file=output, width=200, color_system=None)
    application = App(
        config,
        console=console,
        trash=trash,
        journal=journal,
        confirm=lambda message: True,
        start_dir=sample_tree,
    )
    yield application
    shutdown_logging()
