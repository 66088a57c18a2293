"""
Soft-delete support.

Three platform variants share one capability surface:

  • FreedesktopTrash – ``~/.local/share/Trash`` with ``files/`` and ``info/``
    directories; every trashed item gets a ``.trashinfo`` sidecar so it can be
    restored to its original location.
  • MacTrash – ``~/.Trash``, no metadata, restore unsupported.
  • WindowsTrash – ``%USERPROFILE%\\Recycle.Bin``, no metadata, restore
    unsupported.

``get_trash_manager()`` picks the variant once, based on the host platform.
"""

import logging
import os
import platform
import shutil
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Union

from file_commander.errors import (
    FileOperationError,
    NotFoundError,
    RestoreUnsupportedError,
)

log = logging.getLogger(__name__)

PathLike = Union[str, Path]

TRASHINFO_SUFFIX = ".trashinfo"
DELETION_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"


# ----------------------------------------------------------------
# Metadata record
# ----------------------------------------------------------------
@dataclass
class TrashInfo:
    original_path: Path
    deletion_date: str

    def render(self) -> str:
        return (
            "[Trash Info]\n"
            f"Path={self.original_path}\n"
            f"DeletionDate={self.deletion_date}\n"
        )

    @classmethod
    def parse(cls, text: str) -> Optional["TrashInfo"]:
        """Return the record held in ``text``, or None when it has no Path line."""
        original = None
        deletion_date = ""
        in_section = False
        for line in text.splitlines():
            if line.strip() == "[Trash Info]":
                in_section = True
                continue
            if not in_section or "=" not in line:
                continue
            key, value = line.split("=", 1)
            if key == "Path" and value:
                original = Path(value)
            elif key == "DeletionDate":
                deletion_date = value
        if original is None:
            return None
        return cls(original_path=original, deletion_date=deletion_date)


# ----------------------------------------------------------------
# Shared helpers
# ----------------------------------------------------------------
def _ensure_dir(path: Path) -> None:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FileOperationError(f"Could not create trash directory {path}: {e}") from e


def _next_free_name(trash_dir: Path, name: str) -> str:
    """Probe ``name``, ``name_1``, ``name_2``, ... until one is unused."""
    candidate = name
    suffix = 1
    while os.path.lexists(trash_dir / candidate):
        candidate = f"{name}_{suffix}"
        suffix += 1
    return candidate


def _check_source(path: PathLike) -> Path:
    source = Path(os.path.abspath(os.path.expanduser(str(path))))
    if not os.path.lexists(source):
        raise NotFoundError(f"No such file or directory: {source}")
    return source


def _rename_into(source: Path, trash_dir: Path) -> str:
    name = _next_free_name(trash_dir, source.name)
    try:
        os.rename(source, trash_dir / name)
    except OSError as e:
        raise FileOperationError(f"Could not move {source} to trash: {e}") from e
    return name


def _remove_entry(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()


def _clear_directory(directory: Path) -> None:
    # Stops at the first entry that cannot be removed.
    if not directory.exists():
        _ensure_dir(directory)
        return
    for entry in directory.iterdir():
        try:
            _remove_entry(entry)
        except OSError as e:
            raise FileOperationError(f"Could not remove {entry}: {e}") from e


def _list_names(directory: Path) -> List[str]:
    try:
        return os.listdir(directory)
    except FileNotFoundError:
        return []
    except OSError as e:
        raise FileOperationError(f"Could not read trash directory {directory}: {e}") from e


# ----------------------------------------------------------------
# Platform variants
# ----------------------------------------------------------------
class FreedesktopTrash:
    """Trash with per-item metadata, following the freedesktop.org layout."""

    supports_restore = True

    def __init__(self, root: Optional[PathLike] = None, home: Optional[PathLike] = None):
        if root is None:
            base = Path(home) if home else Path.home()
            root = base / ".local" / "share" / "Trash"
        self.root = Path(root)
        self.files_dir = self.root / "files"
        self.info_dir = self.root / "info"

    def _info_path(self, trashed_name: str) -> Path:
        if trashed_name in ("", ".", "..") or os.path.basename(trashed_name) != trashed_name:
            raise NotFoundError(f"No trash entry named '{trashed_name}'")
        return self.info_dir / f"{trashed_name}{TRASHINFO_SUFFIX}"

    def move_to_trash(self, path: PathLike) -> str:
        source = _check_source(path)
        _ensure_dir(self.files_dir)
        _ensure_dir(self.info_dir)
        name = _rename_into(source, self.files_dir)
        info = TrashInfo(
            original_path=source,
            deletion_date=datetime.now().strftime(DELETION_DATE_FORMAT),
        )
        try:
            self._info_path(name).write_text(info.render(), encoding="utf-8")
        except OSError as e:
            try:
                os.rename(self.files_dir / name, source)
            except OSError as undo:
                log.error(f"Could not move {name} back to {source}: {undo}")
            raise FileOperationError(f"Could not write trash metadata for {name}: {e}") from e
        log.info(f"Moved {source} to trash as {name}")
        return name

    def read_info(self, trashed_name: str) -> TrashInfo:
        info_path = self._info_path(trashed_name)
        try:
            text = info_path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise NotFoundError(f"No trash metadata for '{trashed_name}'") from e
        except OSError as e:
            raise FileOperationError(f"Could not read {info_path}: {e}") from e
        info = TrashInfo.parse(text)
        if info is None:
            raise FileOperationError(f"Original path missing from {info_path}")
        return info

    def restore_from_trash(self, trashed_name: str) -> Path:
        info = self.read_info(trashed_name)
        trashed = self.files_dir / trashed_name
        if not os.path.lexists(trashed):
            raise NotFoundError(f"'{trashed_name}' is no longer in the trash")
        target = info.original_path
        if os.path.lexists(target):
            raise FileOperationError(f"Cannot restore, {target} already exists")
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            os.rename(trashed, target)
        except OSError as e:
            raise FileOperationError(f"Could not restore {trashed_name}: {e}") from e
        try:
            self._info_path(trashed_name).unlink()
        except OSError as e:
            raise FileOperationError(
                f"Restored {target} but could not remove its metadata: {e}"
            ) from e
        log.info(f"Restored {trashed_name} to {target}")
        return target

    def empty_trash(self) -> None:
        for directory in (self.files_dir, self.info_dir):
            if directory.exists():
                try:
                    shutil.rmtree(directory)
                except OSError as e:
                    raise FileOperationError(f"Could not empty {directory}: {e}") from e
        _ensure_dir(self.files_dir)
        _ensure_dir(self.info_dir)
        log.info(f"Emptied trash at {self.root}")

    def list_trash(self) -> List[str]:
        return _list_names(self.files_dir)


class MacTrash:
    """The per-user ``~/.Trash`` folder; Finder keeps no restorable metadata there."""

    supports_restore = False

    def __init__(self, root: Optional[PathLike] = None, home: Optional[PathLike] = None):
        if root is None:
            root = (Path(home) if home else Path.home()) / ".Trash"
        self.root = Path(root)

    def move_to_trash(self, path: PathLike) -> str:
        source = _check_source(path)
        _ensure_dir(self.root)
        name = _rename_into(source, self.root)
        log.info(f"Moved {source} to trash as {name}")
        return name

    def restore_from_trash(self, trashed_name: str) -> Path:
        raise RestoreUnsupportedError("Restoring from the trash is not supported on macOS")

    def empty_trash(self) -> None:
        _clear_directory(self.root)
        log.info(f"Emptied trash at {self.root}")

    def list_trash(self) -> List[str]:
        return _list_names(self.root)


class WindowsTrash:
    """A ``Recycle.Bin`` folder in the user profile, without restore metadata."""

    supports_restore = False

    def __init__(self, root: Optional[PathLike] = None, home: Optional[PathLike] = None):
        self._root = Path(root) if root is not None else None
        self._home = Path(home) if home is not None else None

    @property
    def root(self) -> Path:
        if self._root is not None:
            return self._root
        profile = self._home or os.environ.get("USERPROFILE")
        if not profile:
            raise FileOperationError("USERPROFILE is not set; cannot locate the trash")
        return Path(profile) / "Recycle.Bin"

    def move_to_trash(self, path: PathLike) -> str:
        root = self.root
        source = _check_source(path)
        _ensure_dir(root)
        name = _rename_into(source, root)
        log.info(f"Moved {source} to trash as {name}")
        return name

    def restore_from_trash(self, trashed_name: str) -> Path:
        raise RestoreUnsupportedError("Restoring from the trash is not supported on Windows")

    def empty_trash(self) -> None:
        root = self.root
        _clear_directory(root)
        log.info(f"Emptied trash at {root}")

    def list_trash(self) -> List[str]:
        return _list_names(self.root)


TrashManager = Union[FreedesktopTrash, MacTrash, WindowsTrash]


def get_trash_manager(
    system: Optional[str] = None,
    home: Optional[PathLike] = None,
    root: Optional[PathLike] = None,
) -> TrashManager:
    system = system or platform.system()
    if system == "Windows":
        return WindowsTrash(root=root, home=home)
    if system == "Darwin":
        return MacTrash(root=root, home=home)
    return FreedesktopTrash(root=root, home=home)
