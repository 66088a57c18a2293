from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List

from file_commander.errors import FileOperationError, InvalidArgumentError, NotFoundError


@dataclass
class Bookmark:
    name: str
    path: Path


@dataclass
class BookmarkManager:
    """Named shortcuts to directories, kept for the current session."""

    bookmarks: Dict[str, Bookmark] = field(default_factory=dict)

    def add(self, name: str, path) -> Bookmark:
        if not name:
            raise InvalidArgumentError("Bookmark name cannot be empty")
        if name in self.bookmarks:
            raise InvalidArgumentError(f"Bookmark '{name}' already exists")
        p = Path(path).expanduser().resolve()
        if not p.exists():
            raise NotFoundError(f"Bookmark target not found: {p}")
        if not p.is_dir():
            raise FileOperationError(f"Bookmark target is not a directory: {p}")
        bookmark = Bookmark(name=name, path=p)
        self.bookmarks[name] = bookmark
        return bookmark

    def remove(self, name: str) -> None:
        if name not in self.bookmarks:
            raise NotFoundError(f"Bookmark '{name}' not found")
        del self.bookmarks[name]

    def get(self, name: str) -> Path:
        try:
            return self.bookmarks[name].path
        except KeyError as e:
            raise NotFoundError(f"Bookmark '{name}' not found") from e

    def list(self) -> List[Bookmark]:
        return list(self.bookmarks.values())
