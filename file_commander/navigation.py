"""Current-directory tracking, directory listing and listing filters."""

import fnmatch
import os
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from pathlib import Path
from typing import Iterable, List, Optional

from file_commander.errors import FileOperationError, InvalidArgumentError, NotFoundError


class Navigator:
    def __init__(self, start=None):
        self.current_dir = Path(os.path.abspath(start or os.getcwd()))

    def resolve(self, name) -> Path:
        """Resolve a user-supplied path against the current directory."""
        p = Path(os.path.expanduser(str(name)))
        if not p.is_absolute():
            p = self.current_dir / p
        return Path(os.path.normpath(p))

    def change_directory(self, target) -> Path:
        p = self.resolve(target)
        if not p.exists():
            raise NotFoundError(f"No such directory: {p}")
        if not p.is_dir():
            raise FileOperationError(f"Not a directory: {p}")
        if not os.access(p, os.X_OK):
            raise FileOperationError(f"Permission denied: {p}")
        self.current_dir = p
        return p

    def list_directory(self, target=None) -> List[os.DirEntry]:
        """Entries of a directory (default: current), directories first, then by name."""
        path = self.resolve(target) if target else self.current_dir
        if not path.exists():
            raise NotFoundError(f"No such directory: {path}")
        try:
            with os.scandir(path) as it:
                entries = list(it)
        except OSError as e:
            raise FileOperationError(f"Could not read directory {path}: {e}") from e
        return sorted(entries, key=lambda e: (not _is_dir(e), e.name))


def _is_dir(entry: os.DirEntry) -> bool:
    try:
        return entry.is_dir()
    except OSError:
        return False


# ----------------------------------------------------------------
# Filtering
# ----------------------------------------------------------------
@dataclass
class FilterOptions:
    extensions: List[str] = field(default_factory=list)
    name_pattern: str = ""
    min_size: Optional[int] = None
    max_size: Optional[int] = None
    modified_after: Optional[datetime] = None
    modified_before: Optional[datetime] = None
    show_dirs: bool = True
    show_files: bool = True
    show_hidden: bool = False

    @property
    def is_default(self) -> bool:
        return self == FilterOptions()


def _matches(entry: os.DirEntry, options: FilterOptions) -> bool:
    name = entry.name
    is_dir = _is_dir(entry)

    if not options.show_hidden and name.startswith("."):
        return False
    if is_dir and not options.show_dirs:
        return False
    if not is_dir and not options.show_files:
        return False
    if options.name_pattern and not fnmatch.fnmatch(name, options.name_pattern):
        return False

    if options.extensions:
        if is_dir:
            return False
        ext = os.path.splitext(name)[1].lower().lstrip(".")
        if ext not in {e.lower().lstrip(".") for e in options.extensions}:
            return False

    needs_stat = (
        options.min_size is not None
        or options.max_size is not None
        or options.modified_after is not None
        or options.modified_before is not None
    )
    if not needs_stat:
        return True
    try:
        st = entry.stat()
    except OSError:
        return False

    if options.min_size is not None or options.max_size is not None:
        if is_dir:
            return False
        if options.min_size is not None and st.st_size < options.min_size:
            return False
        if options.max_size is not None and st.st_size > options.max_size:
            return False

    mtime = datetime.fromtimestamp(st.st_mtime)
    if options.modified_after is not None and mtime < options.modified_after:
        return False
    if options.modified_before is not None and mtime > options.modified_before:
        return False
    return True


def apply_filter(entries: Iterable[os.DirEntry], options: FilterOptions) -> List[os.DirEntry]:
    return [entry for entry in entries if _matches(entry, options)]


def _parse_size(text: str, label: str) -> Optional[int]:
    if not text:
        return None
    try:
        return int(text)
    except ValueError as e:
        raise InvalidArgumentError(f"Invalid {label} size: '{text}'") from e


def _parse_date(text: str, label: str) -> Optional[datetime]:
    if not text:
        return None
    try:
        return datetime.strptime(text, "%Y-%m-%d")
    except ValueError as e:
        raise InvalidArgumentError(f"Invalid {label} date '{text}' (expected YYYY-MM-DD)") from e


def _split_date_range(value: str):
    # "2024-01-01-2024-12-31", "2024-01-01-" and "-2024-12-31"
    if value.startswith("-"):
        return "", value[1:]
    if len(value) >= 10 and value[10:11] == "-":
        return value[:10], value[11:]
    raise InvalidArgumentError(f"Invalid date range '{value}' (expected START-END)")


def parse_filter_args(args: List[str]) -> FilterOptions:
    """
    Build FilterOptions from ``--ext= --name= --size= --date= --type=`` flags.

    ``--type`` takes any combination of ``f`` (files), ``d`` (directories) and
    ``h`` (hidden entries); flags not listed are switched off.
    """
    options = FilterOptions()
    for arg in args:
        key, sep, value = arg.partition("=")
        if not sep:
            raise InvalidArgumentError(f"Unknown filter argument: '{arg}'")
        if key == "--ext":
            options.extensions = [e for e in value.split(",") if e]
        elif key == "--name":
            options.name_pattern = value
        elif key == "--size":
            low, dash, high = value.partition("-")
            if not dash:
                raise InvalidArgumentError(f"Invalid size range '{value}' (expected MIN-MAX)")
            options.min_size = _parse_size(low, "minimum")
            options.max_size = _parse_size(high, "maximum")
        elif key == "--date":
            start, end = _split_date_range(value)
            options.modified_after = _parse_date(start, "start")
            end_date = _parse_date(end, "end")
            if end_date is not None:
                end_date += timedelta(hours=23, minutes=59, seconds=59)
            options.modified_before = end_date
        elif key == "--type":
            options.show_dirs = "d" in value
            options.show_files = "f" in value
            options.show_hidden = "h" in value
        else:
            raise InvalidArgumentError(f"Unknown filter argument: '{arg}'")
    return options
