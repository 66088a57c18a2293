import fnmatch
import logging
import os
import re
from pathlib import Path
from typing import Callable, List

from file_commander.errors import InvalidArgumentError, NotFoundError

log = logging.getLogger(__name__)

MAX_CONTENT_FILE_SIZE = 10 * 1024 * 1024


class Searcher:
    def __init__(self, max_file_size: int = MAX_CONTENT_FILE_SIZE):
        self.max_file_size = max_file_size

    def search_by_name(self, root, pattern: str) -> List[str]:
        """Match ``pattern`` (shell glob) against every file and directory name."""
        root = self._check_root(root)
        matches = []
        for dirpath, dirnames, filenames in os.walk(root):
            dirnames.sort()
            for name in sorted(dirnames + filenames):
                if fnmatch.fnmatch(name, pattern):
                    matches.append(os.path.join(dirpath, name))
        return matches

    def search_by_content(self, root, text: str) -> List[str]:
        return self._scan(root, lambda line: text in line)

    def search_by_regex(self, root, pattern: str) -> List[str]:
        try:
            regex = re.compile(pattern)
        except re.error as e:
            raise InvalidArgumentError(f"Invalid regular expression '{pattern}': {e}") from e
        return self._scan(root, lambda line: regex.search(line) is not None)

    def _check_root(self, root) -> Path:
        root = Path(root)
        if not root.is_dir():
            raise NotFoundError(f"Search directory not found: {root}")
        return root

    def _scan(self, root, predicate: Callable[[str], bool]) -> List[str]:
        root = self._check_root(root)
        matches = []
        for dirpath, dirnames, filenames in os.walk(root):
            dirnames.sort()
            for name in sorted(filenames):
                path = os.path.join(dirpath, name)
                if self._file_matches(path, predicate):
                    matches.append(path)
        return matches

    def _file_matches(self, path: str, predicate: Callable[[str], bool]) -> bool:
        try:
            if not os.path.isfile(path) or os.path.getsize(path) > self.max_file_size:
                return False
            with open(path, "r", encoding="utf-8", errors="ignore") as f:
                return any(predicate(line) for line in f)
        except OSError as e:
            log.debug(f"Skipping unreadable file {path}: {e}")
            return False
