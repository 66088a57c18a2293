from pathlib import Path
from typing import List

from file_commander.errors import BinaryFileError, FileOperationError, NotFoundError

SNIFF_SIZE = 512
BINARY_THRESHOLD = 0.1
TEXT_CONTROL_BYTES = {9, 10, 13}


def is_binary(data: bytes) -> bool:
    """Treat data as binary when NUL or control bytes exceed 10% of the sample."""
    if not data:
        return False
    zeros = data.count(0)
    control = sum(1 for b in data if 0 < b < 32 and b not in TEXT_CONTROL_BYTES)
    return zeros / len(data) > BINARY_THRESHOLD or control / len(data) > BINARY_THRESHOLD


class FileViewer:
    def __init__(self, max_line_length: int = 100):
        self.max_line_length = max_line_length

    def _open(self, path: Path):
        try:
            return open(path, "r", encoding="utf-8", errors="replace")
        except FileNotFoundError as e:
            raise NotFoundError(f"No such file: {path}") from e
        except IsADirectoryError as e:
            raise FileOperationError(f"{path} is a directory") from e
        except OSError as e:
            raise FileOperationError(f"Could not open {path}: {e}") from e

    def view_text_file(self, path, start_line: int = 0, max_lines: int = 20) -> List[str]:
        """
        Return up to ``max_lines`` lines starting at zero-based ``start_line``.

        A non-positive ``max_lines`` reads to the end of the file.
        """
        path = Path(path)
        if start_line < 0:
            start_line = 0
        try:
            with open(path, "rb") as f:
                sample = f.read(SNIFF_SIZE)
        except FileNotFoundError as e:
            raise NotFoundError(f"No such file: {path}") from e
        except OSError as e:
            raise FileOperationError(f"Could not open {path}: {e}") from e
        if is_binary(sample):
            raise BinaryFileError(f"{path.name} looks like a binary file")

        lines: List[str] = []
        with self._open(path) as f:
            for index, line in enumerate(f):
                if index < start_line:
                    continue
                if 0 < max_lines <= len(lines):
                    break
                line = line.rstrip("\r\n")
                if len(line) > self.max_line_length:
                    line = line[: self.max_line_length] + "..."
                lines.append(line)
        return lines

    def total_lines(self, path) -> int:
        with self._open(Path(path)) as f:
            return sum(1 for _ in f)

    def format_text_content(self, lines: List[str], start_line: int = 0) -> str:
        return "\n".join(f"{start_line + i:5d} | {line}" for i, line in enumerate(lines))
