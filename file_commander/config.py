import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from file_commander import __version__


def _default_config_dir() -> Path:
    return Path(
        os.environ.get("FILE_COMMANDER_HOME", os.path.expanduser("~/.file_commander"))
    )


@dataclass
class AppConfig:
    VERSION: str = __version__
    APP_NAME: str = "File Commander"
    APP_SUBTITLE: str = "Interactive File Manager"

    config_dir: Path = field(default_factory=_default_config_dir)
    log_level: str = "INFO"
    trash_root: Optional[Path] = None

    # Viewer defaults
    view_lines: int = 20
    max_line_length: int = 100

    # Content search skips anything larger than this
    search_max_file_size: int = 10 * 1024 * 1024

    journal_capacity: int = 1000
    log_max_bytes: int = 5 * 1024 * 1024
    log_backup_count: int = 3

    use_colors: bool = True
    verbose: bool = False

    @property
    def log_file(self) -> Path:
        return self.config_dir / "file_commander.log"

    @property
    def history_file(self) -> Path:
        return self.config_dir / "command_history.txt"

    @classmethod
    def from_env(cls) -> "AppConfig":
        trash = os.environ.get("FILE_COMMANDER_TRASH")
        return cls(
            log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
            trash_root=Path(trash).expanduser() if trash else None,
            use_colors="NO_COLOR" not in os.environ,
            verbose=os.environ.get("FILE_COMMANDER_VERBOSE", "") not in ("", "0"),
        )

    def ensure_dirs(self) -> None:
        self.config_dir.mkdir(parents=True, exist_ok=True)
