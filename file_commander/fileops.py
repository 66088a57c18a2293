import logging
import os
import shutil
from pathlib import Path
from typing import Optional, Union

from file_commander.errors import FileOperationError, NotFoundError
from file_commander.trash import TrashManager, get_trash_manager

log = logging.getLogger(__name__)

PathLike = Union[str, Path]

DEFAULT_BUFFER_SIZE = 8192
DIR_PERMISSIONS = 0o755


class FileOperator:
    """Create, copy, move and delete files; file deletion goes to the trash."""

    def __init__(self, trash: Optional[TrashManager] = None):
        self.trash = trash if trash is not None else get_trash_manager()

    def create_file(self, path: PathLike) -> Path:
        p = Path(path)
        if p.exists():
            raise FileOperationError(f"'{p}' already exists")
        try:
            p.touch()
        except OSError as e:
            raise FileOperationError(f"Could not create file {p}: {e}") from e
        log.info(f"Created file {p}")
        return p

    def create_directory(self, path: PathLike) -> Path:
        p = Path(path)
        try:
            p.mkdir(mode=DIR_PERMISSIONS, parents=True, exist_ok=True)
        except OSError as e:
            raise FileOperationError(f"Could not create directory {p}: {e}") from e
        log.info(f"Created directory {p}")
        return p

    def copy_file(self, src: PathLike, dest: PathLike) -> Path:
        src, dest = Path(src), Path(dest)
        if not src.is_file():
            raise NotFoundError(f"Source not found: {src}")
        if dest.is_dir():
            dest = dest / src.name
        try:
            with open(src, "rb") as fin, open(dest, "wb") as fout:
                while buf := fin.read(DEFAULT_BUFFER_SIZE):
                    fout.write(buf)
            shutil.copymode(src, dest)
        except OSError as e:
            raise FileOperationError(f"Could not copy {src} to {dest}: {e}") from e
        return dest

    def copy_directory(self, src: PathLike, dest: PathLike) -> Path:
        src, dest = Path(src), Path(dest)
        if not src.is_dir():
            raise NotFoundError(f"Source directory not found: {src}")
        if dest.resolve().is_relative_to(src.resolve()):
            raise FileOperationError(f"Cannot copy {src} into itself")
        for root, dirs, files in os.walk(src):
            rel = os.path.relpath(root, src)
            target = dest / rel if rel != "." else dest
            try:
                target.mkdir(parents=True, exist_ok=True)
                shutil.copymode(root, target)
            except OSError as e:
                raise FileOperationError(f"Could not create directory {target}: {e}") from e
            for file in files:
                self.copy_file(Path(root) / file, target / file)
        return dest

    def copy(self, src: PathLike, dest: PathLike) -> Path:
        src = Path(src)
        if not os.path.lexists(src):
            raise NotFoundError(f"Source not found: {src}")
        if src.is_dir():
            result = self.copy_directory(src, dest)
        else:
            result = self.copy_file(src, dest)
        log.info(f"Copied {src} to {result}")
        return result

    def move(self, src: PathLike, dest: PathLike) -> Path:
        src, dest = Path(src), Path(dest)
        if not os.path.lexists(src):
            raise NotFoundError(f"Source not found: {src}")
        if dest.is_dir():
            dest = dest / src.name
        try:
            same_fs = os.stat(src).st_dev == os.stat(dest.parent).st_dev
            if same_fs:
                os.rename(src, dest)
            else:
                log.info(f"Different filesystem detected: copying {src} then deleting it")
                shutil.move(str(src), str(dest))
        except OSError as e:
            raise FileOperationError(f"Could not move {src} to {dest}: {e}") from e
        log.info(f"Moved {src} to {dest}")
        return dest

    def delete_file(self, path: PathLike) -> str:
        """Soft-delete ``path``; returns the name it was given in the trash."""
        return self.trash.move_to_trash(path)

    def delete_directory(self, path: PathLike) -> None:
        p = Path(path)
        if not p.exists():
            raise NotFoundError(f"Directory not found: {p}")
        if not p.is_dir():
            raise FileOperationError(f"Not a directory: {p}")
        try:
            shutil.rmtree(p)
        except OSError as e:
            raise FileOperationError(f"Could not delete directory {p}: {e}") from e
        log.info(f"Deleted directory {p}")
