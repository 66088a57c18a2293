"""
Archive creation, extraction and listing.

Supported containers: zip, tar, tar.gz (tgz), tar.bz2 (tbz2, read only) and
tar.xz (txz). Extraction validates every member name before writing anything:
absolute names and ``..`` segments are rejected, and each joined target path
is re-checked to lie strictly inside the destination directory.
"""

import logging
import lzma
import os
import shutil
import stat
import tarfile
import zipfile
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from pathlib import Path, PurePosixPath
from typing import Iterator, List, Optional, Sequence, Tuple, Union

from file_commander.errors import (
    FileOperationError,
    PathTraversalError,
    SourceNotFoundError,
    UnsupportedFormatError,
    UnsupportedOperationError,
)

log = logging.getLogger(__name__)

PathLike = Union[str, Path]

COPY_BUFFER_SIZE = 1024 * 1024
DEFAULT_FILE_MODE = 0o644


class ArchiveFormat(str, Enum):
    ZIP = "zip"
    TAR = "tar"
    TAR_GZ = "tar.gz"
    TAR_BZ2 = "tar.bz2"
    TAR_XZ = "tar.xz"

    @property
    def tar_mode(self) -> str:
        return {
            ArchiveFormat.TAR: "",
            ArchiveFormat.TAR_GZ: "gz",
            ArchiveFormat.TAR_BZ2: "bz2",
            ArchiveFormat.TAR_XZ: "xz",
        }[self]

    @property
    def writable(self) -> bool:
        return self is not ArchiveFormat.TAR_BZ2


FORMAT_TOKENS = {
    "zip": ArchiveFormat.ZIP,
    "tar": ArchiveFormat.TAR,
    "tar.gz": ArchiveFormat.TAR_GZ,
    "tgz": ArchiveFormat.TAR_GZ,
    "tar.bz2": ArchiveFormat.TAR_BZ2,
    "tbz2": ArchiveFormat.TAR_BZ2,
    "tar.xz": ArchiveFormat.TAR_XZ,
    "txz": ArchiveFormat.TAR_XZ,
}

# Compound suffixes come first so ".tar.gz" never resolves as plain ".gz".
SUFFIX_ORDER = (
    ".tar.gz",
    ".tgz",
    ".tar.bz2",
    ".tbz2",
    ".tar.xz",
    ".txz",
    ".tar",
    ".zip",
)


@dataclass
class ArchiveMember:
    name: str
    mode: int
    size: int
    is_dir: bool = False
    is_file: bool = True


# ----------------------------------------------------------------
# Format resolution
# ----------------------------------------------------------------
def format_from_name(filename: PathLike) -> ArchiveFormat:
    name = os.path.basename(str(filename)).lower()
    for suffix in SUFFIX_ORDER:
        if name.endswith(suffix):
            return FORMAT_TOKENS[suffix[1:]]
    raise UnsupportedFormatError(f"Cannot determine archive format of '{filename}'")


def resolve_format(destination: PathLike, fmt: Optional[str] = None) -> ArchiveFormat:
    """Resolve an explicit format token, falling back to the destination suffix."""
    if fmt:
        token = fmt.strip().lower().lstrip(".")
        if token not in FORMAT_TOKENS:
            raise UnsupportedFormatError(f"Unsupported archive format: '{fmt}'")
        return FORMAT_TOKENS[token]
    return format_from_name(destination)


def is_archive(path: PathLike) -> bool:
    try:
        format_from_name(path)
    except UnsupportedFormatError:
        return False
    return True


# ----------------------------------------------------------------
# Creation
# ----------------------------------------------------------------
def iter_source_files(sources: Sequence[PathLike]) -> Iterator[Tuple[Path, str]]:
    """
    Yield ``(filesystem path, member name)`` for every file below ``sources``.

    A file source contributes its base name; a directory source contributes
    its descendant files prefixed with the directory's own name. The walk is
    depth-first with entries sorted by name.
    """
    for src in sources:
        root = Path(os.path.abspath(os.path.expanduser(str(src))))
        if not root.is_dir():
            yield root, root.name
            continue
        for dirpath, dirnames, filenames in os.walk(root):
            dirnames.sort()
            rel_dir = Path(dirpath).relative_to(root.parent)
            for filename in sorted(filenames):
                yield Path(dirpath) / filename, (rel_dir / filename).as_posix()


def _add_to_zip(zf: zipfile.ZipFile, path: Path, member_name: str) -> None:
    # Timestamps before 1980 are clamped instead of rejected.
    info = zipfile.ZipInfo.from_file(path, arcname=member_name, strict_timestamps=False)
    info.compress_type = zipfile.ZIP_DEFLATED
    with open(path, "rb") as fin, zf.open(info, "w") as fout:
        shutil.copyfileobj(fin, fout, COPY_BUFFER_SIZE)


def _add_to_tar(tf: tarfile.TarFile, path: Path, member_name: str) -> None:
    info = tf.gettarinfo(str(path), arcname=member_name)
    with open(path, "rb") as fin:
        tf.addfile(info, fin)


def archive_files(
    sources: Sequence[PathLike], destination: PathLike, fmt: Optional[str] = None
) -> List[str]:
    """
    Pack ``sources`` into ``destination`` and return the member names written.

    Nothing is created when the format is unknown, the format cannot be
    written, or a source is missing.
    """
    archive_format = resolve_format(destination, fmt)
    if not archive_format.writable:
        raise UnsupportedOperationError(
            f"Creating {archive_format.value} archives is not supported (extract/list only)"
        )
    if not sources:
        raise SourceNotFoundError("No source files given")
    for src in sources:
        if not os.path.exists(os.path.expanduser(str(src))):
            raise SourceNotFoundError(f"Source not found: {src}")

    dest = Path(os.path.abspath(os.path.expanduser(str(destination))))
    written: List[str] = []
    try:
        if archive_format is ArchiveFormat.ZIP:
            with zipfile.ZipFile(dest, "w", zipfile.ZIP_DEFLATED) as zf:
                for path, member_name in iter_source_files(sources):
                    if path == dest:
                        continue
                    _add_to_zip(zf, path, member_name)
                    written.append(member_name)
        else:
            mode = "w:" + archive_format.tar_mode if archive_format.tar_mode else "w"
            with tarfile.open(dest, mode, dereference=True) as tf:
                for path, member_name in iter_source_files(sources):
                    if path == dest:
                        continue
                    _add_to_tar(tf, path, member_name)
                    written.append(member_name)
    except (OSError, ValueError, zipfile.BadZipFile, tarfile.TarError, lzma.LZMAError) as e:
        _discard_partial(dest)
        raise FileOperationError(f"Could not write archive {dest}: {e}") from e

    log.info(f"Created {archive_format.value} archive {dest} with {len(written)} member(s)")
    return written


def _discard_partial(dest: Path) -> None:
    try:
        if dest.exists():
            dest.unlink()
    except OSError as e:
        log.error(f"Could not remove partial archive {dest}: {e}")


# ----------------------------------------------------------------
# Reading front-ends
# ----------------------------------------------------------------
@contextmanager
def _open_container(source: Path, archive_format: ArchiveFormat):
    """
    Yield a list of ``(ArchiveMember, opener)`` pairs in container order.

    ``opener()`` returns a readable binary stream for regular file members.
    """
    try:
        if archive_format is ArchiveFormat.ZIP:
            with zipfile.ZipFile(source) as zf:
                yield [(_zip_member(info), _zip_opener(zf, info)) for info in zf.infolist()]
        else:
            mode = "r:" + archive_format.tar_mode if archive_format.tar_mode else "r:"
            with tarfile.open(source, mode) as tf:
                yield [(_tar_member(info), _tar_opener(tf, info)) for info in tf.getmembers()]
    except (zipfile.BadZipFile, tarfile.TarError, lzma.LZMAError, EOFError) as e:
        raise FileOperationError(f"Could not read archive {source}: {e}") from e


def _zip_member(info: zipfile.ZipInfo) -> ArchiveMember:
    mode = (info.external_attr >> 16) & 0o7777
    return ArchiveMember(
        name=info.filename,
        mode=mode or DEFAULT_FILE_MODE,
        size=info.file_size,
        is_dir=info.is_dir(),
        is_file=not info.is_dir() and not stat.S_ISLNK(info.external_attr >> 16),
    )


def _zip_opener(zf: zipfile.ZipFile, info: zipfile.ZipInfo):
    return lambda: zf.open(info)


def _tar_member(info: tarfile.TarInfo) -> ArchiveMember:
    return ArchiveMember(
        name=info.name,
        mode=info.mode & 0o7777,
        size=info.size,
        is_dir=info.isdir(),
        is_file=info.isfile(),
    )


def _tar_opener(tf: tarfile.TarFile, info: tarfile.TarInfo):
    return lambda: tf.extractfile(info)


def _check_source(source: PathLike) -> Tuple[Path, ArchiveFormat]:
    archive_format = format_from_name(source)
    path = Path(os.path.abspath(os.path.expanduser(str(source))))
    if not path.is_file():
        raise SourceNotFoundError(f"Archive not found: {source}")
    return path, archive_format


# ----------------------------------------------------------------
# Extraction
# ----------------------------------------------------------------
def _member_parts(name: str) -> List[str]:
    """Split a stored member name, rejecting absolute names and ``..`` segments."""
    normalized = name.replace("\\", "/")
    if normalized.startswith("/") or PurePosixPath(normalized).is_absolute():
        raise PathTraversalError(f"Absolute path in archive member: '{name}'")
    if len(normalized) >= 2 and normalized[1] == ":" and normalized[0].isalpha():
        raise PathTraversalError(f"Drive-qualified path in archive member: '{name}'")
    parts = [part for part in normalized.split("/") if part not in ("", ".")]
    if ".." in parts:
        raise PathTraversalError(f"Parent directory reference in archive member: '{name}'")
    return parts


def safe_member_path(destination: Path, name: str) -> Optional[Path]:
    """
    Return the absolute target of member ``name`` inside ``destination``.

    Returns None for names that denote the destination itself (``./``).
    """
    parts = _member_parts(name)
    if not parts:
        return None
    root = os.path.normpath(str(destination))
    target = os.path.normpath(os.path.join(root, *parts))
    if os.path.commonpath([root, target]) != root or target == root:
        raise PathTraversalError(f"Archive member escapes destination: '{name}'")
    return Path(target)


def _write_member(target: Path, member: ArchiveMember, opener) -> None:
    target.parent.mkdir(parents=True, exist_ok=True)
    stream = opener()
    if stream is None:
        raise FileOperationError(f"Archive member has no data: '{member.name}'")
    with stream, open(target, "wb") as fout:
        shutil.copyfileobj(stream, fout, COPY_BUFFER_SIZE)
    os.chmod(target, member.mode)


def extract_archive(source: PathLike, destination: PathLike) -> List[Path]:
    """
    Extract ``source`` into ``destination`` and return the files written.

    Raises PathTraversalError before writing anything if any member would land
    outside ``destination``.
    """
    source_path, archive_format = _check_source(source)
    dest = Path(os.path.abspath(os.path.expanduser(str(destination))))

    written: List[Path] = []
    with _open_container(source_path, archive_format) as members:
        plan = []
        for member, opener in members:
            target = safe_member_path(dest, member.name)
            if target is not None:
                plan.append((target, member, opener))

        try:
            dest.mkdir(parents=True, exist_ok=True)
            for target, member, opener in plan:
                if member.is_dir:
                    target.mkdir(parents=True, exist_ok=True)
                elif member.is_file:
                    _write_member(target, member, opener)
                    written.append(target)
                else:
                    log.warning(f"Skipping non-regular archive member '{member.name}'")
        except OSError as e:
            raise FileOperationError(f"Could not extract {source_path}: {e}") from e

    log.info(f"Extracted {len(written)} file(s) from {source_path} to {dest}")
    return written


def list_archive_contents(source: PathLike) -> List[str]:
    source_path, archive_format = _check_source(source)
    with _open_container(source_path, archive_format) as members:
        return [member.name for member, _ in members]
