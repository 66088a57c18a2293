import logging
import os
import stat

from file_commander.errors import FileOperationError, InvalidArgumentError, NotFoundError

log = logging.getLogger(__name__)


def parse_mode(text):
    """Parse an octal permission string such as ``755`` or ``0o644``."""
    cleaned = text.strip().lower()
    if cleaned.startswith("0o"):
        cleaned = cleaned[2:]
    try:
        mode = int(cleaned, 8)
    except ValueError as e:
        raise InvalidArgumentError(f"Invalid permission mode '{text}' (expected octal, e.g. 755)") from e
    if mode < 0 or mode > 0o7777:
        raise InvalidArgumentError(f"Permission mode out of range: '{text}'")
    return mode


def change_permissions(path, mode_text):
    mode = parse_mode(mode_text)
    if not os.path.lexists(path):
        raise NotFoundError(f"No such file or directory: {path}")
    try:
        os.chmod(path, mode)
    except OSError as e:
        raise FileOperationError(f"Could not change permissions of {path}: {e}") from e
    log.info(f"Changed permissions of {path} to {oct(mode)}")
    return mode


def get_permissions(path):
    try:
        mode = os.stat(path).st_mode
    except FileNotFoundError as e:
        raise NotFoundError(f"No such file or directory: {path}") from e
    except OSError as e:
        raise FileOperationError(f"Could not stat {path}: {e}") from e
    return format(stat.S_IMODE(mode), "o")


def format_permissions(mode):
    return stat.filemode(mode)


def change_owner(path, uid, gid):
    try:
        os.chown(path, uid, gid)
    except FileNotFoundError as e:
        raise NotFoundError(f"No such file or directory: {path}") from e
    except OSError as e:
        raise FileOperationError(f"Could not change owner of {path}: {e}") from e
    log.info(f"Changed owner of {path} to {uid}:{gid}")
