"""Exception hierarchy shared by every File Commander component."""


class FileCommanderError(Exception):
    """Base class for all errors surfaced to the command layer."""


class NotFoundError(FileCommanderError):
    """A source path, trash entry or bookmark does not exist."""


class SourceNotFoundError(NotFoundError):
    """An archive source is missing before any writing begins."""


class FileOperationError(FileCommanderError):
    """A filesystem operation (create, rename, write, close) failed."""


class UnsupportedFormatError(FileCommanderError):
    """The archive format could not be recognized."""


class UnsupportedOperationError(FileCommanderError):
    """The format is recognized but the requested operation is not available."""


class PathTraversalError(FileCommanderError):
    """An archive member would be written outside the extraction directory."""


class RestoreUnsupportedError(FileCommanderError):
    """The platform trash keeps no metadata, so restore is not possible."""


class InvalidArgumentError(FileCommanderError, ValueError):
    """A command argument is malformed."""


class BinaryFileError(FileCommanderError):
    """A text operation was requested on a binary file."""
