"""File Commander: an interactive, line-oriented file manager."""

__version__ = "1.0.0"
