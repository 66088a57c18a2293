"""
Interactive command dispatcher.

Commands are registered in a table of ``Command`` records. Each line typed
at the prompt (or passed on the command line) is split shell-style, looked
up, run, and recorded in the operation journal. Errors are printed and
logged and never end the session.
"""

import logging
import shlex
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional

from prompt_toolkit import prompt as pt_prompt
from prompt_toolkit.auto_suggest import AutoSuggestFromHistory
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.history import FileHistory
from prompt_toolkit.styles import Style as PtStyle
from rich.console import Console
from rich.prompt import Confirm

from file_commander.archive import (
    archive_files,
    extract_archive,
    is_archive,
    list_archive_contents,
)
from file_commander.bookmarks import BookmarkManager
from file_commander.config import AppConfig
from file_commander.display import Display, FileDetails, NordColors
from file_commander.errors import (
    FileCommanderError,
    InvalidArgumentError,
    PathTraversalError,
    UnsupportedFormatError,
)
from file_commander.fileops import FileOperator
from file_commander.navigation import FilterOptions, Navigator, apply_filter, parse_filter_args
from file_commander.oplog import OperationLog, format_entry, record_operation
from file_commander.permissions import change_permissions
from file_commander.search import Searcher
from file_commander.trash import TrashManager, get_trash_manager
from file_commander.viewer import FileViewer

DEFAULT_LOG_ENTRIES = 10


@dataclass
class Command:
    name: str
    usage: str
    description: str
    category: str
    handler: Callable[[List[str]], None]
    min_args: int = 0


class App:
    """
    The command session.

    ``journal`` should be the handler returned by ``setup_logging`` so the
    ``log`` command sees what the session records.
    """

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        console: Optional[Console] = None,
        trash: Optional[TrashManager] = None,
        journal: Optional[OperationLog] = None,
        confirm: Optional[Callable[[str], bool]] = None,
        start_dir=None,
    ):
        self.config = config or AppConfig.from_env()
        self.display = Display(console, use_colors=self.config.use_colors)
        self.navigator = Navigator(start_dir)
        self.trash = trash or get_trash_manager(root=self.config.trash_root)
        self.fileops = FileOperator(self.trash)
        self.viewer = FileViewer(self.config.max_line_length)
        self.searcher = Searcher(self.config.search_max_file_size)
        self.bookmarks = BookmarkManager()
        self.filter_options = FilterOptions()
        self.journal = journal or OperationLog(self.config.journal_capacity)
        self.confirm = confirm or self._ask
        self.running = False
        self.commands: Dict[str, Command] = {}
        self._register_commands()

    def _ask(self, message: str) -> bool:
        return Confirm.ask(f"[bold {NordColors.PURPLE}]{message}[/]", console=self.display.console)

    def _path(self, name) -> Path:
        return self.navigator.resolve(name)

    # ----------------------------------------------------------------
    # Command registry
    # ----------------------------------------------------------------
    def _register_commands(self) -> None:
        table = [
            ("help", "help", "Show this help", "General", self.cmd_help, 0),
            ("exit", "exit", "Leave File Commander", "General", self.cmd_exit, 0),
            ("quit", "quit", "Leave File Commander", "General", self.cmd_exit, 0),
            ("log", "log [n]", "Show the last n journal entries", "General", self.cmd_log, 0),
            ("colors", "colors", "Toggle colored output", "General", self.cmd_colors, 0),
            ("ls", "ls [dir]", "List a directory", "Navigation", self.cmd_ls, 0),
            ("cd", "cd [dir]", "Change the current directory", "Navigation", self.cmd_cd, 0),
            ("pwd", "pwd", "Print the current directory", "Navigation", self.cmd_pwd, 0),
            ("filter", "filter [--ext= --name= --size=MIN-MAX --date=FROM-TO --type=fdh | reset]",
             "Filter directory listings", "Navigation", self.cmd_filter, 0),
            ("bookmark", "bookmark add <name> [dir] | list | remove <name> | go <name>",
             "Manage directory bookmarks", "Navigation", self.cmd_bookmark, 1),
            ("mkdir", "mkdir <dir>", "Create a directory", "Files", self.cmd_mkdir, 1),
            ("touch", "touch <file>", "Create an empty file", "Files", self.cmd_touch, 1),
            ("rm", "rm <path...>", "Move files or directories to the trash", "Files", self.cmd_rm, 1),
            ("rmdir", "rmdir <dir>", "Delete a directory permanently", "Files", self.cmd_rmdir, 1),
            ("cp", "cp <src> <dest>", "Copy a file or directory", "Files", self.cmd_cp, 2),
            ("mv", "mv <src> <dest>", "Move or rename", "Files", self.cmd_mv, 2),
            ("info", "info <path>", "Show file details", "Files", self.cmd_info, 1),
            ("cat", "cat <file> [start] [count]", "View a text file", "Files", self.cmd_cat, 1),
            ("chmod", "chmod <mode> <path>", "Change permissions (octal)", "Files", self.cmd_chmod, 2),
            ("find", "find <pattern> [dir]", "Find files by name", "Search", self.cmd_find, 1),
            ("grep", "grep <text> [dir]", "Find files containing text", "Search", self.cmd_grep, 1),
            ("rgrep", "rgrep <regex> [dir]", "Find files matching a regex", "Search", self.cmd_rgrep, 1),
            ("archive", "archive <name> <format|auto> <src...>",
             "Create an archive (zip, tar, tar.gz, tar.xz)", "Archives", self.cmd_archive, 3),
            ("extract", "extract <archive> [dir]", "Extract an archive", "Archives", self.cmd_extract, 1),
            ("list-archive", "list-archive <archive>", "List archive members", "Archives",
             self.cmd_list_archive, 1),
            ("trash-list", "trash-list", "List trash contents", "Trash", self.cmd_trash_list, 0),
            ("restore", "restore <name>", "Restore an item from the trash", "Trash", self.cmd_restore, 1),
            ("empty-trash", "empty-trash", "Permanently delete everything in the trash", "Trash",
             self.cmd_empty_trash, 0),
        ]
        for name, usage, description, category, handler, min_args in table:
            self.commands[name] = Command(name, usage, description, category, handler, min_args)

    # ----------------------------------------------------------------
    # Dispatch
    # ----------------------------------------------------------------
    def process_command(self, line: str) -> bool:
        """Run one command line; returns False if it failed."""
        try:
            tokens = shlex.split(line)
        except ValueError as e:
            self.display.print_error(f"Could not parse command: {e}")
            record_operation(logging.ERROR, "parse", "Could not parse command", error=e)
            return False
        if not tokens:
            return True

        name, args = tokens[0].lower(), tokens[1:]
        target = " ".join(args)
        command = self.commands.get(name)
        if command is None:
            self.display.print_error(f"Unknown command '{name}'. Type 'help' for a list of commands.")
            record_operation(logging.WARNING, name, "Unknown command")
            return False

        try:
            if len(args) < command.min_args:
                raise InvalidArgumentError(f"Usage: {command.usage}")
            command.handler(args)
        except PathTraversalError as e:
            self.display.print_error(f"Security violation: {e}")
            record_operation(logging.WARNING, name, "Blocked unsafe archive member", path=target, error=e)
            return False
        except (FileCommanderError, OSError) as e:
            self.display.print_error(str(e))
            record_operation(logging.ERROR, name, "Command failed", path=target, error=e)
            return False
        record_operation(logging.INFO, name, "Command completed", path=target)
        return True

    def execute(self, line: str) -> bool:
        return self.process_command(line)

    def run(self) -> None:
        """Interactive loop with history, suggestions and command completion."""
        self.display.console.print(
            self.display.create_header(self.config.APP_NAME, self.config.APP_SUBTITLE)
        )
        self.display.print_info("Type 'help' for a list of commands, 'exit' to quit.")

        history = None
        try:
            self.config.ensure_dirs()
            history = FileHistory(str(self.config.history_file))
        except OSError as e:
            self.display.print_warning(f"Command history disabled: {e}")
        completer = WordCompleter(sorted(self.commands), ignore_case=True)
        style = PtStyle.from_dict({"prompt": f"bold {NordColors.FROST_2}"})

        self.running = True
        while self.running:
            try:
                line = pt_prompt(
                    [("class:prompt", f"{self.navigator.current_dir} > ")],
                    history=history,
                    auto_suggest=AutoSuggestFromHistory(),
                    completer=completer,
                    style=style,
                )
            except KeyboardInterrupt:
                continue
            except EOFError:
                break
            self.process_command(line)
        self.display.print_info("Goodbye!")

    # ----------------------------------------------------------------
    # General
    # ----------------------------------------------------------------
    def cmd_help(self, args):
        rows = [
            (c.category, c.usage, c.description)
            for c in sorted(self.commands.values(), key=lambda c: (c.category, c.name))
        ]
        self.display.show_help(rows)

    def cmd_exit(self, args):
        self.running = False

    def cmd_log(self, args):
        limit = DEFAULT_LOG_ENTRIES
        if args:
            try:
                limit = int(args[0])
            except ValueError as e:
                raise InvalidArgumentError(f"Invalid entry count: '{args[0]}'") from e
        entries = self.journal.entries(limit)
        self.display.print_info(f"Operation journal (last {len(entries)}):")
        for record in entries:
            self.display.print_plain(format_entry(record))

    def cmd_colors(self, args):
        if self.display.toggle_colors():
            self.display.print_success("Colors enabled")
        else:
            self.display.print_success("Colors disabled")

    # ----------------------------------------------------------------
    # Navigation
    # ----------------------------------------------------------------
    def cmd_ls(self, args):
        target = args[0] if args else None
        entries = self.navigator.list_directory(target)
        path = self._path(target) if target else self.navigator.current_dir
        self.display.show_directory(path, apply_filter(entries, self.filter_options))

    def cmd_cd(self, args):
        self.navigator.change_directory(args[0] if args else "~")

    def cmd_pwd(self, args):
        self.display.print_plain(str(self.navigator.current_dir))

    def cmd_filter(self, args):
        if not args or args == ["reset"]:
            self.filter_options = FilterOptions()
            self.display.print_success("Filter reset")
        else:
            self.filter_options = parse_filter_args(args)
            self.display.print_success("Filter applied")
        self.cmd_ls([])

    def cmd_bookmark(self, args):
        action, rest = args[0], args[1:]
        if action == "list":
            bookmarks = self.bookmarks.list()
            if not bookmarks:
                self.display.print_info("No bookmarks")
            for bookmark in bookmarks:
                self.display.print_plain(f"{bookmark.name} -> {bookmark.path}")
            return
        if not rest:
            raise InvalidArgumentError(f"Usage: {self.commands['bookmark'].usage}")
        name = rest[0]
        if action == "add":
            target = self._path(rest[1]) if len(rest) > 1 else self.navigator.current_dir
            bookmark = self.bookmarks.add(name, target)
            self.display.print_success(f"Bookmark '{name}' -> {bookmark.path}")
        elif action == "remove":
            self.bookmarks.remove(name)
            self.display.print_success(f"Bookmark '{name}' removed")
        elif action == "go":
            self.navigator.change_directory(self.bookmarks.get(name))
        else:
            raise InvalidArgumentError(f"Unknown bookmark action '{action}'")

    # ----------------------------------------------------------------
    # Files
    # ----------------------------------------------------------------
    def cmd_mkdir(self, args):
        path = self.fileops.create_directory(self._path(args[0]))
        self.display.print_success(f"Created directory {path}")

    def cmd_touch(self, args):
        path = self.fileops.create_file(self._path(args[0]))
        self.display.print_success(f"Created file {path}")

    def cmd_rm(self, args):
        for name in args:
            trashed = self.fileops.delete_file(self._path(name))
            self.display.print_success(f"Moved {name} to trash as {trashed}")

    def cmd_rmdir(self, args):
        path = self._path(args[0])
        self.fileops.delete_directory(path)
        self.display.print_success(f"Deleted directory {path}")

    def cmd_cp(self, args):
        dest = self.fileops.copy(self._path(args[0]), self._path(args[1]))
        self.display.print_success(f"Copied {args[0]} to {dest}")

    def cmd_mv(self, args):
        dest = self.fileops.move(self._path(args[0]), self._path(args[1]))
        self.display.print_success(f"Moved {args[0]} to {dest}")

    def cmd_info(self, args):
        self.display.show_file_info(FileDetails.from_path(self._path(args[0])))

    def cmd_cat(self, args):
        try:
            start = int(args[1]) if len(args) > 1 else 0
            count = int(args[2]) if len(args) > 2 else self.config.view_lines
        except ValueError as e:
            raise InvalidArgumentError("Line numbers must be integers") from e
        lines = self.viewer.view_text_file(self._path(args[0]), start, count)
        if not lines:
            self.display.print_info("No lines to show")
            return
        self.display.print_plain(self.viewer.format_text_content(lines, start))

    def cmd_chmod(self, args):
        mode = change_permissions(self._path(args[1]), args[0])
        self.display.print_success(f"Permissions of {args[1]} set to {format(mode, 'o')}")

    # ----------------------------------------------------------------
    # Search
    # ----------------------------------------------------------------
    def _search_root(self, args) -> Path:
        return self._path(args[1]) if len(args) > 1 else self.navigator.current_dir

    def cmd_find(self, args):
        self.display.show_search_results(
            self.searcher.search_by_name(self._search_root(args), args[0]), args[0]
        )

    def cmd_grep(self, args):
        self.display.show_search_results(
            self.searcher.search_by_content(self._search_root(args), args[0]), args[0]
        )

    def cmd_rgrep(self, args):
        self.display.show_search_results(
            self.searcher.search_by_regex(self._search_root(args), args[0]), args[0]
        )

    # ----------------------------------------------------------------
    # Archives
    # ----------------------------------------------------------------
    def cmd_archive(self, args):
        name, fmt, sources = args[0], args[1], args[2:]
        destination = self._path(name)
        members = archive_files(
            [self._path(s) for s in sources],
            destination,
            None if fmt.lower() == "auto" else fmt,
        )
        self.display.print_success(f"Created {destination} with {len(members)} file(s)")

    def _archive_path(self, name: str) -> Path:
        if not is_archive(name):
            raise UnsupportedFormatError(f"Not a recognized archive: {name}")
        return self._path(name)

    def cmd_extract(self, args):
        destination = self._path(args[1]) if len(args) > 1 else self.navigator.current_dir
        written = extract_archive(self._archive_path(args[0]), destination)
        self.display.print_success(f"Extracted {len(written)} item(s) to {destination}")

    def cmd_list_archive(self, args):
        names = list_archive_contents(self._archive_path(args[0]))
        self.display.print_info(f"{len(names)} member(s) in {args[0]}:")
        for name in names:
            self.display.print_plain(f"  {name}")

    # ----------------------------------------------------------------
    # Trash
    # ----------------------------------------------------------------
    def cmd_trash_list(self, args):
        names = sorted(self.trash.list_trash())
        if not names:
            self.display.print_info("Trash is empty")
            return
        for name in names:
            self.display.print_plain(name)
        if self.trash.supports_restore:
            self.display.print_info("Use 'restore <name>' to put an item back")

    def cmd_restore(self, args):
        target = self.trash.restore_from_trash(args[0])
        self.display.print_success(f"Restored {args[0]} to {target}")

    def cmd_empty_trash(self, args):
        if not self.confirm("Permanently delete everything in the trash?"):
            self.display.print_warning("Empty trash cancelled")
            return
        self.trash.empty_trash()
        self.display.print_success("Trash emptied")
