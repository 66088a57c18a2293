import os
import stat
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

import pyfiglet
from rich.box import ROUNDED
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.style import Style
from rich.table import Table
from rich.text import Text

from file_commander import __version__
from file_commander.errors import FileOperationError, NotFoundError


# ----------------------------------------------------------------
# Nord-Themed Colors
# ----------------------------------------------------------------
class NordColors:
    SNOW_STORM_1 = "#D8DEE9"
    SNOW_STORM_3 = "#ECEFF4"
    FROST_1 = "#8FBCBB"
    FROST_2 = "#88C0D0"
    FROST_3 = "#81A1C1"
    FROST_4 = "#5E81AC"
    RED = "#BF616A"
    YELLOW = "#EBCB8B"
    GREEN = "#A3BE8C"
    PURPLE = "#B48EAD"

    SUCCESS = Style(color=GREEN, bold=True)
    ERROR = Style(color=RED, bold=True)
    WARNING = Style(color=YELLOW, bold=True)
    INFO = Style(color=FROST_2, bold=True)
    HEADER = Style(color=FROST_1, bold=True)
    ACCENT = Style(color=FROST_4, bold=True)

    @classmethod
    def get_frost_gradient(cls, steps=4):
        return [cls.FROST_1, cls.FROST_2, cls.FROST_3, cls.FROST_4][:steps]


def format_size(num_bytes):
    for unit in ["B", "KB", "MB", "GB", "TB"]:
        if num_bytes < 1024:
            return f"{num_bytes:.1f} {unit}"
        num_bytes /= 1024
    return f"{num_bytes:.1f} PB"


@dataclass
class FileDetails:
    name: str
    path: Path
    size: int
    is_dir: bool
    mode: int
    modified: datetime
    created: datetime
    is_executable: bool = False

    @classmethod
    def from_path(cls, path) -> "FileDetails":
        path = Path(path)
        try:
            st = path.stat()
        except FileNotFoundError as e:
            raise NotFoundError(f"No such file or directory: {path}") from e
        except OSError as e:
            raise FileOperationError(f"Could not stat {path}: {e}") from e
        # st_birthtime only exists on macOS and BSD
        born = getattr(st, "st_birthtime", st.st_mtime)
        return cls(
            name=path.name,
            path=path.resolve(),
            size=st.st_size,
            is_dir=stat.S_ISDIR(st.st_mode),
            mode=st.st_mode,
            modified=datetime.fromtimestamp(st.st_mtime),
            created=datetime.fromtimestamp(born),
            is_executable=not stat.S_ISDIR(st.st_mode) and os.access(path, os.X_OK),
        )


class Display:
    """All console output of the application goes through here."""

    def __init__(self, console: Optional[Console] = None, use_colors: bool = True):
        self.console = console or Console()
        self.use_colors = use_colors
        self.console.no_color = not use_colors

    def toggle_colors(self) -> bool:
        self.use_colors = not self.use_colors
        self.console.no_color = not self.use_colors
        return self.use_colors

    # ----------------------------------------------------------------
    # Messages
    # ----------------------------------------------------------------
    def print_message(self, message, style=NordColors.INFO, prefix="•"):
        self.console.print(f"[{style}]{prefix} {escape(str(message))}[/{style}]")

    def print_success(self, message):
        self.print_message(message, NordColors.SUCCESS, "✓")

    def print_warning(self, message):
        self.print_message(message, NordColors.WARNING, "⚠")

    def print_error(self, message):
        self.print_message(message, NordColors.ERROR, "✗")

    def print_info(self, message):
        self.print_message(message, NordColors.INFO, "→")

    def print_plain(self, text):
        self.console.print(text, markup=False, highlight=False, soft_wrap=True)

    def create_header(self, title: str, subtitle: str) -> Panel:
        width = min(self.console.width - 8, 80)
        ascii_art = ""
        for font in ["slant", "small_slant", "standard", "small"]:
            try:
                ascii_art = pyfiglet.Figlet(font=font, width=width).renderText(title)
                if ascii_art.strip():
                    break
            except pyfiglet.FigletError:
                continue
        if not ascii_art.strip():
            ascii_art = title

        lines = [line for line in ascii_art.splitlines() if line.strip()]
        colors = NordColors.get_frost_gradient(min(len(lines), 4))
        styled_text = ""
        for i, line in enumerate(lines):
            styled_text += f"[bold {colors[i % len(colors)]}]{escape(line)}[/]\n"

        return Panel(
            Text.from_markup(styled_text.rstrip("\n")),
            border_style=Style(color=NordColors.FROST_1),
            padding=(1, 2),
            title=f"[bold {NordColors.SNOW_STORM_3}]v{__version__}[/]",
            title_align="right",
            subtitle=f"[bold {NordColors.SNOW_STORM_1}]{subtitle}[/]",
            subtitle_align="center",
        )

    # ----------------------------------------------------------------
    # Directory listings and file details
    # ----------------------------------------------------------------
    def show_directory(self, path: Path, entries: Iterable[os.DirEntry]) -> None:
        table = Table(
            show_header=True,
            header_style=NordColors.HEADER,
            box=ROUNDED,
            title=escape(str(path)),
            border_style=NordColors.FROST_3,
            padding=(0, 1),
        )
        table.add_column("Name", style=NordColors.FROST_1)
        table.add_column("Size", style=NordColors.FROST_3, justify="right")
        table.add_column("Permissions", style=NordColors.SNOW_STORM_1)
        table.add_column("Modified", style=NordColors.SNOW_STORM_1)

        count = 0
        for entry in entries:
            count += 1
            try:
                st = entry.stat()
            except OSError:
                table.add_row(escape(entry.name), "?", "?", "?")
                continue
            is_dir = stat.S_ISDIR(st.st_mode)
            name = escape(entry.name) + ("/" if is_dir else "")
            table.add_row(
                f"[bold {NordColors.FROST_2}]{name}[/]" if is_dir else name,
                "-" if is_dir else format_size(st.st_size),
                stat.filemode(st.st_mode),
                datetime.fromtimestamp(st.st_mtime).strftime("%Y-%m-%d %H:%M"),
            )
        if count == 0:
            self.print_info("Directory is empty")
            return
        self.console.print(table)

    def show_file_info(self, details: FileDetails) -> None:
        kind = "Directory" if details.is_dir else "File"
        if details.is_executable:
            kind += " (executable)"
        body = (
            f"[bold {NordColors.FROST_2}]Path:[/] {escape(str(details.path))}\n"
            f"[bold {NordColors.FROST_2}]Type:[/] {kind}\n"
            f"[bold {NordColors.FROST_2}]Size:[/] {format_size(details.size)} ({details.size} bytes)\n"
            f"[bold {NordColors.FROST_2}]Permissions:[/] {stat.filemode(details.mode)} "
            f"({format(stat.S_IMODE(details.mode), 'o')})\n"
            f"[bold {NordColors.FROST_2}]Modified:[/] {details.modified:%Y-%m-%d %H:%M:%S}\n"
            f"[bold {NordColors.FROST_2}]Created:[/] {details.created:%Y-%m-%d %H:%M:%S}"
        )
        self.console.print(
            Panel(
                Text.from_markup(body),
                title=f"[bold {NordColors.FROST_1}]{escape(details.name)}[/]",
                border_style=Style(color=NordColors.FROST_4),
                padding=(1, 2),
            )
        )

    def show_search_results(self, results: List[str], query: str) -> None:
        if not results:
            self.print_warning(f"No matches for '{query}'")
            return
        self.print_info(f"Found {len(results)} match(es) for '{query}':")
        for path in results:
            self.console.print(f"  [{NordColors.FROST_1}]{escape(path)}[/]")

    def show_lines(self, lines: List[str]) -> None:
        for line in lines:
            self.print_plain(line)

    def show_help(self, rows: List[Tuple[str, str, str]]) -> None:
        table = Table(
            show_header=True,
            header_style=NordColors.HEADER,
            box=ROUNDED,
            title="Available Commands",
            border_style=NordColors.FROST_3,
            expand=True,
        )
        table.add_column("Category", style=NordColors.ACCENT)
        table.add_column("Usage", style=NordColors.FROST_1)
        table.add_column("Description", style=NordColors.SNOW_STORM_1)
        for category, usage, description in rows:
            table.add_row(category, escape(usage), description)
        self.console.print(table)
