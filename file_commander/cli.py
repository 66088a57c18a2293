import atexit
import logging
import shlex
import signal
import sys
from typing import Any, List, Optional

from rich.console import Console
from rich.traceback import install as install_rich_traceback

from file_commander.app import App
from file_commander.config import AppConfig
from file_commander.display import NordColors
from file_commander.oplog import setup_logging, shutdown_logging

console = Console()


def cleanup() -> None:
    logging.info("File Commander session closed.")
    shutdown_logging()


def signal_handler(sig: int, frame: Any) -> None:
    sig_name = signal.Signals(sig).name
    console.print(f"\n[bold {NordColors.YELLOW}]⚠ Interrupted by {sig_name}[/]")
    logging.warning(f"Interrupted by {sig_name}")
    sys.exit(128 + sig)


def main(argv: Optional[List[str]] = None) -> int:
    """Run one command given on the command line, or start an interactive session."""
    argv = sys.argv[1:] if argv is None else argv
    install_rich_traceback(show_locals=False)

    config = AppConfig.from_env()
    journal = setup_logging(config)
    for sig in (signal.SIGINT, signal.SIGTERM):
        signal.signal(sig, signal_handler)
    atexit.register(cleanup)

    app = App(config, console=console, journal=journal)
    if argv:
        # quote each word so arguments with spaces survive re-tokenizing
        line = " ".join(shlex.quote(arg) for arg in argv)
        return 0 if app.execute(line) else 1

    try:
        app.run()
    except KeyboardInterrupt:
        console.print(f"\n[bold {NordColors.YELLOW}]⚠ Session interrupted by user.[/]")
        return 130
    return 0


if __name__ == "__main__":
    sys.exit(main())
