"""Command-line interface for the activity logger."""

from __future__ import annotations

import logging
import os

import typer

from .config import LoggerSettings
from .errors import StartupError
from .paths import get_log_path

app = typer.Typer(help="Log which application has focus, one file per day.")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

logger = logging.getLogger(__name__)


@app.callback(no_args_is_help=True)
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logs.")) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
    )
    root = logging.getLogger()
    try:
        log_path = get_log_path()
        if any(
            isinstance(handler, logging.FileHandler)
            and handler.baseFilename == os.path.abspath(log_path)
            for handler in root.handlers
        ):
            return
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
    except OSError as exc:
        logger.warning("Diagnostic log file unavailable: %s", exc)
        return
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(file_handler)


@app.command()
def run() -> None:
    """Run the activity logger until interrupted."""
    from .daemon import ScreenTimeDaemon
    from .sampler import make_sampler

    try:
        daemon = ScreenTimeDaemon(settings=LoggerSettings(), sampler=make_sampler())
        daemon.run_forever()
    except StartupError as exc:
        logger.error("%s", exc)
        raise typer.Exit(code=1) from exc
