"""
Logging setup for the command line.

Library modules only create loggers; handlers are installed here, once,
by the CLI.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

# Third-party loggers that are noisy at INFO
QUIET_LOGGERS = ("httpx", "httpcore", "asyncio")


def setup_logging(verbose: bool = False, console: Optional[Console] = None) -> None:
    """Route log records through rich; DEBUG when verbose, WARNING otherwise."""
    level = logging.DEBUG if verbose else logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console or Console(stderr=True), rich_tracebacks=True, show_path=verbose)],
        force=True,
    )

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
