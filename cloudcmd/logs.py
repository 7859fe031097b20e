from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

_ERROR_CONSOLE = Console(stderr=True)


def configure_logging(level: str = "WARNING") -> None:
    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=False,
    )
    logging.basicConfig(
        level=getattr(logging, str(level or "").upper(), logging.WARNING),
        format="%(name)s: %(message)s",
        handlers=[handler],
        force=True,
    )


def rich_error(msg: str) -> None:
    _ERROR_CONSOLE.print(f"[bold red]error:[/bold red] {escape(msg)}")
