"""Shared console and banner helpers for CLI commands."""

from __future__ import annotations

import logging

from rich.align import Align
from rich.console import Console
from rich.logging import RichHandler
from rich.text import Text

from lumberjack_installer.core.config import BANNER, TAGLINE

console = Console()


def show_banner() -> None:
    """Display the ASCII art banner."""
    banner_lines = BANNER.strip("\n").split("\n")
    colors = ["bright_green", "green", "bright_yellow", "yellow", "bright_green", "green"]

    styled_banner = Text()
    for i, line in enumerate(banner_lines):
        styled_banner.append(line + "\n", style=colors[i % len(colors)])

    console.print(Align.center(styled_banner))
    console.print(Align.center(Text(TAGLINE, style="italic bright_yellow")))
    console.print()


def configure_logging(debug: bool = False) -> None:
    """Route log records through Rich when --debug is set."""
    if debug:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            datefmt="[%X]",
            handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
            force=True,
        )
    else:
        logging.basicConfig(level=logging.WARNING, format="%(levelname)s: %(message)s")


__all__ = ["configure_logging", "console", "show_banner"]
