"""
Lumberjack Installer - scaffold a Bedrock site with the Lumberjack theme.

Usage:
    lumberjack new
    lumberjack new <project-name>
    lumberjack new <project-name> --dev --with-trellis
"""

import sys
from importlib.metadata import PackageNotFoundError, version as _dist_version

import typer
from rich.align import Align
from typer.core import TyperGroup

from lumberjack_installer.cli.commands import register_new_command
from lumberjack_installer.cli.helpers import console, show_banner

try:
    __version__ = _dist_version("lumberjack-installer")
except PackageNotFoundError:
    __version__ = "0.0.0"


class BannerGroup(TyperGroup):
    """Custom group that shows banner before help."""

    def format_help(self, ctx, formatter):
        show_banner()
        super().format_help(ctx, formatter)


app = typer.Typer(
    name="lumberjack",
    help="Installer for Lumberjack projects built on Bedrock",
    add_completion=False,
    invoke_without_command=True,
    cls=BannerGroup,
)


@app.callback()
def callback(ctx: typer.Context):
    """Show banner when no subcommand is provided."""
    if ctx.invoked_subcommand is None and "--help" not in sys.argv and "-h" not in sys.argv:
        show_banner()
        console.print(Align.center("[dim]Run 'lumberjack --help' for usage information[/dim]"))
        console.print()


@app.command()
def version():
    """Print the installer version."""
    console.print(f"lumberjack-installer {__version__}")


register_new_command(app, console=console, show_banner=show_banner)


def main():
    app()


if __name__ == "__main__":
    main()
