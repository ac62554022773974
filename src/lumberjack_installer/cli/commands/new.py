"""`new` command: scaffold a Bedrock + Lumberjack project."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Optional

import typer
from rich.console import Console
from rich.live import Live
from rich.panel import Panel

from lumberjack_installer.cli.helpers import configure_logging
from lumberjack_installer.cli.ui import StepTracker, failure_panel, updates_table
from lumberjack_installer.core.config import (
    DEFAULT_FOLDER_NAME,
    InstallOptions,
    UserConfig,
    build_install_options,
    load_user_config,
)
from lumberjack_installer.core.errors import NetworkOrProcessError, PreconditionError, TargetExistsError
from lumberjack_installer.core.paths import ProjectPaths, ensure_target_available, resolve_project_paths
from lumberjack_installer.core.process import Runner, run_process
from lumberjack_installer.core.updates import UpdateCheckResult, check_for_updates
from lumberjack_installer.pipeline import InstallPipeline, PipelineResult


def _precondition_panel(exc: PreconditionError) -> Panel:
    body = exc.message
    if isinstance(exc, TargetExistsError):
        body += "\nPlease choose a different project name or remove the existing directory."
    return Panel(
        body,
        title=f"[red]{exc.classification}[/red]",
        border_style="red",
        padding=(1, 2),
    )


def _setup_panel(options: InstallOptions, paths: ProjectPaths) -> Panel:
    lines = [
        "[cyan]Lumberjack Project Setup[/cyan]",
        "",
        f"{'Project':<15} [green]{paths.root.name}[/green]",
        f"{'Target Path':<15} [dim]{paths.root}[/dim]",
        f"{'Releases':<15} {'development (' + options.trunk + ')' if options.dev else 'latest stable tags'}",
    ]
    extras = [name for name, enabled in (("Trellis", options.with_trellis), ("Hatchet", options.with_hatchet)) if enabled]
    if extras:
        lines.append(f"{'Extras':<15} {', '.join(extras)}")
    return Panel("\n".join(lines), border_style="cyan", padding=(1, 2))


def _confirm_updates(check: UpdateCheckResult, console: Console, assume_yes: bool) -> None:
    if check.warning is not None:
        console.print(f"[yellow]Warning:[/yellow] {check.warning} - continuing without update check")
        return
    if not check.has_updates:
        return

    console.print(updates_table(check.updates))
    console.print("[yellow]A newer version of the installer is available.[/yellow]")
    if assume_yes:
        console.print("[cyan]--yes supplied: continuing with the installed version[/cyan]")
        return
    if not typer.confirm("Do you want to continue anyway?"):
        console.print("[yellow]Operation cancelled[/yellow]")
        raise typer.Exit(0)


def _next_steps_panel(paths: ProjectPaths, options: InstallOptions) -> Panel:
    steps = [f"1. Go to the project folder: [cyan]cd {paths.root.name}[/cyan]"]
    site = paths.project.relative_to(paths.root)
    env_hint = ".env" if options.create_env_file else "cp .env.example .env"
    if str(site) != ".":
        steps.append(f"2. Configure the site: [cyan]cd {site} && {env_hint}[/cyan]")
    else:
        steps.append(f"2. Configure the site: [cyan]{env_hint}[/cyan]")
    steps.append("3. Set [cyan]APP_KEY[/cyan] and your database credentials in [cyan].env[/cyan]")
    return Panel("\n".join(steps), title="Next Steps", border_style="cyan", padding=(1, 2))


def _render_result(result: PipelineResult, console: Console) -> None:
    exc = result.error
    if exc is None:
        return
    output = exc.output if isinstance(exc, NetworkOrProcessError) else exc.detail
    stage = result.failed_stage.value if result.failed_stage else "unknown"
    console.print()
    console.print(failure_panel(stage, exc.classification, exc.message, output))


def register_new_command(
    app: typer.Typer,
    *,
    console: Console,
    show_banner: Callable[[], None],
    runner: Runner = run_process,
    load_config: Callable[[], UserConfig] = load_user_config,
) -> None:
    """Attach the `new` command to *app*."""

    @app.command("new")
    def new(
        name: Optional[str] = typer.Argument(
            None, help=f"The name of the folder to create (defaults to `{DEFAULT_FOLDER_NAME}`)"
        ),
        dev: bool = typer.Option(
            False,
            "--dev",
            "-d",
            help="Use the latest development commits for Bedrock & Lumberjack instead of the most recent stable releases",
        ),
        with_trellis: bool = typer.Option(False, "--with-trellis", help="Also install Trellis next to the site"),
        with_hatchet: bool = typer.Option(False, "--with-hatchet", help="Also install the Hatchet CLI"),
        check_updates: bool = typer.Option(
            True, "--check-updates/--no-check-updates", help="Check for a newer installer before starting"
        ),
        yes: bool = typer.Option(False, "--yes", "-y", help="Continue without confirmation prompts"),
        debug: bool = typer.Option(False, "--debug", help="Show verbose diagnostic logging"),
    ) -> None:
        """Create a new Lumberjack project built on Bedrock."""
        configure_logging(debug)
        show_banner()

        try:
            options = build_install_options(
                project_name=name,
                dev=dev,
                with_trellis=with_trellis,
                with_hatchet=with_hatchet,
                check_updates=check_updates,
                user_config=load_config(),
            )
            paths = resolve_project_paths(Path.cwd(), options.project_name, with_trellis=options.with_trellis)
            ensure_target_available(paths)
        except PreconditionError as exc:
            console.print()
            console.print(_precondition_panel(exc))
            raise typer.Exit(1)

        console.print(_setup_panel(options, paths))

        warnings = []
        if options.check_updates:
            check = check_for_updates(options.tracked_packages, runner=runner)
            _confirm_updates(check, console, yes)
            if check.warning is not None:
                warnings.append(check.warning)

        tracker = StepTracker("Install Lumberjack Project")

        def forward(line: str) -> None:
            console.print(line.rstrip("\n"), markup=False, highlight=False)

        pipeline = InstallPipeline(options, paths, tracker=tracker, on_output=forward, runner=runner)
        pipeline.register_steps(tracker)

        try:
            with Live(tracker.render(), console=console, refresh_per_second=8, transient=True) as live:
                tracker.attach_refresh(lambda: live.update(tracker.render()))
                result = pipeline.run()
        except KeyboardInterrupt:
            console.print("\n[yellow]Installation interrupted[/yellow]")
            raise typer.Exit(130)
        result.warnings.extend(warnings)

        console.print(tracker.render())
        if not result.ok:
            _render_result(result, console)
            raise typer.Exit(1)

        installed = ", ".join(f"{repo} {ref}" for repo, ref in result.refs.items())
        console.print(f"\n[bold green]Project ready.[/bold green] [dim]({installed})[/dim]")
        console.print()
        console.print(_next_steps_panel(paths, options))


__all__ = ["register_new_command"]
