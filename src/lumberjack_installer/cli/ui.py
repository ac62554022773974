"""Rich rendering for install progress and failures."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.tree import Tree

_SYMBOLS = {
    "pending": "[green dim]○[/green dim]",
    "running": "[cyan]○[/cyan]",
    "done": "[green]●[/green]",
    "error": "[red]●[/red]",
    "skipped": "[yellow]○[/yellow]",
}


@dataclass
class TrackedStep:
    key: str
    label: str
    status: str = "pending"
    detail: str = ""


class StepTracker:
    """Track install stages and render them as a Rich tree.

    A refresh callback (usually ``Live.update``) is invoked after every change.
    """

    def __init__(self, title: str):
        self.title = title
        self.steps: list[TrackedStep] = []
        self._refresh_cb: Optional[Callable[[], None]] = None

    def attach_refresh(self, cb: Callable[[], None]) -> None:
        self._refresh_cb = cb

    def add(self, key: str, label: str) -> None:
        if self.get(key) is None:
            self.steps.append(TrackedStep(key, label))
            self._refresh()

    def get(self, key: str) -> Optional[TrackedStep]:
        for step in self.steps:
            if step.key == key:
                return step
        return None

    def start(self, key: str, detail: str = "") -> None:
        self._update(key, "running", detail)

    def complete(self, key: str, detail: str = "") -> None:
        self._update(key, "done", detail)

    def error(self, key: str, detail: str = "") -> None:
        self._update(key, "error", detail)

    def skip(self, key: str, detail: str = "") -> None:
        self._update(key, "skipped", detail)

    def _update(self, key: str, status: str, detail: str) -> None:
        step = self.get(key)
        if step is None:
            step = TrackedStep(key, key)
            self.steps.append(step)
        step.status = status
        if detail:
            step.detail = detail
        self._refresh()

    def _refresh(self) -> None:
        if self._refresh_cb:
            self._refresh_cb()

    def render(self) -> Tree:
        tree = Tree(f"[cyan]{self.title}[/cyan]", guide_style="grey50")
        for step in self.steps:
            symbol = _SYMBOLS.get(step.status, " ")
            detail = step.detail.strip()
            if step.status == "pending":
                text = f"{step.label} ({detail})" if detail else step.label
                tree.add(f"{symbol} [bright_black]{text}[/bright_black]")
            elif detail:
                tree.add(f"{symbol} [white]{step.label}[/white] [bright_black]({detail})[/bright_black]")
            else:
                tree.add(f"{symbol} [white]{step.label}[/white]")
        return tree


def failure_panel(stage: str, classification: str, message: str, output: str = "") -> Panel:
    lines = [
        f"[bold]{escape(message)}[/bold]",
        "",
        f"{'Stage':<15} [cyan]{stage}[/cyan]",
        f"{'Error':<15} [red]{classification}[/red]",
    ]
    if output.strip():
        lines.extend(["", f"[dim]{escape(output.strip())}[/dim]"])
    return Panel("\n".join(lines), title="[red]Install failed[/red]", border_style="red", padding=(1, 2))


def updates_table(updates) -> Table:
    table = Table(title="Updates available", show_header=True, header_style="bold cyan")
    table.add_column("Package")
    table.add_column("Installed")
    table.add_column("Latest", style="green")
    for info in updates:
        table.add_row(info.name, info.installed_version, info.latest_version)
    return table


__all__ = ["StepTracker", "TrackedStep", "failure_panel", "updates_table"]
