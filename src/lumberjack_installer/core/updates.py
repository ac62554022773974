"""Pre-flight check for outdated globally installed Composer packages."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

from .errors import UpdateCheckWarning
from .process import ProcessFailure, Runner, run_process

__all__ = [
    "OUTDATED_COMMAND",
    "PackageUpdateInfo",
    "UpdateCheckResult",
    "check_for_updates",
    "parse_outdated_output",
]

logger = logging.getLogger(__name__)

OUTDATED_COMMAND = ["composer", "global", "outdated", "--direct", "--format=json"]


@dataclass(frozen=True)
class PackageUpdateInfo:
    name: str
    installed_version: str
    latest_version: str


@dataclass
class UpdateCheckResult:
    """Outcome of the update query; a warning means the check was bypassed."""

    updates: list[PackageUpdateInfo] = field(default_factory=list)
    warning: Optional[UpdateCheckWarning] = None

    @property
    def has_updates(self) -> bool:
        return bool(self.updates)

    @property
    def skipped(self) -> bool:
        return self.warning is not None


def parse_outdated_output(output: str) -> list[PackageUpdateInfo]:
    """Parse ``composer outdated --format=json``.

    Raises:
        ValueError: the payload is not the expected JSON shape.
    """
    data = json.loads(output or "{}")
    if not isinstance(data, dict):
        raise ValueError("expected a JSON object")
    installed = data.get("installed", [])
    if not isinstance(installed, list):
        raise ValueError("expected 'installed' to be a list")

    packages = []
    for entry in installed:
        if not isinstance(entry, dict) or "name" not in entry:
            continue
        packages.append(
            PackageUpdateInfo(
                name=str(entry["name"]),
                installed_version=str(entry.get("version", "")),
                latest_version=str(entry.get("latest", "")),
            )
        )
    return packages


def check_for_updates(
    tracked_packages: Iterable[str],
    *,
    runner: Runner = run_process,
) -> UpdateCheckResult:
    """Return tracked packages with newer releases; never raises on query failure."""
    tracked = set(tracked_packages)
    try:
        # composer global prints "Changed current directory to ..." on stderr.
        result = runner(OUTDATED_COMMAND, merge_stderr=False)
    except ProcessFailure as failure:
        logger.warning("Update check failed: %s", failure)
        return UpdateCheckResult(
            warning=UpdateCheckWarning("Could not check for installer updates", detail=failure.output)
        )

    try:
        outdated = parse_outdated_output(result.output)
    except ValueError as e:
        logger.warning("Could not parse composer outdated output: %s", e)
        return UpdateCheckResult(
            warning=UpdateCheckWarning("Could not read installer update information", detail=str(e))
        )

    return UpdateCheckResult(updates=[info for info in outdated if info.name in tracked])
