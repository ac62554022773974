"""Composer invocation for the materialized project."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

from .config import CORE_PACKAGE, DEV_CONSTRAINT, HATCHET_PACKAGE, InstallOptions
from .errors import DependencyInstallError
from .process import OutputCallback, ProcessFailure, Runner, run_process

__all__ = [
    "ComposerDependency",
    "composer_dependencies",
    "install_dependencies",
    "require_command",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ComposerDependency:
    package: str
    constraint: Optional[str] = None

    def __str__(self) -> str:
        if self.constraint:
            return f"{self.package}:{self.constraint}"
        return self.package


def composer_dependencies(options: InstallOptions) -> tuple[ComposerDependency, ...]:
    constraint = DEV_CONSTRAINT if options.dev else None
    packages = [CORE_PACKAGE]
    if options.with_hatchet:
        packages.append(HATCHET_PACKAGE)
    return tuple(ComposerDependency(package, constraint) for package in packages)


def require_command(dependencies: Iterable[ComposerDependency]) -> list[str]:
    return ["composer", "require", *(str(dep) for dep in dependencies)]


def install_dependencies(
    project_dir: Path,
    dependencies: tuple[ComposerDependency, ...],
    *,
    runner: Runner = run_process,
    on_output: Optional[OutputCallback] = None,
) -> None:
    """Require every dependency in a single Composer call inside *project_dir*.

    One call keeps Composer's conflict resolution working across the whole set.
    """
    if not dependencies:
        logger.debug("No Composer dependencies requested")
        return

    command = require_command(dependencies)
    try:
        runner(command, cwd=project_dir, on_output=on_output)
    except ProcessFailure as failure:
        raise DependencyInstallError.from_failure("Composer dependency install failed", failure) from failure
