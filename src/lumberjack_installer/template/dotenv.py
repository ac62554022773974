"""Environment template augmentation."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Iterable

from lumberjack_installer.core.errors import EnvTemplateNotFoundError
from lumberjack_installer.core.paths import ProjectPaths

__all__ = ["append_env_lines", "augment_env"]

logger = logging.getLogger(__name__)


def append_env_lines(env_example: Path, lines: Iterable[str]) -> None:
    """Append *lines* verbatim to *env_example*.

    Not idempotent: a second call appends the same lines again.
    """
    if not env_example.is_file():
        raise EnvTemplateNotFoundError(f"Environment template not found: {env_example}")

    with open(env_example, "a", encoding="utf-8", newline="") as f:
        for line in lines:
            f.write(line)


def augment_env(paths: ProjectPaths, lines: Iterable[str], *, create_env_file: bool = False) -> list[Path]:
    """Append *lines* to ``.env.example`` and optionally copy it to ``.env``.

    Returns the files written.
    """
    append_env_lines(paths.env_example, lines)
    written = [paths.env_example]

    if create_env_file:
        shutil.copyfile(paths.env_example, paths.env)
        written.append(paths.env)
        logger.debug("Copied %s to %s", paths.env_example, paths.env)

    return written
