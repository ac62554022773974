"""Removal of incidental directories shipped with the upstream templates."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Iterable

__all__ = ["remove_scaffold_dirs"]

logger = logging.getLogger(__name__)


def remove_scaffold_dirs(base_dirs: Iterable[Path], names: Iterable[str]) -> list[Path]:
    """Delete each ``base/name`` directory that exists, returning the removed paths."""
    names = tuple(names)
    removed: list[Path] = []
    for base in base_dirs:
        for name in names:
            candidate = base / name
            if candidate.is_dir():
                shutil.rmtree(candidate)
                removed.append(candidate)
            else:
                logger.debug("Nothing to remove at %s", candidate)
    return removed
