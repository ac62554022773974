"""Turn a remote repository into a plain, detached file tree."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Optional

from .errors import MaterializeError, TargetExistsError
from .git_refs import GitRef
from .process import OutputCallback, ProcessFailure, Runner, run_process

__all__ = ["clone_command", "materialize_repository"]

logger = logging.getLogger(__name__)


def clone_command(repo_url: str, ref: GitRef, target: Path) -> list[str]:
    return ["git", "clone", "--depth=1", "--branch", ref.name, repo_url, str(target)]


def materialize_repository(
    repo_url: str,
    ref: GitRef,
    target: Path,
    *,
    runner: Runner = run_process,
    on_output: Optional[OutputCallback] = None,
) -> Path:
    """Shallow-clone *repo_url* at *ref* into *target* and strip its ``.git``.

    Raises:
        TargetExistsError: *target* is already on disk.
        MaterializeError: the clone failed or the metadata could not be removed.
    """
    if target.exists():
        raise TargetExistsError(target)

    command = clone_command(repo_url, ref, target)
    try:
        runner(command, on_output=on_output)
    except ProcessFailure as failure:
        raise MaterializeError.from_failure(f"Failed to clone {repo_url} ({ref})", failure) from failure

    git_dir = target / ".git"
    if git_dir.exists():
        try:
            shutil.rmtree(git_dir)
        except OSError as e:
            raise MaterializeError(
                f"Failed to remove version control metadata from {target}",
                command=["rm", "-rf", str(git_dir)],
                output=str(e),
            ) from e
    logger.debug("Materialized %s@%s into %s", repo_url, ref, target)
    return target
