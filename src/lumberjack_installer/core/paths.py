"""Filesystem layout for a new project."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path, PurePath
from typing import Optional

from .config import DEFAULT_FOLDER_NAME
from .errors import InvalidProjectNameError, TargetExistsError

__all__ = [
    "THEME_SUBPATH",
    "ProjectPaths",
    "ensure_target_available",
    "resolve_project_paths",
]

THEME_SUBPATH = PurePath("web", "app", "themes", "lumberjack")
SITE_DIR = "site"
TRELLIS_DIR = "trellis"


@dataclass(frozen=True)
class ProjectPaths:
    root: Path
    project: Path
    theme: Path
    secondary_template: Optional[Path] = None

    @property
    def env_example(self) -> Path:
        return self.project / ".env.example"

    @property
    def env(self) -> Path:
        return self.project / ".env"

    @property
    def app_config(self) -> Path:
        return self.theme / "config" / "app.php"


def _validate_name(name: str) -> str:
    stripped = name.strip()
    if not stripped or stripped in {".", ".."}:
        raise InvalidProjectNameError(f"Invalid project name: {name!r}")
    pure = PurePath(stripped)
    if pure.is_absolute() or len(pure.parts) != 1 or "\\" in stripped:
        raise InvalidProjectNameError(
            f"Invalid project name: {name!r}. Use a plain folder name without path separators"
        )
    return stripped


def resolve_project_paths(
    cwd: Path,
    project_name: Optional[str] = None,
    *,
    with_trellis: bool = False,
) -> ProjectPaths:
    """Compute the project layout without touching the filesystem.

    With Trellis the root holds ``site/`` (Bedrock) next to ``trellis/``;
    otherwise Bedrock occupies the root directly.
    """
    name = _validate_name(project_name if project_name is not None else DEFAULT_FOLDER_NAME)
    root = Path(cwd).absolute() / name

    if with_trellis:
        project = root / SITE_DIR
        secondary: Optional[Path] = root / TRELLIS_DIR
    else:
        project = root
        secondary = None

    return ProjectPaths(
        root=root,
        project=project,
        theme=project / THEME_SUBPATH,
        secondary_template=secondary,
    )


def ensure_target_available(paths: ProjectPaths) -> None:
    """Raise ``TargetExistsError`` when the install root is already on disk."""
    if paths.root.exists():
        raise TargetExistsError(paths.root)
