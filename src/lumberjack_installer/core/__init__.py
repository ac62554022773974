"""Core installer building blocks and configuration exports."""

from .config import (
    BANNER,
    DEFAULT_FOLDER_NAME,
    TAGLINE,
    InstallOptions,
    build_install_options,
    load_user_config,
)
from .errors import (
    ConfigBlockNotFoundError,
    InstallerError,
    NetworkOrProcessError,
    PreconditionError,
    TargetExistsError,
    UpdateCheckWarning,
)
from .git_refs import BranchRef, GitRef, TagRef, resolve_git_ref
from .paths import ProjectPaths, ensure_target_available, resolve_project_paths

__all__ = [
    "BANNER",
    "BranchRef",
    "ConfigBlockNotFoundError",
    "DEFAULT_FOLDER_NAME",
    "GitRef",
    "InstallOptions",
    "InstallerError",
    "NetworkOrProcessError",
    "PreconditionError",
    "ProjectPaths",
    "TAGLINE",
    "TagRef",
    "TargetExistsError",
    "UpdateCheckWarning",
    "build_install_options",
    "ensure_target_available",
    "load_user_config",
    "resolve_git_ref",
    "resolve_project_paths",
]
