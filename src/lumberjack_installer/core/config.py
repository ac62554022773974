"""Installer defaults and the immutable options value threaded through an install.

Configuration sources, highest precedence first:

1. CLI flags
2. ``LUMBERJACK_*_REPO`` environment variables
3. The user config file (``LUMBERJACK_CONFIG`` or
   ``<user_config_dir>/lumberjack/config.yaml``)
4. The defaults below
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional

from platformdirs import user_config_dir
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .errors import InstallerConfigError

logger = logging.getLogger(__name__)

DEFAULT_FOLDER_NAME = "lumberjack-bedrock-site"
TRUNK_BRANCH = "master"
DEV_CONSTRAINT = "dev-master"

BEDROCK_REPO = "https://github.com/roots/bedrock.git"
THEME_REPO = "https://github.com/rareloop/lumberjack.git"
TRELLIS_REPO = "https://github.com/roots/trellis.git"

REPO_ENV_VARS = {
    "bedrock": "LUMBERJACK_BEDROCK_REPO",
    "theme": "LUMBERJACK_THEME_REPO",
    "trellis": "LUMBERJACK_TRELLIS_REPO",
}
CONFIG_ENV_VAR = "LUMBERJACK_CONFIG"

CORE_PACKAGE = "rareloop/lumberjack-core"
HATCHET_PACKAGE = "rareloop/hatchet"

DOTENV_LINES: tuple[str, ...] = ("\n", "APP_KEY=")
SERVICE_PROVIDERS: tuple[str, ...] = ()
CLEANUP_DIRS: tuple[str, ...] = (".github",)
TRACKED_GLOBAL_PACKAGES: tuple[str, ...] = ("rareloop/lumberjack-installer",)

PROVIDERS_KEY = "providers"

BANNER = r"""
  _                 _               _            _
 | |_   _ _ __ ___ | |__   ___ _ __(_) __ _  ___| | __
 | | | | | '_ ` _ \| '_ \ / _ \ '__| |/ _` |/ __| |/ /
 | | |_| | | | | | | |_) |  __/ |  | | (_| | (__|   <
 |_|\__,_|_| |_| |_|_.__/ \___|_| _/ |\__,_|\___|_|\_\
                                 |__/
"""

TAGLINE = "Lumberjack Installer - Bedrock + Lumberjack project scaffolding"


@dataclass(frozen=True)
class InstallOptions:
    """Everything an install needs, resolved once from flags and configuration."""

    project_name: str = DEFAULT_FOLDER_NAME
    dev: bool = False
    with_trellis: bool = False
    with_hatchet: bool = False
    check_updates: bool = True
    bedrock_repo: str = BEDROCK_REPO
    theme_repo: str = THEME_REPO
    trellis_repo: str = TRELLIS_REPO
    trunk: str = TRUNK_BRANCH
    dotenv_lines: tuple[str, ...] = DOTENV_LINES
    service_providers: tuple[str, ...] = SERVICE_PROVIDERS
    create_env_file: bool = False
    cleanup_dirs: tuple[str, ...] = CLEANUP_DIRS
    tracked_packages: tuple[str, ...] = TRACKED_GLOBAL_PACKAGES


@dataclass
class UserConfig:
    """Parsed contents of the optional user config file."""

    repositories: dict[str, str] = field(default_factory=dict)
    trunk: Optional[str] = None
    service_providers: Optional[tuple[str, ...]] = None
    dotenv_lines: Optional[tuple[str, ...]] = None
    create_env_file: Optional[bool] = None
    cleanup_dirs: Optional[tuple[str, ...]] = None

    @classmethod
    def from_dict(cls, data: Any, *, source: Path | str = "<config>") -> "UserConfig":
        if data is None:
            return cls()
        if not isinstance(data, Mapping):
            raise InstallerConfigError(f"Invalid config in {source}: expected a mapping at top level")

        repositories: dict[str, str] = {}
        raw_repos = data.get("repositories") or {}
        if not isinstance(raw_repos, Mapping):
            raise InstallerConfigError(f"Invalid repositories in {source}: expected a mapping")
        for name, url in raw_repos.items():
            if name not in REPO_ENV_VARS:
                logger.debug("Ignoring unknown repository key %r in %s", name, source)
                continue
            if not isinstance(url, str) or not url.strip():
                raise InstallerConfigError(f"Invalid repositories.{name} in {source}: expected a URL string")
            repositories[str(name)] = url.strip()

        trunk = data.get("trunk")
        if trunk is not None and (not isinstance(trunk, str) or not trunk.strip()):
            raise InstallerConfigError(f"Invalid trunk in {source}: expected a branch name")

        create_env_file = data.get("create_env_file")
        if create_env_file is not None and not isinstance(create_env_file, bool):
            raise InstallerConfigError(f"Invalid create_env_file in {source}: expected true or false")

        return cls(
            repositories=repositories,
            trunk=trunk.strip() if trunk else None,
            service_providers=_string_list(data, "service_providers", source),
            dotenv_lines=_string_list(data, "dotenv_lines", source),
            create_env_file=create_env_file,
            cleanup_dirs=_string_list(data, "cleanup_dirs", source),
        )


def _string_list(data: Mapping, key: str, source: Path | str) -> Optional[tuple[str, ...]]:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise InstallerConfigError(f"Invalid {key} in {source}: expected a list of strings")
    return tuple(value)


def default_config_path() -> Path:
    if env_path := os.environ.get(CONFIG_ENV_VAR):
        return Path(env_path).expanduser()
    return Path(user_config_dir("lumberjack")) / "config.yaml"


def load_user_config(path: Path | None = None) -> UserConfig:
    """Load the user config file, returning defaults when it does not exist."""
    config_file = path or default_config_path()
    if not config_file.exists():
        logger.debug("No user config at %s", config_file)
        return UserConfig()

    yaml = YAML(typ="safe")
    try:
        with open(config_file, "r", encoding="utf-8") as f:
            data = yaml.load(f)
    except YAMLError as e:
        raise InstallerConfigError(f"Invalid YAML in {config_file}: {e}") from e

    logger.debug("Loaded user config from %s", config_file)
    return UserConfig.from_dict(data, source=config_file)


def build_install_options(
    *,
    project_name: Optional[str] = None,
    dev: bool = False,
    with_trellis: bool = False,
    with_hatchet: bool = False,
    check_updates: bool = True,
    user_config: UserConfig | None = None,
    environ: Mapping[str, str] | None = None,
) -> InstallOptions:
    """Merge flags, environment and user config into a frozen ``InstallOptions``."""
    config = user_config or UserConfig()
    env = os.environ if environ is None else environ

    def repo(name: str, default: str) -> str:
        env_value = env.get(REPO_ENV_VARS[name], "").strip()
        if env_value:
            return env_value
        return config.repositories.get(name, default)

    return InstallOptions(
        project_name=project_name or DEFAULT_FOLDER_NAME,
        dev=dev,
        with_trellis=with_trellis,
        with_hatchet=with_hatchet,
        check_updates=check_updates,
        bedrock_repo=repo("bedrock", BEDROCK_REPO),
        theme_repo=repo("theme", THEME_REPO),
        trellis_repo=repo("trellis", TRELLIS_REPO),
        trunk=config.trunk or TRUNK_BRANCH,
        dotenv_lines=config.dotenv_lines if config.dotenv_lines is not None else DOTENV_LINES,
        service_providers=(
            config.service_providers if config.service_providers is not None else SERVICE_PROVIDERS
        ),
        create_env_file=bool(config.create_env_file),
        cleanup_dirs=config.cleanup_dirs if config.cleanup_dirs is not None else CLEANUP_DIRS,
    )


__all__ = [
    "BANNER",
    "CLEANUP_DIRS",
    "CORE_PACKAGE",
    "DEFAULT_FOLDER_NAME",
    "DEV_CONSTRAINT",
    "DOTENV_LINES",
    "HATCHET_PACKAGE",
    "InstallOptions",
    "PROVIDERS_KEY",
    "TAGLINE",
    "TRACKED_GLOBAL_PACKAGES",
    "TRUNK_BRANCH",
    "UserConfig",
    "build_install_options",
    "default_config_path",
    "load_user_config",
]
