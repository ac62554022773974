"""Fakes and template fixtures shared by the installer tests."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Callable, Optional

from lumberjack_installer.core.config import BEDROCK_REPO, THEME_REPO, TRELLIS_REPO
from lumberjack_installer.core.process import ProcessFailure, ProcessResult

APP_PHP = r"""<?php

return [
    'name' => 'Lumberjack',

    'providers' => [
        Rareloop\Lumberjack\Providers\RouterServiceProvider::class,
        Rareloop\Lumberjack\Providers\WordPressControllersServiceProvider::class,
    ],

    'aliases' => [
        'Config' => Rareloop\Lumberjack\Facades\Config::class,
    ],
];
"""

BEDROCK_FILES = {
    ".env.example": "DB_NAME=database_name\nDB_USER=database_user\n",
    ".github/workflows/ci.yml": "name: CI\n",
    "composer.json": "{}\n",
    "web/app/themes/.gitkeep": "",
}

THEME_FILES = {
    "config/app.php": APP_PHP,
    "functions.php": "<?php\n",
}

TRELLIS_FILES = {
    "ansible.cfg": "[defaults]\n",
    ".github/CONTRIBUTING.md": "# Contributing\n",
}


class FakeRunner:
    """Stand-in for ``run_process`` that simulates git and composer."""

    def __init__(
        self,
        *,
        tags: Optional[dict[str, list[str]]] = None,
        templates: Optional[dict[str, dict[str, str]]] = None,
        outdated: Optional[list[dict[str, str]]] = None,
        fail_on: Optional[Callable[[list[str]], bool]] = None,
    ):
        self.tags = tags if tags is not None else {
            BEDROCK_REPO: ["1.9.0", "1.10.2", "not-a-release"],
            THEME_REPO: ["v4.0.0", "v4.1.0", "v4.1.0^{}"],
            TRELLIS_REPO: ["1.0.0"],
        }
        self.templates = templates if templates is not None else {
            BEDROCK_REPO: BEDROCK_FILES,
            THEME_REPO: THEME_FILES,
            TRELLIS_REPO: TRELLIS_FILES,
        }
        self.outdated = outdated or []
        self.fail_on = fail_on
        self.calls: list[tuple[list[str], Optional[Path]]] = []

    def commands(self, prefix: tuple[str, ...] = ()) -> list[list[str]]:
        return [cmd for cmd, _ in self.calls if tuple(cmd[: len(prefix)]) == prefix]

    def __call__(self, command, *, cwd=None, on_output=None, merge_stderr=True):
        command = list(command)
        self.calls.append((command, cwd))
        if self.fail_on is not None and self.fail_on(command):
            raise ProcessFailure(command, 128, f"fatal: {' '.join(command)} failed\n")

        output = ""
        if command[:3] == ["git", "ls-remote", "--tags"]:
            output = "".join(
                f"{index:040x}\trefs/tags/{tag}\n" for index, tag in enumerate(self.tags.get(command[3], []))
            )
        elif command[:2] == ["git", "clone"]:
            target = Path(command[-1])
            target.mkdir(parents=True)
            (target / ".git").mkdir()
            (target / ".git" / "HEAD").write_text("ref: refs/heads/master\n", encoding="utf-8")
            for rel, content in self.templates.get(command[-2], {}).items():
                path = target / rel
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_text(content, encoding="utf-8")
            output = f"Cloning into '{target}'...\n"
        elif command[:2] == ["composer", "require"]:
            output = "".join(f"Using version for {pkg}\n" for pkg in command[2:])
        elif command[:3] == ["composer", "global", "outdated"]:
            output = json.dumps({"installed": self.outdated})
            if merge_stderr:
                # Real composer reports the global directory switch on stderr.
                output = "Changed current directory to /home/user/.composer\n" + output

        if on_output is not None:
            for line in output.splitlines(keepends=True):
                on_output(line)
        return ProcessResult(command=command, returncode=0, output=output)
