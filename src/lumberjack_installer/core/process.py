"""Blocking subprocess execution with incremental output forwarding."""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Protocol

__all__ = [
    "OutputCallback",
    "ProcessFailure",
    "ProcessResult",
    "Runner",
    "run_process",
]

logger = logging.getLogger(__name__)

OutputCallback = Callable[[str], None]


@dataclass
class ProcessResult:
    command: list[str]
    returncode: int
    output: str
    stderr: str = ""


class ProcessFailure(Exception):
    """Raised when a command exits non-zero or cannot be started."""

    def __init__(self, command: list[str], returncode: int, output: str):
        super().__init__(f"Command failed ({returncode}): {' '.join(command)}")
        self.command = command
        self.returncode = returncode
        self.output = output


class Runner(Protocol):
    def __call__(
        self,
        command: list[str],
        *,
        cwd: Optional[Path] = None,
        on_output: Optional[OutputCallback] = None,
        merge_stderr: bool = True,
    ) -> ProcessResult: ...


def run_process(
    command: list[str],
    *,
    cwd: Optional[Path] = None,
    on_output: Optional[OutputCallback] = None,
    merge_stderr: bool = True,
) -> ProcessResult:
    """Run *command* to completion, forwarding each output line to *on_output*.

    By default stdout and stderr are merged so diagnostics arrive in the order
    the tool printed them, and lines are forwarded as they are produced. With
    ``merge_stderr=False`` the streams are captured separately: ``output`` holds
    stdout only, ``stderr`` holds the rest, and stdout lines are forwarded once
    the command exits. A failure transcript always carries both streams.

    Raises:
        ProcessFailure: non-zero exit, or the executable is missing (127).
    """
    logger.debug("Running %s (cwd=%s)", " ".join(command), cwd or ".")
    try:
        process = subprocess.Popen(
            command,
            cwd=str(cwd) if cwd else None,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT if merge_stderr else subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="replace",
        )
    except FileNotFoundError:
        raise ProcessFailure(command, 127, f"{command[0]} executable not found on PATH") from None

    if merge_stderr:
        lines: list[str] = []
        assert process.stdout is not None
        with process.stdout:
            for line in process.stdout:
                lines.append(line)
                if on_output is not None:
                    on_output(line)
        returncode = process.wait()
        output, stderr = "".join(lines), ""
    else:
        output, stderr = process.communicate()
        returncode = process.returncode
        if on_output is not None:
            for line in output.splitlines(keepends=True):
                on_output(line)

    if returncode != 0:
        logger.debug("Command exited %s: %s", returncode, " ".join(command))
        raise ProcessFailure(command, returncode, output + stderr)
    return ProcessResult(command=command, returncode=returncode, output=output, stderr=stderr)
