"""Installer error taxonomy and result envelopes."""

from __future__ import annotations

from dataclasses import dataclass

__all__ = [
    "InstallerError",
    "PreconditionError",
    "TargetExistsError",
    "InvalidProjectNameError",
    "InstallerConfigError",
    "NetworkOrProcessError",
    "GitQueryError",
    "MaterializeError",
    "DependencyInstallError",
    "ConfigBlockNotFoundError",
    "EnvTemplateNotFoundError",
    "UpdateCheckWarning",
]


class InstallerError(Exception):
    """Base class for every step-fatal installer failure."""

    classification = "InstallerError"

    def __init__(self, message: str, *, detail: str = ""):
        super().__init__(message)
        self.message = message
        self.detail = detail


class PreconditionError(InstallerError):
    """Raised before any side effect when the install cannot start."""

    classification = "PreconditionError"


class TargetExistsError(PreconditionError):
    def __init__(self, path):
        super().__init__(f"Can't install to: {path}. The directory already exists")
        self.path = path


class InvalidProjectNameError(PreconditionError):
    pass


class InstallerConfigError(PreconditionError):
    """Raised when the user configuration file cannot be parsed or validated."""


class NetworkOrProcessError(InstallerError):
    """A subprocess (git, composer) exited non-zero or could not be started."""

    classification = "NetworkOrProcessError"

    def __init__(
        self,
        message: str,
        *,
        command: list[str] | None = None,
        output: str = "",
        returncode: int | None = None,
    ):
        super().__init__(message, detail=output)
        self.command = list(command or [])
        self.output = output
        self.returncode = returncode

    @property
    def command_line(self) -> str:
        return " ".join(self.command)

    @classmethod
    def from_failure(cls, message: str, failure) -> "NetworkOrProcessError":
        return cls(
            message,
            command=failure.command,
            output=failure.output,
            returncode=failure.returncode,
        )


class GitQueryError(NetworkOrProcessError):
    pass


class MaterializeError(NetworkOrProcessError):
    pass


class DependencyInstallError(NetworkOrProcessError):
    pass


class ConfigBlockNotFoundError(InstallerError):
    """A pattern-based text mutation could not find the block or its anchor."""

    classification = "ConfigBlockNotFoundError"


class EnvTemplateNotFoundError(ConfigBlockNotFoundError):
    pass


@dataclass(frozen=True)
class UpdateCheckWarning:
    """Advisory raised by the update check; logged and bypassed, never fatal."""

    message: str
    detail: str = ""

    classification = "UpdateCheckWarning"

    def __str__(self) -> str:
        return self.message
