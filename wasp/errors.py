"""Error taxonomy shared by the scaffolder and the chat REPL."""

from __future__ import annotations


class WaspError(Exception):
    """Base class for every error the WASP tools report to the user."""


class ProjectNameError(WaspError, ValueError):
    """Raised when a project name contains characters outside ``[A-Za-z0-9_-]``."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(
            f"Invalid project name {name!r}: project name may only include "
            "letters, numbers, underscores and hyphens"
        )


class PrerequisiteError(WaspError):
    """Raised when a required toolchain is missing or too old."""

    def __init__(self, message: str, remediation: list[str] | None = None) -> None:
        self.remediation = remediation or []
        super().__init__(message)


class FilesystemError(WaspError):
    """Raised when a copy, read or write step fails."""


class ExternalProcessError(WaspError):
    """Raised when a shelled-out command exits with a failure."""

    def __init__(self, command: str, returncode: int, stderr: str = "") -> None:
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        message = f"Command failed with exit code {returncode}: {command}"
        if stderr.strip():
            message += f"\n{stderr.strip()}"
        super().__init__(message)
