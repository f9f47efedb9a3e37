"""Exception hierarchy for quasar-scaffold.

Library code raises these; only the CLI entry point turns them into a
console message and a non-zero exit status.
"""

from __future__ import annotations

from pathlib import Path


class ScaffoldError(Exception):
    """Raised when a scaffolding step fails irrecoverably."""


class ScaffoldCancelled(ScaffoldError):
    """Raised when the user aborts the interactive questionnaire."""

    def __init__(self, message: str = "Scaffolding cancelled") -> None:
        super().__init__(message)


class CommandError(ScaffoldError):
    """Raised when an external command exits with a non-zero status."""

    def __init__(self, cmd: str, returncode: int, message: str | None = None) -> None:
        self.cmd = cmd
        self.returncode = returncode
        super().__init__(message or f"{cmd} FAILED (exit code {returncode})")


class TemplateRenderError(ScaffoldError):
    """Raised when a template cannot be rendered into valid output."""

    def __init__(self, path: str | Path, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Failed to render {self.path}: {reason}")


class BexError(ScaffoldError):
    """Raised when adding or removing Browser Extension support fails."""
