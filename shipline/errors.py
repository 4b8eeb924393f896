"""Exception hierarchy for shipline.

Every failure the pipeline knows how to describe derives from
:class:`ShiplineError`.  Anything else reaching the top level is a bug.
"""

from __future__ import annotations


class ShiplineError(Exception):
    """Base class for pipeline failures."""


class CommandError(ShiplineError):
    """Raised when an external command exits non-zero."""

    def __init__(self, cmd: list[str], returncode: int, stderr: str) -> None:
        self.cmd = cmd
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(
            f"Command failed (rc={returncode}): {' '.join(cmd)}\n{stderr}"
        )


class CommitValidationError(ShiplineError):
    """Raised for the first commit message that does not conform."""

    def __init__(self, message: str) -> None:
        self.commit_message = message
        super().__init__(
            f"Commit message does not follow Conventional Commits: {message!r}"
        )


class CredentialsError(ShiplineError):
    """Raised when a credential string cannot be split into user and password."""


class ToolchainError(ShiplineError):
    """Raised when the Node.js toolchain cannot be provided."""


class StatusError(ShiplineError):
    """Raised when the commit status API rejects a report."""
