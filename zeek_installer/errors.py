from __future__ import annotations

from typing import Optional, Sequence


class InstallerError(RuntimeError):
    """Base for every failure that halts the installer or the stager."""

    kind = "error"

    def __init__(self, message: str, *, hint: Optional[str] = None) -> None:
        super().__init__(message)
        self.hint = hint


class PreconditionError(InstallerError):
    kind = "precondition"


class ConflictError(InstallerError):
    kind = "conflict"


class EnvironmentFailure(InstallerError):
    kind = "environment"


class CommandError(InstallerError):
    kind = "command"

    def __init__(self, argv: Sequence[str], returncode: int, stderr: str = "") -> None:
        self.argv = list(argv)
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(f"Command failed ({returncode}): {' '.join(self.argv)}\n{stderr}".rstrip())
