"""Error taxonomy for the Bituin CLI.

Every failure is terminal to the current command.  Modules raise one of the
``BituinError`` subclasses below; only :func:`bituin.cli.main` catches them,
prints the message and turns ``exit_code`` into the process exit status.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from bituin.runner import RunResult


class BituinError(Exception):
    """Base class for all user-facing Bituin errors."""

    exit_code: int = 1

    def __init__(self, message: str, output: str | bytes = "") -> None:
        self.output = output
        super().__init__(message)


class UsageError(BituinError):
    """Missing or invalid command-line arguments."""


class NotAProjectError(BituinError):
    """The current directory has no ``bituin.toml`` marker."""


class AlreadyExistsError(BituinError):
    """The target directory of ``new`` is already taken."""


class IOFailure(BituinError):
    """A filesystem read, write or mkdir failed."""

    def __init__(self, action: str, cause: OSError | ValueError) -> None:
        self.cause = cause
        super().__init__(f"Error {action}: {cause}")


class MainFileNotFoundError(BituinError):
    """The resolved entry point does not exist."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f'Error: Main file "{path}" not found.')


class InterpreterNotFoundError(BituinError):
    """No interpreter executable was found in the search directories."""

    def __init__(self, names: list[str], searched: list[Path]) -> None:
        self.names = names
        self.searched = searched
        locations = ", ".join(str(p) for p in searched)
        super().__init__(f"Error: {names[0]} not found in: {locations}")


class ExecutionFailedError(BituinError):
    """The interpreter exited with a non-zero status."""

    def __init__(self, result: RunResult) -> None:
        self.result = result
        super().__init__(
            f"[{result.duration_seconds:.3f}s] Error: execution failed",
            output=result.output,
        )
