"""Shared utility functions for the Bituin CLI.

Provides Rich-based console output, async subprocess execution with combined
output capture, and small file-system and formatting helpers.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

from rich.console import Console
from rich.markup import escape

console = Console(soft_wrap=True)
err_console = Console(stderr=True, soft_wrap=True)

# ---------------------------------------------------------------------------
# Async command execution
# ---------------------------------------------------------------------------


async def run_command(
    cmd: list[str],
    cwd: str | Path | None = None,
) -> tuple[int, bytes]:
    """Run a command and wait for it to exit.

    Standard error is merged into standard output so the caller sees the
    interleaving the child produced.  There is no timeout: the call blocks
    until the child exits.

    Args:
        cmd: Program and arguments.
        cwd: Working directory for the child process.

    Returns:
        A ``(returncode, output)`` tuple with the raw combined output bytes.

    Raises:
        OSError: If the program cannot be started.
    """
    process = await asyncio.create_subprocess_exec(
        *cmd,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.STDOUT,
        cwd=str(cwd) if cwd else None,
    )
    output, _ = await process.communicate()
    return (process.returncode or 0, output or b"")


# ---------------------------------------------------------------------------
# File-system helpers
# ---------------------------------------------------------------------------


def ensure_dir(path: str | Path) -> Path:
    """Create a directory (and parents) if it does not exist."""
    dir_path = Path(path)
    dir_path.mkdir(parents=True, exist_ok=True)
    return dir_path


def write_text(path: Path, content: str) -> None:
    """Synchronous helper: create parent dirs and write content."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def format_elapsed(seconds: float) -> str:
    """Format a duration as the bracketed timing prefix.

    Examples::

        format_elapsed(0.0123) -> "[0.012s]"
        format_elapsed(2.5)    -> "[2.500s]"
    """
    return f"[{max(seconds, 0.0):.3f}s]"


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{escape(message)}[/bold green]", highlight=False)


def print_error(message: str) -> None:
    """Print a red error message on stderr."""
    err_console.print(f"[bold red]{escape(message)}[/bold red]", highlight=False)


def print_muted(message: str) -> None:
    """Print a dimmed status line."""
    console.print(f"[bright_black]{escape(message)}[/bright_black]", highlight=False)


def echo_output(data: bytes | str, error: bool = False) -> None:
    """Write captured program output verbatim.

    Bypasses Rich rendering entirely so tabs, carriage returns and the
    child's own ANSI sequences reach the terminal untouched.  Bytes go to
    the stream's binary buffer when it has one, so output that is not valid
    UTF-8 is passed through as produced.
    """
    if not data:
        return
    stream = (err_console if error else console).file
    if isinstance(data, str):
        stream.write(data)
    else:
        buffer = getattr(stream, "buffer", None)
        if buffer is None:
            stream.write(data.decode("utf-8", errors="replace"))
        else:
            # Text already written to the wrapper must land first.
            stream.flush()
            buffer.write(data)
            buffer.flush()
    stream.flush()
