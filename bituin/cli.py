"""Command-line entry point for ``bituin``.

Maps the first argument onto one of a closed set of commands and hands the
rest to the scaffolder or the runner.  This is the only place where
``BituinError`` is caught: the message is printed and its exit code becomes
the process exit status.

Examples::

    bituin new hello
    bituin add util.microscript
    bituin run --preview util.microscript
"""

from __future__ import annotations

import asyncio
import enum
import sys
from collections.abc import Callable
from pathlib import Path

from bituin.config import AUTHOR, VERSION, Settings
from bituin.errors import BituinError, IOFailure, UsageError
from bituin.project import InitMode, ProjectInitializer
from bituin.runner import ProjectRunner
from bituin.utils import console, echo_output, err_console, print_error


class Command(str, enum.Enum):
    NEW = "new"
    INIT = "init"
    ADD = "add"
    RUN = "run"
    HELP = "help"
    VERSION = "version"
    AUTHOR = "author"


USAGE = r"""[green]Usage:[/green]
  [blue]new[/blue] \[project_name]  - Create a new bituin package in a new directory
  [blue]init[/blue] \[project_name] - Create a new bituin package in an existing directory
  [blue]add[/blue] \[filename]      - Create a new MicroScript source file
  [blue]run[/blue] [--preview] \[filename] - Run the current project (optionally in preview mode)

[green]Options:[/green]
  [blue]help[/blue]             - Show this help message
  [blue]version[/blue]          - Show version information
  [blue]author[/blue]           - Show author information"""

_ARGUMENT_NAMES: dict[Command, str] = {
    Command.NEW: "Project name",
    Command.INIT: "Project name",
    Command.ADD: "File name",
}


def print_usage(error: bool = False) -> None:
    """Print the usage text (to stderr when reporting a usage error)."""
    (err_console if error else console).print(USAGE, highlight=False)


def _single_argument(command: Command, args: list[str]) -> str:
    if len(args) != 1:
        what = _ARGUMENT_NAMES[command]
        if not args:
            raise UsageError(f"Error: {what} required for {command.value} command")
        raise UsageError(f"Error: {command.value} takes exactly one {what.lower()}")
    return args[0]


def _working_directory(cwd: str | Path | None) -> Path:
    if cwd is not None:
        return Path(cwd)
    try:
        return Path.cwd()
    except OSError as exc:
        raise IOFailure("getting current directory", exc) from exc


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


def _cmd_help(args: list[str], cwd: Path, settings: Settings) -> None:
    print_usage()


def _cmd_version(args: list[str], cwd: Path, settings: Settings) -> None:
    console.print(VERSION, highlight=False)


def _cmd_author(args: list[str], cwd: Path, settings: Settings) -> None:
    console.print(AUTHOR, highlight=False)


def _cmd_new(args: list[str], cwd: Path, settings: Settings) -> None:
    name = _single_argument(Command.NEW, args)
    asyncio.run(ProjectInitializer(cwd, settings).create(name, InitMode.NEW_DIRECTORY))


def _cmd_init(args: list[str], cwd: Path, settings: Settings) -> None:
    name = _single_argument(Command.INIT, args)
    asyncio.run(ProjectInitializer(cwd, settings).create(name, InitMode.IN_PLACE))


def _cmd_add(args: list[str], cwd: Path, settings: Settings) -> None:
    filename = _single_argument(Command.ADD, args)
    asyncio.run(ProjectInitializer(cwd, settings).add_file(filename))


def _cmd_run(args: list[str], cwd: Path, settings: Settings) -> None:
    asyncio.run(ProjectRunner(cwd, settings).run(args))


_HANDLERS: dict[Command, Callable[[list[str], Path, Settings], None]] = {
    Command.HELP: _cmd_help,
    Command.VERSION: _cmd_version,
    Command.AUTHOR: _cmd_author,
    Command.NEW: _cmd_new,
    Command.INIT: _cmd_init,
    Command.ADD: _cmd_add,
    Command.RUN: _cmd_run,
}


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def main(
    argv: list[str] | None = None,
    *,
    cwd: str | Path | None = None,
    settings: Settings | None = None,
) -> int:
    """Run one ``bituin`` command and return the exit status."""
    args = list(sys.argv[1:] if argv is None else argv)
    settings = settings or Settings()

    if not args:
        print_usage(error=True)
        return 1

    try:
        command = Command(args[0])
    except ValueError:
        print_error(f"Unknown command: {args[0]}")
        print_usage(error=True)
        return 1

    try:
        workdir = _working_directory(cwd)
        _HANDLERS[command](args[1:], workdir, settings)
    except BituinError as exc:
        print_error(str(exc))
        if isinstance(exc, UsageError):
            print_usage(error=True)
        echo_output(exc.output)
        return exc.exit_code
    return 0


if __name__ == "__main__":
    sys.exit(main())
