"""Running a project through the MicroScript interpreter.

Resolves the entry point (explicit argument or the manifest's ``main_file``),
locates the interpreter next to the project, runs it to completion and
reports the outcome.  An explicit target is written back to ``bituin.toml``
before anything else is checked, so the manifest remembers it even when the
run itself fails.
"""

from __future__ import annotations

import argparse
import time
from dataclasses import dataclass
from pathlib import Path

from bituin.config import Settings
from bituin.errors import (
    ExecutionFailedError,
    InterpreterNotFoundError,
    MainFileNotFoundError,
    UsageError,
)
from bituin.manifest import (
    load_manifest_text,
    read_main_file,
    rewrite_main_file,
    save_manifest_text,
)
from bituin.project import require_project
from bituin.utils import console, echo_output, format_elapsed, print_muted, run_command

PREVIEW_FLAG = "--preview"


@dataclass
class RunResult:
    """Outcome of one interpreter invocation."""

    exit_code: int
    output: bytes = b""
    duration_seconds: float = 0.0
    entry: Path | None = None
    preview: bool = False

    @property
    def success(self) -> bool:
        return self.exit_code == 0

    @property
    def mode(self) -> str:
        return "preview" if self.preview else "regular"


@dataclass
class RunOptions:
    """Parsed ``run`` arguments."""

    preview: bool = False
    target: str | None = None


class _RunArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that reports problems as ``UsageError``."""

    def error(self, message: str):  # type: ignore[override]
        raise UsageError(f"Error: {message}")


def parse_run_args(args: list[str]) -> RunOptions:
    """Parse the tokens after ``run``.

    ``--preview`` and the optional filename may come in either order.  Every
    other token is a filename, including ones that start with ``-``.  More
    than one filename is rejected rather than silently keeping the last.
    """
    parser = _RunArgumentParser(prog="bituin run", add_help=False, allow_abbrev=False)
    parser.add_argument(PREVIEW_FLAG, action="store_true", dest="preview")
    parser.add_argument("files", nargs="*")
    namespace, extras = parser.parse_known_args(args)

    files = [*namespace.files, *extras]
    if len(files) > 1:
        raise UsageError("Error: run accepts at most one filename, got: " + " ".join(files))
    target = files[0] if files else None
    return RunOptions(preview=namespace.preview, target=target)


class ProjectRunner:
    """Runs the project rooted at *cwd*."""

    def __init__(self, cwd: str | Path | None = None, settings: Settings | None = None) -> None:
        self.cwd = Path(cwd) if cwd is not None else Path.cwd()
        self.settings = settings or Settings()

    # -- Public API --------------------------------------------------------

    async def run(self, args: list[str]) -> RunResult:
        """Resolve, execute and report.

        Raises:
            UsageError: Bad ``run`` arguments.
            NotAProjectError: No manifest in the working directory.
            MainFileNotFoundError: The entry point does not exist.
            InterpreterNotFoundError: No interpreter in the search directories.
            ExecutionFailedError: The interpreter exited non-zero.
        """
        start_time = time.monotonic()
        options = parse_run_args(args)

        entry, entry_name = self.resolve_entry(options.target)
        if not entry.exists():
            raise MainFileNotFoundError(entry)

        interpreter = self.find_interpreter(options.preview)
        if options.preview:
            print_muted(f"Running in preview mode: {entry_name}")
        else:
            print_muted(f"Running: {entry_name}")

        result = await self.execute(interpreter, entry, options.preview)
        result.duration_seconds = time.monotonic() - start_time

        if not result.success:
            raise ExecutionFailedError(result)

        print_muted(
            f"{format_elapsed(result.duration_seconds)} Success: "
            f"{entry_name} ({result.mode} mode)"
        )
        console.print("[green]✓[/green] Project executed successfully!")
        console.print()
        echo_output(result.output)
        return result

    def resolve_entry(self, target: str | None = None) -> tuple[Path, str]:
        """Work out which source file to run.

        With an explicit *target* the manifest is rewritten to point at
        ``src/<target>`` immediately.  Otherwise ``main_file`` is read from
        the manifest, falling back to ``src/main.microscript``.

        Returns:
            ``(absolute entry path, display name)``.
        """
        manifest_path = require_project(self.cwd, self.settings)
        manifest_text = load_manifest_text(manifest_path)

        if target is not None:
            relative = f"{self.settings.source_dir_name}/{target}"
            try:
                updated = rewrite_main_file(manifest_text, relative)
            except ValueError as exc:
                raise UsageError(f"Error: Invalid filename {target!r}") from exc
            save_manifest_text(manifest_path, updated)
            return (self.settings.source_dir(self.cwd) / target, target)

        main_file, found = read_main_file(manifest_text)
        if not found:
            main_file = self.settings.default_main_file
        entry = self.cwd / main_file
        return (entry, entry.name)

    def find_interpreter(self, preview: bool = False) -> Path:
        """Return the first interpreter executable in the search directories."""
        names = self.settings.interpreter_names(preview)
        searched = self.settings.search_paths(self.cwd)
        for directory in searched:
            for name in names:
                candidate = directory / name
                if candidate.is_file():
                    return candidate
        raise InterpreterNotFoundError(names, searched)

    async def execute(self, interpreter: Path, entry: Path, preview: bool = False) -> RunResult:
        """Run ``<interpreter> run <entry>`` and wait for it to finish."""
        start_time = time.monotonic()
        try:
            exit_code, output = await run_command(
                [str(interpreter), "run", str(entry)], cwd=self.cwd
            )
        except OSError as exc:
            return RunResult(
                exit_code=-1,
                output=f"Could not start {interpreter}: {exc}\n".encode("utf-8"),
                duration_seconds=time.monotonic() - start_time,
                entry=entry,
                preview=preview,
            )
        return RunResult(
            exit_code=exit_code,
            output=output,
            duration_seconds=time.monotonic() - start_time,
            entry=entry,
            preview=preview,
        )
