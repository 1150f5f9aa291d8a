"""Project scaffolding: ``new``, ``init`` and ``add``.

``ProjectInitializer`` lays out a MicroScript project (``src/`` plus the
``bituin.toml`` marker) either in a fresh directory or in the current one,
and adds boilerplate source files to an existing project.
"""

from __future__ import annotations

import asyncio
import enum
import shutil
import time
from pathlib import Path

from pydantic import ValidationError
from rich.markup import escape

from bituin.config import Settings
from bituin.errors import AlreadyExistsError, IOFailure, NotAProjectError, UsageError
from bituin.templates import (
    ENTRY_TEMPLATE,
    MODULE_TEMPLATE,
    TemplateRenderer,
    config_template,
)
from bituin.utils import (
    console,
    ensure_dir,
    format_elapsed,
    print_muted,
    print_success,
    write_text,
)


class InitMode(enum.Enum):
    """Where ``create`` puts the project."""

    NEW_DIRECTORY = "new"
    IN_PLACE = "init"


def require_project(root: Path, settings: Settings) -> Path:
    """Return the manifest path under *root*, or raise ``NotAProjectError``."""
    manifest = settings.manifest_path(root)
    if not manifest.exists():
        raise NotAProjectError(
            f"Error: {settings.manifest_name} not found. "
            "Are you in a bituin project directory?"
        )
    return manifest


class ProjectInitializer:
    """Creates projects and source files relative to a working directory."""

    def __init__(
        self,
        cwd: str | Path | None = None,
        settings: Settings | None = None,
        renderer: TemplateRenderer | None = None,
    ) -> None:
        self.cwd = Path(cwd) if cwd is not None else Path.cwd()
        self.settings = settings or Settings()
        self.renderer = renderer or TemplateRenderer()

    # -- Public API --------------------------------------------------------

    async def create(self, name: str, mode: InitMode) -> Path:
        """Create a project called *name*.

        ``NEW_DIRECTORY`` builds ``<cwd>/<name>`` and refuses to touch an
        existing path.  The root is created with an exclusive mkdir, so a
        directory that appears between the existence check and the mkdir is
        reported the same way instead of being merged into.  ``IN_PLACE``
        uses the working directory itself and overwrites colliding files.

        Nothing is rolled back if a later step fails.

        Returns:
            Path to the project root.
        """
        try:
            manifest_text = config_template(name, self.settings.default_main_file)
        except ValidationError as exc:
            raise UsageError(f"Error: Invalid project name {name!r}") from exc

        if mode is InitMode.NEW_DIRECTORY:
            root = self.cwd / name
            if root.exists() or root.is_symlink():
                raise AlreadyExistsError(f'Error: Directory "{name}" already exists.')
            try:
                await asyncio.to_thread(root.mkdir, parents=True, exist_ok=False)
            except FileExistsError as exc:
                raise AlreadyExistsError(f'Error: Directory "{name}" already exists.') from exc
            except OSError as exc:
                raise IOFailure("creating directory structure", exc) from exc
        else:
            root = self.cwd

        try:
            await asyncio.to_thread(ensure_dir, self.settings.source_dir(root))
        except OSError as exc:
            raise IOFailure("creating directory structure", exc) from exc

        entry = self.settings.source_dir(root) / self.settings.default_entry_name
        try:
            await self.renderer.render_to_file(ENTRY_TEMPLATE, entry)
        except OSError as exc:
            raise IOFailure(f"creating {self.settings.default_entry_name}", exc) from exc

        manifest = self.settings.manifest_path(root)
        try:
            await asyncio.to_thread(write_text, manifest, manifest_text)
        except OSError as exc:
            raise IOFailure(f"creating {self.settings.manifest_name}", exc) from exc

        if mode is InitMode.NEW_DIRECTORY:
            await self._copy_interpreters(root)

        print_success(f'Bituin project "{name}" created successfully!')
        console.print("\nTo get started:")
        if mode is InitMode.NEW_DIRECTORY:
            console.print(f"  cd {escape(name)}")
        console.print("  bituin run")
        return root

    async def add_file(self, filename: str) -> Path:
        """Write the module boilerplate to ``src/<filename>``.

        An existing file with the same name is overwritten.

        Returns:
            Path to the written file.
        """
        start_time = time.monotonic()
        require_project(self.cwd, self.settings)

        source_dir = self.settings.source_dir(self.cwd)
        try:
            await asyncio.to_thread(ensure_dir, source_dir)
        except OSError as exc:
            raise IOFailure(f"creating {self.settings.source_dir_name} directory", exc) from exc

        target = source_dir / filename
        try:
            await self.renderer.render_to_file(MODULE_TEMPLATE, target)
        except OSError as exc:
            raise IOFailure("creating MicroScript file", exc) from exc

        elapsed = time.monotonic() - start_time
        print_muted(f"{format_elapsed(elapsed)} Create file: {filename}")
        return target

    # -- Internal helpers --------------------------------------------------

    async def _copy_interpreters(self, root: Path) -> list[Path]:
        """Copy interpreter executables found in the working directory into *root*."""
        copied: list[Path] = []
        for preview in (False, True):
            for exe_name in self.settings.interpreter_names(preview):
                source = self.cwd / exe_name
                if not source.is_file():
                    continue
                try:
                    await asyncio.to_thread(shutil.copy2, source, root / exe_name)
                except OSError as exc:
                    raise IOFailure(f"copying {exe_name}", exc) from exc
                copied.append(root / exe_name)
        return copied
