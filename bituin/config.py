"""Bituin tool configuration.

Centralised, typed settings for the CLI.  All values are held in a Pydantic v2
model so they are validated at construction time; the defaults describe the
standard MicroScript project layout and interpreter names.  Tests construct
their own ``Settings`` to point the tool at fake interpreters.
"""

from __future__ import annotations

import sys
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

VERSION = "v0.1.0"
AUTHOR = "Cyril John Magayaga"


class Settings(BaseModel):
    """Names and locations the CLI relies on.

    ``interpreter_search_dirs`` are tried in order, relative to the project
    directory.  The default looks in the project itself first and then in
    its parent, which is where the interpreter usually lives when several
    projects share one installation.
    """

    manifest_name: str = Field(default="bituin.toml", min_length=1)
    source_dir_name: str = Field(default="src", min_length=1)
    default_entry_name: str = Field(default="main.microscript", min_length=1)
    interpreter: str = Field(default="microscript", min_length=1)
    preview_interpreter: str = Field(default="microscript-preview", min_length=1)
    executable_suffixes: list[str] = Field(default_factory=lambda: ["", ".exe"])
    interpreter_search_dirs: list[str] = Field(
        default_factory=lambda: [".", ".."],
        description="Directories searched for the interpreter, relative to the project",
    )

    @field_validator("interpreter_search_dirs")
    @classmethod
    def _require_search_dirs(cls, value: list[str]) -> list[str]:
        if not value:
            raise ValueError("at least one interpreter search directory is required")
        return value

    # ------------------------------------------------------------------
    # Derived paths
    # ------------------------------------------------------------------

    def manifest_path(self, root: Path) -> Path:
        """Path to the project marker file under *root*."""
        return root / self.manifest_name

    def source_dir(self, root: Path) -> Path:
        """Path to the source directory under *root*."""
        return root / self.source_dir_name

    @property
    def default_main_file(self) -> str:
        """Manifest value used when ``main_file`` is missing."""
        return f"{self.source_dir_name}/{self.default_entry_name}"

    def interpreter_names(self, preview: bool = False) -> list[str]:
        """Candidate executable file names for the selected interpreter.

        The platform's native name comes first: ``microscript.exe`` on Windows,
        the bare ``microscript`` elsewhere.
        """
        base = self.preview_interpreter if preview else self.interpreter
        names = [base + suffix for suffix in self.executable_suffixes]
        if sys.platform == "win32":
            names.sort(key=lambda name: not name.endswith(".exe"))
        return names

    def search_paths(self, root: Path) -> list[Path]:
        """Directories searched for the interpreter, in order."""
        return [root / entry for entry in self.interpreter_search_dirs]
