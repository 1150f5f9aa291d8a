"""Shared pytest fixtures for the Bituin test suite.

Provides reusable fixtures for:
- Temporary workspaces and ready-made projects
- Default tool settings
- Fake MicroScript interpreters (POSIX shell scripts)
"""

from __future__ import annotations

import stat
import sys
from collections.abc import Callable
from pathlib import Path

import pytest

from bituin.config import Settings


ENTRY_TEXT = 'function main() {\n    console.write("Hello, World!");\n}\n\nmain();\n'


# ---------------------------------------------------------------------------
# Paths & Directories
# ---------------------------------------------------------------------------

@pytest.fixture
def settings() -> Settings:
    """Default tool settings."""
    return Settings()


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Directory that plays the role of the user's working directory."""
    ws = tmp_path / "workspace"
    ws.mkdir()
    yield ws


@pytest.fixture
def project_root(workspace: Path) -> Path:
    """A minimal valid project written by hand (``bituin.toml`` + entry)."""
    root = workspace / "hello"
    (root / "src").mkdir(parents=True)
    (root / "src" / "main.microscript").write_text(ENTRY_TEXT, encoding="utf-8")
    (root / "bituin.toml").write_text(
        '[package]\nname = "hello"\nmain_file = "src/main.microscript"\n',
        encoding="utf-8",
    )
    yield root


# ---------------------------------------------------------------------------
# Fake interpreters
# ---------------------------------------------------------------------------

@pytest.fixture
def make_interpreter() -> Callable[..., Path]:
    """Factory that writes an executable shell script acting as the interpreter.

    The script echoes its arguments, prints any extra *output* verbatim,
    writes a line to stderr and exits with *exit_code*.
    """
    if sys.platform == "win32":
        pytest.skip("fake interpreters are POSIX shell scripts")

    def _make(
        directory: Path,
        name: str = "microscript",
        exit_code: int = 0,
        output: str = "",
    ) -> Path:
        script = directory / name
        body = "\n".join(
            [
                "#!/bin/sh",
                f'echo "{name} $*"',
                f"printf '%s' '{output}'",
                'echo "from stderr" 1>&2',
                f"exit {exit_code}",
                "",
            ]
        )
        script.write_text(body, encoding="utf-8")
        script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return script

    return _make
