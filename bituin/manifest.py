"""Reading and rewriting ``bituin.toml``.

The manifest is treated as an ordered list of lines rather than a full TOML
document.  Only ``key = "value"`` assignments and ``[table]`` headers are
recognised; every other line (comments, blank lines, unknown syntax) is kept
byte-for-byte, so rewriting ``main_file`` never disturbs the rest of the file.

Quick usage::

    from bituin.manifest import read_main_file, rewrite_main_file

    path, found = read_main_file(text)
    text = rewrite_main_file(text, "src/other.microscript")
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, Field

from bituin.errors import IOFailure

MAIN_FILE_KEY = "main_file"
PACKAGE_TABLE = "package"

_ASSIGNMENT_RE = re.compile(
    r'^(?P<indent>[ \t]*)(?P<key>[A-Za-z0-9_.-]+)[ \t]*=[ \t]*"(?P<value>[^"\r\n]*)"(?P<trailer>[^\r\n]*)'
)
_TABLE_RE = re.compile(r"^[ \t]*\[(?P<name>[^\[\]\r\n]+)\][ \t]*(#[^\r\n]*)?$")
_UNSAFE_VALUE_RE = re.compile(r'["\r\n]')


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------


class ProjectManifest(BaseModel):
    """The fields Bituin writes when a project is created."""

    name: str = Field(..., min_length=1, pattern=r'^[^"\r\n]+$')
    main_file: str = Field(..., min_length=1, pattern=r'^[^"\r\n]+$')


@dataclass
class ManifestLine:
    """One physical line of the manifest, including its line ending."""

    raw: str
    key: str | None = None
    value: str | None = None
    table: str | None = None

    @property
    def is_blank(self) -> bool:
        return not self.raw.strip()


# ---------------------------------------------------------------------------
# Document
# ---------------------------------------------------------------------------


class ManifestDocument:
    """Ordered, line-preserving view of a manifest file."""

    def __init__(self, lines: list[ManifestLine] | None = None) -> None:
        self.lines: list[ManifestLine] = lines or []

    @classmethod
    def parse(cls, text: str) -> "ManifestDocument":
        """Split *text* into lines and classify each one."""
        lines: list[ManifestLine] = []
        for raw in text.splitlines(keepends=True):
            table_match = _TABLE_RE.match(raw.rstrip("\r\n"))
            if table_match:
                lines.append(ManifestLine(raw=raw, table=table_match.group("name").strip()))
                continue
            assignment = _ASSIGNMENT_RE.match(raw)
            if assignment:
                lines.append(
                    ManifestLine(
                        raw=raw,
                        key=assignment.group("key"),
                        value=assignment.group("value"),
                    )
                )
                continue
            lines.append(ManifestLine(raw=raw))
        return cls(lines)

    def render(self) -> str:
        """Serialise the document back to text."""
        return "".join(line.raw for line in self.lines)

    def get(self, key: str) -> str | None:
        """Return the value of the first assignment to *key*, if any."""
        for line in self.lines:
            if line.key == key:
                return line.value
        return None

    def set(self, key: str, value: str) -> None:
        """Point the first assignment to *key* at *value*, or add one.

        An existing assignment keeps its indentation and anything after the
        closing quote (typically a comment).  A new assignment goes after the
        last entry of the ``[package]`` table, or at the end of the file when
        there is no such table.

        Raises:
            ValueError: If *value* contains a quote or a line break.
        """
        if _UNSAFE_VALUE_RE.search(value):
            raise ValueError(f"Manifest values cannot contain quotes or line breaks: {value!r}")

        for line in self.lines:
            if line.key == key:
                match = _ASSIGNMENT_RE.match(line.raw)
                assert match is not None  # line.key is only set for assignments
                ending = line.raw[len(line.raw.rstrip("\r\n")):]
                line.raw = f'{match.group("indent")}{key} = "{value}"{match.group("trailer")}{ending}'
                line.value = value
                return

        index = self._insertion_index(PACKAGE_TABLE)
        if index > 0 and not self.lines[index - 1].raw.endswith(("\n", "\r")):
            self.lines[index - 1].raw += "\n"
        self.lines.insert(index, ManifestLine(raw=f'{key} = "{value}"\n', key=key, value=value))

    def _insertion_index(self, table: str) -> int:
        start = next(
            (i for i, line in enumerate(self.lines) if line.table == table),
            None,
        )
        if start is None:
            return len(self.lines)

        end = next(
            (i for i in range(start + 1, len(self.lines)) if self.lines[i].table is not None),
            len(self.lines),
        )
        last = start
        for i in range(start + 1, end):
            if not self.lines[i].is_blank:
                last = i
        return last + 1


# ---------------------------------------------------------------------------
# main_file helpers
# ---------------------------------------------------------------------------


def read_main_file(text: str) -> tuple[str, bool]:
    """Extract the ``main_file`` value from manifest text.

    Returns:
        ``(path, True)`` for the first non-empty assignment, otherwise
        ``("", False)`` and the caller applies the default entry point.
    """
    value = ManifestDocument.parse(text).get(MAIN_FILE_KEY)
    if not value:
        return ("", False)
    return (value, True)


def rewrite_main_file(text: str, new_path: str) -> str:
    """Return *text* with ``main_file`` pointing at *new_path*.

    The field is appended when the manifest does not have one yet.
    """
    document = ManifestDocument.parse(text)
    document.set(MAIN_FILE_KEY, new_path)
    return document.render()


# ---------------------------------------------------------------------------
# File I/O
# ---------------------------------------------------------------------------


def load_manifest_text(path: Path) -> str:
    """Read the manifest at *path*.

    Raises:
        IOFailure: If the file cannot be read or is not valid UTF-8.
    """
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise IOFailure(f"reading {path.name}", exc) from exc


def save_manifest_text(path: Path, text: str) -> None:
    """Overwrite the manifest at *path* with *text*."""
    try:
        path.write_text(text, encoding="utf-8")
    except OSError as exc:
        raise IOFailure(f"updating {path.name}", exc) from exc
