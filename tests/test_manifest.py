"""Unit tests for manifest parsing and rewriting (bituin.manifest).

Tests cover:
- read_main_file (present, absent, empty, whitespace variants, first wins)
- rewrite_main_file (replace, append into [package], append without tables)
- ManifestDocument line preservation
- ProjectManifest validation
- load_manifest_text / save_manifest_text error wrapping
"""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from bituin.errors import IOFailure
from bituin.manifest import (
    ManifestDocument,
    ProjectManifest,
    load_manifest_text,
    read_main_file,
    rewrite_main_file,
    save_manifest_text,
)


pytestmark = pytest.mark.unit

DEFAULT_MANIFEST = '[package]\nname = "hello"\nmain_file = "src/main.microscript"\n'


# ---------------------------------------------------------------------------
# read_main_file
# ---------------------------------------------------------------------------


class TestReadMainFile:
    def test_reads_default_manifest(self):
        assert read_main_file(DEFAULT_MANIFEST) == ("src/main.microscript", True)

    def test_missing_field(self):
        assert read_main_file('[package]\nname = "hello"\n') == ("", False)

    def test_empty_text(self):
        assert read_main_file("") == ("", False)

    def test_empty_value_counts_as_missing(self):
        assert read_main_file('main_file = ""\n') == ("", False)

    @pytest.mark.parametrize(
        "line",
        [
            'main_file="src/a.ms"',
            'main_file   =   "src/a.ms"',
            '\tmain_file\t=\t"src/a.ms"',
            'main_file = "src/a.ms"  # entry point',
        ],
    )
    def test_whitespace_tolerant(self, line: str):
        assert read_main_file(f"[package]\n{line}\n") == ("src/a.ms", True)

    def test_first_assignment_wins(self):
        text = 'main_file = "src/first.ms"\nmain_file = "src/second.ms"\n'
        assert read_main_file(text) == ("src/first.ms", True)

    def test_commented_out_assignment_is_ignored(self):
        text = '# main_file = "src/old.ms"\nmain_file = "src/new.ms"\n'
        assert read_main_file(text) == ("src/new.ms", True)

    def test_similar_key_is_not_main_file(self):
        assert read_main_file('old_main_file = "src/x.ms"\n') == ("", False)

    def test_no_trailing_newline(self):
        assert read_main_file('main_file = "src/a.ms"') == ("src/a.ms", True)


# ---------------------------------------------------------------------------
# rewrite_main_file
# ---------------------------------------------------------------------------


class TestRewriteMainFile:
    def test_replaces_existing_value(self):
        updated = rewrite_main_file(DEFAULT_MANIFEST, "src/other.microscript")
        assert updated == (
            '[package]\nname = "hello"\nmain_file = "src/other.microscript"\n'
        )

    def test_round_trip(self):
        for path in ("src/a.ms", "src/nested/b.ms", "src/with space.ms"):
            assert read_main_file(rewrite_main_file(DEFAULT_MANIFEST, path)) == (path, True)

    def test_keeps_indent_and_trailing_comment(self):
        text = '[package]\n  main_file="src/a.ms" # entry\n'
        assert rewrite_main_file(text, "src/b.ms") == '[package]\n  main_file = "src/b.ms" # entry\n'

    def test_only_first_assignment_is_rewritten(self):
        text = 'main_file = "src/a.ms"\nmain_file = "src/b.ms"\n'
        assert rewrite_main_file(text, "src/c.ms") == (
            'main_file = "src/c.ms"\nmain_file = "src/b.ms"\n'
        )

    def test_appends_into_package_table(self):
        text = '[package]\nname = "hello"\n\n[deps]\nfoo = "1"\n'
        updated = rewrite_main_file(text, "src/a.ms")
        assert updated == (
            '[package]\nname = "hello"\nmain_file = "src/a.ms"\n\n[deps]\nfoo = "1"\n'
        )

    def test_appends_at_end_without_tables(self):
        updated = rewrite_main_file('name = "hello"', "src/a.ms")
        assert updated == 'name = "hello"\nmain_file = "src/a.ms"\n'

    def test_appends_to_empty_text(self):
        assert rewrite_main_file("", "src/a.ms") == 'main_file = "src/a.ms"\n'

    def test_preserves_unrelated_lines(self):
        text = (
            "# project manifest\n"
            "[package]\n"
            'name = "hello"\n'
            "version = 3\n"
            'main_file = "src/main.microscript"\n'
            "\n"
            "[tool]\n"
            "weird line without equals\n"
        )
        updated = rewrite_main_file(text, "src/x.ms")
        assert updated == text.replace("src/main.microscript", "src/x.ms")

    def test_rejects_quote_in_value(self):
        with pytest.raises(ValueError):
            rewrite_main_file(DEFAULT_MANIFEST, 'src/"evil".ms')


# ---------------------------------------------------------------------------
# ManifestDocument
# ---------------------------------------------------------------------------


class TestManifestDocument:
    def test_render_is_identity(self):
        text = '[package]\r\nname = "x"\r\n# comment\r\n\r\nmain_file = "src/a"'
        assert ManifestDocument.parse(text).render() == text

    def test_classifies_lines(self):
        doc = ManifestDocument.parse(DEFAULT_MANIFEST)
        assert doc.lines[0].table == "package"
        assert doc.lines[1].key == "name"
        assert doc.lines[1].value == "hello"
        assert doc.lines[2].key == "main_file"

    def test_get_missing_key(self):
        assert ManifestDocument.parse(DEFAULT_MANIFEST).get("version") is None

    def test_set_adds_new_key_to_package(self):
        doc = ManifestDocument.parse(DEFAULT_MANIFEST)
        doc.set("version", "0.1.0")
        assert doc.get("version") == "0.1.0"
        assert doc.render().endswith('version = "0.1.0"\n')

    def test_set_after_header_only(self):
        doc = ManifestDocument.parse("[package]")
        doc.set("main_file", "src/a.ms")
        assert doc.render() == '[package]\nmain_file = "src/a.ms"\n'


# ---------------------------------------------------------------------------
# ProjectManifest
# ---------------------------------------------------------------------------


class TestProjectManifest:
    def test_valid(self):
        manifest = ProjectManifest(name="hello", main_file="src/main.microscript")
        assert manifest.model_dump() == {"name": "hello", "main_file": "src/main.microscript"}

    @pytest.mark.parametrize("name", ["", 'he"llo', "two\nlines"])
    def test_invalid_name(self, name: str):
        with pytest.raises(ValidationError):
            ProjectManifest(name=name, main_file="src/main.microscript")


# ---------------------------------------------------------------------------
# File I/O
# ---------------------------------------------------------------------------


class TestManifestIO:
    def test_save_then_load(self, tmp_path: Path):
        path = tmp_path / "bituin.toml"
        save_manifest_text(path, DEFAULT_MANIFEST)
        assert load_manifest_text(path) == DEFAULT_MANIFEST

    def test_load_missing_file(self, tmp_path: Path):
        with pytest.raises(IOFailure) as exc_info:
            load_manifest_text(tmp_path / "bituin.toml")
        assert "reading bituin.toml" in str(exc_info.value)
        assert isinstance(exc_info.value.cause, FileNotFoundError)

    def test_load_invalid_utf8(self, tmp_path: Path):
        path = tmp_path / "bituin.toml"
        path.write_bytes(b"\xff\xfe\x00bad")
        with pytest.raises(IOFailure):
            load_manifest_text(path)

    def test_save_into_missing_directory(self, tmp_path: Path):
        with pytest.raises(IOFailure) as exc_info:
            save_manifest_text(tmp_path / "nope" / "bituin.toml", DEFAULT_MANIFEST)
        assert "updating bituin.toml" in str(exc_info.value)
