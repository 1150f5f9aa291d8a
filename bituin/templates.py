"""Jinja2 template rendering for project scaffolding.

Provides the TemplateRenderer class which loads Jinja2 templates from the
``bituin/templates/`` directory, plus the three fixed templates every project
uses: the starter entry point, the boilerplate for files created by ``add``,
and the ``bituin.toml`` manifest.
"""

from __future__ import annotations

import asyncio
from functools import lru_cache
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

from bituin.manifest import ProjectManifest
from bituin.utils import write_text


# ---------------------------------------------------------------------------
# Template directory discovery
# ---------------------------------------------------------------------------

_DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"

ENTRY_TEMPLATE = "entry.microscript.j2"
MODULE_TEMPLATE = "module.microscript.j2"
MANIFEST_TEMPLATE = "bituin.toml.j2"


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Renders Jinja2 templates for project scaffolding.

    The renderer discovers ``.j2`` template files under a configurable
    template directory.  Missing context variables are an error rather than
    an empty string, so a broken template never produces a half-filled
    manifest.
    """

    def __init__(self, template_dir: str | Path | None = None) -> None:
        if template_dir is None:
            template_dir = _DEFAULT_TEMPLATE_DIR
        self.template_dir = Path(template_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape([]),
            undefined=StrictUndefined,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )

    # -- Single template rendering -----------------------------------------

    def render(self, template_path: str, context: dict[str, Any] | None = None) -> str:
        """Render a single template with the provided context.

        Args:
            template_path: Path relative to the template directory (e.g.
                ``"bituin.toml.j2"``).
            context: Dictionary of variables available inside the template.

        Returns:
            The rendered template content as a string.
        """
        template = self.env.get_template(template_path)
        return template.render(**(context or {}))

    # -- File-based rendering (async) --------------------------------------

    async def render_to_file(
        self,
        template_path: str,
        output_path: str | Path,
        context: dict[str, Any] | None = None,
    ) -> Path:
        """Render a template and write the result to *output_path*.

        Parent directories are created automatically and an existing file is
        overwritten.  Returns the output path.
        """
        content = self.render(template_path, context)
        out = Path(output_path)
        await asyncio.to_thread(write_text, out, content)
        return out


# ---------------------------------------------------------------------------
# Fixed project templates
# ---------------------------------------------------------------------------


@lru_cache(maxsize=1)
def default_renderer() -> TemplateRenderer:
    """Shared renderer over the bundled templates."""
    return TemplateRenderer()


def entry_template() -> str:
    """Starter entry point: a ``main`` that prints a greeting."""
    return default_renderer().render(ENTRY_TEMPLATE)


def module_template() -> str:
    """Boilerplate for source files created with ``add``."""
    return default_renderer().render(MODULE_TEMPLATE)


def config_template(project_name: str, main_file: str = "src/main.microscript") -> str:
    """Manifest text for a new project.

    Raises:
        pydantic.ValidationError: If the name or path is empty or contains a
            quote or line break.
    """
    manifest = ProjectManifest(name=project_name, main_file=main_file)
    return default_renderer().render(MANIFEST_TEMPLATE, manifest.model_dump())
