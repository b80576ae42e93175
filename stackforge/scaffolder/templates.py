"""Jinja2 template rendering for generated project files.

Provides the TemplateRenderer class which loads Jinja2 templates from the
``stackforge/scaffolder/templates/`` directory and renders them with
project-specific context data.  Output is returned as strings; the assembler
decides where it goes, so nothing here touches the filesystem beyond loading
templates.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

from stackforge.utils import slugify, to_kebab, to_pascal


# ---------------------------------------------------------------------------
# Template directory discovery
# ---------------------------------------------------------------------------

_DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Renders Jinja2 templates for project assembly.

    The renderer discovers ``.j2`` template files under a configurable
    template directory.  Undefined variables raise instead of rendering as
    empty strings, so a broken context fails the section that uses it.
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
        self.env.filters["slugify"] = slugify
        self.env.filters["pascal_case"] = to_pascal
        self.env.filters["kebab_case"] = to_kebab

    def render(self, template_path: str, context: dict[str, Any]) -> str:
        """Render a single template with the provided context.

        Args:
            template_path: Path relative to the template directory (e.g.
                ``"page.tsx.j2"``).
            context: Dictionary of variables available inside the template.
        """
        template = self.env.get_template(template_path)
        return template.render(**context)
