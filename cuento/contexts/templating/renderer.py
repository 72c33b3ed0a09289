"""
Story template rendering.

Loads a named Jinja2 template from the template directory and renders a story
record into a complete HTML document. Each renderer owns its own Environment
with the fixed helper table bound at construction, so renderers never share
state and loading the same template twice has no side effects.
"""

import time
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import anyio
from jinja2 import Environment, FileSystemLoader, StrictUndefined, Template, TemplateError

from cuento.contexts.templating.helpers import DEFAULT_LOCALE, build_template_helpers
from cuento.contexts.templating.logger import (
    _log_debug,
    _log_warning,
    log_html_rendered,
    log_template_loaded,
)
from cuento.exceptions import RenderError, TemplateLoadError

DEFAULT_TEMPLATE_NAME = "story-template.html.jinja"
DEFAULT_STYLES_NAME = "pdf-styles.css"


class TemplateRenderer:
    """
    Render story records into HTML using a named template and fixed helper functions.

    Templates live in `templates_path` and are rendered with StrictUndefined, so a
    template that references a missing field fails loudly instead of printing blanks.
    """

    def __init__(
        self,
        templates_path: Path,
        template_name: str = DEFAULT_TEMPLATE_NAME,
        styles_name: Optional[str] = DEFAULT_STYLES_NAME,
        date_locale: str = DEFAULT_LOCALE,
    ):
        """
        Initialize the renderer.

        Args:
            templates_path: Directory containing templates and stylesheets
            template_name: Primary document template used by render()
            styles_name: Optional stylesheet injected as `styles` (None to skip)
            date_locale: Locale for the format_date helper
        """
        self.templates_path = Path(templates_path)
        self.template_name = template_name
        self.styles_name = styles_name
        self.helpers = build_template_helpers(date_locale)

        self.env = Environment(
            loader=FileSystemLoader(str(self.templates_path)),
            undefined=StrictUndefined,
            autoescape=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.globals.update(self.helpers)
        self.env.filters.update(self.helpers)

    def get_template_path(self, template_name: str) -> Path:
        """Path of a named template inside the template directory."""
        return self.templates_path / template_name

    async def load_template(self, template_name: Optional[str] = None) -> Template:
        """
        Read and compile a named template.

        Args:
            template_name: Template file name (defaults to the renderer's primary template)

        Returns:
            Compiled Jinja2 Template

        Raises:
            TemplateLoadError: If the file is missing, unreadable, or has syntax errors
        """
        template_name = template_name or self.template_name
        template_path = self.get_template_path(template_name)

        try:
            source = await anyio.Path(template_path).read_text(encoding="utf-8")
            template = self.env.from_string(source)
        except (OSError, UnicodeDecodeError, TemplateError) as exc:
            raise TemplateLoadError(
                f"Could not load template '{template_name}' from {self.templates_path}",
                template_name=template_name,
                original_error=exc,
            ) from exc

        log_template_loaded(template_name, template_path)
        return template

    async def load_styles(self, styles_name: Optional[str] = None) -> str:
        """
        Read the optional stylesheet.

        A missing or unreadable stylesheet is not fatal: a warning is logged and
        an empty string is returned so the template falls back to its own styles.
        """
        styles_name = styles_name or self.styles_name
        if not styles_name:
            return ""

        try:
            return await anyio.Path(self.get_template_path(styles_name)).read_text(
                encoding="utf-8"
            )
        except OSError as exc:
            _log_warning(f"Could not load stylesheet {styles_name}: {exc}")
            return ""

    @staticmethod
    def build_context(story_data: Mapping[str, Any], styles: str = "") -> Dict[str, Any]:
        """
        Template context: the story record plus derived display fields.

        Adds:
            images_count: Number of generatedImages (0 if absent)
            show_credits: Always True
            timestamp: Render time, ISO 8601
            styles: Stylesheet text
        """
        context = dict(story_data)
        context["images_count"] = len(story_data.get("generatedImages") or [])
        context["show_credits"] = True
        context["timestamp"] = datetime.now().isoformat(timespec="seconds")
        context["styles"] = styles
        return context

    async def render(self, story_data: Mapping[str, Any]) -> str:
        """
        Render a story record into an HTML document.

        Args:
            story_data: Story record (id, name, story, generatedImages, style, language)

        Returns:
            HTML string

        Raises:
            TemplateLoadError: If the primary template cannot be loaded
            RenderError: If template evaluation fails (e.g., a referenced field is missing)
        """
        start_time = time.perf_counter()

        template = await self.load_template()
        styles = await self.load_styles()
        context = self.build_context(story_data, styles)

        try:
            html = template.render(context)
        except Exception as exc:
            raise RenderError(
                f"Template '{self.template_name}' evaluation failed",
                phase="template",
                original_error=exc,
            ) from exc

        story_id = story_data.get("id")
        log_html_rendered(story_id, html, time.perf_counter() - start_time)
        _log_debug(f"  Images: {context['images_count']}, styles: {len(styles)} characters")
        return html
