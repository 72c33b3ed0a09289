"""
Templating Context

Responsibilities:
- Loads named HTML templates and the optional stylesheet
- Binds the fixed helper table (capitalize, eq, format_date, length, if_eq)
- Renders story records into HTML documents

Owns: Template loading, helper functions, HTML generation
Never: Launches the browser or writes artifacts
"""

from cuento.contexts.templating.helpers import HELPER_NAMES, build_template_helpers
from cuento.contexts.templating.renderer import (
    DEFAULT_STYLES_NAME,
    DEFAULT_TEMPLATE_NAME,
    TemplateRenderer,
)

__all__ = [
    "HELPER_NAMES",
    "build_template_helpers",
    "DEFAULT_STYLES_NAME",
    "DEFAULT_TEMPLATE_NAME",
    "TemplateRenderer",
]
