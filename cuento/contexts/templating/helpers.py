"""
Template helper functions.

The helper set is fixed: every TemplateRenderer binds exactly the names in
HELPER_NAMES into its own Jinja2 environment, both as globals and as filters:

    {{ capitalize(name) }}              {{ name|capitalize }}
    {% if eq(style, "acuarela") %}      {{ if_eq(language, "es", "Fin", "The End") }}
    {{ format_date(timestamp) }}        {{ length(story.chapters) }}
"""

from datetime import date, datetime
from functools import partial
from typing import Any, Callable, Dict

from babel.dates import format_datetime

DEFAULT_LOCALE = "es_ES"

# Long-form date with time, e.g. "19 de octubre de 2026, 14:05" for es_ES
LONG_DATE_TIME_PATTERN = "d 'de' MMMM 'de' y, HH:mm"

HELPER_NAMES = ("capitalize", "eq", "format_date", "length", "if_eq")


def capitalize(value: Any) -> str:
    """Uppercase the first character and leave the rest untouched."""
    if not value:
        return ""
    text = str(value)
    return text[0].upper() + text[1:]


def eq(a: Any, b: Any) -> bool:
    """Strict equality: same type and equal value (1 != "1", 1 != True)."""
    return type(a) is type(b) and a == b


def format_date(value: Any, locale: str = DEFAULT_LOCALE) -> str:
    """
    Format a datetime, date or ISO 8601 string as a long-form local date with time.

    Args:
        value: datetime, date, or ISO 8601 string (a trailing 'Z' is accepted)
        locale: Babel locale identifier

    Returns:
        Formatted string, or "" for empty values
    """
    if not value:
        return ""
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    elif isinstance(value, date) and not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day)
    if value.tzinfo is not None:
        value = value.astimezone().replace(tzinfo=None)
    return format_datetime(value, LONG_DATE_TIME_PATTERN, locale=locale)


def length(seq: Any) -> int:
    """Length of a sequence; None or empty gives 0."""
    return len(seq) if seq else 0


def if_eq(a: Any, b: Any, then: Any, otherwise: Any = "") -> Any:
    """Select `then` when a and b are strictly equal, otherwise `otherwise`."""
    return then if eq(a, b) else otherwise


def build_template_helpers(date_locale: str = DEFAULT_LOCALE) -> Dict[str, Callable[..., Any]]:
    """
    Build the helper table for one renderer.

    Args:
        date_locale: Locale bound into format_date

    Returns:
        Mapping of every name in HELPER_NAMES to its function
    """
    return {
        "capitalize": capitalize,
        "eq": eq,
        "format_date": partial(format_date, locale=date_locale),
        "length": length,
        "if_eq": if_eq,
    }
