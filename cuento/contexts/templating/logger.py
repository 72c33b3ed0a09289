"""
Templating context logger.

Provides logging interface for templating context with automatic [template] prefix.
All templating modules should import from this module, not from utils.logger directly.
"""

from pathlib import Path

from loguru import logger

CONTEXT_PREFIX = "[template]"


# Wrapper functions with automatic [template] prefix


def _log_info(message: str) -> None:
    """Log info message with [template] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [template] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [template] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


# High-level templating-specific logging helpers


def log_template_loaded(template_name: str, template_path: Path) -> None:
    """Log a successful template load."""
    _log_debug(f"Loaded template {template_name}")
    _log_debug(f"  Source: {template_path}")


def log_html_rendered(story_id, html: str, elapsed_time: float) -> None:
    """Log the size of rendered HTML."""
    _log_info(f"Rendered HTML for {story_id}: {len(html)} characters ({elapsed_time:.2f}s)")
