"""
Rendering context logger.

Provides logging interface for rendering context with automatic [render] prefix.
All rendering modules should import from this module, not from utils.logger directly.
"""

from loguru import logger

CONTEXT_PREFIX = "[render]"


# Wrapper functions with automatic [render] prefix


def _log_info(message: str) -> None:
    """Log info message with [render] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_success(message: str) -> None:
    """Log success message with [render] prefix."""
    logger.success(f"{CONTEXT_PREFIX} {message}")


def _log_error(message: str) -> None:
    """Log error message with [render] prefix."""
    logger.error(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [render] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [render] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


# High-level rendering-specific logging helpers


def log_browser_launched(launch_count: int, args: list) -> None:
    """Log a browser launch."""
    _log_info(f"Launched headless Chromium (launch #{launch_count})")
    _log_debug(f"  Args: {' '.join(args)}")


def log_pdf_captured(size: int, elapsed_time: float, in_flight: int) -> None:
    """Log a captured PDF buffer."""
    _log_success(f"Captured PDF: {size} bytes ({elapsed_time:.2f}s)")
    _log_debug(f"  Pages in flight: {in_flight}")


def log_render_failure(phase: str, error: BaseException, elapsed_time: float) -> None:
    """Log a failed render with the failing phase."""
    _log_error(f"Render failed during {phase} ({elapsed_time:.2f}s)")
    _log_error(f"  Error: {error}")
