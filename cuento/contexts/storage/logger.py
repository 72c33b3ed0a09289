"""
Storage context logger.

Provides logging interface for storage context with automatic [store] prefix.
"""

from loguru import logger

CONTEXT_PREFIX = "[store]"


def _log_info(message: str) -> None:
    """Log info message with [store] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [store] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [store] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


def log_prune_result(result, max_age_hours: float) -> None:
    """Log the outcome of a retention pass."""
    if result.success:
        _log_info(f"Pruned {result.deleted_count} files older than {max_age_hours}h")
    else:
        _log_warning(f"Pruning failed: {result.error}")
