"""
Pipeline context logger.

Provides logging interface for the orchestrator with automatic [pipeline] prefix.
"""

from pathlib import Path

from loguru import logger

from cuento.utils.logger import setup_logger as _setup_logger

CONTEXT_PREFIX = "[pipeline]"


def setup_pipeline_logger(log_dir: Path, output_path: Path, verbose: bool = False) -> Path:
    """
    Setup logger for a pipeline session.

    Args:
        log_dir: Directory for this session
        output_path: Artifact directory (recorded in provenance)
        verbose: Echo DEBUG messages to the console as well

    Returns:
        Path to log file
    """
    return _setup_logger(
        context_name="pipeline",
        log_dir=log_dir,
        extra_provenance={"Output path": output_path},
        console_level="DEBUG" if verbose else "INFO",
    )


# Wrapper functions with automatic [pipeline] prefix


def _log_info(message: str) -> None:
    """Log info message with [pipeline] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_success(message: str) -> None:
    """Log success message with [pipeline] prefix."""
    logger.success(f"{CONTEXT_PREFIX} {message}")


def _log_error(message: str) -> None:
    """Log error message with [pipeline] prefix."""
    logger.error(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [pipeline] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [pipeline] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


# High-level pipeline-specific logging helpers


def log_generation_start(story_id, title: str) -> None:
    """Log start of a generation run."""
    _log_info(f"Starting generation: {story_id}")
    _log_debug(f"  Title: {title}")


def log_generation_result(story_id, record) -> None:
    """Log a successful generation run (record is an ArtifactRecord)."""
    _log_success(
        f"{story_id}: {record.size} bytes, {record.metadata.page_count} pages "
        f"({record.processing_time:.2f}s)"
    )
    _log_debug(f"  PDF: {record.file_path}")


def log_generation_failure(story_id, stage: str, error: BaseException, elapsed_time: float) -> None:
    """Log a failed run with the failing stage."""
    _log_error(f"{story_id}: failed at stage '{stage}' ({elapsed_time:.2f}s)")
    _log_error(f"  Error: {error}")
