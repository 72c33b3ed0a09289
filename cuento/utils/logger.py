"""
Session logging for the story pipeline.

Every CLI invocation gets its own session directory under the logs path
(e.g. outs/logs/generate_20261019_141502/) holding one loguru file sink.
Library modules never configure sinks; they log through the prefixed
wrappers in contexts/{context}/logger.py and inherit whatever the entry
point set up here.
"""

import platform
import sys
from pathlib import Path
from typing import Mapping, Optional

from loguru import logger

import cuento
from cuento.utils.timestamp import now

FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {message}"
CONSOLE_FORMAT = "<dim>{time:HH:mm:ss}</dim> <level>{level: <8}</level> {message}"


def session_log_dir(logs_path: Path, command: str) -> Path:
    """Directory for one CLI session: <logs_path>/<command>_<timestamp>."""
    return Path(logs_path) / f"{command}_{now()}"


def setup_logger(
    context_name: str,
    log_dir: Path,
    extra_provenance: Optional[Mapping[str, object]] = None,
    console_level: str = "INFO",
) -> Path:
    """
    Replace loguru's sinks with a session file sink and a console sink.

    The file sink records everything from DEBUG up; the console sink
    (stderr, so stdout stays free for command output) starts at console_level.

    Args:
        context_name: Log file stem (e.g., "pipeline")
        log_dir: Session directory, created if missing
        extra_provenance: Additional lines for the session header
        console_level: Minimum level echoed to the console

    Returns:
        Path to the session log file

    Example:
        log_file = setup_logger(
            context_name="pipeline",
            log_dir=session_log_dir(Path("outs/logs"), "generate"),
            extra_provenance={"Output path": "temp/pdfs"},
        )
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / f"{context_name}.log"

    logger.remove()
    logger.add(log_file, format=FILE_FORMAT, level="DEBUG", encoding="utf-8")
    logger.add(sys.stderr, format=CONSOLE_FORMAT, level=console_level, colorize=True)

    log_provenance(extra_provenance)
    return log_file


def log_provenance(extra_context: Optional[Mapping[str, object]] = None) -> None:
    """Write the session header: command line, versions, working directory, extras."""
    logger.debug("=" * 72)
    logger.debug(f"cuento {cuento.__version__} on Python {platform.python_version()}")
    logger.debug(f"Command: {' '.join(sys.argv)}")
    logger.debug(f"Working directory: {Path.cwd()}")
    for key, value in (extra_context or {}).items():
        logger.debug(f"{key}: {value}")
    logger.debug("=" * 72)
