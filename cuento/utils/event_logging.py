"""
Pipeline event logging utilities.

Appends one JSON object per line to the story pipeline event log, giving a
compact, machine-readable history of every generation, preview and cleanup.

For detailed within-context logging, use cuento.utils.logger instead.

Usage:
    from cuento.utils.event_logging import log_pipeline_event, get_recent_events

    log_pipeline_event(
        event_type="generation_completed",
        story_id="abc123",
        source="pipeline",
        events_file=config.events_file,
        size=48213,
    )

    events = get_recent_events(events_file=config.events_file, n=20, story_id="abc123")
"""

import json
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from cuento.utils.timestamp import now_exact

load_dotenv()
PIPELINE_EVENTS_FILE = Path(
    os.getenv("CUENTO_EVENTS_FILE", "outs/logs/story_pipeline_events.log")
)

EVENT_TYPES = {
    "generation_started",
    "generation_completed",
    "generation_failed",
    "preview_written",
    "cleanup_completed",
}


def log_pipeline_event(
    event_type: str,
    story_id: Optional[str],
    source: str,
    events_file: Path = PIPELINE_EVENTS_FILE,
    **extra_fields,
) -> None:
    """
    Log an event to the pipeline event log (JSON Lines).

    Args:
        event_type: One of EVENT_TYPES
        story_id: Story identifier (None for directory-wide events such as cleanup)
        source: Event source (e.g., "pipeline", "cli")
        events_file: Destination log file
        **extra_fields: Additional event-specific fields (must be JSON serializable)

    Raises:
        ValueError: If event_type is unknown
    """
    if event_type not in EVENT_TYPES:
        raise ValueError(f"Unknown event type '{event_type}'. Expected one of {sorted(EVENT_TYPES)}")

    events_file = Path(events_file)
    events_file.parent.mkdir(parents=True, exist_ok=True)

    event = {
        "timestamp": now_exact(),
        "event_type": event_type,
        "story_id": story_id,
        "source": source,
        **extra_fields,
    }

    with open(events_file, "a", encoding="utf-8") as f:
        f.write(json.dumps(event, ensure_ascii=False, default=str) + "\n")


def get_recent_events(
    events_file: Path = PIPELINE_EVENTS_FILE,
    n: int = 10,
    story_id: Optional[str] = None,
    event_type: Optional[str] = None,
) -> list[dict]:
    """
    Get the last n events from the pipeline log, optionally filtered.

    Args:
        events_file: Log file to read
        n: Number of recent events to return (default: 10)
        story_id: Only events for this story (optional)
        event_type: Only events of this type (optional)

    Returns:
        List of event dicts (most recent last)
    """
    events_file = Path(events_file)
    if not events_file.exists():
        return []

    events = []
    with open(events_file, "r", encoding="utf-8") as f:
        for line in f:
            try:
                events.append(json.loads(line.strip()))
            except json.JSONDecodeError:
                # Skip malformed lines
                continue

    if story_id:
        events = [e for e in events if e.get("story_id") == story_id]

    if event_type:
        events = [e for e in events if e.get("event_type") == event_type]

    return events[-n:] if len(events) > n else events
