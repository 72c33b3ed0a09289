"""
Shared utilities for CUENTO.

Common functionality used across contexts:
- Configuration loading
- Logging and pipeline events
- Timestamps
- PDF inspection
"""

from cuento.utils.config import PipelineConfig, load_pipeline_config
from cuento.utils.timestamp import epoch_millis, now, now_exact

__all__ = [
    "PipelineConfig",
    "load_pipeline_config",
    "epoch_millis",
    "now",
    "now_exact",
]
