"""
Storage Context

Responsibilities:
- Persists rendered artifacts under collision-resistant names
- Reports aggregate statistics over the output directory
- Prunes artifacts older than a retention threshold

Owns: Output directory, artifact naming, retention
Never: Renders content
"""

from cuento.contexts.storage.artifact_store import (
    ArtifactStore,
    PruneResult,
    SavedArtifact,
    StoreStats,
    artifact_file_name,
)

__all__ = ["ArtifactStore", "PruneResult", "SavedArtifact", "StoreStats", "artifact_file_name"]
