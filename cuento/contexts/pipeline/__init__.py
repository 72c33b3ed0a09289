"""
Pipeline Context

Responsibilities:
- Validates story records before any rendering work
- Runs templating -> rendering -> storage for each request
- Times runs and assembles ArtifactRecords
- Offers an HTML preview path that skips the browser

Owns: Story record validation, orchestration, result assembly, engine lifetime
Never: Retries failed stages
"""

from cuento.contexts.pipeline.orchestrator import (
    ArtifactMetadata,
    ArtifactRecord,
    PreviewResult,
    StoryPDFPipeline,
)
from cuento.contexts.pipeline.story_data_structure import (
    Chapter,
    ImageRef,
    StoryDocument,
    validate_story_data,
)

__all__ = [
    "ArtifactMetadata",
    "ArtifactRecord",
    "PreviewResult",
    "StoryPDFPipeline",
    "Chapter",
    "ImageRef",
    "StoryDocument",
    "validate_story_data",
]
