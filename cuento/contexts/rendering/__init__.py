"""
Rendering Context

Responsibilities:
- Owns the shared headless Chromium process and its lifecycle
- Converts HTML documents to PDF buffers in isolated, bounded pages
- Enforces content-load and font-load waits before capture

Owns: Browser lifecycle, page handling, PDF capture options
Never: Modifies template content or writes files
"""

from cuento.contexts.rendering.engine import (
    CHROMIUM_ARGS,
    EngineState,
    RenderingEngine,
    RenderOptions,
)

__all__ = ["CHROMIUM_ARGS", "EngineState", "RenderingEngine", "RenderOptions"]
