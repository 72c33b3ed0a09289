"""
Story PDF pipeline orchestration.

Runs one story record through every stage, strictly in order:

    validate -> template (HTML) -> render (PDF) -> save

Each failure is re-raised tagged with the stage it escaped from; there are no
retries inside a run. Distinct runs are independent and may interleave freely
on one event loop, sharing the rendering engine's browser process.
"""

import time
from dataclasses import asdict, dataclass
from functools import partial
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import anyio

from cuento.contexts.pipeline.logger import (
    _log_info,
    _log_warning,
    log_generation_failure,
    log_generation_result,
    log_generation_start,
)
from cuento.contexts.pipeline.story_data_structure import StoryDocument, validate_story_data
from cuento.contexts.rendering.engine import RenderingEngine
from cuento.contexts.storage.artifact_store import (
    ArtifactStore,
    PruneResult,
    StoreStats,
    artifact_file_name,
)
from cuento.contexts.templating.renderer import TemplateRenderer
from cuento.exceptions import (
    ArtifactWriteError,
    CuentoError,
    RenderError,
    ValidationError,
)
from cuento.utils.config import PipelineConfig, load_pipeline_config
from cuento.utils.event_logging import log_pipeline_event
from cuento.utils.pdf_processing import page_count

# Error class used when a stage fails with an exception outside the hierarchy
STAGE_ERRORS = {
    "validate": ValidationError,
    "template": RenderError,
    "render": RenderError,
    "save": ArtifactWriteError,
}


@dataclass(frozen=True)
class ArtifactMetadata:
    title: str
    chapter_count: int
    image_count: int
    word_count: int
    style: Optional[str]
    language: Optional[str]
    page_count: Optional[int] = None


@dataclass(frozen=True)
class ArtifactRecord:
    """
    Result of one successful generation run.

    Attributes:
        file_path: Where the PDF was written
        file_name: PDF file name
        size: PDF size in bytes
        processing_time: Seconds from validation start to write completion
        metadata: Story facts (title, counts, style, language, page count)
        success: Always True (failures raise)
    """

    file_path: Path
    file_name: str
    size: int
    processing_time: float
    metadata: ArtifactMetadata
    success: bool = True

    def to_dict(self) -> Dict[str, Any]:
        """camelCase form for JSON consumers."""
        return {
            "filePath": str(self.file_path),
            "fileName": self.file_name,
            "size": self.size,
            "processingTime": self.processing_time,
            "success": self.success,
            "metadata": {
                "title": self.metadata.title,
                "chapterCount": self.metadata.chapter_count,
                "imageCount": self.metadata.image_count,
                "wordCount": self.metadata.word_count,
                "style": self.metadata.style,
                "language": self.metadata.language,
                "pageCount": self.metadata.page_count,
            },
        }


@dataclass(frozen=True)
class PreviewResult:
    preview_path: Path
    success: bool = True


class StoryPDFPipeline:
    """
    Compose templating, rendering and storage into one generation call.

    The pipeline owns the rendering engine's lifetime: use it as an async context
    manager, or call start()/shutdown() at the process boundary. Collaborators
    may be injected (e.g., a fake engine in tests).

    Usage:
        async with StoryPDFPipeline() as pipeline:
            record = await pipeline.generate(story_data)
    """

    def __init__(
        self,
        config: Optional[PipelineConfig] = None,
        renderer: Optional[TemplateRenderer] = None,
        engine: Optional[RenderingEngine] = None,
        store: Optional[ArtifactStore] = None,
    ):
        self.config = config or load_pipeline_config()
        self.renderer = renderer or TemplateRenderer(
            templates_path=Path(self.config.templates_path),
            template_name=self.config.template_name,
            styles_name=self.config.styles_name,
            date_locale=self.config.date_locale,
        )
        self.engine = engine or RenderingEngine(
            navigation_timeout_s=self.config.navigation_timeout_s,
            max_concurrent_pages=self.config.max_concurrent_pages,
        )
        self.store = store or ArtifactStore(Path(self.config.output_path))

    async def __aenter__(self) -> "StoryPDFPipeline":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.shutdown()

    async def start(self) -> None:
        """Launch the browser ahead of the first request (optional; renders launch lazily)."""
        await self.engine.ensure_started()

    async def shutdown(self) -> None:
        """Close the browser. Safe to call more than once."""
        await self.engine.shutdown()

    def validate(self, story_data: Mapping[str, Any]) -> StoryDocument:
        """Validate a story record; see validate_story_data()."""
        return validate_story_data(story_data)

    async def generate(
        self,
        story_data: Mapping[str, Any],
        file_name: Optional[str] = None,
        pdf_options: Optional[Mapping[str, Any]] = None,
    ) -> ArtifactRecord:
        """
        Generate and store the PDF for one story record.

        Args:
            story_data: Raw story record
            file_name: Output file name (default: cuento_<id>_<epoch-millis>_<token>.pdf)
            pdf_options: Playwright page.pdf() overrides

        Returns:
            ArtifactRecord

        Raises:
            ValidationError: Invalid record (raised before the engine is touched)
            TemplateLoadError / RenderError: Template or browser failure
            ArtifactWriteError: Output could not be written
        """
        start_time = time.perf_counter()
        story_id = story_data.get("id") if isinstance(story_data, Mapping) else None
        stage = "validate"

        try:
            story = self.validate(story_data)
        except Exception as exc:
            error = await self._stage_failed(exc, story_id, stage, start_time)
            if error is exc:
                raise
            raise error from exc

        log_generation_start(story.id, story.title)
        await self._record_event("generation_started", story.id, title=story.title)

        try:
            stage = "template"
            html = await self.renderer.render(story_data)

            stage = "render"
            pdf_buffer = await self.engine.render_to_pdf(html, pdf_options)

            stage = "save"
            saved = await self.store.save(pdf_buffer, file_name or artifact_file_name(story.id))
            processing_time = time.perf_counter() - start_time
        except Exception as exc:
            error = await self._stage_failed(exc, story_id, stage, start_time)
            if error is exc:
                raise
            raise error from exc

        pages = await anyio.to_thread.run_sync(page_count, saved.file_path)
        record = ArtifactRecord(
            file_path=saved.file_path,
            file_name=saved.file_name,
            size=saved.size,
            processing_time=processing_time,
            metadata=ArtifactMetadata(
                title=story.title,
                chapter_count=story.chapter_count,
                image_count=story.image_count,
                word_count=story.word_count,
                style=story.style,
                language=story.language,
                page_count=pages,
            ),
        )

        log_generation_result(story.id, record)
        await self._record_event(
            "generation_completed",
            story.id,
            file_name=record.file_name,
            size=record.size,
            processing_time_s=round(record.processing_time, 3),
            page_count=pages,
        )
        return record

    async def preview(
        self,
        story_data: Mapping[str, Any],
        output_path: Optional[Path] = None,
    ) -> PreviewResult:
        """
        Render a story record to HTML and write it without touching the browser.

        Args:
            story_data: Raw story record
            output_path: HTML destination (default: <output_path>/preview_<id>.html)

        Returns:
            PreviewResult

        Raises:
            ValidationError, TemplateLoadError, RenderError, ArtifactWriteError
        """
        start_time = time.perf_counter()
        story_id = story_data.get("id") if isinstance(story_data, Mapping) else None
        stage = "validate"

        try:
            story = self.validate(story_data)

            stage = "template"
            html = await self.renderer.render(story_data)

            stage = "save"
            preview_path = Path(output_path or self.store.output_path / f"preview_{story.id}.html")
            await self.store.write_text(html, preview_path)
        except Exception as exc:
            error = await self._stage_failed(exc, story_id, stage, start_time)
            if error is exc:
                raise
            raise error from exc

        _log_info(f"Preview written: {preview_path}")
        await self._record_event("preview_written", story.id, preview_path=str(preview_path))
        return PreviewResult(preview_path=preview_path)

    async def stats(self) -> StoreStats:
        """Aggregate statistics over stored PDFs (never raises)."""
        return await self.store.stats()

    async def cleanup_old_files(self, max_age_hours: float = 24) -> PruneResult:
        """Delete artifacts older than max_age_hours (never raises)."""
        result = await self.store.prune_older_than(max_age_hours)
        await self._record_event(
            "cleanup_completed", None, max_age_hours=max_age_hours, **asdict(result)
        )
        return result

    async def _stage_failed(
        self, exc: Exception, story_id, stage: str, start_time: float
    ) -> CuentoError:
        """Tag (or wrap) a stage failure, log it, and return the error to raise."""
        if isinstance(exc, CuentoError):
            error = exc.add_stage(stage)
        else:
            error = STAGE_ERRORS[stage](
                f"Unexpected {type(exc).__name__}", stage=stage, original_error=exc
            )

        log_generation_failure(story_id, stage, error, time.perf_counter() - start_time)
        await self._record_event(
            "generation_failed",
            None if story_id is None else str(story_id),
            stage=stage,
            error_type=type(error).__name__,
            error=error.message,
        )
        return error

    async def _record_event(self, event_type: str, story_id: Optional[str], **fields) -> None:
        """Append to the event log off the event loop; a failed write never changes the outcome."""
        if not self.config.record_events:
            return

        write_event = partial(
            log_pipeline_event,
            event_type=event_type,
            story_id=story_id,
            source="pipeline",
            events_file=self.config.events_file,
            **fields,
        )
        try:
            await anyio.to_thread.run_sync(write_event)
        except OSError as exc:
            _log_warning(f"Could not record {event_type} event in {self.config.events_file}: {exc}")
