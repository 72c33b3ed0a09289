"""Unit tests for StoryPDFPipeline with a fake rendering engine."""

import asyncio
import time

import pytest

from cuento.contexts.pipeline import ArtifactRecord, StoryPDFPipeline
from cuento.contexts.storage import ArtifactStore
from cuento.exceptions import ArtifactWriteError, RenderError, TemplateLoadError, ValidationError
from cuento.utils.event_logging import get_recent_events
from cuento.utils.pdf_processing import has_pdf_magic

from tests.fakes import FakeEngine


@pytest.fixture
def pipeline(pipeline_config, fake_engine):
    return StoryPDFPipeline(pipeline_config, engine=fake_engine)


@pytest.mark.unit
@pytest.mark.anyio
async def test_generate_stores_pdf(pipeline, story_data, pipeline_config):
    record = await pipeline.generate(story_data)

    assert isinstance(record, ArtifactRecord)
    assert record.success
    assert record.size > 0
    assert record.file_path.exists()
    assert record.file_path.parent == pipeline.store.output_path
    assert str(pipeline.store.output_path) == pipeline_config.output_path
    assert has_pdf_magic(record.file_path.read_bytes())
    assert record.file_name.startswith("cuento_a1b2c3_")
    assert record.processing_time >= 0


@pytest.mark.unit
@pytest.mark.anyio
async def test_generate_metadata(pipeline, story_data):
    record = await pipeline.generate(story_data)

    metadata = record.metadata
    assert metadata.title == "El dragón que no sabía volar"
    assert metadata.chapter_count == 2
    assert metadata.image_count == 1
    assert metadata.word_count == 42
    assert metadata.style == "acuarela"
    assert metadata.language == "es"


@pytest.mark.unit
@pytest.mark.anyio
async def test_generate_with_explicit_file_name_and_options(pipeline, story_data, fake_engine):
    record = await pipeline.generate(story_data, file_name="lucia.pdf", pdf_options={"format": "A5"})

    assert record.file_name == "lucia.pdf"
    assert fake_engine.last_options == {"format": "A5"}


@pytest.mark.unit
@pytest.mark.anyio
async def test_invalid_record_never_touches_engine(pipeline, story_data, fake_engine):
    story_data["story"]["title"] = ""

    with pytest.raises(ValidationError) as exc_info:
        await pipeline.generate(story_data)

    assert "title" in str(exc_info.value)
    assert str(exc_info.value).startswith("[validate] ")
    assert exc_info.value.stage == "validate"
    assert fake_engine.start_calls == 0
    assert fake_engine.render_calls == 0
    assert not pipeline.store.output_path.exists()


@pytest.mark.unit
@pytest.mark.anyio
async def test_render_failure_is_tagged(pipeline_config, story_data):
    engine = FakeEngine(error=RenderError("PDF rendering failed during pdf", phase="pdf"))
    pipeline = StoryPDFPipeline(pipeline_config, engine=engine)

    with pytest.raises(RenderError) as exc_info:
        await pipeline.generate(story_data)

    assert exc_info.value.stage == "render"
    assert exc_info.value.phase == "pdf"


@pytest.mark.unit
@pytest.mark.anyio
async def test_unexpected_exception_is_wrapped(pipeline_config, story_data):
    engine = FakeEngine(error=KeyError("surprise"))
    pipeline = StoryPDFPipeline(pipeline_config, engine=engine)

    with pytest.raises(RenderError) as exc_info:
        await pipeline.generate(story_data)

    assert exc_info.value.stage == "render"
    assert isinstance(exc_info.value.original_error, KeyError)


@pytest.mark.unit
@pytest.mark.anyio
async def test_missing_template_is_tagged(pipeline_config, story_data, fake_engine):
    pipeline_config.template_name = "absent.html.jinja"
    pipeline = StoryPDFPipeline(pipeline_config, engine=fake_engine)

    with pytest.raises(TemplateLoadError) as exc_info:
        await pipeline.generate(story_data)

    assert exc_info.value.stage == "template"
    assert fake_engine.render_calls == 0


@pytest.mark.unit
@pytest.mark.anyio
async def test_write_failure_is_tagged(pipeline_config, story_data, fake_engine, tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("file, not directory")
    pipeline = StoryPDFPipeline(
        pipeline_config, engine=fake_engine, store=ArtifactStore(blocker / "pdfs")
    )

    with pytest.raises(ArtifactWriteError) as exc_info:
        await pipeline.generate(story_data)

    assert exc_info.value.stage == "save"


@pytest.mark.unit
@pytest.mark.anyio
async def test_concurrent_generations_overlap(pipeline_config, story_data):
    delay = 0.2
    engine = FakeEngine(delay=delay)
    pipeline = StoryPDFPipeline(pipeline_config, engine=engine)

    start = time.perf_counter()
    records = await asyncio.gather(*(pipeline.generate(story_data) for _ in range(5)))
    elapsed = time.perf_counter() - start

    assert len({record.file_name for record in records}) == 5
    assert all(record.file_path.exists() for record in records)
    assert elapsed < 5 * delay


@pytest.mark.unit
@pytest.mark.anyio
async def test_preview_does_not_start_engine(pipeline, story_data, fake_engine):
    result = await pipeline.preview(story_data)

    assert result.success
    assert result.preview_path == pipeline.store.output_path / "preview_a1b2c3.html"
    assert "El dragón que no sabía volar" in result.preview_path.read_text(encoding="utf-8")
    assert fake_engine.start_calls == 0
    assert fake_engine.render_calls == 0


@pytest.mark.unit
@pytest.mark.anyio
async def test_preview_custom_path(pipeline, story_data, tmp_path):
    target = tmp_path / "out" / "story.html"
    result = await pipeline.preview(story_data, output_path=target)

    assert result.preview_path == target
    assert target.exists()


@pytest.mark.unit
@pytest.mark.anyio
async def test_stats_and_cleanup(pipeline, story_data):
    await pipeline.generate(story_data)
    await pipeline.generate(story_data)

    stats = await pipeline.stats()
    assert stats.total_pdfs == 2

    result = await pipeline.cleanup_old_files(0)
    assert result.success
    assert result.deleted_count == 2
    assert (await pipeline.stats()).total_pdfs == 0


@pytest.mark.unit
@pytest.mark.anyio
async def test_events_are_recorded(pipeline, story_data, pipeline_config):
    await pipeline.generate(story_data)
    story_data["story"]["chapters"] = []
    with pytest.raises(ValidationError):
        await pipeline.generate(story_data)

    events = get_recent_events(pipeline_config.events_file, n=10)
    types = [event["event_type"] for event in events]

    assert types == ["generation_started", "generation_completed", "generation_failed"]
    assert events[-1]["stage"] == "validate"
    assert events[-1]["error_type"] == "ValidationError"
    assert events[1]["story_id"] == "a1b2c3"


@pytest.mark.unit
@pytest.mark.anyio
async def test_events_can_be_disabled(pipeline_config, story_data, fake_engine):
    pipeline_config.record_events = False
    pipeline = StoryPDFPipeline(pipeline_config, engine=fake_engine)

    await pipeline.generate(story_data)

    assert not pipeline_config.events_file.exists()


@pytest.mark.unit
@pytest.mark.anyio
async def test_context_manager_shuts_engine_down(pipeline_config, story_data, fake_engine):
    async with StoryPDFPipeline(pipeline_config, engine=fake_engine) as pipeline:
        await pipeline.generate(story_data)

    assert fake_engine.shutdown_calls == 1


@pytest.mark.unit
@pytest.mark.anyio
async def test_record_to_dict(pipeline, story_data):
    record = await pipeline.generate(story_data)
    data = record.to_dict()

    assert data["fileName"] == record.file_name
    assert data["filePath"] == str(record.file_path)
    assert data["success"] is True
    assert data["metadata"]["chapterCount"] == 2
    assert data["metadata"]["imageCount"] == 1


@pytest.fixture
def unwritable_events_config(pipeline_config, tmp_path):
    logs_file = tmp_path / "logs_is_a_file"
    logs_file.write_text("occupied")
    pipeline_config.logs_path = str(logs_file)
    return pipeline_config


@pytest.mark.unit
@pytest.mark.anyio
async def test_event_log_failure_does_not_fail_generation(unwritable_events_config, story_data, fake_engine):
    pipeline = StoryPDFPipeline(unwritable_events_config, engine=fake_engine)

    record = await pipeline.generate(story_data)
    assert record.success
    assert record.file_path.exists()
    assert record.metadata.title == "El dragón que no sabía volar"

    preview = await pipeline.preview(story_data)
    assert preview.preview_path.exists()

    cleanup = await pipeline.cleanup_old_files(0)
    assert cleanup.success
    assert cleanup.deleted_count == 2


@pytest.mark.unit
@pytest.mark.anyio
async def test_event_log_failure_keeps_original_stage_error(unwritable_events_config, story_data, fake_engine):
    pipeline = StoryPDFPipeline(unwritable_events_config, engine=fake_engine)
    story_data["story"]["chapters"] = []

    with pytest.raises(ValidationError) as exc_info:
        await pipeline.generate(story_data)

    assert exc_info.value.stage == "validate"
    assert "at least one chapter" in str(exc_info.value)
    assert fake_engine.render_calls == 0


@pytest.mark.unit
@pytest.mark.anyio
async def test_event_log_failure_after_render_error(unwritable_events_config, story_data):
    engine = FakeEngine(error=RenderError("PDF rendering failed during fonts", phase="fonts"))
    pipeline = StoryPDFPipeline(unwritable_events_config, engine=engine)

    with pytest.raises(RenderError) as exc_info:
        await pipeline.generate(story_data)

    assert exc_info.value.stage == "render"
    assert exc_info.value.phase == "fonts"
