"""Shared fixtures: story records, isolated configs and fake browser drivers."""

import copy
from pathlib import Path

import pytest

from cuento.utils.config import DEFAULT_TEMPLATES_PATH, PipelineConfig

from tests.fakes import FakeEngine, FakePlaywrightDriver

STORY_RECORD = {
    "id": "a1b2c3",
    "name": "lucía",
    "story": {
        "title": "El dragón que no sabía volar",
        "chapters": [
            {
                "title": "el huevo",
                "content": "Había una vez un huevo enorme.\n\nNadie sabía de quién era.",
            },
            {"title": "el primer vuelo", "content": "Lucía y el dragón subieron a la colina."},
        ],
        "word_count": 42,
    },
    "generatedImages": [
        {"url": "https://example.org/img/huevo.png", "description": "Un huevo enorme"},
    ],
    "style": "acuarela",
    "language": "es",
}


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def story_data():
    return copy.deepcopy(STORY_RECORD)


@pytest.fixture
def pipeline_config(tmp_path) -> PipelineConfig:
    return PipelineConfig(
        templates_path=str(DEFAULT_TEMPLATES_PATH),
        output_path=str(tmp_path / "pdfs"),
        logs_path=str(tmp_path / "logs"),
    )


@pytest.fixture
def fake_engine():
    return FakeEngine()


@pytest.fixture
def fake_driver():
    return FakePlaywrightDriver()


@pytest.fixture
def templates_dir(tmp_path) -> Path:
    """A scratch template directory with a tiny template and stylesheet."""
    path = tmp_path / "templates"
    path.mkdir()
    (path / "mini.html.jinja").write_text(
        "<h1>{{ story.title }}</h1><p>{{ name|capitalize }}</p>"
        "<i>{{ images_count }}</i><style>{{ styles|safe }}</style>",
        encoding="utf-8",
    )
    (path / "mini.css").write_text("body { color: red; }", encoding="utf-8")
    (path / "strict.html.jinja").write_text("{{ story.missing_field }}", encoding="utf-8")
    (path / "broken.html.jinja").write_text("{% for x in %}", encoding="utf-8")
    return path
