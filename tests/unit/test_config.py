"""Unit tests for layered pipeline configuration."""

from pathlib import Path

import pytest
from omegaconf.errors import ConfigKeyError

from cuento.utils.config import DEFAULT_TEMPLATES_PATH, PipelineConfig, load_pipeline_config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in (
        "CUENTO_CONFIG_PATH",
        "CUENTO_TEMPLATES_PATH",
        "CUENTO_OUTPUT_PATH",
        "CUENTO_LOGS_PATH",
        "CUENTO_MAX_CONCURRENT_PAGES",
    ):
        monkeypatch.delenv(var, raising=False)


@pytest.mark.unit
def test_defaults():
    config = load_pipeline_config()

    assert isinstance(config, PipelineConfig)
    assert config.output_path == "temp/pdfs"
    assert config.templates_path == str(DEFAULT_TEMPLATES_PATH)
    assert config.max_concurrent_pages == 4
    assert config.navigation_timeout_s == 60.0
    assert config.date_locale == "es_ES"
    assert config.events_file == Path("outs/logs") / "story_pipeline_events.log"


@pytest.mark.unit
def test_bundled_templates_exist():
    assert (DEFAULT_TEMPLATES_PATH / "story-template.html.jinja").exists()
    assert (DEFAULT_TEMPLATES_PATH / "pdf-styles.css").exists()


@pytest.mark.unit
def test_yaml_layer(tmp_path):
    config_file = tmp_path / "pipeline.yaml"
    config_file.write_text("output_path: out/books\nmax_concurrent_pages: 2\n")

    config = load_pipeline_config(config_file)

    assert config.output_path == "out/books"
    assert config.max_concurrent_pages == 2
    assert config.template_name == "story-template.html.jinja"


@pytest.mark.unit
def test_config_path_from_environment(tmp_path, monkeypatch):
    config_file = tmp_path / "pipeline.yaml"
    config_file.write_text("date_locale: en_US\n")
    monkeypatch.setenv("CUENTO_CONFIG_PATH", str(config_file))

    assert load_pipeline_config().date_locale == "en_US"


@pytest.mark.unit
def test_environment_overrides_yaml(tmp_path, monkeypatch):
    config_file = tmp_path / "pipeline.yaml"
    config_file.write_text("output_path: out/books\n")
    monkeypatch.setenv("CUENTO_OUTPUT_PATH", "/srv/pdfs")
    monkeypatch.setenv("CUENTO_MAX_CONCURRENT_PAGES", "8")

    config = load_pipeline_config(config_file)

    assert config.output_path == "/srv/pdfs"
    assert config.max_concurrent_pages == 8


@pytest.mark.unit
def test_keyword_overrides_win(monkeypatch, tmp_path):
    monkeypatch.setenv("CUENTO_OUTPUT_PATH", "/srv/pdfs")

    config = load_pipeline_config(output_path=tmp_path / "pdfs", logs_path=None)

    assert config.output_path == str(tmp_path / "pdfs")
    assert config.logs_path == "outs/logs"


@pytest.mark.unit
def test_unknown_field_rejected(tmp_path):
    config_file = tmp_path / "pipeline.yaml"
    config_file.write_text("not_a_setting: 1\n")

    with pytest.raises(ConfigKeyError):
        load_pipeline_config(config_file)
