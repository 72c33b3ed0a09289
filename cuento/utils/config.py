"""
Pipeline configuration.

Settings are layered, later layers overriding earlier ones:

    dataclass defaults -> YAML file -> environment (.env aware) -> keyword overrides

Examples:
    >>> config = load_pipeline_config()
    >>> config = load_pipeline_config("configs/pipeline.yaml", max_concurrent_pages=2)
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Union

from dotenv import load_dotenv
from omegaconf import OmegaConf

load_dotenv()

PACKAGE_ROOT = Path(__file__).resolve().parents[1]
DEFAULT_TEMPLATES_PATH = PACKAGE_ROOT / "contexts" / "templating" / "templates"

# Environment variables that override config fields
ENV_OVERRIDES = {
    "templates_path": "CUENTO_TEMPLATES_PATH",
    "output_path": "CUENTO_OUTPUT_PATH",
    "logs_path": "CUENTO_LOGS_PATH",
    "max_concurrent_pages": "CUENTO_MAX_CONCURRENT_PAGES",
}


@dataclass
class PipelineConfig:
    """
    Settings shared by every context of the pipeline.

    Attributes:
        templates_path: Directory holding the story template and stylesheet
        output_path: Directory where PDFs and previews are written
        logs_path: Directory for session logs and the pipeline event log
        template_name: Primary document template file name
        styles_name: Optional stylesheet file name
        navigation_timeout_s: Bound on each content-load wait in the browser
        max_concurrent_pages: Ceiling on simultaneously open browser pages
        date_locale: Locale used by the format_date template helper
        record_events: Append pipeline events to the JSON Lines event log
    """

    templates_path: str = str(DEFAULT_TEMPLATES_PATH)
    output_path: str = "temp/pdfs"
    logs_path: str = "outs/logs"
    template_name: str = "story-template.html.jinja"
    styles_name: str = "pdf-styles.css"
    navigation_timeout_s: float = 60.0
    max_concurrent_pages: int = 4
    date_locale: str = "es_ES"
    record_events: bool = True

    @property
    def events_file(self) -> Path:
        return Path(self.logs_path) / "story_pipeline_events.log"


def load_pipeline_config(
    config_path: Optional[Union[str, Path]] = None, **overrides: Any
) -> PipelineConfig:
    """
    Build a PipelineConfig from defaults, an optional YAML file, the environment and overrides.

    Args:
        config_path: YAML file with any subset of PipelineConfig fields
                     (defaults to CUENTO_CONFIG_PATH env variable, if set)
        **overrides: Field values that win over every other layer (None values are ignored)

    Returns:
        Fully resolved PipelineConfig

    Raises:
        omegaconf.errors.ConfigKeyError: If the YAML file or overrides name an unknown field
    """
    if config_path is None and os.getenv("CUENTO_CONFIG_PATH"):
        config_path = os.getenv("CUENTO_CONFIG_PATH")

    layers = [OmegaConf.structured(PipelineConfig)]

    if config_path is not None:
        layers.append(OmegaConf.load(Path(config_path)))

    env_layer = {
        field_name: os.environ[env_var]
        for field_name, env_var in ENV_OVERRIDES.items()
        if os.environ.get(env_var)
    }
    layers.append(OmegaConf.create(env_layer))

    override_layer = {
        key: str(value) if isinstance(value, Path) else value
        for key, value in overrides.items()
        if value is not None
    }
    layers.append(OmegaConf.create(override_layer))

    return OmegaConf.to_object(OmegaConf.merge(*layers))
