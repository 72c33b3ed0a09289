"""
Story PDF command line interface.

Commands:
    generate - Render a story record (JSON) to a stored PDF
    preview  - Render a story record to HTML only (no browser)
    stats    - Show statistics over stored PDFs
    cleanup  - Delete stored artifacts older than a threshold
    events   - Show recent pipeline events

Examples:\n

    cuento generate story.json                          # Generate a PDF

    cuento generate story.json --output-dir out/pdfs    # Custom output directory

    cuento preview story.json --output preview.html     # Inspect template output

    cuento cleanup --max-age-hours 48                   # Retention pass
"""

import json
from pathlib import Path
from typing import Any, Dict, Optional

import anyio
import typer
from typing_extensions import Annotated

from cuento.contexts.pipeline import StoryPDFPipeline
from cuento.contexts.pipeline.logger import setup_pipeline_logger
from cuento.exceptions import CuentoError
from cuento.utils.config import PipelineConfig, load_pipeline_config
from cuento.utils.event_logging import get_recent_events
from cuento.utils.logger import session_log_dir
from cuento.utils.timestamp import format_timestamp

app = typer.Typer(
    help="Render story records to paginated PDF storybooks",
    add_completion=False,
    invoke_without_command=True,
)

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="YAML config file (default: CUENTO_CONFIG_PATH)"),
]


def _load_story(story_json: Path) -> Dict[str, Any]:
    try:
        return json.loads(story_json.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        typer.secho(f"Error: could not read story record {story_json}: {e}\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)


def _start_session(config: PipelineConfig, command: str, verbose: bool = False) -> Path:
    log_dir = session_log_dir(Path(config.logs_path), command)
    return setup_pipeline_logger(log_dir, Path(config.output_path), verbose=verbose)


@app.callback()
def main(ctx: typer.Context):
    """Show help by default when no command is provided."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


@app.command("generate")
def generate_command(
    story_json: Annotated[Path, typer.Argument(help="Story record JSON file")],
    output_dir: Annotated[
        Optional[Path],
        typer.Option("--output-dir", "-o", help="Directory for the generated PDF"),
    ] = None,
    file_name: Annotated[
        Optional[str],
        typer.Option("--file-name", "-f", help="PDF file name (default: cuento_<id>_<millis>_<token>.pdf)"),
    ] = None,
    config_path: ConfigOption = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Echo debug output to the console"),
    ] = False,
):
    """
    Render a story record to a PDF and store it.

    Examples:\n

        $ cuento generate story.json

        $ cuento generate story.json -o out/pdfs -f lucia.pdf
    """
    config = load_pipeline_config(config_path, output_path=output_dir)
    story = _load_story(story_json)
    log_file = _start_session(config, "generate", verbose)

    typer.secho(f"\nGenerating: {story_json}", fg=typer.colors.BLUE, bold=True)

    async def _run():
        async with StoryPDFPipeline(config) as pipeline:
            return await pipeline.generate(story, file_name=file_name)

    try:
        record = anyio.run(_run)
    except CuentoError as e:
        typer.secho(f"\n✗ Generation failed\n{e}\n", fg=typer.colors.RED, bold=True, err=True)
        typer.echo(f"  Log: {log_file}")
        raise typer.Exit(code=1)

    typer.secho("\n✓ Generation succeeded", fg=typer.colors.GREEN, bold=True)
    typer.echo(f"  PDF: {record.file_path}")
    typer.echo(f"  Size: {record.size} bytes, pages: {record.metadata.page_count}")
    typer.echo(f"  Time: {record.processing_time:.2f}s")
    typer.echo(f"  Log: {log_file}")
    if verbose:
        typer.echo(json.dumps(record.to_dict(), indent=2, ensure_ascii=False))
    typer.echo("")


@app.command("preview")
def preview_command(
    story_json: Annotated[Path, typer.Argument(help="Story record JSON file")],
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="HTML destination (default: <output_path>/preview_<id>.html)"),
    ] = None,
    config_path: ConfigOption = None,
):
    """Render a story record to HTML without launching the browser."""
    config = load_pipeline_config(config_path)
    story = _load_story(story_json)
    _start_session(config, "preview")

    async def _run():
        async with StoryPDFPipeline(config) as pipeline:
            return await pipeline.preview(story, output_path=output)

    try:
        result = anyio.run(_run)
    except CuentoError as e:
        typer.secho(f"\n✗ Preview failed\n{e}\n", fg=typer.colors.RED, bold=True, err=True)
        raise typer.Exit(code=1)

    typer.secho(f"\n✓ Preview written: {result.preview_path}\n", fg=typer.colors.GREEN, bold=True)


@app.command("stats")
def stats_command(config_path: ConfigOption = None):
    """Show statistics over stored PDFs."""
    config = load_pipeline_config(config_path)

    async def _run():
        async with StoryPDFPipeline(config) as pipeline:
            return await pipeline.stats()

    stats = anyio.run(_run)

    typer.secho(f"\nOutput: {stats.output_path}", fg=typer.colors.BLUE, bold=True)
    if stats.error:
        typer.secho(f"  Scan failed: {stats.error}", fg=typer.colors.YELLOW)
    typer.echo(f"  PDFs: {stats.total_pdfs}")
    typer.echo(f"  Total size: {stats.total_size} bytes")
    typer.echo(f"  Average size: {stats.average_size} bytes\n")


@app.command("cleanup")
def cleanup_command(
    max_age_hours: Annotated[
        float,
        typer.Option("--max-age-hours", "-a", help="Delete artifacts older than this", min=0),
    ] = 24,
    config_path: ConfigOption = None,
):
    """Delete stored artifacts older than the retention threshold."""
    config = load_pipeline_config(config_path)
    _start_session(config, "cleanup")

    async def _run():
        async with StoryPDFPipeline(config) as pipeline:
            return await pipeline.cleanup_old_files(max_age_hours)

    result = anyio.run(_run)

    if result.success:
        typer.secho(f"\n✓ Deleted {result.deleted_count} files\n", fg=typer.colors.GREEN, bold=True)
    else:
        typer.secho(f"\n✗ Cleanup failed: {result.error}\n", fg=typer.colors.RED, bold=True, err=True)
        raise typer.Exit(code=1)


@app.command("events")
def events_command(
    n: Annotated[int, typer.Option("--num", "-n", help="Number of recent events to show")] = 10,
    story_id: Annotated[
        Optional[str], typer.Option("--story", "-s", help="Only events for this story id")
    ] = None,
    event_type: Annotated[
        Optional[str], typer.Option("--type", "-t", help="Only events of this type")
    ] = None,
    config_path: ConfigOption = None,
):
    """Show recent pipeline events."""
    config = load_pipeline_config(config_path)
    events = get_recent_events(config.events_file, n=n, story_id=story_id, event_type=event_type)

    if not events:
        typer.echo("No events found.")
        raise typer.Exit()

    for event in events:
        when = format_timestamp(event.get("timestamp", ""), relative=True)
        typer.echo(f"{when:>10}  {str(event.get('event_type')):<22} {event.get('story_id') or '-'}")


if __name__ == "__main__":
    app()
