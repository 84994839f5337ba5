"""ContentChef command line.

Usage:
    python -m contentchef.cli publish --input-path Content/Input/iOS --output-path Content/Output/iOS
    python -m contentchef.cli lint Content/Input/iOS/Lessons
    python -m contentchef.cli generate-lesson --title "GCD Basics" --focus "Queues and QoS"
    python -m contentchef.cli breakdown-topics
    python -m contentchef.cli build-top-level-module
    python -m contentchef.cli sync --base-url https://example.com/Output/iOS/
"""
from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
from typing import Optional

import httpx
import typer

from .models.generation import LessonGenerationConfig, LessonGenerationInput
from .services import (
    content_repository,
    lesson_generation,
    lesson_parser,
    module_parser,
    openai_client,
    prompt_factory,
    publisher,
    section_linter,
    topic_breakdown,
)
from .services.content_fetcher import GitHubContentFetcher
from .services.content_storage import FileContentStorage

logger = logging.getLogger(__name__)

CONTENT_DIR = Path(os.environ.get("CONTENTCHEF_CONTENT_DIR", "Content"))
CONFIG_DIR = CONTENT_DIR / "Config"
LESSON_RAW_DIR = CONTENT_DIR / "Input" / "iOS" / "Lessons"
TOPIC_BREAKDOWN_DIR = CONTENT_DIR / "Input" / "iOS" / "Topics" / "BrokenDownTopics"
GENERATION_CONFIG_FILE = CONFIG_DIR / "lesson_generation_config.json"
BATCH_LESSON_INPUT_FILE = CONTENT_DIR / "Input" / "Temp" / "batch_generate_lessons.json"
BATCH_TOPIC_INPUT_FILE = CONTENT_DIR / "Input" / "iOS" / "GenerationInput" / "topic_generation_input.json"
TOP_LEVEL_MODULE_FILE = CONTENT_DIR / "Input" / "iOS" / "Modules" / "top_level_module.yaml"

TOP_LEVEL_TITLE = "iOS Interview Preparation Course"
TOP_LEVEL_DESCRIPTION = (
    "Comprehensive preparation course for Senior iOS Developer interviews, covering "
    "advanced Swift concepts, iOS architectures, design patterns, concurrency, testing, "
    "and key principles needed to excel in technical interviews."
)

app = typer.Typer(help="ContentChef processes, generates and publishes lesson content.")


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging")) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s — %(message)s",
    )


@app.command()
def publish(
    input_path: Path = typer.Option(CONTENT_DIR / "Input" / "iOS", "--input-path", "-i",
                                    help="Root of the raw content (Lessons/ and Modules/)"),
    output_path: Path = typer.Option(CONTENT_DIR / "Output" / "iOS", "--output-path", "-o",
                                     help="Where the JSON bundle is written"),
) -> None:
    """Parse lessons and modules and write the JSON bundle."""
    try:
        result = publisher.publish_content(input_path, output_path)
    except (lesson_parser.LessonParsingError, module_parser.ModuleParsingError, OSError) as e:
        typer.secho(f"Publish failed: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)
    typer.secho(
        f"Published {len(result.lessons)} lessons and {len(result.modules)} modules "
        f"to {result.output_dir}",
        fg=typer.colors.GREEN,
    )


@app.command()
def lint(
    path: Path = typer.Argument(LESSON_RAW_DIR, help="Lesson file or directory of lessons"),
) -> None:
    """Check Section/EndSection markers."""
    if path.is_dir():
        issues = section_linter.lint_directory(path)
    else:
        issues = section_linter.lint_file(path)

    for issue in issues:
        typer.echo(issue.format())
    if issues:
        typer.secho(f"{len(issues)} issue(s) found", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)
    typer.secho("No section issues found", fg=typer.colors.GREEN)


@app.command("generate-lesson")
def generate_lesson(
    title: str = typer.Option(..., "--title", "-t", help="Title of the lesson"),
    focus: str = typer.Option(..., "--focus", "-f", help="What the lesson should focus on"),
    config_path: Path = typer.Option(GENERATION_CONFIG_FILE, "--config-path", "-c"),
) -> None:
    """Generate a single lesson."""
    config = _load_config(config_path)
    lesson = LessonGenerationInput(title=title, description=focus)
    path = _run(lesson_generation.generate_lesson(lesson, config))
    typer.secho(f"Lesson generated at {path}", fg=typer.colors.GREEN)


@app.command("generate-lessons")
def generate_lessons(
    batch_input_file: Path = typer.Option(BATCH_LESSON_INPUT_FILE, "--batch-input-file", "-b"),
    config_path: Path = typer.Option(GENERATION_CONFIG_FILE, "--config-path", "-c"),
) -> None:
    """Generate every lesson listed in a batch input file."""
    config = _load_config(config_path)
    batch = _run_sync(lambda: lesson_generation.load_batch_input(batch_input_file))
    paths = _run(lesson_generation.generate_lessons(batch, config))
    typer.secho(f"{len(paths)} lesson(s) generated", fg=typer.colors.GREEN)


@app.command("generate-lessons-from-topics")
def generate_lessons_from_topics(
    topic_breakdown_dir: Path = typer.Option(TOPIC_BREAKDOWN_DIR, "--topic-breakdown-dir", "-t"),
    config_path: Path = typer.Option(GENERATION_CONFIG_FILE, "--config-path", "-c"),
) -> None:
    """Generate the lessons of every saved topic breakdown."""
    config = _load_config(config_path)
    for breakdown in topic_breakdown.load_topic_breakdowns(topic_breakdown_dir):
        typer.echo(f"Generating lessons for {breakdown.title}")
        paths = _run(
            lesson_generation.generate_lessons(breakdown.batch_lesson_generation_input, config)
        )
        typer.secho(f"{len(paths)} lesson(s) generated for {breakdown.title}", fg=typer.colors.GREEN)


@app.command("breakdown-topics")
def breakdown_topics(
    input_file_path: Path = typer.Option(BATCH_TOPIC_INPUT_FILE, "--input-file-path", "-i"),
    output_directory: Path = typer.Option(TOPIC_BREAKDOWN_DIR, "--output-directory", "-o"),
) -> None:
    """Split every topic of the input file into lessons."""
    paths = _run(topic_breakdown.generate_topic_breakdowns(input_file_path, output_directory))
    typer.secho(f"{len(paths)} topic breakdown(s) saved to {output_directory}", fg=typer.colors.GREEN)


@app.command("build-top-level-module")
def build_top_level_module(
    batch_topic_input_file: Path = typer.Option(BATCH_TOPIC_INPUT_FILE, "--batch-topic-input-file", "-b"),
    topic_breakdown_dir: Path = typer.Option(TOPIC_BREAKDOWN_DIR, "--topic-breakdown-dir"),
    output_file: Path = typer.Option(TOP_LEVEL_MODULE_FILE, "--output-file", "-o"),
) -> None:
    """Compose saved topic breakdowns into the top level module YAML."""
    order = _run_sync(lambda: topic_breakdown.load_batch_topic_input(batch_topic_input_file))
    breakdowns = topic_breakdown.load_topic_breakdowns(topic_breakdown_dir, order=order)
    module = module_parser.build_top_level_module(TOP_LEVEL_TITLE, TOP_LEVEL_DESCRIPTION, breakdowns)
    _run_sync(lambda: module_parser.save_top_level_module(module, output_file))
    typer.secho(f"Top level module saved to {output_file}", fg=typer.colors.GREEN)


@app.command()
def sync(
    base_url: Optional[str] = typer.Option(None, "--base-url", help="Published bundle URL"),
    cache_dir: Optional[Path] = typer.Option(None, "--cache-dir", help="Local content cache"),
) -> None:
    """Download the published bundle when it is newer than the local cache."""
    repo = content_repository.ContentRepository(
        GitHubContentFetcher(base_url), FileContentStorage(cache_dir)
    )
    updated = _run(repo.update_if_needed())
    state = "updated" if updated else "already up to date"
    typer.secho(
        f"Content {state}: {len(repo.lesson_ids())} lessons, {len(repo.module_ids())} modules",
        fg=typer.colors.GREEN,
    )


# --------------------------------------------------------------------------- #
# Helpers                                                                      #
# --------------------------------------------------------------------------- #

_HANDLED = (
    lesson_generation.LessonGenerationError,
    topic_breakdown.TopicBreakdownError,
    module_parser.ModuleParsingError,
    content_repository.ContentRepositoryError,
    openai_client.OpenAIClientError,
    prompt_factory.PromptFactoryError,
    httpx.HTTPError,
    OSError,
)


def _load_config(path: Path) -> LessonGenerationConfig:
    if not path.exists():
        logger.info(f"No generation config at {path}, using defaults")
        return LessonGenerationConfig()
    return _run_sync(lambda: lesson_generation.load_config(path))


def _run(coro):
    return _run_sync(lambda: asyncio.run(coro))


def _run_sync(fn):
    try:
        return fn()
    except _HANDLED as e:
        typer.secho(f"Error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
