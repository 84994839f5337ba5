"""
Lesson Generation — prompt -> model -> validated lesson file.

Every response is written to the temporary directory first, parsed and
linted, and only moved into the output (raw lessons) directory when it is a
well-formed lesson. The output directory also holds
`lesson_content_list.json`, the list of already generated lesson filenames
used to skip work on re-runs.
"""
from __future__ import annotations

import logging
import shutil
from pathlib import Path

from pydantic import ValidationError

from ..models.generation import (
    BatchLessonGenerationInput,
    LessonGeneratedContentList,
    LessonGenerationConfig,
    LessonGenerationInput,
)
from . import lesson_parser, openai_client, prompt_factory, section_linter
from .content_files import ensure_directory, list_files, load_json, save_json

logger = logging.getLogger(__name__)

GENERATED_CONTENT_LIST_FILE = "lesson_content_list.json"


class LessonGenerationError(Exception):
    pass


def load_config(path: Path) -> LessonGenerationConfig:
    try:
        return LessonGenerationConfig.model_validate(load_json(path))
    except (OSError, ValueError, ValidationError) as e:
        raise LessonGenerationError(f"Could not load generation config {path}: {e}") from e


def load_batch_input(path: Path) -> BatchLessonGenerationInput:
    try:
        return BatchLessonGenerationInput.model_validate(load_json(path))
    except (OSError, ValueError, ValidationError) as e:
        raise LessonGenerationError(f"Could not load batch input {path}: {e}") from e


async def generate_lesson(
    lesson: LessonGenerationInput,
    config: LessonGenerationConfig,
) -> Path:
    logger.info(f"Generating lesson '{lesson.title}'")
    response = await openai_client.send_prompt(_prompt_request(lesson, config))
    output = process_lesson_response(response, lesson, config)
    logger.info(f"Lesson generated at {output}")
    return output


async def generate_lessons(
    batch: BatchLessonGenerationInput,
    config: LessonGenerationConfig,
) -> list[Path]:
    """
    Generate every lesson in the batch that has not been generated yet.
    Lessons whose request fails or whose response does not validate are
    logged and skipped; when every request fails the first error is raised.
    """
    pending = filter_already_generated(batch, config.output_directory)
    if not pending.lessons:
        logger.info("All lessons in the batch are already generated")
        return []

    logger.info(f"Lessons to generate: {[l.title for l in pending.lessons]}")
    responses = await openai_client.send_batch_prompts(
        [_prompt_request(l, config) for l in pending.lessons]
    )

    errors = [r for r in responses if isinstance(r, Exception)]
    if len(errors) == len(responses):
        # Every request failed; surface the cause.
        raise errors[0]

    outputs: list[Path] = []
    for lesson, response in zip(pending.lessons, responses):
        if isinstance(response, Exception):
            logger.warning(f"Skipping lesson '{lesson.title}': request failed: {response}")
            continue
        try:
            outputs.append(process_lesson_response(response, lesson, config))
        except LessonGenerationError as e:
            logger.warning(f"Skipping lesson '{lesson.title}': {e}")

    logger.info(f"Batch generation complete for {len(outputs)}/{len(pending.lessons)} lessons")
    update_generated_content_list(config.output_directory)
    return outputs


def process_lesson_response(
    response: str,
    lesson: LessonGenerationInput,
    config: LessonGenerationConfig,
) -> Path:
    temp_path = ensure_directory(config.temporary_directory) / f"{lesson.filename}.md"
    temp_path.write_text(response, encoding="utf-8")

    issues = section_linter.lint_sections(response)
    if issues:
        raise LessonGenerationError(
            "section markers are malformed: " + "; ".join(i.format() for i in issues)
        )
    try:
        parsed = lesson_parser.parse_lesson(response)
    except lesson_parser.LessonParsingError as e:
        raise LessonGenerationError(f"lesson parsing failed: {e}") from e
    if not parsed.sections:
        raise LessonGenerationError("lesson has no sections")

    output_path = ensure_directory(config.output_directory) / f"{lesson.filename}.md"
    shutil.move(str(temp_path), str(output_path))
    return output_path


def filter_already_generated(
    batch: BatchLessonGenerationInput,
    lessons_dir: Path,
) -> BatchLessonGenerationInput:
    generated = set(load_generated_content_list(lessons_dir).lesson_file_names)
    remaining = [l for l in batch.lessons if l.filename not in generated]
    skipped = len(batch.lessons) - len(remaining)
    if skipped:
        logger.info(f"Skipping {skipped} already generated lesson(s)")
    return BatchLessonGenerationInput(lessons=remaining)


def update_generated_content_list(lessons_dir: Path) -> LessonGeneratedContentList:
    lessons_dir = Path(lessons_dir)
    content_list = LessonGeneratedContentList(
        lesson_file_names=[p.stem for p in list_files(lessons_dir, ".md")]
    )
    save_json(
        content_list.model_dump(mode="json", by_alias=True),
        lessons_dir / GENERATED_CONTENT_LIST_FILE,
    )
    return content_list


def load_generated_content_list(lessons_dir: Path) -> LessonGeneratedContentList:
    path = Path(lessons_dir) / GENERATED_CONTENT_LIST_FILE
    if not path.exists():
        return LessonGeneratedContentList()
    try:
        return LessonGeneratedContentList.model_validate(load_json(path))
    except (ValueError, ValidationError) as e:
        logger.warning(f"Ignoring unreadable {path.name}: {e}")
        return LessonGeneratedContentList()


def _prompt_request(
    lesson: LessonGenerationInput,
    config: LessonGenerationConfig,
) -> openai_client.PromptRequest:
    return openai_client.PromptRequest(
        prompt=prompt_factory.lesson_prompt(lesson.title, lesson.description),
        model=config.model,
        temperature=config.temperature,
        max_tokens=config.max_tokens,
    )
