"""
Topic Breakdown — asks the model to split a course topic into lessons.

The result for each topic is saved as `<topic filename>.json` and later feeds
both batch lesson generation and the top level module.
"""
from __future__ import annotations

import asyncio
import json
import logging
import re
from pathlib import Path

from pydantic import ValidationError

from ..models.generation import (
    BatchLessonGenerationInput,
    BatchTopicBreakdownInput,
    TopicBreakdownInput,
    TopicBreakdownOutput,
)
from . import openai_client, prompt_factory
from .content_files import ensure_directory, list_files, load_json, save_json

logger = logging.getLogger(__name__)

TOPIC_MODEL = "gpt-4o-mini"
TOPIC_TEMPERATURE = 0.7
TOPIC_MAX_TOKENS = 2000

_CODE_FENCE = re.compile(r"^\s*```(?:json)?\s*\n?|\n?\s*```\s*$")


class TopicBreakdownError(Exception):
    pass


def load_batch_topic_input(path: Path) -> BatchTopicBreakdownInput:
    try:
        return BatchTopicBreakdownInput.model_validate(load_json(path))
    except (OSError, ValueError, ValidationError) as e:
        raise TopicBreakdownError(f"Could not load topic input {path}: {e}") from e


async def generate_topic_breakdown(topic: TopicBreakdownInput) -> TopicBreakdownOutput:
    logger.info(f"Breaking down topic '{topic.title}'")
    response = await openai_client.send_prompt(
        openai_client.PromptRequest(
            prompt=prompt_factory.topic_prompt(topic.title, topic.description),
            model=TOPIC_MODEL,
            temperature=TOPIC_TEMPERATURE,
            max_tokens=TOPIC_MAX_TOKENS,
        )
    )
    return parse_topic_breakdown_response(response, topic)


def parse_topic_breakdown_response(
    response: str,
    topic: TopicBreakdownInput,
) -> TopicBreakdownOutput:
    cleaned = _CODE_FENCE.sub("", response.strip())
    try:
        batch = BatchLessonGenerationInput.model_validate(json.loads(cleaned))
    except (json.JSONDecodeError, ValidationError) as e:
        raise TopicBreakdownError(f"Failed to decode topic breakdown for '{topic.title}': {e}") from e
    if not batch.lessons:
        raise TopicBreakdownError(f"Topic breakdown for '{topic.title}' has no lessons")
    return TopicBreakdownOutput(
        title=topic.title,
        description=topic.description,
        batch_lesson_generation_input=batch,
    )


async def generate_topic_breakdowns(input_path: Path, output_dir: Path) -> list[Path]:
    """
    Break down every topic in the input file concurrently. A topic that fails
    is logged and left out; the others are still saved.
    """
    batch = load_batch_topic_input(input_path)
    ensure_directory(output_dir)

    async def run(topic: TopicBreakdownInput) -> Path | None:
        try:
            output = await generate_topic_breakdown(topic)
        except Exception as e:
            logger.warning(f"Failed to generate topic breakdown for '{topic.title}': {e}")
            return None
        path = Path(output_dir) / f"{topic.filename}.json"
        save_json(output.model_dump(mode="json", by_alias=True), path)
        logger.info(f"Topic breakdown for '{topic.title}' saved to {path}")
        return path

    results = await asyncio.gather(*(run(t) for t in batch.topics))
    return [p for p in results if p is not None]


def load_topic_breakdowns(
    directory: Path,
    order: BatchTopicBreakdownInput | None = None,
) -> list[TopicBreakdownOutput]:
    """
    Load saved breakdowns; when `order` is given, return them in its topic
    order and drop breakdowns it does not list.
    """
    breakdowns: list[TopicBreakdownOutput] = []
    for path in list_files(directory, ".json"):
        try:
            breakdowns.append(TopicBreakdownOutput.model_validate(load_json(path)))
        except (ValueError, ValidationError) as e:
            logger.warning(f"Failed to load topic breakdown {path.name}: {e}")

    if order is None:
        return breakdowns
    by_title = {b.title: b for b in breakdowns}
    return [by_title[t.title] for t in order.topics if t.title in by_title]
