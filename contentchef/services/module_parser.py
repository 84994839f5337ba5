"""
Module Parser — YAML learning-module trees.

A module file looks like:

    title: Concurrency
    description: Threads, GCD and async/await.
    subModules:
      - title: GCD
        description: ...
        lessons: [gcd_basics, dispatch_groups]
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from ..models.generation import TopicBreakdownOutput
from ..models.lesson import LearningModule
from .content_files import ensure_directory, list_files

logger = logging.getLogger(__name__)


class ModuleParsingError(Exception):
    pass


def parse_learning_module(path: Path) -> LearningModule:
    path = Path(path)
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except UnicodeDecodeError as e:
        raise ModuleParsingError(f"{path.name}: not valid UTF-8: {e}") from e
    except yaml.YAMLError as e:
        raise ModuleParsingError(f"{path.name}: invalid YAML: {e}") from e

    if not isinstance(data, dict):
        raise ModuleParsingError(f"{path.name}: expected a mapping at the top level")

    try:
        return LearningModule.model_validate(data)
    except ValidationError as e:
        raise ModuleParsingError(f"{path.name}: not a learning module: {e}") from e


def parse_modules(directory: Path) -> list[LearningModule]:
    files = list_files(directory, ".yaml")
    logger.info(f"Found {len(files)} module files in {directory}")
    return [parse_learning_module(f) for f in files]


def build_top_level_module(
    title: str,
    description: str,
    breakdowns: list[TopicBreakdownOutput],
) -> dict[str, Any]:
    """One sub-module per topic breakdown, listing its lesson filenames."""
    return {
        "title": title,
        "description": description,
        "subModules": [
            {
                "title": b.title,
                "description": b.description,
                "lessons": [
                    lesson.filename for lesson in b.batch_lesson_generation_input.lessons
                ],
            }
            for b in breakdowns
        ],
    }


def save_top_level_module(module: dict[str, Any], path: Path) -> LearningModule:
    """Write the module as YAML and read it back to make sure it parses."""
    path = Path(path)
    ensure_directory(path.parent)
    path.write_text(
        yaml.safe_dump(module, sort_keys=False, allow_unicode=True),
        encoding="utf-8",
    )
    logger.info(f"Top level module saved to {path}")
    return parse_learning_module(path)
