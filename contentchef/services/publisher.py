"""
Publisher — parses the raw content tree and writes the JSON bundle the
apps download.

Input layout:               Output layout:
  <input>/Lessons/*.md        <output>/all_lessons.json
  <input>/Modules/*.yaml      <output>/all_lesson_metadata.json
                              <output>/all_modules.json
                              <output>/content_metadata.json
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path

from ..models.lesson import ContentMetadata, LearningModule, Lesson
from . import lesson_parser, module_parser
from .content_files import ensure_directory, save_json

logger = logging.getLogger(__name__)

ALL_LESSONS_FILE = "all_lessons.json"
ALL_LESSON_METADATA_FILE = "all_lesson_metadata.json"
ALL_MODULES_FILE = "all_modules.json"
CONTENT_METADATA_FILE = "content_metadata.json"


@dataclass
class PublishResult:
    output_dir: Path
    metadata: ContentMetadata
    lessons: list[Lesson] = field(default_factory=list)
    modules: list[LearningModule] = field(default_factory=list)

    @property
    def files(self) -> list[Path]:
        return [
            self.output_dir / name
            for name in (
                ALL_LESSONS_FILE,
                ALL_LESSON_METADATA_FILE,
                ALL_MODULES_FILE,
                CONTENT_METADATA_FILE,
            )
        ]


def publish_content(
    input_dir: Path,
    output_dir: Path,
    timestamp: float | None = None,
) -> PublishResult:
    input_dir, output_dir = Path(input_dir), Path(output_dir)
    ensure_directory(output_dir / "Lessons")
    ensure_directory(output_dir / "Modules")

    lessons = lesson_parser.parse_lessons(input_dir / "Lessons")
    save_json([_dump(lesson) for lesson in lessons], output_dir / ALL_LESSONS_FILE)
    save_json(
        [_dump(lesson.metadata) for lesson in lessons],
        output_dir / ALL_LESSON_METADATA_FILE,
    )
    logger.info(f"Published {len(lessons)} lessons")

    modules = module_parser.parse_modules(input_dir / "Modules")
    save_json([_dump(module) for module in modules], output_dir / ALL_MODULES_FILE)
    logger.info(f"Published {len(modules)} modules")

    metadata = ContentMetadata(
        last_updated_timestamp=time.time() if timestamp is None else timestamp
    )
    save_json(_dump(metadata), output_dir / CONTENT_METADATA_FILE)

    logger.info(f"Content published to {output_dir}")
    return PublishResult(
        output_dir=output_dir, metadata=metadata, lessons=lessons, modules=modules
    )


def _dump(model) -> dict:
    return model.model_dump(mode="json", by_alias=True)
