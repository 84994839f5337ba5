"""
Lesson Parser — turns a raw lesson markdown file into a Lesson.

A lesson file carries a JSON metadata block, any number of
`=== Section: X ===` ... `=== EndSection: X ===` spans, and a JSON
questions block.
"""
from __future__ import annotations

import json
import logging
import re
from pathlib import Path

from pydantic import ValidationError

from ..models.lesson import Lesson, LessonMetadata, LessonSection, Question
from .content_files import list_files

logger = logging.getLogger(__name__)

METADATA_START = "{| metadata |}"
METADATA_END = "{| endmetadata |}"
QUESTIONS_START = "{| questions |}"
QUESTIONS_END = "{| endquestions |}"

# Marker grammar shared with the section linter. A marker is a whole line;
# the title sits between "Section: " / "EndSection: " and " ===".
_OPEN = r"=== Section: ([^\n]*?) ===[ \t]*"
_CLOSE = r"=== EndSection: {title} ===[ \t]*"

OPEN_MARKER = re.compile(f"^{_OPEN}$")
CLOSE_MARKER = re.compile("^" + _CLOSE.format(title=r"([^\n]*?)") + "$")

# The closing marker must repeat the opening title (\1).
SECTION_PATTERN = re.compile(
    f"^{_OPEN}\n(.*?)^" + _CLOSE.format(title=r"\1") + "$",
    re.DOTALL | re.MULTILINE,
)


class LessonParsingError(Exception):
    pass


def normalize_newlines(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n")


def parse_sections(text: str) -> list[LessonSection]:
    return [
        LessonSection(title=m.group(1), body=m.group(2).strip())
        for m in SECTION_PATTERN.finditer(normalize_newlines(text))
    ]


def parse_metadata(text: str) -> LessonMetadata:
    raw = _extract_block(text, METADATA_START, METADATA_END)
    if raw is None:
        raise LessonParsingError("metadata block not found")
    try:
        return LessonMetadata.model_validate(json.loads(raw))
    except (json.JSONDecodeError, ValidationError) as e:
        raise LessonParsingError(f"invalid metadata: {e}") from e


def parse_questions(text: str) -> list[Question]:
    raw = _extract_block(text, QUESTIONS_START, QUESTIONS_END)
    if raw is None:
        raise LessonParsingError("questions block not found")
    try:
        data = json.loads(raw)
        if not isinstance(data, list):
            raise LessonParsingError("questions block must be a JSON array")
        return [Question.model_validate(q) for q in data]
    except (json.JSONDecodeError, ValidationError) as e:
        raise LessonParsingError(f"invalid questions: {e}") from e


def parse_lesson(text: str) -> Lesson:
    return Lesson(
        metadata=parse_metadata(text),
        sections=parse_sections(text),
        questions=parse_questions(text),
    )


def parse_lesson_file(path: Path) -> Lesson:
    path = Path(path)
    try:
        return parse_lesson(path.read_text(encoding="utf-8"))
    except UnicodeDecodeError as e:
        raise LessonParsingError(f"{path.name}: not valid UTF-8: {e}") from e
    except LessonParsingError as e:
        raise LessonParsingError(f"{path.name}: {e}") from e


def parse_lessons(directory: Path) -> list[Lesson]:
    files = list_files(directory, ".md")
    logger.info(f"Parsing {len(files)} lesson files from {directory}")
    return [parse_lesson_file(f) for f in files]


def _extract_block(text: str, start: str, end: str) -> str | None:
    start_idx = text.find(start)
    if start_idx == -1:
        return None
    body_start = start_idx + len(start)
    end_idx = text.find(end, body_start)
    if end_idx == -1:
        return None
    return text[body_start:end_idx].strip()
