"""
Prompt Factory — markdown prompt templates with `{{key}}` placeholders.

Templates live in PROMPTS_DIR as `<kind>.md` (e.g. lesson.md, topic.md) and
are loaded once, on first use.
"""
from __future__ import annotations

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

PROMPTS_DIR = Path(
    os.environ.get("CONTENTCHEF_PROMPTS_DIR", Path(__file__).parent.parent / "prompts")
)

LESSON = "lesson"
TOPIC = "topic"

_templates: dict[str, str] = {}
_loaded_from: Path | None = None


class PromptFactoryError(Exception):
    pass


def generate_prompt(kind: str, **values: str) -> str:
    templates = _load_templates()
    template = templates.get(kind.lower())
    if template is None:
        raise PromptFactoryError(f"Template '{kind}' is missing or could not be found.")
    return inject_parameters(template, values)


def lesson_prompt(title: str, focus: str) -> str:
    return generate_prompt(LESSON, title=title, focus=focus)


def topic_prompt(title: str, focus: str) -> str:
    return generate_prompt(TOPIC, title=title, focus=focus)


def inject_parameters(template: str, values: dict[str, str]) -> str:
    """Case-sensitive replacement of `{{key}}` placeholders."""
    result = template
    for key, value in values.items():
        result = result.replace(f"{{{{{key}}}}}", value)
    return result


def reset_cache() -> None:
    global _loaded_from
    _templates.clear()
    _loaded_from = None


def _load_templates(directory: Path | None = None) -> dict[str, str]:
    global _loaded_from
    directory = Path(directory) if directory is not None else PROMPTS_DIR
    if _loaded_from == directory:
        return _templates

    if not directory.is_dir():
        raise PromptFactoryError(
            f"Failed to load templates: could not read directory {directory}"
        )

    _templates.clear()
    for path in sorted(directory.glob("*.md")):
        try:
            _templates[path.stem.lower()] = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise PromptFactoryError(f"Failed to load template {path.name}: {e}") from e
    _loaded_from = directory
    logger.debug(f"Loaded {len(_templates)} prompt templates from {directory}")
    return _templates
