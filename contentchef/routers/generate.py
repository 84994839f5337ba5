"""POST /api/generate/lesson — title + focus -> validated lesson file."""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import httpx
from fastapi import APIRouter, HTTPException

from ..models.generation import LessonGenerationConfig, LessonGenerationInput
from ..models.requests import GenerateLessonRequest
from ..services import (
    lesson_generation,
    lesson_parser,
    openai_client,
    prompt_factory,
)

router = APIRouter(prefix="/api")
logger = logging.getLogger(__name__)

GENERATION_CONFIG_PATH = os.environ.get("CONTENTCHEF_GENERATION_CONFIG")


def _config() -> LessonGenerationConfig:
    if GENERATION_CONFIG_PATH:
        return lesson_generation.load_config(Path(GENERATION_CONFIG_PATH))
    return LessonGenerationConfig()


@router.post("/generate/lesson")
async def generate_lesson(req: GenerateLessonRequest) -> dict[str, Any]:
    """
    Flow:
      1. Prompt factory fills the lesson template
      2. Chat completion writes the lesson
      3. Linter + parser validate it; valid lessons land in the output dir
    """
    lesson_input = LessonGenerationInput(title=req.title, description=req.description)
    try:
        config = _config()
    except lesson_generation.LessonGenerationError as e:
        logger.error(f"Generation config unavailable: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    try:
        path = await lesson_generation.generate_lesson(lesson_input, config)
    except (openai_client.OpenAIClientError, prompt_factory.PromptFactoryError) as e:
        logger.warning(f"Lesson generation unavailable: {e}")
        raise HTTPException(status_code=503, detail=str(e))
    except httpx.HTTPError as e:
        logger.warning(f"Model request failed: {e}")
        raise HTTPException(status_code=502, detail=f"Model request failed: {e}")
    except lesson_generation.LessonGenerationError as e:
        raise HTTPException(status_code=422, detail=str(e))

    lesson = lesson_parser.parse_lesson_file(path)
    return {
        "path": str(path),
        "filename": lesson_input.filename,
        "lesson": lesson.model_dump(mode="json", by_alias=True),
    }
