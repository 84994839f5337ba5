"""GET /api/lessons, /api/modules, /api/metadata; POST /api/sync — the published catalog."""
from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, HTTPException

from ..services import content_repository

router = APIRouter(prefix="/api")
logger = logging.getLogger(__name__)


@router.get("/lessons")
async def list_lessons() -> dict[str, Any]:
    repo = content_repository.get_repository()
    ids = sorted(repo.lesson_ids())
    return {
        "lessons": [
            {"id": lesson.id, **lesson.metadata.model_dump(mode="json")}
            for lesson in repo.get_lessons(ids)
        ],
    }


@router.get("/lessons/{lesson_id:path}")
async def get_lesson(lesson_id: str) -> dict[str, Any]:
    lesson = content_repository.get_repository().get_lesson(lesson_id)
    if lesson is None:
        raise HTTPException(status_code=404, detail=f"Lesson '{lesson_id}' not found")
    return {"id": lesson.id, **lesson.model_dump(mode="json", by_alias=True)}


@router.get("/modules")
async def list_modules() -> dict[str, Any]:
    repo = content_repository.get_repository()
    ids = sorted(repo.module_ids())
    return {
        "modules": [
            {"id": m.id, **m.model_dump(mode="json", by_alias=True)}
            for m in repo.get_modules(ids)
        ],
    }


@router.get("/modules/{module_id:path}")
async def get_module(module_id: str) -> dict[str, Any]:
    module = content_repository.get_repository().get_module(module_id)
    if module is None:
        raise HTTPException(status_code=404, detail=f"Module '{module_id}' not found")
    return {"id": module.id, **module.model_dump(mode="json", by_alias=True)}


@router.get("/metadata")
async def get_metadata() -> dict[str, Any]:
    metadata = content_repository.get_repository().metadata()
    if metadata is None:
        raise HTTPException(status_code=404, detail="No content has been synced yet")
    return metadata.model_dump(mode="json", by_alias=True)


@router.post("/sync")
async def sync_content() -> dict[str, Any]:
    repo = content_repository.get_repository()
    try:
        updated = await repo.update_if_needed()
    except content_repository.ContentRepositoryError as e:
        logger.warning(f"Content sync failed: {e}")
        raise HTTPException(status_code=502, detail=str(e))
    return {
        "updated": updated,
        "lessons": len(repo.lesson_ids()),
        "modules": len(repo.module_ids()),
    }
