"""GET /api/export/lessons/{id}.md|.html — download a lesson."""
from __future__ import annotations

from fastapi import APIRouter, HTTPException
from fastapi.responses import Response

from ..models.lesson import Lesson
from ..services import content_repository, lesson_renderer

router = APIRouter(prefix="/api")


def _lesson_or_404(lesson_id: str) -> Lesson:
    lesson = content_repository.get_repository().get_lesson(lesson_id)
    if lesson is None:
        raise HTTPException(status_code=404, detail=f"Lesson '{lesson_id}' not found")
    return lesson


@router.get("/export/lessons/{lesson_id:path}.md")
async def export_markdown(lesson_id: str) -> Response:
    lesson = _lesson_or_404(lesson_id)
    filename = lesson.id.replace("/", "_")
    return Response(
        content=lesson_renderer.render_lesson_text(lesson),
        media_type="text/markdown",
        headers={"Content-Disposition": f'attachment; filename="{filename}.md"'},
    )


@router.get("/export/lessons/{lesson_id:path}.html")
async def export_html(lesson_id: str) -> Response:
    lesson = _lesson_or_404(lesson_id)
    return Response(
        content=lesson_renderer.render_lesson_html(lesson),
        media_type="text/html",
    )
