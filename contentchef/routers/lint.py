"""POST /api/lint — check Section/EndSection markers of a raw lesson."""
from __future__ import annotations

from dataclasses import asdict
from typing import Any

from fastapi import APIRouter

from ..models.requests import LintRequest
from ..services import lesson_parser, section_linter

router = APIRouter(prefix="/api")


@router.post("/lint")
async def lint_lesson(req: LintRequest) -> dict[str, Any]:
    issues = section_linter.lint_sections(req.text)
    return {
        "valid": not issues,
        "issues": [asdict(i) for i in issues],
        "sections": [s.title for s in lesson_parser.parse_sections(req.text)],
    }
