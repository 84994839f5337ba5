"""Route tests for the FastAPI app — catalog, lint, export and generation endpoints."""
import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from unittest.mock import patch, AsyncMock

import httpx
import pytest
from fastapi.testclient import TestClient

from contentchef.main import app
from contentchef.models.lesson import (
    ContentMetadata,
    LearningModule,
    Lesson,
    LessonMetadata,
    LessonSection,
)
from contentchef.routers import generate
from contentchef.services import content_repository
from contentchef.services.content_repository import ContentRepository
from contentchef.services.content_storage import FileContentStorage
from contentchef.services.lesson_generation import LessonGenerationError


# ─────────────────────────────────────────────────────────────────────────────
# Fixtures
# ─────────────────────────────────────────────────────────────────────────────

class StubFetcher:
    def __init__(self, fail: bool = False):
        self.fail = fail

    async def fetch_content_metadata(self) -> ContentMetadata:
        if self.fail:
            raise ConnectionError("offline")
        return ContentMetadata(last_updated_timestamp=500.0)

    async def fetch_lessons(self) -> list[Lesson]:
        return []

    async def fetch_modules(self) -> list[LearningModule]:
        return []


def _lesson() -> Lesson:
    return Lesson(
        metadata=LessonMetadata(title="Swift Actors", description="Isolation.", tags=["swift"]),
        sections=[LessonSection(title="Actors Introduction", body="Actors protect *state*.")],
        questions=[],
    )


@pytest.fixture
def client(tmp_path, monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    storage = FileContentStorage(tmp_path)
    storage.save_lessons([_lesson()])
    storage.save_modules([LearningModule(title="Concurrency", description="All", lessons=["swift_actors"])])
    storage.save_metadata(ContentMetadata(last_updated_timestamp=1000.0))
    content_repository.set_repository(ContentRepository(StubFetcher(), storage))
    yield TestClient(app)
    content_repository.set_repository(None)


# ─────────────────────────────────────────────────────────────────────────────
# Tests: catalog
# ─────────────────────────────────────────────────────────────────────────────

class TestCatalog:
    def test_health(self, client):
        data = client.get("/health").json()
        assert data["status"] == "ok"
        assert data["openai"] is False
        assert data["lessons"] == 1
        assert data["last_updated"] == 1000.0

    def test_list_lessons(self, client):
        data = client.get("/api/lessons").json()
        assert data["lessons"] == [
            {"id": "swift_actors", "title": "Swift Actors", "description": "Isolation.", "tags": ["swift"]}
        ]

    def test_get_lesson(self, client):
        data = client.get("/api/lessons/swift_actors").json()
        assert data["sections"][0]["content"] == "Actors protect *state*."

    def test_unknown_lesson(self, client):
        assert client.get("/api/lessons/nope").status_code == 404

    def test_modules(self, client):
        modules = client.get("/api/modules").json()["modules"]
        assert modules[0]["id"] == "concurrency"
        assert client.get("/api/modules/concurrency").json()["lessons"] == ["swift_actors"]
        assert client.get("/api/modules/nope").status_code == 404

    def test_metadata(self, client):
        assert client.get("/api/metadata").json() == {"lastUpdatedTimestamp": 1000.0}

    def test_id_with_slash_is_reachable(self, client, tmp_path):
        lesson = Lesson(
            metadata=LessonMetadata(title="Async/Await Basics", description="d", tags=[]),
            sections=[LessonSection(title="Intro", body="Suspension points.")],
            questions=[],
        )
        storage = FileContentStorage(tmp_path / "slash")
        storage.save_lessons([lesson])
        storage.save_modules([LearningModule(title="Async/Await", description="d")])
        content_repository.set_repository(ContentRepository(StubFetcher(), storage))

        assert client.get("/api/lessons/async/await_basics").json()["id"] == "async/await_basics"
        assert client.get("/api/modules/async/await").json()["id"] == "async/await"
        resp = client.get("/api/export/lessons/async/await_basics.md")
        assert resp.status_code == 200
        assert 'filename="async_await_basics.md"' in resp.headers["content-disposition"]
        assert client.get("/api/export/lessons/async/await_basics.html").status_code == 200

    def test_sync_up_to_date(self, client):
        data = client.post("/api/sync").json()
        assert data == {"updated": False, "lessons": 1, "modules": 1}

    def test_sync_failure_is_502(self, client, tmp_path):
        storage = FileContentStorage(tmp_path)
        content_repository.set_repository(ContentRepository(StubFetcher(fail=True), storage))
        resp = client.post("/api/sync")
        assert resp.status_code == 502
        assert "metadata fetch failed" in resp.json()["detail"]


# ─────────────────────────────────────────────────────────────────────────────
# Tests: lint + export
# ─────────────────────────────────────────────────────────────────────────────

class TestLint:
    def test_valid_text(self, client):
        text = "=== Section: A ===\nx\n=== EndSection: A ===\n"
        data = client.post("/api/lint", json={"text": text}).json()
        assert data == {"valid": True, "issues": [], "sections": ["A"]}

    def test_invalid_text(self, client):
        data = client.post("/api/lint", json={"text": "=== Section: A ===\n"}).json()
        assert data["valid"] is False
        assert data["issues"][0]["code"] == "unclosed-section"
        assert data["issues"][0]["line"] == 1


class TestExport:
    def test_markdown(self, client):
        resp = client.get("/api/export/lessons/swift_actors.md")
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/markdown")
        assert "=== Section: Actors Introduction ===" in resp.text

    def test_html(self, client):
        resp = client.get("/api/export/lessons/swift_actors.html")
        assert resp.status_code == 200
        assert "<em>state</em>" in resp.text

    def test_unknown(self, client):
        assert client.get("/api/export/lessons/nope.md").status_code == 404


# ─────────────────────────────────────────────────────────────────────────────
# Tests: generation
# ─────────────────────────────────────────────────────────────────────────────

class TestGenerate:
    def test_missing_api_key_is_503(self, client):
        resp = client.post("/api/generate/lesson", json={"title": "Actors", "description": "d"})
        assert resp.status_code == 503

    def test_invalid_lesson_is_422(self, client):
        with patch(
            "contentchef.routers.generate.lesson_generation.generate_lesson",
            new_callable=AsyncMock,
        ) as mock_gen:
            mock_gen.side_effect = LessonGenerationError("lesson has no sections")
            resp = client.post("/api/generate/lesson", json={"title": "Actors", "description": "d"})
        assert resp.status_code == 422
        assert "no sections" in resp.json()["detail"]

    def test_model_error_is_502(self, client):
        with patch(
            "contentchef.routers.generate.lesson_generation.generate_lesson",
            new_callable=AsyncMock,
        ) as mock_gen:
            mock_gen.side_effect = httpx.ConnectError("refused")
            resp = client.post("/api/generate/lesson", json={"title": "Actors", "description": "d"})
        assert resp.status_code == 502

    def test_success(self, client, tmp_path):
        lesson_file = tmp_path / "swift_actors.md"
        lesson_file.write_text(
            '{| metadata |}\n{"title": "Swift Actors", "description": "d", "tags": []}\n{| endmetadata |}\n'
            "=== Section: Intro ===\nhi\n=== EndSection: Intro ===\n"
            "{| questions |}\n[]\n{| endquestions |}\n",
            encoding="utf-8",
        )
        with patch(
            "contentchef.routers.generate.lesson_generation.generate_lesson",
            new_callable=AsyncMock,
        ) as mock_gen:
            mock_gen.return_value = lesson_file
            resp = client.post("/api/generate/lesson", json={"title": "Swift Actors", "description": "d"})

        assert resp.status_code == 200
        data = resp.json()
        assert data["filename"] == "swift_actors"
        assert data["lesson"]["sections"][0]["title"] == "Intro"

    def test_unreadable_config_is_500(self, client, tmp_path, monkeypatch):
        config = tmp_path / "generation_config.json"
        config.write_text("{not json", encoding="utf-8")
        monkeypatch.setattr(generate, "GENERATION_CONFIG_PATH", str(config))

        resp = client.post("/api/generate/lesson", json={"title": "Actors", "description": "d"})
        assert resp.status_code == 500
        assert "generation config" in resp.json()["detail"]

    def test_empty_title_rejected(self, client):
        resp = client.post("/api/generate/lesson", json={"title": "", "description": "d"})
        assert resp.status_code == 422


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
