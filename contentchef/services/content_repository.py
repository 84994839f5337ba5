"""
Content Repository — in-memory lesson/module catalog backed by the on-disk
cache, refreshed from the remote bundle when it is newer.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Optional, Protocol

from ..models.lesson import ContentMetadata, LearningModule, Lesson
from .content_fetcher import GitHubContentFetcher
from .content_storage import FileContentStorage

logger = logging.getLogger(__name__)

# Remote timestamps within this many seconds of the local one are the same publish.
TIMESTAMP_TOLERANCE = 0.1


class ContentRepositoryError(Exception):
    pass


class ContentFetcher(Protocol):
    async def fetch_content_metadata(self) -> ContentMetadata: ...
    async def fetch_lessons(self) -> list[Lesson]: ...
    async def fetch_modules(self) -> list[LearningModule]: ...


class ContentRepository:
    def __init__(self, fetcher: ContentFetcher, storage: FileContentStorage):
        self.fetcher = fetcher
        self.storage = storage
        self._lessons: dict[str, Lesson] = {}
        self._modules: dict[str, LearningModule] = {}
        self._load_cached()

    # ------------------------------------------------------------------ #
    # Lookups                                                              #
    # ------------------------------------------------------------------ #

    def lesson_ids(self) -> list[str]:
        return list(self._lessons)

    def get_lesson(self, lesson_id: str) -> Optional[Lesson]:
        return self._lessons.get(lesson_id)

    def get_lessons(self, ids: list[str]) -> list[Lesson]:
        return [self._lessons[i] for i in ids if i in self._lessons]

    def module_ids(self) -> list[str]:
        return list(self._modules)

    def get_module(self, module_id: str) -> Optional[LearningModule]:
        return self._modules.get(module_id)

    def get_modules(self, ids: list[str]) -> list[LearningModule]:
        return [self._modules[i] for i in ids if i in self._modules]

    def metadata(self) -> Optional[ContentMetadata]:
        return self.storage.load_metadata()

    # ------------------------------------------------------------------ #
    # Refresh                                                              #
    # ------------------------------------------------------------------ #

    async def update_if_needed(self) -> bool:
        """Returns True when new content was downloaded."""
        local = self.storage.load_metadata()
        if local is None:
            return await self._fetch_and_update()

        try:
            remote = await self.fetcher.fetch_content_metadata()
        except Exception as e:
            logger.warning(f"Metadata fetch failed: {e}")
            raise ContentRepositoryError("metadata fetch failed") from e

        if remote.last_updated_timestamp > local.last_updated_timestamp + TIMESTAMP_TOLERANCE:
            return await self._fetch_and_update()
        logger.info("Content is up to date")
        return False

    async def _fetch_and_update(self) -> bool:
        try:
            metadata, lessons, modules = await asyncio.gather(
                self.fetcher.fetch_content_metadata(),
                self.fetcher.fetch_lessons(),
                self.fetcher.fetch_modules(),
            )
        except Exception as e:
            logger.warning(f"Content fetch failed: {e}")
            raise ContentRepositoryError("content fetch failed") from e

        self.storage.save_lessons(lessons)
        self.storage.save_modules(modules)
        # Metadata last so an interrupted save is retried on the next update.
        self.storage.save_metadata(metadata)

        self._index(lessons, modules)
        logger.info(f"Content updated: {len(lessons)} lessons, {len(modules)} modules")
        return True

    def _load_cached(self) -> None:
        self._index(self.storage.load_lessons() or [], self.storage.load_modules() or [])

    def _index(self, lessons: list[Lesson], modules: list[LearningModule]) -> None:
        for lesson in lessons:
            self._lessons[lesson.id] = lesson
        for module in modules:
            self._modules[module.id] = module


_repository: ContentRepository | None = None


def get_repository() -> ContentRepository:
    """Process-wide repository using the default fetcher and cache directory."""
    global _repository
    if _repository is None:
        _repository = ContentRepository(GitHubContentFetcher(), FileContentStorage())
    return _repository


def set_repository(repository: ContentRepository | None) -> None:
    global _repository
    _repository = repository
