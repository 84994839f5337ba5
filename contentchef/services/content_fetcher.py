"""
Content Fetcher — downloads a published content bundle over HTTP.

The bundle is whatever `publisher.publish_content` wrote, served statically
(by default from the GitHub raw URL of the content repository).
"""
from __future__ import annotations

import json
import logging
import os
from typing import TypeVar

import httpx
from pydantic import TypeAdapter, ValidationError

from ..models.lesson import ContentMetadata, LearningModule, Lesson
from .publisher import ALL_LESSONS_FILE, ALL_MODULES_FILE, CONTENT_METADATA_FILE

logger = logging.getLogger(__name__)

CONTENT_BASE_URL = os.environ.get(
    "CONTENT_BASE_URL",
    "https://raw.githubusercontent.com/joxoleon/kh-content/main/Content/Output/iOS/",
)

T = TypeVar("T")


class ContentFetchError(Exception):
    pass


class GitHubContentFetcher:
    def __init__(self, base_url: str | None = None, timeout: float = 30.0):
        base = base_url or CONTENT_BASE_URL
        self.base_url = base if base.endswith("/") else base + "/"
        self.timeout = timeout

    async def fetch_content_metadata(self) -> ContentMetadata:
        return await self._fetch(CONTENT_METADATA_FILE, TypeAdapter(ContentMetadata))

    async def fetch_lessons(self) -> list[Lesson]:
        return await self._fetch(ALL_LESSONS_FILE, TypeAdapter(list[Lesson]))

    async def fetch_modules(self) -> list[LearningModule]:
        return await self._fetch(ALL_MODULES_FILE, TypeAdapter(list[LearningModule]))

    async def _fetch(self, filename: str, adapter: TypeAdapter[T]) -> T:
        url = f"{self.base_url}{filename}"
        logger.info(f"Fetching JSON from {url}")
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            resp = await client.get(url)
            resp.raise_for_status()
        try:
            return adapter.validate_python(resp.json())
        except (json.JSONDecodeError, ValidationError) as e:
            logger.warning(f"Failed to decode {url}: {e}; raw response: {resp.text[:500]}")
            raise ContentFetchError(f"could not decode {filename}: {e}") from e
