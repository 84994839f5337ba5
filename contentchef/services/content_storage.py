"""
Content Storage — on-disk cache of the last downloaded content bundle.
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Optional

from pydantic import TypeAdapter, ValidationError

from ..models.lesson import ContentMetadata, LearningModule, Lesson
from .content_files import load_json, save_json

logger = logging.getLogger(__name__)

CONTENT_CACHE_DIR = Path(
    os.environ.get("CONTENT_CACHE_DIR", Path.home() / ".cache" / "contentchef")
)

LESSONS_FILE = "lessons.json"
MODULES_FILE = "modules.json"
METADATA_FILE = "content_metadata.json"

_LESSONS = TypeAdapter(list[Lesson])
_MODULES = TypeAdapter(list[LearningModule])
_METADATA = TypeAdapter(ContentMetadata)


class FileContentStorage:
    def __init__(self, base_dir: Path | None = None):
        self.base_dir = Path(base_dir) if base_dir is not None else CONTENT_CACHE_DIR
        self.lessons_path = self.base_dir / LESSONS_FILE
        self.modules_path = self.base_dir / MODULES_FILE
        self.metadata_path = self.base_dir / METADATA_FILE

    # ------------------------------------------------------------------ #
    # Save                                                                 #
    # ------------------------------------------------------------------ #

    def save_lessons(self, lessons: list[Lesson]) -> None:
        self._save(_LESSONS.dump_python(lessons, mode="json", by_alias=True), self.lessons_path)

    def save_modules(self, modules: list[LearningModule]) -> None:
        self._save(_MODULES.dump_python(modules, mode="json", by_alias=True), self.modules_path)

    def save_metadata(self, metadata: ContentMetadata) -> None:
        self._save(metadata.model_dump(mode="json", by_alias=True), self.metadata_path)

    # ------------------------------------------------------------------ #
    # Load                                                                 #
    # ------------------------------------------------------------------ #

    def load_lessons(self) -> Optional[list[Lesson]]:
        return self._load(self.lessons_path, _LESSONS)

    def load_modules(self) -> Optional[list[LearningModule]]:
        return self._load(self.modules_path, _MODULES)

    def load_metadata(self) -> Optional[ContentMetadata]:
        return self._load(self.metadata_path, _METADATA)

    # ------------------------------------------------------------------ #

    def _save(self, data: Any, path: Path) -> None:
        try:
            save_json(data, path)
        except OSError as e:
            logger.error(f"Failed to save {path.name}: {e}")
            raise
        logger.info(f"Saved data to {path.name}")

    def _load(self, path: Path, adapter: TypeAdapter) -> Any:
        if not path.exists():
            logger.info(f"No data file found at {path.name}")
            return None
        try:
            data = adapter.validate_python(load_json(path))
        except (OSError, ValueError, ValidationError) as e:
            logger.warning(f"Failed to load {path.name}: {e}")
            return None
        logger.info(f"Loaded data from {path.name}")
        return data
