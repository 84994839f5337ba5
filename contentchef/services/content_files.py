"""
Content Files — small filesystem helpers shared by the publishing and
generation pipelines.
"""
from __future__ import annotations

import json
import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

_NON_WORD = re.compile(r"[^a-z0-9\s_]")
_WHITESPACE = re.compile(r"[\s_]+")


def sanitize_string(value: str) -> str:
    """
    Turn a human title into a filename stem.

    "Grand Central Dispatch (GCD): Basics" -> "grand_central_dispatch_gcd_basics"
    """
    cleaned = _NON_WORD.sub("", value.lower())
    return _WHITESPACE.sub("_", cleaned.strip()).strip("_")


def ensure_directory(directory: Path) -> Path:
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def save_json(data: Any, path: Path) -> Path:
    """Write pretty-printed JSON atomically (temp file in the same dir + replace)."""
    path = Path(path)
    ensure_directory(path.parent)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            json.dump(data, fh, indent=2, ensure_ascii=False)
            fh.write("\n")
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    logger.debug(f"Saved {path}")
    return path


def load_json(path: Path) -> Any:
    with Path(path).open(encoding="utf-8") as fh:
        return json.load(fh)


def list_files(directory: Path, suffix: str) -> list[Path]:
    """Non-hidden files in `directory` with the given suffix, sorted by name."""
    directory = Path(directory)
    return sorted(
        p for p in directory.iterdir()
        if p.is_file() and p.suffix == suffix and not p.name.startswith(".")
    )
