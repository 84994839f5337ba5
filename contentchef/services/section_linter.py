"""
Section Linter — structural checks for Section / EndSection markers.

Rules:
  * every opening marker is closed exactly once, by a marker with the same title
  * sections do not nest
  * titles are non-empty and carry no surrounding whitespace
  * anything that looks like a marker uses the exact marker grammar the
    lesson parser reads

A document with no issues parses to one section per opening marker.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .content_files import list_files
from .lesson_parser import CLOSE_MARKER, OPEN_MARKER, normalize_newlines

logger = logging.getLogger(__name__)

# Lines meant as markers, well-formed or not.
MARKER_LIKE = re.compile(r"^\s*=+\s*(?:End)?Section\b", re.IGNORECASE)

EMPTY_TITLE = "empty-title"
UNCLOSED_SECTION = "unclosed-section"
ORPHAN_END = "orphan-end"
MISMATCHED_END = "mismatched-end"
NESTED_SECTION = "nested-section"
DUPLICATE_END = "duplicate-end"
MALFORMED_MARKER = "malformed-marker"
INVALID_ENCODING = "invalid-encoding"


@dataclass(frozen=True)
class LintIssue:
    line: int
    code: str
    message: str
    path: Optional[str] = None

    def format(self) -> str:
        location = f"{self.path}:{self.line}" if self.path else f"line {self.line}"
        return f"{location}: [{self.code}] {self.message}"


def lint_sections(text: str, path: str | None = None) -> list[LintIssue]:
    issues: list[LintIssue] = []
    open_title: str | None = None
    open_line = 0
    closed: set[str] = set()

    def report(line: int, code: str, message: str) -> None:
        issues.append(LintIssue(line=line, code=code, message=message, path=path))

    def check_title(line: int, title: str, kind: str) -> None:
        if not title.strip():
            report(line, EMPTY_TITLE, f"section {kind} marker has an empty title")
        elif title != title.strip():
            report(
                line, MALFORMED_MARKER,
                f"section {kind} marker title '{title}' has surrounding whitespace",
            )

    for lineno, line in enumerate(normalize_newlines(text).split("\n"), start=1):
        if m := OPEN_MARKER.match(line):
            title = m.group(1)
            check_title(lineno, title, "opening")
            if open_title is not None:
                report(
                    lineno, NESTED_SECTION,
                    f"section '{title}' opens before '{open_title}' "
                    f"(line {open_line}) is closed",
                )
                report(open_line, UNCLOSED_SECTION, f"section '{open_title}' is never closed")
            open_title, open_line = title, lineno
            # A re-opened title may be closed again.
            closed.discard(title)
            continue

        if m := CLOSE_MARKER.match(line):
            title = m.group(1)
            check_title(lineno, title, "closing")
            if open_title is None:
                if title in closed:
                    report(lineno, DUPLICATE_END, f"section '{title}' is already closed")
                else:
                    report(lineno, ORPHAN_END, f"closing marker for '{title}' has no open section")
                continue
            if title != open_title:
                report(
                    lineno, MISMATCHED_END,
                    f"closing marker '{title}' does not match open section "
                    f"'{open_title}' (line {open_line})",
                )
                continue
            closed.add(title)
            open_title = None
            continue

        if MARKER_LIKE.match(line):
            report(
                lineno, MALFORMED_MARKER,
                f"'{line.strip()}' is not a well-formed section marker "
                f"(expected '=== Section: Title ===' or '=== EndSection: Title ===')",
            )

    if open_title is not None:
        report(open_line, UNCLOSED_SECTION, f"section '{open_title}' is never closed")

    return sorted(issues, key=lambda i: i.line)


def lint_file(path: Path) -> list[LintIssue]:
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        return [
            LintIssue(line=1, code=INVALID_ENCODING, message=f"not valid UTF-8: {e}", path=str(path))
        ]
    return lint_sections(text, path=str(path))


def lint_directory(directory: Path) -> list[LintIssue]:
    issues: list[LintIssue] = []
    for f in list_files(directory, ".md"):
        file_issues = lint_file(f)
        if file_issues:
            logger.warning(f"{f.name}: {len(file_issues)} section issue(s)")
        issues.extend(file_issues)
    return issues
