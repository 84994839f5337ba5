"""
Lesson Renderer — writes a Lesson back out as a raw lesson file or as a
standalone HTML page.
"""
from __future__ import annotations

import html
import json
import re

from ..models.lesson import Lesson
from .lesson_parser import (
    METADATA_END,
    METADATA_START,
    QUESTIONS_END,
    QUESTIONS_START,
)

_STRONG = re.compile(r"\*\*(.+?)\*\*")
_EM = re.compile(r"(?<!\*)\*(?!\s)(.+?)(?<!\s)\*(?!\*)")
_CODE = re.compile(r"`([^`]+)`")


def render_lesson_text(lesson: Lesson) -> str:
    """Canonical raw form; `lesson_parser.parse_lesson` reads it back unchanged."""
    metadata = json.dumps(lesson.metadata.model_dump(mode="json"), indent=2, ensure_ascii=False)
    questions = json.dumps(
        [q.model_dump(mode="json", by_alias=True) for q in lesson.questions],
        indent=2,
        ensure_ascii=False,
    )
    parts = [f"{METADATA_START}\n{metadata}\n{METADATA_END}"]
    for section in lesson.sections:
        parts.append(
            f"=== Section: {section.title} ===\n"
            f"{section.body}\n"
            f"=== EndSection: {section.title} ==="
        )
    parts.append(f"{QUESTIONS_START}\n{questions}\n{QUESTIONS_END}")
    return "\n\n".join(parts) + "\n"


def render_lesson_html(lesson: Lesson) -> str:
    sections_html = "\n".join(
        f'<section>\n<h2>{html.escape(s.title)}</h2>\n{render_body_html(s.body)}\n</section>'
        for s in lesson.sections
    )
    tags = ", ".join(html.escape(t) for t in lesson.metadata.tags)
    title = html.escape(lesson.metadata.title)

    return f"""<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>{title}</title>
<style>
  body {{ font-family: Georgia, serif; max-width: 760px; margin: 40px auto; color: #333; line-height: 1.5; }}
  h1 {{ font-size: 28px; border-bottom: 2px solid #333; }}
  h2 {{ font-size: 20px; margin-top: 30px; }}
  blockquote {{ border-left: 4px solid #c9c2b8; margin: 16px 0; padding: 4px 16px; color: #555; }}
  code, pre {{ font-family: Menlo, monospace; font-size: 13px; background: #f4f1ec; }}
  pre {{ padding: 10px; overflow-x: auto; }}
  .tags {{ color: #777; font-size: 13px; }}
</style>
</head>
<body>
<h1>{title}</h1>
<p>{html.escape(lesson.metadata.description)}</p>
<p class="tags">{tags}</p>
{sections_html}
</body>
</html>"""


def render_body_html(body: str) -> str:
    """
    Blank-line separated blocks become paragraphs; blocks whose lines all
    start with `>` become blockquotes; ``` fences become <pre>.
    """
    blocks: list[str] = []
    for block in _split_blocks(body):
        lines = block.split("\n")
        if lines[0].startswith("```"):
            end = len(lines) - 1 if len(lines) > 1 and lines[-1].startswith("```") else len(lines)
            code = "\n".join(lines[1:end])
            blocks.append(f"<pre><code>{html.escape(code)}</code></pre>")
        elif all(line.lstrip().startswith(">") for line in lines):
            quoted = " ".join(line.lstrip()[1:].strip() for line in lines)
            blocks.append(f"<blockquote><p>{_inline(quoted)}</p></blockquote>")
        else:
            blocks.append(f"<p>{_inline(' '.join(l.strip() for l in lines))}</p>")
    return "\n".join(blocks)


def _split_blocks(body: str) -> list[str]:
    blocks: list[str] = []
    current: list[str] = []
    in_fence = False
    for line in body.strip().split("\n"):
        if line.startswith("```"):
            in_fence = not in_fence
        if not line.strip() and not in_fence:
            if current:
                blocks.append("\n".join(current))
                current = []
            continue
        current.append(line)
    if current:
        blocks.append("\n".join(current))
    return blocks


def _inline(text: str) -> str:
    escaped = html.escape(text, quote=False)
    escaped = _CODE.sub(r"<code>\1</code>", escaped)
    escaped = _STRONG.sub(r"<strong>\1</strong>", escaped)
    return _EM.sub(r"<em>\1</em>", escaped)
