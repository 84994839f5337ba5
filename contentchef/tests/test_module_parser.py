"""Unit tests for module_parser.py — YAML learning modules."""
import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

import pytest
import yaml

from contentchef.models.generation import (
    BatchLessonGenerationInput,
    LessonGenerationInput,
    TopicBreakdownOutput,
)
from contentchef.services.module_parser import (
    ModuleParsingError,
    build_top_level_module,
    parse_learning_module,
    parse_modules,
    save_top_level_module,
)


MODULE_YAML = """
title: Concurrency In Swift
description: Threads, GCD and structured concurrency.
subModules:
  - title: GCD
    description: Grand Central Dispatch.
    lessons:
      - gcd_basics
      - dispatch_groups
  - title: Async Await
    description: Structured concurrency.
"""


def _breakdown(title: str, lessons: list[str]) -> TopicBreakdownOutput:
    return TopicBreakdownOutput(
        title=title,
        description=f"{title} description",
        batch_lesson_generation_input=BatchLessonGenerationInput(
            lessons=[LessonGenerationInput(title=t, description="d") for t in lessons]
        ),
    )


class TestParseLearningModule:
    def test_parses_nested_modules(self, tmp_path):
        path = tmp_path / "concurrency.yaml"
        path.write_text(MODULE_YAML, encoding="utf-8")

        module = parse_learning_module(path)
        assert module.id == "concurrency_in_swift"
        assert module.lessons == []
        assert [m.title for m in module.sub_modules] == ["GCD", "Async Await"]
        assert module.sub_modules[0].lessons == ["gcd_basics", "dispatch_groups"]
        assert module.sub_modules[1].lessons == []
        assert module.sub_modules[1].sub_modules == []

    def test_invalid_yaml_raises(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("title: [unclosed\n", encoding="utf-8")
        with pytest.raises(ModuleParsingError, match="invalid YAML"):
            parse_learning_module(path)

    def test_invalid_utf8_raises(self, tmp_path):
        path = tmp_path / "latin1.yaml"
        path.write_bytes(b"title: Caf\xe9\ndescription: d\n")
        with pytest.raises(ModuleParsingError, match="latin1.yaml: not valid UTF-8"):
            parse_learning_module(path)

    def test_non_mapping_raises(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ModuleParsingError, match="mapping"):
            parse_learning_module(path)

    def test_missing_description_raises(self, tmp_path):
        path = tmp_path / "partial.yaml"
        path.write_text("title: Only Title\n", encoding="utf-8")
        with pytest.raises(ModuleParsingError, match="not a learning module"):
            parse_learning_module(path)


class TestParseModules:
    def test_reads_yaml_files_only(self, tmp_path):
        (tmp_path / "b.yaml").write_text("title: B\ndescription: b\n", encoding="utf-8")
        (tmp_path / "a.yaml").write_text("title: A\ndescription: a\n", encoding="utf-8")
        (tmp_path / "c.yml").write_text("title: C\ndescription: c\n", encoding="utf-8")

        modules = parse_modules(tmp_path)
        assert [m.title for m in modules] == ["A", "B"]


class TestTopLevelModule:
    def test_build_lists_lesson_filenames(self):
        module = build_top_level_module(
            "Course", "All of it",
            [_breakdown("Concurrency", ["GCD (Basics)", "Actors"])],
        )
        assert module["subModules"][0]["title"] == "Concurrency"
        assert module["subModules"][0]["lessons"] == ["gcd_basics", "actors"]

    def test_save_round_trips(self, tmp_path):
        module = build_top_level_module(
            "Course", "All of it",
            [_breakdown("Concurrency", ["Actors"]), _breakdown("Testing", ["XCTest"])],
        )
        path = tmp_path / "Modules" / "top_level_module.yaml"

        parsed = save_top_level_module(module, path)
        assert path.exists()
        assert yaml.safe_load(path.read_text(encoding="utf-8"))["title"] == "Course"
        assert [m.title for m in parsed.sub_modules] == ["Concurrency", "Testing"]
        assert parsed.sub_modules[1].lessons == ["xctest"]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
