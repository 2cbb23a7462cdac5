from loguru import logger

from serisei_formatter.engine import FormatterEngine
from serisei_formatter.models import FormatterConfig, FormatResult
from serisei_formatter.rules import default_rules
from serisei_formatter.rules.base import FormattingRule, Transformation
from serisei_formatter.rules.imports import create_header


class ReplaceFirstLineRule(FormattingRule):
    @property
    def rule_id(self) -> str: return "T001"
    @property
    def name(self) -> str: return "replace-first-line"

    def analyze(self, context):
        return [Transformation(0, 0, ["// replaced"])]


class FailingRule(FormattingRule):
    @property
    def rule_id(self) -> str: return "T002"
    @property
    def name(self) -> str: return "failing"

    def analyze(self, context):
        raise ValueError("rule blew up")


def _engine(config=None):
    config = config or FormatterConfig()
    engine = FormatterEngine(config)
    for rule in default_rules(config):
        engine.add_rule(rule)
    return engine


SOURCE = "\n".join([
    'import { useState } from "react";',
    'import { Button } from "../components/Button";',
    'import axios from "axios";',
    "",
    "export interface ButtonProps {",
    "  label: string;",
    "  disabled?: boolean;",
    "  onClick(event: MouseEvent): void;",
    "}",
    "",
    "export const x = 1;",
    "",
])


def test_full_file():
    result = _engine().format_string(SOURCE, "Button.ts")
    assert isinstance(result, FormatResult)
    assert result.errors == []
    assert result.source.split("\n") == [
        create_header("// EXTERNAL", "=", 120),
        'import axios from "axios";',
        'import { useState } from "react";',
        "",
        create_header("// COMPONENTS", "=", 120),
        'import { Button } from "../components/Button";',
        "",
        "export interface ButtonProps {",
        "  label      : string;",
        "  disabled ? : boolean;",
        "",
        "  onClick    (",
        "    event : MouseEvent",
        "  ): void;",
        "}",
        "",
        "export const x = 1;",
        "",
    ]


def test_full_file_is_idempotent():
    engine = _engine()
    once = engine.format_string(SOURCE, "Button.ts")
    twice = engine.format_string(once.source, "Button.ts")
    assert twice.source == once.source
    assert twice.modified is False


def test_untouched_source_is_not_modified():
    source = "const x = 1;\nfunction f() {\n  return x;\n}\n"
    result = _engine().format_string(source)
    assert result.source == source
    assert result.modified is False


def test_line_endings_and_final_newline_are_preserved():
    result = _engine().format_string("interface A { a: string }\r\n")
    assert result.source == "interface A {\r\n    a : string;\r\n}\r\n"

    result = _engine().format_string("interface A { a: string }")
    assert result.source == "interface A {\n    a : string;\n}"


def test_failing_rule_is_reported_and_others_still_apply():
    config = FormatterConfig()
    engine = FormatterEngine(config)
    engine.add_rule(FailingRule(config))
    engine.add_rule(ReplaceFirstLineRule(config))

    result = engine.format_string("const a = 1;\nconst b = 2;\n")
    assert result.source == "// replaced\nconst b = 2;\n"
    assert len(result.errors) == 1
    assert "rule blew up" in result.errors[0]


def test_parse_errors_are_logged_but_not_reported_as_rule_errors():
    messages = []
    handler_id = logger.add(messages.append, level="DEBUG", format="{message}")
    try:
        result = _engine().format_string("const = ;\n", "broken.ts")
    finally:
        logger.remove(handler_id)

    assert result.errors == []
    assert any("broken.ts: source contains syntax errors" in message for message in messages)


def test_overlapping_transformations_keep_the_first():
    engine = FormatterEngine(FormatterConfig())
    lines = ["a", "b", "c"]
    transforms = [Transformation(1, 2, ["y"]), Transformation(0, 1, ["x"])]
    assert engine._apply_transformations(lines, transforms) == ["x", "c"]


def test_format_files_writes_changed_files_only(tmp_path):
    changed = tmp_path / "a.ts"
    changed.write_text("interface A { a: string }\n", encoding="utf-8")
    clean = tmp_path / "b.ts"
    clean.write_text("const b = 1;\n", encoding="utf-8")

    results = _engine().format_files([changed, clean])
    assert results.total_files == 2
    assert results.modified_files == 1
    assert results.error_files == 0
    assert changed.read_text(encoding="utf-8") == "interface A {\n    a : string;\n}\n"
    assert clean.read_text(encoding="utf-8") == "const b = 1;\n"


def test_format_files_reports_missing_files(tmp_path):
    results = _engine().format_files([tmp_path / "missing.ts"])
    assert results.error_files == 1
    assert results.results[0].errors
