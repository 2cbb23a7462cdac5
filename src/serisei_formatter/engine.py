from pathlib import Path
import traceback
from typing import List

from loguru import logger

from .file_utils import read_source, write_file_atomic
from .models import FormatResult, FormatResults, FormatterConfig
from .parser import TypeScriptParser
from .rules.base import FormattingContext, FormattingRule, Transformation
from .rules.imports import is_generated_header


class FormatterEngine:
    """Core engine for formatting TypeScript import blocks and type declarations."""

    def __init__(self, config: FormatterConfig):
        self.config = config
        self.rules: List[FormattingRule] = []

    def add_rule(self, rule: FormattingRule) -> None:
        """Register a new formatting rule."""
        self.rules.append(rule)

    def format_string(self, source: str, file_path: str = "") -> FormatResult:
        """Formats a source string, keeping its line endings and final newline."""
        newline = "\r\n" if "\r\n" in source else "\n"
        text = source.replace("\r\n", "\n")
        lines = text.split("\n")
        final_newline = text.endswith("\n")
        if final_newline:
            lines.pop()

        parser = TypeScriptParser.for_path(file_path)
        parse_result = parser.parse_string(text)
        if parse_result.errors:
            logger.debug(f"{file_path or '<string>'}: {'; '.join(parse_result.errors)}, formatting intact regions only")
        context = FormattingContext(
            source=text,
            lines=lines,
            file_path=file_path,
            imports=parser.locate_imports(parse_result, lines, lambda line: is_generated_header(line, self.config)),
            declarations=parser.locate_declarations(parse_result),
        )

        errors = []
        transforms: List[Transformation] = []
        for rule in self.rules:
            try:
                transforms.extend(rule.analyze(context))
            except Exception as e:
                logger.warning(f"Rule {rule.rule_id} ({rule.name}) failed on {file_path or '<string>'}: {e}")
                errors.append(f"{rule.name}: {e}\n{traceback.format_exc()}")

        output = newline.join(self._apply_transformations(lines, transforms))
        if final_newline:
            output += newline
        return FormatResult(source=output, modified=output != source, errors=errors)

    def _apply_transformations(self, lines: List[str], transforms: List[Transformation]) -> List[str]:
        """Applies non-overlapping line-range transformations in a single pass."""
        sorted_transforms = sorted(transforms, key=lambda t: (t.start_line, t.end_line, t.priority))
        result = []; cursor = 0
        for t in sorted_transforms:
            if t.start_line < cursor: continue
            result.extend(lines[cursor:t.start_line])
            result.extend(t.new_lines)
            cursor = t.end_line + 1
        result.extend(lines[cursor:])
        return result

    def format_files(self, files: List[Path]) -> FormatResults:
        """Batch format multiple files on disk."""
        results = []; modified_count = 0; error_count = 0
        for file_path in files:
            try:
                source = read_source(file_path)
                result = self.format_string(source, str(file_path))
                results.append(result)
                if result.errors: error_count += 1
                elif result.modified:
                    modified_count += 1
                    write_file_atomic(file_path, result.source)
            except OSError as e:
                logger.error(f"Error processing {file_path}: {e}")
                results.append(FormatResult(source="", modified=False, errors=[str(e)]))
                error_count += 1
        return FormatResults(results=results, total_files=len(files), modified_files=modified_count, error_files=error_count)
