import re
from typing import Callable, List, Tuple

from ..models import FormatterConfig, ImportGroup, ImportStatement
from ..scanner import split_top_level
from .base import FormattingContext, FormattingRule, Transformation

# import [type] [Default,] { named } from "module";
_REFLOW_PATTERN = re.compile(
    r"""^import\s+(type\s+)?(?:([\w$]+)\s*,\s*)?\{(.*)\}\s*from\s*(["'])(.+?)\4\s*;?$"""
)

Matcher = Callable[[ImportStatement], bool]


def create_header(text: str, header_char: str, column_width: int) -> str:
    """Pads a group label with ``header_char`` up to ``column_width``."""
    trimmed = text.strip()
    if len(trimmed) >= column_width - 1:
        return trimmed
    return (trimmed + " ").ljust(column_width, header_char)


def is_generated_header(line: str, config: FormatterConfig) -> bool:
    """True for comment lines this formatter would have produced as group headers."""
    stripped = line.strip()
    if not stripped.startswith("//"):
        return False
    return any(
        stripped == create_header(group.label, config.header_char, config.column_width)
        for group in config.groups
    )


def _matches(matcher: str, statement: ImportStatement) -> bool:
    normalized = statement.normalized
    if matcher[0] in "\"'":
        return matcher in normalized
    if matcher.startswith(".") or matcher.endswith("/"):
        return matcher in normalized
    # bare package name: the package itself, one of its subpaths or its scope
    module = statement.module
    if module.startswith((".", "/")):
        return False
    return module == matcher or module.startswith((f"{matcher}/", f"@{matcher}/"))


def build_matcher(group: ImportGroup) -> Matcher:
    if group.is_catch_all:
        return lambda statement: True

    def matches(statement: ImportStatement) -> bool:
        return any(_matches(m, statement) for m in group.matchers)

    return matches


def format_import_statement(statement_text: str, column_width: int, indent_unit: str = "    ") -> str:
    """Breaks an over-long named import into one name per line."""
    single_line = re.sub(r"\s*\n\s*", " ", statement_text).strip()
    if len(single_line) <= column_width:
        return statement_text

    match = _REFLOW_PATTERN.match(single_line)
    if not match:
        # side-effect, default-only and namespace imports stay as written
        return statement_text

    type_keyword, default_import, named, _, module = match.groups()
    names = split_top_level(named, ",")
    if not names:
        return statement_text

    keyword = "import type" if type_keyword else "import"
    lines = [f"{keyword} {default_import}, {{" if default_import else f"{keyword} {{"]
    lines.extend(f"{indent_unit}{name}," for name in names)
    lines.append(f'}} from "{module}";')
    return "\n".join(lines)


def _statement_lines(text: str, statement: ImportStatement) -> List[str]:
    lines = []
    for comment in statement.leading_comments:
        lines.extend(comment.split("\n"))
    body = text.split("\n")
    if statement.trailing_comment:
        body[-1] = f"{body[-1]} {statement.trailing_comment}"
    lines.extend(body)
    return lines


def group_and_format_imports(statements: List[ImportStatement], config: FormatterConfig) -> List[str]:
    """Groups, sorts and renders import statements under padded headers."""
    groups: List[Tuple[Matcher, str, List[ImportStatement]]] = [
        (build_matcher(group), create_header(group.label, config.header_char, config.column_width), [])
        for group in config.groups
    ]

    seen = set()
    for statement in statements:
        key = statement.normalized
        if key in seen:
            continue
        seen.add(key)
        for matcher, _, matches in groups:
            if matcher(statement):
                matches.append(statement)
                break

    result: List[str] = []
    for _, header, matches in groups:
        if not matches:
            continue
        if result:
            result.append("")
        result.append(header)

        rendered = []
        for statement in matches:
            text = statement.text.strip()
            if config.reflow_imports:
                text = format_import_statement(text, config.column_width, config.indent_unit)
            rendered.append((text, statement))

        for text, statement in sorted(rendered, key=lambda item: item[0]):
            result.extend(_statement_lines(text, statement))

    return result


class ImportGroupingRule(FormattingRule):
    """Rewrites the leading import block into labelled groups."""

    @property
    def rule_id(self) -> str: return "F001"
    @property
    def name(self) -> str: return "import-grouping"

    def analyze(self, context: FormattingContext) -> List[Transformation]:
        region = context.imports
        if region is None or not region.statements:
            return []

        config = self.config.resolve_indent(context.source)
        new_lines = group_and_format_imports(region.statements, config)
        if new_lines and region.end_line + 1 < len(context.lines):
            new_lines.append("")
        return [Transformation(region.start_line, region.end_line, new_lines)]
