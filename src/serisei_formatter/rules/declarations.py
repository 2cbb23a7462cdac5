from typing import List, Optional, Sequence, Tuple

from loguru import logger

from ..indent import leading_whitespace
from ..models import FormatterConfig
from ..scanner import ScanState, code_text, scan
from .base import FormattingContext, FormattingRule, Transformation
from .blocks import format_block_content, terminate_member
from .unions import TYPE_ALIAS, format_single_line_block, format_union_type, is_union_type


def _body_brace(lines: Sequence[str]) -> Optional[Tuple[int, int]]:
    state = ScanState()
    for row, line in enumerate(lines):
        for index, char, depth in scan(line, state):
            if char == "{" and depth == 0:
                return row, index
    return None


def _closing_brace(lines: Sequence[str], row: int, col: int) -> Optional[Tuple[int, int]]:
    state = ScanState()
    for current in range(row, len(lines)):
        offset = col if current == row else 0
        for index, char, depth in scan(lines[current][offset:], state):
            if char == "}" and depth == 0:
                return current, index + offset
    return None


def format_declaration(block_lines: Sequence[str], config: FormatterConfig) -> List[str]:
    """Formats one interface or type declaration.

    Declarations whose body cannot be delimited are returned unchanged.
    """
    lines = list(block_lines)
    if not lines:
        return lines
    base_indent = leading_whitespace(lines[0])

    if is_union_type(lines):
        return format_union_type(lines, base_indent, config)

    brace = _body_brace(lines)
    if brace is None:
        return lines
    row, col = brace
    head = "\n".join(lines[:row] + [lines[row][:col]])
    if TYPE_ALIAS.match(lines[0]) and not code_text(head).rstrip().endswith("="):
        # conditional and intersection types are left as written
        return lines
    closing = _closing_brace(lines, row, col)
    if closing is None or closing[0] != len(lines) - 1:
        logger.debug(f"Body of '{lines[0].strip()}' does not close on its last line, keeping it")
        return lines

    if row == len(lines) - 1:
        return lines[:row] + format_single_line_block(lines[row], base_indent, config)

    last = lines[-1]
    close_col = closing[1]
    member_indent = base_indent + config.indent_unit
    after_open = lines[row][col + 1:].strip()
    before_close = last[:close_col].strip()

    content = []
    if after_open:
        content.append(member_indent + terminate_member(after_open))
    content.extend(lines[row + 1:-1])
    if before_close:
        content.append(member_indent + terminate_member(before_close))

    result = lines[:row] + [lines[row][:col + 1].rstrip()]
    result.extend(format_block_content(content, base_indent, config))
    result.append(base_indent + last[close_col:].strip())
    return result


class DeclarationFormattingRule(FormattingRule):
    """Aligns the members of interface and type declarations."""

    @property
    def rule_id(self) -> str: return "F002"
    @property
    def name(self) -> str: return "declaration-alignment"

    def analyze(self, context: FormattingContext) -> List[Transformation]:
        config = self.config.resolve_indent(context.source)
        transformations = []
        for region in context.declarations:
            original = context.lines[region.start_line:region.end_line + 1]
            formatted = format_declaration(original, config)
            if formatted != original:
                transformations.append(Transformation(region.start_line, region.end_line, formatted))
        return transformations
