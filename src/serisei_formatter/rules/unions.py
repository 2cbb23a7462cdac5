import re
from typing import List, Sequence

from ..models import FormatterConfig
from ..scanner import ScanState, code_text, feed, find_first, find_matching, find_top_level, scan
from .blocks import format_block_content, span_content, split_object, terminate_member
from .methods import MAX_NESTING_DEPTH, brace_opening, brace_suffix, format_multiline_fallback

TYPE_ALIAS = re.compile(r"^\s*(?:export\s+)?(?:declare\s+)?type\s")


def _assignment_index(line: str) -> int:
    for index, char, depth in scan(line):
        if char == "=" and depth == 0 and not line.startswith("=>", index):
            return index
    return -1


def _assignment_row(block_lines: Sequence[str]) -> int:
    for row, line in enumerate(block_lines):
        if _assignment_index(line) != -1:
            return row
    return -1


def is_union_type(block_lines: Sequence[str]) -> bool:
    """True for ``type X =`` followed by ``|``-led members."""
    if not block_lines or not TYPE_ALIAS.match(block_lines[0]):
        return False
    row = _assignment_row(block_lines)
    if row == -1:
        return False
    line = block_lines[row]
    if line[_assignment_index(line) + 1:].strip().startswith("|"):
        return True
    return row + 1 < len(block_lines) and block_lines[row + 1].strip().startswith("|")


def format_single_line_block(
    line: str, base_indent: str, config: FormatterConfig, depth: int = 0
) -> List[str]:
    """Expands ``head { a: T; b: U } suffix`` to one member per line."""
    opener = find_top_level(line, "{")
    if opener == -1:
        return [line]
    closer = find_matching(line, opener)
    if closer == -1:
        return [line]
    content = line[opener + 1:closer].strip()
    if not content:
        return [line]

    member = base_indent + config.indent_unit + terminate_member(content)
    result = [line[:opener + 1].rstrip()]
    result.extend(format_block_content([member], base_indent, config, depth))
    result.append(f"{base_indent}}}{brace_suffix(line[closer + 1:].strip())}")
    return result


def _split_members(lines: Sequence[str]) -> List[List[str]]:
    members: List[List[str]] = []
    state = ScanState()
    for line in lines:
        stripped = line.strip()
        if not stripped:
            continue
        comment_only = not code_text(stripped).strip()
        if state.settled and (not members or stripped.startswith("|") or comment_only):
            members.append([line])
        else:
            members[-1].append(line)
        feed(stripped, state)
    return members


def _format_member(lines: List[str], indent: str, config: FormatterConfig, depth: int) -> List[str]:
    first = lines[0].strip()
    unit = config.indent_unit

    if len(lines) == 1:
        opener = find_first(first, "{")
        closer = find_matching(first, opener) if opener != -1 else -1
        if depth < MAX_NESTING_DEPTH and closer != -1 and first[opener + 1:closer].strip():
            member = indent + unit + terminate_member(first[opener + 1:closer].strip())
            result = [indent + brace_opening(first[:opener].strip())]
            result.extend(format_block_content([member], indent, config, depth + 1))
            result.append(f"{indent}}}{brace_suffix(first[closer + 1:].strip())}")
            return result
        return [indent + first]

    span = split_object(lines) if depth < MAX_NESTING_DEPTH else None
    if span is None:
        return format_multiline_fallback(lines, indent, indent + first, config)
    result = [indent + brace_opening(span.prefix.strip())]
    result.extend(format_block_content(span_content(span, indent + unit), indent, config, depth + 1))
    result.append(indent + span.closing)
    return result


def format_union_type(
    block_lines: Sequence[str], base_indent: str, config: FormatterConfig, depth: int = 0
) -> List[str]:
    """Puts each ``|`` member of a type alias on its own line, one unit deeper.

    Object members are expanded and aligned like any other body.
    """
    row = _assignment_row(block_lines)
    if row == -1:
        return list(block_lines)

    head = block_lines[row]
    assignment = _assignment_index(head)
    result = list(block_lines[:row])
    remaining = list(block_lines[row + 1:])
    inline = head[assignment + 1:].strip()
    if inline.startswith("|"):
        result.append(head[:assignment + 1].rstrip())
        remaining.insert(0, base_indent + inline)
    else:
        result.append(head.rstrip())

    indent = base_indent + config.indent_unit
    for member in _split_members(remaining):
        result.extend(_format_member(member, indent, config, depth))
    return result
