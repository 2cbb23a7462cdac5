"""Recursive formatter for the member list between a pair of braces."""

from dataclasses import dataclass
import re
from typing import List, Optional, Sequence

from ..indent import leading_whitespace
from ..models import FormatterConfig, Property
from ..scanner import ScanState, code_text, comment_start, feed, scan
from .methods import MAX_NESTING_DEPTH, format_method_signature, format_multiline_fallback, match_method

KIND_COMMENT = "comment"
KIND_METHOD = "method"
KIND_FIELD = "field"
KIND_UNKNOWN = "unknown"

KEY_PATTERN = re.compile(
    r"""^((?:readonly\s+)?(?:\[[^\]]+\]|[\w$]+|"[^"]*"|'[^']*'))(\s*\?)?\s*:\s*(.*)$"""
)
_MEMBER_START = re.compile(
    r"""^(?:readonly\s+)?(?:[\w$]+\s*\??\s*[:(<]|\[|"[^"]*"\s*\??\s*:|'[^']*'\s*\??\s*:|//|/\*)"""
)

_SEPARATORS = (";", "}", ",")
_CONTINUATIONS = (":", "|", "&", "=", "=>", "?", ".")


@dataclass
class ObjectSpan:
    """An object type whose brace opens on the first line and closes on the last."""

    prefix: str
    after_open: str
    middle: List[str]
    before_close: str
    closing: str


def split_object(lines: Sequence[str]) -> Optional[ObjectSpan]:
    if len(lines) < 2:
        return None
    first = lines[0].strip()
    last = lines[-1].strip()

    state = ScanState()
    open_braces = []
    for index, char, depth in scan(first, state):
        if char == "{":
            open_braces.append((index, depth))
        elif char == "}" and open_braces:
            open_braces.pop()
    if not open_braces:
        return None
    opener, open_depth = open_braces[-1]

    for line in lines[1:-1]:
        for _, char, depth in scan(line, state):
            if char == "}" and depth == open_depth:
                return None

    for index, char, depth in scan(last, state):
        if char == "}" and depth == open_depth:
            return ObjectSpan(
                prefix=first[:opener],
                after_open=first[opener + 1:].strip(),
                middle=list(lines[1:-1]),
                before_close=last[:index].strip(),
                closing=last[index:].strip(),
            )
    return None


def terminate_member(fragment: str) -> str:
    """Appends ``;`` to a member fragment that lacks a separator."""
    code = code_text(fragment).rstrip()
    if not code or code.endswith(_SEPARATORS + _CONTINUATIONS):
        return fragment
    if not feed(fragment, ScanState()).settled:
        return fragment
    if KEY_PATTERN.match(fragment) is None and match_method(fragment) is None:
        return fragment

    cut = comment_start(fragment)
    if cut == -1:
        return fragment + ";"
    return f"{fragment[:cut].rstrip()}; {fragment[cut:]}"


def span_content(span: ObjectSpan, indent: str) -> List[str]:
    """Inner lines of ``span`` with brace-adjacent fragments moved to their own line."""
    content = []
    if span.after_open:
        content.append(indent + terminate_member(span.after_open))
    content.extend(span.middle)
    if span.before_close:
        content.append(indent + terminate_member(span.before_close))
    return content


def _split_members(text: str) -> List[str]:
    parts = []
    last = 0
    for index, char, depth in scan(text):
        if char == ";" and depth == 0:
            parts.append(text[last:index + 1].strip())
            last = index + 1

    remainder = text[last:].strip()
    if remainder:
        if parts and comment_start(remainder) == 0:
            parts[-1] = f"{parts[-1]} {remainder}"
        else:
            parts.append(remainder)
    return [part for part in parts if part and part != ";"]


def expand_lines(lines: Sequence[str]) -> List[str]:
    """Puts every ``;``-terminated member of a line on its own line."""
    expanded = []
    state = ScanState()
    for line in lines:
        stripped = line.strip()
        carried = state.block_comment or state.quote is not None
        feed(line, state)
        if carried or not stripped or stripped.startswith(("//", "/*", "*")):
            expanded.append(line)
            continue

        parts = _split_members(stripped)
        if len(parts) < 2:
            expanded.append(line)
            continue
        indent = leading_whitespace(line)
        expanded.extend(indent + part for part in parts)
    return expanded


def _next_starts_member(lines: Sequence[str], position: int) -> bool:
    for line in lines[position + 1:]:
        stripped = line.strip()
        if stripped:
            return _MEMBER_START.match(stripped) is not None
    return True


def delimit_properties(lines: Sequence[str]) -> List[List[str]]:
    """Groups raw lines into one list of lines per member."""
    properties = []
    current: List[str] = []
    state = ScanState()

    for position, line in enumerate(lines):
        if not line.strip() and state.quote is None:
            continue
        current.append(line)
        feed(line, state)
        if not state.settled:
            continue

        code = code_text("\n".join(current)).strip()
        if (
            not code
            or code.endswith(_SEPARATORS)
            or (not code.endswith(_CONTINUATIONS) and _next_starts_member(lines, position))
        ):
            properties.append(current)
            current = []

    if current:
        properties.append(current)
    return properties


def parse_property(lines: List[str]) -> Property:
    first = lines[0].strip()
    if not code_text("\n".join(lines)).strip():
        return Property(lines=lines, kind=KIND_COMMENT)

    head = match_method(first)
    if head is not None:
        return Property(lines=lines, kind=KIND_METHOD, key=head.name, optional=head.optional, generics=head.generics)

    match = KEY_PATTERN.match(first)
    if match:
        return Property(
            lines=lines,
            kind=KIND_FIELD,
            key=match.group(1),
            optional=bool(match.group(2)),
            value=match.group(3).strip(),
        )
    return Property(lines=lines, kind=KIND_UNKNOWN)


def _reindent_comment(lines: Sequence[str], indent: str) -> List[str]:
    result = []
    for index, line in enumerate(lines):
        stripped = line.strip()
        if not stripped:
            continue
        if index > 0 and stripped.startswith("*"):
            result.append(f"{indent} {stripped}")
        else:
            result.append(indent + stripped)
    return result


def _format_nested_field(
    prop: Property, lines: List[str], head: str, indent: str, config: FormatterConfig, depth: int
) -> Optional[List[str]]:
    span = split_object(lines)
    if span is None:
        return None
    value_start = len(lines[0].strip()) - len(prop.value)
    if value_start > len(span.prefix):
        return None

    prefix = span.prefix[value_start:].strip()
    content = span_content(span, indent + config.indent_unit)
    result = [f"{head} {prefix}{{" if prefix else f"{head} {{"]
    result.extend(format_block_content(content, indent, config, depth + 1))
    result.append(indent + span.closing)
    return result


def _format_field(
    prop: Property, indent: str, max_key: int, has_optional: bool, config: FormatterConfig, depth: int
) -> List[str]:
    head = indent + prop.key.ljust(max_key)
    if has_optional:
        head += " ?" if prop.optional else "  "
    head += " :"

    lines = [line for line in prop.lines if line.strip()]
    if len(lines) == 1:
        return [f"{head} {prop.value}".rstrip()]

    nested = _format_nested_field(prop, lines, head, indent, config, depth)
    if nested is not None:
        return nested
    return format_multiline_fallback(lines, indent, f"{head} {prop.value}", config)


def format_block_content(
    content_lines: Sequence[str], base_indent: str, config: FormatterConfig, depth: int = 0
) -> List[str]:
    """Formats the members between a pair of braces.

    Fields are aligned on one colon column, methods are expanded and preceded
    by a blank line, comments are re-indented. Returned lines sit one unit
    deeper than ``base_indent``.
    """
    property_indent = base_indent + config.indent_unit
    if depth > MAX_NESTING_DEPTH:
        return [property_indent + line.strip() for line in content_lines if line.strip()]

    properties = [parse_property(lines) for lines in delimit_properties(expand_lines(content_lines))]
    fields = [prop for prop in properties if prop.kind == KIND_FIELD]
    max_key = max((len(prop.key) for prop in fields), default=0)
    has_optional = any(prop.optional for prop in fields)
    head_width = max_key + (2 if has_optional else 0)

    formatted: List[str] = []
    comment_run = None
    for prop in properties:
        if prop.kind == KIND_COMMENT:
            if comment_run is None:
                comment_run = len(formatted)
            formatted.extend(_reindent_comment(prop.lines, property_indent))
            continue

        if prop.kind == KIND_METHOD:
            insert_at = len(formatted) if comment_run is None else comment_run
            if insert_at > 0 and formatted[insert_at - 1] != "":
                formatted.insert(insert_at, "")
            token = f"{prop.key}{'?' if prop.optional else ''}{prop.generics}"
            formatted.extend(
                format_method_signature(prop.lines, property_indent, token.ljust(head_width), config, depth)
            )
        elif prop.kind == KIND_FIELD:
            formatted.extend(_format_field(prop, property_indent, max_key, has_optional, config, depth))
        else:
            formatted.extend(property_indent + line.strip() for line in prop.lines if line.strip())
        comment_run = None

    return formatted
