from dataclasses import dataclass
import re
from typing import List, Optional, Sequence, Tuple

from ..models import FormatterConfig, Parameter
from ..scanner import (
    collapse_whitespace,
    comment_start,
    find_first,
    find_matching,
    find_top_level,
    has_comment,
    split_top_level,
)

MAX_NESTING_DEPTH = 32

_METHOD_NAME = re.compile(r"^([\w$]+)(\s*\?)?\s*")


@dataclass
class MethodHead:
    name: str
    optional: bool
    generics: str
    paren_index: int


def match_method(text: str) -> Optional[MethodHead]:
    """Recognizes ``name[?][<generics>](`` at the start of ``text``."""
    match = _METHOD_NAME.match(text)
    if not match:
        return None

    index = match.end()
    generics = ""
    if text.startswith("<", index):
        close = find_matching(text, index)
        if close == -1:
            return None
        generics = collapse_whitespace(text[index:close + 1])
        index = close + 1
        while index < len(text) and text[index].isspace():
            index += 1

    if not text.startswith("(", index):
        return None
    return MethodHead(match.group(1), bool(match.group(2)), generics, index)


def parse_parameter(param: str) -> Parameter:
    """Splits ``name?: type`` on its first depth-0 colon."""
    colon = find_top_level(param, ":")
    if colon == -1:
        return Parameter(name=param.strip())

    name_part = param[:colon].strip()
    optional = name_part.endswith("?")
    name = name_part[:-1].strip() if optional else name_part
    return Parameter(name=name, optional=optional, type=param[colon + 1:].strip())


def parse_parameters(parameters: str) -> List[Parameter]:
    return [parse_parameter(p) for p in split_top_level(parameters, ",")]


def _alignment(items: Sequence[Parameter]) -> Tuple[int, bool]:
    return max(len(item.name) for item in items), any(item.optional for item in items)


def _member_head(item: Parameter, width: int, has_optional: bool) -> str:
    head = item.name.ljust(width)
    if has_optional:
        head += " ?" if item.optional else "  "
    return head


def brace_opening(prefix: str) -> str:
    if not prefix:
        return "{"
    if prefix[-1] in "<([":
        return prefix + "{"
    return prefix + " {"


def brace_suffix(suffix: str) -> str:
    if not suffix or suffix[0] in "[]>),;":
        return suffix
    return " " + suffix


def parse_inline_object(
    type_text: str,
    head: str,
    indent: str,
    config: FormatterConfig,
    trailing: str = "",
    depth: int = 0,
) -> Optional[List[str]]:
    """Expands the first object literal of ``type_text`` to one member per line.

    ``head`` is the already rendered text in front of the type, ``indent`` the
    indentation of that line. Returns None when there is nothing to expand.
    """
    if depth >= MAX_NESTING_DEPTH:
        return None
    opener = find_first(type_text, "{")
    if opener == -1:
        return None
    closer = find_matching(type_text, opener)
    if closer == -1:
        return None
    members = [parse_parameter(m) for m in split_top_level(type_text[opener + 1:closer], ";,")]
    if not members:
        return None

    prefix = type_text[:opener].strip()
    suffix = type_text[closer + 1:].strip()
    inner_indent = indent + config.indent_unit
    width, has_optional = _alignment(members)

    lines = [f"{head}{brace_opening(prefix)}"]
    for member in members:
        member_head = inner_indent + _member_head(member, width, has_optional)
        if not member.type:
            lines.append(member_head.rstrip() + ";")
            continue
        nested = parse_inline_object(member.type, member_head + " : ", inner_indent, config, ";", depth + 1)
        lines.extend(nested or [f"{member_head} : {member.type};"])
    lines.append(f"{indent}}}{brace_suffix(suffix)}{trailing}")
    return lines


def format_multiline_fallback(
    lines: Sequence[str], property_indent: str, first_line: str, config: FormatterConfig
) -> List[str]:
    """Keeps a construct as written: first line as given, the rest one level deeper."""
    continuation = property_indent + config.indent_unit
    result = [first_line.rstrip()]
    result.extend(continuation + line.strip() for line in lines[1:] if line.strip())
    return result


def format_method_signature(
    method_lines: Sequence[str],
    property_indent: str,
    aligned_head: str,
    config: FormatterConfig,
    depth: int = 0,
) -> List[str]:
    """Expands a call signature member to one aligned parameter per line."""
    body = [line for line in method_lines if line.strip()]
    fallback = format_multiline_fallback(body, property_indent, property_indent + body[0].strip(), config)
    if not config.expand_methods:
        return fallback

    if any(has_comment(line) for line in body[:-1]):
        return fallback

    last = body[-1]
    comment = ""
    cut = comment_start(last)
    if cut != -1:
        comment = last[cut:].strip()
        last = last[:cut]

    text = collapse_whitespace(" ".join([line.strip() for line in body[:-1]] + [last.strip()]))
    head = match_method(text)
    if head is None:
        return fallback
    close = find_matching(text, head.paren_index)
    if close == -1:
        return fallback

    rest = text[close + 1:].strip()
    if not rest.startswith(":"):
        return fallback
    return_type = rest[1:].strip()
    if return_type.endswith((";", ",")):
        return_type = return_type[:-1].rstrip()
    if not return_type:
        return fallback

    closing = f"{property_indent}): {return_type};"
    if comment:
        closing += f" {comment}"

    lines = [f"{property_indent}{aligned_head} ("]
    parameters = parse_parameters(text[head.paren_index + 1:close])
    if parameters:
        param_indent = property_indent + config.indent_unit
        width, has_optional = _alignment(parameters)
        for index, param in enumerate(parameters):
            comma = "," if index < len(parameters) - 1 else ""
            param_head = param_indent + _member_head(param, width, has_optional)
            if not param.type:
                lines.append(param_head.rstrip() + comma)
                continue
            expanded = parse_inline_object(param.type, param_head + " : ", param_indent, config, comma, depth)
            lines.extend(expanded or [f"{param_head} : {param.type}{comma}"])
    lines.append(closing)
    return lines
