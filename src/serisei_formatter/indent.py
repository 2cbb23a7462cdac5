from dataclasses import dataclass
from functools import reduce
from math import gcd
import re

DEFAULT_INDENT_SIZE = 4
ALLOWED_SIZES = (2, 3, 4, 8)
MAX_UNIT_WIDTH = 8

_LEADING_WS = re.compile(r"^([ \t]+)")


@dataclass(frozen=True)
class IndentStyle:
    type: str
    size: int

    @property
    def unit(self) -> str:
        return "\t" if self.type == "tabs" else " " * self.size


def detect_indent_style(source: str) -> IndentStyle:
    """Infers tabs vs spaces and the space width from indented lines."""
    tab_count = 0
    space_count = 0
    widths = []

    for line in source.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("*"):
            continue
        match = _LEADING_WS.match(line)
        if not match:
            continue
        indent = match.group(1)
        if "\t" in indent:
            tab_count += 1
        else:
            space_count += 1
            widths.append(len(indent))

    if tab_count > space_count:
        return IndentStyle("tabs", 1)

    widths = [w for w in widths if w <= MAX_UNIT_WIDTH]
    if not widths:
        return IndentStyle("spaces", DEFAULT_INDENT_SIZE)

    size = reduce(gcd, widths)
    if size == 1:
        size = min(widths)
    if size not in ALLOWED_SIZES:
        size = DEFAULT_INDENT_SIZE
    return IndentStyle("spaces", size)


def leading_whitespace(line: str) -> str:
    return line[: len(line) - len(line.lstrip())]
