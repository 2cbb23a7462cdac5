"""Character scanner shared by every formatter.

Tracks a depth stack tagged by bracket kind plus string-literal and comment
state, so callers never have to count braces with regular expressions.
"""

from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple

OPENERS = {"(": ")", "{": "}", "[": "]", "<": ">"}
CLOSERS = {closer: opener for opener, closer in OPENERS.items()}
QUOTES = ("'", '"', "`")

LINE_COMMENT = "//"
BLOCK_COMMENT = "/*"

CODE = "code"
STRING = "string"
COMMENT = "comment"


@dataclass
class ScanState:
    """Scanner state that can be carried from one line to the next."""

    stack: List[str] = field(default_factory=list)
    quote: Optional[str] = None
    block_comment: bool = False
    previous: str = ""

    @property
    def depth(self) -> int:
        return len(self.stack)

    @property
    def settled(self) -> bool:
        """True when no bracket, string or block comment is open."""
        return not self.stack and self.quote is None and not self.block_comment


def classify(text: str, state: Optional[ScanState] = None) -> Iterator[Tuple[int, str, int, str]]:
    """Yield ``(index, char, depth, kind)`` for every character of ``text``.

    ``kind`` is ``code``, ``string`` or ``comment``. An opener reports the depth
    before it is pushed and a closer the depth after it is popped, so both
    brackets of a pair report the depth of their surroundings.
    """
    if state is None:
        state = ScanState()
    i = 0
    n = len(text)
    while i < n:
        char = text[i]

        if state.block_comment:
            if text.startswith("*/", i):
                yield i, char, state.depth, COMMENT
                yield i + 1, "/", state.depth, COMMENT
                state.block_comment = False
                i += 2
            else:
                yield i, char, state.depth, COMMENT
                i += 1
            continue

        if state.quote is not None:
            yield i, char, state.depth, STRING
            if char == "\\" and i + 1 < n:
                yield i + 1, text[i + 1], state.depth, STRING
                i += 2
                continue
            if char == state.quote:
                state.quote = None
            i += 1
            continue

        if char in QUOTES:
            state.quote = char
            state.previous = char
            yield i, char, state.depth, STRING
            i += 1
            continue

        if text.startswith(LINE_COMMENT, i):
            newline = text.find("\n", i)
            end = n if newline == -1 else newline
            for j in range(i, end):
                yield j, text[j], state.depth, COMMENT
            i = end
            continue

        if text.startswith(BLOCK_COMMENT, i):
            state.block_comment = True
            yield i, char, state.depth, COMMENT
            yield i + 1, "*", state.depth, COMMENT
            i += 2
            continue

        if char in OPENERS:
            yield i, char, state.depth, CODE
            state.stack.append(char)
        elif char in CLOSERS and not (char == ">" and state.previous == "="):
            opener = CLOSERS[char]
            if state.stack and state.stack[-1] == opener:
                state.stack.pop()
            elif char != ">" and opener in state.stack:
                # an unclosed generic or paren inside this pair
                while state.stack.pop() != opener:
                    pass
            yield i, char, state.depth, CODE
        else:
            yield i, char, state.depth, CODE

        if not char.isspace():
            state.previous = char
        i += 1


def scan(text: str, state: Optional[ScanState] = None) -> Iterator[Tuple[int, str, int]]:
    """Yield ``(index, char, depth)`` for code characters only."""
    for index, char, depth, kind in classify(text, state):
        if kind == CODE:
            yield index, char, depth


def feed(text: str, state: ScanState) -> ScanState:
    """Advance ``state`` over ``text`` and return it."""
    for _ in classify(text, state):
        pass
    return state


def find_top_level(text: str, targets: str, start: int = 0) -> int:
    """Index of the first depth-0 code character in ``targets`` at or after ``start``, or -1."""
    for index, char, depth in scan(text):
        if index >= start and depth == 0 and char in targets:
            return index
    return -1


def find_first(text: str, target: str) -> int:
    """Index of the first code occurrence of ``target`` at any depth, or -1."""
    for index, char, _ in scan(text):
        if char == target:
            return index
    return -1


def find_matching(text: str, open_index: int) -> int:
    """Index of the bracket closing the one at ``open_index``, or -1."""
    for index, char, depth in scan(text[open_index:]):
        if index > 0 and depth == 0 and char in CLOSERS:
            return open_index + index
    return -1


def split_top_level(text: str, separators: str) -> List[str]:
    """Split on depth-0 separator characters, dropping empty pieces."""
    pieces = []
    last = 0
    for index, char, depth in scan(text):
        if depth == 0 and char in separators:
            pieces.append(text[last:index])
            last = index + 1
    pieces.append(text[last:])
    return [piece.strip() for piece in pieces if piece.strip()]


def comment_start(text: str, state: Optional[ScanState] = None) -> int:
    """Index where the first comment of ``text`` begins, or -1."""
    for index, _, _, kind in classify(text, state):
        if kind == COMMENT:
            return index
    return -1


def has_comment(text: str) -> bool:
    return comment_start(text) != -1


def code_text(text: str, state: Optional[ScanState] = None) -> str:
    """Return ``text`` with every comment removed, keeping line breaks."""
    return "".join(char for _, char, _, kind in classify(text, state) if kind != COMMENT or char == "\n")


def collapse_whitespace(text: str) -> str:
    """Collapse whitespace runs outside string literals to single spaces."""
    result = []
    for _, char, _, kind in classify(text):
        if kind != STRING and char.isspace():
            if result and result[-1] != " ":
                result.append(" ")
        else:
            result.append(char)
    return "".join(result).strip()
