from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional

import tree_sitter_typescript as tstypescript
from loguru import logger
from tree_sitter import Language, Node, Parser, Tree

from .models import DeclarationRegion, ImportRegion, ImportStatement

DECLARATION_TYPES = ("interface_declaration", "type_alias_declaration")
TSX_SUFFIXES = (".tsx", ".jsx")


@dataclass
class ParseResult:
    """Result of a tree-sitter parse operation"""
    tree: Tree
    source: str
    errors: List[str]


def _text(node: Node) -> str:
    return node.text.decode("utf-8")


class TypeScriptParser:
    """Finds the import block and top-level type declarations of a TypeScript file"""

    def __init__(self, tsx: bool = False):
        self.tsx = tsx
        language = tstypescript.language_tsx() if tsx else tstypescript.language_typescript()
        self.parser = Parser()
        self.parser.language = Language(language)

    @classmethod
    def for_path(cls, file_path: str) -> "TypeScriptParser":
        return cls(tsx=Path(file_path).suffix.lower() in TSX_SUFFIXES)

    def parse_string(self, source: str) -> ParseResult:
        tree = self.parser.parse(source.encode("utf-8"))
        errors = []
        if tree.root_node.has_error:
            errors.append("source contains syntax errors")
        return ParseResult(tree=tree, source=source, errors=errors)

    def locate_imports(
        self, result: ParseResult, lines: List[str], is_header: Callable[[str], bool]
    ) -> Optional[ImportRegion]:
        """Collects the leading import block.

        ``is_header`` recognizes group headers written by an earlier run; they
        are dropped from the statements and absorbed into the region.
        """
        children = result.tree.root_node.children
        first = next((i for i, child in enumerate(children) if child.type == "import_statement"), None)
        if first is None:
            return None
        if any(child.has_error for child in children[:first]):
            logger.debug("Syntax errors before the first import, skipping imports")
            return None

        statements: List[ImportStatement] = []
        pending: List[str] = []
        last_import: Optional[Node] = None
        following: Optional[Node] = None

        for node in children[first:]:
            if node.type == "import_statement":
                if node.has_error:
                    logger.debug(f"Import at line {node.start_point[0] + 1} has syntax errors, skipping imports")
                    return None
                statements.append(ImportStatement(text=_text(node), leading_comments=pending))
                pending = []
                last_import = node
            elif node.type == "comment":
                text = _text(node)
                if node.start_point[0] == last_import.end_point[0] and not statements[-1].trailing_comment:
                    statements[-1].trailing_comment = text
                elif is_header(text):
                    continue
                else:
                    pending.append(text)
            elif node.type == "ERROR":
                logger.debug(f"Syntax error at line {node.start_point[0] + 1} inside the import block, skipping imports")
                return None
            else:
                following = node
                break

        start = children[first].start_point[0]
        end = last_import.end_point[0]
        if following is not None and following.start_point[0] <= end:
            return None
        if first > 0 and children[first - 1].end_point[0] >= start:
            return None

        top = start
        row = start - 1
        while row >= 0 and (not lines[row].strip() or is_header(lines[row])):
            if lines[row].strip():
                top = row
            row -= 1

        row = end + 1
        while row < len(lines) and (not lines[row].strip() or is_header(lines[row])):
            end = row
            row += 1

        logger.debug(f"Import block spans lines {top + 1}-{end + 1} ({len(statements)} statements)")
        return ImportRegion(start_line=top, end_line=end, statements=statements)

    def locate_declarations(self, result: ParseResult) -> List[DeclarationRegion]:
        """Top-level interface and type declarations that own their lines"""
        source_lines = result.source.encode("utf-8").split(b"\n")
        regions = []
        for node in result.tree.root_node.children:
            if node.type == "export_statement":
                declaration = node.child_by_field_name("declaration")
                if declaration is None or declaration.type not in DECLARATION_TYPES:
                    continue
            elif node.type not in DECLARATION_TYPES:
                continue

            if node.has_error:
                logger.debug(f"Declaration at line {node.start_point[0] + 1} has syntax errors, skipping")
                continue
            if not self._owns_lines(node, source_lines):
                continue
            regions.append(DeclarationRegion(start_line=node.start_point[0], end_line=node.end_point[0]))
        return regions

    @staticmethod
    def _owns_lines(node: Node, source_lines: List[bytes]) -> bool:
        start_row, start_col = node.start_point
        end_row, end_col = node.end_point
        before = source_lines[start_row][:start_col]
        after = source_lines[end_row][end_col:].strip().lstrip(b";").strip()
        return not before.strip() and (not after or after.startswith(b"//"))
