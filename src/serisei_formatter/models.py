from dataclasses import dataclass, field
import re
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from .indent import DEFAULT_INDENT_SIZE, detect_indent_style

CATCH_ALL_LABEL = "// OTHER"

_MODULE_PATTERN = re.compile(r"""\bfrom\s*(["'])(.*?)\1""")
_SIDE_EFFECT_PATTERN = re.compile(r"""^import\s*(["'])(.*?)\1""")


class ImportGroup(BaseModel):
    label: str
    matchers: List[str] = Field(default_factory=list)

    @field_validator("matchers")
    @classmethod
    def _strip_matchers(cls, value: List[str]) -> List[str]:
        return [m.strip() for m in value if m.strip()]

    @property
    def is_catch_all(self) -> bool:
        return not self.matchers or re.search(r"\bOTHER\b", self.label.upper()) is not None


def default_groups() -> List[ImportGroup]:
    return [
        ImportGroup(
            label="// EXTERNAL",
            matchers=[
                '"react"',
                "'react'",
                "next/",
                "dnd-kit/",
                "zustand",
                "framer-motion",
                "tiptap",
                "axios",
                "tanstack",
                "vite",
                "path",
                "tauri",
                "react-router-dom",
                "@react-oauth/google",
                "globby",
            ],
        ),
        ImportGroup(label="// CONTEXTS", matchers=["contexts/"]),
        ImportGroup(label="// COMPONENTS", matchers=["components/"]),
        ImportGroup(label="// CONFIGS", matchers=["configs/"]),
        ImportGroup(label="// LIB", matchers=["lib/"]),
        ImportGroup(label="// LOGIC", matchers=["logic/"]),
        ImportGroup(label="// DATA", matchers=["mock-data/"]),
        ImportGroup(label="// HOOKS", matchers=["hooks/"]),
        ImportGroup(label="// STORES", matchers=["store/"]),
        ImportGroup(label="// SERVICES", matchers=["services/"]),
        ImportGroup(label="// STYLES", matchers=["styles/", ".css"]),
        ImportGroup(label="// TYPES", matchers=["types", "typings"]),
        ImportGroup(label="// UTILS", matchers=["utils/"]),
        ImportGroup(label="// ASSETS", matchers=["assets/"]),
        ImportGroup(label=CATCH_ALL_LABEL),
    ]


class FormatterConfig(BaseModel):
    header_char: str = "="
    column_width: int = Field(default=120, gt=0)
    indent_type: Optional[Literal["spaces", "tabs"]] = None
    indent_size: Optional[int] = Field(default=None, ge=1, le=8)
    expand_methods: bool = True
    reflow_imports: bool = True
    groups: List[ImportGroup] = Field(default_factory=default_groups)

    @field_validator("header_char")
    @classmethod
    def _single_char(cls, value: str) -> str:
        value = value.strip()
        if len(value) != 1:
            raise ValueError("header_char must be a single character")
        return value

    @model_validator(mode="after")
    def _ensure_catch_all(self) -> "FormatterConfig":
        if not self.groups or not self.groups[-1].is_catch_all:
            self.groups.append(ImportGroup(label=CATCH_ALL_LABEL))
        return self

    @property
    def indent_unit(self) -> str:
        if self.indent_type == "tabs":
            return "\t"
        return " " * (self.indent_size or DEFAULT_INDENT_SIZE)

    def resolve_indent(self, source: str) -> "FormatterConfig":
        """Fills unset indentation fields from the source's own indentation."""
        if self.indent_type is not None and (self.indent_type == "tabs" or self.indent_size is not None):
            return self
        style = detect_indent_style(source)
        update = {}
        if self.indent_type is None:
            update["indent_type"] = style.type
        if self.indent_size is None:
            update["indent_size"] = style.size if style.type == "spaces" else DEFAULT_INDENT_SIZE
        return self.model_copy(update=update)


@dataclass
class ImportStatement:
    text: str
    leading_comments: List[str] = field(default_factory=list)
    trailing_comment: str = ""

    @property
    def normalized(self) -> str:
        """Single-line form used for matching and width checks."""
        return re.sub(r"\s*\n\s*", " ", self.text).strip()

    @property
    def module(self) -> str:
        normalized = self.normalized
        match = _MODULE_PATTERN.search(normalized) or _SIDE_EFFECT_PATTERN.search(normalized)
        return match.group(2) if match else ""


@dataclass
class ImportRegion:
    start_line: int
    end_line: int
    statements: List[ImportStatement] = field(default_factory=list)


@dataclass
class DeclarationRegion:
    start_line: int
    end_line: int


@dataclass
class Property:
    """One member of a declaration body."""

    lines: List[str]
    kind: str
    key: str = ""
    optional: bool = False
    generics: str = ""
    value: str = ""


@dataclass
class Parameter:
    name: str
    optional: bool = False
    type: str = ""


@dataclass
class FormatResult:
    source: str
    modified: bool
    errors: List[str] = field(default_factory=list)


@dataclass
class FormatResults:
    results: List[FormatResult]
    total_files: int
    modified_files: int
    error_files: int
