from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional

from ..models import DeclarationRegion, FormatterConfig, ImportRegion


@dataclass
class Transformation:
    """Replaces the inclusive line range ``start_line..end_line`` with ``new_lines``."""

    start_line: int
    end_line: int
    new_lines: List[str]
    priority: int = 0


@dataclass
class FormattingContext:
    source: str
    lines: List[str]
    file_path: str = ""
    imports: Optional[ImportRegion] = None
    declarations: List[DeclarationRegion] = field(default_factory=list)


class FormattingRule(ABC):
    """A rule turns the regions found in a file into line transformations."""

    def __init__(self, config: FormatterConfig):
        self.config = config

    @property
    @abstractmethod
    def rule_id(self) -> str:
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @abstractmethod
    def analyze(self, context: FormattingContext) -> List[Transformation]:
        """Return the transformations this rule wants applied."""
        pass
