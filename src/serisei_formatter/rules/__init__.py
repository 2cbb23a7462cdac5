from typing import List

from ..models import FormatterConfig
from .base import FormattingContext, FormattingRule, Transformation
from .declarations import DeclarationFormattingRule, format_declaration
from .imports import ImportGroupingRule, create_header, group_and_format_imports, is_generated_header

__all__ = [
    "FormattingRule",
    "FormattingContext",
    "Transformation",
    "ImportGroupingRule",
    "DeclarationFormattingRule",
    "create_header",
    "format_declaration",
    "group_and_format_imports",
    "is_generated_header",
    "default_rules",
]


def default_rules(config: FormatterConfig) -> List[FormattingRule]:
    return [ImportGroupingRule(config), DeclarationFormattingRule(config)]
