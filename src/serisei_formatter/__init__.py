from .engine import FormatterEngine
from .models import FormatResult, FormatResults, FormatterConfig, ImportGroup
from .rules import default_rules

__all__ = ["FormatterEngine", "FormatterConfig", "FormatResult", "FormatResults", "ImportGroup", "default_rules"]
