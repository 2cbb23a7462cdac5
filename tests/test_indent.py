from serisei_formatter.indent import IndentStyle, detect_indent_style, leading_whitespace
from serisei_formatter.models import FormatterConfig


def test_detects_two_spaces():
    source = "interface A {\n  a: string;\n  b: {\n    c: number;\n  };\n}\n"
    assert detect_indent_style(source) == IndentStyle("spaces", 2)


def test_detects_tabs():
    source = "interface A {\n\ta: string;\n\tb: string;\n}\n"
    style = detect_indent_style(source)
    assert style.type == "tabs"
    assert style.unit == "\t"


def test_defaults_to_four_spaces():
    assert detect_indent_style("type A = string;\n") == IndentStyle("spaces", 4)


def test_odd_widths():
    assert detect_indent_style("a\n   b\n      c\n").size == 3
    assert detect_indent_style("a\n     b\n").size == 4


def test_block_comment_continuations_are_ignored():
    source = "/**\n * doc\n */\ninterface A {\n    a: string;\n}\n"
    assert detect_indent_style(source) == IndentStyle("spaces", 4)


def test_config_resolves_only_unset_fields():
    source = "interface A {\n  a: string;\n}\n"
    assert FormatterConfig().resolve_indent(source).indent_unit == "  "
    assert FormatterConfig(indent_size=4).resolve_indent(source).indent_unit == "    "
    assert FormatterConfig(indent_type="tabs").resolve_indent(source).indent_unit == "\t"


def test_leading_whitespace():
    assert leading_whitespace("  \tx ") == "  \t"
