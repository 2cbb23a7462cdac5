from serisei_formatter.engine import FormatterEngine
from serisei_formatter.models import FormatterConfig
from serisei_formatter.rules.blocks import delimit_properties, expand_lines, format_block_content, parse_property
from serisei_formatter.rules.declarations import DeclarationFormattingRule, format_declaration


def _format(source, config=None):
    config = config or FormatterConfig()
    engine = FormatterEngine(config)
    engine.add_rule(DeclarationFormattingRule(config))
    return engine.format_string(source)


def test_single_line_interface_is_expanded_and_aligned():
    result = _format("interface User { name: string; id: number; isActive?: boolean }\n")
    assert result.source.split("\n") == [
        "interface User {",
        "    name       : string;",
        "    id         : number;",
        "    isActive ? : boolean;",
        "}",
        "",
    ]
    assert result.modified is True


def test_colons_share_one_column():
    source = "export interface Props {\n  title: string;\n  onClose?: () => void;\n  count: number\n}\n"
    lines = _format(source).source.split("\n")
    body = lines[1:4]
    assert body == [
        "  title     : string;",
        "  onClose ? : () => void;",
        "  count     : number",
    ]
    assert len({line.index(":") for line in body}) == 1


def test_formatting_is_idempotent():
    source = "\n".join([
        "export interface Config {",
        "  server: { host: string;",
        "    port?: number };",
        "  // the display name",
        "  name: string; tags: string[];",
        "  load<T>(key: string, fallback?: T): Promise<T>;",
        "}",
        "",
    ])
    once = _format(source)
    twice = _format(once.source)
    assert twice.source == once.source
    assert twice.modified is False


def test_member_order_is_preserved():
    source = "interface A {\n    zeta: string;\n    alpha: number;\n    mid: boolean;\n}\n"
    lines = _format(source).source.split("\n")
    keys = [line.split(":")[0].strip() for line in lines[1:4]]
    assert keys == ["zeta", "alpha", "mid"]


def test_nested_object_is_formatted_recursively():
    source = "\n".join([
        "interface Config {",
        "    server: {",
        "        host: string;",
        "        port?: number;",
        "    };",
        "    name: string;",
        "}",
    ])
    assert _format(source).source.split("\n") == [
        "interface Config {",
        "    server : {",
        "        host   : string;",
        "        port ? : number;",
        "    };",
        "    name   : string;",
        "}",
    ]


def test_array_of_objects_keeps_its_suffix():
    source = "\n".join([
        "interface List {",
        "    items: {",
        "        id: string;",
        "    }[];",
        "}",
    ])
    assert _format(source).source.split("\n") == [
        "interface List {",
        "    items : {",
        "        id : string;",
        "    }[];",
        "}",
    ]


def test_fragments_on_brace_lines_get_their_own_line():
    source = "interface User { name: string;\n    isActive?: boolean }\n"
    assert _format(source).source.split("\n") == [
        "interface User {",
        "    name       : string;",
        "    isActive ? : boolean;",
        "}",
        "",
    ]


def test_blank_lines_are_dropped_and_comments_kept():
    source = "\n".join([
        "interface A {",
        "",
        "    /**",
        "      * the id",
        "      */",
        "    id: string;",
        "",
        "",
        "    value: number; // raw value",
        "}",
    ])
    assert _format(source).source.split("\n") == [
        "interface A {",
        "    /**",
        "     * the id",
        "     */",
        "    id    : string;",
        "    value : number; // raw value",
        "}",
    ]


def test_type_alias_object_body():
    source = "type Point = { x: number; y: number; label?: string };\n"
    assert _format(source).source.split("\n") == [
        "type Point = {",
        "    x       : number;",
        "    y       : number;",
        "    label ? : string;",
        "};",
        "",
    ]


def test_tabs_are_used_when_the_file_uses_them():
    source = "interface A {\n\tfoo: string;\n\tlonger: number;\n}\n"
    assert _format(source).source == "interface A {\n\tfoo    : string;\n\tlonger : number;\n}\n"


def test_configured_indent_wins_over_detection():
    source = "interface A {\n  a: string;\n}\n"
    result = _format(source, FormatterConfig(indent_type="spaces", indent_size=4))
    assert result.source == "interface A {\n    a : string;\n}\n"


def test_bodies_that_cannot_be_delimited_are_left_alone():
    lines = ["interface A {", "    a: string;"]
    assert format_declaration(["type A = string;"], FormatterConfig()) == ["type A = string;"]
    assert format_declaration(lines, FormatterConfig()) == lines


def test_declarations_sharing_a_line_with_code_are_skipped():
    source = "const a = 1; interface A { a: string }\n"
    result = _format(source)
    assert result.source == source


def test_index_signatures_and_quoted_keys_align():
    content = ["    [key: string]: unknown;", '    "content-type": string;', "    readonly id: number;"]
    assert format_block_content(content, "", FormatterConfig()) == [
        "    [key: string]  : unknown;",
        '    "content-type" : string;',
        "    readonly id    : number;",
    ]


def test_expand_lines_keeps_trailing_comment_with_last_member():
    assert expand_lines(["  a: string; b: number; // both"]) == ["  a: string;", "  b: number; // both"]
    assert expand_lines(["  /* a; b; */"]) == ["  /* a; b; */"]


def test_delimit_separator_less_members():
    lines = ["    a: string", "    b:", "      | 'x'", "      | 'y'", "    c?: number"]
    assert delimit_properties(lines) == [
        ["    a: string"],
        ["    b:", "      | 'x'", "      | 'y'"],
        ["    c?: number"],
    ]


def test_parse_property_kinds():
    assert parse_property(["// note"]).kind == "comment"
    assert parse_property(["get<T>(id: string): T;"]).kind == "method"
    field = parse_property(["label?: string;"])
    assert (field.kind, field.key, field.optional, field.value) == ("field", "label", True, "string;")
    assert parse_property(["-readonly [K in keyof T]: T[K];"]).kind == "unknown"
