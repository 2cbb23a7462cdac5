from serisei_formatter.models import FormatterConfig
from serisei_formatter.parser import TypeScriptParser
from serisei_formatter.rules.imports import is_generated_header


def _locate(source, path="file.ts"):
    parser = TypeScriptParser.for_path(path)
    result = parser.parse_string(source)
    lines = source.split("\n")
    config = FormatterConfig()
    imports = parser.locate_imports(result, lines, lambda line: is_generated_header(line, config))
    return imports, parser.locate_declarations(result)


def test_import_block_and_trailing_comment():
    source = 'import a from "a"; // keep\nimport { b } from "./b";\n\nconst x = 1;'
    imports, _ = _locate(source)
    assert (imports.start_line, imports.end_line) == (0, 2)
    assert [s.text for s in imports.statements] == ['import a from "a";', 'import { b } from "./b";']
    assert imports.statements[0].trailing_comment == "// keep"
    assert imports.statements[1].module == "./b"


def test_import_block_stops_at_first_other_statement():
    source = 'import a from "a";\nconst x = 1;\nimport b from "b";'
    imports, _ = _locate(source)
    assert (imports.start_line, imports.end_line) == (0, 0)
    assert len(imports.statements) == 1


def test_no_imports():
    imports, declarations = _locate("const x = 1;")
    assert imports is None
    assert declarations == []


def test_import_sharing_a_line_with_code_is_skipped():
    imports, _ = _locate('import a from "a"; const x = 1;')
    assert imports is None


def test_declarations_are_found():
    source = "\n".join([
        "export interface A {",
        "  a: string;",
        "}",
        "const x = 1;",
        "type B = string;",
        "function f() {",
        "  interface Inner { a: string }",
        "}",
    ])
    _, declarations = _locate(source)
    assert [(d.start_line, d.end_line) for d in declarations] == [(0, 2), (4, 4)]


def test_declaration_followed_by_a_comment_is_kept():
    _, declarations = _locate("interface A { a: string } // note")
    assert [(d.start_line, d.end_line) for d in declarations] == [(0, 0)]


def test_tsx_grammar_for_tsx_files():
    assert TypeScriptParser.for_path("App.tsx").tsx is True
    assert TypeScriptParser.for_path("app.ts").tsx is False
    source = 'import React from "react";\nconst App = () => <div />;\ninterface P { a: string }'
    imports, declarations = _locate(source, "App.tsx")
    assert imports.end_line == 0
    assert [(d.start_line, d.end_line) for d in declarations] == [(2, 2)]
