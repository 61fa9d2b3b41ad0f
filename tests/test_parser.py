"""
test_parser.py - Testes de parsing dos arquivos de definicao

Proposito:
    Validar a gramatica, a insercao automatica de ponto-e-virgula, a
    associacao de comentarios de documentacao e as mensagens de erro.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from gorpc.api import compile_string
from gorpc.ast.nodes import (
    ArrayTypeExpr,
    ChanTypeExpr,
    FuncTypeExpr,
    InterfaceTypeExpr,
    MapTypeExpr,
    NamedTypeExpr,
    PointerTypeExpr,
    SliceTypeExpr,
    StructTypeExpr,
)
from gorpc.ast.results import LoadError
from gorpc.parser.lexer import parse_file, parse_string
from gorpc.parser.literals import unquote
from gorpc.parser.transformer import comment_group_text


def _types(node):
    return {spec.name: spec for spec in node.types}


def test_parse_package_and_imports():
    node = compile_string(
        "package demo\n"
        "\n"
        'import "time"\n'
        "import (\n"
        '\tfmt "fmt"\n'
        '\t. "example.com/dot"\n'
        '\t_ "example.com/side"\n'
        ")\n"
    )
    assert node.package == "demo"
    assert [imp.path for imp in node.imports] == [
        "time",
        "fmt",
        "example.com/dot",
        "example.com/side",
    ]
    assert [imp.alias for imp in node.imports] == [None, "fmt", ".", "_"]


def test_parse_struct_fields_and_tags():
    node = compile_string(
        "package demo\n"
        "\n"
        "type Person struct {\n"
        '\tName, Nickname string `json:"name"`\n'
        '\tAge int "db:\\"age\\""\n'
        "\tAddress\n"
        "\t*Profile\n"
        "\tCreated time.Time\n"
        "}\n"
    )
    person = _types(node)["Person"]
    assert isinstance(person.type, StructTypeExpr)
    fields = person.type.fields
    assert [f.name for f in fields] == ["Name", "Nickname", "Age", "Address", "Profile", "Created"]
    assert fields[0].tag == 'json:"name"'
    assert fields[1].tag == 'json:"name"'
    assert fields[2].tag == 'db:"age"'
    assert fields[3].embedded and isinstance(fields[3].type, NamedTypeExpr)
    assert fields[4].embedded and isinstance(fields[4].type, PointerTypeExpr)
    assert fields[5].type.package == "time"
    assert str(fields[5].type) == "time.Time"


def test_parse_type_expressions():
    node = compile_string(
        "package demo\n"
        "\n"
        "type Everything struct {\n"
        "\tA *string\n"
        "\tB []int\n"
        "\tC [4]byte\n"
        "\tD map[string][]int\n"
        "\tE chan bool\n"
        "\tF func(int, string) error\n"
        "\tG interface{}\n"
        "}\n"
    )
    fields = _types(node)["Everything"].type.fields
    expected = [PointerTypeExpr, SliceTypeExpr, ArrayTypeExpr, MapTypeExpr, ChanTypeExpr, FuncTypeExpr, InterfaceTypeExpr]
    assert [type(f.type) for f in fields] == expected
    assert [str(f.type) for f in fields] == [
        "*string",
        "[]int",
        "[4]byte",
        "map[string][]int",
        "chan bool",
        "func(int, string) error",
        "interface{}",
    ]


def test_parse_interface_methods_and_embeds():
    node = compile_string(
        "package demo\n"
        "\n"
        "type Greeter interface {\n"
        "\tBase\n"
        "\tGreet(GreetRequest) GreetResponse\n"
        "\tGreetMany(ctx context.Context, a, b Request) (*Response, error)\n"
        "}\n"
    )
    greeter = _types(node)["Greeter"].type
    assert isinstance(greeter, InterfaceTypeExpr)
    assert [e.name for e in greeter.embeds] == ["Base"]
    assert [m.name for m in greeter.methods] == ["Greet", "GreetMany"]

    greet = greeter.methods[0].signature
    assert len(greet.params) == 1 and len(greet.results) == 1
    assert str(greet.params[0].type) == "GreetRequest"

    many = greeter.methods[1].signature
    assert [p.name for p in many.params] == ["ctx", "a", "b"]
    assert str(many.params[1].type) == "Request"
    assert [str(r.type) for r in many.results] == ["*Response", "error"]


def test_parse_variadic_parameter():
    node = compile_string(
        "package demo\n"
        "\n"
        "type S interface {\n"
        "\tSum(values ...int) int\n"
        "}\n"
    )
    param = _types(node)["S"].type.methods[0].signature.params[0]
    assert param.variadic
    assert param.name == "values"


def test_mixed_named_and_unnamed_parameters():
    with pytest.raises(LoadError) as exc:
        compile_string(
            "package demo\n"
            "\n"
            "type S interface {\n"
            "\tDo(a int, string) int\n"
            "}\n"
        )
    assert "mixed named and unnamed parameters" in str(exc.value)


def test_parse_type_group_and_alias():
    node = compile_string(
        "package demo\n"
        "\n"
        "type (\n"
        "\tA struct{}\n"
        "\tB = A\n"
        ")\n"
    )
    types = _types(node)
    assert not types["A"].alias
    assert types["B"].alias
    assert str(types["B"].type) == "A"


def test_func_const_and_var_declarations_are_skipped():
    node = compile_string(
        "package demo\n"
        "\n"
        "const (\n"
        "\tFirst = iota\n"
        "\tSecond\n"
        ")\n"
        "\n"
        "var names = []string{\"a\", \"b\"}\n"
        "\n"
        "func (s *Server) Greet(r GreetRequest) (GreetResponse, error) {\n"
        "\tif r.Name == \"\" {\n"
        "\t\treturn GreetResponse{}, nil\n"
        "\t}\n"
        "\tcount++\n"
        "\treturn GreetResponse{Greeting: \"Hello \" + r.Name}, nil\n"
        "}\n"
        "\n"
        "type Kept struct {\n"
        "\tName string\n"
        "}\n"
    )
    assert [spec.name for spec in node.types] == ["Kept"]


def test_doc_comments_are_attached():
    node = compile_string(
        "package demo\n"
        "\n"
        "// Detached comment.\n"
        "\n"
        "// Thing is documented.\n"
        "// second: 2\n"
        "type Thing struct {\n"
        "\t// Name is documented too.\n"
        "\tName string // trailing comment is not documentation\n"
        "\tAge  int\n"
        "}\n"
        "\n"
        "type Service interface {\n"
        "\t/* Do does it. */\n"
        "\tDo(Thing) Thing\n"
        "}\n"
    )
    types = _types(node)
    assert types["Thing"].doc == "Thing is documented.\nsecond: 2"
    fields = types["Thing"].type.fields
    assert fields[0].doc == "Name is documented too."
    assert fields[1].doc == ""
    assert types["Service"].type.methods[0].doc == "Do does it."
    assert types["Service"].doc == ""


def test_single_spec_group_uses_group_doc():
    node = compile_string(
        "package demo\n"
        "\n"
        "// Grouped is documented on the group.\n"
        "type (\n"
        "\tGrouped struct{}\n"
        ")\n"
    )
    assert node.types[0].doc == "Grouped is documented on the group."


def test_comment_group_text_drops_directives(base_location):
    from gorpc.ast.nodes import CommentNode

    group = [
        CommentNode(text="// Greet says hello.", location=base_location, end_line=1, standalone=True),
        CommentNode(text="//go:generate stringer", location=base_location, end_line=2, standalone=True),
        CommentNode(text="//", location=base_location, end_line=3, standalone=True),
        CommentNode(text="//   indented", location=base_location, end_line=4, standalone=True),
    ]
    assert comment_group_text(group) == "Greet says hello.\n\n  indented"


def test_semicolon_inserted_at_end_of_file():
    node = compile_string("package demo\n\ntype A struct{ Name string }")
    assert node.types[0].name == "A"


def test_unquote_literals():
    assert unquote('"a\\tb\\u00e9"') == "a\tbé"
    assert unquote("`raw \\n`") == "raw \\n"


def test_syntax_error_keyword_typo(fixtures_dir: Path):
    with pytest.raises(LoadError) as exc:
        parse_file(fixtures_dir / "broken" / "broken.go")
    error = exc.value
    assert error.location.line == 3
    assert "tpye" in error.message
    assert "'type'" in error.message


def test_syntax_error_generics():
    with pytest.raises(LoadError) as exc:
        parse_string("package demo\n\ntype Page[T any] struct{}\n", "page.go")
    assert "generics" in exc.value.message


def test_syntax_error_missing_package():
    with pytest.raises(LoadError) as exc:
        parse_string("type A struct{}\n", "nopkg.go")
    assert "package" in exc.value.message
    assert exc.value.location.line == 1


def test_syntax_error_unexpected_character():
    with pytest.raises(LoadError) as exc:
        parse_string("package demo\n\ntype A struct {\n\tName string @\n}\n", "chars.go")
    assert exc.value.location.line == 4


def test_missing_file_is_load_error(tmp_path: Path):
    with pytest.raises(LoadError) as exc:
        parse_file(tmp_path / "missing.go")
    assert "cannot read" in exc.value.message


def test_invalid_utf8_is_load_error(tmp_path: Path):
    source = tmp_path / "latin1.go"
    source.write_bytes(b"package demo\n\n// caf\xe9\ntype A struct{}\n")
    with pytest.raises(LoadError) as exc:
        parse_file(source)
    assert "invalid UTF-8" in exc.value.message
    assert "0xe9" in exc.value.message
    assert exc.value.location.line == 3
    assert exc.value.location.column == 7


def test_leading_byte_order_mark_is_ignored(tmp_path: Path):
    node = compile_string("\ufeffpackage demo\n\ntype A struct{}\n")
    assert node.package == "demo"
    assert node.types[0].name == "A"

    source = tmp_path / "bom.go"
    source.write_bytes(b"\xef\xbb\xbfpackage demo\n\ntype B struct{}\n")
    assert parse_file(source).source.startswith("package demo")
