"""
test_exporters.py - Testes dos exportadores (JSON, templates, divisao)

Proposito:
    Validar a serializacao JSON da Definition, as funcoes auxiliares dos
    templates, a renderizacao Jinja2 e a divisao da saida em arquivos.
"""

from __future__ import annotations

import io
import json
from pathlib import Path

import pytest

from gorpc.exporters.file_splitter import SplitFile, begin_file, end_file, split_files
from gorpc.exporters.json_export import dumps_definition, export_json
from gorpc.exporters.template_export import render_template, write_output
from gorpc.exporters.template_helpers import (
    format_comment_html,
    format_comment_line,
    format_comment_text,
    format_tags,
    to_json,
)

# =============================================================================
# JSON
# =============================================================================


def test_dumps_definition(compiled):
    data = json.loads(dumps_definition(compiled.definition))
    assert data["packageName"] == "pleasantries"
    assert [s["name"] for s in data["services"]] == ["GreeterService", "Welcomer"]
    response = next(o for o in data["objects"] if o["name"] == "GreetResponse")
    assert response["fields"][-1]["name"] == "Error"
    assert response["fields"][-1]["omitEmpty"] is True


def test_export_json(compiled, tmp_path: Path):
    target = tmp_path / "nested" / "definition.json"
    export_json(compiled.definition, target)
    data = json.loads(target.read_text(encoding="utf-8"))
    assert data["imports"]["time"] == "time"


# =============================================================================
# Divisao em arquivos
# =============================================================================


def test_split_single_file():
    assert split_files(">>>BEGIN a.txt\nHELLO\n<<<END a.txt\n") == [
        SplitFile(filename="a.txt", content="HELLO")
    ]


def test_split_mismatched_names_drops_segment():
    assert split_files(">>>BEGIN a.txt\nHELLO\n<<<END b.txt\n") == []


def test_split_multiple_files_and_ignores_outside_text():
    content = (
        "preamble\n"
        + begin_file("one.ts")
        + "first\nfile\n"
        + end_file("one.ts")
        + "between\n"
        + begin_file("two", ".ts")
        + "second\n"
        + end_file("two", ".ts")
    )
    assert split_files(content) == [
        SplitFile(filename="one.ts", content="first\nfile"),
        SplitFile(filename="two.ts", content="second"),
    ]


def test_split_rejects_invalid_names():
    assert split_files(">>>BEGIN a/b.txt\nHELLO\n<<<END a/b.txt\n") == []


# =============================================================================
# Funcoes auxiliares
# =============================================================================


def test_format_comment_text_joins_lines():
    assert format_comment_text("What about\nnew lines?") == "// What about new lines?\n"


def test_format_comment_text_wraps_long_paragraphs():
    text = " ".join(["word"] * 30)
    lines = format_comment_text(text).splitlines()
    assert len(lines) > 1
    assert all(line.startswith("// ") for line in lines)
    assert all(len(line) <= 83 for line in lines)


def test_format_comment_text_separates_paragraphs():
    assert format_comment_text("First.\n\nSecond.") == "// First.\n//\n// Second.\n"


def test_format_comment_line():
    assert format_comment_line("  What about\nnew lines?  ") == "What about new lines?"


def test_format_comment_html():
    assert format_comment_html("Use <b> tags\nwisely.") == "<p>\nUse &lt;b&gt; tags\nwisely.\n</p>\n"


def test_format_comment_html_preformatted_block():
    html = format_comment_html("Example:\n\n    x := 1")
    assert html == "<p>\nExample:\n</p>\n<pre>x := 1\n</pre>\n"


def test_format_tags():
    assert format_tags('json:"name"', 'json:"other" db:"x"') == '`json:"other" db:"x"`'
    assert format_tags("") == ""


def test_to_json_uses_tabs(compiled):
    text = to_json({"a": [1]})
    assert text == '{\n\t"a": [\n\t\t1\n\t]\n}'
    data = json.loads(to_json(compiled.definition.object("Person")))
    assert data["name"] == "Person"


# =============================================================================
# Templates
# =============================================================================

SERVICES_TEMPLATE = """\
// Package {{ packageName }}
{% for service in services %}
{{ format_comment_text(service.comment) }}service {{ service.name }}
{%- for method in service.methods %}
  {{ method.name | camelize_down }}({{ method.inputObject.typeName }}) {{ method.outputObject.typeName }}
{%- endfor %}
{% endfor %}
{%- for object in objects if is_output(object.name) %}
output {{ object.name }}
{%- endfor %}
version={{ params.version }}
"""


def test_render_template(compiled, tmp_path: Path):
    compiled.definition.params["version"] = "3"
    template = tmp_path / "services.txt.jinja"
    template.write_text(SERVICES_TEMPLATE, encoding="utf-8")

    rendered = render_template(compiled.definition, template)
    assert rendered.startswith("// Package pleasantries\n")
    assert "// GreeterService is a polite API. You will love it.\nservice GreeterService" in rendered
    assert "  greet(GreetRequest) GreetResponse" in rendered
    assert "  getGreetings(GetGreetingsRequest) GetGreetingsResponse" in rendered
    assert "output GreetResponse" in rendered
    assert "output GreetRequest" not in rendered
    assert rendered.endswith("version=3\n")


def test_render_template_with_definition_object(compiled, tmp_path: Path):
    template = tmp_path / "objects.jinja"
    template.write_text(
        "{% for obj in definition.objects %}{{ obj.name }} {{ format_tags(obj.fields[0].tag) }}\n{% endfor %}",
        encoding="utf-8",
    )
    rendered = render_template(compiled.definition, template)
    assert 'Person `json:"name"`\n' in rendered
    assert "GreetRequest \n" in rendered


def test_write_output_to_stdout():
    buffer = io.StringIO()
    assert write_output("hello\n", None, stdout=buffer) == []
    assert buffer.getvalue() == "hello\n"


def test_write_output_to_file(tmp_path: Path):
    target = tmp_path / "gen" / "client.ts"
    assert write_output("const x = 1\n", target) == [target]
    assert target.read_text(encoding="utf-8") == "const x = 1\n"


def test_write_output_splits_into_directory(tmp_path: Path):
    rendered = (
        begin_file("a.txt") + "A\n" + end_file("a.txt")
        + begin_file("..") + "escape\n" + end_file("..")
        + begin_file("b.txt") + "B\n" + end_file("b.txt")
    )
    written = write_output(rendered, tmp_path)
    assert written == [tmp_path / "a.txt", tmp_path / "b.txt"]
    assert (tmp_path / "a.txt").read_text(encoding="utf-8") == "A"
    assert (tmp_path / "b.txt").read_text(encoding="utf-8") == "B"


@pytest.mark.parametrize(
    "name", ["camelize_up", "has_prefix", "has_suffix", "hasPrefix", "hasSuffix", "contains"]
)
def test_string_helpers_available_in_templates(compiled, tmp_path: Path, name: str):
    template = tmp_path / "helpers.jinja"
    calls = {
        "camelize_up": "{{ camelize_up('greet') }}",
        "has_prefix": "{{ has_prefix('GreetRequest', 'Greet') }}",
        "has_suffix": "{{ has_suffix('GreetRequest', 'Request') }}",
        "hasPrefix": "{{ hasPrefix('GreetRequest', 'Greet') }}",
        "hasSuffix": "{{ 'GreetRequest' | hasSuffix('Request') }}",
        "contains": "{{ contains('GreetRequest', 'tRe') }}",
    }
    template.write_text(calls[name], encoding="utf-8")
    expected = "Greet" if name == "camelize_up" else "True"
    assert render_template(compiled.definition, template) == expected
