"""
test_cli.py - Testes da interface de linha de comando

Proposito:
    Validar os comandos generate, definition e check com o CliRunner do
    click, incluindo codigos de saida e mensagens de erro.
"""

from __future__ import annotations

import json
from pathlib import Path

from click.testing import CliRunner

from gorpc.cli import VERSION, main


def test_version():
    result = CliRunner().invoke(main, ["--version"])
    assert result.exit_code == 0
    assert VERSION in result.output


def test_check_ok(module_dir: Path):
    result = CliRunner().invoke(main, ["check", str(module_dir / "pleasantries.go")])
    assert result.exit_code == 0
    assert "OK" in result.output


def test_check_syntax_error(fixtures_dir: Path):
    result = CliRunner().invoke(main, ["check", str(fixtures_dir / "broken" / "broken.go")])
    assert result.exit_code == 1
    assert "broken.go:3" in result.output


def test_definition_to_stdout(module_dir: Path):
    result = CliRunner().invoke(main, ["definition", str(module_dir), "-i", "Welcomer"])
    assert result.exit_code == 0
    data = json.loads(result.output)
    assert [service["name"] for service in data["services"]] == ["GreeterService"]


def test_definition_to_file(module_dir: Path, tmp_path: Path):
    target = tmp_path / "definition.json"
    result = CliRunner().invoke(
        main,
        ["definition", str(module_dir), "--json", str(target), "--parameters", "target:web"],
    )
    assert result.exit_code == 0
    data = json.loads(target.read_text(encoding="utf-8"))
    assert data["params"] == {"target": "web"}


def test_generate_to_file(module_dir: Path, tmp_path: Path):
    template = tmp_path / "names.jinja"
    template.write_text(
        "package {{ packageName }}\n{% for s in services %}{{ s.name }}\n{% endfor %}",
        encoding="utf-8",
    )
    output = tmp_path / "names.txt"
    result = CliRunner().invoke(
        main,
        ["generate", str(module_dir), "-t", str(template), "-o", str(output), "-p", "greetings"],
    )
    assert result.exit_code == 0
    assert output.read_text(encoding="utf-8") == "package greetings\nGreeterService\nWelcomer\n"


def test_generate_split_into_directory(module_dir: Path, tmp_path: Path):
    template = tmp_path / "split.jinja"
    template.write_text(
        "{% for s in services %}{{ begin_file(s.name, '.txt') }}{{ s.name }}\n{{ end_file(s.name, '.txt') }}{% endfor %}",
        encoding="utf-8",
    )
    out_dir = tmp_path / "out"
    out_dir.mkdir()
    result = CliRunner().invoke(main, ["generate", str(module_dir), "-t", str(template), "-o", str(out_dir)])
    assert result.exit_code == 0
    assert (out_dir / "GreeterService.txt").read_text(encoding="utf-8") == "GreeterService"
    assert (out_dir / "Welcomer.txt").read_text(encoding="utf-8") == "Welcomer"


def test_generate_malformed_parameters(module_dir: Path, tmp_path: Path):
    template = tmp_path / "empty.jinja"
    template.write_text("", encoding="utf-8")
    result = CliRunner().invoke(
        main,
        ["generate", str(module_dir), "-t", str(template), "--parameters", "broken"],
    )
    assert result.exit_code == 1
    assert "malformed params" in result.output


def test_definition_compile_error(make_module):
    root = make_module({"api/api.go": "package api\n\ntype Thing struct {\n\tname string\n}\n"})
    result = CliRunner().invoke(main, ["definition", str(root / "api")])
    assert result.exit_code == 1
    assert "name must be exported" in result.output


def test_generate_template_error(make_module, tmp_path: Path):
    root = make_module({"api/api.go": "package api\n\ntype Thing struct {\n\tName string\n}\n"})
    template = tmp_path / "first.jinja"
    template.write_text("{{ services[0].name }}", encoding="utf-8")
    result = CliRunner().invoke(main, ["generate", str(root / "api"), "-t", str(template)])
    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)
    assert "first.jinja" in result.output


def test_generate_template_syntax_error(module_dir: Path, tmp_path: Path):
    template = tmp_path / "broken.jinja"
    template.write_text("{% for s in services %}", encoding="utf-8")
    result = CliRunner().invoke(main, ["generate", str(module_dir), "-t", str(template)])
    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)


def test_generate_unwritable_output(module_dir: Path, tmp_path: Path):
    template = tmp_path / "names.jinja"
    template.write_text("{{ packageName }}\n", encoding="utf-8")
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    output = blocker / "out.txt"
    result = CliRunner().invoke(main, ["generate", str(module_dir), "-t", str(template), "-o", str(output)])
    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)
    assert "cannot write output" in result.output


def test_errors_include_diagnostic_hint(make_module):
    root = make_module(
        {
            "api/api.go": (
                "package api\n"
                "\n"
                "type Service interface {\n"
                "\tDo(Request, Request) Response\n"
                "}\n"
                "\n"
                "type Request struct{}\n"
                "\n"
                "type Response struct{}\n"
            ),
        }
    )
    result = CliRunner().invoke(main, ["definition", str(root / "api")])
    assert result.exit_code == 1
    assert "Assinatura esperada: Do(MetodoRequest) MetodoResponse" in result.output
