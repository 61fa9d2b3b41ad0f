"""
cli.py - Interface de linha de comando do compilador gorpc

Proposito:
    Expor comandos para gerar codigo a partir de templates, despejar a
    Definition em JSON e verificar a sintaxe de um arquivo isolado.
    Gerencia saida de diagnosticos e codigos de retorno.

Componentes principais:
    - main: grupo principal Click
    - generate/definition/check: comandos CLI

Dependencias criticas:
    - click: CLI
    - jinja2: TemplateError nos erros de renderizacao
    - gorpc.compiler: pipeline principal
    - gorpc.exporters: JSON e templates

Exemplo de uso:
    gorpc generate ./definitions -t client.ts.jinja -o client.gen.ts

Notas de implementacao:
    - Erros de definicao (com dicas de to_diagnostic), de template e de
      escrita saem em vermelho no stderr com codigo 1.
    - --verbose ativa logging em nivel DEBUG.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Tuple

import click
from jinja2 import TemplateError

from gorpc.ast.results import DefinitionError
from gorpc.compiler import DefinitionCompiler, parse_exclusions, parse_params
from gorpc.exporters.json_export import dumps_definition, export_json
from gorpc.exporters.template_export import render_template, write_output
from gorpc.parser.lexer import parse_file
from gorpc.parser.loader import parse_source

VERSION = "0.1.0"


HELP_EPILOG = (
    "Examples:\n"
    "  gorpc generate ./definitions -t client.ts.jinja -o client.gen.ts\n"
    "  gorpc generate ./definitions/... -t server.go.jinja -o out/ -p api\n"
    "  gorpc definition ./definitions --json definition.json\n"
    "  gorpc check ./definitions/greeter.go\n"
)


@click.group(invoke_without_command=True, epilog=HELP_EPILOG)
@click.option("--version", is_flag=True, help="Show version and exit")
@click.option("--verbose", "-v", is_flag=True, help="Log every compilation step")
@click.pass_context
def main(ctx, version: bool, verbose: bool) -> None:
    """gorpc - Compiler for Go RPC definitions"""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    if version:
        click.echo(f"gorpc v{VERSION}")
        raise SystemExit(0)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@main.command()
@click.argument("definitions", nargs=-1, required=True)
@click.option("--template", "-t", "template", type=click.Path(exists=True, dir_okay=False), required=True)
@click.option("--output", "-o", "output", type=click.Path(), help="Output file or existing directory")
@click.option("--package", "-p", "package_name", help="Override the package name")
@click.option("--ignore", "-i", "ignore", default="", help="Comma separated services to exclude")
@click.option("--parameters", default="", help="Template parameters as key:value,key:value")
def generate(
    definitions: Tuple[str, ...],
    template: str,
    output: Optional[str],
    package_name: Optional[str],
    ignore: str,
    parameters: str,
) -> None:
    """Compile definitions and render a template."""
    try:
        compiler = DefinitionCompiler(
            list(definitions),
            exclusions=parse_exclusions(ignore),
            params=parse_params(parameters),
            package_name=package_name,
        )
        result = compiler.compile()
        rendered = render_template(result.definition, Path(template))
        write_output(rendered, Path(output) if output else None)
    except DefinitionError as exc:
        _fail(exc)
    except TemplateError as exc:
        _fail(exc, f"template {template}")
    except OSError as exc:
        _fail(exc, "cannot write output")


@main.command()
@click.argument("definitions", nargs=-1, required=True)
@click.option("--json", "json_path", type=click.Path(), help="Write the definition to this file")
@click.option("--ignore", "-i", "ignore", default="", help="Comma separated services to exclude")
@click.option("--parameters", default="", help="Template parameters as key:value,key:value")
def definition(definitions: Tuple[str, ...], json_path: Optional[str], ignore: str, parameters: str) -> None:
    """Compile definitions and print them as JSON."""
    try:
        compiler = DefinitionCompiler(
            list(definitions),
            exclusions=parse_exclusions(ignore),
            params=parse_params(parameters),
        )
        result = compiler.compile()
    except DefinitionError as exc:
        _fail(exc)
        return

    if json_path:
        try:
            export_json(result.definition, Path(json_path))
        except OSError as exc:
            _fail(exc, "cannot write output")
    else:
        click.echo(dumps_definition(result.definition))


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
def check(file: str) -> None:
    """Validate the syntax of a single definition file."""
    try:
        parse_source(parse_file(Path(file)), file)
    except DefinitionError as exc:
        _fail(exc)
    click.echo(click.style("OK", fg="green"))


def _fail(exc: Exception, context: Optional[str] = None) -> None:
    if isinstance(exc, DefinitionError):
        message = exc.to_diagnostic()
    elif context:
        message = f"erro: {context}: {exc}"
    else:
        message = f"erro: {exc}"
    click.echo(click.style(message, fg="red"), err=True)
    raise SystemExit(1)


if __name__ == "__main__":
    main()
