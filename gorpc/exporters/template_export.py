"""
template_export.py - Renderizacao de templates Jinja2 sobre a Definition

Proposito:
    Carregar um template de texto, renderiza-lo com a Definition compilada
    e gravar a saida em stdout, em um arquivo ou em varios arquivos de um
    diretorio (via marcadores >>>BEGIN/<<<END).

Componentes principais:
    - create_environment: Environment com helpers registrados
    - render_template: Definition + caminho do template -> texto
    - write_output: destino da saida renderizada

Dependencias criticas:
    - jinja2: motor de templates
    - gorpc.exporters.template_helpers: funcoes disponiveis nos templates
    - gorpc.exporters.file_splitter: recorte em varios arquivos

Exemplo de uso:
    rendered = render_template(result.definition, Path("client.ts.jinja"))
    write_output(rendered, Path("out/"))

Notas de implementacao:
    - O contexto expoe as chaves camelCase de Definition.to_dict() e o
      proprio objeto em `definition`.
    - autoescape desligado: a saida e codigo-fonte, nao HTML.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import List, Optional, TextIO

from jinja2 import Environment, FileSystemLoader

from gorpc.ast.definition import Definition
from gorpc.exporters.file_splitter import split_files
from gorpc.exporters.template_helpers import build_helpers

logger = logging.getLogger(__name__)


def create_environment(definition: Definition, template_dir: Path) -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(template_dir)),
        autoescape=False,
        keep_trailing_newline=True,
    )
    helpers = build_helpers(definition)
    env.globals.update(helpers)
    env.filters.update(helpers)
    return env


def render_template(definition: Definition, template_path: Path) -> str:
    """
    Renderiza um template com a Definition.

    Args:
        definition: Definition compilada
        template_path: Caminho do arquivo de template

    Returns:
        Texto renderizado
    """
    if not isinstance(template_path, Path):
        template_path = Path(template_path)
    env = create_environment(definition, template_path.parent)
    template = env.get_template(template_path.name)
    context = definition.to_dict()
    context["definition"] = definition
    return template.render(**context)


def write_output(rendered: str, output: Optional[Path], stdout: Optional[TextIO] = None) -> List[Path]:
    """
    Grava a saida renderizada.

    Sem destino a saida vai para stdout; um diretorio existente recebe um
    arquivo por par >>>BEGIN/<<<END; qualquer outro caminho e gravado como
    arquivo unico.

    Returns:
        Arquivos gravados
    """
    if output is None:
        (stdout or sys.stdout).write(rendered)
        return []

    if not isinstance(output, Path):
        output = Path(output)

    if output.is_dir():
        written: List[Path] = []
        for split in split_files(rendered):
            if split.filename in (".", ".."):
                logger.warning("skipping invalid output file name %r", split.filename)
                continue
            target = output / split.filename
            target.write_text(split.content, encoding="utf-8")
            logger.info("wrote %s", target)
            written.append(target)
        return written

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(rendered, encoding="utf-8")
    logger.info("wrote %s", output)
    return [output]
