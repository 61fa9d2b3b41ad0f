"""
template_helpers.py - Funcoes auxiliares disponiveis nos templates

Proposito:
    Reunir as funcoes registradas no ambiente Jinja2: conversao de caixa,
    JSON, reformatacao de comentarios, recomposicao de tags, marcadores
    de arquivo e testes de texto.

Componentes principais:
    - format_comment_line/format_comment_text/format_comment_html
    - format_tags: mescla tags e devolve entre crases
    - to_json: JSON indentado com tabulacao
    - build_helpers: dicionario nome -> funcao para uma Definition

Dependencias criticas:
    - markupsafe: escape HTML de comentarios
    - textwrap: quebra de paragrafos
    - gorpc.semantic.tags: leitura e escrita de tags

Exemplo de uso:
    helpers = build_helpers(definition)
    helpers["format_comment_text"]("Greets a user.")  # "// Greets a user.\\n"
"""

from __future__ import annotations

import json
import textwrap
from typing import Any, Callable, Dict, List, Tuple

from markupsafe import escape

from gorpc.ast.definition import Definition
from gorpc.exporters.file_splitter import begin_file, end_file
from gorpc.semantic.naming import camelize_down, camelize_up
from gorpc.semantic.tags import merge_tags, tag_string

COMMENT_WIDTH = 80
COMMENT_LINE_WIDTH = 2000


def _blocks(text: str) -> List[Tuple[bool, List[str]]]:
    """
    Divide o texto em blocos separados por linhas em branco.

    Returns:
        Lista de (preformatado, linhas); bloco preformatado tem todas as
        linhas indentadas e e mantido literalmente.
    """
    blocks: List[Tuple[bool, List[str]]] = []
    current: List[str] = []
    for line in text.strip("\n").splitlines() + [""]:
        if line.strip():
            current.append(line.rstrip())
            continue
        if current:
            preformatted = all(item[:1] in (" ", "\t") for item in current)
            blocks.append((preformatted, current))
            current = []
    return blocks


def _to_text(text: str, prefix: str, width: int) -> str:
    out: List[str] = []
    for index, (preformatted, lines) in enumerate(_blocks(text)):
        if index:
            out.append(prefix.rstrip())
        if preformatted:
            out.extend(prefix + line for line in textwrap.dedent("\n".join(lines)).splitlines())
            continue
        paragraph = " ".join(line.strip() for line in lines)
        wrapped = textwrap.wrap(paragraph, width=width, break_long_words=False, break_on_hyphens=False)
        out.extend(prefix + line for line in wrapped)
    return "".join(line + "\n" for line in out)


def format_comment_line(text: str) -> str:
    """Comentario em uma linha por paragrafo, sem espacos nas bordas."""
    return _to_text(text, "", COMMENT_LINE_WIDTH).strip()


def format_comment_text(text: str) -> str:
    """Comentario quebrado em 80 colunas com prefixo '// '."""
    return _to_text(text, "// ", COMMENT_WIDTH)


def format_comment_html(text: str) -> str:
    out: List[str] = []
    for preformatted, lines in _blocks(text):
        if preformatted:
            body = textwrap.dedent("\n".join(lines))
            out.append(f"<pre>{escape(body)}\n</pre>\n")
        else:
            body = "\n".join(line.strip() for line in lines)
            out.append(f"<p>\n{escape(body)}\n</p>\n")
    return "".join(out)


def format_tags(*tags: str) -> str:
    """
    Mescla tags de struct; uma chave repetida substitui a anterior.

    Example:
        format_tags('json:"id"', 'db:"id"') -> '`json:"id" db:"id"`'
    """
    merged = tag_string(merge_tags(*tags))
    if not merged:
        return ""
    return f"`{merged}`"


def _json_default(value: Any) -> Any:
    if hasattr(value, "to_dict"):
        return value.to_dict()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def to_json(value: Any) -> str:
    return json.dumps(value, indent="\t", ensure_ascii=False, default=_json_default)


def contains(text: str, sub: str) -> bool:
    return sub in text


def has_prefix(text: str, prefix: str) -> bool:
    return text.startswith(prefix)


def has_suffix(text: str, suffix: str) -> bool:
    return text.endswith(suffix)


def build_helpers(definition: Definition) -> Dict[str, Callable[..., Any]]:
    """Funcoes registradas como globals e filtros do ambiente de templates."""
    return {
        "camelize_down": camelize_down,
        "camelize_up": camelize_up,
        "json": to_json,
        "format_comment_line": format_comment_line,
        "format_comment_text": format_comment_text,
        "format_comment_html": format_comment_html,
        "format_tags": format_tags,
        "begin_file": begin_file,
        "end_file": end_file,
        "contains": contains,
        "has_prefix": has_prefix,
        "has_suffix": has_suffix,
        # grafia camelCase aceita por templates existentes
        "hasPrefix": has_prefix,
        "hasSuffix": has_suffix,
        "is_input": definition.object_is_input,
        "is_output": definition.object_is_output,
    }
