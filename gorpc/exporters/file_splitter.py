"""
file_splitter.py - Divisao de saida renderizada em varios arquivos

Proposito:
    Recortar o texto renderizado por um template em arquivos delimitados
    por linhas `>>>BEGIN <nome>` e `<<<END <nome>`.

Componentes principais:
    - SplitFile: nome e conteudo de um arquivo recortado
    - split_files: recorte do texto
    - begin_file/end_file: marcadores usados pelos templates

Exemplo de uso:
    split_files(">>>BEGIN a.txt\\nHELLO\\n<<<END a.txt\\n")
    # [SplitFile(filename="a.txt", content="HELLO")]

Notas de implementacao:
    - Nomes aceitam apenas letras, digitos e ponto.
    - Um par so e aceito se os dois nomes forem iguais; caso contrario o
      trecho e descartado em silencio.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List

SEGMENT_PATTERN = re.compile(
    r">>>BEGIN ([a-zA-Z0-9.]+?)\n(.*?)<<<END ([a-zA-Z0-9.]+?)\n",
    re.DOTALL,
)


@dataclass(frozen=True)
class SplitFile:
    filename: str
    content: str


def begin_file(*name: str) -> str:
    return ">>>BEGIN " + "".join(name) + "\n"


def end_file(*name: str) -> str:
    return "<<<END " + "".join(name) + "\n"


def split_files(content: str) -> List[SplitFile]:
    files: List[SplitFile] = []
    for match in SEGMENT_PATTERN.finditer(content):
        begin_name, body, end_name = match.groups()
        if begin_name != end_name:
            continue
        if body.endswith("\n"):
            body = body[:-1]
        files.append(SplitFile(filename=begin_name, content=body))
    return files
