"""
metadata.py - Extrator de descricao e metadados de comentarios

Proposito:
    Separar o comentario de documentacao em descricao (prosa) e um mapa
    de anotacoes `chave: valor`, com valores decodificados como JSON.

Componentes principais:
    - extract_metadata: classificador de linhas em duas fases
    - decode_annotation: decodificacao de um valor, devolvendo Ok/Err
    - CommentMetadata: resultado (descricao, metadados, erros ignorados)

Dependencias criticas:
    - json: decodificacao dos literais
    - gorpc.ast.results: Ok/Err e MalformedMetadata

Exemplo de uso:
    result = extract_metadata('Greets a user.\\nversion: 2\\nauthor: "core"')
    result.description  # "Greets a user."
    result.metadata     # {"version": 2, "author": "core"}

Notas de implementacao:
    - Uma linha e anotacao quando contem ": "; a chave vai ate a primeira ocorrencia.
    - Valor que nao e JSON valido descarta a linha e segue (unico erro recuperavel).
    - A primeira ocorrencia de cada chave prevalece.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from gorpc.ast.nodes import SourceLocation
from gorpc.ast.results import Err, MalformedMetadata, Ok, Result

logger = logging.getLogger(__name__)

ANNOTATION_SEPARATOR = ": "


@dataclass
class CommentMetadata:
    description: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)
    skipped: List[MalformedMetadata] = field(default_factory=list)


def decode_annotation(
    key: str,
    value: str,
    location: Optional[SourceLocation] = None,
) -> Result[Any, MalformedMetadata]:
    """Decodifica o valor de uma anotacao como literal JSON."""
    try:
        return Ok(json.loads(value))
    except json.JSONDecodeError as exc:
        return Err(
            MalformedMetadata(
                message=f"metadata {key!r}: {value!r} is not a valid JSON literal ({exc.msg})",
                location=location,
                key=key,
                value=value,
            )
        )


def extract_metadata(comment: str, location: Optional[SourceLocation] = None) -> CommentMetadata:
    result = CommentMetadata()
    prose: List[str] = []

    for raw_line in comment.splitlines():
        line = raw_line.strip()
        if not line:
            continue

        if ANNOTATION_SEPARATOR not in line:
            prose.append(line)
            continue

        key, _, value = line.partition(ANNOTATION_SEPARATOR)
        decoded = decode_annotation(key, value.strip(), location)
        if decoded.is_err():
            logger.info("(skipping) %s", decoded.error)
            result.skipped.append(decoded.error)
            continue
        if key in result.metadata:
            logger.debug("metadata %r repeated; keeping first value", key)
            continue
        result.metadata[key] = decoded.value

    result.description = "\n".join(prose)
    return result
