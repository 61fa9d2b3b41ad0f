"""
json_export.py - Exportacao JSON da Definition

Proposito:
    Serializar a Definition compilada como arvore JSON (dicts, listas e
    escalares) com as chaves camelCase consumidas pelos templates.

Componentes principais:
    - build_json_payload: Definition -> dict
    - dumps_definition: Definition -> texto JSON
    - export_json: escrita do JSON em arquivo

Dependencias criticas:
    - json: serializacao
    - gorpc.ast.definition: modelo serializado

Exemplo de uso:
    from gorpc.exporters.json_export import export_json
    export_json(result.definition, Path("definition.json"))

Notas de implementacao:
    - ensure_ascii=False preserva comentarios com acentos.
    - O diretorio de destino e criado quando nao existe.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

from gorpc.ast.definition import Definition


def build_json_payload(definition: Definition) -> Dict[str, Any]:
    return definition.to_dict()


def dumps_definition(definition: Definition, indent: int | str = 2) -> str:
    return json.dumps(build_json_payload(definition), indent=indent, ensure_ascii=False)


def export_json(definition: Definition, path: Path) -> None:
    """
    Exporta a Definition em JSON.

    Args:
        definition: Definition compilada
        path: Caminho do arquivo JSON de saida
    """
    if not isinstance(path, Path):
        path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dumps_definition(definition) + "\n", encoding="utf-8")
