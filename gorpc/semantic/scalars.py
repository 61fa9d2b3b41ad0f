"""
scalars.py - Tabela de grafias de tipos escalares por linguagem alvo

Proposito:
    Mapear tipos primitivos de Go para a grafia equivalente em cada
    linguagem alvo dos templates (JavaScript, TypeScript, Swift, PHP, Python).

Componentes principais:
    - ScalarKind: categorias reconhecidas (texto, booleano, numero, dinamico, mapa)
    - Target: linguagens alvo e chave usada no dicionario exportado
    - scalar_types: grafias para um tipo ja renderizado

Exemplo de uso:
    scalar_types("int64", is_object=False)["ts"]  # "number"
    scalar_types("User", is_object=True)["js"]     # "object"

Notas de implementacao:
    - Objetos recebem "object" em JS e o nome limpo nas demais linguagens.
    - Tipos nao reconhecidos repassam o nome limpo sem alteracao.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Optional


class ScalarKind(Enum):
    STRING = "string"
    BOOL = "bool"
    NUMBER = "number"
    ANY = "any"
    MAP = "map"


class Target(Enum):
    JS = "js"
    TS = "ts"
    SWIFT = "swift"
    PHP = "php"
    PYTHON = "py"


GO_SCALARS: Dict[str, ScalarKind] = {
    "string": ScalarKind.STRING,
    "bool": ScalarKind.BOOL,
    "interface{}": ScalarKind.ANY,
    "any": ScalarKind.ANY,
    "map[string]interface{}": ScalarKind.MAP,
    "map[string]any": ScalarKind.MAP,
}
for _numeric in (
    "int", "int8", "int16", "int32", "int64",
    "uint", "uint8", "uint16", "uint32", "uint64",
    "float32", "float64", "byte", "rune",
):
    GO_SCALARS[_numeric] = ScalarKind.NUMBER

SPELLINGS: Dict[ScalarKind, Dict[Target, str]] = {
    ScalarKind.STRING: {
        Target.JS: "string",
        Target.TS: "string",
        Target.SWIFT: "String",
        Target.PHP: "string",
        Target.PYTHON: "str",
    },
    ScalarKind.BOOL: {
        Target.JS: "boolean",
        Target.TS: "boolean",
        Target.SWIFT: "Bool",
        Target.PHP: "bool",
        Target.PYTHON: "bool",
    },
    ScalarKind.NUMBER: {
        Target.JS: "number",
        Target.TS: "number",
        Target.SWIFT: "Double",
        Target.PHP: "float",
        Target.PYTHON: "float",
    },
    ScalarKind.ANY: {
        Target.JS: "any",
        Target.TS: "object",
        Target.SWIFT: "Any",
        Target.PHP: "mixed",
        Target.PYTHON: "Any",
    },
    ScalarKind.MAP: {
        Target.JS: "object",
        Target.TS: "object",
        Target.SWIFT: "Any",
        Target.PHP: "array",
        Target.PYTHON: "dict",
    },
}


def scalar_kind(clean_name: str) -> Optional[ScalarKind]:
    return GO_SCALARS.get(clean_name)


def scalar_types(clean_name: str, is_object: bool) -> Dict[str, str]:
    """Grafias por alvo, indexadas pelo valor de Target ("js", "ts", ...)."""
    spellings = {target.value: clean_name for target in Target}
    if is_object:
        spellings[Target.JS.value] = "object"
        return spellings
    kind = scalar_kind(clean_name)
    if kind is not None:
        for target, spelling in SPELLINGS[kind].items():
            spellings[target.value] = spelling
    return spellings
