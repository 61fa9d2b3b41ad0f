"""
tags.py - Leitura e escrita de tags de campos de struct

Proposito:
    Interpretar tags no formato `key:"name,opt1,opt2" other:"x"` em
    FieldTag (valor principal + opcoes) e recompor tags mescladas para
    os templates.

Componentes principais:
    - split_tags: lista ordenada (chave, FieldTag) de uma tag
    - parse_tags: mapa chave -> FieldTag (ultima ocorrencia prevalece)
    - merge_tags: combinacao de varias tags, chaves repetidas substituidas
    - json_tag_name / json_tag_omit_empty: atalhos para a tag json

Dependencias criticas:
    - gorpc.ast.definition: FieldTag
    - gorpc.parser.literals: unquote dos valores

Exemplo de uso:
    parse_tags('json:"name,omitempty"')["json"].options  # ["omitempty"]
"""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from gorpc.ast.definition import FieldTag
from gorpc.ast.nodes import SourceLocation
from gorpc.ast.results import MalformedTag
from gorpc.parser.literals import unquote


def _malformed(tag: str, reason: str, location: Optional[SourceLocation]) -> MalformedTag:
    return MalformedTag(message=f"malformed tag `{tag}`: {reason}", location=location, tag=tag)


def split_tags(tag: str, location: Optional[SourceLocation] = None) -> List[Tuple[str, FieldTag]]:
    """Divide a tag em pares (chave, FieldTag) na ordem em que aparecem."""
    pairs: List[Tuple[str, FieldTag]] = []
    rest = tag
    while rest:
        rest = rest.lstrip(" ")
        if not rest:
            break

        i = 0
        while i < len(rest) and rest[i] > " " and rest[i] not in ':"' and rest[i] != "\x7f":
            i += 1
        key = rest[:i]
        if not key:
            raise _malformed(tag, "bad syntax for struct tag key", location)
        if i + 1 >= len(rest) or rest[i] != ":":
            raise _malformed(tag, "bad syntax for struct tag pair", location)
        if rest[i + 1] != '"':
            raise _malformed(tag, "bad syntax for struct tag value", location)

        rest = rest[i + 1:]
        j = 1
        while j < len(rest) and rest[j] != '"':
            if rest[j] == "\\":
                j += 1
            j += 1
        if j >= len(rest):
            raise _malformed(tag, "bad syntax for struct tag value", location)

        value = unquote(rest[: j + 1])
        rest = rest[j + 1:]

        name, *options = value.split(",")
        pairs.append((key, FieldTag(value=name, options=options)))
    return pairs


def parse_tags(tag: str, location: Optional[SourceLocation] = None) -> Dict[str, FieldTag]:
    return dict(split_tags(tag, location))


def merge_tags(*tags: str) -> List[Tuple[str, FieldTag]]:
    """Combina tags; uma chave repetida substitui a anterior mantendo a posicao."""
    merged: Dict[str, FieldTag] = {}
    for tag in tags:
        for key, value in split_tags(tag):
            merged[key] = value
    return list(merged.items())


def tag_string(pairs: List[Tuple[str, FieldTag]]) -> str:
    parts = []
    for key, value in pairs:
        text = ",".join([value.value, *value.options])
        parts.append(f'{key}:"{text}"')
    return " ".join(parts)


def json_tag_name(tags: Dict[str, FieldTag]) -> str:
    json_tag = tags.get("json")
    return json_tag.value if json_tag else ""


def json_tag_omit_empty(tags: Dict[str, FieldTag]) -> bool:
    json_tag = tags.get("json")
    return bool(json_tag) and "omitempty" in json_tag.options
