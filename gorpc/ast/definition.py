"""
definition.py - Modelo canonico produzido pelo compilador (Definition)

Proposito:
    Descrever servicos, metodos, objetos e campos extraidos das definicoes.
    E o unico contrato entre o compilador e os geradores baseados em templates.

Componentes principais:
    - Definition: raiz com servicos, objetos, imports e parametros
    - Service/Method: interfaces e seus metodos (1 entrada, 1 saida)
    - Object/Field/FieldTag: structs, campos e tags
    - FieldType: descricao resolvida de um tipo

Dependencias criticas:
    - dataclasses: estruturacao do modelo
    - gorpc.ast.results: ObjectNotFound

Exemplo de uso:
    definition = compiler.compile().definition
    data = definition.to_dict()
    definition.object_is_output("GreetResponse")

Notas de implementacao:
    - Referencias entre entidades sao por nome/identificador, nunca por ponteiro.
    - to_dict() usa as chaves camelCase consumidas pelos templates.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from gorpc.ast.results import ObjectNotFound


@dataclass
class FieldTag:
    value: str
    options: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"value": self.value, "options": list(self.options)}


@dataclass
class FieldType:
    """
    Tipo resolvido de um campo ou parametro.

    Attributes:
        type_id: caminho do pacote + "." + nome sem qualificacao
        type_name: tipo textual, qualificado pelo pacote quando externo
        object_name: tipo textual sem qualificacao de pacote
        clean_object_name: type_name sem o prefixo de ponteiro
        multiple: True para slices
        is_object: True quando o tipo e uma struct nomeada (Object)
        optional: True para ponteiros
        package: caminho do pacote dono (vazio se local)
        scalar_types: grafia equivalente por linguagem alvo
    """

    type_id: str = ""
    type_name: str = ""
    object_name: str = ""
    clean_object_name: str = ""
    object_name_lower_camel: str = ""
    multiple: bool = False
    is_object: bool = False
    optional: bool = False
    package: str = ""
    scalar_types: Dict[str, str] = field(default_factory=dict)

    @property
    def bare_object_name(self) -> str:
        return self.object_name.lstrip("*")

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "typeID": self.type_id,
            "typeName": self.type_name,
            "objectName": self.object_name,
            "cleanObjectName": self.clean_object_name,
            "objectNameLowerCamel": self.object_name_lower_camel,
            "multiple": self.multiple,
            "isObject": self.is_object,
            "isOptional": self.optional,
            "package": self.package,
            "scalarTypes": dict(self.scalar_types),
        }
        for target, spelling in self.scalar_types.items():
            data[f"{target}Type"] = spelling
        return data


@dataclass
class Field:
    name: str
    name_lower_camel: str
    type: FieldType
    omit_empty: bool = False
    comment: str = ""
    tag: str = ""
    parsed_tags: Dict[str, FieldTag] = field(default_factory=dict)
    example: Any = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "nameLowerCamel": self.name_lower_camel,
            "type": self.type.to_dict(),
            "omitEmpty": self.omit_empty,
            "comment": self.comment,
            "tag": self.tag,
            "parsedTags": {key: tag.to_dict() for key, tag in self.parsed_tags.items()},
            "example": self.example,
            "metadata": dict(self.metadata),
        }


@dataclass
class Object:
    type_id: str
    name: str
    imported: bool = False
    fields: List[Field] = field(default_factory=list)
    comment: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)

    def field(self, name: str) -> Optional[Field]:
        for item in self.fields:
            if item.name == name:
                return item
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "typeID": self.type_id,
            "name": self.name,
            "imported": self.imported,
            "fields": [f.to_dict() for f in self.fields],
            "comment": self.comment,
            "metadata": dict(self.metadata),
        }


@dataclass
class Method:
    name: str
    name_lower_camel: str
    input_object: FieldType
    output_object: FieldType
    comment: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "nameLowerCamel": self.name_lower_camel,
            "inputObject": self.input_object.to_dict(),
            "outputObject": self.output_object.to_dict(),
            "comment": self.comment,
            "metadata": dict(self.metadata),
        }


@dataclass
class Service:
    name: str
    methods: List[Method] = field(default_factory=list)
    comment: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "methods": [m.to_dict() for m in self.methods],
            "comment": self.comment,
            "metadata": dict(self.metadata),
        }


@dataclass
class Definition:
    package_name: str = ""
    services: List[Service] = field(default_factory=list)
    objects: List[Object] = field(default_factory=list)
    imports: Dict[str, str] = field(default_factory=dict)
    params: Dict[str, Any] = field(default_factory=dict)

    def object(self, name: str) -> Object:
        """Busca um objeto pelo nome; lanca ObjectNotFound se nao existir."""
        for obj in self.objects:
            if obj.name == name:
                return obj
        raise ObjectNotFound(message=f"object {name} not found", name=name)

    def object_is_input(self, name: str) -> bool:
        """True se algum metodo usa o objeto como entrada (request)."""
        return any(
            method.input_object.bare_object_name == name
            for service in self.services
            for method in service.methods
        )

    def object_is_output(self, name: str) -> bool:
        """True se algum metodo usa o objeto como saida (response)."""
        return any(
            method.output_object.bare_object_name == name
            for service in self.services
            for method in service.methods
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "packageName": self.package_name,
            "services": [s.to_dict() for s in self.services],
            "objects": [o.to_dict() for o in self.objects],
            "imports": dict(self.imports),
            "params": dict(self.params),
        }
