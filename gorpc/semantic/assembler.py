"""
assembler.py - Sessao de compilacao e pos-processamento da Definition

Proposito:
    Guardar todo o estado de uma compilacao (objetos registrados, tipos de
    resposta, imports, servicos) e produzir a Definition final: filtra
    exclusoes, ordena e sintetiza o campo Error dos objetos de saida.

Componentes principais:
    - CompilationSession: estado da compilacao corrente
    - reserve_object: registro idempotente por identificador estavel
    - finalize: pos-processamento e montagem da Definition

Dependencias criticas:
    - gorpc.ast.definition: modelo de saida
    - gorpc.semantic.scalars: grafias do campo Error

Exemplo de uso:
    session = CompilationSession()
    session.root_path = package.path
    ...
    definition = session.finalize(package_name="greeter", params={})

Notas de implementacao:
    - Um objeto e reservado antes de seus campos (tipos recursivos terminam).
    - Exclusao remove apenas objetos que nenhum servico mantido alcanca.
    - Um campo Error declarado em objeto de saida e substituido pelo
      sintetizado, que fica sempre por ultimo.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Set

from gorpc.ast.definition import Definition, Field, FieldType, Object, Service
from gorpc.ast.nodes import SourceLocation
from gorpc.ast.results import AmbiguousObjectName
from gorpc.semantic.scalars import scalar_types

logger = logging.getLogger(__name__)

ERROR_FIELD_NAME = "Error"
ERROR_FIELD_COMMENT = "Error is string explaining what went wrong. Empty if everything was fine."
ERROR_FIELD_EXAMPLE = "something went wrong"


@dataclass
class CompilationSession:
    root_path: str = ""
    package_name: str = ""
    objects: Dict[str, Object] = field(default_factory=dict)
    object_ids_by_name: Dict[str, str] = field(default_factory=dict)
    services: List[Service] = field(default_factory=list)
    excluded_services: List[Service] = field(default_factory=list)
    response_types: Dict[str, Set[str]] = field(default_factory=dict)
    imports: Dict[str, str] = field(default_factory=dict)

    # ---------- registro ----------

    def reserve_object(
        self,
        type_id: str,
        name: str,
        location: Optional[SourceLocation] = None,
    ) -> Optional[Object]:
        """
        Reserva o objeto antes da extracao dos campos.

        Returns:
            O novo Object, ou None se o identificador ja foi registrado.

        Raises:
            AmbiguousObjectName: outro pacote ja registrou o mesmo nome
        """
        if type_id in self.objects:
            return None
        existing = self.object_ids_by_name.get(name)
        if existing is not None:
            raise AmbiguousObjectName(
                message=f"object name {name} is declared by more than one package",
                location=location,
                name=name,
                type_ids=(existing, type_id),
            )
        obj = Object(type_id=type_id, name=name)
        self.objects[type_id] = obj
        self.object_ids_by_name[name] = type_id
        return obj

    def add_service(self, service: Service, excluded: bool = False) -> None:
        if excluded:
            logger.debug("service %s excluded", service.name)
            self.excluded_services.append(service)
        else:
            self.services.append(service)

    def record_output(self, type_id: str, service_name: str) -> None:
        self.response_types.setdefault(type_id, set()).add(service_name)

    def register_import(self, path: str, name: str) -> None:
        self.imports[path] = name

    # ---------- pos-processamento ----------

    def _reachable(self, roots: Iterable[str]) -> Set[str]:
        reached: Set[str] = set()
        pending = [type_id for type_id in roots if type_id in self.objects]
        while pending:
            type_id = pending.pop()
            if type_id in reached:
                continue
            reached.add(type_id)
            for item in self.objects[type_id].fields:
                if item.type.is_object and item.type.type_id in self.objects:
                    pending.append(item.type.type_id)
        return reached

    @staticmethod
    def _io_type_ids(services: Iterable[Service]) -> List[str]:
        ids = []
        for service in services:
            for method in service.methods:
                for io_type in (method.input_object, method.output_object):
                    if io_type.is_object:
                        ids.append(io_type.type_id)
        return ids

    def excluded_object_ids(self) -> Set[str]:
        """Objetos alcancaveis apenas a partir dos servicos excluidos."""
        excluded = self._reachable(self._io_type_ids(self.excluded_services))
        retained = self._reachable(self._io_type_ids(self.services))
        return excluded - retained

    def _error_field(self) -> Field:
        return Field(
            name=ERROR_FIELD_NAME,
            name_lower_camel="error",
            type=FieldType(
                type_id=f"{self.root_path}.string",
                type_name="string",
                object_name="string",
                clean_object_name="string",
                object_name_lower_camel="string",
                scalar_types=scalar_types("string", is_object=False),
            ),
            omit_empty=True,
            comment=ERROR_FIELD_COMMENT,
            example=ERROR_FIELD_EXAMPLE,
        )

    def _add_output_fields(self, objects: Dict[str, Object]) -> None:
        retained = {service.name for service in self.services}
        for type_id, service_names in self.response_types.items():
            if not service_names & retained:
                continue
            obj = objects.get(type_id)
            if obj is None:
                continue
            if obj.field(ERROR_FIELD_NAME) is not None:
                logger.warning("%s declares its own %s field; replacing it", obj.name, ERROR_FIELD_NAME)
                obj.fields = [item for item in obj.fields if item.name != ERROR_FIELD_NAME]
            obj.fields.append(self._error_field())

    def finalize(
        self,
        package_name: Optional[str] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Definition:
        removed = self.excluded_object_ids()
        for type_id in sorted(removed):
            logger.debug("object %s removed by exclusion", type_id)

        kept = {type_id: obj for type_id, obj in self.objects.items() if type_id not in removed}
        self._add_output_fields(kept)

        return Definition(
            package_name=package_name or self.package_name,
            services=sorted(self.services, key=lambda service: service.name),
            objects=sorted(kept.values(), key=lambda obj: obj.name),
            imports=dict(self.imports),
            params=dict(params or {}),
        )
