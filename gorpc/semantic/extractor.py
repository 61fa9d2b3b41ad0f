"""
extractor.py - Classificacao de declaracoes e extracao de servicos/objetos

Proposito:
    Percorrer o escopo de um pacote raiz, classificar cada declaracao
    (interface -> Service, struct -> Object, demais -> ignoradas) e
    extrair metodos, objetos e campos, validando as regras das definicoes.

Componentes principais:
    - DefinitionExtractor: extract_package, extract_service, extract_object
    - _collect_methods: metodos proprios e de interfaces embutidas

Dependencias criticas:
    - gorpc.semantic.resolver: FieldType e tipos subjacentes
    - gorpc.semantic.metadata: descricao + metadados dos comentarios
    - gorpc.semantic.tags: tags dos campos

Exemplo de uso:
    extractor = DefinitionExtractor(loader, session, exclusions={"Internal"})
    extractor.extract_package(package)

Notas de implementacao:
    - Declaracoes sao visitadas em ordem alfabetica.
    - Todo metodo exige exatamente um parametro e um resultado.
    - Servicos excluidos sao extraidos por completo e so depois descartados.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Set, Tuple

from gorpc.ast.definition import Field, Method, Service
from gorpc.ast.nodes import FieldNode, InterfaceTypeExpr, MethodSpecNode, StructTypeExpr
from gorpc.ast.results import FieldNotExported, InvalidSignature, LoadError, MalformedTag
from gorpc.parser.loader import DeclaredType, Package, SourceLoader
from gorpc.semantic.assembler import CompilationSession
from gorpc.semantic.metadata import extract_metadata
from gorpc.semantic.naming import camelize_down
from gorpc.semantic.resolver import TypeContext, TypeResolver
from gorpc.semantic.tags import json_tag_name, json_tag_omit_empty, parse_tags

logger = logging.getLogger(__name__)

SIGNATURE_HINT = "expected Method(MethodRequest) MethodResponse"


class DefinitionExtractor:
    def __init__(
        self,
        loader: SourceLoader,
        session: CompilationSession,
        exclusions: Optional[Iterable[str]] = None,
    ) -> None:
        self.loader = loader
        self.session = session
        self.exclusions: Set[str] = set(exclusions or ())
        self.resolver = TypeResolver(loader, session, self.extract_object)

    def extract_package(self, package: Package) -> None:
        self.session.root_path = package.path
        self.session.package_name = package.name

        for name in package.names():
            decl = package.scope[name]
            if decl.spec.alias:
                logger.debug("skipping alias %s", name)
                continue

            underlying, origin = self.resolver.underlying(decl)
            if isinstance(underlying, InterfaceTypeExpr):
                service = self.extract_service(decl, underlying, origin)
                self.session.add_service(service, excluded=name in self.exclusions)
            elif isinstance(underlying, StructTypeExpr):
                self.extract_object(decl)
            else:
                logger.debug("skipping %s: neither interface nor struct", name)

    # ---------- servicos ----------

    def extract_service(
        self,
        decl: DeclaredType,
        interface: InterfaceTypeExpr,
        origin: DeclaredType,
    ) -> Service:
        parsed = extract_metadata(decl.spec.doc, decl.spec.location)
        service = Service(name=decl.name, comment=parsed.description, metadata=parsed.metadata)
        logger.debug("service %s", service.name)

        for method_spec, context in self._collect_methods(interface, TypeContext.of(origin), set()):
            service.methods.append(self._extract_method(service.name, method_spec, context))
        return service

    def _collect_methods(
        self,
        interface: InterfaceTypeExpr,
        context: TypeContext,
        visiting: Set[Tuple[str, str]],
    ) -> List[Tuple[MethodSpecNode, TypeContext]]:
        methods: Dict[str, Tuple[MethodSpecNode, TypeContext]] = {}
        for method_spec in interface.methods:
            methods.setdefault(method_spec.name, (method_spec, context))

        for embed in interface.embeds:
            target = self.resolver.lookup(embed, context)
            if not isinstance(target, DeclaredType):
                raise LoadError(
                    message=f"cannot embed {embed}: only interfaces declared in the module can be embedded",
                    location=embed.location,
                    package=context.package.path,
                )
            key = (target.package.path, target.name)
            if key in visiting:
                raise LoadError(
                    message=f"invalid recursive interface {target.name}",
                    location=embed.location,
                    package=context.package.path,
                )
            underlying, origin = self.resolver.underlying(target)
            if not isinstance(underlying, InterfaceTypeExpr):
                raise LoadError(
                    message=f"embedded type {embed} is not an interface",
                    location=embed.location,
                    package=context.package.path,
                )
            for method_spec, method_context in self._collect_methods(
                underlying, TypeContext.of(origin), visiting | {key}
            ):
                methods.setdefault(method_spec.name, (method_spec, method_context))

        return [methods[name] for name in sorted(methods)]

    def _extract_method(self, service_name: str, spec: MethodSpecNode, context: TypeContext) -> Method:
        params = spec.signature.params
        results = spec.signature.results
        if len(params) != 1 or len(results) != 1:
            raise InvalidSignature(
                message=f"invalid method signature for {service_name}.{spec.name}: {SIGNATURE_HINT}",
                location=spec.location,
                package=context.package.path,
                method=spec.name,
            )

        parsed = extract_metadata(spec.doc, spec.location)
        input_object = self.resolver.resolve_param(params[0], context)
        output_object = self.resolver.resolve_param(results[0], context)
        if output_object.is_object:
            self.session.record_output(output_object.type_id, service_name)

        logger.debug("method %s.%s", service_name, spec.name)
        return Method(
            name=spec.name,
            name_lower_camel=camelize_down(spec.name),
            input_object=input_object,
            output_object=output_object,
            comment=parsed.description,
            metadata=parsed.metadata,
        )

    # ---------- objetos ----------

    def extract_object(self, decl: DeclaredType) -> None:
        type_id = f"{decl.package.path}.{decl.name}"
        obj = self.session.reserve_object(type_id, decl.name, decl.spec.location)
        if obj is None:
            return

        parsed = extract_metadata(decl.spec.doc, decl.spec.location)
        obj.comment = parsed.description
        obj.metadata = parsed.metadata
        obj.imported = decl.package.path != self.session.root_path
        logger.debug("object %s (%s)", obj.name, type_id)

        structure = self.resolver.struct_of(decl)
        if structure is None:
            raise LoadError(
                message=f"{decl.name} must be a struct",
                location=decl.spec.location,
                package=decl.package.path,
            )
        struct, origin = structure
        context = TypeContext.of(origin)
        for node in struct.fields:
            obj.fields.append(self._extract_field(node, context))

    def _extract_field(self, node: FieldNode, context: TypeContext) -> Field:
        if not node.name[:1].isupper():
            raise FieldNotExported(
                message=f"{node.name} must be exported",
                location=node.location,
                package=context.package.path,
                field_name=node.name,
            )

        tag = node.tag or ""
        try:
            parsed_tags = parse_tags(tag, node.location)
        except MalformedTag as exc:
            exc.package = context.package.path
            raise
        parsed = extract_metadata(node.doc, node.location)

        return Field(
            name=node.name,
            name_lower_camel=json_tag_name(parsed_tags) or camelize_down(node.name),
            type=self.resolver.resolve(node.type, context, node.location),
            omit_empty=json_tag_omit_empty(parsed_tags),
            comment=parsed.description,
            tag=tag,
            parsed_tags=parsed_tags,
            example=parsed.metadata.get("example"),
            metadata=parsed.metadata,
        )
