"""
resolver.py - Resolucao de expressoes de tipo em FieldType

Proposito:
    Converter a expressao de tipo de um campo ou parametro em FieldType:
    nome textual qualificado e nao qualificado, flags de lista/opcional,
    pacote dono, identificador estavel e grafias escalares por alvo.
    Dispara a extracao recursiva de objetos para structs nomeadas.

Componentes principais:
    - TypeResolver: resolve(), underlying(), lookup()
    - TypeContext: pacote e arquivo onde a expressao aparece

Dependencias criticas:
    - gorpc.parser.loader: escopo dos pacotes e resolucao de imports
    - gorpc.semantic.assembler: sessao (imports, pacote raiz)
    - gorpc.semantic.scalars: tabela de grafias

Exemplo de uso:
    resolver = TypeResolver(loader, session, extract_object)
    field_type = resolver.resolve(field.type, TypeContext(pkg, file), field.location)

Notas de implementacao:
    - Ordem literal: primeiro slice (multiple), depois ponteiro (optional).
    - Aliases sao expandidos em todo lugar, com protecao contra ciclos.
    - O nome qualificado registra imports; o nao qualificado nao.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, List, Optional, Set, Tuple

from gorpc.ast.definition import FieldType
from gorpc.ast.nodes import (
    ArrayTypeExpr,
    ChanTypeExpr,
    FileNode,
    FuncTypeExpr,
    InterfaceTypeExpr,
    MapTypeExpr,
    NamedTypeExpr,
    ParamNode,
    PointerTypeExpr,
    SliceTypeExpr,
    SourceLocation,
    StructTypeExpr,
    TypeExpr,
)
from gorpc.ast.results import LoadError, NestedStructNotSupported
from gorpc.parser.loader import DeclaredType, ExternalType, Package, ResolvedName, SourceLoader
from gorpc.semantic.assembler import CompilationSession
from gorpc.semantic.naming import camelize_down
from gorpc.semantic.scalars import scalar_types


@dataclass(frozen=True)
class TypeContext:
    package: Package
    file: FileNode

    @classmethod
    def of(cls, decl: DeclaredType) -> "TypeContext":
        return cls(package=decl.package, file=decl.file)


@dataclass
class _RenderState:
    qualify: bool
    package: str = ""
    imports: List[Tuple[str, str]] = field(default_factory=list)


class TypeResolver:
    def __init__(
        self,
        loader: SourceLoader,
        session: CompilationSession,
        extract_object: Callable[[DeclaredType], None],
    ) -> None:
        self.loader = loader
        self.session = session
        self.extract_object = extract_object

    # ---------- resolucao de nomes ----------

    def lookup(self, expr: NamedTypeExpr, context: TypeContext) -> Optional[ResolvedName]:
        if expr.package:
            return self.loader.resolve_qualified(
                context.package, context.file, expr.package, expr.name, expr.location
            )
        return self.loader.resolve_name(context.package, context.file, expr.name, expr.location)

    def expand_aliases(self, expr: TypeExpr, context: TypeContext) -> Tuple[TypeExpr, TypeContext]:
        """Segue aliases (type A = B) ate uma expressao que nao e alias."""
        seen: Set[Tuple[str, str]] = set()
        while isinstance(expr, NamedTypeExpr):
            target = self.lookup(expr, context)
            if not isinstance(target, DeclaredType) or not target.spec.alias:
                break
            key = (target.package.path, target.name)
            if key in seen:
                raise LoadError(
                    message=f"invalid recursive type alias {target.name}",
                    location=target.spec.location,
                    package=target.package.path,
                )
            seen.add(key)
            expr, context = target.spec.type, TypeContext.of(target)
        return expr, context

    def underlying(self, decl: DeclaredType) -> Tuple[Optional[TypeExpr], DeclaredType]:
        """
        Tipo subjacente de uma declaracao e a declaracao onde ele foi escrito.

        Returns:
            (expressao, origem); expressao e None para tipos opacos
            (predeclarados ou de pacotes externos).
        """
        seen: Set[Tuple[str, str]] = set()
        current = decl
        while True:
            key = (current.package.path, current.name)
            if key in seen:
                raise LoadError(
                    message=f"invalid recursive type {decl.name}",
                    location=decl.spec.location,
                    package=decl.package.path,
                )
            seen.add(key)
            expr = current.spec.type
            if not isinstance(expr, NamedTypeExpr):
                return expr, current
            target = self.lookup(expr, TypeContext.of(current))
            if not isinstance(target, DeclaredType):
                return None, current
            current = target

    def struct_of(self, decl: DeclaredType) -> Optional[Tuple[StructTypeExpr, DeclaredType]]:
        expr, origin = self.underlying(decl)
        if isinstance(expr, StructTypeExpr):
            return expr, origin
        return None

    # ---------- FieldType ----------

    def resolve_param(self, param: ParamNode, context: TypeContext) -> FieldType:
        expr: TypeExpr = param.type
        if param.variadic:
            expr = SliceTypeExpr(elem=param.type, location=param.location)
        return self.resolve(expr, context, param.location)

    def resolve(self, expr: TypeExpr, context: TypeContext, location: SourceLocation) -> FieldType:
        field_type = FieldType()

        expr, context = self.expand_aliases(expr, context)
        if isinstance(expr, SliceTypeExpr):
            field_type.multiple = True
            expr, context = self.expand_aliases(expr.elem, context)

        rendered, rendered_context = expr, context
        if isinstance(expr, PointerTypeExpr):
            field_type.optional = True
            expr, context = self.expand_aliases(expr.elem, context)

        if isinstance(expr, StructTypeExpr):
            raise NestedStructNotSupported(
                message="nested structs not supported (create another type instead)",
                location=location,
                package=context.package.path,
            )

        if isinstance(expr, NamedTypeExpr):
            target = self.lookup(expr, context)
            if isinstance(target, DeclaredType) and self.struct_of(target) is not None:
                self.extract_object(target)
                field_type.is_object = True

        state = _RenderState(qualify=True)
        field_type.type_name = self._render(rendered, rendered_context, state, set())
        for path, name in state.imports:
            self.session.register_import(path, name)
        field_type.package = state.package

        field_type.object_name = self._render(
            rendered, rendered_context, _RenderState(qualify=False), set()
        )
        field_type.clean_object_name = field_type.type_name.lstrip("*")
        field_type.object_name_lower_camel = camelize_down(field_type.object_name)
        package_path = field_type.package or self.session.root_path
        field_type.type_id = f"{package_path}.{field_type.object_name.lstrip('*')}"
        field_type.scalar_types = scalar_types(field_type.clean_object_name, field_type.is_object)
        return field_type

    # ---------- renderizacao textual ----------

    def _qualified(self, name: str, package_name: str, path: str, state: _RenderState) -> str:
        if path == self.session.root_path:
            return name
        if not state.qualify:
            return name
        state.imports.append((path, package_name))
        state.package = path
        return f"{package_name}.{name}"

    def _render(
        self,
        expr: TypeExpr,
        context: TypeContext,
        state: _RenderState,
        seen: Set[Tuple[str, str]],
    ) -> str:
        if isinstance(expr, NamedTypeExpr):
            target = self.lookup(expr, context)
            if target is None:
                return expr.name
            if isinstance(target, ExternalType):
                return self._qualified(target.name, target.package_name, target.path, state)
            if target.spec.alias:
                key = (target.package.path, target.name)
                if key in seen:
                    raise LoadError(
                        message=f"invalid recursive type alias {target.name}",
                        location=target.spec.location,
                        package=target.package.path,
                    )
                return self._render(target.spec.type, TypeContext.of(target), state, seen | {key})
            return self._qualified(target.name, target.package.name, target.package.path, state)
        if isinstance(expr, PointerTypeExpr):
            return "*" + self._render(expr.elem, context, state, seen)
        if isinstance(expr, SliceTypeExpr):
            return "[]" + self._render(expr.elem, context, state, seen)
        if isinstance(expr, ArrayTypeExpr):
            return f"[{expr.length}]" + self._render(expr.elem, context, state, seen)
        if isinstance(expr, MapTypeExpr):
            key = self._render(expr.key, context, state, seen)
            value = self._render(expr.value, context, state, seen)
            return f"map[{key}]{value}"
        if isinstance(expr, ChanTypeExpr):
            return "chan " + self._render(expr.elem, context, state, seen)
        if isinstance(expr, FuncTypeExpr):
            return "func" + self._render_signature(expr.signature.params, expr.signature.results, context, state, seen)
        if isinstance(expr, StructTypeExpr):
            parts = []
            for item in expr.fields:
                rendered = self._render(item.type, context, state, seen)
                parts.append(rendered if item.embedded else f"{item.name} {rendered}")
            return "struct{" + "; ".join(parts) + "}"
        if isinstance(expr, InterfaceTypeExpr):
            parts = [
                method.name + self._render_signature(
                    method.signature.params, method.signature.results, context, state, seen
                )
                for method in expr.methods
            ]
            parts.extend(self._render(embed, context, state, seen) for embed in expr.embeds)
            return "interface{" + "; ".join(parts) + "}"
        raise TypeError(f"unsupported type expression {expr!r}")

    def _render_signature(
        self,
        params: List[ParamNode],
        results: List[ParamNode],
        context: TypeContext,
        state: _RenderState,
        seen: Set[Tuple[str, str]],
    ) -> str:
        rendered_params = []
        for param in params:
            prefix = "..." if param.variadic else ""
            rendered_params.append(prefix + self._render(param.type, context, state, seen))
        text = "(" + ", ".join(rendered_params) + ")"
        rendered_results = [self._render(result.type, context, state, seen) for result in results]
        if len(rendered_results) == 1:
            text += " " + rendered_results[0]
        elif rendered_results:
            text += " (" + ", ".join(rendered_results) + ")"
        return text
