"""
transformer.py - Conversao de parse tree para AST de definicoes

Proposito:
    Transformar a arvore concreta do Lark em nos tipados da AST.
    Anexa os comentarios de documentacao a tipos, metodos e campos
    seguindo as regras de agrupamento de Go.

Componentes principais:
    - GoTransformer: Transformer principal do Lark
    - build_doc_index: agrupamento de comentarios por linha final
    - comment_group_text: limpeza de um grupo de comentarios

Dependencias criticas:
    - lark: Transformer, Token e metadados de parsing
    - gorpc.ast.nodes: definicoes dos nos da AST

Exemplo de uso:
    from gorpc.parser.transformer import GoTransformer
    parsed = parse_file("greeter.go")
    file_node = GoTransformer("greeter.go", parsed.comments).transform(parsed.tree)

Notas de implementacao:
    - Um grupo de comentarios documenta a declaracao da linha seguinte.
    - Listas de parametros seguem o agrupamento de Go: (a, b int) sao dois.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from lark import Token, Transformer, v_args

from gorpc.ast.nodes import (
    ArrayTypeExpr,
    ChanTypeExpr,
    CommentNode,
    FieldNode,
    FileNode,
    FuncTypeExpr,
    ImportNode,
    InterfaceTypeExpr,
    MapTypeExpr,
    MethodSpecNode,
    NamedTypeExpr,
    ParamNode,
    PointerTypeExpr,
    SignatureNode,
    SliceTypeExpr,
    SourceLocation,
    StructTypeExpr,
    TypeSpecNode,
)
from gorpc.ast.results import LoadError
from gorpc.parser.literals import unquote

_DIRECTIVE_PATTERN = re.compile(r"^(line |extern |export |[a-z0-9]+:[a-z0-9])")


def _source_location(file_path: Path, meta: Any) -> SourceLocation:
    return SourceLocation(
        file=file_path,
        line=getattr(meta, "line", 1),
        column=getattr(meta, "column", 1),
    )


def _token_location(file_path: Path, token: Token) -> SourceLocation:
    return SourceLocation(
        file=file_path,
        line=getattr(token, "line", 1),
        column=getattr(token, "column", 1),
    )


def comment_group_text(group: List[CommentNode]) -> str:
    """
    Texto de um grupo de comentarios sem marcadores.

    Remove '//' (e um espaco), '/* */', diretivas como //go:generate,
    espacos no fim das linhas e linhas em branco nas bordas.
    """
    lines: List[str] = []
    for comment in group:
        text = comment.text
        if text.startswith("//"):
            text = text[2:]
            if text.startswith(" "):
                text = text[1:]
            elif _DIRECTIVE_PATTERN.match(text):
                continue
        else:
            text = text[2:-2]
        lines.extend(line.rstrip() for line in text.split("\n"))

    cleaned: List[str] = []
    for line in lines:
        if line == "" and (not cleaned or cleaned[-1] == ""):
            continue
        cleaned.append(line)
    while cleaned and cleaned[-1] == "":
        cleaned.pop()
    return "\n".join(cleaned).strip()


def build_doc_index(comments: List[CommentNode]) -> Dict[int, str]:
    """Mapeia a linha final de cada grupo de comentarios isolados para seu texto."""
    index: Dict[int, str] = {}
    group: List[CommentNode] = []

    def flush() -> None:
        if group:
            index[group[-1].end_line] = comment_group_text(group)
            group.clear()

    for comment in comments:
        if not comment.standalone:
            flush()
            continue
        if group and comment.location.line > group[-1].end_line + 1:
            flush()
        group.append(comment)
    flush()
    return index


@dataclass
class _PackageClause:
    name: str
    location: SourceLocation


class GoTransformer(Transformer):
    def __init__(self, filename: str | Path, comments: Optional[List[CommentNode]] = None):
        super().__init__()
        self.file_path = Path(filename)
        self.doc_index = build_doc_index(comments or [])

    def _doc_for(self, line: int) -> str:
        return self.doc_index.get(line - 1, "")

    def start(self, items: List[Any]) -> FileNode:
        clause = items[0]
        imports: List[ImportNode] = []
        types: List[TypeSpecNode] = []
        for item in items[1:]:
            if not item:
                continue
            for node in item:
                if isinstance(node, ImportNode):
                    imports.append(node)
                elif isinstance(node, TypeSpecNode):
                    types.append(node)
        return FileNode(
            package=clause.name,
            path=self.file_path,
            location=clause.location,
            imports=imports,
            types=types,
        )

    @v_args(meta=True)
    def package_clause(self, meta: Any, items: List[Any]) -> _PackageClause:
        return _PackageClause(name=str(items[0]), location=_source_location(self.file_path, meta))

    # ---------- imports ----------

    def import_decl(self, items: List[Any]) -> List[ImportNode]:
        return list(items)

    def import_group(self, items: List[Any]) -> List[ImportNode]:
        return list(items)

    @v_args(meta=True)
    def import_spec(self, meta: Any, items: List[Any]) -> ImportNode:
        alias = str(items[0]) if len(items) == 2 else None
        return ImportNode(
            path=unquote(str(items[-1])),
            location=_source_location(self.file_path, meta),
            alias=alias,
        )

    @v_args(meta=True)
    def dot_import(self, meta: Any, items: List[Any]) -> ImportNode:
        return ImportNode(
            path=unquote(str(items[-1])),
            location=_source_location(self.file_path, meta),
            alias=".",
        )

    # ---------- declaracoes ----------

    def ignored_decl(self, items: List[Any]) -> None:
        return None

    def type_decl(self, items: List[Any]) -> List[TypeSpecNode]:
        return list(items)

    @v_args(meta=True)
    def type_group(self, meta: Any, items: List[Any]) -> List[TypeSpecNode]:
        specs = list(items)
        if len(specs) == 1 and not specs[0].doc:
            specs[0].doc = self._doc_for(getattr(meta, "line", 0))
        return specs

    def type_def(self, items: List[Any]) -> TypeSpecNode:
        name = items[0]
        return TypeSpecNode(
            name=str(name),
            type=items[1],
            location=_token_location(self.file_path, name),
            doc=self._doc_for(name.line),
        )

    def type_alias(self, items: List[Any]) -> TypeSpecNode:
        spec = self.type_def(items)
        spec.alias = True
        return spec

    # ---------- expressoes de tipo ----------

    def named_type(self, items: List[Any]) -> NamedTypeExpr:
        if len(items) == 2:
            qualifier, name = items
            return NamedTypeExpr(
                name=str(name),
                location=_token_location(self.file_path, qualifier),
                package=str(qualifier),
            )
        return NamedTypeExpr(name=str(items[0]), location=_token_location(self.file_path, items[0]))

    @v_args(meta=True)
    def pointer_type(self, meta: Any, items: List[Any]) -> PointerTypeExpr:
        return PointerTypeExpr(elem=items[0], location=_source_location(self.file_path, meta))

    @v_args(meta=True)
    def slice_type(self, meta: Any, items: List[Any]) -> SliceTypeExpr:
        return SliceTypeExpr(elem=items[0], location=_source_location(self.file_path, meta))

    @v_args(meta=True)
    def array_type(self, meta: Any, items: List[Any]) -> ArrayTypeExpr:
        return ArrayTypeExpr(
            length=str(items[0]),
            elem=items[1],
            location=_source_location(self.file_path, meta),
        )

    @v_args(meta=True)
    def map_type(self, meta: Any, items: List[Any]) -> MapTypeExpr:
        return MapTypeExpr(key=items[0], value=items[1], location=_source_location(self.file_path, meta))

    @v_args(meta=True)
    def chan_type(self, meta: Any, items: List[Any]) -> ChanTypeExpr:
        return ChanTypeExpr(elem=items[0], location=_source_location(self.file_path, meta))

    @v_args(meta=True)
    def func_type(self, meta: Any, items: List[Any]) -> FuncTypeExpr:
        return FuncTypeExpr(signature=items[0], location=_source_location(self.file_path, meta))

    # ---------- structs ----------

    @v_args(meta=True)
    def struct_type(self, meta: Any, items: List[Any]) -> StructTypeExpr:
        fields: List[FieldNode] = []
        for group in items:
            fields.extend(group)
        return StructTypeExpr(fields=fields, location=_source_location(self.file_path, meta))

    def name_list(self, items: List[Any]) -> List[Token]:
        return list(items)

    def tag(self, items: List[Any]) -> str:
        return unquote(str(items[0]))

    @v_args(meta=True)
    def named_field(self, meta: Any, items: List[Any]) -> List[FieldNode]:
        names, type_expr = items[0], items[1]
        tag = items[2] if len(items) > 2 else None
        doc = self._doc_for(getattr(meta, "line", 0))
        return [
            FieldNode(
                name=str(name),
                type=type_expr,
                location=_token_location(self.file_path, name),
                tag=tag,
                doc=doc,
            )
            for name in names
        ]

    @v_args(meta=True)
    def embedded_field(self, meta: Any, items: List[Any]) -> List[FieldNode]:
        type_expr = items[0]
        tag = items[1] if len(items) > 1 else None
        return [
            FieldNode(
                name=type_expr.name,
                type=type_expr,
                location=_source_location(self.file_path, meta),
                tag=tag,
                embedded=True,
                doc=self._doc_for(getattr(meta, "line", 0)),
            )
        ]

    @v_args(meta=True)
    def embedded_pointer_field(self, meta: Any, items: List[Any]) -> List[FieldNode]:
        location = _source_location(self.file_path, meta)
        type_expr = items[0]
        tag = items[1] if len(items) > 1 else None
        return [
            FieldNode(
                name=type_expr.name,
                type=PointerTypeExpr(elem=type_expr, location=location),
                location=location,
                tag=tag,
                embedded=True,
                doc=self._doc_for(location.line),
            )
        ]

    # ---------- interfaces ----------

    @v_args(meta=True)
    def interface_type(self, meta: Any, items: List[Any]) -> InterfaceTypeExpr:
        methods = [item for item in items if isinstance(item, MethodSpecNode)]
        embeds = [item for item in items if isinstance(item, NamedTypeExpr)]
        return InterfaceTypeExpr(
            methods=methods,
            embeds=embeds,
            location=_source_location(self.file_path, meta),
        )

    def method_spec(self, items: List[Any]) -> MethodSpecNode:
        name = items[0]
        return MethodSpecNode(
            name=str(name),
            signature=items[1],
            location=_token_location(self.file_path, name),
            doc=self._doc_for(name.line),
        )

    def embedded_iface(self, items: List[Any]) -> NamedTypeExpr:
        return items[0]

    # ---------- assinaturas ----------

    def signature(self, items: List[Any]) -> SignatureNode:
        results = items[1] if len(items) > 1 else []
        return SignatureNode(params=items[0], results=results)

    def results(self, items: List[Any]) -> List[ParamNode]:
        value = items[0]
        if isinstance(value, list):
            return value
        return [ParamNode(type=value, location=value.location)]

    @v_args(meta=True)
    def parameters(self, meta: Any, items: List[Any]) -> List[ParamNode]:
        return self._group_params(list(items), _source_location(self.file_path, meta))

    @v_args(meta=True)
    def named_param(self, meta: Any, items: List[Any]) -> ParamNode:
        return ParamNode(type=items[1], location=_source_location(self.file_path, meta), name=str(items[0]))

    @v_args(meta=True)
    def unnamed_param(self, meta: Any, items: List[Any]) -> ParamNode:
        return ParamNode(type=items[0], location=_source_location(self.file_path, meta))

    @v_args(meta=True)
    def named_variadic(self, meta: Any, items: List[Any]) -> ParamNode:
        return ParamNode(
            type=items[1],
            location=_source_location(self.file_path, meta),
            name=str(items[0]),
            variadic=True,
        )

    @v_args(meta=True)
    def unnamed_variadic(self, meta: Any, items: List[Any]) -> ParamNode:
        return ParamNode(type=items[0], location=_source_location(self.file_path, meta), variadic=True)

    def _group_params(self, params: List[ParamNode], location: SourceLocation) -> List[ParamNode]:
        if not any(param.name for param in params):
            return params

        grouped: List[ParamNode] = []
        pending: List[ParamNode] = []
        for param in params:
            if param.name is None:
                if param.variadic or not isinstance(param.type, NamedTypeExpr) or param.type.package:
                    raise LoadError(message="mixed named and unnamed parameters", location=param.location)
                pending.append(param)
                continue
            for name_only in pending:
                grouped.append(
                    ParamNode(
                        type=param.type,
                        location=name_only.location,
                        name=name_only.type.name,
                        variadic=param.variadic,
                    )
                )
            pending = []
            grouped.append(param)

        if pending:
            raise LoadError(message="mixed named and unnamed parameters", location=location)
        return grouped
