"""
nodes.py - Dataclasses da AST dos arquivos de definicao Go

Proposito:
    Definir os nos da arvore sintatica abstrata produzida pelo parser.
    Cobre apenas o subconjunto declarativo da linguagem: pacote, imports,
    declaracoes de tipo e as expressoes de tipo que elas usam.

Componentes principais:
    - SourceLocation: arquivo/linha/coluna de cada no
    - Expressoes de tipo: NamedTypeExpr, PointerTypeExpr, SliceTypeExpr, ...
    - Declaracoes: FieldNode, MethodSpecNode, TypeSpecNode, ImportNode, FileNode

Dependencias criticas:
    - dataclasses: estruturacao dos nos
    - pathlib: referencia a paths de arquivos

Exemplo de uso:
    from gorpc.ast.nodes import NamedTypeExpr, SourceLocation
    expr = NamedTypeExpr(name="GreetRequest", location=SourceLocation(...))

Notas de implementacao:
    - Comentarios de documentacao ja chegam limpos em `doc`.
    - Expressoes de tipo sao imutaveis depois do parsing.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union


@dataclass
class SourceLocation:
    file: Path
    line: int
    column: int

    def __str__(self) -> str:
        return f"{self.file}:{self.line}:{self.column}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "file": str(self.file),
            "line": self.line,
            "column": self.column,
        }


@dataclass
class CommentNode:
    """Comentario bruto coletado pelo lexer."""

    text: str
    location: SourceLocation
    end_line: int
    standalone: bool


@dataclass
class NamedTypeExpr:
    name: str
    location: SourceLocation
    package: Optional[str] = None

    def __str__(self) -> str:
        if self.package:
            return f"{self.package}.{self.name}"
        return self.name


@dataclass
class PointerTypeExpr:
    elem: "TypeExpr"
    location: SourceLocation

    def __str__(self) -> str:
        return f"*{self.elem}"


@dataclass
class SliceTypeExpr:
    elem: "TypeExpr"
    location: SourceLocation

    def __str__(self) -> str:
        return f"[]{self.elem}"


@dataclass
class ArrayTypeExpr:
    length: str
    elem: "TypeExpr"
    location: SourceLocation

    def __str__(self) -> str:
        return f"[{self.length}]{self.elem}"


@dataclass
class MapTypeExpr:
    key: "TypeExpr"
    value: "TypeExpr"
    location: SourceLocation

    def __str__(self) -> str:
        return f"map[{self.key}]{self.value}"


@dataclass
class ChanTypeExpr:
    elem: "TypeExpr"
    location: SourceLocation

    def __str__(self) -> str:
        return f"chan {self.elem}"


@dataclass
class ParamNode:
    type: "TypeExpr"
    location: SourceLocation
    name: Optional[str] = None
    variadic: bool = False

    def __str__(self) -> str:
        prefix = "..." if self.variadic else ""
        if self.name:
            return f"{self.name} {prefix}{self.type}"
        return f"{prefix}{self.type}"


@dataclass
class SignatureNode:
    params: List[ParamNode] = field(default_factory=list)
    results: List[ParamNode] = field(default_factory=list)

    def __str__(self) -> str:
        params = ", ".join(str(p) for p in self.params)
        if not self.results:
            return f"({params})"
        if len(self.results) == 1 and not self.results[0].name:
            return f"({params}) {self.results[0]}"
        results = ", ".join(str(r) for r in self.results)
        return f"({params}) ({results})"


@dataclass
class FuncTypeExpr:
    signature: SignatureNode
    location: SourceLocation

    def __str__(self) -> str:
        return f"func{self.signature}"


@dataclass
class FieldNode:
    """
    Campo de struct.

    Attributes:
        name: nome do campo (para campos embutidos, o nome do tipo)
        type: expressao de tipo do campo
        tag: texto da tag ja sem aspas/crases (None se ausente)
        embedded: True para campos embutidos
        doc: comentario de documentacao limpo
    """

    name: str
    type: "TypeExpr"
    location: SourceLocation
    tag: Optional[str] = None
    embedded: bool = False
    doc: str = ""


@dataclass
class StructTypeExpr:
    fields: List[FieldNode]
    location: SourceLocation

    def __str__(self) -> str:
        parts = []
        for f in self.fields:
            parts.append(str(f.type) if f.embedded else f"{f.name} {f.type}")
        return "struct{" + "; ".join(parts) + "}"


@dataclass
class MethodSpecNode:
    name: str
    signature: SignatureNode
    location: SourceLocation
    doc: str = ""

    def __str__(self) -> str:
        return f"{self.name}{self.signature}"


@dataclass
class InterfaceTypeExpr:
    methods: List[MethodSpecNode]
    embeds: List[NamedTypeExpr]
    location: SourceLocation

    def __str__(self) -> str:
        parts = [str(m) for m in self.methods] + [str(e) for e in self.embeds]
        return "interface{" + "; ".join(parts) + "}"


TypeExpr = Union[
    NamedTypeExpr,
    PointerTypeExpr,
    SliceTypeExpr,
    ArrayTypeExpr,
    MapTypeExpr,
    ChanTypeExpr,
    FuncTypeExpr,
    StructTypeExpr,
    InterfaceTypeExpr,
]


@dataclass
class TypeSpecNode:
    name: str
    type: TypeExpr
    location: SourceLocation
    alias: bool = False
    doc: str = ""


@dataclass
class ImportNode:
    path: str
    location: SourceLocation
    alias: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "alias": self.alias,
            "location": self.location.to_dict(),
        }


@dataclass
class FileNode:
    package: str
    path: Path
    location: SourceLocation
    imports: List[ImportNode] = field(default_factory=list)
    types: List[TypeSpecNode] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "package": self.package,
            "path": str(self.path),
            "imports": [imp.to_dict() for imp in self.imports],
            "types": [spec.name for spec in self.types],
        }
