"""
gorpc: Compilador de definicoes RPC escritas em Go

Le pacotes Go que declaram servicos (interfaces) e objetos (structs) e
produz uma Definition neutra de linguagem, renderizada por templates
Jinja2 para gerar clientes e servidores.

API em Memoria (gorpc.load):
    >>> import gorpc
    >>> result = gorpc.load({"greeter.go": source})
    >>> data = result.to_dict()

Compilador (gorpc.DefinitionCompiler):
    >>> from gorpc import DefinitionCompiler
    >>> result = DefinitionCompiler(["./definitions"]).compile()
    >>> result.to_json(Path("definition.json"))
"""

# API em memoria
from gorpc.api import (
    load,
    compile_string,
)

# Compilador
from gorpc.compiler import (
    DefinitionCompiler,
    CompilationResult,
    CompilationStats,
    parse_params,
)

# Modelo
from gorpc.ast.definition import (
    Definition,
    Service,
    Method,
    Object,
    Field,
    FieldType,
    FieldTag,
)

# AST Nodes
from gorpc.ast.nodes import (
    SourceLocation,
    FileNode,
    TypeSpecNode,
)

# Result types
from gorpc.ast.results import (
    Ok,
    Err,
    DefinitionError,
    LoadError,
    InvalidSignature,
    NestedStructNotSupported,
    FieldNotExported,
    MalformedTag,
    MalformedMetadata,
    MalformedParameters,
    AmbiguousObjectName,
    ObjectNotFound,
)

# Renderizacao
from gorpc.exporters.template_export import render_template, write_output

__version__ = "0.1.0"
__all__ = [
    # API em memoria
    "load",
    "compile_string",
    # Compilador
    "DefinitionCompiler",
    "CompilationResult",
    "CompilationStats",
    "parse_params",
    # Modelo
    "Definition",
    "Service",
    "Method",
    "Object",
    "Field",
    "FieldType",
    "FieldTag",
    # AST
    "SourceLocation",
    "FileNode",
    "TypeSpecNode",
    # Results
    "Ok",
    "Err",
    "DefinitionError",
    "LoadError",
    "InvalidSignature",
    "NestedStructNotSupported",
    "FieldNotExported",
    "MalformedTag",
    "MalformedMetadata",
    "MalformedParameters",
    "AmbiguousObjectName",
    "ObjectNotFound",
    # Renderizacao
    "render_template",
    "write_output",
]
