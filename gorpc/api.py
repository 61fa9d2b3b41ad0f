"""
api.py - API publica para compilacao em memoria

Proposito:
    Compilar definicoes Go a partir de strings, sem leitura de disco.
    Util para testes, notebooks e integracoes que ja tem o conteudo dos
    arquivos em memoria.

Componentes principais:
    - load(): compila um pacote completo a partir de {arquivo: conteudo}
    - compile_string(): parseia um arquivo unico retornando o FileNode

Dependencias criticas:
    - gorpc.parser.loader: SourceLoader.load_sources
    - gorpc.semantic: extracao e pos-processamento
    - gorpc.compiler: CompilationResult/CompilationStats

Exemplo de uso:
    import gorpc
    result = gorpc.load({"greeter.go": GREETER_SOURCE})
    result.definition.services[0].name

Notas de implementacao:
    - Todos os arquivos formam um unico pacote; referencias qualificadas
      para outros pacotes ficam como tipos externos opacos.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping, Optional

from gorpc.ast.nodes import FileNode
from gorpc.compiler import CompilationResult, CompilationStats
from gorpc.parser.lexer import parse_string
from gorpc.parser.loader import SourceLoader, parse_source
from gorpc.semantic.assembler import CompilationSession
from gorpc.semantic.extractor import DefinitionExtractor


def load(
    sources: Mapping[str, str],
    exclusions: Optional[Iterable[str]] = None,
    params: Optional[Dict[str, Any]] = None,
    package_name: Optional[str] = None,
) -> CompilationResult:
    """
    Compila definicoes a partir de conteudo em memoria.

    Args:
        sources: Mapeamento nome do arquivo -> conteudo Go
        exclusions: Servicos a excluir da Definition
        params: Parametros repassados aos templates
        package_name: Substitui o nome do pacote na Definition

    Returns:
        CompilationResult com Definition e estatisticas

    Raises:
        DefinitionError: qualquer erro de sintaxe ou de definicao

    Example:
        >>> result = load({"greeter.go": source}, exclusions=["Internal"])
        >>> [s.name for s in result.definition.services]
    """
    loader = SourceLoader()
    package = loader.load_sources(sources)

    session = CompilationSession()
    extractor = DefinitionExtractor(loader, session, [name for name in (exclusions or []) if name])
    extractor.extract_package(package)

    definition = session.finalize(package_name=package_name, params=dict(params or {}))
    stats = CompilationStats(
        package_count=1,
        service_count=len(definition.services),
        method_count=sum(len(service.methods) for service in definition.services),
        object_count=len(definition.objects),
        excluded_service_count=len(session.excluded_services),
    )
    return CompilationResult(definition=definition, stats=stats)


def compile_string(content: str, filename: str = "<string>") -> FileNode:
    """
    Parseia um unico arquivo Go.

    Example:
        >>> node = compile_string("package demo\\n\\ntype A struct{}\\n")
        >>> node.types[0].name
        'A'
    """
    return parse_source(parse_string(content, filename), filename)
