"""
compiler.py - Orquestrador principal do compilador de definicoes

Proposito:
    Executar o pipeline completo: carregar pacotes, classificar declaracoes,
    extrair servicos e objetos e montar a Definition final.

Componentes principais:
    - DefinitionCompiler: executa o pipeline em etapas ordenadas
    - CompilationResult/CompilationStats: resultado e estatisticas
    - parse_params/parse_exclusions: leitura dos argumentos de invocacao

Dependencias criticas:
    - gorpc.parser.loader: carregamento dos pacotes
    - gorpc.semantic: extracao, resolucao e pos-processamento
    - gorpc.exporters: exportacao JSON

Exemplo de uso:
    compiler = DefinitionCompiler(["./definitions"], exclusions=["Internal"])
    result = compiler.compile()
    result.definition.services

Notas de implementacao:
    - Qualquer erro fatal interrompe a compilacao; nao ha Definition parcial.
    - Cada chamada de compile() usa uma sessao nova (resultados identicos).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence

from gorpc.ast.definition import Definition
from gorpc.ast.results import MalformedParameters
from gorpc.exporters.json_export import build_json_payload, export_json
from gorpc.parser.loader import SourceLoader
from gorpc.semantic.assembler import CompilationSession
from gorpc.semantic.extractor import DefinitionExtractor

logger = logging.getLogger(__name__)


@dataclass
class CompilationStats:
    package_count: int = 0
    service_count: int = 0
    method_count: int = 0
    object_count: int = 0
    excluded_service_count: int = 0


@dataclass
class CompilationResult:
    definition: Definition
    stats: CompilationStats

    def to_dict(self) -> Dict[str, Any]:
        return build_json_payload(self.definition)

    def to_json(self, path: Path) -> None:
        export_json(self.definition, path)


class DefinitionCompiler:
    def __init__(
        self,
        patterns: Sequence[str],
        exclusions: Optional[Iterable[str]] = None,
        params: Optional[Dict[str, Any]] = None,
        package_name: Optional[str] = None,
    ):
        self.patterns = [str(pattern) for pattern in patterns]
        self.exclusions = [name for name in (exclusions or []) if name]
        self.params = dict(params or {})
        self.package_name = package_name

    def compile(self) -> CompilationResult:
        loader = SourceLoader()
        packages = loader.load(self.patterns)

        session = CompilationSession()
        extractor = DefinitionExtractor(loader, session, self.exclusions)
        for package in packages:
            logger.debug("compiling package %s", package.path)
            extractor.extract_package(package)

        definition = session.finalize(package_name=self.package_name, params=self.params)
        stats = self._compute_stats(definition, session, len(packages))
        return CompilationResult(definition=definition, stats=stats)

    def _compute_stats(
        self,
        definition: Definition,
        session: CompilationSession,
        package_count: int,
    ) -> CompilationStats:
        return CompilationStats(
            package_count=package_count,
            service_count=len(definition.services),
            method_count=sum(len(service.methods) for service in definition.services),
            object_count=len(definition.objects),
            excluded_service_count=len(session.excluded_services),
        )


def parse_params(text: str) -> Dict[str, str]:
    """
    Le parametros no formato "key:value,key:value".

    Example:
        parse_params("target:web, version:2") -> {"target": "web", "version": "2"}
    """
    params: Dict[str, str] = {}
    if text == "":
        return params
    for pair in text.split(","):
        segments = pair.strip().split(":")
        if len(segments) != 2:
            raise MalformedParameters(message=f"malformed params: {pair.strip()!r} is not key:value")
        params[segments[0].strip()] = segments[1].strip()
    return params


def parse_exclusions(text: Optional[str]) -> List[str]:
    """Lista de servicos separados por virgula; vazia quando nao informada."""
    if not text:
        return []
    return [name.strip() for name in text.split(",") if name.strip()]
