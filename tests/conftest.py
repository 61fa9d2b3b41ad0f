"""
conftest.py - Fixtures compartilhadas para testes do gorpc

Proposito:
    Fornecer fixtures comuns para parsing, carregamento e compilacao.

Componentes principais:
    - paths para fixtures (modulo Go de exemplo)
    - resultado compilado do modulo de exemplo
    - fabrica de modulos temporarios

Dependencias criticas:
    - pytest: gerenciamento de fixtures
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict

import pytest

from gorpc.ast.nodes import SourceLocation
from gorpc.compiler import CompilationResult, DefinitionCompiler


@pytest.fixture()
def fixtures_dir() -> Path:
    return Path(__file__).parent / "fixtures"


@pytest.fixture()
def module_dir(fixtures_dir: Path) -> Path:
    return fixtures_dir / "module"


@pytest.fixture()
def base_location() -> SourceLocation:
    return SourceLocation(file=Path("test.go"), line=1, column=1)


@pytest.fixture()
def compiled(module_dir: Path) -> CompilationResult:
    return DefinitionCompiler([str(module_dir)]).compile()


@pytest.fixture()
def make_module(tmp_path: Path) -> Callable[[Dict[str, str]], Path]:
    """Cria um modulo Go temporario a partir de {caminho relativo: conteudo}."""

    def factory(files: Dict[str, str], module: str = "example.com/tmp") -> Path:
        (tmp_path / "go.mod").write_text(f"module {module}\n\ngo 1.21\n", encoding="utf-8")
        for relative, content in files.items():
            target = tmp_path / relative
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")
        return tmp_path

    return factory
