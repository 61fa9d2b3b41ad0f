"""
results.py - Tipos de resultado e erros de compilacao do gorpc

Proposito:
    Definir Result/Ok/Err inspirados em Elm para o unico caso recuperavel
    (valores de metadados mal formados) e centralizar a taxonomia de erros
    fatais da compilacao de definicoes.

Componentes principais:
    - Result, Ok, Err: tipos genericos para sucesso/erro
    - DefinitionError e subclasses: erros tipados com localizacao

Dependencias criticas:
    - gorpc.ast.nodes: SourceLocation para localizacao precisa
    - dataclasses/typing: estrutura e tipagem

Exemplo de uso:
    from gorpc.ast.results import FieldNotExported
    raise FieldNotExported(message="name must be exported", location=loc)

Notas de implementacao:
    - Todo erro fatal aborta a compilacao inteira; nao ha Definition parcial.
    - MalformedMetadata nunca e lancado pelo extrator: volta dentro de Err.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeVar, Union

from gorpc.ast.nodes import SourceLocation

T = TypeVar("T")
E = TypeVar("E")
U = TypeVar("U")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Representa sucesso com valor."""

    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value

    def unwrap_or(self, default: T) -> T:
        return self.value

    def map(self, fn: Callable[[T], U]) -> "Result[U, E]":
        return Ok(fn(self.value))


@dataclass(frozen=True)
class Err(Generic[E]):
    """Representa falha com erro tipado."""

    error: E

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self):
        raise ValueError(f"Tentou unwrap() em Err: {self.error}")

    def unwrap_or(self, default: T) -> T:
        return default

    def map(self, fn: Callable[[T], U]) -> "Result[U, E]":
        return self


Result = Union[Ok[T], Err[E]]


@dataclass
class DefinitionError(Exception):
    """
    Erro de compilacao com localizacao precisa.

    Attributes:
        message: descricao curta do erro
        location: posicao no arquivo fonte (quando disponivel)
        package: caminho do pacote onde o erro ocorreu
    """

    message: str
    location: Optional[SourceLocation] = None
    package: Optional[str] = None

    def __str__(self) -> str:
        parts = []
        if self.package:
            parts.append(self.package)
        if self.location:
            parts.append(str(self.location))
        parts.append(self.message)
        return ": ".join(parts)

    def to_diagnostic(self) -> str:
        return f"erro: {self}"


@dataclass
class LoadError(DefinitionError):
    """Fonte nao encontrada, com erro de sintaxe ou com nome nao resolvido."""

    expected: Optional[list[str]] = None


@dataclass
class InvalidSignature(DefinitionError):
    """Metodo sem exatamente um parametro e um resultado."""

    method: str = ""

    def to_diagnostic(self) -> str:
        return (
            f"erro: {self}\n"
            f"  Assinatura esperada: {self.method or 'Metodo'}(MetodoRequest) MetodoResponse"
        )


@dataclass
class NestedStructNotSupported(DefinitionError):
    """Campo cujo tipo e uma struct anonima."""

    def to_diagnostic(self) -> str:
        return f"erro: {self}\n  Dica: declare a struct como um tipo nomeado separado"


@dataclass
class FieldNotExported(DefinitionError):
    """Campo de struct nao exportado (inicial minuscula)."""

    field_name: str = ""


@dataclass
class MalformedTag(DefinitionError):
    """Tag de campo que nao segue o formato key:"value"."""

    tag: str = ""


@dataclass
class MalformedMetadata(DefinitionError):
    """Valor de metadado que nao e um literal JSON valido."""

    key: str = ""
    value: str = ""


@dataclass
class MalformedParameters(DefinitionError):
    """String de parametros fora do formato key:value,key:value."""


@dataclass
class AmbiguousObjectName(DefinitionError):
    """Dois pacotes declaram objetos diferentes com o mesmo nome."""

    name: str = ""
    type_ids: tuple[str, ...] = ()

    def to_diagnostic(self) -> str:
        ids = ", ".join(self.type_ids)
        return f"erro: {self}\n  Declaracoes em conflito: {ids}"


@dataclass
class ObjectNotFound(DefinitionError):
    """Busca por objeto inexistente na Definition."""

    name: str = ""
