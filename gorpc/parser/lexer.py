"""
lexer.py - Carregamento e execucao do parser Lark

Proposito:
    Ler a gramatica de definicoes Go e expor funcoes de parsing para
    arquivos e strings. Centraliza a criacao do parser LALR, a insercao
    automatica de ponto-e-virgula e a coleta de comentarios.

Componentes principais:
    - load_grammar: leitura do arquivo gorpc.lark do pacote
    - create_parser: construcao do parser Lark
    - GoSemicolonInserter: postlexer com a regra de ponto-e-virgula de Go
    - parse_file/parse_string: parsing com tratamento de erros

Dependencias criticas:
    - lark: parser LALR, postlexer e excecoes de sintaxe
    - importlib.resources: acesso a dados do pacote
    - contextvars: coletor de comentarios da chamada corrente

Exemplo de uso:
    from gorpc.parser.lexer import parse_file
    parsed = parse_file("definitions/greeter.go")
    parsed.tree, parsed.comments

Notas de implementacao:
    - O parser e cacheado; os comentarios sao coletados via lexer_callbacks
      num coletor guardado em ContextVar durante cada parse.
    - Erros de sintaxe geram LoadError com SourceLocation.
"""

from __future__ import annotations

from contextvars import ContextVar
from dataclasses import dataclass, field
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Iterator, List, Optional

from lark import Lark, Token, Tree
from lark.exceptions import UnexpectedCharacters, UnexpectedToken
from lark.lark import PostLex

from gorpc.ast.nodes import CommentNode, SourceLocation
from gorpc.ast.results import LoadError
from gorpc.error_handler import create_pedagogical_error

BYTE_ORDER_MARK = "\ufeff"


@dataclass
class ParsedSource:
    """Arvore concreta de um arquivo e seus comentarios em ordem de ocorrencia."""

    tree: Tree
    comments: List[CommentNode]
    source: str


@dataclass
class _CommentCollector:
    file_path: Path
    source: str
    comments: List[CommentNode] = field(default_factory=list)

    def add(self, token: Token) -> None:
        text = str(token)
        start = token.start_pos
        line_start = self.source.rfind("\n", 0, start) + 1
        standalone = self.source[line_start:start].strip() == ""
        self.comments.append(
            CommentNode(
                text=text,
                location=SourceLocation(file=self.file_path, line=token.line, column=token.column),
                end_line=token.line + text.count("\n"),
                standalone=standalone,
            )
        )


_active_collector: ContextVar[Optional[_CommentCollector]] = ContextVar(
    "gorpc_comment_collector", default=None
)


def _collect_comment(token: Token) -> Token:
    collector = _active_collector.get()
    if collector is not None:
        collector.add(token)
    return token


class GoSemicolonInserter(PostLex):
    """
    Converte quebras de linha em ponto-e-virgula seguindo a regra de Go.

    Um NEWLINE vira _SEMI quando o token anterior e identificador, literal,
    fechamento de ')', ']' ou '}', ou operador terminado em ++/--.
    """

    always_accept = ("NEWLINE",)

    TERMINATING_TYPES = frozenset(
        {"NAME", "NUMBER", "STRING", "RAW_STRING", "RUNE", "RPAR", "RSQB", "RBRACE"}
    )

    def process(self, stream: Iterator[Token]) -> Iterator[Token]:
        last: Optional[Token] = None
        for token in stream:
            if token.type == "NEWLINE":
                if last is not None and self._ends_statement(last):
                    last = Token.new_borrow_pos("_SEMI", ";", token)
                    yield last
                continue
            last = token
            yield token
        if last is not None and self._ends_statement(last):
            yield Token.new_borrow_pos("_SEMI", ";", last)

    def _ends_statement(self, token: Token) -> bool:
        if token.type in self.TERMINATING_TYPES:
            return True
        if token.type == "OPERATOR":
            return token.value.endswith(("++", "--"))
        return False


@lru_cache(maxsize=1)
def load_grammar() -> str:
    """Carrega o arquivo gorpc.lark a partir do pacote gorpc."""
    grammar_path = resources.files("gorpc").joinpath("grammar").joinpath("gorpc.lark")
    return grammar_path.read_text(encoding="utf-8")


@lru_cache(maxsize=1)
def create_parser() -> Lark:
    """Cria o parser LALR com lexer contextual e postlexer de Go."""
    grammar_text = load_grammar()
    return Lark(
        grammar_text,
        parser="lalr",
        lexer="contextual",
        maybe_placeholders=False,
        postlex=GoSemicolonInserter(),
        propagate_positions=True,
        lexer_callbacks={"COMMENT": _collect_comment},
    )


def parse_string(content: str, filename: str) -> ParsedSource:
    """Parseia um arquivo de definicao a partir de uma string."""
    # o toolchain Go aceita um BOM inicial
    if content.startswith(BYTE_ORDER_MARK):
        content = content[1:]
    parser = create_parser()
    collector = _CommentCollector(file_path=Path(filename), source=content)
    reset_token = _active_collector.set(collector)
    try:
        tree = parser.parse(content)
    except UnexpectedToken as exc:
        pedagogical_msg = create_pedagogical_error(exc, content)
        location = SourceLocation(file=Path(filename), line=exc.line, column=exc.column)
        expected = sorted(exc.expected) if exc.expected else None
        raise LoadError(
            message=pedagogical_msg,
            location=location,
            expected=expected,
        ) from exc
    except UnexpectedCharacters as exc:
        pedagogical_msg = create_pedagogical_error(exc, content)
        location = SourceLocation(file=Path(filename), line=exc.line, column=exc.column)
        raise LoadError(
            message=pedagogical_msg,
            location=location,
        ) from exc
    finally:
        _active_collector.reset(reset_token)
    return ParsedSource(tree=tree, comments=collector.comments, source=content)


def parse_file(path: Path | str) -> ParsedSource:
    """Parseia um arquivo de definicao a partir do disco."""
    file_path = Path(path)
    try:
        data = file_path.read_bytes()
    except OSError as exc:
        raise LoadError(message=f"cannot read {file_path}: {exc.strerror or exc}") from exc
    try:
        content = data.decode("utf-8")
    except UnicodeDecodeError as exc:
        prefix = data[: exc.start]
        line_start = prefix.rfind(b"\n") + 1
        location = SourceLocation(
            file=file_path,
            line=prefix.count(b"\n") + 1,
            column=exc.start - line_start + 1,
        )
        raise LoadError(
            message=f"cannot read {file_path}: invalid UTF-8 byte 0x{data[exc.start]:02x} at offset {exc.start}",
            location=location,
        ) from exc
    return parse_string(content, str(file_path))
