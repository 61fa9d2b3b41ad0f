"""
error_handler.py - Gerador de mensagens de erro pedagogicas para definicoes Go

Proposito:
    Transformar erros brutos do Lark em mensagens que mostram a linha com
    problema, apontam a coluna e sugerem a forma aceita pelo compilador.
    Detecta os enganos mais comuns em arquivos de definicao.

Componentes principais:
    - DefinitionErrorHandler: gerador principal de mensagens pedagogicas
    - Detectores de padroes: _detect_keyword_typo, _is_generic_declaration, ...
    - Formatadores de mensagens: _format_generic_unexpected_token, ...

Dependencias criticas:
    - lark.exceptions: UnexpectedToken, UnexpectedCharacters
    - re: deteccao de padroes

Exemplo de uso:
    from gorpc.error_handler import DefinitionErrorHandler
    handler = DefinitionErrorHandler()
    message = handler.handle_unexpected_token(exc, source_code)

Notas de implementacao:
    - A mensagem nao repete a localizacao: LoadError ja a prefixa.
    - Mostra uma linha de contexto antes e depois do erro.
"""

from __future__ import annotations

import re
from typing import List, Optional, Tuple

from lark.exceptions import UnexpectedCharacters, UnexpectedToken

HIDDEN_TOKENS = frozenset({"COMMENT", "NEWLINE"})

KEYWORDS = (
    "package",
    "import",
    "type",
    "func",
    "const",
    "var",
    "struct",
    "interface",
    "map",
    "chan",
)


class DefinitionErrorHandler:
    """
    Gerador de mensagens de erro pedagogicas.

    Example:
        handler = DefinitionErrorHandler()
        try:
            tree = parser.parse(content)
        except UnexpectedToken as e:
            print(handler.handle_unexpected_token(e, content))
    """

    def __init__(self) -> None:
        self.generic_pattern = re.compile(r"^\s*(type\s+)?[A-Za-z_]\w*\s*\[\s*[A-Za-z_]\w*\s+[\w\[\]*.|~]+")
        self.leading_word_pattern = re.compile(r"^\s*([A-Za-z_][A-Za-z0-9_]*)\b")

    def handle_unexpected_token(self, error: UnexpectedToken, source: str) -> str:
        context_lines = self._get_context_lines(source, error.line)
        current_line = self._current_line(source, error.line)

        typo = self._detect_keyword_typo(current_line, error)
        if typo:
            return self._format_keyword_typo_error(current_line, typo)

        if self._is_generic_declaration(current_line):
            return self._format_generic_declaration_error(current_line, error.column)

        if self._is_missing_package_clause(error):
            return self._format_missing_package_error(current_line)

        if self._is_channel_direction(current_line):
            return self._format_channel_direction_error(current_line, error.column)

        return self._format_generic_unexpected_token(error, current_line, context_lines)

    def handle_unexpected_characters(self, error: UnexpectedCharacters, source: str) -> str:
        current_line = self._current_line(source, error.line)
        return self._format_generic_unexpected_char(error, current_line)

    # =========================================================================
    # DETECTORES DE PADROES
    # =========================================================================

    def _is_generic_declaration(self, line: str) -> bool:
        """
        Detecta declaracoes com parametros de tipo.

        Example:
            type Page[T any] struct { Items []T }
        """
        return bool(self.generic_pattern.match(line))

    def _is_missing_package_clause(self, error: UnexpectedToken) -> bool:
        return bool(error.expected) and "PACKAGE" in set(error.expected)

    def _is_channel_direction(self, line: str) -> bool:
        return "<-" in line

    def _detect_keyword_typo(
        self,
        line: str,
        error: UnexpectedToken,
    ) -> Optional[Tuple[str, str]]:
        """
        Detecta palavra-chave digitada errada no inicio da linha.

        Returns:
            Tupla (typo, sugestao) ou None

        Example:
            "tpye User struct {" -> ("tpye", "type")
        """
        token = getattr(error, "token", None)
        if token is None or token.type != "NAME":
            return None
        match = self.leading_word_pattern.match(line)
        if not match or match.group(1) != str(token):
            return None
        word = match.group(1)
        if word in KEYWORDS:
            return None

        best = min(KEYWORDS, key=lambda keyword: self._levenshtein_distance(word, keyword))
        if self._levenshtein_distance(word, best) <= 2:
            return (word, best)
        return None

    def _levenshtein_distance(self, s1: str, s2: str) -> int:
        if len(s1) < len(s2):
            return self._levenshtein_distance(s2, s1)

        if len(s2) == 0:
            return len(s1)

        previous_row = range(len(s2) + 1)
        for i, c1 in enumerate(s1):
            current_row = [i + 1]
            for j, c2 in enumerate(s2):
                insertions = previous_row[j + 1] + 1
                deletions = current_row[j] + 1
                substitutions = previous_row[j] + (c1 != c2)
                current_row.append(min(insertions, deletions, substitutions))
            previous_row = current_row

        return previous_row[-1]

    # =========================================================================
    # FORMATADORES DE MENSAGENS
    # =========================================================================

    def _format_keyword_typo_error(self, line: str, typo_info: Tuple[str, str]) -> str:
        typo, suggestion = typo_info
        corrected = re.sub(rf"\b{re.escape(typo)}\b", suggestion, line, count=1)
        return (
            f"Palavra-chave desconhecida '{typo}'.\n"
            f"    {line.strip()}\n"
            f"\nVoce quis dizer '{suggestion}'?\n"
            f"    {corrected.strip()}"
        )

    def _format_generic_declaration_error(self, line: str, column: int) -> str:
        marker = " " * max(column - 1, 0) + "^"
        return (
            "Parametros de tipo (generics) nao sao suportados em definicoes.\n"
            f"    {line}\n"
            f"    {marker}\n"
            "\nDeclare um tipo concreto para cada uso:\n"
            "    type UserPage struct {\n"
            "        Items []User\n"
            "    }"
        )

    def _format_missing_package_error(self, line: str) -> str:
        return (
            "Arquivo de definicao deve comecar com a clausula package.\n"
            f"    {line.strip()}\n"
            "\nExemplo:\n"
            "    package definitions"
        )

    def _format_channel_direction_error(self, line: str, column: int) -> str:
        marker = " " * max(column - 1, 0) + "^"
        return (
            "Canais direcionais (<-chan, chan<-) nao sao aceitos em definicoes.\n"
            f"    {line}\n"
            f"    {marker}\n"
            "\nUse tipos de dados simples nos campos de objetos."
        )

    def _format_generic_unexpected_token(
        self,
        error: UnexpectedToken,
        current_line: str,
        context_lines: List[str],
    ) -> str:
        token = error.token
        if token is None or token.type == "$END":
            token_repr = "<EOF>"
        else:
            token_repr = repr(str(token))

        msg = f"Token inesperado {token_repr}\n"

        if len(context_lines) >= 3:
            msg += "\nContexto:\n"
            for i, ctx_line in enumerate(context_lines):
                prefix = "  " if i != 1 else ">>>"
                msg += f"{prefix} {ctx_line}\n"
        else:
            msg += f"    {current_line}\n"

        if error.expected:
            expected_friendly = self._humanize_expected_tokens(error.expected)
            msg += f"\nEsperado: {', '.join(expected_friendly[:5])}"
            if len(expected_friendly) > 5:
                msg += f" (e {len(expected_friendly) - 5} outros)"

        return msg.rstrip("\n")

    def _format_generic_unexpected_char(
        self,
        error: UnexpectedCharacters,
        current_line: str,
    ) -> str:
        char_repr = repr(error.char) if hasattr(error, "char") else "<unknown>"

        msg = f"Caractere inesperado {char_repr}\n"
        msg += f"    {current_line}\n"
        msg += f"    {' ' * max(error.column - 1, 0)}^ aqui\n"
        msg += "\nVerifique:\n"
        msg += "  - Aspas ou crases abertas mas nao fechadas\n"
        msg += "  - Caracteres que nao existem na sintaxe de Go"
        return msg

    # =========================================================================
    # UTILITARIOS
    # =========================================================================

    def _current_line(self, source: str, line_number: int) -> str:
        lines = source.splitlines()
        if 1 <= line_number <= len(lines):
            return lines[line_number - 1]
        return ""

    def _get_context_lines(
        self,
        source: str,
        line_number: int,
        context: int = 1,
    ) -> List[str]:
        """
        Extrai linhas de contexto ao redor do erro.

        Returns:
            Lista [linha_anterior, linha_erro, linha_seguinte]
        """
        lines = source.splitlines()
        idx = line_number - 1
        start = max(0, idx - context)
        end = min(len(lines), idx + context + 1)
        return lines[start:end]

    def _humanize_expected_tokens(self, expected: List[str]) -> List[str]:
        """
        Converte nomes de tokens tecnicos para nomes amigaveis.

        Example:
            ["RBRACE", "NAME"] -> ["'}'", "identificador"]
        """
        friendly_names = {
            "NAME": "identificador",
            "STRING": "texto entre aspas",
            "RAW_STRING": "texto entre crases",
            "NUMBER": "numero",
            "_SEMI": "fim de linha",
            "LPAR": "'('",
            "RPAR": "')'",
            "LSQB": "'['",
            "RSQB": "']'",
            "LBRACE": "'{'",
            "RBRACE": "'}'",
            "STAR": "'*'",
            "DOT": "'.'",
            "COMMA": "','",
            "EQUAL": "'='",
        }

        result = []
        for token in sorted(expected):
            if token in HIDDEN_TOKENS or token.startswith("__"):
                continue
            if token in friendly_names:
                result.append(friendly_names[token])
            elif token.lower() in KEYWORDS:
                result.append(token.lower())
            else:
                result.append(token)
        return result


def create_pedagogical_error(exc: Exception, source: str) -> str:
    """
    Cria mensagem pedagogica a partir de uma excecao do Lark.

    Example:
        try:
            tree = parser.parse(content)
        except (UnexpectedToken, UnexpectedCharacters) as e:
            print(create_pedagogical_error(e, content))
    """
    handler = DefinitionErrorHandler()

    if isinstance(exc, UnexpectedToken):
        return handler.handle_unexpected_token(exc, source)
    elif isinstance(exc, UnexpectedCharacters):
        return handler.handle_unexpected_characters(exc, source)
    else:
        return str(exc)
