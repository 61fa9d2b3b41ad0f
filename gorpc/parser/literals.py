"""Conversao de literais de string Go para str."""

from __future__ import annotations

import re

_SIMPLE_ESCAPES = {
    "a": "\a",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "v": "\v",
    "\\": "\\",
    '"': '"',
    "'": "'",
}

_ESCAPE_PATTERN = re.compile(
    r"\\(?:(?P<simple>[abfnrtv\\'\"])|x(?P<hex>[0-9a-fA-F]{2})"
    r"|u(?P<u4>[0-9a-fA-F]{4})|U(?P<u8>[0-9a-fA-F]{8})|(?P<oct>[0-7]{3}))"
)


def _replace_escape(match: re.Match) -> str:
    if match.group("simple"):
        return _SIMPLE_ESCAPES[match.group("simple")]
    if match.group("hex"):
        return chr(int(match.group("hex"), 16))
    if match.group("oct"):
        return chr(int(match.group("oct"), 8))
    return chr(int(match.group("u4") or match.group("u8"), 16))


def unquote(literal: str) -> str:
    """
    Remove aspas ou crases de um literal de string Go.

    Strings brutas (`...`) mantem o conteudo literal sem '\\r';
    strings interpretadas ("...") tem os escapes resolvidos.
    """
    if len(literal) >= 2 and literal[0] == literal[-1] == "`":
        return literal[1:-1].replace("\r", "")
    if len(literal) >= 2 and literal[0] == literal[-1] == '"':
        return _ESCAPE_PATTERN.sub(_replace_escape, literal[1:-1])
    return literal
