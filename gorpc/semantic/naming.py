"""Conversoes de caixa usadas em nomes de metodos, campos e templates."""

from __future__ import annotations


def camelize_down(name: str) -> str:
    """
    Converte para lowerCamelCase preservando siglas.

    Example:
        camelize_down("Name") -> "name"
        camelize_down("ID") -> "id"
        camelize_down("URLParser") -> "urlParser"
    """
    run = 0
    while run < len(name) and name[run].isupper():
        run += 1
    if run == 0:
        return name
    if run == len(name) or run == 1:
        return name[:run].lower() + name[run:]
    # a ultima maiuscula da sigla inicia a proxima palavra
    if name[run].islower():
        run -= 1
    return name[:run].lower() + name[run:]


def camelize_up(name: str) -> str:
    """Converte para UpperCamelCase: camelize_up("greet") -> "Greet"."""
    return name[:1].upper() + name[1:]
