# src/bufconfig/core/normalpath.py
"""Normalização e relações de contenção entre caminhos relativos.

Todos os caminhos armazenados no modelo passam por `normalize_and_validate`:
separador `/`, sem `..`, sem barra final, relativos ao diretório de contexto.
"""

from __future__ import annotations

import posixpath

from .errors import InvalidPathError


def normalize(path: str) -> str:
    """Normaliza um caminho (`""` vira `"."`)."""
    return posixpath.normpath(path.replace("\\", "/")) if path else "."


def normalize_and_validate(path: str) -> str:
    """Normaliza e garante que o caminho é relativo e não escapa do contexto."""
    normalized = normalize(path)
    if posixpath.isabs(normalized):
        raise InvalidPathError(f"{path}: expected to be relative")
    if normalized == ".." or normalized.startswith("../"):
        raise InvalidPathError(f"{path}: is outside the context directory")
    return normalized


def contains_path(parent: str, child: str) -> bool:
    """True se `child` está estritamente dentro de `parent`."""
    if parent == child:
        return False
    if parent == ".":
        return child != ".." and not child.startswith("../")
    return child.startswith(parent + "/")


def equals_or_contains_path(parent: str, child: str) -> bool:
    return parent == child or contains_path(parent, child)


def join(*parts: str) -> str:
    return normalize(posixpath.join(*parts))


def rel(base: str, target: str) -> str:
    """Caminho de `target` relativo a `base` (ambos normalizados)."""
    if base == ".":
        return target
    if target == base:
        return "."
    if target.startswith(base + "/"):
        return target[len(base) + 1:]
    return posixpath.relpath(target, base)
