# src/bufconfig/check/resolver.py
"""
Resolução da configuração efetiva de checks por módulo.

Para cada módulo e cada tipo de check existem dois estados, fixados na
leitura do documento:

    - Herdado: o módulo não declara bloco próprio. A configuração efetiva é
      a configuração compartilhada, com `ignore` e `ignore_only` filtrados
      para os caminhos sob o diretório do módulo e reescritos relativos a ele.
    - Sobrescrito: o módulo declara bloco próprio. A configuração efetiva é
      exatamente esse bloco; nenhum campo é herdado da configuração
      compartilhada. Campo ausente significa vazio, não "herdar".

Em ambos os casos, se o próprio diretório do módulo estiver entre os
caminhos ignorados, a configuração efetiva fica desabilitada.

Limites explícitos:
    - Não faz merge parcial entre escopos
    - Não decide o que é fatorado na escrita (ver `canonical`)
"""

from __future__ import annotations

import dataclasses
from typing import Dict, Iterable, Optional, Tuple, TypeVar

from ..core.errors import InvalidPathError
from ..core.normalpath import equals_or_contains_path, join, rel
from .config import CheckConfig

C = TypeVar("C", bound=CheckConfig)


def _relativize_paths(paths: Iterable[str], dir_path: str) -> Tuple[str, ...]:
    return tuple(
        sorted({rel(dir_path, p) for p in paths if equals_or_contains_path(dir_path, p)})
    )


def _rebase_paths(paths: Iterable[str], dir_path: str) -> Tuple[str, ...]:
    return tuple(sorted({join(dir_path, p) for p in paths}))


def relativize_check_config(config: C, dir_path: str) -> C:
    """Coordenadas do documento → coordenadas do módulo em `dir_path`."""
    ignore_paths = _relativize_paths(config.ignore_paths, dir_path)
    ignore_only: Dict[str, Tuple[str, ...]] = {}
    for key, paths in sorted(config.ignore_id_or_category_to_paths.items()):
        relativized = _relativize_paths(paths, dir_path)
        if relativized:
            ignore_only[key] = relativized
    return dataclasses.replace(
        config,
        ignore_paths=ignore_paths,
        ignore_id_or_category_to_paths=ignore_only,
        disabled="." in ignore_paths,
    )


def rebase_check_config(config: C, dir_path: str) -> C:
    """Inverso de `relativize_check_config` para configurações efetivas."""
    return dataclasses.replace(
        config,
        ignore_paths=_rebase_paths(config.ignore_paths, dir_path),
        ignore_id_or_category_to_paths={
            key: _rebase_paths(paths, dir_path)
            for key, paths in sorted(config.ignore_id_or_category_to_paths.items())
        },
    )


def check_paths_within_module(config: CheckConfig, dir_path: str, *, where: str) -> None:
    """Bloco local: todo caminho deve estar no diretório do módulo (ou ser ele)."""
    paths = list(config.ignore_paths)
    for key_paths in config.ignore_id_or_category_to_paths.values():
        paths.extend(key_paths)
    for path in paths:
        if not equals_or_contains_path(dir_path, path):
            raise InvalidPathError(
                f"{where}: ignore path {path!r} does not reside within module directory {dir_path!r}"
            )


def resolve_effective_check_config(
    shared: C,
    local: Optional[C],
    dir_path: str,
    *,
    where: str = "check",
) -> C:
    """
    Calcula a configuração efetiva de um módulo.

    Args:
        shared: Configuração do escopo do arquivo, em coordenadas do documento.
        local: Bloco do módulo, em coordenadas do documento, ou `None`.
        dir_path: Diretório normalizado do módulo.

    Returns:
        Configuração em coordenadas do módulo.

    Raises:
        InvalidPathError: Se o bloco local ignorar caminhos fora do módulo.
    """
    if local is None:
        return relativize_check_config(shared, dir_path)
    check_paths_within_module(local, dir_path, where=where)
    return relativize_check_config(local, dir_path)
