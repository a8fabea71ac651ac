# src/bufconfig/module/paths.py
"""
Validação dos conjuntos de caminhos `includes` e `excludes` de um módulo.

Regras, aplicadas em ordem (cada violação com mensagem própria):
    1. Nenhum include pode ser o próprio diretório do módulo.
    2. Nenhum include pode ser duplicado após normalização.
    3. Nenhum include pode ser subdiretório estrito de outro include.
    4. Nenhum caminho pode ser include e exclude ao mesmo tempo.
    5. Nenhum include pode ser subdiretório estrito de um exclude.
    6. Com includes definidos, todo exclude deve estar contido em algum include.

Antes das regras, todo caminho é normalizado e deve residir no diretório do
módulo; um exclude igual ao diretório do módulo é rejeitado.

Invariantes:
    - O resultado são duas tuplas ordenadas e sem duplicatas, relativas ao
      diretório do módulo
"""

from __future__ import annotations

from typing import Iterable, List, Set, Tuple

from ..core.errors import InvalidPathError
from ..core.normalpath import contains_path, normalize_and_validate, rel


def _expect(cond: bool, msg: str) -> None:
    if not cond:
        raise InvalidPathError(msg)


def _normalize_within(paths: Iterable[str], dir_path: str, what: str) -> List[str]:
    out: List[str] = []
    for path in paths:
        _expect(isinstance(path, str) and bool(path), f"invalid {what} path: {path!r}")
        normalized = normalize_and_validate(path)
        _expect(
            normalized == dir_path or contains_path(dir_path, normalized),
            f"{what} path {path!r} does not reside within module directory {dir_path!r}",
        )
        out.append(normalized)
    return out


def validate_include_and_exclude_paths(
    include_paths: Iterable[str],
    exclude_paths: Iterable[str],
    *,
    dir_path: str = ".",
) -> Tuple[Tuple[str, ...], Tuple[str, ...]]:
    """
    Valida e normaliza os caminhos de inclusão e exclusão de um módulo.

    Args:
        include_paths: Caminhos de inclusão, relativos à mesma base que `dir_path`.
        exclude_paths: Caminhos de exclusão, relativos à mesma base que `dir_path`.
        dir_path: Diretório do módulo (`.` quando os caminhos já são relativos a ele).

    Returns:
        (includes, excludes) ordenados, deduplicados e relativos ao módulo.

    Raises:
        InvalidPathError: Na primeira regra violada.
    """
    includes = _normalize_within(include_paths, dir_path, "include")
    excludes = _normalize_within(exclude_paths, dir_path, "exclude")

    for exclude in excludes:
        _expect(
            exclude != dir_path,
            f"exclude path {exclude!r} is equal to module directory {dir_path!r}",
        )

    for include in includes:
        _expect(
            include != dir_path,
            f"include path {include!r} is equal to module directory {dir_path!r}",
        )

    seen: Set[str] = set()
    for include in includes:
        _expect(include not in seen, f"duplicate include path {include!r}")
        seen.add(include)

    for include in includes:
        for other in includes:
            _expect(
                not contains_path(other, include),
                f"include path {include!r} is a subdirectory of {other!r} (another include path)",
            )

    exclude_set = set(excludes)
    for include in includes:
        _expect(
            include not in exclude_set,
            f"{include!r} is both an include path and an exclude path",
        )

    for include in includes:
        for exclude in sorted(exclude_set):
            _expect(
                not contains_path(exclude, include),
                f"include path {include!r} is a subdirectory of {exclude!r} (an exclude path)",
            )

    if includes:
        for exclude in sorted(exclude_set):
            _expect(
                any(contains_path(include, exclude) for include in includes),
                f"include paths {sorted(includes)} are specified, but exclude path "
                f"{exclude!r} is not contained within any of them",
            )

    return (
        tuple(sorted(rel(dir_path, p) for p in seen)),
        tuple(sorted({rel(dir_path, p) for p in exclude_set})),
    )
