# src/bufconfig/module/module_config.py
"""
Modelo canônico de configuração de módulo (`ModuleConfig`).

Um `ModuleConfig` é uma unidade de compilação com escopo de diretório,
identidade opcional, mapas de raízes para includes/excludes e as
configurações efetivas de lint e breaking.

Decisões arquiteturais:
    - `dir_path` é `.` em v1beta1/v1 e um caminho relativo arbitrário em v2
    - `root_to_excludes` tem exatamente a chave `.` em v1/v2; em v1beta1
      pode ter várias raízes
    - Includes só existem em v2
    - O construtor programático revalida os mesmos invariantes da leitura

Invariantes:
    - `lint_config.file_version == breaking_config.file_version`
    - Todo caminho armazenado é normalizado e relativo à sua raiz
    - O objeto é imutável após a construção

Limites explícitos:
    - Não resolve herança de checks (ver `check.resolver`)
    - Não lê nem escreve documentos (ver `buf_yaml`)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from ..check.config import BreakingConfig, LintConfig, check_same_file_version, freeze_path_map
from ..core.errors import InvalidConfigError, InvalidPathError
from ..core.file_version import FileVersion
from ..core.module_ref import ModuleFullName
from ..core.normalpath import contains_path, join, normalize_and_validate, rel
from .paths import validate_include_and_exclude_paths


@dataclass(frozen=True)
class ModuleConfig:
    """Configuração de um módulo, com lint e breaking já efetivos."""

    dir_path: str
    module_full_name: Optional[ModuleFullName]
    lint_config: LintConfig
    breaking_config: BreakingConfig
    root_to_excludes: Mapping[str, Tuple[str, ...]] = field(
        default_factory=lambda: {".": ()}, hash=False
    )
    root_to_includes: Mapping[str, Tuple[str, ...]] = field(
        default_factory=lambda: {".": ()}, hash=False
    )

    def __post_init__(self) -> None:
        object.__setattr__(self, "root_to_excludes", freeze_path_map(self.root_to_excludes))
        object.__setattr__(self, "root_to_includes", freeze_path_map(self.root_to_includes))

    @property
    def file_version(self) -> FileVersion:
        return self.lint_config.file_version


def new_module_config(
    dir_path: str,
    module_full_name: Optional[ModuleFullName],
    root_to_includes: Optional[Mapping[str, Iterable[str]]],
    root_to_excludes: Mapping[str, Iterable[str]],
    lint_config: LintConfig,
    breaking_config: BreakingConfig,
) -> ModuleConfig:
    """
    Constrói um `ModuleConfig` validando os invariantes da versão.

    Args:
        dir_path: Diretório do módulo, relativo à raiz do documento.
        module_full_name: Identidade opcional do módulo.
        root_to_includes: Raiz → includes relativos à raiz (apenas v2).
        root_to_excludes: Raiz → excludes relativos à raiz.
        lint_config: Configuração efetiva de lint.
        breaking_config: Configuração efetiva de breaking.

    Raises:
        InvalidConfigError: Se a cardinalidade das raízes ou os includes
            forem incompatíveis com a versão.
        InvalidPathError: Se algum caminho violar as regras de caminhos.
        InternalConfigError: Se lint e breaking tiverem versões distintas.
    """
    file_version = lint_config.file_version
    check_same_file_version(file_version, breaking_config)

    dir_path = normalize_and_validate(dir_path)
    if file_version < FileVersion.V2 and dir_path != ".":
        raise InvalidConfigError(
            f"module directory must be \".\" for version {file_version.value}, got {dir_path!r}"
        )

    if not root_to_excludes:
        raise InvalidConfigError("root_to_excludes must have at least one root")
    if file_version >= FileVersion.V1 and set(root_to_excludes) != {"."}:
        raise InvalidConfigError(
            f"root_to_excludes must contain exactly the root \".\" for version "
            f"{file_version.value}, got {sorted(root_to_excludes)}"
        )

    root_to_includes = {root: list(paths) for root, paths in (root_to_includes or {}).items()}
    root_to_excludes = {root: list(paths) for root, paths in root_to_excludes.items()}
    for root, includes in root_to_includes.items():
        if root not in root_to_excludes:
            raise InvalidConfigError(f"includes specified for unknown root {root!r}")
        if includes and file_version < FileVersion.V2:
            raise InvalidConfigError(
                f"includes cannot be set on version {file_version.value}"
            )

    normalized_includes: Dict[str, Tuple[str, ...]] = {}
    normalized_excludes: Dict[str, Tuple[str, ...]] = {}
    for root in sorted(root_to_excludes):
        normalized_root = normalize_and_validate(root)
        includes, excludes = validate_include_and_exclude_paths(
            root_to_includes.get(root, ()),
            root_to_excludes[root],
        )
        normalized_includes[normalized_root] = includes
        normalized_excludes[normalized_root] = excludes

    return ModuleConfig(
        dir_path=dir_path,
        module_full_name=module_full_name,
        root_to_includes=normalized_includes,
        root_to_excludes=normalized_excludes,
        lint_config=lint_config,
        breaking_config=breaking_config,
    )


def get_root_to_excludes(roots: List[str], full_excludes: List[str]) -> Dict[str, Tuple[str, ...]]:
    """
    Calcula `root_to_excludes` a partir de `build.roots` e `build.excludes`
    (v1beta1/v1), onde os excludes são relativos à raiz do documento.

    Raises:
        InvalidPathError: Se um exclude for arquivo, coincidir com uma raiz
            ou não estiver contido em nenhuma raiz, ou se raízes se sobrepuserem.
    """
    normalized_roots: List[str] = []
    for root in roots or ["."]:
        normalized = normalize_and_validate(root)
        if normalized in normalized_roots:
            raise InvalidPathError(f"duplicate root {normalized!r}")
        normalized_roots.append(normalized)
    for root in normalized_roots:
        for other in normalized_roots:
            if contains_path(other, root):
                raise InvalidPathError(f"root {root!r} is within root {other!r}, which is not valid")

    root_set = set(normalized_roots)
    root_to_excludes: Dict[str, set] = {root: set() for root in normalized_roots}
    for exclude in full_excludes:
        normalized = normalize_and_validate(exclude)
        if normalized.endswith(".proto"):
            raise InvalidPathError(
                f"excludes can only be directories but file {normalized} discovered"
            )
        if normalized in root_set:
            raise InvalidPathError(
                f"{normalized} is both a root and exclude, which means the entire root "
                f"is excluded, which is not valid"
            )
        containing = [root for root in normalized_roots if contains_path(root, normalized)]
        if not containing:
            raise InvalidPathError(
                f"exclude {normalized} is not contained in any root, which is not valid"
            )
        root_to_excludes[containing[0]].add(rel(containing[0], normalized))
    return {root: tuple(sorted(excludes)) for root, excludes in sorted(root_to_excludes.items())}


def root_to_excludes_to_build(
    root_to_excludes: Mapping[str, Iterable[str]],
) -> Tuple[List[str], List[str]]:
    """Inverso de `get_root_to_excludes`: (roots, excludes relativos ao documento)."""
    roots = sorted(root_to_excludes)
    excludes = sorted(
        join(root, exclude) for root in roots for exclude in root_to_excludes[root]
    )
    return roots, excludes
