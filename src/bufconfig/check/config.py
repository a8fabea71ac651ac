# src/bufconfig/check/config.py
"""
Modelo canônico de configuração de checks (lint e breaking).

Este módulo define o formato compartilhado de "quais regras rodam, quais são
exceção e quais caminhos são ignorados", especializado em `LintConfig` e
`BreakingConfig`.

Componentes principais:
    - CheckConfig    → campos comuns a lint e breaking
    - LintConfig     → opções específicas de lint
    - BreakingConfig → opções específicas de breaking
    - new_lint_config / new_breaking_config → construtores que validam e
      normalizam
    - default_lint_config / default_breaking_config → tabelas de defaults
      por versão

Decisões arquiteturais:
    - Identificadores e caminhos são deduplicados e ordenados na construção
    - `disabled` é um estado próprio, distinto de um `use` vazio
    - `disabled` equivale a ignorar o próprio diretório de escopo (`.`)
    - O cruzamento de identificadores com o registro de regras não é feito aqui
    - Mapas são proxies somente leitura; os defaults por versão são
      compartilhados sem risco de mutação

Invariantes:
    - Todo caminho armazenado está normalizado e é relativo
    - `disabled` é verdadeiro se e somente se `.` está em `ignore_paths`
    - `disable_builtin` só é verdadeiro em configurações v2

Limites explícitos:
    - Não executa regras
    - Não resolve herança entre escopos (ver `resolver`)
    - Não serializa (ver `wire`)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional, Tuple

from ..core.errors import InternalConfigError, InvalidConfigError
from ..core.file_version import ALL_FILE_VERSIONS, FileVersion
from ..core.normalpath import normalize_and_validate


DEFAULT_LINT_CATEGORY = "DEFAULT"
DEFAULT_BREAKING_CATEGORY = "FILE"


def freeze_path_map(
    mapping: Optional[Mapping[str, Iterable[str]]],
) -> Mapping[str, Tuple[str, ...]]:
    """Cópia somente leitura de um mapa `chave → caminhos`, ordenada por chave."""
    return MappingProxyType({key: tuple(mapping[key]) for key in sorted(mapping or {})})


@dataclass(frozen=True)
class CheckConfig(ABC):
    """
    Campos comuns de uma configuração de check.

    O mapa `ignore_id_or_category_to_paths` é guardado como proxy somente
    leitura e fica fora do hash; a igualdade continua a considerá-lo.
    """

    file_version: FileVersion
    disabled: bool = False
    use_ids_and_categories: Tuple[str, ...] = ()
    except_ids_and_categories: Tuple[str, ...] = ()
    ignore_paths: Tuple[str, ...] = ()
    ignore_id_or_category_to_paths: Mapping[str, Tuple[str, ...]] = field(
        default_factory=dict, hash=False
    )
    disable_builtin: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "ignore_id_or_category_to_paths",
            freeze_path_map(self.ignore_id_or_category_to_paths),
        )

    @abstractmethod
    def use_or_default(self) -> Tuple[str, ...]:
        """`use` efetivo: o conjunto declarado ou a categoria default da versão."""
        raise NotImplementedError


@dataclass(frozen=True)
class LintConfig(CheckConfig):
    enum_zero_value_suffix: str = ""
    rpc_allow_same_request_response: bool = False
    rpc_allow_google_protobuf_empty_requests: bool = False
    rpc_allow_google_protobuf_empty_responses: bool = False
    service_suffix: str = ""
    allow_comment_ignores: bool = False

    def use_or_default(self) -> Tuple[str, ...]:
        return self.use_ids_and_categories or (DEFAULT_LINT_CATEGORY,)


@dataclass(frozen=True)
class BreakingConfig(CheckConfig):
    ignore_unstable_packages: bool = False

    def use_or_default(self) -> Tuple[str, ...]:
        return self.use_ids_and_categories or (DEFAULT_BREAKING_CATEGORY,)


def _is_identifier(value: object) -> bool:
    return isinstance(value, str) and bool(value) and not any(c.isspace() for c in value)


def normalize_identifiers(values: Iterable[str], *, what: str) -> Tuple[str, ...]:
    out = set()
    for value in values:
        if not _is_identifier(value):
            raise InvalidConfigError(f"invalid {what} identifier: {value!r}")
        out.add(value)
    return tuple(sorted(out))


def normalize_paths(values: Iterable[str], *, what: str) -> Tuple[str, ...]:
    out = set()
    for value in values:
        if not isinstance(value, str) or not value:
            raise InvalidConfigError(f"invalid {what} path: {value!r}")
        out.add(normalize_and_validate(value))
    return tuple(sorted(out))


def normalize_ignore_only(
    ignore_only: Optional[Mapping[str, Iterable[str]]],
) -> Dict[str, Tuple[str, ...]]:
    out: Dict[str, Tuple[str, ...]] = {}
    for key in sorted(ignore_only or {}):
        if not _is_identifier(key):
            raise InvalidConfigError(f"invalid ignore_only identifier: {key!r}")
        paths = normalize_paths(ignore_only[key], what="ignore_only")
        if paths:
            out[key] = paths
    return out


def _check_common(
    file_version: FileVersion,
    ignore_paths: Tuple[str, ...],
    disabled: bool,
    disable_builtin: bool,
) -> Tuple[Tuple[str, ...], bool]:
    if file_version not in ALL_FILE_VERSIONS:
        raise InternalConfigError(f"unknown file version: {file_version!r}")
    if disable_builtin and file_version < FileVersion.V2:
        raise InternalConfigError(
            f"disable_builtin cannot be set on check configurations of version {file_version.value}"
        )
    if disabled and "." not in ignore_paths:
        ignore_paths = tuple(sorted(set(ignore_paths) | {"."}))
    return ignore_paths, "." in ignore_paths


def new_lint_config(
    file_version: FileVersion,
    *,
    use: Iterable[str] = (),
    except_: Iterable[str] = (),
    ignore: Iterable[str] = (),
    ignore_only: Optional[Mapping[str, Iterable[str]]] = None,
    disabled: bool = False,
    disable_builtin: bool = False,
    enum_zero_value_suffix: str = "",
    rpc_allow_same_request_response: bool = False,
    rpc_allow_google_protobuf_empty_requests: bool = False,
    rpc_allow_google_protobuf_empty_responses: bool = False,
    service_suffix: str = "",
    allow_comment_ignores: bool = False,
) -> LintConfig:
    """
    Constrói uma `LintConfig` validada e normalizada.

    Raises:
        InvalidConfigError: Se identificadores ou caminhos forem inválidos.
        InternalConfigError: Se uma opção exclusiva de v2 for usada em outra versão.
    """
    ignore_paths, is_disabled = _check_common(
        file_version,
        normalize_paths(ignore, what="ignore"),
        disabled,
        disable_builtin,
    )
    return LintConfig(
        file_version=file_version,
        disabled=is_disabled,
        use_ids_and_categories=normalize_identifiers(use, what="use"),
        except_ids_and_categories=normalize_identifiers(except_, what="except"),
        ignore_paths=ignore_paths,
        ignore_id_or_category_to_paths=normalize_ignore_only(ignore_only),
        disable_builtin=disable_builtin,
        enum_zero_value_suffix=enum_zero_value_suffix,
        rpc_allow_same_request_response=rpc_allow_same_request_response,
        rpc_allow_google_protobuf_empty_requests=rpc_allow_google_protobuf_empty_requests,
        rpc_allow_google_protobuf_empty_responses=rpc_allow_google_protobuf_empty_responses,
        service_suffix=service_suffix,
        allow_comment_ignores=allow_comment_ignores,
    )


def new_breaking_config(
    file_version: FileVersion,
    *,
    use: Iterable[str] = (),
    except_: Iterable[str] = (),
    ignore: Iterable[str] = (),
    ignore_only: Optional[Mapping[str, Iterable[str]]] = None,
    disabled: bool = False,
    disable_builtin: bool = False,
    ignore_unstable_packages: bool = False,
) -> BreakingConfig:
    """Constrói uma `BreakingConfig` validada e normalizada."""
    ignore_paths, is_disabled = _check_common(
        file_version,
        normalize_paths(ignore, what="ignore"),
        disabled,
        disable_builtin,
    )
    return BreakingConfig(
        file_version=file_version,
        disabled=is_disabled,
        use_ids_and_categories=normalize_identifiers(use, what="use"),
        except_ids_and_categories=normalize_identifiers(except_, what="except"),
        ignore_paths=ignore_paths,
        ignore_id_or_category_to_paths=normalize_ignore_only(ignore_only),
        disable_builtin=disable_builtin,
        ignore_unstable_packages=ignore_unstable_packages,
    )


# Comentários de ignore são permitidos por padrão a partir da v2.
_DEFAULT_LINT_CONFIGS: Dict[FileVersion, LintConfig] = {
    v: new_lint_config(v, allow_comment_ignores=(v >= FileVersion.V2)) for v in ALL_FILE_VERSIONS
}

_DEFAULT_BREAKING_CONFIGS: Dict[FileVersion, BreakingConfig] = {
    v: new_breaking_config(v) for v in ALL_FILE_VERSIONS
}


def default_lint_config(file_version: FileVersion) -> LintConfig:
    """Configuração de lint aplicada quando o documento não declara bloco `lint`."""
    try:
        return _DEFAULT_LINT_CONFIGS[file_version]
    except KeyError:
        raise InternalConfigError(f"unknown file version: {file_version!r}") from None


def default_breaking_config(file_version: FileVersion) -> BreakingConfig:
    try:
        return _DEFAULT_BREAKING_CONFIGS[file_version]
    except KeyError:
        raise InternalConfigError(f"unknown file version: {file_version!r}") from None


def check_same_file_version(file_version: FileVersion, *configs: CheckConfig) -> None:
    for config in configs:
        if config.file_version != file_version:
            raise InternalConfigError(
                f"check configuration has version {config.file_version.value} "
                f"but version {file_version.value} was expected"
            )
