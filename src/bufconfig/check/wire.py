# src/bufconfig/check/wire.py
"""
Forma de wire dos blocos `lint` e `breaking`, por versão de arquivo.

Os leitores devolvem configurações em coordenadas do documento (caminhos
relativos à raiz do documento); a relativização para o módulo é feita pelo
`resolver`. Os escritores omitem campos com valor default, na ordem fixa
de chaves de cada bloco.

Diferenças por versão:
    - v1beta1/v1: `allow_comment_ignores`
    - v2: `disallow_comment_ignores` (inverso) e `disable_builtin`
"""

from __future__ import annotations

from typing import Any, Dict, FrozenSet, Optional

from ..core.encoding import (
    expect_keys,
    get_bool,
    get_mapping,
    get_str,
    get_str_list,
    get_str_list_map,
)
from ..core.file_version import FileVersion
from .config import BreakingConfig, LintConfig, new_breaking_config, new_lint_config

_CHECK_KEYS = ("use", "except", "ignore", "ignore_only")
_LINT_OPTION_KEYS = (
    "enum_zero_value_suffix",
    "rpc_allow_same_request_response",
    "rpc_allow_google_protobuf_empty_requests",
    "rpc_allow_google_protobuf_empty_responses",
    "service_suffix",
)

LINT_KEYS_V1: FrozenSet[str] = frozenset(_CHECK_KEYS + _LINT_OPTION_KEYS + ("allow_comment_ignores",))
LINT_KEYS_V2: FrozenSet[str] = frozenset(
    _CHECK_KEYS + _LINT_OPTION_KEYS + ("disallow_comment_ignores", "disable_builtin")
)
BREAKING_KEYS_V1: FrozenSet[str] = frozenset(_CHECK_KEYS + ("ignore_unstable_packages",))
BREAKING_KEYS_V2: FrozenSet[str] = frozenset(
    _CHECK_KEYS + ("ignore_unstable_packages", "disable_builtin")
)


def lint_keys(file_version: FileVersion) -> FrozenSet[str]:
    return LINT_KEYS_V2 if file_version >= FileVersion.V2 else LINT_KEYS_V1


def breaking_keys(file_version: FileVersion) -> FrozenSet[str]:
    return BREAKING_KEYS_V2 if file_version >= FileVersion.V2 else BREAKING_KEYS_V1


def lint_config_from_wire(
    raw: Dict[str, Any],
    file_version: FileVersion,
    *,
    where: str = "lint",
    allowed_keys: Optional[FrozenSet[str]] = None,
) -> LintConfig:
    expect_keys(raw, allowed_keys if allowed_keys is not None else lint_keys(file_version), where=where)
    if file_version >= FileVersion.V2:
        allow_comment_ignores = not get_bool(raw, "disallow_comment_ignores", where=where)
    else:
        allow_comment_ignores = get_bool(raw, "allow_comment_ignores", where=where)
    return new_lint_config(
        file_version,
        use=get_str_list(raw, "use", where=where),
        except_=get_str_list(raw, "except", where=where),
        ignore=get_str_list(raw, "ignore", where=where),
        ignore_only=get_str_list_map(raw, "ignore_only", where=where),
        disable_builtin=get_bool(raw, "disable_builtin", where=where),
        enum_zero_value_suffix=get_str(raw, "enum_zero_value_suffix", where=where),
        rpc_allow_same_request_response=get_bool(raw, "rpc_allow_same_request_response", where=where),
        rpc_allow_google_protobuf_empty_requests=get_bool(
            raw, "rpc_allow_google_protobuf_empty_requests", where=where
        ),
        rpc_allow_google_protobuf_empty_responses=get_bool(
            raw, "rpc_allow_google_protobuf_empty_responses", where=where
        ),
        service_suffix=get_str(raw, "service_suffix", where=where),
        allow_comment_ignores=allow_comment_ignores,
    )


def breaking_config_from_wire(
    raw: Dict[str, Any],
    file_version: FileVersion,
    *,
    where: str = "breaking",
    allowed_keys: Optional[FrozenSet[str]] = None,
) -> BreakingConfig:
    expect_keys(raw, allowed_keys if allowed_keys is not None else breaking_keys(file_version), where=where)
    return new_breaking_config(
        file_version,
        use=get_str_list(raw, "use", where=where),
        except_=get_str_list(raw, "except", where=where),
        ignore=get_str_list(raw, "ignore", where=where),
        ignore_only=get_str_list_map(raw, "ignore_only", where=where),
        disable_builtin=get_bool(raw, "disable_builtin", where=where),
        ignore_unstable_packages=get_bool(raw, "ignore_unstable_packages", where=where),
    )


def _check_fields_to_wire(config, out: Dict[str, Any]) -> None:
    if config.use_ids_and_categories:
        out["use"] = list(config.use_ids_and_categories)
    if config.except_ids_and_categories:
        out["except"] = list(config.except_ids_and_categories)
    if config.ignore_paths:
        out["ignore"] = list(config.ignore_paths)
    if config.ignore_id_or_category_to_paths:
        out["ignore_only"] = {
            key: list(paths) for key, paths in sorted(config.ignore_id_or_category_to_paths.items())
        }


def lint_config_to_wire(config: LintConfig) -> Dict[str, Any]:
    """Bloco `lint` mínimo; `{}` quando tudo está no default."""
    out: Dict[str, Any] = {}
    _check_fields_to_wire(config, out)
    if config.enum_zero_value_suffix:
        out["enum_zero_value_suffix"] = config.enum_zero_value_suffix
    if config.rpc_allow_same_request_response:
        out["rpc_allow_same_request_response"] = True
    if config.rpc_allow_google_protobuf_empty_requests:
        out["rpc_allow_google_protobuf_empty_requests"] = True
    if config.rpc_allow_google_protobuf_empty_responses:
        out["rpc_allow_google_protobuf_empty_responses"] = True
    if config.service_suffix:
        out["service_suffix"] = config.service_suffix
    if config.file_version >= FileVersion.V2:
        if not config.allow_comment_ignores:
            out["disallow_comment_ignores"] = True
    elif config.allow_comment_ignores:
        out["allow_comment_ignores"] = True
    if config.disable_builtin:
        out["disable_builtin"] = True
    return out


def breaking_config_to_wire(config: BreakingConfig) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    _check_fields_to_wire(config, out)
    if config.ignore_unstable_packages:
        out["ignore_unstable_packages"] = True
    if config.disable_builtin:
        out["disable_builtin"] = True
    return out


def optional_block(raw: Dict[str, Any], key: str, *, where: str) -> Optional[Dict[str, Any]]:
    """Bloco presente (mesmo vazio) ou `None` quando a chave está ausente."""
    if key not in raw:
        return None
    return get_mapping(raw, key, where=where)
