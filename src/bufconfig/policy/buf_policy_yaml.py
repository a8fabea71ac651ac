# src/bufconfig/policy/buf_policy_yaml.py
"""
Arquivo de policy compartilhada `buf.policy.yaml` (apenas v2).

Uma policy agrupa uma configuração de lint, uma de breaking e plugins de
check sob um nome, para ser referenciada por outros workspaces.

Decisões arquiteturais:
    - Os blocos `lint` e `breaking` reutilizam o wire de `check`, restrito
      às chaves que fazem sentido fora de um módulo (sem `ignore`,
      `ignore_only` ou comentários de ignore)
    - Bloco ausente é `None`, distinto de um bloco presente e vazio
    - O bloco de comentários inicial é preservado

Limites explícitos:
    - Não resolve o nome da policy em um registry
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, Optional, Tuple, Union

from ..check.config import BreakingConfig, LintConfig
from ..check.plugin import PluginConfig, plugin_config_to_wire, plugin_configs_from_wire
from ..check.wire import (
    breaking_config_from_wire,
    breaking_config_to_wire,
    lint_config_from_wire,
    lint_config_to_wire,
    optional_block,
)
from ..core.encoding import decode, encode, expect_keys, get_mapping_list, get_str, split_header
from ..core.errors import InternalConfigError, MalformedConfigError, UnsupportedFileVersionError
from ..core.file_version import (
    FileType,
    FileVersion,
    check_file_type_version_supported,
    parse_file_version,
)
from ..storage.bucket import ReadBucket, WriteBucket
from ..storage.files import read_file_for_prefix, write_file_for_prefix

_KEYS_V2 = frozenset({"version", "name", "lint", "breaking", "plugins"})

POLICY_LINT_KEYS: FrozenSet[str] = frozenset(
    {
        "use",
        "except",
        "enum_zero_value_suffix",
        "rpc_allow_same_request_response",
        "rpc_allow_google_protobuf_empty_requests",
        "rpc_allow_google_protobuf_empty_responses",
        "service_suffix",
        "disable_builtin",
    }
)
POLICY_BREAKING_KEYS: FrozenSet[str] = frozenset(
    {"use", "except", "ignore_unstable_packages", "disable_builtin"}
)


@dataclass(frozen=True)
class BufPolicyYAMLFile:
    file_version: FileVersion
    name: str = ""
    lint_config: Optional[LintConfig] = None
    breaking_config: Optional[BreakingConfig] = None
    plugin_configs: Tuple[PluginConfig, ...] = ()
    header: str = field(default="", compare=False)


def new_buf_policy_yaml_file(
    file_version: FileVersion,
    *,
    name: str = "",
    lint_config: Optional[LintConfig] = None,
    breaking_config: Optional[BreakingConfig] = None,
    plugin_configs: Iterable[PluginConfig] = (),
    header: str = "",
) -> BufPolicyYAMLFile:
    """
    Raises:
        UnsupportedFileVersionError: Se a versão não for v2.
        InternalConfigError: Se lint ou breaking tiverem versão diferente do arquivo.
    """
    check_file_type_version_supported(FileType.BUF_POLICY_YAML, file_version)
    for config in (lint_config, breaking_config):
        if config is not None and config.file_version != file_version:
            raise InternalConfigError(
                f"check config of version {config.file_version.value} cannot be used "
                f"in a {file_version.value} buf.policy.yaml"
            )
    return BufPolicyYAMLFile(
        file_version=file_version,
        name=name,
        lint_config=lint_config,
        breaking_config=breaking_config,
        plugin_configs=tuple(plugin_configs),
        header=header,
    )


def read_buf_policy_yaml_file(
    data: Union[bytes, str], *, allow_json: bool = False
) -> BufPolicyYAMLFile:
    """
    Lê um `buf.policy.yaml`.

    Raises:
        MalformedConfigError: Se o decode falhar ou houver campos desconhecidos.
        UnsupportedFileVersionError: Se a versão estiver ausente ou não for v2.
    """
    header, _ = split_header(data)
    doc = decode(data, allow_json=allow_json)
    if doc.get("version") in (None, ""):
        raise UnsupportedFileVersionError("buf.policy.yaml has no version; a version is required")
    file_version = parse_file_version(doc["version"])
    check_file_type_version_supported(FileType.BUF_POLICY_YAML, file_version)
    try:
        expect_keys(doc, _KEYS_V2, where="buf.policy.yaml")
        lint_raw = optional_block(doc, "lint", where="buf.policy.yaml")
        breaking_raw = optional_block(doc, "breaking", where="buf.policy.yaml")
        lint_config = None
        if lint_raw is not None:
            lint_config = lint_config_from_wire(lint_raw, file_version, allowed_keys=POLICY_LINT_KEYS)
        breaking_config = None
        if breaking_raw is not None:
            breaking_config = breaking_config_from_wire(
                breaking_raw, file_version, allowed_keys=POLICY_BREAKING_KEYS
            )
        plugin_configs = plugin_configs_from_wire(
            get_mapping_list(doc, "plugins", where="buf.policy.yaml"), where="plugins"
        )
        name = get_str(doc, "name", where="buf.policy.yaml")
    except MalformedConfigError as e:
        raise MalformedConfigError(f"invalid as version {file_version.value}: {e}") from e
    return new_buf_policy_yaml_file(
        file_version,
        name=name,
        lint_config=lint_config,
        breaking_config=breaking_config,
        plugin_configs=plugin_configs,
        header=header,
    )


def write_buf_policy_yaml_file(buf_policy_yaml_file: BufPolicyYAMLFile) -> bytes:
    if buf_policy_yaml_file.file_version != FileVersion.V2:
        raise InternalConfigError(
            f"unsupported buf.policy.yaml version: {buf_policy_yaml_file.file_version.value}"
        )
    doc = {"version": buf_policy_yaml_file.file_version.value}
    if buf_policy_yaml_file.name:
        doc["name"] = buf_policy_yaml_file.name
    if buf_policy_yaml_file.lint_config is not None:
        lint = lint_config_to_wire(buf_policy_yaml_file.lint_config)
        if lint:
            doc["lint"] = lint
    if buf_policy_yaml_file.breaking_config is not None:
        breaking = breaking_config_to_wire(buf_policy_yaml_file.breaking_config)
        if breaking:
            doc["breaking"] = breaking
    if buf_policy_yaml_file.plugin_configs:
        doc["plugins"] = [plugin_config_to_wire(p) for p in buf_policy_yaml_file.plugin_configs]
    return encode(doc, header=buf_policy_yaml_file.header)


def get_buf_policy_yaml_file_for_prefix(bucket: ReadBucket, prefix: str = ".") -> BufPolicyYAMLFile:
    return read_file_for_prefix(
        bucket, prefix, FileType.BUF_POLICY_YAML, read_buf_policy_yaml_file
    )


def put_buf_policy_yaml_file_for_prefix(
    bucket: WriteBucket, prefix: str, buf_policy_yaml_file: BufPolicyYAMLFile
) -> str:
    return write_file_for_prefix(
        bucket,
        prefix,
        FileType.BUF_POLICY_YAML,
        write_buf_policy_yaml_file(buf_policy_yaml_file),
    )
