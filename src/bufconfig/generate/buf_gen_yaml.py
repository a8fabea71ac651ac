# src/bufconfig/generate/buf_gen_yaml.py
"""
Leitura e escrita do arquivo de geração `buf.gen.yaml` (v1 e v2).

Formatos suportados:
    - v1: `version`, `plugins[]` (`plugin`/`name`, `out`, `opt`, `path`,
      `protoc_path`, `strategy`, `revision`), `managed` (formato legado),
      `types.include`
    - v2: `version`, `clean`, `managed` (`enabled`, `disable[]`,
      `override[]`), `plugins[]`, `inputs[]`

Decisões arquiteturais:
    - Documentos v1 são convertidos para o modelo de regras na leitura
    - A escrita emite sempre v2; um agregado v1 é migrado antes
      (`migrate_buf_gen_yaml_file_to_v2`)
    - `types.include` do v1 vira, na migração, uma entrada `directory: .`
      com esses tipos
    - O bloco de comentários inicial é preservado

Invariantes:
    - `read(write(f))` reproduz plugins, managed e inputs de `f`
    - Arquivos v1beta1 são rejeitados como versão não suportada

Limites explícitos:
    - Não executa plugins nem resolve entradas
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, Optional, Tuple, Union

from ..core.encoding import (
    decode,
    encode,
    expect_keys,
    get_bool,
    get_mapping,
    get_mapping_list,
    get_str_list,
    split_header,
)
from ..core.errors import MalformedConfigError, UnsupportedFileVersionError
from ..core.file_version import (
    FileType,
    FileVersion,
    check_file_type_version_supported,
    parse_file_version,
)
from ..storage.bucket import ReadBucket, WriteBucket
from ..storage.files import read_file_for_prefix, write_file_for_prefix
from .input_config import (
    InputConfig,
    InputConfigType,
    input_config_from_wire,
    input_config_to_wire,
    new_input_config,
)
from .managed import (
    GenerateManagedConfig,
    managed_config_from_wire_v1,
    managed_config_from_wire_v2,
    managed_config_to_wire_v2,
)
from .plugin_config import (
    GeneratePluginConfig,
    plugin_config_from_wire_v1,
    plugin_config_from_wire_v2,
    plugin_config_to_wire_v2,
)

logger = logging.getLogger(__name__)

_KEYS_V1 = frozenset({"version", "plugins", "managed", "types"})
_TYPES_KEYS_V1 = frozenset({"include"})
_KEYS_V2 = frozenset({"version", "clean", "managed", "plugins", "inputs"})


@dataclass(frozen=True)
class BufGenYAMLFile:
    """Modelo em memória de um `buf.gen.yaml`."""

    file_version: FileVersion
    plugin_configs: Tuple[GeneratePluginConfig, ...] = ()
    managed_config: GenerateManagedConfig = field(default_factory=GenerateManagedConfig)
    input_configs: Tuple[InputConfig, ...] = ()
    clean: bool = False
    # `types.include` do v1; vazio em v2.
    include_types: Tuple[str, ...] = ()
    header: str = field(default="", compare=False)


def new_buf_gen_yaml_file(
    file_version: FileVersion,
    *,
    plugin_configs: Iterable[GeneratePluginConfig] = (),
    managed_config: Optional[GenerateManagedConfig] = None,
    input_configs: Iterable[InputConfig] = (),
    clean: bool = False,
    include_types: Iterable[str] = (),
    header: str = "",
) -> BufGenYAMLFile:
    check_file_type_version_supported(FileType.BUF_GEN_YAML, file_version)
    return BufGenYAMLFile(
        file_version=file_version,
        plugin_configs=tuple(plugin_configs),
        managed_config=managed_config or GenerateManagedConfig(),
        input_configs=tuple(input_configs),
        clean=clean,
        include_types=tuple(include_types),
        header=header,
    )


def read_buf_gen_yaml_file(data: Union[bytes, str], *, allow_json: bool = False) -> BufGenYAMLFile:
    """
    Lê um `buf.gen.yaml` v1 ou v2.

    Raises:
        MalformedConfigError: Se o decode falhar ou houver campos desconhecidos.
        UnsupportedFileVersionError: Se a versão estiver ausente ou não for suportada.
        InvalidConfigError: Se plugins, managed ou inputs forem inválidos.
    """
    header, _ = split_header(data)
    doc = decode(data, allow_json=allow_json)
    if "version" not in doc or doc["version"] in (None, ""):
        raise UnsupportedFileVersionError("buf.gen.yaml has no version; a version is required")
    file_version = parse_file_version(doc["version"])
    check_file_type_version_supported(FileType.BUF_GEN_YAML, file_version)
    try:
        if file_version == FileVersion.V1:
            return _read_v1(doc, header)
        return _read_v2(doc, header)
    except MalformedConfigError as e:
        raise MalformedConfigError(f"invalid as version {file_version.value}: {e}") from e


def _read_v1(doc: Dict[str, Any], header: str) -> BufGenYAMLFile:
    expect_keys(doc, _KEYS_V1, where="buf.gen.yaml")
    plugin_configs = [
        plugin_config_from_wire_v1(raw, where=f"plugins[{i}]")
        for i, raw in enumerate(get_mapping_list(doc, "plugins", where="buf.gen.yaml"))
    ]
    managed_config = managed_config_from_wire_v1(get_mapping(doc, "managed", where="buf.gen.yaml"))
    types = get_mapping(doc, "types", where="buf.gen.yaml")
    expect_keys(types, _TYPES_KEYS_V1, where="types")
    return new_buf_gen_yaml_file(
        FileVersion.V1,
        plugin_configs=plugin_configs,
        managed_config=managed_config,
        include_types=get_str_list(types, "include", where="types"),
        header=header,
    )


def _read_v2(doc: Dict[str, Any], header: str) -> BufGenYAMLFile:
    expect_keys(doc, _KEYS_V2, where="buf.gen.yaml")
    plugin_configs = [
        plugin_config_from_wire_v2(raw, where=f"plugins[{i}]")
        for i, raw in enumerate(get_mapping_list(doc, "plugins", where="buf.gen.yaml"))
    ]
    input_configs = [
        input_config_from_wire(raw, where=f"inputs[{i}]")
        for i, raw in enumerate(get_mapping_list(doc, "inputs", where="buf.gen.yaml"))
    ]
    return new_buf_gen_yaml_file(
        FileVersion.V2,
        plugin_configs=plugin_configs,
        managed_config=managed_config_from_wire_v2(get_mapping(doc, "managed", where="buf.gen.yaml")),
        input_configs=input_configs,
        clean=get_bool(doc, "clean", where="buf.gen.yaml"),
        header=header,
    )


def migrate_buf_gen_yaml_file_to_v2(buf_gen_yaml_file: BufGenYAMLFile) -> BufGenYAMLFile:
    """Converte um agregado v1 para v2; agregados v2 são retornados intactos."""
    if buf_gen_yaml_file.file_version == FileVersion.V2:
        return buf_gen_yaml_file
    input_configs = buf_gen_yaml_file.input_configs
    if buf_gen_yaml_file.include_types:
        input_configs = input_configs + (
            new_input_config(
                InputConfigType.DIRECTORY,
                ".",
                include_types=buf_gen_yaml_file.include_types,
            ),
        )
    return replace(
        buf_gen_yaml_file,
        file_version=FileVersion.V2,
        input_configs=input_configs,
        include_types=(),
    )


def write_buf_gen_yaml_file(buf_gen_yaml_file: BufGenYAMLFile) -> bytes:
    """Serializa um `BufGenYAMLFile` sempre no formato v2."""
    if buf_gen_yaml_file.file_version != FileVersion.V2:
        logger.debug(
            "migrating buf.gen.yaml from %s to v2 for writing",
            buf_gen_yaml_file.file_version.value,
        )
        buf_gen_yaml_file = migrate_buf_gen_yaml_file_to_v2(buf_gen_yaml_file)
    doc: Dict[str, Any] = {"version": FileVersion.V2.value}
    if buf_gen_yaml_file.clean:
        doc["clean"] = True
    managed = managed_config_to_wire_v2(buf_gen_yaml_file.managed_config)
    if managed:
        doc["managed"] = managed
    if buf_gen_yaml_file.plugin_configs:
        doc["plugins"] = [plugin_config_to_wire_v2(p) for p in buf_gen_yaml_file.plugin_configs]
    if buf_gen_yaml_file.input_configs:
        doc["inputs"] = [input_config_to_wire(i) for i in buf_gen_yaml_file.input_configs]
    return encode(doc, header=buf_gen_yaml_file.header)


def get_buf_gen_yaml_file_for_prefix(bucket: ReadBucket, prefix: str = ".") -> BufGenYAMLFile:
    return read_file_for_prefix(bucket, prefix, FileType.BUF_GEN_YAML, read_buf_gen_yaml_file)


def put_buf_gen_yaml_file_for_prefix(
    bucket: WriteBucket, prefix: str, buf_gen_yaml_file: BufGenYAMLFile
) -> str:
    return write_file_for_prefix(
        bucket, prefix, FileType.BUF_GEN_YAML, write_buf_gen_yaml_file(buf_gen_yaml_file)
    )
