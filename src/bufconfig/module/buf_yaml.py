# src/bufconfig/module/buf_yaml.py
"""
Leitura e escrita canônica do arquivo `buf.yaml` (v1beta1, v1 e v2).

Este módulo converte documentos de qualquer geração de schema para um único
modelo em memória (`BufYAMLFile`) e reemite esse modelo no formato da versão
do arquivo, de forma determinística e mínima.

Formatos suportados:
    - v1beta1/v1: `version`, `name`, `deps`, `build` (`roots` apenas em
      v1beta1, `excludes`), `lint`, `breaking`
    - v2: `version`, `name`, `modules`, `deps`, `lint`, `breaking`, `plugins`

Decisões arquiteturais:
    - A leitura resolve a configuração efetiva de cada módulo
      (herdada ou sobrescrita) no momento do parse
    - A escrita fatora lint e breaking entre escopo compartilhado e blocos
      locais com a política tudo ou nada
    - Módulos são escritos ordenados por diretório
    - Caminhos de módulo no wire são relativos à raiz do documento
    - Um único módulo em `.` sem includes/excludes é escrito na forma
      compacta (`name` no topo, sem `modules`)
    - O bloco de comentários inicial é preservado

Invariantes:
    - `read(write(read(d))) == read(d)` para todo documento aceito
    - Documentos já canônicos são reescritos byte a byte

Limites explícitos:
    - Não resolve dependências
    - Não executa lint ou breaking
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from ..check.canonical import factor_check_configs
from ..check.config import default_breaking_config, default_lint_config
from ..check.plugin import PluginConfig, plugin_config_to_wire, plugin_configs_from_wire
from ..check.resolver import resolve_effective_check_config
from ..check.wire import (
    breaking_config_from_wire,
    breaking_config_to_wire,
    lint_config_from_wire,
    lint_config_to_wire,
    optional_block,
)
from ..core.encoding import (
    decode,
    encode,
    expect_keys,
    get_mapping,
    get_mapping_list,
    get_str,
    get_str_list,
    split_header,
)
from ..core.errors import (
    ConfigNotFoundError,
    InternalConfigError,
    InvalidConfigError,
    MalformedConfigError,
    UnsupportedFileVersionError,
)
from ..core.file_version import (
    FileType,
    FileVersion,
    check_file_type_version_supported,
    parse_file_version,
)
from ..core.module_ref import ModuleRef, parse_module_full_name, parse_module_ref
from ..core.normalpath import join, normalize_and_validate
from ..storage.bucket import ReadBucket, WriteBucket
from ..storage.files import read_file_for_prefix, write_file_for_prefix
from .module_config import (
    ModuleConfig,
    get_root_to_excludes,
    new_module_config,
    root_to_excludes_to_build,
)
from .paths import validate_include_and_exclude_paths

logger = logging.getLogger(__name__)

_KEYS_V1 = frozenset({"version", "name", "deps", "build", "lint", "breaking"})
_BUILD_KEYS_V1BETA1 = frozenset({"roots", "excludes"})
_BUILD_KEYS_V1 = frozenset({"excludes"})
_KEYS_V2 = frozenset({"version", "name", "modules", "deps", "lint", "breaking", "plugins"})
_MODULE_KEYS_V2 = frozenset({"path", "name", "includes", "excludes", "lint", "breaking"})


@dataclass(frozen=True)
class BufYAMLFile:
    """Modelo em memória de um `buf.yaml`, independente da versão lida."""

    file_version: FileVersion
    module_configs: Tuple[ModuleConfig, ...]
    dep_module_refs: Tuple[ModuleRef, ...] = ()
    plugin_configs: Tuple[PluginConfig, ...] = ()
    header: str = field(default="", compare=False)

    def module_config_for_dir_path(self, dir_path: str) -> Optional[ModuleConfig]:
        dir_path = normalize_and_validate(dir_path)
        for module_config in self.module_configs:
            if module_config.dir_path == dir_path:
                return module_config
        return None


def new_buf_yaml_file(
    file_version: FileVersion,
    module_configs: Iterable[ModuleConfig],
    *,
    dep_module_refs: Iterable[ModuleRef] = (),
    plugin_configs: Iterable[PluginConfig] = (),
    header: str = "",
) -> BufYAMLFile:
    """
    Constrói um `BufYAMLFile` validando os invariantes entre módulos.

    Raises:
        UnsupportedFileVersionError: Se a versão não for suportada por buf.yaml.
        InvalidConfigError: Se houver diretórios, nomes ou deps duplicados, ou
            cardinalidade de módulos inválida para a versão.
        InternalConfigError: Se algum módulo tiver versão distinta do arquivo,
            ou plugins forem definidos antes da v2.
    """
    check_file_type_version_supported(FileType.BUF_YAML, file_version)
    module_configs = tuple(module_configs)
    dep_module_refs = tuple(dep_module_refs)
    plugin_configs = tuple(plugin_configs)

    if not module_configs:
        raise InvalidConfigError("buf.yaml must have at least one module configuration")
    if file_version < FileVersion.V2 and len(module_configs) != 1:
        raise InvalidConfigError(
            f"buf.yaml files of version {file_version.value} must have exactly one "
            f"module configuration, got {len(module_configs)}"
        )
    if file_version < FileVersion.V2 and plugin_configs:
        raise InternalConfigError(
            f"plugins cannot be set on buf.yaml files of version {file_version.value}"
        )

    seen_dir_paths = set()
    seen_names = set()
    for module_config in module_configs:
        if module_config.file_version != file_version:
            raise InternalConfigError(
                f"module configuration has version {module_config.file_version.value} "
                f"but buf.yaml has version {file_version.value}"
            )
        if module_config.dir_path in seen_dir_paths:
            raise InvalidConfigError(
                f"module directory {module_config.dir_path!r} seen more than once"
            )
        seen_dir_paths.add(module_config.dir_path)
        if module_config.module_full_name is not None:
            name = str(module_config.module_full_name)
            if name in seen_names:
                raise InvalidConfigError(f"module name {name!r} seen more than once")
            seen_names.add(name)

    seen_deps = set()
    for dep in dep_module_refs:
        name = str(dep.full_name)
        if name in seen_deps:
            raise InvalidConfigError(f"dep with module name {name!r} seen more than once")
        seen_deps.add(name)

    return BufYAMLFile(
        file_version=file_version,
        module_configs=tuple(sorted(module_configs, key=lambda m: m.dir_path)),
        dep_module_refs=tuple(sorted(dep_module_refs, key=str)),
        plugin_configs=plugin_configs,
        header=header,
    )


# ---------------------------------------------------------------------------
# Leitura
# ---------------------------------------------------------------------------

def read_buf_yaml_file(data: Union[bytes, str], *, allow_json: bool = False) -> BufYAMLFile:
    """
    Lê um `buf.yaml` de qualquer versão suportada.

    Args:
        data: Conteúdo bruto do arquivo.
        allow_json: Aceita documentos JSON além de YAML.

    Raises:
        MalformedConfigError: Se o decode falhar ou houver campos desconhecidos.
        UnsupportedFileVersionError: Se a versão estiver ausente ou não for suportada.
        InvalidConfigError: Se a configuração for inválida.
    """
    header, _ = split_header(data)
    doc = decode(data, allow_json=allow_json)
    if "version" not in doc or doc["version"] in (None, ""):
        raise UnsupportedFileVersionError("buf.yaml has no version; a version is required")
    file_version = parse_file_version(doc["version"])
    check_file_type_version_supported(FileType.BUF_YAML, file_version)
    try:
        if file_version >= FileVersion.V2:
            return _read_v2(doc, header)
        return _read_v1beta1_v1(doc, file_version, header)
    except MalformedConfigError as e:
        raise MalformedConfigError(f"invalid as version {file_version.value}: {e}") from e


def _parse_deps(doc: Dict[str, Any]) -> List[ModuleRef]:
    return [parse_module_ref(dep) for dep in get_str_list(doc, "deps", where="buf.yaml")]


def _optional_name(raw: Dict[str, Any], *, where: str):
    name = get_str(raw, "name", where=where)
    return parse_module_full_name(name) if name else None


def _read_v1beta1_v1(doc: Dict[str, Any], file_version: FileVersion, header: str) -> BufYAMLFile:
    expect_keys(doc, _KEYS_V1, where="buf.yaml")
    build = get_mapping(doc, "build", where="buf.yaml")
    if file_version == FileVersion.V1 and build.get("roots"):
        raise InvalidConfigError("build.roots cannot be set on version v1")
    expect_keys(
        build,
        _BUILD_KEYS_V1BETA1 if file_version == FileVersion.V1BETA1 else _BUILD_KEYS_V1,
        where="build",
    )
    root_to_excludes = get_root_to_excludes(
        get_str_list(build, "roots", where="build"),
        get_str_list(build, "excludes", where="build"),
    )

    lint_block = optional_block(doc, "lint", where="buf.yaml")
    breaking_block = optional_block(doc, "breaking", where="buf.yaml")
    lint_config = (
        default_lint_config(file_version)
        if lint_block is None
        else lint_config_from_wire(lint_block, file_version)
    )
    breaking_config = (
        default_breaking_config(file_version)
        if breaking_block is None
        else breaking_config_from_wire(breaking_block, file_version)
    )

    module_config = new_module_config(
        ".",
        _optional_name(doc, where="buf.yaml"),
        None,
        root_to_excludes,
        resolve_effective_check_config(lint_config, None, "."),
        resolve_effective_check_config(breaking_config, None, "."),
    )
    return new_buf_yaml_file(
        file_version,
        [module_config],
        dep_module_refs=_parse_deps(doc),
        header=header,
    )


def _read_v2(doc: Dict[str, Any], header: str) -> BufYAMLFile:
    file_version = FileVersion.V2
    expect_keys(doc, _KEYS_V2, where="buf.yaml")

    lint_block = optional_block(doc, "lint", where="buf.yaml")
    breaking_block = optional_block(doc, "breaking", where="buf.yaml")
    shared_lint = (
        default_lint_config(file_version)
        if lint_block is None
        else lint_config_from_wire(lint_block, file_version)
    )
    shared_breaking = (
        default_breaking_config(file_version)
        if breaking_block is None
        else breaking_config_from_wire(breaking_block, file_version)
    )

    raw_modules = get_mapping_list(doc, "modules", where="buf.yaml")
    top_level_name = _optional_name(doc, where="buf.yaml")
    if raw_modules and top_level_name is not None:
        raise InvalidConfigError("top-level name cannot be set when modules are specified")

    module_configs: List[ModuleConfig] = []
    if not raw_modules:
        module_configs.append(
            new_module_config(
                ".",
                top_level_name,
                None,
                {".": ()},
                resolve_effective_check_config(shared_lint, None, "."),
                resolve_effective_check_config(shared_breaking, None, "."),
            )
        )

    for i, raw_module in enumerate(raw_modules):
        where = f"modules[{i}]"
        expect_keys(raw_module, _MODULE_KEYS_V2, where=where)
        dir_path = normalize_and_validate(get_str(raw_module, "path", where=where) or ".")
        includes, excludes = validate_include_and_exclude_paths(
            get_str_list(raw_module, "includes", where=where),
            get_str_list(raw_module, "excludes", where=where),
            dir_path=dir_path,
        )
        local_lint_block = optional_block(raw_module, "lint", where=where)
        local_breaking_block = optional_block(raw_module, "breaking", where=where)
        local_lint = (
            None
            if local_lint_block is None
            else lint_config_from_wire(local_lint_block, file_version, where=f"{where}.lint")
        )
        local_breaking = (
            None
            if local_breaking_block is None
            else breaking_config_from_wire(
                local_breaking_block, file_version, where=f"{where}.breaking"
            )
        )
        module_configs.append(
            new_module_config(
                dir_path,
                _optional_name(raw_module, where=where),
                {".": includes},
                {".": excludes},
                resolve_effective_check_config(
                    shared_lint, local_lint, dir_path, where=f"{where}.lint"
                ),
                resolve_effective_check_config(
                    shared_breaking, local_breaking, dir_path, where=f"{where}.breaking"
                ),
            )
        )

    return new_buf_yaml_file(
        file_version,
        module_configs,
        dep_module_refs=_parse_deps(doc),
        plugin_configs=plugin_configs_from_wire(
            get_mapping_list(doc, "plugins", where="buf.yaml"), where="plugins"
        ),
        header=header,
    )


# ---------------------------------------------------------------------------
# Escrita
# ---------------------------------------------------------------------------

def write_buf_yaml_file(buf_yaml_file: BufYAMLFile) -> bytes:
    """
    Serializa um `BufYAMLFile` no formato da sua versão.

    Raises:
        InternalConfigError: Se a versão do modelo não for conhecida.
    """
    file_version = buf_yaml_file.file_version
    if file_version in (FileVersion.V1BETA1, FileVersion.V1):
        doc = _to_wire_v1beta1_v1(buf_yaml_file)
    elif file_version == FileVersion.V2:
        doc = _to_wire_v2(buf_yaml_file)
    else:
        raise InternalConfigError(f"unknown file version: {file_version!r}")
    return encode(doc, header=buf_yaml_file.header)


def _to_wire_v1beta1_v1(buf_yaml_file: BufYAMLFile) -> Dict[str, Any]:
    file_version = buf_yaml_file.file_version
    module_config = buf_yaml_file.module_configs[0]
    doc: Dict[str, Any] = {"version": file_version.value}
    if module_config.module_full_name is not None:
        doc["name"] = str(module_config.module_full_name)
    if buf_yaml_file.dep_module_refs:
        doc["deps"] = [str(dep) for dep in buf_yaml_file.dep_module_refs]

    roots, excludes = root_to_excludes_to_build(module_config.root_to_excludes)
    build: Dict[str, Any] = {}
    if file_version == FileVersion.V1BETA1 and roots != ["."]:
        build["roots"] = roots
    if excludes:
        build["excludes"] = excludes
    if build:
        doc["build"] = build

    lint = lint_config_to_wire(module_config.lint_config)
    if lint:
        doc["lint"] = lint
    breaking = breaking_config_to_wire(module_config.breaking_config)
    if breaking:
        doc["breaking"] = breaking
    return doc


def _is_compact_v2(buf_yaml_file: BufYAMLFile) -> bool:
    if len(buf_yaml_file.module_configs) != 1:
        return False
    module_config = buf_yaml_file.module_configs[0]
    return (
        module_config.dir_path == "."
        and not any(module_config.root_to_includes.values())
        and not any(module_config.root_to_excludes.values())
    )


def _to_wire_v2(buf_yaml_file: BufYAMLFile) -> Dict[str, Any]:
    module_configs = buf_yaml_file.module_configs
    lint_factored = factor_check_configs([(m.dir_path, m.lint_config) for m in module_configs])
    breaking_factored = factor_check_configs(
        [(m.dir_path, m.breaking_config) for m in module_configs]
    )

    doc: Dict[str, Any] = {"version": FileVersion.V2.value}
    if _is_compact_v2(buf_yaml_file):
        if module_configs[0].module_full_name is not None:
            doc["name"] = str(module_configs[0].module_full_name)
    else:
        modules: List[Dict[str, Any]] = []
        for module_config in module_configs:
            dir_path = module_config.dir_path
            entry: Dict[str, Any] = {"path": dir_path}
            if module_config.module_full_name is not None:
                entry["name"] = str(module_config.module_full_name)
            includes = sorted(join(dir_path, p) for p in module_config.root_to_includes.get(".", ()))
            if includes:
                entry["includes"] = includes
            excludes = sorted(join(dir_path, p) for p in module_config.root_to_excludes.get(".", ()))
            if excludes:
                entry["excludes"] = excludes
            local_lint = lint_factored.dir_path_to_local.get(dir_path)
            if local_lint is not None:
                lint = lint_config_to_wire(local_lint)
                if lint:
                    entry["lint"] = lint
            local_breaking = breaking_factored.dir_path_to_local.get(dir_path)
            if local_breaking is not None:
                breaking = breaking_config_to_wire(local_breaking)
                if breaking:
                    entry["breaking"] = breaking
            modules.append(entry)
        doc["modules"] = modules

    if buf_yaml_file.dep_module_refs:
        doc["deps"] = [str(dep) for dep in buf_yaml_file.dep_module_refs]
    if lint_factored.shared is not None:
        lint = lint_config_to_wire(lint_factored.shared)
        if lint:
            doc["lint"] = lint
    if breaking_factored.shared is not None:
        breaking = breaking_config_to_wire(breaking_factored.shared)
        if breaking:
            doc["breaking"] = breaking
    if buf_yaml_file.plugin_configs:
        doc["plugins"] = [plugin_config_to_wire(p) for p in buf_yaml_file.plugin_configs]
    return doc


# ---------------------------------------------------------------------------
# Plumbing de arquivos
# ---------------------------------------------------------------------------

def get_buf_yaml_file_for_prefix(bucket: ReadBucket, prefix: str = ".") -> BufYAMLFile:
    """Lê `buf.yaml` (ou o legado `buf.mod`) no prefixo."""
    return read_file_for_prefix(bucket, prefix, FileType.BUF_YAML, read_buf_yaml_file)


def put_buf_yaml_file_for_prefix(
    bucket: WriteBucket, prefix: str, buf_yaml_file: BufYAMLFile
) -> str:
    return write_file_for_prefix(
        bucket, prefix, FileType.BUF_YAML, write_buf_yaml_file(buf_yaml_file)
    )


def read_buf_yaml_file_for_override(value: str) -> BufYAMLFile:
    """
    Lê um `buf.yaml` a partir de um valor de override: caminho para um
    arquivo `.yaml`/`.yml`/`.json`, ou o próprio conteúdo YAML/JSON.

    Raises:
        ConfigNotFoundError: Se o valor tiver extensão de arquivo mas o arquivo não existir.
    """
    path = Path(value)
    suffix = path.suffix.lower()
    if suffix in {".yaml", ".yml", ".json"}:
        if not path.is_file():
            raise ConfigNotFoundError(f"{value}: does not exist")
        logger.debug("reading buf.yaml override from %s", path)
        return read_buf_yaml_file(path.read_bytes(), allow_json=suffix == ".json")
    return read_buf_yaml_file(value, allow_json=True)
