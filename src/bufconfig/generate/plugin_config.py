# src/bufconfig/generate/plugin_config.py
"""
Plugins de geração de código (`plugins[]` do `buf.gen.yaml`).

Tipos de plugin:
    - REMOTE                  → `remote: buf.build/owner/name[:versão]`
    - LOCAL                   → `local: <binário>` ou `local: [cmd, args...]`
    - PROTOC_BUILTIN          → `protoc_builtin: <nome>` (ex.: `cpp`, `java`)
    - LOCAL_OR_PROTOC_BUILTIN → apenas v1: `plugin: <nome>` sem `path` nem
      `protoc_path`; a decisão fica para a escrita em v2

Decisões arquiteturais:
    - v1 e v2 são lidos no mesmo modelo; a escrita emite somente v2
    - `opt`, `local` e `protoc_path` aceitam string ou lista e voltam ao
      mesmo formato (um item vira string, vários viram lista)
    - Um plugin LOCAL_OR_PROTOC_BUILTIN é escrito como `protoc_builtin`
      quando o nome é embutido no protoc, e como `local: protoc-gen-<nome>`
      caso contrário

Invariantes:
    - `out` nunca é vazio
    - `include_wkt` implica `include_imports`
    - `revision` só existe em plugins remotos
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional, Tuple

from ..core.encoding import expect_keys, get_bool, get_int, get_str, get_str_list
from ..core.errors import InternalConfigError, InvalidConfigError, MalformedConfigError


class GeneratePluginConfigType(str, Enum):
    REMOTE = "remote"
    LOCAL = "local"
    PROTOC_BUILTIN = "protoc_builtin"
    LOCAL_OR_PROTOC_BUILTIN = "local_or_protoc_builtin"


class GenerateStrategy(str, Enum):
    DIRECTORY = "directory"
    ALL = "all"


# Plugins que o protoc implementa internamente.
PROTOC_BUILTIN_PLUGIN_NAMES: FrozenSet[str] = frozenset(
    {"cpp", "csharp", "java", "js", "kotlin", "objc", "php", "pyi", "python", "ruby"}
)

_MAX_REVISION = 2**31 - 1


@dataclass(frozen=True)
class GeneratePluginConfig:
    """Um plugin de geração, com o tipo já resolvido."""

    plugin_type: GeneratePluginConfigType
    name: str
    out: str
    opts: Tuple[str, ...] = ()
    path: Tuple[str, ...] = ()
    protoc_path: Tuple[str, ...] = ()
    revision: int = 0
    strategy: Optional[GenerateStrategy] = None
    include_imports: bool = False
    include_wkt: bool = False
    types: Tuple[str, ...] = ()
    exclude_types: Tuple[str, ...] = ()
    post_commands: Tuple[str, ...] = ()

    @property
    def remote_host(self) -> str:
        if self.plugin_type != GeneratePluginConfigType.REMOTE:
            return ""
        return self.name.split("/", 1)[0]


def parse_strategy(value: str) -> Optional[GenerateStrategy]:
    if not value:
        return None
    try:
        return GenerateStrategy(value)
    except ValueError:
        raise InvalidConfigError(f"unknown strategy: {value}") from None


def is_remote_plugin_reference(value: str) -> bool:
    """`host/owner/name` com `:versão` opcional."""
    identity = value.split(":", 1)[0]
    parts = identity.split("/")
    return len(parts) == 3 and all(parts)


def new_generate_plugin_config(
    plugin_type: GeneratePluginConfigType,
    name: str,
    out: str,
    *,
    opts: Tuple[str, ...] = (),
    path: Tuple[str, ...] = (),
    protoc_path: Tuple[str, ...] = (),
    revision: int = 0,
    strategy: Optional[GenerateStrategy] = None,
    include_imports: bool = False,
    include_wkt: bool = False,
    types: Tuple[str, ...] = (),
    exclude_types: Tuple[str, ...] = (),
    post_commands: Tuple[str, ...] = (),
) -> GeneratePluginConfig:
    """
    Constrói um `GeneratePluginConfig` validando as restrições do tipo.

    Raises:
        InvalidConfigError: Se `out` estiver vazio, `include_wkt` vier sem
            `include_imports`, ou uma opção não couber no tipo.
    """
    if not out:
        raise InvalidConfigError(f"must specify out for plugin {name}")
    if include_wkt and not include_imports:
        raise InvalidConfigError("cannot include well-known types without including imports")
    if plugin_type == GeneratePluginConfigType.REMOTE:
        if not is_remote_plugin_reference(name):
            raise InvalidConfigError(f"invalid remote plugin reference: {name}")
        if revision < 0 or revision > _MAX_REVISION:
            raise InvalidConfigError(
                f"revision {revision} is out of accepted range 0-{_MAX_REVISION}"
            )
        if strategy is not None:
            raise InvalidConfigError("cannot specify strategy for remote plugin")
        if protoc_path:
            raise InvalidConfigError("cannot specify protoc_path for remote plugin")
    elif revision:
        raise InvalidConfigError(f"cannot specify revision for {_type_label(plugin_type)} plugin")
    if plugin_type == GeneratePluginConfigType.LOCAL and not path:
        raise InvalidConfigError("must specify a path to the plugin")
    if plugin_type != GeneratePluginConfigType.LOCAL and path:
        raise InternalConfigError(f"path set on {plugin_type.value} plugin {name}")
    if plugin_type == GeneratePluginConfigType.LOCAL and protoc_path:
        raise InvalidConfigError("cannot specify protoc_path for local plugin")

    return GeneratePluginConfig(
        plugin_type=plugin_type,
        name=name,
        out=out,
        opts=tuple(opts),
        path=tuple(path),
        protoc_path=tuple(protoc_path),
        revision=revision,
        strategy=strategy,
        include_imports=include_imports,
        include_wkt=include_wkt,
        types=tuple(types),
        exclude_types=tuple(exclude_types),
        post_commands=tuple(post_commands),
    )


def _type_label(plugin_type: GeneratePluginConfigType) -> str:
    if plugin_type == GeneratePluginConfigType.PROTOC_BUILTIN:
        return "protoc built-in"
    return "local"


def _str_or_list(raw: Dict[str, Any], key: str, *, where: str) -> List[str]:
    value = raw.get(key)
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value else []
    if isinstance(value, list):
        return get_str_list(raw, key, where=where)
    raise MalformedConfigError(f"{where}.{key} must be a string or a list of strings")


def _str_or_list_to_wire(values: Tuple[str, ...]) -> Any:
    if len(values) == 1:
        return values[0]
    return list(values)


# ---------------------------------------------------------------------------
# Wire v2
# ---------------------------------------------------------------------------

_PLUGIN_KEYS_V2 = frozenset(
    {
        "remote",
        "local",
        "protoc_builtin",
        "revision",
        "protoc_path",
        "out",
        "opt",
        "include_imports",
        "include_wkt",
        "strategy",
        "types",
        "exclude_types",
        "postprocess_cmd",
    }
)


def plugin_config_from_wire_v2(raw: Dict[str, Any], *, where: str) -> GeneratePluginConfig:
    """
    Lê um plugin de `buf.gen.yaml` v2.

    Raises:
        MalformedConfigError: Se houver campos desconhecidos.
        InvalidConfigError: Se nenhum ou mais de um de `remote`, `local` e
            `protoc_builtin` estiver definido, ou se uma opção não couber no tipo.
    """
    expect_keys(raw, _PLUGIN_KEYS_V2, where=where)
    local = _str_or_list(raw, "local", where=where)
    kinds: List[GeneratePluginConfigType] = []
    if raw.get("remote") is not None:
        kinds.append(GeneratePluginConfigType.REMOTE)
    if local:
        kinds.append(GeneratePluginConfigType.LOCAL)
    if raw.get("protoc_builtin") is not None:
        kinds.append(GeneratePluginConfigType.PROTOC_BUILTIN)
    if not kinds:
        raise InvalidConfigError("must specify one of remote, local or protoc_builtin")
    if len(kinds) > 1:
        raise InvalidConfigError("only one of remote, local or protoc_builtin is allowed")
    plugin_type = kinds[0]

    if plugin_type == GeneratePluginConfigType.REMOTE:
        name = get_str(raw, "remote", where=where)
    elif plugin_type == GeneratePluginConfigType.LOCAL:
        name = " ".join(local)
    else:
        name = get_str(raw, "protoc_builtin", where=where)

    if raw.get("revision") is not None and plugin_type != GeneratePluginConfigType.REMOTE:
        raise InvalidConfigError(f"cannot specify revision for {_type_label(plugin_type)} plugin")
    protoc_path = _str_or_list(raw, "protoc_path", where=where)
    if protoc_path and plugin_type != GeneratePluginConfigType.PROTOC_BUILTIN:
        raise InvalidConfigError(f"cannot specify protoc_path for {plugin_type.value} plugin")
    out = get_str(raw, "out", where=where)
    if not out:
        raise InvalidConfigError(f"must specify out for plugin {name}")

    return new_generate_plugin_config(
        plugin_type,
        name,
        out,
        opts=tuple(_str_or_list(raw, "opt", where=where)),
        path=tuple(local),
        protoc_path=tuple(protoc_path),
        revision=get_int(raw, "revision", where=where),
        strategy=parse_strategy(get_str(raw, "strategy", where=where)),
        include_imports=get_bool(raw, "include_imports", where=where),
        include_wkt=get_bool(raw, "include_wkt", where=where),
        types=tuple(get_str_list(raw, "types", where=where)),
        exclude_types=tuple(get_str_list(raw, "exclude_types", where=where)),
        post_commands=tuple(get_str_list(raw, "postprocess_cmd", where=where)),
    )


def plugin_config_to_wire_v2(config: GeneratePluginConfig) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    plugin_type = config.plugin_type
    if plugin_type == GeneratePluginConfigType.REMOTE:
        out["remote"] = config.name
        if config.revision:
            out["revision"] = config.revision
    elif plugin_type == GeneratePluginConfigType.LOCAL:
        out["local"] = _str_or_list_to_wire(config.path)
    elif plugin_type == GeneratePluginConfigType.PROTOC_BUILTIN:
        out["protoc_builtin"] = config.name
        if config.protoc_path:
            out["protoc_path"] = _str_or_list_to_wire(config.protoc_path)
    elif plugin_type == GeneratePluginConfigType.LOCAL_OR_PROTOC_BUILTIN:
        if config.name in PROTOC_BUILTIN_PLUGIN_NAMES:
            out["protoc_builtin"] = config.name
        else:
            out["local"] = f"protoc-gen-{config.name}"
    else:
        raise InternalConfigError(f"unknown plugin type: {plugin_type!r}")
    out["out"] = config.out
    if config.opts:
        out["opt"] = _str_or_list_to_wire(config.opts)
    if config.include_imports:
        out["include_imports"] = True
    if config.include_wkt:
        out["include_wkt"] = True
    if config.strategy is not None:
        out["strategy"] = config.strategy.value
    if config.types:
        out["types"] = list(config.types)
    if config.exclude_types:
        out["exclude_types"] = list(config.exclude_types)
    if config.post_commands:
        out["postprocess_cmd"] = list(config.post_commands)
    return out


# ---------------------------------------------------------------------------
# Wire v1
# ---------------------------------------------------------------------------

_PLUGIN_KEYS_V1 = frozenset(
    {
        "plugin",
        "name",
        "remote",
        "revision",
        "out",
        "opt",
        "path",
        "protoc_path",
        "strategy",
        "postprocess_cmd",
    }
)

REMOTE_ALPHA_DEPRECATION_MESSAGE = (
    "the remote field no longer works as the remote generation alpha has been deprecated, "
    "see the migration guide to now-stable remote plugins: "
    "https://buf.build/docs/migration-guides/migrate-remote-generation-alpha/#migrate-to-remote-plugins"
)


def plugin_config_from_wire_v1(raw: Dict[str, Any], *, where: str) -> GeneratePluginConfig:
    """
    Lê um plugin de `buf.gen.yaml` v1.

    `plugin` com referência remota vira REMOTE; `path` vira LOCAL;
    `protoc_path` vira PROTOC_BUILTIN; um nome sozinho fica
    LOCAL_OR_PROTOC_BUILTIN.

    Raises:
        MalformedConfigError: Se houver campos desconhecidos.
        InvalidConfigError: Se `plugin` e `name` forem combinados, estiverem
            ambos ausentes, ou se um plugin remoto definir opções locais.
    """
    expect_keys(raw, _PLUGIN_KEYS_V1, where=where)
    if get_str(raw, "remote", where=where):
        raise InvalidConfigError(REMOTE_ALPHA_DEPRECATION_MESSAGE)
    plugin = get_str(raw, "plugin", where=where)
    name = get_str(raw, "name", where=where)
    if not plugin and not name:
        raise InvalidConfigError("one of plugin or name is required")
    if plugin and name:
        raise InvalidConfigError("only one of plugin or name can be set")
    identifier = plugin or name
    if name and is_remote_plugin_reference(name):
        raise InvalidConfigError(
            f"invalid plugin name {name}, did you mean to use a remote plugin?"
        )

    out = get_str(raw, "out", where=where)
    if not out:
        raise InvalidConfigError(f"must specify out for plugin {identifier}")
    strategy_value = get_str(raw, "strategy", where=where)
    opts = tuple(_str_or_list(raw, "opt", where=where))
    path = tuple(_str_or_list(raw, "path", where=where))
    protoc_path = tuple(_str_or_list(raw, "protoc_path", where=where))
    post_commands = tuple(get_str_list(raw, "postprocess_cmd", where=where))

    if plugin and is_remote_plugin_reference(plugin):
        if path:
            raise InvalidConfigError(f"remote plugin {plugin} cannot specify a path")
        if strategy_value:
            raise InvalidConfigError(f"remote plugin {plugin} cannot specify a strategy")
        if protoc_path:
            raise InvalidConfigError(f"remote plugin {plugin} cannot specify a protoc path")
        return new_generate_plugin_config(
            GeneratePluginConfigType.REMOTE,
            plugin,
            out,
            opts=opts,
            revision=get_int(raw, "revision", where=where),
            post_commands=post_commands,
        )

    if get_int(raw, "revision", where=where):
        raise InvalidConfigError(f"cannot specify revision for local plugin {identifier}")
    strategy = parse_strategy(strategy_value)
    if path:
        plugin_type = GeneratePluginConfigType.LOCAL
    elif protoc_path:
        plugin_type = GeneratePluginConfigType.PROTOC_BUILTIN
    else:
        plugin_type = GeneratePluginConfigType.LOCAL_OR_PROTOC_BUILTIN
    return new_generate_plugin_config(
        plugin_type,
        identifier,
        out,
        opts=opts,
        path=path,
        protoc_path=protoc_path,
        strategy=strategy,
        post_commands=post_commands,
    )
