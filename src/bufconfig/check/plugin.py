# src/bufconfig/check/plugin.py
"""Configuração de plugins de check (`plugins` em buf.yaml v2 e buf.policy.yaml)."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Tuple

from ..core.encoding import expect_keys
from ..core.errors import InvalidConfigError, MalformedConfigError

_PLUGIN_KEYS = frozenset({"plugin", "options"})


@dataclass(frozen=True)
class PluginConfig:
    """Plugin de check: nome ou caminho, argumentos e opções livres."""

    name: str
    args: Tuple[str, ...] = ()
    options: Mapping[str, Any] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "options", MappingProxyType(copy.deepcopy(dict(self.options))))


def new_plugin_config(name: str, *, args=(), options=None) -> PluginConfig:
    if not isinstance(name, str) or not name.strip():
        raise InvalidConfigError("plugin name is required")
    for arg in args:
        if not isinstance(arg, str):
            raise InvalidConfigError(f"plugin {name!r}: args must be strings")
    options = dict(options or {})
    for key in options:
        if not isinstance(key, str) or not key:
            raise InvalidConfigError(f"plugin {name!r}: option keys must be non-empty strings")
    return PluginConfig(name=name, args=tuple(args), options=options)


def plugin_config_from_wire(raw: Dict[str, Any], *, where: str) -> PluginConfig:
    expect_keys(raw, _PLUGIN_KEYS, where=where)
    plugin = raw.get("plugin")
    if isinstance(plugin, str):
        name, args = plugin, []
    elif isinstance(plugin, list) and plugin and all(isinstance(p, str) for p in plugin):
        name, args = plugin[0], plugin[1:]
    else:
        raise MalformedConfigError(f"{where}.plugin must be a string or a non-empty list of strings")
    options = raw.get("options") or {}
    if not isinstance(options, dict):
        raise MalformedConfigError(f"{where}.options must be a mapping")
    return new_plugin_config(name, args=args, options=options)


def plugin_config_to_wire(config: PluginConfig) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    if config.args:
        out["plugin"] = [config.name, *config.args]
    else:
        out["plugin"] = config.name
    if config.options:
        out["options"] = copy.deepcopy(dict(config.options))
    return out


def plugin_configs_from_wire(raws: List[Dict[str, Any]], *, where: str) -> Tuple[PluginConfig, ...]:
    return tuple(
        plugin_config_from_wire(raw, where=f"{where}[{i}]") for i, raw in enumerate(raws)
    )
