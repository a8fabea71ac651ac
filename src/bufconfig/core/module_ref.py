# src/bufconfig/core/module_ref.py
"""Identidade de módulos (`registry/owner/name`) e referências de dependência.

Os modelos de configuração tratam estes valores como opacos: apenas
verificam a forma e os comparam por igualdade e ordem.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .errors import InvalidConfigError


def _check_component(value: str, what: str, full: str) -> None:
    if not value:
        raise InvalidConfigError(f"invalid module name {full!r}: {what} is empty")
    if any(c.isspace() for c in value):
        raise InvalidConfigError(f"invalid module name {full!r}: {what} contains whitespace")


@dataclass(frozen=True, order=True)
class ModuleFullName:
    registry: str
    owner: str
    name: str

    def __str__(self) -> str:
        return f"{self.registry}/{self.owner}/{self.name}"


def parse_module_full_name(value: str) -> ModuleFullName:
    """
    Converte `registry/owner/name` em `ModuleFullName`.

    Raises:
        InvalidConfigError: Se o nome não tiver exatamente três componentes válidos.
    """
    if not isinstance(value, str):
        raise InvalidConfigError(f"invalid module name {value!r}: must be a string")
    parts = value.split("/")
    if len(parts) != 3:
        raise InvalidConfigError(
            f"invalid module name {value!r}: must be in the form registry/owner/name"
        )
    _check_component(parts[0], "registry", value)
    _check_component(parts[1], "owner", value)
    _check_component(parts[2], "name", value)
    return ModuleFullName(parts[0], parts[1], parts[2])


@dataclass(frozen=True, order=True)
class ModuleRef:
    """Dependência declarada: nome completo e referência opcional (`:ref`)."""

    full_name: ModuleFullName
    ref: Optional[str] = None

    def __str__(self) -> str:
        if self.ref:
            return f"{self.full_name}:{self.ref}"
        return str(self.full_name)


def parse_module_ref(value: str) -> ModuleRef:
    if not isinstance(value, str):
        raise InvalidConfigError(f"invalid module reference {value!r}: must be a string")
    name, sep, ref = value.partition(":")
    if sep and not ref:
        raise InvalidConfigError(f"invalid module reference {value!r}: empty reference")
    return ModuleRef(parse_module_full_name(name), ref or None)
