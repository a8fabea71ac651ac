# src/bufconfig/core/encoding.py
"""
Decode e encode estritos de documentos de configuração (YAML/JSON).

Este módulo é a única fronteira entre bytes e estruturas de dados puras.
Os leitores de cada arquivo recebem daqui um `dict` e validam as chaves de
cada mapeamento contra o conjunto permitido pela versão do arquivo.

Decisões arquiteturais:
    - YAML é o formato primário (PyYAML `safe_load` com loader estrito)
    - JSON só é aceito quando o chamador passa `allow_json=True`
    - Chaves duplicadas são rejeitadas
    - Timestamps YAML são mantidos como string
    - A saída usa estilo em bloco, indentação de dois espaços e preserva a
      ordem de inserção das chaves

Invariantes:
    - `decode` sempre retorna um `dict` (documento vazio vira `{}`)
    - Falhas de parse são sempre `MalformedConfigError`

Limites explícitos:
    - Não conhece versões de arquivo
    - Não valida semântica de domínio
"""

from __future__ import annotations

import json
from typing import Any, Dict, FrozenSet, Iterable, List, Tuple, Union

import yaml

from .errors import MalformedConfigError


class _StrictLoader(yaml.SafeLoader):
    """SafeLoader que rejeita chaves duplicadas e não interpreta timestamps."""

    def construct_mapping(self, node, deep=False):
        if isinstance(node, yaml.MappingNode):
            seen = set()
            for key_node, _ in node.value:
                if key_node.tag == "tag:yaml.org,2002:merge":
                    continue
                key = self.construct_object(key_node, deep=deep)
                try:
                    duplicate = key in seen
                except TypeError:
                    continue
                if duplicate:
                    raise yaml.constructor.ConstructorError(
                        None, None, f"duplicate key {key!r}", key_node.start_mark
                    )
                seen.add(key)
        return super().construct_mapping(node, deep=deep)


def _construct_timestamp_as_str(loader: yaml.SafeLoader, node: yaml.Node) -> str:
    return loader.construct_scalar(node)


_StrictLoader.add_constructor("tag:yaml.org,2002:timestamp", _construct_timestamp_as_str)


class _IndentedDumper(yaml.SafeDumper):
    """SafeDumper que indenta itens de sequência sob a chave pai."""

    def increase_indent(self, flow=False, indentless=False):
        return super().increase_indent(flow, False)


def _to_text(data: Union[bytes, str]) -> str:
    if isinstance(data, bytes):
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedConfigError(f"could not decode as UTF-8: {e}") from e
    return data


def decode(data: Union[bytes, str], *, allow_json: bool = False) -> Dict[str, Any]:
    """
    Decodifica um documento YAML (ou JSON) em um dicionário.

    Args:
        data: Conteúdo bruto do arquivo.
        allow_json: Aceita documentos JSON além de YAML.

    Returns:
        Dict[str, Any]: Documento decodificado.

    Raises:
        MalformedConfigError: Se o parse falhar ou a raiz não for um mapeamento.
    """
    text = _to_text(data)
    try:
        if allow_json and text.lstrip().startswith("{"):
            doc = json.loads(text)
        else:
            doc = yaml.load(text, Loader=_StrictLoader)  # noqa: S506
    except (yaml.YAMLError, ValueError) as e:
        raise MalformedConfigError(str(e) or "failed to decode document") from e

    if doc is None:
        return {}
    if not isinstance(doc, dict):
        raise MalformedConfigError(
            f"document root must be a mapping, got {type(doc).__name__}"
        )
    return doc


def encode(doc: Dict[str, Any], *, header: str = "") -> bytes:
    """Serializa um documento em YAML determinístico, com cabeçalho opcional."""
    body = yaml.dump(
        doc,
        Dumper=_IndentedDumper,
        sort_keys=False,
        default_flow_style=False,
        allow_unicode=True,
        indent=2,
        width=float("inf"),
    )
    return (header + body).encode("utf-8")


def split_header(data: Union[bytes, str]) -> Tuple[str, str]:
    """
    Separa o bloco de comentários inicial do restante do documento.

    O cabeçalho inclui linhas de comentário e linhas em branco até a primeira
    linha de conteúdo, preservado byte a byte para reescrita.
    """
    text = _to_text(data)
    lines = text.splitlines(keepends=True)
    header_lines: List[str] = []
    for line in lines:
        stripped = line.strip()
        if stripped.startswith("#") or (not stripped and header_lines):
            header_lines.append(line)
            continue
        break
    header = "".join(header_lines)
    if not header.strip():
        return "", text
    return header, text[len(header):]


# ---------------------------------------------------------------------------
# Acesso tipado a mapeamentos decodificados
# ---------------------------------------------------------------------------

def expect_keys(mapping: Dict[str, Any], allowed: Iterable[str], *, where: str) -> None:
    """Rejeita chaves fora de `allowed` (decode estrito)."""
    allowed_set: FrozenSet[str] = frozenset(allowed)
    for key in mapping:
        if key not in allowed_set:
            raise MalformedConfigError(f"field {key!r} not found in {where}")


def get_str(mapping: Dict[str, Any], key: str, *, where: str) -> str:
    value = mapping.get(key)
    if value is None:
        return ""
    if isinstance(value, bool):
        raise MalformedConfigError(f"{where}.{key} must be a string")
    if isinstance(value, int):
        return str(value)
    if not isinstance(value, str):
        raise MalformedConfigError(f"{where}.{key} must be a string")
    return value


def get_bool(mapping: Dict[str, Any], key: str, *, where: str) -> bool:
    value = mapping.get(key)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise MalformedConfigError(f"{where}.{key} must be a boolean")
    return value


def get_int(mapping: Dict[str, Any], key: str, *, where: str) -> int:
    value = mapping.get(key)
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise MalformedConfigError(f"{where}.{key} must be an integer")
    return value


def get_str_list(mapping: Dict[str, Any], key: str, *, where: str) -> List[str]:
    value = mapping.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise MalformedConfigError(f"{where}.{key} must be a list of strings")
    out: List[str] = []
    for i, item in enumerate(value):
        if not isinstance(item, str):
            raise MalformedConfigError(f"{where}.{key}[{i}] must be a string")
        out.append(item)
    return out


def get_mapping(mapping: Dict[str, Any], key: str, *, where: str) -> Dict[str, Any]:
    value = mapping.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise MalformedConfigError(f"{where}.{key} must be a mapping")
    return value


def get_mapping_list(mapping: Dict[str, Any], key: str, *, where: str) -> List[Dict[str, Any]]:
    value = mapping.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise MalformedConfigError(f"{where}.{key} must be a list")
    for i, item in enumerate(value):
        if not isinstance(item, dict):
            raise MalformedConfigError(f"{where}.{key}[{i}] must be a mapping")
    return value


def get_str_list_map(mapping: Dict[str, Any], key: str, *, where: str) -> Dict[str, List[str]]:
    raw = get_mapping(mapping, key, where=where)
    out: Dict[str, List[str]] = {}
    for sub_key in raw:
        if not isinstance(sub_key, str):
            raise MalformedConfigError(f"{where}.{key} keys must be strings")
        out[sub_key] = get_str_list(raw, sub_key, where=f"{where}.{key}")
    return out
