# src/bufconfig/core/file_version.py
"""
Registro de versões e nomes de arquivo de configuração.

Este módulo define as três gerações de schema suportadas (`v1beta1`, `v1`,
`v2`), os tipos de arquivo conhecidos e, para cada nome de arquivo em disco,
o tipo de arquivo e o conjunto de versões que ele pode carregar.

Componentes principais:
    - FileVersion → enum ordenado por recência
    - FileType    → enum dos tipos de arquivo
    - FileName    → entrada imutável do registro de nomes de arquivo

Decisões arquiteturais:
    - As tabelas são tuplas e frozensets construídos no import
    - A ordem dos nomes por tipo define a precedência de busca
    - O primeiro nome de cada tipo é o nome padrão de escrita

Invariantes:
    - `FileVersion` possui ordem total: v1beta1 < v1 < v2
    - Nenhuma tabela é mutada após o carregamento do módulo

Limites explícitos:
    - Não lê arquivos
    - Não decodifica documentos
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, FrozenSet, Tuple

from .errors import InternalConfigError, UnsupportedFileVersionError


class FileVersion(str, Enum):
    """
    Geração de schema de um arquivo de configuração.

    Os valores são as strings exatas do campo `version` no documento.

    Invariantes:
        - A comparação (`<`, `<=`, `>`, `>=`) segue a ordem de recência,
          não a ordem lexicográfica das strings
    """

    V1BETA1 = "v1beta1"
    V1 = "v1"
    V2 = "v2"

    @property
    def rank(self) -> int:
        return _VERSION_RANK[self.value]

    def __lt__(self, other: Any) -> bool:
        if not isinstance(other, FileVersion):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: Any) -> bool:
        if not isinstance(other, FileVersion):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: Any) -> bool:
        if not isinstance(other, FileVersion):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: Any) -> bool:
        if not isinstance(other, FileVersion):
            return NotImplemented
        return self.rank >= other.rank

    def __str__(self) -> str:
        return self.value


_VERSION_RANK: Dict[str, int] = {"v1beta1": 0, "v1": 1, "v2": 2}

ALL_FILE_VERSIONS: Tuple[FileVersion, ...] = (
    FileVersion.V1BETA1,
    FileVersion.V1,
    FileVersion.V2,
)


class FileType(str, Enum):
    """Tipos de arquivo de configuração conhecidos."""

    BUF_YAML = "buf.yaml"
    BUF_WORK_YAML = "buf.work.yaml"
    BUF_GEN_YAML = "buf.gen.yaml"
    BUF_LOCK = "buf.lock"
    BUF_POLICY_YAML = "buf.policy.yaml"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class FileName:
    """Nome de arquivo em disco e as versões que ele pode carregar."""

    name: str
    file_type: FileType
    supported_versions: FrozenSet[FileVersion]
    legacy: bool = False

    def supports(self, file_version: FileVersion) -> bool:
        return file_version in self.supported_versions


_FILE_NAMES: Tuple[FileName, ...] = (
    FileName(
        "buf.yaml",
        FileType.BUF_YAML,
        frozenset({FileVersion.V1BETA1, FileVersion.V1, FileVersion.V2}),
    ),
    FileName(
        "buf.mod",
        FileType.BUF_YAML,
        frozenset({FileVersion.V1BETA1, FileVersion.V1}),
        legacy=True,
    ),
    FileName("buf.work.yaml", FileType.BUF_WORK_YAML, frozenset({FileVersion.V1})),
    FileName("buf.work", FileType.BUF_WORK_YAML, frozenset({FileVersion.V1}), legacy=True),
    FileName(
        "buf.gen.yaml",
        FileType.BUF_GEN_YAML,
        frozenset({FileVersion.V1, FileVersion.V2}),
    ),
    FileName(
        "buf.lock",
        FileType.BUF_LOCK,
        frozenset({FileVersion.V1BETA1, FileVersion.V1, FileVersion.V2}),
    ),
    FileName("buf.policy.yaml", FileType.BUF_POLICY_YAML, frozenset({FileVersion.V2})),
)

_NAME_TO_FILE_NAME: Dict[str, FileName] = {f.name: f for f in _FILE_NAMES}


def parse_file_version(value: Any) -> FileVersion:
    """
    Converte a string do campo `version` em `FileVersion`.

    Raises:
        UnsupportedFileVersionError: Se o valor não for uma versão conhecida.
    """
    if isinstance(value, FileVersion):
        return value
    if isinstance(value, str):
        for file_version in ALL_FILE_VERSIONS:
            if file_version.value == value:
                return file_version
    raise UnsupportedFileVersionError(f"unknown file version: {value!r}")


def file_names_for_type(file_type: FileType) -> Tuple[FileName, ...]:
    """Nomes de arquivo de um tipo, na ordem de precedência de busca."""
    return tuple(f for f in _FILE_NAMES if f.file_type == file_type)


def default_file_name(file_type: FileType) -> FileName:
    return file_names_for_type(file_type)[0]


def get_file_name(name: str) -> FileName:
    file_name = _NAME_TO_FILE_NAME.get(name)
    if file_name is None:
        raise InternalConfigError(f"unknown configuration file name: {name!r}")
    return file_name


def supported_versions_for_type(file_type: FileType) -> FrozenSet[FileVersion]:
    versions: FrozenSet[FileVersion] = frozenset()
    for file_name in file_names_for_type(file_type):
        versions = versions | file_name.supported_versions
    return versions


def check_file_version_supported(file_name: FileName, file_version: FileVersion) -> None:
    """
    Garante que `file_version` é suportada pelo nome de arquivo.

    Raises:
        UnsupportedFileVersionError: Se a versão não for suportada.
    """
    if not file_name.supports(file_version):
        raise UnsupportedFileVersionError(
            f"version {file_version.value} is not supported for {file_name.name} files"
        )


def check_file_type_version_supported(file_type: FileType, file_version: FileVersion) -> None:
    """Como `check_file_version_supported`, mas para o tipo de arquivo como um todo."""
    if file_version not in supported_versions_for_type(file_type):
        raise UnsupportedFileVersionError(
            f"version {file_version.value} is not supported for {file_type.value} files"
        )
