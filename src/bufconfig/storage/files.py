# src/bufconfig/storage/files.py
"""Localização e persistência de arquivos de configuração em um prefixo."""

from __future__ import annotations

import logging
from typing import Callable, TypeVar

from ..core.errors import ConfigNotFoundError
from ..core.file_version import (
    FileName,
    FileType,
    check_file_version_supported,
    default_file_name,
    file_names_for_type,
)
from ..core.normalpath import join
from .bucket import ReadBucket, WriteBucket

logger = logging.getLogger(__name__)

T = TypeVar("T")


def read_file_for_prefix(
    bucket: ReadBucket,
    prefix: str,
    file_type: FileType,
    read_func: Callable[[bytes], T],
) -> T:
    """
    Lê o primeiro arquivo do tipo encontrado no prefixo, na ordem de
    precedência dos nomes (ex.: `buf.yaml` antes de `buf.mod`).

    O arquivo lido deve declarar uma versão suportada pelo nome em que foi
    encontrado.

    Raises:
        ConfigNotFoundError: Se nenhum nome do tipo existir no prefixo.
        UnsupportedFileVersionError: Se a versão não for suportada pelo nome.
    """
    for file_name in file_names_for_type(file_type):
        path = join(prefix, file_name.name)
        try:
            data = bucket.read(path)
        except FileNotFoundError:
            logger.debug("no %s at %s", file_type.value, path)
            continue
        logger.debug("reading %s from %s", file_type.value, path)
        result = read_func(data)
        check_file_version_supported(file_name, result.file_version)
        return result
    raise ConfigNotFoundError(f"no {file_type.value} file found in {prefix!r}")


def write_file_for_prefix(
    bucket: WriteBucket,
    prefix: str,
    file_type: FileType,
    data: bytes,
) -> str:
    """Escreve `data` sob o nome padrão do tipo e devolve o caminho escrito."""
    file_name: FileName = default_file_name(file_type)
    path = join(prefix, file_name.name)
    bucket.write_atomic(path, data)
    logger.debug("wrote %s to %s", file_type.value, path)
    return path
