# src/bufconfig/storage/bucket.py
"""
Buckets de leitura e escrita por caminho.

Este módulo define a capacidade mínima de armazenamento consumida pelo
modelo de configuração: ler bytes de um caminho e escrever bytes de forma
atômica.

Componentes principais:
    - ReadBucket / WriteBucket → protocolos estruturais
    - LocalBucket → sistema de arquivos, com escrita atômica via rename
    - MapBucket   → bucket em memória

Decisões arquiteturais:
    - Caminhos são relativos à raiz do bucket e normalizados
    - Caminho inexistente levanta `FileNotFoundError`
    - A escrita local usa arquivo temporário no mesmo diretório e
      `os.replace`, de modo que leitores nunca observam escrita parcial

Limites explícitos:
    - Não lista diretórios
    - Não conhece tipos de arquivo de configuração
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, Optional, Protocol, Union

from ..core.normalpath import normalize_and_validate

logger = logging.getLogger(__name__)


class ReadBucket(Protocol):
    def read(self, path: str) -> bytes:
        ...


class WriteBucket(Protocol):
    def write_atomic(self, path: str, data: bytes) -> None:
        ...


class LocalBucket:
    """Bucket sobre um diretório do sistema de arquivos."""

    def __init__(self, root: Union[str, Path]) -> None:
        self._root = Path(root)

    @property
    def root(self) -> Path:
        return self._root

    def _resolve(self, path: str) -> Path:
        return self._root / normalize_and_validate(path)

    def read(self, path: str) -> bytes:
        target = self._resolve(path)
        if not target.is_file():
            raise FileNotFoundError(str(target))
        return target.read_bytes()

    def write_atomic(self, path: str, data: bytes) -> None:
        target = self._resolve(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=str(target.parent), prefix=f".{target.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, target)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
        logger.debug("wrote %d bytes to %s", len(data), target)


class MapBucket:
    """Bucket em memória, indexado por caminho normalizado."""

    def __init__(self, files: Optional[Dict[str, Union[bytes, str]]] = None) -> None:
        self._files: Dict[str, bytes] = {}
        for path, data in (files or {}).items():
            self.write_atomic(path, data.encode("utf-8") if isinstance(data, str) else data)

    def read(self, path: str) -> bytes:
        normalized = normalize_and_validate(path)
        try:
            return self._files[normalized]
        except KeyError:
            raise FileNotFoundError(normalized) from None

    def write_atomic(self, path: str, data: bytes) -> None:
        self._files[normalize_and_validate(path)] = bytes(data)

    def paths(self):
        return sorted(self._files)
