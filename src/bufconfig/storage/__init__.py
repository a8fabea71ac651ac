# src/bufconfig/storage/__init__.py
"""bufconfig: Storage.

Capacidade mínima de leitura/escrita por caminho usada para localizar,
ler e persistir arquivos de configuração em um prefixo.
"""

from .bucket import LocalBucket, MapBucket, ReadBucket, WriteBucket  # noqa: F401
from .files import read_file_for_prefix, write_file_for_prefix  # noqa: F401
