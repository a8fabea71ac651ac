# src/bufconfig/lock/digest.py
"""
Digests tipados de dependências resolvidas (`tipo:hex`).

Cada entrada de um `buf.lock` carrega um digest cujo prefixo seleciona o
algoritmo e o tipo de conteúdo:

    - shake256 → módulos (b4, forma legada)
    - b5       → módulos
    - p1       → plugins
    - o1       → policies

Todos os tipos conhecidos são SHAKE256 de 64 bytes.

Decisões arquiteturais:
    - O valor hexadecimal é normalizado para minúsculas na construção
    - Os prefixos `b1-` e `b3-` são reconhecidos apenas para produzir a
      mensagem de migração; nunca são aceitos
    - A restrição de tipos por espécie de entrada é aplicada pelo chamador
      via `allowed`

Invariantes:
    - `str(parse_digest(s)) == s` para todo `s` canônico
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Iterable, Optional

from ..core.errors import InvalidConfigError


class DigestType(str, Enum):
    B4 = "shake256"
    B5 = "b5"
    P1 = "p1"
    O1 = "o1"

    def __str__(self) -> str:
        return self.value


SHAKE256_LENGTH = 64

MODULE_DIGEST_TYPES: FrozenSet[DigestType] = frozenset({DigestType.B4, DigestType.B5})
PLUGIN_DIGEST_TYPES: FrozenSet[DigestType] = frozenset({DigestType.P1})
POLICY_DIGEST_TYPES: FrozenSet[DigestType] = frozenset({DigestType.O1})

_DEPRECATED_DIGEST_PREFIXES = (("b1", "b1-"), ("b3", "b3-"))


@dataclass(frozen=True)
class Digest:
    digest_type: DigestType
    hex_value: str

    def __str__(self) -> str:
        return f"{self.digest_type.value}:{self.hex_value}"


def _parse_digest_type(value: str, full: str) -> DigestType:
    for digest_type in DigestType:
        if digest_type.value == value:
            return digest_type
    raise InvalidConfigError(f"invalid digest {full!r}: unknown type: {value!r}")


def new_digest(digest_type: DigestType, hex_value: str) -> Digest:
    """
    Constrói um `Digest` validando o valor hexadecimal.

    Raises:
        InvalidConfigError: Se o valor não for hexadecimal ou não tiver o
            tamanho do algoritmo.
    """
    full = f"{digest_type}:{hex_value}"
    try:
        value = bytes.fromhex(hex_value)
    except ValueError:
        raise InvalidConfigError(
            f'invalid digest {full!r}: could not parse hex: must be in the form '
            f'"digest_type:digest_hex_value"'
        ) from None
    if len(value) != SHAKE256_LENGTH:
        raise InvalidConfigError(
            f"invalid digest {full!r}: expected {SHAKE256_LENGTH} bytes, got {len(value)}"
        )
    return Digest(digest_type=digest_type, hex_value=value.hex())


def parse_digest(value: str, *, allowed: Optional[Iterable[DigestType]] = None) -> Digest:
    """
    Converte `tipo:hex` em `Digest`.

    Args:
        value: Digest em forma textual.
        allowed: Tipos aceitos para a espécie de entrada; todos quando `None`.

    Raises:
        InvalidConfigError: Se o digest for vazio, legado (`b1-`/`b3-`),
            malformado, de tipo desconhecido ou de tipo não permitido.
    """
    if not value:
        raise InvalidConfigError("empty digest")
    for digest_type, prefix in _DEPRECATED_DIGEST_PREFIXES:
        if value.startswith(prefix):
            raise InvalidConfigError(
                f'{digest_type} digests are no longer supported, '
                f'run "buf mod update" to update your buf.lock'
            )
    type_string, sep, hex_value = value.partition(":")
    if not sep:
        raise InvalidConfigError(
            f'invalid digest {value!r}: must be in the form "digest_type:digest_hex_value"'
        )
    digest = new_digest(_parse_digest_type(type_string, value), hex_value)
    if allowed is not None:
        allowed = frozenset(allowed)
        if digest.digest_type not in allowed:
            expected = ", ".join(sorted(t.value for t in allowed))
            raise InvalidConfigError(
                f"invalid digest {value!r}: type {digest.digest_type} is not allowed here, "
                f"expected one of: {expected}"
            )
    return digest
