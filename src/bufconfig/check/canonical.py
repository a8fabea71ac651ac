# src/bufconfig/check/canonical.py
"""
Fatoração canônica de configurações de check para escrita.

Dadas as configurações efetivas de N módulos irmãos, decide o que vai para
o escopo compartilhado do arquivo e o que permanece como bloco local de cada
módulo, de forma que reler o documento pelo `resolver` reproduza exatamente
as mesmas configurações efetivas.

Política (tudo ou nada, por tipo de check):
    1. Se todas as configurações efetivas, reescritas em coordenadas do
       documento, forem iguais campo a campo, emite um único bloco
       compartilhado e nenhum bloco local.
    2. Caso contrário, não emite bloco compartilhado e cada módulo recebe o
       bloco completo da sua configuração efetiva (nunca um diff parcial).

Invariantes:
    - A saída não depende da ordem de entrada (módulos ordenados por diretório)
    - `resolve(factor(x)) == x` para toda entrada produzida por `resolve`
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Generic, Optional, Sequence, Tuple, TypeVar

from .config import CheckConfig
from .resolver import rebase_check_config

C = TypeVar("C", bound=CheckConfig)


@dataclass(frozen=True)
class FactoredCheckConfigs(Generic[C]):
    """Resultado da fatoração, em coordenadas do documento."""

    shared: Optional[C]
    dir_path_to_local: Dict[str, Optional[C]] = field(default_factory=dict)

    @property
    def hoisted(self) -> bool:
        return self.shared is not None


def factor_check_configs(dir_path_to_effective: Sequence[Tuple[str, C]]) -> FactoredCheckConfigs[C]:
    rebased = [
        (dir_path, rebase_check_config(config, dir_path))
        for dir_path, config in sorted(dir_path_to_effective, key=lambda item: item[0])
    ]
    if not rebased:
        return FactoredCheckConfigs(shared=None)
    first = rebased[0][1]
    if all(config == first for _, config in rebased[1:]):
        return FactoredCheckConfigs(
            shared=first,
            dir_path_to_local={dir_path: None for dir_path, _ in rebased},
        )
    return FactoredCheckConfigs(
        shared=None,
        dir_path_to_local={dir_path: config for dir_path, config in rebased},
    )
