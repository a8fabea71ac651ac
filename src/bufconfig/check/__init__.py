# src/bufconfig/check/__init__.py
"""bufconfig: Check (lint/breaking).

Componentes canônicos:
 - modelo de configuração (`CheckConfig`, `LintConfig`, `BreakingConfig`)
 - forma de wire por versão
 - resolução da configuração efetiva por módulo
 - fatoração canônica para escrita
"""

from .config import (  # noqa: F401
    CheckConfig,
    LintConfig,
    BreakingConfig,
    new_lint_config,
    new_breaking_config,
    default_lint_config,
    default_breaking_config,
)
from .plugin import PluginConfig, new_plugin_config  # noqa: F401
from .resolver import resolve_effective_check_config  # noqa: F401
from .canonical import FactoredCheckConfigs, factor_check_configs  # noqa: F401
