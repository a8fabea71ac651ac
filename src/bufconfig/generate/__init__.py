# src/bufconfig/generate/__init__.py
"""bufconfig: Geração de código (`buf.gen.yaml`).

Componentes canônicos:
 - entradas de geração (`InputConfig`)
 - managed mode (regras de override e desativação)
 - plugins de geração
 - agregado `BufGenYAMLFile`
"""

from .input_config import InputConfig, InputConfigType, new_input_config  # noqa: F401
from .managed import (  # noqa: F401
    FileOption,
    FieldOption,
    OptimizeMode,
    JSType,
    ManagedDisableRule,
    ManagedOverrideRule,
    GenerateManagedConfig,
    new_disable_rule,
    new_file_option_override_rule,
    new_field_option_override_rule,
    new_generate_managed_config,
)
from .plugin_config import (  # noqa: F401
    GeneratePluginConfig,
    GeneratePluginConfigType,
    GenerateStrategy,
    new_generate_plugin_config,
)
from .buf_gen_yaml import (  # noqa: F401
    BufGenYAMLFile,
    new_buf_gen_yaml_file,
    read_buf_gen_yaml_file,
    write_buf_gen_yaml_file,
    migrate_buf_gen_yaml_file_to_v2,
    get_buf_gen_yaml_file_for_prefix,
    put_buf_gen_yaml_file_for_prefix,
)
