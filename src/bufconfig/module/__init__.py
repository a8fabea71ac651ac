# src/bufconfig/module/__init__.py
"""bufconfig: Module.

Componentes canônicos:
 - validação de includes/excludes
 - `ModuleConfig`
 - `buf.yaml` (v1beta1, v1, v2)
 - `buf.work.yaml` (v1)
"""

from .paths import validate_include_and_exclude_paths  # noqa: F401
from .module_config import ModuleConfig, new_module_config, get_root_to_excludes  # noqa: F401
from .buf_yaml import (  # noqa: F401
    BufYAMLFile,
    new_buf_yaml_file,
    read_buf_yaml_file,
    write_buf_yaml_file,
    get_buf_yaml_file_for_prefix,
    put_buf_yaml_file_for_prefix,
    read_buf_yaml_file_for_override,
)
from .work_yaml import (  # noqa: F401
    BufWorkYAMLFile,
    new_buf_work_yaml_file,
    read_buf_work_yaml_file,
    write_buf_work_yaml_file,
)
