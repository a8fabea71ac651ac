# src/bufconfig/__init__.py
"""
bufconfig: modelo de configuração versionado para projetos protobuf.

Este pacote raiz define o namespace público do modelo de configuração
utilizado pela ferramenta de build protobuf: leitura, validação, resolução
e reescrita canônica de `buf.yaml`, `buf.work.yaml`, `buf.gen.yaml`,
`buf.lock` e `buf.policy.yaml`.

Arquitetura em alto nível:
    - core      → versões de arquivo, erros, caminhos, encoding e nomes de módulo
    - check     → configuração de lint/breaking, resolução efetiva e fatoração
    - module    → validação de caminhos, ModuleConfig, buf.yaml e buf.work.yaml
    - generate  → inputs, managed mode, plugins e buf.gen.yaml
    - lock      → digests tipados e buf.lock
    - policy    → buf.policy.yaml
    - storage   → buckets e leitura/escrita por prefixo

Limites explícitos:
    - Não compila protobuf
    - Não executa regras de lint ou breaking
    - Não busca dependências remotas

Este módulo existe para estabelecer o namespace do bufconfig,
servindo como ponto de entrada lógico do modelo.
"""

from .core.file_version import FileVersion, FileType  # noqa: F401
from .core.errors import (  # noqa: F401
    BufConfigError,
    MalformedConfigError,
    UnsupportedFileVersionError,
    InvalidConfigError,
    InvalidPathError,
    InternalConfigError,
    ConfigNotFoundError,
)
from .module.buf_yaml import (  # noqa: F401
    BufYAMLFile,
    read_buf_yaml_file,
    write_buf_yaml_file,
)
from .generate.buf_gen_yaml import (  # noqa: F401
    BufGenYAMLFile,
    read_buf_gen_yaml_file,
    write_buf_gen_yaml_file,
)
from .lock.buf_lock import BufLockFile, read_buf_lock_file, write_buf_lock_file  # noqa: F401
from .policy.buf_policy_yaml import (  # noqa: F401
    BufPolicyYAMLFile,
    read_buf_policy_yaml_file,
    write_buf_policy_yaml_file,
)

__version__ = "0.1.0"
