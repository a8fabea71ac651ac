# tests/conftest.py
"""
Fixtures compartilhados para testes do bufconfig.

Este módulo define fixtures reutilizáveis que fornecem documentos de
configuração realistas, como strings YAML, para cada tipo de arquivo e
geração de schema:
- buf.yaml v1 e v2 (módulo único e múltiplos módulos)
- buf.gen.yaml v1 e v2
- buf.lock v1 e v2
- buf.policy.yaml v2

O objetivo destas fixtures é permitir testes de leitura, validação e escrita
canônica sem depender de filesystem; testes de storage usam `tmp_path`.

Decisões arquiteturais:
    - Documentos fornecidos como string para evitar I/O
    - Documentos marcados como canônicos já estão na forma que o escritor
      produz, para permitir comparação byte a byte
    - Digests usam valores hexadecimais fixos de 64 bytes

Invariantes:
    - Todo YAML é sintaticamente válido
    - Nenhuma fixture realiza I/O
    - Todas as fixtures são seguras para execução em paralelo

Limites explícitos:
    - Não substituir testes de integração com a ferramenta de build
    - Não conter lógica de domínio
"""

import pytest


HEX_A = "0123456789abcdef" * 8
HEX_B = "fedcba9876543210" * 8


@pytest.fixture
def hex_a() -> str:
    """Valor hexadecimal válido para digests SHAKE256 (64 bytes)."""
    return HEX_A


@pytest.fixture
def hex_b() -> str:
    return HEX_B


# =====================================================
# buf.yaml
# =====================================================

@pytest.fixture
def buf_yaml_v1_yaml() -> str:
    """
    Fixture com um `buf.yaml` v1 típico de um módulo publicado.

    Contém nome, dependências, excludes de build e blocos de lint e
    breaking com ignores, cobrindo a forma legada completa.

    Invariantes:
        - Já está na forma canônica do escritor v1
    """
    return (
        "version: v1\n"
        "name: buf.build/acme/weather\n"
        "deps:\n"
        "  - buf.build/googleapis/googleapis\n"
        "build:\n"
        "  excludes:\n"
        "    - vendor\n"
        "lint:\n"
        "  use:\n"
        "    - DEFAULT\n"
        "  except:\n"
        "    - PACKAGE_VERSION_SUFFIX\n"
        "  ignore:\n"
        "    - acme/legacy\n"
        "breaking:\n"
        "  use:\n"
        "    - FILE\n"
    )


@pytest.fixture
def buf_yaml_v2_hoisted_yaml() -> str:
    """
    Fixture com um `buf.yaml` v2 de dois módulos que compartilham lint.

    Forma canônica: lint no escopo do arquivo, nenhum bloco local.
    """
    return (
        "# Configuração do workspace de exemplo.\n"
        "version: v2\n"
        "modules:\n"
        "  - path: proto/payment\n"
        "    name: buf.build/acme/payment\n"
        "  - path: proto/weather\n"
        "    name: buf.build/acme/weather\n"
        "deps:\n"
        "  - buf.build/googleapis/googleapis\n"
        "lint:\n"
        "  use:\n"
        "    - STANDARD\n"
    )


@pytest.fixture
def buf_yaml_v2_mixed_yaml() -> str:
    """
    Fixture com um `buf.yaml` v2 em que um módulo sobrescreve o lint.

    O módulo `proto/weather` herda o lint compartilhado; `proto/payment`
    declara bloco próprio. O ignore compartilhado `proto/weather/acme/legacy`
    só se aplica ao módulo que o contém.
    """
    return (
        "version: v2\n"
        "modules:\n"
        "  - path: proto/payment\n"
        "    lint:\n"
        "      use:\n"
        "        - MINIMAL\n"
        "  - path: proto/weather\n"
        "    includes:\n"
        "      - proto/weather/acme\n"
        "    excludes:\n"
        "      - proto/weather/acme/internal\n"
        "lint:\n"
        "  use:\n"
        "    - STANDARD\n"
        "  ignore:\n"
        "    - proto/weather/acme/legacy\n"
        "breaking:\n"
        "  use:\n"
        "    - WIRE_JSON\n"
    )


# =====================================================
# buf.gen.yaml
# =====================================================

@pytest.fixture
def buf_gen_yaml_v2_yaml() -> str:
    """Fixture com um `buf.gen.yaml` v2 canônico (managed, plugins e inputs)."""
    return (
        "version: v2\n"
        "clean: true\n"
        "managed:\n"
        "  enabled: true\n"
        "  disable:\n"
        "    - file_option: go_package\n"
        "      module: buf.build/googleapis/googleapis\n"
        "  override:\n"
        "    - file_option: go_package_prefix\n"
        "      value: github.com/acme/weather/gen/go\n"
        "    - field_option: jstype\n"
        "      path: acme/weather/v1/weather.proto\n"
        "      field: acme.weather.v1.Forecast.id\n"
        "      value: JS_STRING\n"
        "plugins:\n"
        "  - remote: buf.build/protocolbuffers/go:v1.31.0\n"
        "    out: gen/go\n"
        "    opt: paths=source_relative\n"
        "  - local: protoc-gen-es\n"
        "    out: gen/es\n"
        "    opt:\n"
        "      - target=ts\n"
        "      - import_extension=.js\n"
        "    include_imports: true\n"
        "  - protoc_builtin: java\n"
        "    out: gen/java\n"
        "inputs:\n"
        "  - directory: proto\n"
        "  - git_repo: https://github.com/acme/weather.git\n"
        "    subdir: proto\n"
        "    branch: main\n"
    )


@pytest.fixture
def buf_gen_yaml_v1_yaml() -> str:
    """
    Fixture com um `buf.gen.yaml` v1 usando managed mode legado.

    Cobre plugin remoto, plugin embutido do protoc, plugin só por nome,
    plugin local com `path` e `types.include`.
    """
    return (
        "version: v1\n"
        "managed:\n"
        "  enabled: true\n"
        "  go_package_prefix:\n"
        "    default: github.com/acme/weather/gen/go\n"
        "    except:\n"
        "      - buf.build/googleapis/googleapis\n"
        "plugins:\n"
        "  - plugin: buf.build/protocolbuffers/go\n"
        "    out: gen/go\n"
        "    opt: paths=source_relative\n"
        "  - plugin: java\n"
        "    out: gen/java\n"
        "  - plugin: validate\n"
        "    out: gen/validate\n"
        "  - name: es\n"
        "    out: gen/es\n"
        "    path: bin/protoc-gen-es\n"
        "types:\n"
        "  include:\n"
        "    - acme.weather.v1.Forecast\n"
    )


# =====================================================
# buf.lock
# =====================================================

@pytest.fixture
def buf_lock_v1_yaml() -> str:
    return (
        "# Generated by buf. DO NOT EDIT.\n"
        "version: v1\n"
        "deps:\n"
        "  - remote: buf.build\n"
        "    owner: googleapis\n"
        "    repository: googleapis\n"
        "    commit: e7f8d366f5264595bcc4cd4139af9973\n"
        f"    digest: shake256:{HEX_A}\n"
    )


@pytest.fixture
def buf_lock_v2_yaml() -> str:
    """
    Fixture com um `buf.lock` v2 canônico contendo deps, plugins e uma
    policy com plugin aninhado.
    """
    return (
        "# Generated by buf. DO NOT EDIT.\n"
        "version: v2\n"
        "deps:\n"
        "  - name: buf.build/acme/extension\n"
        "    commit: d8b2a3f1c0e94b7e8f6a5d4c3b2a1f0e\n"
        f"    digest: b5:{HEX_A}\n"
        "  - name: buf.build/googleapis/googleapis\n"
        "    commit: e7f8d366f5264595bcc4cd4139af9973\n"
        f"    digest: b5:{HEX_B}\n"
        "plugins:\n"
        "  - name: buf.build/acme/lint-plugin\n"
        "    commit: a1b2c3d4e5f60718293a4b5c6d7e8f90\n"
        f"    digest: p1:{HEX_A}\n"
        "policies:\n"
        "  - name: buf.build/acme/policy\n"
        "    commit: b1c2d3e4f5a60718293a4b5c6d7e8f90\n"
        f"    digest: o1:{HEX_B}\n"
        "    plugins:\n"
        "      - name: buf.build/acme/check-plugin\n"
        "        commit: c1d2e3f4a5b60718293a4b5c6d7e8f90\n"
        f"        digest: p1:{HEX_B}\n"
    )


# =====================================================
# buf.policy.yaml
# =====================================================

@pytest.fixture
def buf_policy_yaml() -> str:
    return (
        "version: v2\n"
        "name: buf.build/acme/policy\n"
        "lint:\n"
        "  use:\n"
        "    - STANDARD\n"
        "  except:\n"
        "    - FIELD_NOT_REQUIRED\n"
        "  enum_zero_value_suffix: _UNSPECIFIED\n"
        "  service_suffix: Service\n"
        "breaking:\n"
        "  use:\n"
        "    - WIRE_JSON\n"
        "  ignore_unstable_packages: true\n"
        "plugins:\n"
        "  - plugin: buf-plugin-timestamp-suffix\n"
        "    options:\n"
        "      timestamp_suffix: _time\n"
    )
