# tests/core/module/test_buf_yaml_write.py
"""
Testes de escrita canônica do `buf.yaml`.

Este módulo valida que o escritor é determinístico e mínimo, e que a
fatoração de lint/breaking entre escopo compartilhado e blocos locais
preserva a configuração efetiva de cada módulo.

Os testes asseguram que:
- documentos canônicos são reescritos byte a byte (incluindo cabeçalho)
- configurações divergentes viram blocos locais completos
- configurações iguais são elevadas ao escopo do arquivo
- `read(write(read(d))) == read(d)`
- overrides aceitam caminho de arquivo ou conteúdo literal
"""

import pytest

from bufconfig.check.config import new_breaking_config, new_lint_config
from bufconfig.check.plugin import new_plugin_config
from bufconfig.core.errors import ConfigNotFoundError, InternalConfigError, InvalidConfigError
from bufconfig.core.file_version import FileVersion
from bufconfig.core.module_ref import parse_module_full_name
from bufconfig.module.buf_yaml import (
    new_buf_yaml_file,
    read_buf_yaml_file,
    read_buf_yaml_file_for_override,
    write_buf_yaml_file,
)
from bufconfig.module.module_config import new_module_config


def test_canonical_v1_round_trips_byte_for_byte(buf_yaml_v1_yaml):
    assert write_buf_yaml_file(read_buf_yaml_file(buf_yaml_v1_yaml)) == buf_yaml_v1_yaml.encode()


def test_canonical_v2_round_trips_with_header(buf_yaml_v2_hoisted_yaml):
    out = write_buf_yaml_file(read_buf_yaml_file(buf_yaml_v2_hoisted_yaml))
    assert out == buf_yaml_v2_hoisted_yaml.encode("utf-8")


def test_mixed_v2_is_written_with_local_blocks(buf_yaml_v2_mixed_yaml):
    original = read_buf_yaml_file(buf_yaml_v2_mixed_yaml)
    out = write_buf_yaml_file(original)
    assert out.decode() == (
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
        "    lint:\n"
        "      use:\n"
        "        - STANDARD\n"
        "      ignore:\n"
        "        - proto/weather/acme/legacy\n"
        "breaking:\n"
        "  use:\n"
        "    - WIRE_JSON\n"
    )
    assert read_buf_yaml_file(out) == original


def test_module_order_does_not_change_output():
    lint = new_lint_config(FileVersion.V2, use=["STANDARD"])
    breaking = new_breaking_config(FileVersion.V2)
    modules = [
        new_module_config(path, None, None, {".": ()}, lint, breaking)
        for path in ("proto/b", "proto/a")
    ]
    forward = write_buf_yaml_file(new_buf_yaml_file(FileVersion.V2, modules))
    backward = write_buf_yaml_file(new_buf_yaml_file(FileVersion.V2, list(reversed(modules))))
    assert forward == backward
    assert forward.decode().index("proto/a") < forward.decode().index("proto/b")


def test_single_root_module_is_written_compact():
    module = new_module_config(
        ".",
        parse_module_full_name("buf.build/acme/weather"),
        None,
        {".": ()},
        new_lint_config(FileVersion.V2, allow_comment_ignores=True),
        new_breaking_config(FileVersion.V2),
    )
    out = write_buf_yaml_file(new_buf_yaml_file(FileVersion.V2, [module]))
    assert out == b"version: v2\nname: buf.build/acme/weather\n"


def test_v1_cannot_hold_several_modules_or_plugins():
    lint = new_lint_config(FileVersion.V1)
    breaking = new_breaking_config(FileVersion.V1)
    module = new_module_config(".", None, None, {".": ()}, lint, breaking)
    with pytest.raises(InvalidConfigError, match="must have exactly one module configuration"):
        new_buf_yaml_file(FileVersion.V1, [module, module])
    with pytest.raises(InternalConfigError, match="plugins cannot be set"):
        new_buf_yaml_file(FileVersion.V1, [module], plugin_configs=[new_plugin_config("p")])


def test_read_override_from_file_and_literal(tmp_path, buf_yaml_v1_yaml):
    path = tmp_path / "override.yaml"
    path.write_text(buf_yaml_v1_yaml, encoding="utf-8")
    assert read_buf_yaml_file_for_override(str(path)) == read_buf_yaml_file(buf_yaml_v1_yaml)

    literal = read_buf_yaml_file_for_override('{"version": "v2"}')
    assert literal.file_version == FileVersion.V2

    with pytest.raises(ConfigNotFoundError, match="does not exist"):
        read_buf_yaml_file_for_override(str(tmp_path / "missing.yaml"))
