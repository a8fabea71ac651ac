# tests/core/check/test_check_config.py
"""
Testes do modelo canônico de configuração de checks.

Os testes asseguram que:
- identificadores e caminhos são deduplicados e ordenados
- `disabled` é um estado próprio, distinto de `use` vazio
- opções exclusivas de v2 são rejeitadas em versões anteriores
- os defaults por versão resolvem a categoria default

Decisões arquiteturais:
    - `disabled` equivale a ignorar o diretório de escopo (`.`)
    - Erros de versão são internos, não do usuário

Limites explícitos:
    - Não valida herança entre escopos (ver test_resolver.py)
"""

import pytest

from bufconfig.check.config import (
    CheckConfig,
    default_breaking_config,
    default_lint_config,
    new_breaking_config,
    new_lint_config,
)
from bufconfig.core.errors import InternalConfigError, InvalidConfigError, InvalidPathError
from bufconfig.core.file_version import FileVersion
from bufconfig.module.buf_yaml import read_buf_yaml_file


def test_identifiers_and_paths_are_sorted_and_deduplicated():
    config = new_lint_config(
        FileVersion.V2,
        use=["STANDARD", "COMMENTS", "STANDARD"],
        ignore=["b/", "a", "./a"],
        ignore_only={"FIELD_LOWER_SNAKE_CASE": ["z", "y"]},
    )
    assert config.use_ids_and_categories == ("COMMENTS", "STANDARD")
    assert config.ignore_paths == ("a", "b")
    assert config.ignore_id_or_category_to_paths == {"FIELD_LOWER_SNAKE_CASE": ("y", "z")}
    assert not config.disabled


def test_disabled_is_distinct_from_empty_use():
    empty = new_lint_config(FileVersion.V1)
    disabled = new_lint_config(FileVersion.V1, disabled=True)
    assert empty.use_ids_and_categories == disabled.use_ids_and_categories == ()
    assert not empty.disabled
    assert disabled.disabled
    assert disabled.ignore_paths == (".",)
    assert new_breaking_config(FileVersion.V1, ignore=["."]).disabled


def test_use_or_default():
    assert new_lint_config(FileVersion.V1).use_or_default() == ("DEFAULT",)
    assert new_breaking_config(FileVersion.V1).use_or_default() == ("FILE",)
    assert new_lint_config(FileVersion.V2, use=["MINIMAL"]).use_or_default() == ("MINIMAL",)


def test_disable_builtin_requires_v2():
    assert new_breaking_config(FileVersion.V2, disable_builtin=True).disable_builtin
    with pytest.raises(InternalConfigError, match="disable_builtin"):
        new_breaking_config(FileVersion.V1, disable_builtin=True)


def test_invalid_identifier_and_path():
    with pytest.raises(InvalidConfigError, match="invalid use identifier"):
        new_lint_config(FileVersion.V1, use=["BAD ID"])
    with pytest.raises(InvalidPathError):
        new_lint_config(FileVersion.V1, ignore=["../outside"])


def test_default_tables_per_version():
    assert default_lint_config(FileVersion.V2).allow_comment_ignores is True
    assert default_lint_config(FileVersion.V1).allow_comment_ignores is False
    assert default_breaking_config(FileVersion.V1BETA1).file_version == FileVersion.V1BETA1


def test_check_config_base_is_abstract():
    with pytest.raises(TypeError):
        CheckConfig(file_version=FileVersion.V2)


def test_ignore_only_map_is_read_only():
    source = {"FIELD_LOWER_SNAKE_CASE": ["a"]}
    config = new_lint_config(FileVersion.V2, ignore_only=source)
    source["FIELD_LOWER_SNAKE_CASE"].append("b")
    assert config.ignore_id_or_category_to_paths == {"FIELD_LOWER_SNAKE_CASE": ("a",)}
    with pytest.raises(TypeError):
        config.ignore_id_or_category_to_paths["ENUM_PASCAL_CASE"] = ("c",)


def test_default_configs_are_shared_read_only_values():
    default = default_lint_config(FileVersion.V2)
    with pytest.raises(TypeError):
        default.ignore_id_or_category_to_paths["X"] = ("a",)
    assert hash(default) == hash(default_lint_config(FileVersion.V2))
    assert hash(default_breaking_config(FileVersion.V1)) == hash(new_breaking_config(FileVersion.V1))

    module_config = read_buf_yaml_file("version: v2\n").module_configs[0]
    assert module_config.lint_config == default
    assert module_config.lint_config.ignore_id_or_category_to_paths == {}
