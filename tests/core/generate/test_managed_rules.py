# tests/core/generate/test_managed_rules.py
"""
Testes das regras de managed mode (formato v2).

Os testes asseguram que:
- nomes de opção são validados contra os conjuntos fechados
- regras de desativação rejeitam combinações sem sentido
- valores de override são validados pelo tipo declarado da opção
- enums são guardados como membros e escritos pelo nome
- a escrita preserva a ordem das regras
"""

import pytest

from bufconfig.core.errors import InvalidConfigError, InvalidPathError, MalformedConfigError
from bufconfig.generate.managed import (
    FieldOption,
    FileOption,
    JSType,
    OptimizeMode,
    managed_config_from_wire_v2,
    managed_config_to_wire_v2,
    new_disable_rule,
    new_field_option_override_rule,
    new_file_option_override_rule,
    parse_file_option,
)


def test_parse_file_option_is_case_insensitive():
    assert parse_file_option("GO_PACKAGE_PREFIX") == FileOption.GO_PACKAGE_PREFIX
    with pytest.raises(InvalidConfigError, match="unknown file_option: 'go_pkg'"):
        parse_file_option("go_pkg")
    with pytest.raises(InvalidConfigError, match="empty file_option"):
        parse_file_option("  ")


@pytest.mark.parametrize(
    "kwargs,message",
    [
        ({}, "empty disable rule is not allowed"),
        (
            {"field_name": "acme.v1.Msg.id", "file_option": FileOption.GO_PACKAGE},
            "cannot disable a file option for a field",
        ),
        (
            {"file_option": FileOption.GO_PACKAGE, "field_option": FieldOption.JSTYPE},
            "at most one of file_option and field_option",
        ),
    ],
)
def test_invalid_disable_rules(kwargs, message):
    with pytest.raises(InvalidConfigError, match=message):
        new_disable_rule(**kwargs)


def test_disable_rule_path_must_be_normalized():
    with pytest.raises(InvalidPathError, match="path must be normalized"):
        new_disable_rule(path="acme/./weather")
    assert new_disable_rule(path="acme/weather").path == "acme/weather"


def test_override_value_kinds():
    assert new_file_option_override_rule(FileOption.CC_ENABLE_ARENAS, True).value is True
    assert (
        new_file_option_override_rule(FileOption.OPTIMIZE_FOR, "CODE_SIZE").value
        is OptimizeMode.CODE_SIZE
    )
    assert new_field_option_override_rule(FieldOption.JSTYPE, "JS_STRING").value is JSType.JS_STRING

    with pytest.raises(InvalidConfigError, match="expected a bool, got string"):
        new_file_option_override_rule(FileOption.JAVA_MULTIPLE_FILES, "yes")
    with pytest.raises(InvalidConfigError, match="expected a string, got int"):
        new_file_option_override_rule(FileOption.GO_PACKAGE_PREFIX, 3)
    with pytest.raises(InvalidConfigError, match="must be one of SPEED, CODE_SIZE or LITE_RUNTIME"):
        new_file_option_override_rule(FileOption.OPTIMIZE_FOR, "FAST")
    with pytest.raises(InvalidConfigError, match="must be one of JS_NORMAL"):
        new_field_option_override_rule(FieldOption.JSTYPE, 1)


@pytest.mark.parametrize(
    "entry,message",
    [
        ({"value": "x"}, "must set file_option or field_option"),
        (
            {"file_option": "go_package", "field_option": "jstype", "value": "x"},
            "exactly one of file_option and field_option",
        ),
        ({"file_option": "go_package"}, "must set value for an override"),
        (
            {"file_option": "go_package", "field": "acme.v1.Msg.id", "value": "x"},
            "must not set field for a file_option override",
        ),
    ],
)
def test_invalid_v2_overrides(entry, message):
    with pytest.raises(InvalidConfigError, match=message):
        managed_config_from_wire_v2({"enabled": True, "override": [entry]})


def test_v2_unknown_rule_key():
    with pytest.raises(MalformedConfigError, match=r"field 'files' not found in managed.disable\[0\]"):
        managed_config_from_wire_v2({"disable": [{"files": ["a.proto"]}]})


def test_v2_wire_round_trip_keeps_rule_order_and_enum_names():
    raw = {
        "enabled": True,
        "disable": [{"file_option": "java_package", "module": "buf.build/acme/weather"}],
        "override": [
            {"file_option": "optimize_for", "value": "LITE_RUNTIME"},
            {"file_option": "java_package_prefix", "value": "com"},
            {"field_option": "jstype", "field": "acme.v1.Msg.id", "value": "JS_NUMBER"},
        ],
    }
    config = managed_config_from_wire_v2(raw)
    assert config.overrides[0].value is OptimizeMode.LITE_RUNTIME
    assert config.overrides[2].value is JSType.JS_NUMBER
    assert config.overrides[2].field_name == "acme.v1.Msg.id"
    assert managed_config_to_wire_v2(config) == raw


def test_disabled_managed_with_rules_is_kept():
    config = managed_config_from_wire_v2(
        {"disable": [{"module": "buf.build/acme/weather"}]}
    )
    assert not config.enabled
    assert not config.is_empty()
    assert managed_config_to_wire_v2(config) == {"disable": [{"module": "buf.build/acme/weather"}]}
