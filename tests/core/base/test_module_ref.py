# tests/core/base/test_module_ref.py
"""Testes de parsing de nomes completos e referências de módulo."""

import pytest

from bufconfig.core.errors import InvalidConfigError
from bufconfig.core.module_ref import parse_module_full_name, parse_module_ref


def test_parse_module_full_name():
    name = parse_module_full_name("buf.build/acme/weather")
    assert (name.registry, name.owner, name.name) == ("buf.build", "acme", "weather")
    assert str(name) == "buf.build/acme/weather"


@pytest.mark.parametrize("value", ["acme/weather", "buf.build/acme/weather/v1", "buf.build//weather"])
def test_parse_module_full_name_rejects_bad_shapes(value):
    with pytest.raises(InvalidConfigError, match="invalid module name"):
        parse_module_full_name(value)


def test_parse_module_ref_with_and_without_ref():
    assert str(parse_module_ref("buf.build/acme/weather:v1.2.0")) == "buf.build/acme/weather:v1.2.0"
    ref = parse_module_ref("buf.build/acme/weather")
    assert ref.ref is None
    with pytest.raises(InvalidConfigError, match="empty reference"):
        parse_module_ref("buf.build/acme/weather:")
