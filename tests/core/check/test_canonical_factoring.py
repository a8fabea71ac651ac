# tests/core/check/test_canonical_factoring.py
"""
Testes da fatoração canônica e da forma de wire dos blocos de check.

Os testes asseguram que:
- configurações efetivas iguais viram um único bloco compartilhado
- configurações diferentes viram blocos locais completos, sem bloco compartilhado
- a ordem de entrada não altera a saída
- reler a forma fatorada reproduz as configurações efetivas
- o wire omite campos no default e respeita a semântica de cada versão
"""

import pytest

from bufconfig.check.canonical import factor_check_configs
from bufconfig.check.config import new_lint_config
from bufconfig.check.resolver import resolve_effective_check_config
from bufconfig.check.wire import lint_config_from_wire, lint_config_to_wire
from bufconfig.core.errors import MalformedConfigError
from bufconfig.core.file_version import FileVersion


def _effective(shared, dir_path, local=None):
    return resolve_effective_check_config(shared, local, dir_path)


def test_equal_effective_configs_are_hoisted():
    shared = new_lint_config(FileVersion.V2, use=["STANDARD"], ignore=["proto/a/x", "proto/b/y"])
    factored = factor_check_configs(
        [("proto/a", _effective(shared, "proto/a")), ("proto/b", _effective(shared, "proto/b"))]
    )
    # Os ignores relativizados diferem ("x" vs "y"), mas em coordenadas do
    # documento as duas configurações não são iguais: não há hoisting.
    assert not factored.hoisted

    shared = new_lint_config(FileVersion.V2, use=["STANDARD"])
    factored = factor_check_configs(
        [("proto/a", _effective(shared, "proto/a")), ("proto/b", _effective(shared, "proto/b"))]
    )
    assert factored.hoisted
    assert factored.shared == shared
    assert factored.dir_path_to_local == {"proto/a": None, "proto/b": None}


def test_different_configs_get_full_local_blocks():
    shared = new_lint_config(FileVersion.V2, use=["STANDARD"], ignore=["proto/b/legacy"])
    local = new_lint_config(FileVersion.V2, use=["MINIMAL"])
    effective = [
        ("proto/b", _effective(shared, "proto/b")),
        ("proto/a", _effective(shared, "proto/a", local)),
    ]
    factored = factor_check_configs(effective)
    assert factored.shared is None
    assert list(factored.dir_path_to_local) == ["proto/a", "proto/b"]
    assert factored.dir_path_to_local["proto/a"].use_ids_and_categories == ("MINIMAL",)
    b = factored.dir_path_to_local["proto/b"]
    assert b.use_ids_and_categories == ("STANDARD",)
    assert b.ignore_paths == ("proto/b/legacy",)

    # Reler cada bloco local reproduz a configuração efetiva original.
    for dir_path, config in effective:
        reread = resolve_effective_check_config(None, factored.dir_path_to_local[dir_path], dir_path)
        assert reread == config


def test_factoring_is_order_independent():
    shared = new_lint_config(FileVersion.V2, use=["STANDARD"])
    local = new_lint_config(FileVersion.V2, use=["COMMENTS"])
    items = [
        ("proto/c", _effective(shared, "proto/c")),
        ("proto/a", _effective(shared, "proto/a", local)),
        ("proto/b", _effective(shared, "proto/b")),
    ]
    assert factor_check_configs(items) == factor_check_configs(list(reversed(items)))


def test_empty_input_has_no_shared_block():
    factored = factor_check_configs([])
    assert factored.shared is None
    assert factored.dir_path_to_local == {}


def test_lint_wire_comment_ignores_per_version():
    v1 = lint_config_from_wire({"allow_comment_ignores": True}, FileVersion.V1)
    assert v1.allow_comment_ignores
    assert lint_config_to_wire(v1) == {"allow_comment_ignores": True}

    v2 = lint_config_from_wire({}, FileVersion.V2)
    assert v2.allow_comment_ignores
    assert lint_config_to_wire(v2) == {}
    v2_off = lint_config_from_wire({"disallow_comment_ignores": True}, FileVersion.V2)
    assert lint_config_to_wire(v2_off) == {"disallow_comment_ignores": True}

    with pytest.raises(MalformedConfigError, match="field 'allow_comment_ignores' not found in lint"):
        lint_config_from_wire({"allow_comment_ignores": True}, FileVersion.V2)


def test_lint_wire_key_order_and_defaults():
    config = lint_config_from_wire(
        {
            "service_suffix": "Service",
            "ignore_only": {"FIELD_LOWER_SNAKE_CASE": ["b", "a"]},
            "use": ["STANDARD"],
        },
        FileVersion.V1,
    )
    out = lint_config_to_wire(config)
    assert list(out) == ["use", "ignore_only", "service_suffix"]
    assert out["ignore_only"] == {"FIELD_LOWER_SNAKE_CASE": ["a", "b"]}
