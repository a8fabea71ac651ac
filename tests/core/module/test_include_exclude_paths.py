# tests/core/module/test_include_exclude_paths.py
"""
Testes das regras de `includes` e `excludes` de um módulo.

Cada regra tem mensagem própria; a primeira violação encontrada é reportada.
"""

import pytest

from bufconfig.core.errors import InvalidPathError
from bufconfig.module.paths import validate_include_and_exclude_paths


def test_valid_paths_are_normalized_sorted_and_relative():
    includes, excludes = validate_include_and_exclude_paths(
        ["proto/b", "./proto/a/"],
        ["proto/a/internal"],
        dir_path="proto",
    )
    assert includes == ("a", "b")
    assert excludes == ("a/internal",)


def test_include_equal_to_module_directory():
    with pytest.raises(InvalidPathError, match="include path 'proto' is equal to module directory"):
        validate_include_and_exclude_paths(["proto"], [], dir_path="proto")


def test_duplicate_include():
    with pytest.raises(InvalidPathError, match="duplicate include path 'a'"):
        validate_include_and_exclude_paths(["a", "./a"], [])


def test_rules_are_applied_in_order_across_all_includes():
    # A regra do diretório do módulo vale para todos os includes antes da de duplicatas.
    with pytest.raises(InvalidPathError, match=r"include path '\.' is equal to module directory"):
        validate_include_and_exclude_paths(["a", "a", "."], [])


def test_include_within_another_include():
    with pytest.raises(InvalidPathError, match=r"is a subdirectory of 'a' \(another include path\)"):
        validate_include_and_exclude_paths(["a", "a/b"], [])


def test_path_both_included_and_excluded():
    with pytest.raises(InvalidPathError, match="'a' is both an include path and an exclude path"):
        validate_include_and_exclude_paths(["a"], ["a"])


def test_include_within_exclude():
    with pytest.raises(
        InvalidPathError,
        match=r"include path 'x/y' is a subdirectory of 'x' \(an exclude path\)",
    ):
        validate_include_and_exclude_paths(["x/y"], ["x"])


def test_exclude_outside_every_include():
    with pytest.raises(InvalidPathError, match="is not contained within any of them"):
        validate_include_and_exclude_paths(["a"], ["b/c"])


def test_excludes_without_includes_are_allowed():
    assert validate_include_and_exclude_paths([], ["vendor"]) == ((), ("vendor",))


def test_path_outside_module_directory():
    with pytest.raises(InvalidPathError, match="does not reside within module directory"):
        validate_include_and_exclude_paths(["other/a"], [], dir_path="proto")
