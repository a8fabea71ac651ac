# src/bufconfig/generate/managed.py
"""
Managed mode do `buf.gen.yaml`: regras de override e de desativação de
opções de arquivo e de campo.

Componentes principais:
    - FileOption / FieldOption → conjuntos fechados de opções gerenciáveis
    - OptimizeMode / JSType    → enums de valor, escritos pelo nome canônico
    - ManagedDisableRule       → desativa o managed mode para um escopo
    - ManagedOverrideRule      → fixa o valor de uma opção para um escopo
    - GenerateManagedConfig    → agregado (enabled, disables, overrides)

Decisões arquiteturais:
    - Cada opção tem um tipo de valor declarado em tabela (string, bool ou
      enum); o valor do override é validado contra esse tipo na construção
    - Valores de enum são guardados como membros do enum e escritos pelo
      nome, nunca pelo número
    - O formato legado (v1) é convertido no mesmo modelo de regras, na
      ordem em que as chaves legadas são avaliadas
    - A ordem das regras é preservada como lida

Invariantes:
    - Uma regra tem no máximo uma de `file_option` e `field_option`
    - Um override tem exatamente uma delas e um valor não nulo
    - `path`, quando presente, já está normalizado
    - `module_full_name`, quando presente, é um nome de módulo válido

Limites explícitos:
    - Não aplica as regras a arquivos protobuf
    - Não conhece descritores; valida apenas nomes e tipos de valor
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple, Type, Union

from ..core.encoding import (
    expect_keys,
    get_bool,
    get_mapping,
    get_mapping_list,
    get_str,
    get_str_list,
)
from ..core.errors import InvalidConfigError, InvalidPathError, MalformedConfigError
from ..core.module_ref import parse_module_full_name
from ..core.normalpath import normalize, normalize_and_validate


class FileOption(str, Enum):
    JAVA_PACKAGE = "java_package"
    JAVA_PACKAGE_PREFIX = "java_package_prefix"
    JAVA_PACKAGE_SUFFIX = "java_package_suffix"
    JAVA_OUTER_CLASSNAME = "java_outer_classname"
    JAVA_MULTIPLE_FILES = "java_multiple_files"
    JAVA_STRING_CHECK_UTF8 = "java_string_check_utf8"
    OPTIMIZE_FOR = "optimize_for"
    GO_PACKAGE = "go_package"
    GO_PACKAGE_PREFIX = "go_package_prefix"
    CC_ENABLE_ARENAS = "cc_enable_arenas"
    OBJC_CLASS_PREFIX = "objc_class_prefix"
    CSHARP_NAMESPACE = "csharp_namespace"
    CSHARP_NAMESPACE_PREFIX = "csharp_namespace_prefix"
    PHP_NAMESPACE = "php_namespace"
    PHP_METADATA_NAMESPACE = "php_metadata_namespace"
    PHP_METADATA_NAMESPACE_SUFFIX = "php_metadata_namespace_suffix"
    RUBY_PACKAGE = "ruby_package"
    RUBY_PACKAGE_SUFFIX = "ruby_package_suffix"

    def __str__(self) -> str:
        return self.value


class FieldOption(str, Enum):
    JSTYPE = "jstype"

    def __str__(self) -> str:
        return self.value


class OptimizeMode(str, Enum):
    """Valores de `optimize_for`, escritos pelo nome."""

    SPEED = "SPEED"
    CODE_SIZE = "CODE_SIZE"
    LITE_RUNTIME = "LITE_RUNTIME"


class JSType(str, Enum):
    """Valores de `jstype`, escritos pelo nome."""

    JS_NORMAL = "JS_NORMAL"
    JS_STRING = "JS_STRING"
    JS_NUMBER = "JS_NUMBER"


ValueKind = Union[Type[str], Type[bool], Type[OptimizeMode], Type[JSType]]

FILE_OPTION_VALUE_KINDS: Dict[FileOption, ValueKind] = {
    FileOption.JAVA_PACKAGE: str,
    FileOption.JAVA_PACKAGE_PREFIX: str,
    FileOption.JAVA_PACKAGE_SUFFIX: str,
    FileOption.JAVA_OUTER_CLASSNAME: str,
    FileOption.JAVA_MULTIPLE_FILES: bool,
    FileOption.JAVA_STRING_CHECK_UTF8: bool,
    FileOption.OPTIMIZE_FOR: OptimizeMode,
    FileOption.GO_PACKAGE: str,
    FileOption.GO_PACKAGE_PREFIX: str,
    FileOption.CC_ENABLE_ARENAS: bool,
    FileOption.OBJC_CLASS_PREFIX: str,
    FileOption.CSHARP_NAMESPACE: str,
    FileOption.CSHARP_NAMESPACE_PREFIX: str,
    FileOption.PHP_NAMESPACE: str,
    FileOption.PHP_METADATA_NAMESPACE: str,
    FileOption.PHP_METADATA_NAMESPACE_SUFFIX: str,
    FileOption.RUBY_PACKAGE: str,
    FileOption.RUBY_PACKAGE_SUFFIX: str,
}

FIELD_OPTION_VALUE_KINDS: Dict[FieldOption, ValueKind] = {
    FieldOption.JSTYPE: JSType,
}

_ENUM_CHOICES_MESSAGE = {
    OptimizeMode: "must be one of SPEED, CODE_SIZE or LITE_RUNTIME",
    JSType: "must be one of JS_NORMAL, JS_STRING or JS_NUMBER",
}

_TYPE_NAMES = {str: "string", bool: "bool", int: "int", float: "float", list: "list", dict: "map"}


def _type_name(value: Any) -> str:
    return _TYPE_NAMES.get(type(value), type(value).__name__)


def parse_file_option(value: str) -> FileOption:
    name = (value or "").strip().lower()
    if not name:
        raise InvalidConfigError("empty file_option")
    try:
        return FileOption(name)
    except ValueError:
        raise InvalidConfigError(f"unknown file_option: {name!r}") from None


def parse_field_option(value: str) -> FieldOption:
    name = (value or "").strip().lower()
    if not name:
        raise InvalidConfigError("empty field_option")
    try:
        return FieldOption(name)
    except ValueError:
        raise InvalidConfigError(f"unknown field_option: {name!r}") from None


def parse_override_value(kind: ValueKind, value: Any) -> Any:
    """
    Converte um valor bruto para o tipo declarado da opção.

    Raises:
        InvalidConfigError: Se o valor não for do tipo esperado ou não for
            um nome de enum conhecido.
    """
    if kind in _ENUM_CHOICES_MESSAGE:
        if isinstance(value, kind):
            return value
        if not isinstance(value, str):
            raise InvalidConfigError(_ENUM_CHOICES_MESSAGE[kind])
        try:
            return kind(value)
        except ValueError:
            raise InvalidConfigError(_ENUM_CHOICES_MESSAGE[kind]) from None
    if kind is bool:
        if not isinstance(value, bool):
            raise InvalidConfigError(f"expected a bool, got {_type_name(value)}")
        return value
    if not isinstance(value, str):
        raise InvalidConfigError(f"expected a string, got {_type_name(value)}")
    return value


def _check_path(path: str) -> None:
    if path and normalize(path) != path:
        raise InvalidPathError(f"path must be normalized: {path}")


def _check_module(module_full_name: str) -> None:
    if module_full_name:
        parse_module_full_name(module_full_name)


@dataclass(frozen=True)
class ManagedDisableRule:
    path: str = ""
    module_full_name: str = ""
    field_name: str = ""
    file_option: Optional[FileOption] = None
    field_option: Optional[FieldOption] = None


@dataclass(frozen=True)
class ManagedOverrideRule:
    path: str = ""
    module_full_name: str = ""
    field_name: str = ""
    file_option: Optional[FileOption] = None
    field_option: Optional[FieldOption] = None
    value: Any = None


@dataclass(frozen=True)
class GenerateManagedConfig:
    enabled: bool = False
    disables: Tuple[ManagedDisableRule, ...] = ()
    overrides: Tuple[ManagedOverrideRule, ...] = ()

    def is_empty(self) -> bool:
        return not self.enabled and not self.disables and not self.overrides


def new_disable_rule(
    *,
    path: str = "",
    module_full_name: str = "",
    field_name: str = "",
    file_option: Optional[FileOption] = None,
    field_option: Optional[FieldOption] = None,
) -> ManagedDisableRule:
    """
    Constrói uma regra de desativação.

    Raises:
        InvalidConfigError: Se a regra for vazia, combinar `field` com
            `file_option`, ou definir `file_option` e `field_option` juntos.
        InvalidPathError: Se `path` não estiver normalizado.
    """
    _check_path(path)
    if not (path or module_full_name or field_name or file_option or field_option):
        raise InvalidConfigError("empty disable rule is not allowed")
    if field_name and file_option is not None:
        raise InvalidConfigError("cannot disable a file option for a field")
    if file_option is not None and field_option is not None:
        raise InvalidConfigError("at most one of file_option and field_option can be specified")
    _check_module(module_full_name)
    return ManagedDisableRule(
        path=path,
        module_full_name=module_full_name,
        field_name=field_name,
        file_option=file_option,
        field_option=field_option,
    )


def new_file_option_override_rule(
    file_option: FileOption,
    value: Any,
    *,
    path: str = "",
    module_full_name: str = "",
) -> ManagedOverrideRule:
    """Constrói um override de opção de arquivo, validando o tipo do valor."""
    _check_path(path)
    _check_module(module_full_name)
    if value is None:
        raise InvalidConfigError("value must be specified for override")
    try:
        parsed = parse_override_value(FILE_OPTION_VALUE_KINDS[file_option], value)
    except InvalidConfigError as e:
        raise InvalidConfigError(f"invalid value {value} for {file_option}: {e}") from e
    return ManagedOverrideRule(
        path=path,
        module_full_name=module_full_name,
        file_option=file_option,
        value=parsed,
    )


def new_field_option_override_rule(
    field_option: FieldOption,
    value: Any,
    *,
    path: str = "",
    module_full_name: str = "",
    field_name: str = "",
) -> ManagedOverrideRule:
    """Constrói um override de opção de campo, validando o tipo do valor."""
    _check_path(path)
    _check_module(module_full_name)
    if value is None:
        raise InvalidConfigError("value must be specified for override")
    try:
        parsed = parse_override_value(FIELD_OPTION_VALUE_KINDS[field_option], value)
    except InvalidConfigError as e:
        raise InvalidConfigError(f"invalid value {value} for {field_option}: {e}") from e
    return ManagedOverrideRule(
        path=path,
        module_full_name=module_full_name,
        field_name=field_name,
        field_option=field_option,
        value=parsed,
    )


def new_generate_managed_config(
    *,
    enabled: bool = True,
    disables: Iterable[ManagedDisableRule] = (),
    overrides: Iterable[ManagedOverrideRule] = (),
) -> GenerateManagedConfig:
    return GenerateManagedConfig(
        enabled=enabled,
        disables=tuple(disables),
        overrides=tuple(overrides),
    )


# ---------------------------------------------------------------------------
# Wire v2
# ---------------------------------------------------------------------------

_MANAGED_KEYS_V2 = frozenset({"enabled", "disable", "override"})
_DISABLE_KEYS_V2 = frozenset({"file_option", "field_option", "module", "path", "field"})
_OVERRIDE_KEYS_V2 = _DISABLE_KEYS_V2 | {"value"}


def managed_config_from_wire_v2(raw: Dict[str, Any], *, where: str = "managed") -> GenerateManagedConfig:
    """
    Lê o bloco `managed` de um `buf.gen.yaml` v2.

    Raises:
        MalformedConfigError: Se houver campos desconhecidos.
        InvalidConfigError: Se alguma regra for inválida.
    """
    expect_keys(raw, _MANAGED_KEYS_V2, where=where)
    disables: List[ManagedDisableRule] = []
    for i, entry in enumerate(get_mapping_list(raw, "disable", where=where)):
        entry_where = f"{where}.disable[{i}]"
        expect_keys(entry, _DISABLE_KEYS_V2, where=entry_where)
        file_option_name = get_str(entry, "file_option", where=entry_where)
        field_option_name = get_str(entry, "field_option", where=entry_where)
        disables.append(
            new_disable_rule(
                path=get_str(entry, "path", where=entry_where),
                module_full_name=get_str(entry, "module", where=entry_where),
                field_name=get_str(entry, "field", where=entry_where),
                file_option=parse_file_option(file_option_name) if file_option_name else None,
                field_option=parse_field_option(field_option_name) if field_option_name else None,
            )
        )

    overrides: List[ManagedOverrideRule] = []
    for i, entry in enumerate(get_mapping_list(raw, "override", where=where)):
        entry_where = f"{where}.override[{i}]"
        expect_keys(entry, _OVERRIDE_KEYS_V2, where=entry_where)
        file_option_name = get_str(entry, "file_option", where=entry_where)
        field_option_name = get_str(entry, "field_option", where=entry_where)
        path = get_str(entry, "path", where=entry_where)
        module_full_name = get_str(entry, "module", where=entry_where)
        field_name = get_str(entry, "field", where=entry_where)
        value = entry.get("value")
        if not file_option_name and not field_option_name:
            raise InvalidConfigError("must set file_option or field_option for an override")
        if file_option_name and field_option_name:
            raise InvalidConfigError(
                "exactly one of file_option and field_option must be set for an override"
            )
        if value is None:
            raise InvalidConfigError("must set value for an override")
        if field_option_name:
            overrides.append(
                new_field_option_override_rule(
                    parse_field_option(field_option_name),
                    value,
                    path=path,
                    module_full_name=module_full_name,
                    field_name=field_name,
                )
            )
            continue
        if field_name:
            raise InvalidConfigError("must not set field for a file_option override")
        overrides.append(
            new_file_option_override_rule(
                parse_file_option(file_option_name),
                value,
                path=path,
                module_full_name=module_full_name,
            )
        )

    return new_generate_managed_config(
        enabled=get_bool(raw, "enabled", where=where),
        disables=disables,
        overrides=overrides,
    )


def _rule_to_wire(rule: Union[ManagedDisableRule, ManagedOverrideRule]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    if rule.file_option is not None:
        out["file_option"] = rule.file_option.value
    if rule.field_option is not None:
        out["field_option"] = rule.field_option.value
    if rule.module_full_name:
        out["module"] = rule.module_full_name
    if rule.path:
        out["path"] = rule.path
    if rule.field_name:
        out["field"] = rule.field_name
    return out


def managed_config_to_wire_v2(config: GenerateManagedConfig) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    if config.enabled:
        out["enabled"] = True
    if config.disables:
        out["disable"] = [_rule_to_wire(rule) for rule in config.disables]
    if config.overrides:
        overrides = []
        for rule in config.overrides:
            entry = _rule_to_wire(rule)
            entry["value"] = rule.value.value if isinstance(rule.value, Enum) else rule.value
            overrides.append(entry)
        out["override"] = overrides
    return out


# ---------------------------------------------------------------------------
# Wire v1 (formato legado)
# ---------------------------------------------------------------------------

_MANAGED_KEYS_V1 = frozenset(
    {
        "enabled",
        "cc_enable_arenas",
        "java_multiple_files",
        "java_string_check_utf8",
        "java_package_prefix",
        "csharp_namespace",
        "optimize_for",
        "go_package_prefix",
        "objc_class_prefix",
        "ruby_package",
        "override",
    }
)
_DEFAULT_EXCEPT_OVERRIDE_KEYS = frozenset({"default", "except", "override"})
_EXCEPT_OVERRIDE_KEYS = frozenset({"except", "override"})

# Grafias aceitas para booleanos em overrides por arquivo.
_BOOL_STRINGS = {
    "1": True, "t": True, "T": True, "TRUE": True, "true": True, "True": True,
    "0": False, "f": False, "F": False, "FALSE": False, "false": False, "False": False,
}


@dataclass(frozen=True)
class _ExceptOverride:
    default: str = ""
    except_: Tuple[str, ...] = ()
    override: Tuple[Tuple[str, str], ...] = ()

    def is_empty(self) -> bool:
        return not self.default and not self.except_ and not self.override


def _except_override_from_wire(
    raw: Dict[str, Any], key: str, *, where: str, allow_default: bool, allow_string: bool
) -> _ExceptOverride:
    value = raw.get(key)
    if value is None:
        return _ExceptOverride()
    if isinstance(value, str) and allow_string:
        return _ExceptOverride(default=value)
    if not isinstance(value, dict):
        raise MalformedConfigError(f"{where}.{key} must be a mapping")
    block_where = f"{where}.{key}"
    expect_keys(
        value,
        _DEFAULT_EXCEPT_OVERRIDE_KEYS if allow_default else _EXCEPT_OVERRIDE_KEYS,
        where=block_where,
    )
    override = get_mapping(value, "override", where=block_where)
    pairs = []
    for module_full_name, override_value in override.items():
        if not isinstance(override_value, str):
            raise MalformedConfigError(f"{block_where}.override.{module_full_name} must be a string")
        pairs.append((str(module_full_name), override_value))
    return _ExceptOverride(
        default=get_str(value, "default", where=block_where),
        except_=tuple(get_str_list(value, "except", where=block_where)),
        override=tuple(pairs),
    )


def _disables_and_overrides_from_except_and_override(
    except_file_option: FileOption,
    override_file_option: FileOption,
    config: _ExceptOverride,
) -> Tuple[List[ManagedDisableRule], List[ManagedOverrideRule]]:
    disables: List[ManagedDisableRule] = []
    overrides: List[ManagedOverrideRule] = []
    seen = set()
    for module_full_name in config.except_:
        parse_module_full_name(module_full_name)
        if module_full_name in seen:
            raise InvalidConfigError(f"{module_full_name!r} is defined multiple times in except")
        seen.add(module_full_name)
        disables.append(
            new_disable_rule(module_full_name=module_full_name, file_option=except_file_option)
        )
    for module_full_name, value in sorted(config.override):
        parse_module_full_name(module_full_name)
        if module_full_name in seen:
            raise InvalidConfigError(f"override {module_full_name!r} is already defined as an except")
        overrides.append(
            new_file_option_override_rule(
                override_file_option, value, module_full_name=module_full_name
            )
        )
    return disables, overrides


def _per_file_overrides_from_wire(raw: Dict[str, Any], *, where: str) -> List[ManagedOverrideRule]:
    option_to_path_to_value = get_mapping(raw, "override", where=where)
    rules: List[ManagedOverrideRule] = []
    for option_name in sorted(option_to_path_to_value):
        try:
            file_option = FileOption(str(option_name).lower())
        except ValueError:
            raise InvalidConfigError(f"{option_name!r} is not a valid file option") from None
        path_to_value = option_to_path_to_value[option_name]
        if not isinstance(path_to_value, dict):
            raise MalformedConfigError(f"{where}.override.{option_name} must be a mapping")
        for path in sorted(path_to_value):
            try:
                normalized = normalize_and_validate(path)
            except InvalidPathError as e:
                raise InvalidPathError(
                    f"{path} for override {option_name} is not a valid import path: {e}"
                ) from e
            if path != normalized:
                raise InvalidPathError(
                    f"import path {path} for override {option_name} is not normalized, "
                    f"use {normalized} instead"
                )
            value = path_to_value[path]
            if isinstance(value, bool):
                value = "true" if value else "false"
            if FILE_OPTION_VALUE_KINDS[file_option] is bool:
                if value not in _BOOL_STRINGS:
                    raise InvalidConfigError(
                        f"invalid value {value} for override {option_name}: expected a bool"
                    )
                value = _BOOL_STRINGS[value]
            rules.append(new_file_option_override_rule(file_option, value, path=path))
    return rules


def managed_config_from_wire_v1(raw: Dict[str, Any], *, where: str = "managed") -> Optional[GenerateManagedConfig]:
    """
    Converte o bloco `managed` legado (v1) para o modelo de regras.

    Retorna `None` quando `enabled` não é verdadeiro: no formato legado as
    demais chaves são ignoradas nesse caso.

    Raises:
        MalformedConfigError: Se houver campos desconhecidos.
        InvalidConfigError: Se um bloco exigir `default` e não tiver, ou se
            `except` e `override` se contradisserem.
    """
    expect_keys(raw, _MANAGED_KEYS_V1, where=where)
    if not get_bool(raw, "enabled", where=where):
        return None

    disables: List[ManagedDisableRule] = []
    overrides: List[ManagedOverrideRule] = []

    for file_option in (
        FileOption.CC_ENABLE_ARENAS,
        FileOption.JAVA_MULTIPLE_FILES,
        FileOption.JAVA_STRING_CHECK_UTF8,
    ):
        if raw.get(file_option.value) is not None:
            overrides.append(
                new_file_option_override_rule(
                    file_option, get_bool(raw, file_option.value, where=where)
                )
            )

    # (chave, opção do except, opção do override, default obrigatório, aceita default, aceita string)
    blocks = (
        ("java_package_prefix", FileOption.JAVA_PACKAGE, FileOption.JAVA_PACKAGE_PREFIX, True, True, True),
        ("csharp_namespace", FileOption.CSHARP_NAMESPACE, FileOption.CSHARP_NAMESPACE, False, False, False),
        ("optimize_for", FileOption.OPTIMIZE_FOR, FileOption.OPTIMIZE_FOR, True, True, True),
        ("go_package_prefix", FileOption.GO_PACKAGE, FileOption.GO_PACKAGE_PREFIX, True, True, False),
        ("objc_class_prefix", FileOption.OBJC_CLASS_PREFIX, FileOption.OBJC_CLASS_PREFIX, False, True, False),
        ("ruby_package", FileOption.RUBY_PACKAGE, FileOption.RUBY_PACKAGE, False, False, False),
    )
    for key, except_option, override_option, requires_default, allow_default, allow_string in blocks:
        block = _except_override_from_wire(
            raw, key, where=where, allow_default=allow_default, allow_string=allow_string
        )
        if block.is_empty():
            continue
        if requires_default and not block.default:
            raise InvalidConfigError(f"{key} must have a default value")
        if block.default:
            overrides.append(new_file_option_override_rule(override_option, block.default))
        block_disables, block_overrides = _disables_and_overrides_from_except_and_override(
            except_option, override_option, block
        )
        disables.extend(block_disables)
        overrides.extend(block_overrides)

    overrides.extend(_per_file_overrides_from_wire(raw, where=where))
    return new_generate_managed_config(enabled=True, disables=disables, overrides=overrides)
