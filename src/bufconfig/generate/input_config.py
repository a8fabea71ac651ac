# src/bufconfig/generate/input_config.py
"""
Entradas de geração (`inputs[]` do `buf.gen.yaml` v2).

Um `InputConfig` é uma união etiquetada: exatamente um campo de localização
(`module`, `directory`, `git_repo`, `proto_file`, `tarball`, `zip_archive`,
`binary_image`, `json_image`, `text_image`, `yaml_image`) define o tipo da
entrada, e cada tipo aceita apenas o seu próprio conjunto de opções
secundárias.

Decisões arquiteturais:
    - O discriminante é `InputConfigType`, cujo valor textual é a própria
      chave de wire
    - Opções não definidas são `None`; a escrita emite apenas o que foi lido
      ou definido programaticamente
    - `commit` e `tag` são guardados separadamente para que a escrita
      reproduza a chave original
    - `types`, `exclude_types`, `paths` e `exclude_paths` são ortogonais ao
      tipo e sempre permitidos

Invariantes:
    - `location` nunca é vazio
    - Toda opção definida pertence à lista permitida do tipo
    - `commit` e `tag` nunca coexistem

Limites explícitos:
    - Não resolve a entrada (não acessa rede, git ou disco)
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Tuple

from ..core.encoding import expect_keys, get_bool, get_int, get_str, get_str_list
from ..core.errors import InternalConfigError, InvalidConfigError, MalformedConfigError


class InputConfigType(str, Enum):
    """Tipo de uma entrada de geração; o valor é a chave de wire."""

    MODULE = "module"
    DIRECTORY = "directory"
    GIT_REPO = "git_repo"
    PROTO_FILE = "proto_file"
    TARBALL = "tarball"
    ZIP_ARCHIVE = "zip_archive"
    BINARY_IMAGE = "binary_image"
    JSON_IMAGE = "json_image"
    TEXT_IMAGE = "text_image"
    YAML_IMAGE = "yaml_image"

    def __str__(self) -> str:
        return self.value


# Rótulos usados em mensagens de localização vazia.
_TYPE_LABELS: Dict[InputConfigType, str] = {
    InputConfigType.MODULE: "module",
    InputConfigType.DIRECTORY: "directory",
    InputConfigType.GIT_REPO: "git repository",
    InputConfigType.PROTO_FILE: "proto file",
    InputConfigType.TARBALL: "tarball",
    InputConfigType.ZIP_ARCHIVE: "zip archive",
    InputConfigType.BINARY_IMAGE: "binary image",
    InputConfigType.JSON_IMAGE: "JSON image",
    InputConfigType.TEXT_IMAGE: "text image",
    InputConfigType.YAML_IMAGE: "yaml image",
}

COMPRESSION = "compression"
STRIP_COMPONENTS = "strip_components"
SUBDIR = "subdir"
BRANCH = "branch"
COMMIT = "commit"
TAG = "tag"
REF = "ref"
DEPTH = "depth"
RECURSE_SUBMODULES = "recurse_submodules"
INCLUDE_PACKAGE_FILES = "include_package_files"

# Ordem de escrita das opções.
OPTION_KEYS: Tuple[str, ...] = (
    COMPRESSION,
    STRIP_COMPONENTS,
    SUBDIR,
    BRANCH,
    COMMIT,
    TAG,
    REF,
    DEPTH,
    RECURSE_SUBMODULES,
    INCLUDE_PACKAGE_FILES,
)

ALLOWED_OPTIONS: Dict[InputConfigType, FrozenSet[str]] = {
    InputConfigType.GIT_REPO: frozenset(
        {BRANCH, COMMIT, TAG, REF, DEPTH, RECURSE_SUBMODULES, SUBDIR}
    ),
    InputConfigType.MODULE: frozenset(),
    InputConfigType.DIRECTORY: frozenset(),
    InputConfigType.PROTO_FILE: frozenset({INCLUDE_PACKAGE_FILES}),
    InputConfigType.TARBALL: frozenset({COMPRESSION, STRIP_COMPONENTS, SUBDIR}),
    InputConfigType.ZIP_ARCHIVE: frozenset({STRIP_COMPONENTS, SUBDIR}),
    InputConfigType.BINARY_IMAGE: frozenset({COMPRESSION}),
    InputConfigType.JSON_IMAGE: frozenset({COMPRESSION}),
    InputConfigType.TEXT_IMAGE: frozenset({COMPRESSION}),
    InputConfigType.YAML_IMAGE: frozenset({COMPRESSION}),
}

_TYPES_KEY = "types"
_EXCLUDE_TYPES_KEY = "exclude_types"
_PATHS_KEY = "paths"
_EXCLUDE_PATHS_KEY = "exclude_paths"

_LOCATION_KEYS = frozenset(t.value for t in InputConfigType)
_INPUT_KEYS = _LOCATION_KEYS | frozenset(OPTION_KEYS) | frozenset(
    {_TYPES_KEY, _EXCLUDE_TYPES_KEY, _PATHS_KEY, _EXCLUDE_PATHS_KEY}
)


def _human_list(values: Iterable[str]) -> str:
    values = sorted(values)
    if len(values) <= 2:
        return " or ".join(values)
    return ", ".join(values[:-1]) + ", or " + values[-1]


ALL_INPUT_CONFIG_TYPES_STRING = _human_list(_LOCATION_KEYS)


@dataclass(frozen=True)
class InputConfig:
    """Uma entrada de geração, já validada contra a lista do seu tipo."""

    input_config_type: InputConfigType
    location: str
    compression: Optional[str] = None
    strip_components: Optional[int] = None
    subdir: Optional[str] = None
    branch: Optional[str] = None
    commit: Optional[str] = None
    tag: Optional[str] = None
    ref: Optional[str] = None
    depth: Optional[int] = None
    recurse_submodules: Optional[bool] = None
    include_package_files: Optional[bool] = None
    include_types: Tuple[str, ...] = ()
    exclude_types: Tuple[str, ...] = ()
    target_paths: Tuple[str, ...] = ()
    exclude_paths: Tuple[str, ...] = ()

    def set_options(self) -> List[str]:
        """Opções secundárias definidas, na ordem de escrita."""
        return [key for key in OPTION_KEYS if getattr(self, key) is not None]


_OPTION_FIELDS = frozenset(f.name for f in fields(InputConfig)) & frozenset(OPTION_KEYS)


def new_input_config(
    input_config_type: InputConfigType,
    location: str,
    *,
    include_types: Iterable[str] = (),
    exclude_types: Iterable[str] = (),
    target_paths: Iterable[str] = (),
    exclude_paths: Iterable[str] = (),
    **options: Any,
) -> InputConfig:
    """
    Constrói um `InputConfig` validando as opções do tipo.

    Args:
        input_config_type: Tipo da entrada.
        location: Localização (caminho, URL ou referência de módulo).
        include_types: Tipos protobuf a incluir.
        exclude_types: Tipos protobuf a excluir.
        target_paths: Caminhos alvo dentro da entrada.
        exclude_paths: Caminhos excluídos dentro da entrada.
        **options: Opções secundárias (`branch`, `commit`, `depth`, ...).

    Raises:
        InvalidConfigError: Se a localização for vazia, `commit` e `tag`
            forem definidos juntos ou alguma opção não for permitida.
        InternalConfigError: Se uma opção desconhecida for passada.
    """
    if not isinstance(input_config_type, InputConfigType):
        raise InternalConfigError(f"unknown input config type: {input_config_type!r}")
    for key in options:
        if key not in _OPTION_FIELDS:
            raise InternalConfigError(f"unknown input config option: {key}")
    set_options = [key for key in OPTION_KEYS if options.get(key) is not None]

    if not location:
        raise InvalidConfigError(f"empty location for {_TYPE_LABELS[input_config_type]}")
    if COMMIT in set_options and TAG in set_options:
        raise InvalidConfigError(
            "commit and tag options cannot be used at the same time; use one or the other"
        )
    allowed = ALLOWED_OPTIONS[input_config_type]
    for option in set_options:
        if option not in allowed:
            raise InvalidConfigError(
                f"option {option} is not allowed for InputConfigType {input_config_type}"
            )
    if options.get(DEPTH) is not None and options[DEPTH] < 0:
        raise InvalidConfigError(f"depth must be non-negative, got {options[DEPTH]}")
    if options.get(STRIP_COMPONENTS) is not None and options[STRIP_COMPONENTS] < 0:
        raise InvalidConfigError(
            f"strip_components must be non-negative, got {options[STRIP_COMPONENTS]}"
        )

    return InputConfig(
        input_config_type=input_config_type,
        location=location,
        include_types=tuple(include_types),
        exclude_types=tuple(exclude_types),
        target_paths=tuple(target_paths),
        exclude_paths=tuple(exclude_paths),
        **{key: options[key] for key in set_options},
    )


def input_config_from_wire(raw: Dict[str, Any], *, where: str) -> InputConfig:
    """
    Lê uma entrada de `inputs[]`.

    Raises:
        MalformedConfigError: Se houver campos desconhecidos ou de tipo errado.
        InvalidConfigError: Se nenhum ou mais de um campo de localização
            estiver definido, ou se as opções forem inválidas para o tipo.
    """
    expect_keys(raw, _INPUT_KEYS, where=where)
    types = [t for t in InputConfigType if raw.get(t.value) is not None]
    if not types:
        raise InvalidConfigError(f"must specify one of {ALL_INPUT_CONFIG_TYPES_STRING}")
    if len(types) > 1:
        raise InvalidConfigError(
            f"exactly one of {ALL_INPUT_CONFIG_TYPES_STRING} must be specified"
        )
    input_config_type = types[0]

    options: Dict[str, Any] = {}
    for key in (COMPRESSION, SUBDIR, BRANCH, COMMIT, TAG, REF):
        if key in raw:
            options[key] = get_str(raw, key, where=where)
    for key in (STRIP_COMPONENTS, DEPTH):
        if key in raw:
            options[key] = get_int(raw, key, where=where)
    for key in (RECURSE_SUBMODULES, INCLUDE_PACKAGE_FILES):
        if key in raw:
            options[key] = get_bool(raw, key, where=where)

    location = raw[input_config_type.value]
    if location is not None and not isinstance(location, str):
        raise MalformedConfigError(f"{where}.{input_config_type.value} must be a string")

    return new_input_config(
        input_config_type,
        location or "",
        include_types=get_str_list(raw, _TYPES_KEY, where=where),
        exclude_types=get_str_list(raw, _EXCLUDE_TYPES_KEY, where=where),
        target_paths=get_str_list(raw, _PATHS_KEY, where=where),
        exclude_paths=get_str_list(raw, _EXCLUDE_PATHS_KEY, where=where),
        **options,
    )


def input_config_to_wire(input_config: InputConfig) -> Dict[str, Any]:
    out: Dict[str, Any] = {input_config.input_config_type.value: input_config.location}
    for key in input_config.set_options():
        out[key] = getattr(input_config, key)
    if input_config.include_types:
        out[_TYPES_KEY] = list(input_config.include_types)
    if input_config.exclude_types:
        out[_EXCLUDE_TYPES_KEY] = list(input_config.exclude_types)
    if input_config.target_paths:
        out[_PATHS_KEY] = list(input_config.target_paths)
    if input_config.exclude_paths:
        out[_EXCLUDE_PATHS_KEY] = list(input_config.exclude_paths)
    return out
