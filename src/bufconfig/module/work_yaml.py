# src/bufconfig/module/work_yaml.py
"""Arquivo de workspace legado `buf.work.yaml` (apenas v1).

Um workspace v1 lista os diretórios que contêm módulos. Em v2 esse papel é
do campo `modules` do `buf.yaml`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Tuple, Union

from ..core.encoding import decode, encode, expect_keys, get_str_list
from ..core.errors import (
    InvalidConfigError,
    InvalidPathError,
    MalformedConfigError,
    UnsupportedFileVersionError,
)
from ..core.file_version import (
    FileType,
    FileVersion,
    check_file_type_version_supported,
    parse_file_version,
)
from ..core.normalpath import contains_path, normalize_and_validate
from ..storage.bucket import ReadBucket, WriteBucket
from ..storage.files import read_file_for_prefix, write_file_for_prefix

_KEYS_V1 = frozenset({"version", "directories"})


@dataclass(frozen=True)
class BufWorkYAMLFile:
    file_version: FileVersion
    dir_paths: Tuple[str, ...]


def validate_work_dir_paths(dir_paths: Iterable[str]) -> Tuple[str, ...]:
    """Normaliza, valida e ordena os diretórios de um workspace."""
    dir_paths = list(dir_paths)
    if not dir_paths:
        raise InvalidConfigError("directories is empty")
    normalized_to_original: Dict[str, str] = {}
    for dir_path in dir_paths:
        try:
            normalized = normalize_and_validate(dir_path)
        except InvalidPathError as e:
            raise InvalidPathError(f"directory {dir_path!r} is invalid: {e}") from e
        if normalized in normalized_to_original:
            raise InvalidPathError(f"directory {dir_path!r} is listed more than once")
        if normalized == ".":
            raise InvalidPathError(
                'directory "." is listed, it is not valid to have "." as a workspace directory, '
                "as this is no different than not having a workspace at all"
            )
        normalized_to_original[normalized] = dir_path

    ordered = sorted(normalized_to_original)
    for i, left in enumerate(ordered):
        for right in ordered[i + 1:]:
            if contains_path(left, right):
                raise InvalidPathError(
                    f"directory {normalized_to_original[left]!r} contains directory "
                    f"{normalized_to_original[right]!r}"
                )
            if contains_path(right, left):
                raise InvalidPathError(
                    f"directory {normalized_to_original[right]!r} contains directory "
                    f"{normalized_to_original[left]!r}"
                )
    return tuple(ordered)


def new_buf_work_yaml_file(file_version: FileVersion, dir_paths: Iterable[str]) -> BufWorkYAMLFile:
    check_file_type_version_supported(FileType.BUF_WORK_YAML, file_version)
    return BufWorkYAMLFile(file_version=file_version, dir_paths=validate_work_dir_paths(dir_paths))


def read_buf_work_yaml_file(data: Union[bytes, str], *, allow_json: bool = False) -> BufWorkYAMLFile:
    doc = decode(data, allow_json=allow_json)
    if "version" not in doc or doc["version"] in (None, ""):
        raise UnsupportedFileVersionError("buf.work.yaml has no version; a version is required")
    file_version = parse_file_version(doc["version"])
    check_file_type_version_supported(FileType.BUF_WORK_YAML, file_version)
    try:
        expect_keys(doc, _KEYS_V1, where="buf.work.yaml")
        dir_paths = get_str_list(doc, "directories", where="buf.work.yaml")
    except MalformedConfigError as e:
        raise MalformedConfigError(f"invalid as version {file_version.value}: {e}") from e
    return new_buf_work_yaml_file(file_version, dir_paths)


def write_buf_work_yaml_file(buf_work_yaml_file: BufWorkYAMLFile) -> bytes:
    return encode(
        {
            "version": buf_work_yaml_file.file_version.value,
            "directories": list(buf_work_yaml_file.dir_paths),
        }
    )


def get_buf_work_yaml_file_for_prefix(bucket: ReadBucket, prefix: str = ".") -> BufWorkYAMLFile:
    return read_file_for_prefix(bucket, prefix, FileType.BUF_WORK_YAML, read_buf_work_yaml_file)


def put_buf_work_yaml_file_for_prefix(
    bucket: WriteBucket, prefix: str, buf_work_yaml_file: BufWorkYAMLFile
) -> str:
    return write_file_for_prefix(
        bucket, prefix, FileType.BUF_WORK_YAML, write_buf_work_yaml_file(buf_work_yaml_file)
    )
