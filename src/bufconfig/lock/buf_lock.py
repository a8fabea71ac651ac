# src/bufconfig/lock/buf_lock.py
"""
Leitura e escrita do arquivo de dependências resolvidas `buf.lock`.

Formatos suportados:
    - v1beta1/v1: `deps[]` com `remote`, `owner`, `repository`, `branch`,
      `commit`, `digest`, `create_time`
    - v2: `deps[]`, `plugins[]` e `policies[]` com `name`, `commit`,
      `digest`; cada policy pode carregar `plugins[]` aninhados

Decisões arquiteturais:
    - Documento sem `version` é lido como v1beta1
    - Entradas são ordenadas por nome na construção; a escrita é estável
    - O arquivo escrito sempre começa com o cabeçalho de arquivo gerado
    - Um digest ausente em v1beta1/v1 pode ser obtido por um
      `digest_resolver(remote, commit)` fornecido pelo chamador
    - `branch` e `create_time` de v1beta1/v1 são preservados como texto

Invariantes:
    - Nenhum nome se repete dentro de uma mesma lista
    - Toda entrada tem `commit` e um digest do tipo permitido para sua espécie
    - Plugins e policies só existem em arquivos v2

Limites explícitos:
    - Não busca dependências nem recalcula digests
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from ..core.encoding import decode, encode, expect_keys, get_mapping_list, get_str
from ..core.errors import InternalConfigError, InvalidConfigError, MalformedConfigError
from ..core.file_version import (
    FileType,
    FileVersion,
    check_file_type_version_supported,
    parse_file_version,
)
from ..core.module_ref import ModuleFullName, parse_module_full_name
from ..storage.bucket import ReadBucket, WriteBucket
from ..storage.files import read_file_for_prefix, write_file_for_prefix
from .digest import (
    MODULE_DIGEST_TYPES,
    PLUGIN_DIGEST_TYPES,
    POLICY_DIGEST_TYPES,
    Digest,
    DigestType,
    parse_digest,
)

logger = logging.getLogger(__name__)

LOCK_HEADER = "# Generated by buf. DO NOT EDIT.\n"

DigestResolver = Callable[[str, str], Union[Digest, str]]

_KEYS_V1 = frozenset({"version", "deps"})
_DEP_KEYS_V1 = frozenset(
    {"remote", "owner", "repository", "branch", "commit", "digest", "create_time"}
)
_KEYS_V2 = frozenset({"version", "deps", "plugins", "policies"})
_ENTRY_KEYS_V2 = frozenset({"name", "commit", "digest"})
_POLICY_KEYS_V2 = _ENTRY_KEYS_V2 | frozenset({"plugins"})


@dataclass(frozen=True)
class LockDep:
    """Dependência resolvida: nome completo, commit fixado e digest."""

    full_name: ModuleFullName
    commit: str
    digest: Digest
    # Apenas v1beta1/v1.
    branch: str = ""
    create_time: str = ""

    @property
    def name(self) -> str:
        return str(self.full_name)


@dataclass(frozen=True)
class PolicyLockDep:
    full_name: ModuleFullName
    commit: str
    digest: Digest
    plugins: Tuple[LockDep, ...] = ()

    @property
    def name(self) -> str:
        return str(self.full_name)


@dataclass(frozen=True)
class BufLockFile:
    file_version: FileVersion
    deps: Tuple[LockDep, ...] = ()
    plugins: Tuple[LockDep, ...] = ()
    policies: Tuple[PolicyLockDep, ...] = ()


def _check_entries(
    entries: Sequence[Any],
    *,
    kind: str,
    allowed: Iterable[DigestType],
    file_version: FileVersion,
) -> Tuple[Any, ...]:
    allowed = frozenset(allowed)
    seen = set()
    for entry in entries:
        if entry.name in seen:
            raise InvalidConfigError(
                f"duplicate {kind} {entry.name!r} attempted to be added to lock file"
            )
        seen.add(entry.name)
        if not entry.commit:
            if file_version < FileVersion.V2:
                raise InternalConfigError(
                    f"{file_version.value} lock files require commits, however we did not "
                    f"have a commit for {kind} {entry.name!r}"
                )
            raise InvalidConfigError(f"no commit specified for {kind} {entry.name}")
        if entry.digest.digest_type not in allowed:
            raise InvalidConfigError(
                f"{kind} {entry.name} has digest of type {entry.digest.digest_type}, "
                f"expected one of: {', '.join(sorted(t.value for t in allowed))}"
            )
    return tuple(sorted(entries, key=lambda e: e.name))


def new_buf_lock_file(
    file_version: FileVersion,
    *,
    deps: Iterable[LockDep] = (),
    plugins: Iterable[LockDep] = (),
    policies: Iterable[PolicyLockDep] = (),
) -> BufLockFile:
    """
    Constrói um `BufLockFile` validado, com entradas ordenadas por nome.

    Raises:
        InvalidConfigError: Se houver nomes duplicados ou digests de tipo
            incompatível com a espécie da entrada.
        InternalConfigError: Se plugins ou policies forem passados para uma
            versão anterior a v2, ou faltar commit em v1beta1/v1.
    """
    check_file_type_version_supported(FileType.BUF_LOCK, file_version)
    plugins = list(plugins)
    policies = list(policies)
    if file_version < FileVersion.V2 and (plugins or policies):
        raise InternalConfigError(
            f"plugins and policies cannot be set on {file_version.value} lock files"
        )
    checked_policies = []
    for policy in _check_entries(
        policies, kind="policy", allowed=POLICY_DIGEST_TYPES, file_version=file_version
    ):
        nested = _check_entries(
            policy.plugins, kind="plugin", allowed=PLUGIN_DIGEST_TYPES, file_version=file_version
        )
        checked_policies.append(
            PolicyLockDep(policy.full_name, policy.commit, policy.digest, plugins=nested)
        )
    return BufLockFile(
        file_version=file_version,
        deps=_check_entries(
            list(deps), kind="module", allowed=MODULE_DIGEST_TYPES, file_version=file_version
        ),
        plugins=_check_entries(
            plugins, kind="plugin", allowed=PLUGIN_DIGEST_TYPES, file_version=file_version
        ),
        policies=tuple(checked_policies),
    )


def read_buf_lock_file(
    data: Union[bytes, str],
    *,
    allow_json: bool = False,
    digest_resolver: Optional[DigestResolver] = None,
) -> BufLockFile:
    """
    Lê um `buf.lock` de qualquer versão.

    Args:
        data: Conteúdo bruto do arquivo.
        allow_json: Aceita documentos JSON além de YAML.
        digest_resolver: Função `(remote, commit) -> Digest | str` usada para
            preencher digests ausentes em v1beta1/v1.

    Raises:
        MalformedConfigError: Se o decode falhar ou houver campos desconhecidos.
        UnsupportedFileVersionError: Se a versão não for reconhecida.
        InvalidConfigError: Se nomes, commits ou digests forem inválidos.
    """
    doc = decode(data, allow_json=allow_json)
    if doc.get("version") in (None, ""):
        file_version = FileVersion.V1BETA1
    else:
        file_version = parse_file_version(doc["version"])
    check_file_type_version_supported(FileType.BUF_LOCK, file_version)
    try:
        if file_version == FileVersion.V2:
            return _read_v2(doc)
        return _read_v1beta1_v1(doc, file_version, digest_resolver)
    except MalformedConfigError as e:
        raise MalformedConfigError(f"invalid as version {file_version.value}: {e}") from e


def _read_v1beta1_v1(
    doc: Dict[str, Any],
    file_version: FileVersion,
    digest_resolver: Optional[DigestResolver],
) -> BufLockFile:
    expect_keys(doc, _KEYS_V1, where="buf.lock")
    deps: List[LockDep] = []
    for i, raw in enumerate(get_mapping_list(doc, "deps", where="buf.lock")):
        where = f"deps[{i}]"
        expect_keys(raw, _DEP_KEYS_V1, where=where)
        remote = get_str(raw, "remote", where=where)
        owner = get_str(raw, "owner", where=where)
        repository = get_str(raw, "repository", where=where)
        for key, value in (("remote", remote), ("owner", owner), ("repository", repository)):
            if not value:
                raise InvalidConfigError(f"{where}: {key} missing")
        full_name = _parse_name(f"{remote}/{owner}/{repository}", kind="module")
        commit = get_str(raw, "commit", where=where)
        if not commit:
            raise InvalidConfigError(f"no commit specified for module {full_name}")
        digest_string = get_str(raw, "digest", where=where)
        if digest_string:
            digest = parse_digest(digest_string, allowed=MODULE_DIGEST_TYPES)
        elif digest_resolver is not None:
            logger.debug("resolving digest for %s:%s", full_name, commit)
            digest = _resolved_digest(digest_resolver(remote, commit))
        else:
            raise InvalidConfigError(f"no digest specified for module {full_name}")
        deps.append(
            LockDep(
                full_name=full_name,
                commit=commit,
                digest=digest,
                branch=get_str(raw, "branch", where=where),
                create_time=get_str(raw, "create_time", where=where),
            )
        )
    return new_buf_lock_file(file_version, deps=deps)


def _resolved_digest(value: Union[Digest, str]) -> Digest:
    if isinstance(value, Digest):
        return value
    return parse_digest(value, allowed=MODULE_DIGEST_TYPES)


def _parse_name(value: str, *, kind: str) -> ModuleFullName:
    try:
        return parse_module_full_name(value)
    except InvalidConfigError as e:
        raise InvalidConfigError(f"invalid {kind} name: {e}") from e


def _read_entry_v2(
    raw: Dict[str, Any], *, kind: str, allowed: Iterable[DigestType], where: str
) -> Tuple[ModuleFullName, str, Digest]:
    name = get_str(raw, "name", where=where)
    if not name:
        raise InvalidConfigError(f"{where}: no {kind} name specified")
    full_name = _parse_name(name, kind=kind)
    commit = get_str(raw, "commit", where=where)
    if not commit:
        raise InvalidConfigError(f"no commit specified for {kind} {full_name}")
    digest_string = get_str(raw, "digest", where=where)
    if not digest_string:
        raise InvalidConfigError(f"no digest specified for {kind} {full_name}")
    return full_name, commit, parse_digest(digest_string, allowed=allowed)


def _read_plugins_v2(raws: List[Dict[str, Any]], *, where: str) -> List[LockDep]:
    plugins = []
    for i, raw in enumerate(raws):
        entry_where = f"{where}[{i}]"
        expect_keys(raw, _ENTRY_KEYS_V2, where=entry_where)
        plugins.append(
            LockDep(*_read_entry_v2(raw, kind="plugin", allowed=PLUGIN_DIGEST_TYPES, where=entry_where))
        )
    return plugins


def _read_v2(doc: Dict[str, Any]) -> BufLockFile:
    expect_keys(doc, _KEYS_V2, where="buf.lock")
    deps = []
    for i, raw in enumerate(get_mapping_list(doc, "deps", where="buf.lock")):
        where = f"deps[{i}]"
        expect_keys(raw, _ENTRY_KEYS_V2, where=where)
        deps.append(LockDep(*_read_entry_v2(raw, kind="module", allowed=MODULE_DIGEST_TYPES, where=where)))
    plugins = _read_plugins_v2(get_mapping_list(doc, "plugins", where="buf.lock"), where="plugins")
    policies = []
    for i, raw in enumerate(get_mapping_list(doc, "policies", where="buf.lock")):
        where = f"policies[{i}]"
        expect_keys(raw, _POLICY_KEYS_V2, where=where)
        full_name, commit, digest = _read_entry_v2(
            raw, kind="policy", allowed=POLICY_DIGEST_TYPES, where=where
        )
        nested = _read_plugins_v2(
            get_mapping_list(raw, "plugins", where=where), where=f"{where}.plugins"
        )
        policies.append(PolicyLockDep(full_name, commit, digest, plugins=tuple(nested)))
    return new_buf_lock_file(FileVersion.V2, deps=deps, plugins=plugins, policies=policies)


def _entry_to_wire_v2(entry: Union[LockDep, PolicyLockDep]) -> Dict[str, Any]:
    return {"name": entry.name, "commit": entry.commit, "digest": str(entry.digest)}


def write_buf_lock_file(buf_lock_file: BufLockFile) -> bytes:
    """Serializa um `BufLockFile` na sua própria versão, com o cabeçalho de arquivo gerado."""
    file_version = buf_lock_file.file_version
    doc: Dict[str, Any] = {"version": file_version.value}
    if file_version == FileVersion.V2:
        if buf_lock_file.deps:
            doc["deps"] = [_entry_to_wire_v2(dep) for dep in buf_lock_file.deps]
        if buf_lock_file.plugins:
            doc["plugins"] = [_entry_to_wire_v2(plugin) for plugin in buf_lock_file.plugins]
        if buf_lock_file.policies:
            policies = []
            for policy in buf_lock_file.policies:
                out = _entry_to_wire_v2(policy)
                if policy.plugins:
                    out["plugins"] = [_entry_to_wire_v2(plugin) for plugin in policy.plugins]
                policies.append(out)
            doc["policies"] = policies
        return encode(doc, header=LOCK_HEADER)

    if buf_lock_file.plugins or buf_lock_file.policies:
        raise InternalConfigError(
            f"plugins and policies cannot be set on {file_version.value} lock files"
        )
    deps = []
    for dep in buf_lock_file.deps:
        if not dep.commit:
            raise InternalConfigError(
                f"{file_version.value} lock files require commits, however we did not "
                f"have a commit for module {dep.name!r}"
            )
        out: Dict[str, Any] = {
            "remote": dep.full_name.registry,
            "owner": dep.full_name.owner,
            "repository": dep.full_name.name,
        }
        if dep.branch:
            out["branch"] = dep.branch
        out["commit"] = dep.commit
        out["digest"] = str(dep.digest)
        if dep.create_time:
            out["create_time"] = dep.create_time
        deps.append(out)
    if deps:
        doc["deps"] = deps
    return encode(doc, header=LOCK_HEADER)


def get_buf_lock_file_for_prefix(
    bucket: ReadBucket,
    prefix: str = ".",
    *,
    digest_resolver: Optional[DigestResolver] = None,
) -> BufLockFile:
    return read_file_for_prefix(
        bucket,
        prefix,
        FileType.BUF_LOCK,
        lambda data: read_buf_lock_file(data, digest_resolver=digest_resolver),
    )


def put_buf_lock_file_for_prefix(bucket: WriteBucket, prefix: str, buf_lock_file: BufLockFile) -> str:
    return write_file_for_prefix(bucket, prefix, FileType.BUF_LOCK, write_buf_lock_file(buf_lock_file))
