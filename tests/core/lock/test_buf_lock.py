# tests/core/lock/test_buf_lock.py
"""
Testes de leitura e escrita do `buf.lock`.

Os testes asseguram que:
- documentos canônicos v1 e v2 são reescritos byte a byte, com cabeçalho
- versão ausente significa v1beta1
- digests legados, ausentes ou de espécie errada são rejeitados
- o resolvedor de digests preenche digests ausentes em v1
- entradas são ordenadas por nome e nomes duplicados são rejeitados
- plugins e policies só existem em v2

Decisões arquiteturais:
    - Erros de construção programática em versões legadas são internos
"""

import pytest

from bufconfig.core.errors import (
    InternalConfigError,
    InvalidConfigError,
    MalformedConfigError,
    UnsupportedFileVersionError,
)
from bufconfig.core.file_version import FileVersion
from bufconfig.core.module_ref import parse_module_full_name
from bufconfig.lock.buf_lock import (
    LOCK_HEADER,
    LockDep,
    new_buf_lock_file,
    read_buf_lock_file,
    write_buf_lock_file,
)
from bufconfig.lock.digest import DigestType, new_digest


def _dep(name, hex_value, digest_type=DigestType.B5, commit="c0ffee"):
    return LockDep(parse_module_full_name(name), commit, new_digest(digest_type, hex_value))


def test_v2_round_trips_byte_for_byte(buf_lock_v2_yaml):
    buf_lock = read_buf_lock_file(buf_lock_v2_yaml)
    assert buf_lock.file_version == FileVersion.V2
    assert [d.name for d in buf_lock.deps] == [
        "buf.build/acme/extension",
        "buf.build/googleapis/googleapis",
    ]
    assert buf_lock.policies[0].plugins[0].name == "buf.build/acme/check-plugin"
    assert write_buf_lock_file(buf_lock) == buf_lock_v2_yaml.encode()


def test_v1_round_trips_byte_for_byte(buf_lock_v1_yaml, hex_a):
    buf_lock = read_buf_lock_file(buf_lock_v1_yaml)
    assert buf_lock.file_version == FileVersion.V1
    dep = buf_lock.deps[0]
    assert dep.name == "buf.build/googleapis/googleapis"
    assert dep.digest.digest_type == DigestType.B4
    assert dep.digest.hex_value == hex_a
    assert write_buf_lock_file(buf_lock) == buf_lock_v1_yaml.encode()


def test_v1_branch_and_create_time_are_preserved(hex_a):
    data = (
        LOCK_HEADER
        + "version: v1\n"
        "deps:\n"
        "  - remote: buf.build\n"
        "    owner: acme\n"
        "    repository: weather\n"
        "    branch: main\n"
        "    commit: abc\n"
        f"    digest: shake256:{hex_a}\n"
        # Texto com forma de timestamp sai entre aspas para não ser reinterpretado.
        "    create_time: '2023-01-05T10:00:00.000000Z'\n"
    )
    buf_lock = read_buf_lock_file(data)
    assert buf_lock.deps[0].create_time == "2023-01-05T10:00:00.000000Z"
    assert write_buf_lock_file(buf_lock) == data.encode()


def test_missing_version_is_v1beta1(hex_a):
    buf_lock = read_buf_lock_file(
        "deps:\n"
        "  - remote: buf.build\n"
        "    owner: acme\n"
        "    repository: weather\n"
        "    commit: abc\n"
        f"    digest: b5:{hex_a}\n"
    )
    assert buf_lock.file_version == FileVersion.V1BETA1
    assert write_buf_lock_file(buf_lock).startswith(LOCK_HEADER.encode() + b"version: v1beta1\n")


def test_empty_lock_file():
    buf_lock = read_buf_lock_file("")
    assert buf_lock.file_version == FileVersion.V1BETA1
    assert buf_lock.deps == ()


def test_legacy_digest_asks_for_update():
    with pytest.raises(InvalidConfigError, match="b3 digests are no longer supported"):
        read_buf_lock_file(
            "version: v1\n"
            "deps:\n"
            "  - remote: buf.build\n"
            "    owner: acme\n"
            "    repository: weather\n"
            "    commit: abc\n"
            "    digest: b3-AAAA\n"
        )


def test_digest_resolver_fills_missing_digest(hex_b):
    calls = []

    def resolver(remote, commit):
        calls.append((remote, commit))
        return f"b5:{hex_b}"

    buf_lock = read_buf_lock_file(
        "version: v1\n"
        "deps:\n"
        "  - remote: buf.build\n"
        "    owner: acme\n"
        "    repository: weather\n"
        "    commit: abc\n",
        digest_resolver=resolver,
    )
    assert calls == [("buf.build", "abc")]
    assert str(buf_lock.deps[0].digest) == f"b5:{hex_b}"


@pytest.mark.parametrize(
    "dep,message",
    [
        ("  - owner: acme\n    repository: weather\n    commit: abc\n", r"deps\[0\]: remote missing"),
        (
            "  - remote: buf.build\n    owner: acme\n    repository: weather\n",
            "no commit specified for module buf.build/acme/weather",
        ),
        (
            "  - remote: buf.build\n    owner: acme\n    repository: weather\n    commit: abc\n",
            "no digest specified for module buf.build/acme/weather",
        ),
    ],
)
def test_v1_entry_errors(dep, message):
    with pytest.raises(InvalidConfigError, match=message):
        read_buf_lock_file("version: v1\ndeps:\n" + dep)


def test_v2_wrong_digest_kind(hex_a):
    with pytest.raises(InvalidConfigError, match="type b5 is not allowed here"):
        read_buf_lock_file(
            "version: v2\n"
            "plugins:\n"
            "  - name: buf.build/acme/plugin\n"
            "    commit: abc\n"
            f"    digest: b5:{hex_a}\n"
        )


def test_v2_rejects_v1_fields():
    with pytest.raises(MalformedConfigError, match="invalid as version v2: field 'remote' not found"):
        read_buf_lock_file("version: v2\ndeps:\n  - remote: buf.build\n")


def test_unknown_version():
    with pytest.raises(UnsupportedFileVersionError):
        read_buf_lock_file("version: v9\n")


def test_entries_are_sorted_and_deduplicated(hex_a, hex_b):
    buf_lock = new_buf_lock_file(
        FileVersion.V2,
        deps=[_dep("buf.build/acme/zeta", hex_a), _dep("buf.build/acme/alpha", hex_b)],
    )
    assert [d.name for d in buf_lock.deps] == ["buf.build/acme/alpha", "buf.build/acme/zeta"]

    with pytest.raises(InvalidConfigError, match="duplicate module 'buf.build/acme/alpha'"):
        new_buf_lock_file(
            FileVersion.V2,
            deps=[_dep("buf.build/acme/alpha", hex_a), _dep("buf.build/acme/alpha", hex_b)],
        )


def test_programmatic_digest_kind_is_checked(hex_a):
    with pytest.raises(InvalidConfigError, match="has digest of type p1"):
        new_buf_lock_file(FileVersion.V2, deps=[_dep("buf.build/acme/x", hex_a, DigestType.P1)])


def test_plugins_require_v2(hex_a):
    plugin = _dep("buf.build/acme/plugin", hex_a, DigestType.P1)
    with pytest.raises(InternalConfigError, match="plugins and policies cannot be set on v1 lock files"):
        new_buf_lock_file(FileVersion.V1, plugins=[plugin])


def test_legacy_versions_require_commits(hex_a):
    with pytest.raises(InternalConfigError, match="lock files require commits"):
        new_buf_lock_file(FileVersion.V1, deps=[_dep("buf.build/acme/x", hex_a, commit="")])
    with pytest.raises(InvalidConfigError, match="no commit specified for module"):
        new_buf_lock_file(FileVersion.V2, deps=[_dep("buf.build/acme/x", hex_a, commit="")])
