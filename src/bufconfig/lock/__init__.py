"""bufconfig: Lock.

Componentes canônicos:
 - digests tipados (`shake256`, `b5`, `p1`, `o1`)
 - `buf.lock` (v1beta1, v1, v2)
"""

from .digest import Digest, DigestType, new_digest, parse_digest  # noqa: F401
from .buf_lock import (  # noqa: F401
    LOCK_HEADER,
    BufLockFile,
    LockDep,
    PolicyLockDep,
    new_buf_lock_file,
    read_buf_lock_file,
    write_buf_lock_file,
    get_buf_lock_file_for_prefix,
    put_buf_lock_file_for_prefix,
)
