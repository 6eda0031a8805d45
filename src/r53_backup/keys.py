"""Artifact key encoding.

Snapshots are stored under ``<prefix>-<domain>-<epoch seconds>``. The
trailing timestamp is the only ordering signal used when picking the most
recent snapshot, so decoding never fails: a key without a numeric suffix
sorts as the oldest possible snapshot.
"""

from __future__ import annotations

import re
import time

KEY_PREFIX = "r53"

_INT32_RANGE = 1 << 32
_INT32_MAX = (1 << 31) - 1
_DIGITS = re.compile(r"[0-9]+")


def to_int32(value: int) -> int:
    """Wrap an integer into the signed 32-bit range."""
    value &= _INT32_RANGE - 1
    return value - _INT32_RANGE if value > _INT32_MAX else value


def key_prefix(domain: str, prefix: str = KEY_PREFIX) -> str:
    """Return the storage prefix shared by every snapshot of a domain."""
    return f"{prefix}-{domain}"


def encode_key(
    prefix: str,
    domain: str,
    now: float | None = None,
    wide: bool = False,
) -> str:
    """Build the artifact key for a snapshot taken at ``now``.

    Without ``wide`` the timestamp is narrowed to 32 bits so new keys keep
    sorting alongside keys written by earlier releases. That narrowing wraps
    in January 2038.
    """
    seconds = int(time.time() if now is None else now)
    if not wide:
        seconds = to_int32(seconds)
    return f"{key_prefix(domain, prefix)}-{seconds}"


def decode_key(key: str) -> int:
    """Return the epoch seconds embedded in ``key``, or 0 when there are none."""
    index = key.rfind("-")
    if index == -1 or index == len(key) - 1:
        return 0
    suffix = key[index + 1 :]
    if not _DIGITS.fullmatch(suffix):
        return 0
    return int(suffix)
