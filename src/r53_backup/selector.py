"""Pick the most recent stored snapshot for a domain."""

from __future__ import annotations

import logging
from typing import Callable, Iterable

from .keys import KEY_PREFIX, decode_key, key_prefix

LOG = logging.getLogger(__name__)


def matching_keys(
    domain: str,
    keys: Iterable[str],
    strict: bool = True,
    prefix: str = KEY_PREFIX,
) -> list[str]:
    """Return the stored keys that belong to ``domain``.

    In strict mode the domain must be followed by ``-`` or end the key, so
    ``example.com`` does not pick up snapshots of ``example.com.other``.
    """
    start = key_prefix(domain, prefix)
    if not strict:
        return [key for key in keys if key.startswith(start)]
    return [key for key in keys if key == start or key.startswith(f"{start}-")]


def select_most_recent(
    domain: str,
    keys: Iterable[str],
    fetch: Callable[[str], str],
    strict: bool = True,
    prefix: str = KEY_PREFIX,
) -> str:
    """Return the content of the newest snapshot of ``domain``.

    An empty string means no snapshot exists yet. Errors raised by ``fetch``
    propagate unchanged.
    """
    candidates = matching_keys(domain, keys, strict=strict, prefix=prefix)
    if not candidates:
        LOG.info("No previous backup found for %s", domain)
        return ""
    newest = max(candidates, key=lambda key: (decode_key(key), key))
    LOG.info("Most recent backup for %s is %s", domain, newest)
    return fetch(newest)
