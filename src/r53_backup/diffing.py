"""Change detection between two zone snapshots."""

from __future__ import annotations

from .models import ChangePolicy, ChangeReport, Record
from .zonefile import parse_zone


def _renderings(records: list[Record]) -> list[str]:
    return [record.canonical() for record in records]


def has_changed(previous: list[Record], current: list[Record]) -> bool:
    """Return True when two canonical record sets differ."""
    if len(previous) != len(current):
        return True
    return any(before.canonical() != after.canonical() for before, after in zip(previous, current))


def added_records(previous: list[Record], current: list[Record]) -> list[str]:
    """Return renderings present in ``current`` but not in ``previous``."""
    existing = set(_renderings(previous))
    return [rendering for rendering in _renderings(current) if rendering not in existing]


def removed_records(previous: list[Record], current: list[Record]) -> list[str]:
    """Return renderings present in ``previous`` but not in ``current``."""
    return added_records(current, previous)


def detect_changes(
    previous: str,
    current: str,
    policy: ChangePolicy = ChangePolicy.STRUCTURAL,
) -> ChangeReport:
    """Compare two snapshot texts under the given policy.

    The raw-text policy needs no zone parser but reports any byte difference,
    including reordered lines or whitespace, and lists no added records. An
    empty previous snapshot always counts as a change under that policy.
    """
    if policy is ChangePolicy.RAW_TEXT:
        changed = not previous or previous != current
        return ChangeReport(changed=changed, policy=policy, current_text=current)

    previous_records = parse_zone(previous)
    current_records = parse_zone(current)
    return ChangeReport(
        changed=has_changed(previous_records, current_records),
        policy=policy,
        current_text=current,
        added=added_records(previous_records, current_records),
        removed=removed_records(previous_records, current_records),
    )
