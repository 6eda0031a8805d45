"""Core data models used by r53-backup."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

NOTIFICATION_HEADING = "The following records have been updated since the last backup"


@dataclass(frozen=True)
class Record:
    """Canonical representation of a parsed DNS resource record."""

    name: str
    ttl: int
    rdclass: str
    type: str
    value: str

    def canonical(self) -> str:
        """Return the rendering used for equality and ordering."""
        return f"{self.name} {self.ttl} {self.rdclass} {self.type} {self.value}"

    def __str__(self) -> str:
        return self.canonical()


@dataclass(frozen=True)
class Zone:
    """A hosted zone as listed by the zone directory."""

    name: str
    id: str

    def matches(self, name: str | None, zone_id: str | None) -> bool:
        """Return True when the zone is selected by name or id."""
        return (bool(name) and name == self.name) or (bool(zone_id) and zone_id == self.id)


class ChangePolicy(str, enum.Enum):
    """How two snapshots are compared."""

    STRUCTURAL = "structural"
    RAW_TEXT = "raw"

    @classmethod
    def from_text(cls, value: str | None) -> "ChangePolicy":
        """Parse a policy name, defaulting to the structural policy."""
        if not value:
            return cls.STRUCTURAL
        lowered = value.strip().lower()
        if lowered in {"raw", "raw_text", "raw-text", "text"}:
            return cls.RAW_TEXT
        if lowered == "structural":
            return cls.STRUCTURAL
        raise ValueError(f"Unknown change policy '{value}', expected 'structural' or 'raw'.")


@dataclass
class ChangeReport:
    """Outcome of comparing a previous snapshot against the current one."""

    changed: bool
    policy: ChangePolicy
    current_text: str = ""
    added: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)

    def notification_body(self) -> str:
        """Return the text sent to the notification recipient."""
        if self.policy is ChangePolicy.RAW_TEXT:
            return f"{NOTIFICATION_HEADING}\n{self.current_text}"
        return f"{NOTIFICATION_HEADING}\n" + "\n".join(self.added)


class R53BackupError(Exception):
    """Base exception for r53-backup."""


class ConfigurationError(R53BackupError):
    """Raised when required settings are missing or inconsistent."""


class StorageError(R53BackupError):
    """Raised when the object store cannot list, read or write a snapshot."""


class ZoneExportError(R53BackupError):
    """Raised when zones cannot be listed or exported from the DNS provider."""


class NotificationError(R53BackupError):
    """Raised when the change notification cannot be delivered."""
