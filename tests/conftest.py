"""Shared fixtures: in-memory stand-ins for the AWS collaborators."""

from __future__ import annotations

import pytest

from r53_backup.config import BackupConfig
from r53_backup.models import NotificationError, StorageError, Zone

EXAMPLE_ZONE = Zone(name="example.com.", id="/hostedzone/Z1EXAMPLE")
OTHER_ZONE = Zone(name="example.org.", id="/hostedzone/Z2OTHER")
NOW = 1700000000


class FakeStore:
    """Dict-backed object store."""

    def __init__(self, objects: dict[str, str] | None = None, fail_put: bool = False):
        self.bucket = "backups"
        self.objects = dict(objects or {})
        self.fail_put = fail_put
        self.fetched: list[str] = []

    def list_keys(self) -> list[str]:
        return list(self.objects)

    def get(self, key: str) -> str:
        self.fetched.append(key)
        return self.objects[key]

    def put(self, key: str, body: str) -> None:
        if self.fail_put:
            raise StorageError(f"failed to upload backup to bucket {self.bucket} key {key}")
        self.objects[key] = body


class FakeDirectory:
    def __init__(self, zones: list[Zone]):
        self.zones = zones

    def list_zones(self) -> list[Zone]:
        return list(self.zones)


class FakeExporter:
    def __init__(self, texts: dict[str, str]):
        self.texts = texts
        self.exported: list[str] = []

    def export_zone(self, zone: Zone) -> str:
        self.exported.append(zone.name)
        return self.texts[zone.name]


class FakeNotifier:
    def __init__(self, fail: bool = False):
        self.sent: list[tuple[str, str, str, str]] = []
        self.fail = fail

    def send(self, recipient: str, sender: str, subject: str, body: str) -> None:
        if self.fail:
            raise NotificationError(f"failed to send notification email to {recipient}")
        self.sent.append((recipient, sender, subject, body))


@pytest.fixture
def config() -> BackupConfig:
    return BackupConfig(
        region="eu-west-1",
        bucket="backups",
        bucket_region="eu-west-1",
        zone_name="example.com.",
        email_sender="dns@example.com",
        email_receiver="ops@example.com",
    )


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def notifier() -> FakeNotifier:
    return FakeNotifier()
