from dataclasses import replace

import pytest

from r53_backup.aws import Collaborators
from r53_backup.controller import BackupController, run_backup_cycle
from r53_backup.models import (
    NOTIFICATION_HEADING,
    ChangePolicy,
    ConfigurationError,
    NotificationError,
    StorageError,
)

from .conftest import EXAMPLE_ZONE, NOW, OTHER_ZONE, FakeDirectory, FakeExporter, FakeNotifier, FakeStore

PREVIOUS = "$ORIGIN example.com.\nexample.com.\t300\tIN A\t192.0.2.1\n"
CURRENT = PREVIOUS + "www.example.com.\t300\tIN A\t192.0.2.2\n"
KEY = f"r53-example.com.-{NOW}"


def make_controller(config, store, notifier, current=CURRENT, zones=None):
    exporter = FakeExporter({EXAMPLE_ZONE.name: current, OTHER_ZONE.name: "other.example. 1 IN A 1.1.1.1"})
    directory = FakeDirectory(zones or [EXAMPLE_ZONE, OTHER_ZONE])
    return BackupController(config, store, directory, exporter, notifier, clock=lambda: NOW)


def test_first_run_stores_snapshot_and_notifies(config, store, notifier):
    results = make_controller(config, store, notifier).run_backup_cycle()

    assert [result.zone for result in results] == [EXAMPLE_ZONE]
    assert results[0].stored and results[0].notified
    assert store.objects == {KEY: CURRENT}
    recipient, sender, subject, body = notifier.sent[0]
    assert (recipient, sender) == ("ops@example.com", "dns@example.com")
    assert subject == "ROUTE53 BACKUP FOR DOMAIN example.com."
    assert body.startswith(NOTIFICATION_HEADING)
    assert "www.example.com. 300 IN A 192.0.2.2" in body
    assert "example.com. 300 IN A 192.0.2.1" in body


def test_unchanged_zone_is_skipped(config, notifier):
    store = FakeStore({"r53-example.com.-100": CURRENT})
    results = make_controller(config, store, notifier).run_backup_cycle()

    assert not results[0].report.changed
    assert not results[0].stored
    assert list(store.objects) == ["r53-example.com.-100"]
    assert notifier.sent == []


def test_compares_against_most_recent_snapshot(config, notifier):
    store = FakeStore(
        {
            "r53-example.com.-100": "",
            "r53-example.com.-200": PREVIOUS,
            "r53-example.com.evil-999": CURRENT,
            "r53-example.com.-garbage": CURRENT,
        }
    )
    result = make_controller(config, store, notifier).run_backup_cycle()[0]

    assert store.fetched == ["r53-example.com.-200"]
    assert result.report.added == ["www.example.com. 300 IN A 192.0.2.2"]
    assert notifier.sent[0][3] == f"{NOTIFICATION_HEADING}\nwww.example.com. 300 IN A 192.0.2.2"


def test_zone_selected_by_id(config, store, notifier):
    config = replace(config, zone_name="", zone_id=OTHER_ZONE.id)
    results = make_controller(config, store, notifier).run_backup_cycle()
    assert [result.zone for result in results] == [OTHER_ZONE]


def test_no_matching_zone_does_nothing(config, store, notifier):
    config = replace(config, zone_name="missing.example.")
    assert make_controller(config, store, notifier).run_backup_cycle() == []
    assert store.objects == {}


def test_notifications_disabled(config, store, notifier):
    config = replace(config, email_sender="", email_receiver="")
    result = make_controller(config, store, notifier).run_backup_cycle()[0]
    assert result.stored and not result.notified
    assert notifier.sent == []


def test_failed_upload_skips_notification(config, notifier):
    store = FakeStore(fail_put=True)
    with pytest.raises(StorageError, match=KEY):
        make_controller(config, store, notifier).run_backup_cycle()
    assert notifier.sent == []


def test_notification_failure_is_reported_after_upload(config, store):
    with pytest.raises(NotificationError, match="ops@example.com"):
        make_controller(config, store, FakeNotifier(fail=True)).run_backup_cycle()
    assert KEY in store.objects


def test_dry_run_writes_nothing(config, store, notifier):
    result = make_controller(config, store, notifier).run_backup_cycle(dry_run=True)[0]
    assert result.report.changed
    assert not result.stored
    assert store.objects == {}
    assert notifier.sent == []


def test_raw_text_policy_sends_full_zone(config, notifier):
    config = replace(config, policy=ChangePolicy.RAW_TEXT)
    store = FakeStore({"r53-example.com.-100": CURRENT.replace("\t", " ")})
    result = make_controller(config, store, notifier).run_backup_cycle()[0]
    assert result.stored
    assert notifier.sent[0][3] == f"{NOTIFICATION_HEADING}\n{CURRENT}"


def test_wide_timestamps(config, store, notifier):
    config = replace(config, wide_timestamps=True)
    controller = make_controller(config, store, notifier)
    controller.clock = lambda: 2**31 + 1
    assert controller.run_backup_cycle()[0].key == f"r53-example.com.-{2**31 + 1}"


def test_run_backup_cycle_validates_before_any_io(config, store, notifier):
    collaborators = Collaborators(
        store=store,
        directory=FakeDirectory([EXAMPLE_ZONE]),
        exporter=FakeExporter({}),
        notifier=notifier,
    )
    with pytest.raises(ConfigurationError):
        run_backup_cycle(replace(config, bucket=""), collaborators=collaborators)


def test_run_backup_cycle_policy_override(config, notifier):
    store = FakeStore({"r53-example.com.-100": CURRENT})
    collaborators = Collaborators(
        store=store,
        directory=FakeDirectory([EXAMPLE_ZONE]),
        exporter=FakeExporter({EXAMPLE_ZONE.name: CURRENT + "\n"}),
        notifier=notifier,
    )
    structural = run_backup_cycle(config, collaborators=collaborators, dry_run=True)
    raw = run_backup_cycle(config, policy=ChangePolicy.RAW_TEXT, collaborators=collaborators, dry_run=True)
    assert not structural[0].report.changed
    assert raw[0].report.changed
