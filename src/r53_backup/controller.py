"""High-level orchestration for r53-backup."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, replace
from typing import Callable

from .aws import Collaborators, Notifier, ObjectStore, ZoneDirectory, ZoneExporter, build_collaborators
from .config import BackupConfig, validate_config
from .diffing import detect_changes
from .keys import KEY_PREFIX, encode_key
from .models import ChangePolicy, ChangeReport, Zone
from .selector import select_most_recent

LOG = logging.getLogger("r53_backup")

SUBJECT_TEMPLATE = "ROUTE53 BACKUP FOR DOMAIN {zone}"


@dataclass
class ZoneRunResult:
    """What happened to one zone during a backup cycle."""

    zone: Zone
    key: str
    report: ChangeReport
    stored: bool = False
    notified: bool = False


class BackupController:
    """Coordinates snapshot selection, export, comparison and storage."""

    def __init__(
        self,
        config: BackupConfig,
        store: ObjectStore,
        directory: ZoneDirectory,
        exporter: ZoneExporter,
        notifier: Notifier,
        clock: Callable[[], float] = time.time,
    ):
        self.config = config
        self.store = store
        self.directory = directory
        self.exporter = exporter
        self.notifier = notifier
        self.clock = clock

    @classmethod
    def from_collaborators(cls, config: BackupConfig, collaborators: Collaborators) -> "BackupController":
        """Create a controller from a bundle of collaborators."""
        return cls(
            config,
            store=collaborators.store,
            directory=collaborators.directory,
            exporter=collaborators.exporter,
            notifier=collaborators.notifier,
        )

    def matching_zones(self) -> list[Zone]:
        """Return the hosted zones selected by the configured name or id."""
        zones = [
            zone
            for zone in self.directory.list_zones()
            if zone.matches(self.config.zone_name, self.config.zone_id)
        ]
        if not zones:
            LOG.warning(
                "No hosted zone matches name=%r id=%r",
                self.config.zone_name,
                self.config.zone_id,
            )
        return zones

    def run_backup_cycle(self, dry_run: bool = False) -> list[ZoneRunResult]:
        """Back up every matching zone, one after the other."""
        return [self.backup_zone(zone, dry_run=dry_run) for zone in self.matching_zones()]

    def backup_zone(self, zone: Zone, dry_run: bool = False) -> ZoneRunResult:
        """Store a new snapshot of ``zone`` when it differs from the last one."""
        previous = select_most_recent(
            zone.name,
            self.store.list_keys(),
            self.store.get,
            strict=self.config.strict_domain_match,
        )
        current = self.exporter.export_zone(zone)
        key = encode_key(KEY_PREFIX, zone.name, self.clock(), wide=self.config.wide_timestamps)
        report = detect_changes(previous, current, self.config.policy)
        result = ZoneRunResult(zone=zone, key=key, report=report)

        if not report.changed:
            LOG.info("No changes detected for %s. Skipping backup", zone.name)
            return result
        if dry_run:
            LOG.info("Dry run: would store %s with %s added records", key, len(report.added))
            return result

        self.store.put(key, current)
        result.stored = True
        body = report.notification_body()
        LOG.info("%s", body)
        if not self.config.notifications_enabled:
            LOG.info("Notification addresses not configured; skipping email for %s", zone.name)
            return result
        self.notifier.send(
            self.config.email_receiver,
            self.config.email_sender,
            SUBJECT_TEMPLATE.format(zone=zone.name),
            body,
        )
        result.notified = True
        return result


def configure_logging(level: str) -> None:
    """Configure logging output."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def run_backup_cycle(
    config: BackupConfig,
    policy: ChangePolicy | None = None,
    dry_run: bool = False,
    collaborators: Collaborators | None = None,
) -> list[ZoneRunResult]:
    """Validate ``config`` and run one backup cycle against AWS."""
    validate_config(config)
    if policy is not None:
        config = replace(config, policy=policy)
    if collaborators is None:
        collaborators = build_collaborators(config)
    controller = BackupController.from_collaborators(config, collaborators)
    return controller.run_backup_cycle(dry_run=dry_run)
