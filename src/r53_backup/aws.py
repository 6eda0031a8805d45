"""AWS collaborators built on boto3.

The engine only talks to these through the small protocols below, so tests
and other providers can supply their own implementations.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Protocol

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .config import BackupConfig
from .models import NotificationError, StorageError, Zone, ZoneExportError
from .renderer import render_zone_text

LOG = logging.getLogger(__name__)

AWS_ERRORS = (BotoCoreError, ClientError)


class ObjectStore(Protocol):
    """Blob storage holding one snapshot per key."""

    bucket: str

    def list_keys(self) -> list[str]: ...

    def get(self, key: str) -> str: ...

    def put(self, key: str, body: str) -> None: ...


class ZoneDirectory(Protocol):
    """Lists the zones hosted by the DNS provider."""

    def list_zones(self) -> list[Zone]: ...


class ZoneExporter(Protocol):
    """Exports a zone as zone file text."""

    def export_zone(self, zone: Zone) -> str: ...


class Notifier(Protocol):
    """Delivers change notifications."""

    def send(self, recipient: str, sender: str, subject: str, body: str) -> None: ...


class S3ObjectStore:
    """Snapshot storage in a single S3 bucket."""

    def __init__(self, client: Any, bucket: str):
        self.client = client
        self.bucket = bucket

    def list_keys(self) -> list[str]:
        """Return every key in the bucket."""
        keys: list[str] = []
        try:
            paginator = self.client.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=self.bucket):
                keys.extend(item["Key"] for item in page.get("Contents", []))
        except AWS_ERRORS as exc:
            raise StorageError(f"failed to list objects in bucket {self.bucket}: {exc}") from exc
        LOG.debug("Listed %s keys in bucket %s", len(keys), self.bucket)
        return keys

    def get(self, key: str) -> str:
        """Return the decoded content stored under ``key``."""
        try:
            response = self.client.get_object(Bucket=self.bucket, Key=key)
            return response["Body"].read().decode("utf-8")
        except AWS_ERRORS as exc:
            raise StorageError(f"failed to download backup from bucket {self.bucket} key {key}: {exc}") from exc
        except UnicodeDecodeError as exc:
            raise StorageError(f"backup in bucket {self.bucket} key {key} is not UTF-8 text: {exc}") from exc

    def put(self, key: str, body: str) -> None:
        """Store ``body`` under ``key`` as a single object."""
        try:
            self.client.put_object(Bucket=self.bucket, Key=key, Body=body.encode("utf-8"))
        except AWS_ERRORS as exc:
            raise StorageError(f"failed to upload backup to bucket {self.bucket} key {key}: {exc}") from exc
        LOG.info("Uploaded backup to s3://%s/%s", self.bucket, key)


class Route53ZoneDirectory:
    """Hosted zone listing from Route53."""

    def __init__(self, client: Any):
        self.client = client

    def list_zones(self) -> list[Zone]:
        zones: list[Zone] = []
        try:
            for page in self.client.get_paginator("list_hosted_zones").paginate():
                zones.extend(Zone(name=item["Name"], id=item["Id"]) for item in page["HostedZones"])
        except AWS_ERRORS as exc:
            raise ZoneExportError(f"failed to list hosted zones: {exc}") from exc
        return zones


class Route53ZoneExporter:
    """Exports Route53 record sets as BIND zone text."""

    def __init__(self, client: Any):
        self.client = client

    def export_zone(self, zone: Zone) -> str:
        record_sets: list[dict[str, Any]] = []
        try:
            paginator = self.client.get_paginator("list_resource_record_sets")
            for page in paginator.paginate(HostedZoneId=zone.id):
                record_sets.extend(page["ResourceRecordSets"])
        except AWS_ERRORS as exc:
            raise ZoneExportError(f"failed to export hosted zone {zone.name} ({zone.id}): {exc}") from exc
        LOG.debug("Exported %s record sets from %s", len(record_sets), zone.name)
        return render_zone_text(zone, record_sets)


class SesNotifier:
    """Plain-text email notifications through SES."""

    def __init__(self, client: Any):
        self.client = client

    def send(self, recipient: str, sender: str, subject: str, body: str) -> None:
        try:
            self.client.send_email(
                Source=sender,
                Destination={"ToAddresses": [recipient]},
                Message={
                    "Subject": {"Charset": "UTF-8", "Data": subject},
                    "Body": {"Text": {"Charset": "UTF-8", "Data": body}},
                },
            )
        except AWS_ERRORS as exc:
            raise NotificationError(f"failed to send notification email to {recipient}: {exc}") from exc
        LOG.info("Sent notification to %s", recipient)


@dataclass
class Collaborators:
    """The set of services one backup cycle talks to."""

    store: ObjectStore
    directory: ZoneDirectory
    exporter: ZoneExporter
    notifier: Notifier


def build_collaborators(config: BackupConfig) -> Collaborators:
    """Create boto3-backed collaborators for ``config``."""
    session = boto3.session.Session(region_name=config.region)
    route53 = session.client("route53")
    return Collaborators(
        store=S3ObjectStore(session.client("s3", region_name=config.bucket_region or config.region), config.bucket),
        directory=Route53ZoneDirectory(route53),
        exporter=Route53ZoneExporter(route53),
        notifier=SesNotifier(session.client("ses")),
    )


def route53_client(region: str | None = None) -> Any:
    """Return a Route53 client; Route53 is global so the region is optional."""
    return boto3.session.Session(region_name=region).client("route53")
