"""Configuration loading and validation.

Settings come from the environment (and ``.env``), optionally overlaid by a
YAML file. The result is validated once before any AWS call is made.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Mapping

import yaml
from dotenv import load_dotenv
from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateError
from pydantic import BaseModel, Field, field_validator

from .models import ChangePolicy, ConfigurationError

HOSTED_ZONE_ID_PREFIX = "/hostedzone/"


@dataclass(frozen=True)
class BackupConfig:
    """Settings consumed by one backup cycle."""

    region: str
    bucket: str
    bucket_region: str = ""
    zone_name: str = ""
    zone_id: str = ""
    email_sender: str = ""
    email_receiver: str = ""
    policy: ChangePolicy = ChangePolicy.STRUCTURAL
    wide_timestamps: bool = False
    strict_domain_match: bool = True
    log_level: str = "INFO"

    @property
    def notifications_enabled(self) -> bool:
        """Return True when both notification addresses are set."""
        return bool(self.email_sender and self.email_receiver)


class S3LocationSpec(BaseModel):
    """Destination bucket section of the YAML file."""

    bucket: str | None = None
    region: str | None = None


class ZoneFilterSpec(BaseModel):
    """Hosted zone selection section of the YAML file."""

    name: str | None = None
    id: str | None = None


class EmailNotificationSpec(BaseModel):
    """Notification addresses section of the YAML file."""

    sender: str | None = Field(default=None, alias="from")
    receiver: str | None = Field(default=None, alias="to")

    model_config = {"populate_by_name": True}


class ConfigFileSpec(BaseModel):
    """Schema for the optional YAML configuration file."""

    region: str | None = None
    s3_location: S3LocationSpec = Field(default_factory=S3LocationSpec)
    zone: ZoneFilterSpec = Field(default_factory=ZoneFilterSpec)
    email_notification: EmailNotificationSpec = Field(default_factory=EmailNotificationSpec)
    policy: ChangePolicy | None = None
    wide_timestamps: bool | None = None
    strict_domain_match: bool | None = None
    log_level: str | None = None

    @field_validator("policy", mode="before")
    @classmethod
    def _policy_from_text(cls, value: Any) -> Any:
        """Accept the same policy spellings as CHANGE_POLICY."""
        if value is None or isinstance(value, ChangePolicy):
            return value
        return ChangePolicy.from_text(str(value))


def _parse_bool(value: str | None, default: bool = False) -> bool:
    """Return a boolean parsed from a string."""
    if value is None or not value.strip():
        return default
    return value.strip().lower() in {"1", "true", "yes", "y", "on"}


def normalise_zone_id(zone_id: str) -> str:
    """Return a hosted zone id in the ``/hostedzone/<id>`` form used by Route53."""
    zone_id = zone_id.strip()
    if not zone_id or HOSTED_ZONE_ID_PREFIX in zone_id:
        return zone_id
    return f"{HOSTED_ZONE_ID_PREFIX}{zone_id}"


def normalise_zone_name(name: str) -> str:
    """Return a zone name with the trailing dot Route53 reports."""
    name = name.strip()
    if not name or name.endswith("."):
        return name
    return f"{name}."


def validate_config(config: BackupConfig) -> BackupConfig:
    """Raise ConfigurationError unless the settings can drive a backup run."""
    if not config.region:
        raise ConfigurationError("AWS_REGION must be set.")
    if not config.bucket:
        raise ConfigurationError("DESTINATION_S3_BUCKET_NAME must be set.")
    if not (config.zone_name or config.zone_id):
        raise ConfigurationError(
            "Either name or id of the hosted zone must be provided (HOSTEDZONE_NAME, HOSTEDZONE_ID)."
        )
    if bool(config.email_sender) != bool(config.email_receiver):
        raise ConfigurationError(
            "Both sender and receiver email must be provided, or neither "
            "(NOTIFICATION_EMAIL_SENDER, NOTIFICATION_EMAIL_RECEIVER)."
        )
    return config


def config_from_mapping(environ: Mapping[str, str]) -> BackupConfig:
    """Build (but do not validate) a configuration from environment-style keys."""
    region = environ.get("AWS_REGION", "").strip()
    try:
        policy = ChangePolicy.from_text(environ.get("CHANGE_POLICY"))
    except ValueError as exc:
        raise ConfigurationError(str(exc)) from exc
    return BackupConfig(
        region=region,
        bucket=environ.get("DESTINATION_S3_BUCKET_NAME", "").strip(),
        bucket_region=environ.get("DESTINATION_S3_BUCKET_REGION", "").strip(),
        zone_name=normalise_zone_name(environ.get("HOSTEDZONE_NAME", "")),
        zone_id=normalise_zone_id(environ.get("HOSTEDZONE_ID", "")),
        email_sender=environ.get("NOTIFICATION_EMAIL_SENDER", "").strip(),
        email_receiver=environ.get("NOTIFICATION_EMAIL_RECEIVER", "").strip(),
        policy=policy,
        wide_timestamps=_parse_bool(environ.get("WIDE_TIMESTAMPS"), default=False),
        strict_domain_match=_parse_bool(environ.get("STRICT_DOMAIN_MATCH"), default=True),
        log_level=environ.get("LOG_LEVEL", "INFO"),
    )


def _render_yaml(path: Path) -> str:
    """Render a YAML file through Jinja2 so it can reference ``env``."""
    env = Environment(
        loader=FileSystemLoader(str(path.parent)),
        undefined=StrictUndefined,
        autoescape=False,
        keep_trailing_newline=True,
    )
    return env.get_template(path.name).render(env=os.environ)


def apply_config_file(config: BackupConfig, path: Path) -> BackupConfig:
    """Overlay the values set in a YAML file on top of ``config``."""
    try:
        data = yaml.safe_load(_render_yaml(path)) or {}
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Failed to parse config file {path}: {exc}") from exc
    except (OSError, TemplateError) as exc:
        raise ConfigurationError(f"Failed to read config file {path}: {exc}") from exc

    try:
        spec = ConfigFileSpec(**data)
    except Exception as exc:  # noqa: BLE001
        raise ConfigurationError(f"Config file validation error: {exc}") from exc

    overrides: dict[str, Any] = {}
    if spec.region:
        overrides["region"] = spec.region
    if spec.s3_location.bucket:
        overrides["bucket"] = spec.s3_location.bucket
    if spec.s3_location.region:
        overrides["bucket_region"] = spec.s3_location.region
    if spec.zone.name:
        overrides["zone_name"] = normalise_zone_name(spec.zone.name)
    if spec.zone.id:
        overrides["zone_id"] = normalise_zone_id(spec.zone.id)
    if spec.email_notification.sender is not None:
        overrides["email_sender"] = spec.email_notification.sender.strip()
    if spec.email_notification.receiver is not None:
        overrides["email_receiver"] = spec.email_notification.receiver.strip()
    for name in ("policy", "wide_timestamps", "strict_domain_match", "log_level"):
        value = getattr(spec, name)
        if value is not None:
            overrides[name] = value

    return replace(config, **overrides)


def load_config(path: Path | None = None, environ: Mapping[str, str] | None = None) -> BackupConfig:
    """Load configuration values from the environment (and .env), then validate."""
    if environ is None:
        load_dotenv()
        environ = os.environ
    config = config_from_mapping(environ)
    if path is not None:
        config = apply_config_file(config, path)
    if not config.bucket_region:
        config = replace(config, bucket_region=config.region)
    return validate_config(config)
