"""Utilities to serialise change reports."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml

from .models import ChangeReport


def report_to_dict(report: ChangeReport, zone: str | None = None) -> dict[str, Any]:
    """Create a dictionary describing the report."""
    data: dict[str, Any] = {}
    if zone:
        data["zone"] = zone
    data["policy"] = report.policy.value
    data["changed"] = report.changed
    data["added"] = list(report.added)
    if report.removed:
        data["removed"] = list(report.removed)
    return data


def report_to_yaml(report: ChangeReport, zone: str | None = None) -> str:
    """Return YAML representation of a change report."""
    return yaml.safe_dump(report_to_dict(report, zone=zone), sort_keys=False)


def report_to_json(report: ChangeReport, zone: str | None = None) -> str:
    """Return JSON representation of a change report."""
    return json.dumps(report_to_dict(report, zone=zone), indent=2)


def write_text(path: Path, content: str) -> None:
    """Write content to the given path, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
