"""Render Route53 record sets as BIND zone text via Jinja2 templates."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Iterable

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from .models import Zone

TEMPLATES_DIR = Path(__file__).parent / "templates"
ALIAS_TTL = 86400
_OCTAL_ESCAPE = re.compile(r"\\([0-7]{3})")


def route53_name(name: str) -> str:
    """Rewrite Route53's octal ``\\ooo`` escapes as zone file ``\\DDD`` decimal escapes."""
    return _OCTAL_ESCAPE.sub(lambda match: f"\\{int(match.group(1), 8):03d}", name)


def _alias_entry(record_set: dict[str, Any]) -> dict[str, str | int]:
    """Convert an alias record set into an ``AWS ALIAS`` line."""
    target = record_set["AliasTarget"]
    evaluate = "true" if target.get("EvaluateTargetHealth") else "false"
    return {
        "name": route53_name(record_set["Name"]),
        "ttl": ALIAS_TTL,
        "kind": f"AWS ALIAS {record_set['Type']}",
        "value": f"{route53_name(target['DNSName'])} {target['HostedZoneId']} {evaluate}",
    }


def _record_set_entries(record_set: dict[str, Any]) -> list[dict[str, str | int]]:
    """Convert a Route53 record set into template-friendly rows."""
    if "AliasTarget" in record_set:
        return [_alias_entry(record_set)]
    return [
        {
            "name": route53_name(record_set["Name"]),
            "ttl": record_set.get("TTL", 0),
            "kind": f"IN {record_set['Type']}",
            "value": resource["Value"],
        }
        for resource in record_set.get("ResourceRecords", [])
    ]


def render_zone_text(
    zone: Zone,
    record_sets: Iterable[dict[str, Any]],
    template_name: str = "zone.j2",
) -> str:
    """Render the record sets of ``zone`` as zone file text."""
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATES_DIR)),
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
    )
    template = env.get_template(template_name)
    records = [entry for record_set in record_sets for entry in _record_set_entries(record_set)]
    text = template.render(origin=zone.name, records=records)
    return text.strip() + "\n"
