"""Command-line entry point for r53-backup."""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

from .aws import Route53ZoneDirectory, Route53ZoneExporter, route53_client
from .config import load_config, normalise_zone_id, normalise_zone_name
from .controller import ZoneRunResult, configure_logging, run_backup_cycle
from .diffing import detect_changes
from .exporter import report_to_json, report_to_yaml, write_text
from .models import ChangePolicy, ChangeReport, R53BackupError, ZoneExportError

POLICY_CHOICES = [policy.value for policy in ChangePolicy]


def _build_parser() -> argparse.ArgumentParser:
    """Create the CLI parser."""
    parser = argparse.ArgumentParser(description="Back up Route53 hosted zones and report record changes.")
    parser.add_argument("--log-level", help="Override log level (default from config).")

    subparsers = parser.add_subparsers(dest="command", required=True)
    run_parser = subparsers.add_parser("run", help="Run one backup cycle.")
    run_parser.add_argument("--config", help="Optional YAML file overriding environment settings.")
    run_parser.add_argument("--policy", choices=POLICY_CHOICES, help="Change detection policy.")
    run_parser.add_argument("--dry-run", action="store_true", help="Detect changes without storing or notifying.")

    diff_parser = subparsers.add_parser("diff", help="Compare two zone files on disk.")
    diff_parser.add_argument("previous", help="Path to the previous snapshot.")
    diff_parser.add_argument("current", help="Path to the current snapshot.")
    diff_parser.add_argument("--policy", choices=POLICY_CHOICES, default=ChangePolicy.STRUCTURAL.value)
    diff_parser.add_argument("--json", help="Optional path to write the report as JSON.")
    diff_parser.add_argument("--yaml", action="store_true", help="Print the report as YAML.")

    export_parser = subparsers.add_parser("export", help="Print a hosted zone as BIND zone text.")
    export_parser.add_argument("--zone", required=True, help="Hosted zone name or id.")
    export_parser.add_argument("--output", help="Path to write the zone text (default stdout).")

    return parser


def _emit_report(report: ChangeReport) -> None:
    """Print a human-friendly change report."""
    print(f"Changed: {'yes' if report.changed else 'no'} ({report.policy.value} policy)")
    if report.policy is ChangePolicy.RAW_TEXT:
        return
    print(f"Added: {len(report.added)}")
    for rendering in report.added:
        print(f" + {rendering}")
    print(f"Removed: {len(report.removed)}")
    for rendering in report.removed:
        print(f" - {rendering}")


def _emit_results(results: list[ZoneRunResult]) -> None:
    """Print one line per processed zone."""
    if not results:
        print("No matching hosted zones.")
    for result in results:
        if not result.report.changed:
            status = "unchanged"
        elif result.stored:
            status = f"stored as {result.key}"
        else:
            status = "changed (dry run)"
        print(f"{result.zone.name}: {status}")


def _run_backup(args: argparse.Namespace) -> None:
    """Execute the run command."""
    config = load_config(Path(args.config) if args.config else None)
    configure_logging(args.log_level or config.log_level)
    policy = ChangePolicy.from_text(args.policy) if args.policy else None
    _emit_results(run_backup_cycle(config, policy=policy, dry_run=args.dry_run))


def _run_diff(args: argparse.Namespace) -> None:
    """Execute the diff command."""
    configure_logging(args.log_level or "WARNING")
    previous = Path(args.previous).read_text(encoding="utf-8")
    current = Path(args.current).read_text(encoding="utf-8")
    report = detect_changes(previous, current, ChangePolicy.from_text(args.policy))
    if args.yaml:
        print(report_to_yaml(report), end="")
    else:
        _emit_report(report)
    if args.json:
        write_text(Path(args.json), report_to_json(report))
        print(f"Wrote report JSON to {args.json}")


def _run_export(args: argparse.Namespace) -> None:
    """Execute the export command."""
    configure_logging(args.log_level or "INFO")
    client = route53_client(os.getenv("AWS_REGION") or None)
    name, zone_id = normalise_zone_name(args.zone), normalise_zone_id(args.zone)
    zones = [zone for zone in Route53ZoneDirectory(client).list_zones() if zone.matches(name, zone_id)]
    if not zones:
        raise ZoneExportError(f"No hosted zone matches {args.zone}")
    content = Route53ZoneExporter(client).export_zone(zones[0])
    if args.output:
        write_text(Path(args.output), content)
        print(f"Wrote zone text to {args.output}")
    else:
        print(content, end="")


def main() -> None:
    """CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args()
    try:
        if args.command == "run":
            _run_backup(args)
        elif args.command == "diff":
            _run_diff(args)
        elif args.command == "export":
            _run_export(args)
        else:  # pragma: no cover - argparse ensures we never reach here
            parser.error(f"Unsupported command {args.command}")
    except R53BackupError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(2)
    except Exception as exc:  # noqa: BLE001
        print(f"Unexpected error: {exc}", file=sys.stderr)
        sys.exit(3)


if __name__ == "__main__":
    main()
