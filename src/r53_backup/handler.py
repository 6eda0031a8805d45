"""AWS Lambda entry point."""

from __future__ import annotations

import logging
from typing import Any

from .config import load_config
from .controller import configure_logging, run_backup_cycle

LOG = logging.getLogger("r53_backup")


def handler(event: Any = None, context: Any = None) -> dict[str, Any]:
    """Run one backup cycle per invocation and summarise what was stored."""
    config = load_config()
    configure_logging(config.log_level)
    try:
        results = run_backup_cycle(config)
    except Exception:
        LOG.exception("Backup cycle failed")
        raise
    return {
        "zones": [
            {"zone": result.zone.name, "changed": result.report.changed, "key": result.key if result.stored else None}
            for result in results
        ]
    }
