"""Route53 zone snapshot, diff and retention."""

from .diffing import detect_changes
from .keys import decode_key, encode_key
from .models import ChangePolicy, ChangeReport, Record
from .selector import select_most_recent
from .zonefile import parse_zone

__version__ = "0.1.0"

__all__ = [
    "ChangePolicy",
    "ChangeReport",
    "Record",
    "decode_key",
    "detect_changes",
    "encode_key",
    "parse_zone",
    "select_most_recent",
]
