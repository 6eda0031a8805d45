"""Parse BIND zone text into canonical records using dnspython.

Entries come from dnspython's zone file tokenizer and are parsed one at a
time, so a malformed entry only drops itself. Everything that parsed is
returned, sorted in descending order of its canonical rendering.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator

import dns.exception
import dns.name
import dns.rdata
import dns.rdataclass
import dns.rdatatype
import dns.tokenizer
import dns.ttl

from .models import Record

LOG = logging.getLogger(__name__)

DEFAULT_TTL = 3600


@dataclass(frozen=True)
class Entry:
    """One logical zone file entry; parenthesised lines are already joined."""

    tokens: tuple[str, ...]
    line: int
    continuation: bool


def _token_text(token: dns.tokenizer.Token) -> str:
    """Return token text as it appeared in the zone file."""
    if token.is_quoted_string():
        return f'"{token.value}"'
    return token.value


def _skip_rest_of_entry(tok: dns.tokenizer.Tokenizer, crossed_line: bool) -> bool:
    """Move past a malformed entry; return False once the input is exhausted."""
    tok.multiline = 0
    if crossed_line:
        return not tok.eof
    while not tok.eof:
        try:
            token = tok.get()
        except dns.exception.DNSException:
            continue
        if token.is_eol():
            return True
    return False


def iter_entries(text: str) -> Iterator[Entry]:
    """Yield logical entries read with dnspython's zone file tokenizer."""
    tok = dns.tokenizer.Tokenizer(text)
    while True:
        start = tok.line_number
        tokens: list[str] = []
        continuation = False
        before = start
        try:
            token = tok.get(want_leading=True)
            if token.is_whitespace():
                continuation = True
                before = tok.line_number
                token = tok.get()
            while not token.is_eol_or_eof():
                tokens.append(_token_text(token))
                before = tok.line_number
                token = tok.get()
        except dns.exception.DNSException as exc:
            LOG.debug("Skipping entry on line %s: %s", start, exc)
            if not _skip_rest_of_entry(tok, crossed_line=tok.line_number > before):
                return
            continue
        if token.is_eof() and tok.multiline:
            LOG.debug("Skipping entry on line %s: unterminated parenthesis", start)
            return
        if tokens:
            yield Entry(tokens=tuple(tokens), line=start, continuation=continuation)
        if token.is_eof():
            return


def _parse_ttl(token: str) -> int | None:
    try:
        return dns.ttl.from_text(token)
    except dns.exception.DNSException:
        return None


def _parse_class(token: str) -> dns.rdataclass.RdataClass | None:
    try:
        return dns.rdataclass.from_text(token)
    except dns.exception.DNSException:
        return None


def _parse_owner(token: str, origin: dns.name.Name) -> dns.name.Name:
    if token == "@":
        return origin
    return dns.name.from_text(token, origin=origin)


class _ZoneReader:
    """Tracks directive state while records are read in order."""

    def __init__(self, origin: dns.name.Name):
        self.origin = origin
        self.default_ttl: int | None = None
        self.last_ttl: int | None = None
        self.last_owner: dns.name.Name | None = None

    def directive(self, tokens: tuple[str, ...]) -> None:
        """Apply a ``$`` directive."""
        name = tokens[0].upper()
        if len(tokens) < 2:
            raise dns.exception.SyntaxError(f"{name} requires an argument")
        if name == "$ORIGIN":
            self.origin = dns.name.from_text(tokens[1], origin=self.origin)
        elif name == "$TTL":
            self.default_ttl = dns.ttl.from_text(tokens[1])
        else:
            LOG.debug("Ignoring unsupported directive %s", name)

    def record(self, entry: Entry) -> Record:
        """Parse a resource record entry."""
        if entry.continuation:
            owner = self.last_owner
            rest = list(entry.tokens)
        else:
            owner = _parse_owner(entry.tokens[0], self.origin)
            self.last_owner = owner
            rest = list(entry.tokens[1:])
        if owner is None:
            raise dns.exception.SyntaxError("no owner name to inherit")

        ttl: int | None = None
        rdclass: dns.rdataclass.RdataClass | None = None
        # TTL and class may appear in either order before the type.
        while rest and (ttl is None or rdclass is None):
            token = rest[0]
            if ttl is None and _parse_ttl(token) is not None:
                ttl = _parse_ttl(token)
            elif rdclass is None and _parse_class(token) is not None:
                rdclass = _parse_class(token)
            else:
                break
            rest.pop(0)
        if not rest:
            raise dns.exception.SyntaxError("missing record type")

        if ttl is not None:
            self.last_ttl = ttl
        else:
            ttl = self.default_ttl if self.default_ttl is not None else self.last_ttl
        if ttl is None:
            ttl = DEFAULT_TTL
        if rdclass is None:
            rdclass = dns.rdataclass.IN
        owner_text = owner.canonicalize().to_text()
        class_text = dns.rdataclass.to_text(rdclass)

        type_token = rest.pop(0).upper()
        if type_token == "AWS" and rest and rest[0].upper() == "ALIAS":
            # Route53 alias pseudo-record: AWS ALIAS <type> <target> <zone id> <evaluate>
            if len(rest) < 3:
                raise dns.exception.SyntaxError("incomplete AWS ALIAS record")
            return Record(name=owner_text, ttl=ttl, rdclass=class_text, type="AWS ALIAS", value=" ".join(rest[1:]))

        rdtype = dns.rdatatype.from_text(type_token)
        rdata = dns.rdata.from_text(rdclass, rdtype, " ".join(rest), origin=self.origin, relativize=False)
        return Record(
            name=owner_text,
            ttl=ttl,
            rdclass=class_text,
            type=dns.rdatatype.to_text(rdtype),
            value=rdata.to_text(),
        )


def parse_zone(text: str, origin: str | None = None) -> list[Record]:
    """Return the canonical record set of ``text``.

    Malformed entries are logged at debug level and left out.
    """
    reader = _ZoneReader(dns.name.from_text(origin) if origin else dns.name.root)
    records: list[Record] = []
    for entry in iter_entries(text):
        try:
            if not entry.continuation and entry.tokens[0].startswith("$"):
                reader.directive(entry.tokens)
                continue
            records.append(reader.record(entry))
        except (dns.exception.DNSException, ValueError) as exc:
            LOG.debug("Skipping malformed entry on line %s: %s", entry.line, exc)
    records.sort(key=Record.canonical, reverse=True)
    return records
