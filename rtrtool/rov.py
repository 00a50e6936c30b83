"""Parsing of origin validation queries and formatting of their answers."""

from __future__ import annotations

import enum
import ipaddress
import re
from dataclasses import dataclass
from typing import Iterable, Union

from rtrtool.exporter import RoaRecord

__all__ = [
    "Query",
    "QueryError",
    "ValidationState",
    "count_separators",
    "format_response",
    "parse_query",
]

USAGE_MESSAGE = "Arguments required: IP Mask ASN"

_MAX_IP_TEXT_LEN = 45
_LONG_MIN = -(2**63)
_LONG_MAX = 2**63 - 1
_LEADING_INTEGER = re.compile(r"[ \t\n\v\f\r]*([+-]?[0-9]+)")


class ValidationState(enum.Enum):
    """Outcome of prefix origin validation, valued by its response code."""

    VALID = 0
    NOT_FOUND = 1
    INVALID = 2


class QueryError(ValueError):
    """Raised when a query line cannot be parsed."""


@dataclass(frozen=True)
class Query:
    """A validation request: the address as written, its mask and origin AS."""

    ip: str
    address: Union[ipaddress.IPv4Address, ipaddress.IPv6Address]
    mask: int
    asn: int


def count_separators(text: str) -> int:
    """Count spaces that start a new word, ignoring a space at the very start."""
    return sum(
        1
        for index, char in enumerate(text)
        if char == " " and index != 0 and index + 1 < len(text) and text[index + 1] != " "
    )


def _to_int32(value: int) -> int:
    return (value + 2**31) % 2**32 - 2**31


def _parse_int(text: str, message: str) -> int:
    match = _LEADING_INTEGER.match(text)
    if not match:
        return 0
    value = int(match.group(1))
    if not _LONG_MIN <= value <= _LONG_MAX:
        raise QueryError(message)
    return _to_int32(value)


def _parse_address(text: str) -> Union[ipaddress.IPv4Address, ipaddress.IPv6Address]:
    if "%" in text:
        raise QueryError("Error: Invalid ip addr")
    try:
        if ":" in text:
            return ipaddress.IPv6Address(text)
        return ipaddress.IPv4Address(text)
    except ipaddress.AddressValueError as exc:
        raise QueryError("Error: Invalid ip addr") from exc


def parse_query(line: str) -> Query:
    """Parse a line of the form "IP MASK ASN" into a query."""
    if line.endswith("\n"):
        line = line[:-1]

    if count_separators(line) != 2:
        raise QueryError(USAGE_MESSAGE)

    ip_text, mask_text, asn_text = (word for word in line.split(" ") if word)

    if len(ip_text.encode()) > _MAX_IP_TEXT_LEN:
        raise QueryError("Error: Invalid ip addr")
    address = _parse_address(ip_text)
    mask = _parse_int(mask_text, "Error: Invalid mask")
    asn = _parse_int(asn_text, "Error: Invalid asn")
    return Query(ip=ip_text, address=address, mask=mask, asn=asn)


def format_response(
    query: Query,
    reasons: Iterable[RoaRecord],
    state: ValidationState | None,
) -> str:
    """Format "IP MASK ASN|ROA, ...|CODE"; the code is -1 for an unknown state."""
    roas = ",".join(
        f"{roa.asn} {roa.prefix} {roa.min_len} {roa.max_len}" for roa in reasons
    )
    code = -1 if state is None else state.value
    return f"{query.ip} {query.mask} {query.asn}|{roas}|{code}"