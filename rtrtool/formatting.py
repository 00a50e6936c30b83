"""Text shown for status changes and table updates."""

from __future__ import annotations

import enum
from typing import Iterable

from rtrtool.exporter import RoaRecord

__all__ = [
    "AspaOperation",
    "format_aspa_update",
    "format_pfx_header",
    "format_pfx_update",
    "format_spki_update",
    "format_status",
]

_SPKI_BYTES_PER_LINE = 40


class AspaOperation(enum.Enum):
    """Kind of change applied to an ASPA record."""

    ADD = "+"
    REMOVE = "-"


def format_status(socket_state: str, mgr_status: str) -> str:
    """Return the line reporting a connection status change."""
    return f"RTR-Socket changed connection status to: {socket_state}, Mgr Status: {mgr_status}\n"


def format_pfx_header(multiple_sockets: bool) -> str:
    """Return the column header shown before prefix updates."""
    tail = f"   {'Prefix Length':>3}   {'':>3}   {'ASN':>3}\n"
    if multiple_sockets:
        return f"{'host':<40} {'Prefix':<40}{tail}"
    return f"{'Prefix':<40}{tail}"


def format_pfx_update(
    record: RoaRecord,
    added: bool,
    host: str | None = None,
    port: str | None = None,
    multiple_sockets: bool = False,
) -> str:
    """Return the line reporting an added or removed prefix record."""
    sign = "+ " if added else "- "
    body = f"{str(record.prefix):<40}   {record.min_len:>3} - {record.max_len:>3}   {record.asn:>10}\n"
    if multiple_sockets:
        return f"{sign}{host}:{port} {body}"
    return f"{sign}{body}"


def _hex(data: bytes) -> str:
    return ":".join(f"{byte:02x}" for byte in data)


def format_spki_update(asn: int, ski: bytes, spki: bytes, added: bool, host: str, port: str) -> str:
    """Return the block reporting an added or removed router key."""
    chunks = (spki[start:start + _SPKI_BYTES_PER_LINE] for start in range(0, len(spki), _SPKI_BYTES_PER_LINE))
    spki_text = ":\n\t".join(_hex(chunk) for chunk in chunks)
    sign = "+" if added else "-"
    return (
        f"{sign} HOST:  {host}:{port}\n"
        f"ASN:  {asn}\n"
        f"  SKI:  {_hex(ski)}\n"
        f"  SPKI: {spki_text}\n"
    )


def format_aspa_update(
    customer_asn: int,
    providers: Iterable[int],
    operation: AspaOperation | None,
    host: str,
    port: str,
) -> str:
    """Return the lines reporting an ASPA change; an unknown operation shows "?"."""
    sign = operation.value if isinstance(operation, AspaOperation) else "?"
    provider_text = ", ".join(str(asn) for asn in providers)
    return f"HOST:  {host}:{port}\n{sign} ASPA {customer_asn} => [ {provider_text} ]\n"