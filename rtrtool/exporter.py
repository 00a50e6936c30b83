"""Rendering of ROA records through logic-less mustache templates."""

from __future__ import annotations

import ipaddress
from dataclasses import dataclass, field
from typing import Iterable, Sequence, TextIO, Union

__all__ = [
    "RoaRecord",
    "TemplateSyntaxError",
    "render",
    "unique_records",
    "write_export",
]

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]


@dataclass(frozen=True)
class RoaRecord:
    """A route origin authorisation: prefix, length range and origin AS."""

    prefix: IPAddress
    min_len: int
    max_len: int
    asn: int

    def __post_init__(self) -> None:
        if not isinstance(self.prefix, (ipaddress.IPv4Address, ipaddress.IPv6Address)):
            object.__setattr__(self, "prefix", ipaddress.ip_address(self.prefix))


class TemplateSyntaxError(Exception):
    """Raised when a template is malformed or uses a variable out of place."""


def unique_records(records: Iterable[RoaRecord]) -> list[RoaRecord]:
    """Return the records without duplicates, keeping first occurrences in order."""
    return list(dict.fromkeys(records))


@dataclass
class _Token:
    kind: str
    value: str


def _tokenize(template: str) -> list[_Token]:
    opening, closing = "{{", "}}"
    tokens: list[_Token] = []
    pos = 0
    while True:
        start = template.find(opening, pos)
        if start < 0:
            if pos < len(template):
                tokens.append(_Token("text", template[pos:]))
            return tokens
        if start > pos:
            tokens.append(_Token("text", template[pos:start]))
        start += len(opening)
        kind = template[start:start + 1]
        if kind == "{":
            end = template.find("}" + closing, start)
            if end < 0:
                raise TemplateSyntaxError("unterminated tag")
            content = template[start:end]
            pos = end + 1 + len(closing)
        else:
            end = template.find(closing, start)
            if end < 0:
                raise TemplateSyntaxError("unterminated tag")
            content = template[start:end]
            pos = end + len(closing)

        if kind == "!":
            continue
        if kind == "=":
            if len(content) < 2 or not content.endswith("="):
                raise TemplateSyntaxError("bad delimiter specification")
            parts = content[1:-1].split()
            if len(parts) != 2:
                raise TemplateSyntaxError("bad delimiter specification")
            opening, closing = parts
            continue
        if kind in ("{", "&", ">"):
            tokens.append(_Token("put", content[1:].strip()))
        elif kind in ("#", "^", "/"):
            tokens.append(_Token(kind, content[1:].strip()))
        else:
            tokens.append(_Token("put", content.strip()))


@dataclass
class _ExportState:
    records: Sequence[RoaRecord]
    in_section: bool = False
    current: int = 0

    def enter(self, name: str) -> bool:
        if "roas".startswith(name):
            self.current = 0
            if not self.records:
                return False
            self.in_section = True
            return True
        # The first record is never treated as the last one.
        return bool(self.current) and name == "last" and self.current == len(self.records) - 1

    def leave(self) -> None:
        self.in_section = False

    def next(self) -> bool:
        self.current += 1
        return self.current < len(self.records)

    def put(self, name: str) -> str:
        if not self.in_section or not name:
            raise TemplateSyntaxError(f'variable "{name}" used outside of the roas section')
        record = self.records[self.current]
        fields = (
            ("prefix", str(record.prefix)),
            ("length", str(record.min_len)),
            ("maxlen", str(record.max_len)),
            ("origin", str(record.asn)),
        )
        return next((value for key, value in fields if key.startswith(name)), "")


@dataclass
class _Frame:
    name: str
    again: int
    enabled: bool
    entered: bool = field(default=False)


def render(template: str, records: Sequence[RoaRecord]) -> str:
    """Render the template with the records available as the roas section."""
    tokens = _tokenize(template)
    state = _ExportState(list(records))
    out: list[str] = []
    stack: list[_Frame] = []
    enabled = True
    position = 0

    while position < len(tokens):
        token = tokens[position]
        position += 1
        if token.kind == "text":
            if enabled:
                out.append(token.value)
        elif token.kind in ("#", "^"):
            entered = state.enter(token.value) if enabled else False
            stack.append(_Frame(token.value, position, enabled, entered))
            if (token.kind == "#") != entered:
                enabled = False
        elif token.kind == "/":
            if not stack or stack[-1].name != token.value:
                raise TemplateSyntaxError(f'unexpected closing tag "{token.value}"')
            frame = stack[-1]
            again = state.next() if enabled and frame.entered else False
            if again:
                position = frame.again
            else:
                stack.pop()
                enabled = frame.enabled
                if enabled and frame.entered:
                    state.leave()
        elif enabled:
            out.append(state.put(token.value))

    if stack:
        raise TemplateSyntaxError(f'section "{stack[-1].name}" is not closed')
    return "".join(out)


def write_export(template: str, records: Iterable[RoaRecord], stream: TextIO) -> None:
    """Render the de-duplicated records with the template and write them to stream."""
    stream.write(render(template, unique_records(records)))