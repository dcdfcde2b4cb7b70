"""Checksum validation and field scanning for NMEA 0183 sentences."""

from __future__ import annotations

import re
from collections.abc import Iterator
from functools import reduce
from operator import xor
from typing import Any, Callable

from .nmea_types import INT_LEAST32_MAX, Date, FixedFloat, SentenceId, Time

_FIELD_RUN = re.compile(r"[\x20-\x29\x2b\x2d-\x7e]*")
_CHECKED_RUN = re.compile(r"[\x20-\x29\x2b-\x7e]*")
_INTEGER = re.compile(r" *([+-]?[0-9]+)")
_DIGITS = frozenset("0123456789")
_HEX = frozenset("0123456789abcdefABCDEF")
_KNOWN_TYPES = {member.name: member for member in SentenceId if member.value > 0}


class NmeaParseError(ValueError):
    """Raised when a sentence does not match the requested layout."""


def _xor_of(text: str) -> int:
    return reduce(xor, (ord(c) & 0xFF for c in text), 0)


def checksum(sentence: str) -> int:
    """XOR of every character between the optional leading '$' and '*'."""
    body = sentence[1:] if sentence.startswith("$") else sentence
    body = body.split("\0", 1)[0].split("*", 1)[0]
    return _xor_of(body)


def check(sentence: str, strict: bool = False) -> bool:
    """Check framing and, when present, the checksum of a sentence.

    In strict mode a sentence without a checksum is rejected.
    """
    if not sentence.startswith("$"):
        return False
    body = _CHECKED_RUN.match(sentence, 1)
    rest = sentence[body.end():]
    if rest.startswith("*"):
        digits = rest[1:3]
        if len(digits) != 2 or not set(digits) <= _HEX:
            return False
        if _xor_of(body.group()) != int(digits, 16):
            return False
        rest = rest[3:]
    elif strict:
        return False
    return rest.lstrip("\r\n") == ""


def _split_fields(sentence: str) -> Iterator[str]:
    pos = 0
    while True:
        run = _FIELD_RUN.match(sentence, pos)
        yield run.group()
        if not sentence.startswith(",", run.end()):
            return
        pos = run.end() + 1


def _all_digits(text: str) -> bool:
    return bool(text) and set(text) <= _DIGITS


def _scan_char(field: str | None) -> str:
    return field[0] if field else ""


def _scan_direction(field: str | None) -> int:
    if not field:
        return 0
    head = field[0]
    if head in "NE":
        return 1
    if head in "SW":
        return -1
    raise NmeaParseError(f"invalid direction {head!r}")


def _scan_float(field: str | None) -> FixedFloat:
    sign = 0
    value = -1
    scale = 0
    for c in field or "":
        if c == "+" and not sign and value == -1:
            sign = 1
        elif c == "-" and not sign and value == -1:
            sign = -1
        elif c in _DIGITS:
            digit = ord(c) - ord("0")
            if value == -1:
                value = 0
            if value > (INT_LEAST32_MAX - digit) // 10:
                if scale:
                    break  # drop precision that does not fit
                raise NmeaParseError(f"number out of range in {field!r}")
            value = value * 10 + digit
            if scale:
                scale *= 10
        elif c == "." and scale == 0:
            scale = 1
        elif c == " ":
            # Leading spaces are tolerated; some receivers pad fields.
            if sign or value != -1 or scale:
                raise NmeaParseError(f"unexpected space in {field!r}")
        else:
            raise NmeaParseError(f"invalid number {field!r}")
    if (sign or scale) and value == -1:
        raise NmeaParseError(f"invalid number {field!r}")
    if value == -1:
        return FixedFloat(0, 0)
    if scale == 0:
        scale = 1
    if sign:
        value *= sign
    return FixedFloat(value, scale)


def _scan_int(field: str | None) -> int:
    if field is None:
        return 0
    match = _INTEGER.match(field)
    if match is None:
        if field:
            raise NmeaParseError(f"invalid integer {field!r}")
        return 0
    if match.end() != len(field):
        raise NmeaParseError(f"invalid integer {field!r}")
    return int(match.group(1))


def _scan_string(field: str | None) -> str:
    return field or ""


def _scan_type(field: str | None) -> str:
    if field is None or len(field) < 6 or field[0] != "$":
        raise NmeaParseError("missing talker and sentence identifier")
    return field[1:6]


def _scan_date(field: str | None) -> Date:
    if not field:
        return Date()
    if not _all_digits(field[:6]) or len(field) < 6:
        raise NmeaParseError(f"invalid date {field!r}")
    return Date(int(field[0:2]), int(field[2:4]), int(field[4:6]))


def _scan_time(field: str | None) -> Time:
    if not field:
        return Time()
    if not _all_digits(field[:6]) or len(field) < 6:
        raise NmeaParseError(f"invalid time {field!r}")
    microseconds = 0
    if field[6:7] == ".":
        fraction = ""
        for c in field[7:13]:
            if c not in _DIGITS:
                break
            fraction += c
        microseconds = int(fraction or "0") * 10 ** (6 - len(fraction))
    return Time(int(field[0:2]), int(field[2:4]), int(field[4:6]), microseconds)


_HANDLERS: dict[str, Callable[[str | None], Any] | None] = {
    "c": _scan_char,
    "d": _scan_direction,
    "f": _scan_float,
    "i": _scan_int,
    "s": _scan_string,
    "t": _scan_type,
    "D": _scan_date,
    "T": _scan_time,
    "_": None,
}


def scan(sentence: str, format: str) -> list[Any]:
    """Scan the comma-separated fields of ``sentence`` according to ``format``.

    Format characters:
    c single character ('' if empty), d direction (1, -1 or 0),
    f fixed-point number, i integer (default 0), s string,
    t talker and sentence identifier, D date, T time,
    _ skip a field, ; all further fields are optional.

    Returns one value per format character other than '_' and ';'.
    """
    fields = _split_fields(sentence)
    field: str | None = next(fields)
    optional = False
    values: list[Any] = []
    for kind in format:
        if kind == ";":
            optional = True
            continue
        if field is None and not optional:
            raise NmeaParseError("sentence has too few fields")
        if kind not in _HANDLERS:
            raise NmeaParseError(f"unknown format character {kind!r}")
        handler = _HANDLERS[kind]
        if handler is not None:
            values.append(handler(field))
        field = next(fields, None)
    return values


def talker_id(sentence: str) -> str:
    """Return the two-character talker identifier, e.g. 'GP'."""
    return scan(sentence, "t")[0][:2]


def sentence_id(sentence: str, strict: bool = False) -> SentenceId:
    """Identify the kind of sentence, INVALID if it fails validation."""
    if not check(sentence, strict):
        return SentenceId.INVALID
    try:
        kind = scan(sentence, "t")[0]
    except NmeaParseError:
        return SentenceId.INVALID
    return _KNOWN_TYPES.get(kind[2:], SentenceId.UNKNOWN)