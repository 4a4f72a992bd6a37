"""Low-level NMEA 0183 sentence handling: checksums, validation and field scanning."""

from __future__ import annotations

import enum
import math
import re
from dataclasses import dataclass

INT32_MAX = 2**31 - 1
INT32_MIN = -(2**31)

MAX_SENTENCE_LENGTH = 80

_STRTOL_RE = re.compile(r"[ \t\n\v\f\r]*([+-]?\d+)")


class SentenceId(enum.IntEnum):
    """Identifiers of the NMEA sentence types that are understood."""

    INVALID = -1
    UNKNOWN = 0
    GBS = 1
    GGA = 2
    GLL = 3
    GSA = 4
    GST = 5
    GSV = 6
    RMC = 7
    VTG = 8
    ZDA = 9
    MAX = 10


def _cdiv(a: int, b: int) -> int:
    """Integer division truncating towards zero."""
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b >= 0) else -q


@dataclass(frozen=True)
class NmeaFloat:
    """Fixed-point number: ``value / scale``; a scale of 0 means unknown."""

    value: int = 0
    scale: int = 0

    def rescale(self, new_scale: int) -> int:
        """Return the value expressed in ``new_scale``, rounding towards zero."""
        if self.scale == 0:
            return 0
        if self.scale == new_scale:
            return self.value
        if self.scale > new_scale:
            sign = (self.value > 0) - (self.value < 0)
            half = _cdiv(_cdiv(sign * self.scale, new_scale), 2)
            return _cdiv(self.value + half, _cdiv(self.scale, new_scale))
        return self.value * _cdiv(new_scale, self.scale)

    def to_float(self) -> float:
        """Return the value as a float, NaN when unknown."""
        if self.scale == 0:
            return math.nan
        return self.value / self.scale

    def to_coord(self) -> float:
        """Convert a raw DDDMM.MMMM coordinate to decimal degrees, NaN when unknown."""
        if self.scale == 0:
            return math.nan
        if self.scale > INT32_MAX // 100:
            return math.nan
        if self.scale < _cdiv(INT32_MIN, 100):
            return math.nan
        divisor = self.scale * 100
        degrees = _cdiv(self.value, divisor)
        minutes = self.value - degrees * divisor
        return degrees + minutes / (60 * self.scale)


@dataclass(frozen=True)
class NmeaDate:
    """Calendar date; fields are -1 when absent."""

    day: int = -1
    month: int = -1
    year: int = -1


@dataclass(frozen=True)
class NmeaTime:
    """Time of day; fields are -1 when absent."""

    hours: int = -1
    minutes: int = -1
    seconds: int = -1
    microseconds: int = -1


@dataclass(frozen=True)
class NmeaType:
    """Talker and sentence identifiers taken from the address field."""

    talker_id: str
    sentence_id: str


def _text(sentence: str | bytes) -> str:
    if isinstance(sentence, (bytes, bytearray)):
        sentence = bytes(sentence).decode("latin-1")
    nul = sentence.find("\0")
    return sentence if nul < 0 else sentence[:nul]


def _at(text: str, index: int) -> str:
    return text[index] if 0 <= index < len(text) else ""


def _isprint(c: str) -> bool:
    return len(c) == 1 and " " <= c <= "~"


def _isdigit(c: str) -> bool:
    return len(c) == 1 and "0" <= c <= "9"


def _hex2int(c: str) -> int:
    if len(c) == 1:
        if "0" <= c <= "9":
            return ord(c) - ord("0")
        if "A" <= c <= "F":
            return ord(c) - ord("A") + 10
        if "a" <= c <= "f":
            return ord(c) - ord("a") + 10
    return -1


def is_field(c: str) -> bool:
    """Tell whether a character may appear inside a sentence data field."""
    return _isprint(c) and c not in ",*"


def checksum(sentence: str | bytes) -> int:
    """XOR of all characters between an optional leading '$' and '*'."""
    text = _text(sentence)
    if text.startswith("$"):
        text = text[1:]
    result = 0
    for c in text:
        if c == "*":
            break
        result ^= ord(c)
    return result & 0xFF


def check(sentence: str | bytes, strict: bool = False) -> bool:
    """Validate sentence structure and checksum; strict mode requires a checksum."""
    text = _text(sentence)
    if _at(text, 0) != "$":
        return False
    pos = 1
    computed = 0
    while True:
        c = _at(text, pos)
        if not c or c == "*" or not _isprint(c):
            break
        computed ^= ord(c)
        pos += 1

    if _at(text, pos) == "*":
        upper = _hex2int(_at(text, pos + 1))
        if upper == -1:
            return False
        lower = _hex2int(_at(text, pos + 2))
        if lower == -1:
            return False
        pos += 3
        if (computed & 0xFF) != (upper << 4 | lower):
            return False
    elif strict:
        return False

    while _at(text, pos) in ("\r", "\n") and _at(text, pos):
        pos += 1
    return pos >= len(text)


def _scan_float(text: str, field: int | None) -> NmeaFloat:
    sign = 0
    value = -1
    scale = 0
    if field is not None:
        pos = field
        while is_field(c := _at(text, pos)):
            if c == "+" and not sign and value == -1:
                sign = 1
            elif c == "-" and not sign and value == -1:
                sign = -1
            elif _isdigit(c):
                digit = ord(c) - ord("0")
                if value == -1:
                    value = 0
                if value > (INT32_MAX - digit) // 10:
                    if scale:
                        break
                    raise ValueError("numeric field overflows")
                value = 10 * value + digit
                if scale:
                    scale *= 10
            elif c == "." and scale == 0:
                scale = 1
            elif c == " ":
                if sign != 0 or value != -1 or scale != 0:
                    raise ValueError("unexpected space in numeric field")
            else:
                raise ValueError(f"invalid character {c!r} in numeric field")
            pos += 1

    if (sign or scale) and value == -1:
        raise ValueError("numeric field has no digits")
    if value == -1:
        value = 0
        scale = 0
    elif scale == 0:
        scale = 1
    if sign:
        value *= sign
    return NmeaFloat(value, scale)


def _scan_int(text: str, field: int | None) -> int:
    if field is None:
        return 0
    match = _STRTOL_RE.match(text, field)
    if match is None:
        value, end = 0, field
    else:
        value, end = int(match.group(1)), match.end()
    if is_field(_at(text, end)):
        raise ValueError("invalid integer field")
    return value


def _two_digits(text: str, pos: int) -> int:
    return int(text[pos : pos + 2])


def _scan_time(text: str, field: int | None) -> NmeaTime:
    if field is None or not is_field(_at(text, field)):
        return NmeaTime()
    if not all(_isdigit(_at(text, field + f)) for f in range(6)):
        raise ValueError("invalid time field")
    hours = _two_digits(text, field)
    minutes = _two_digits(text, field + 2)
    seconds = _two_digits(text, field + 4)
    pos = field + 6
    if _at(text, pos) == ".":
        pos += 1
        value = 0
        scale = 1_000_000
        while _isdigit(c := _at(text, pos)) and scale > 1:
            value = value * 10 + (ord(c) - ord("0"))
            scale //= 10
            pos += 1
        micro = value * scale
    else:
        micro = 0
    return NmeaTime(hours, minutes, seconds, micro)


def _scan_date(text: str, field: int | None) -> NmeaDate:
    if field is None or not is_field(_at(text, field)):
        return NmeaDate()
    if not all(_isdigit(_at(text, field + f)) for f in range(6)):
        raise ValueError("invalid date field")
    return NmeaDate(
        _two_digits(text, field),
        _two_digits(text, field + 2),
        _two_digits(text, field + 4),
    )


def scan(sentence: str | bytes, fmt: str) -> list:
    """Scan sentence fields according to ``fmt``; raise ValueError on bad input.

    Format characters: c char, d direction (1/-1/0), f NmeaFloat, i int,
    s string, t NmeaType, D NmeaDate, T NmeaTime, _ skip, ; rest optional.
    """
    text = _text(sentence)
    pos = 0
    field: int | None = 0
    optional = False
    values: list = []

    for kind in fmt:
        if kind == ";":
            optional = True
            continue
        if field is None and not optional:
            raise ValueError("sentence has fewer fields than requested")

        if kind == "c":
            c = _at(text, field) if field is not None else ""
            values.append(c if is_field(c) else "")
        elif kind == "d":
            direction = 0
            c = _at(text, field) if field is not None else ""
            if is_field(c):
                if c in "NE":
                    direction = 1
                elif c in "SW":
                    direction = -1
                else:
                    raise ValueError(f"invalid direction {c!r}")
            values.append(direction)
        elif kind == "f":
            values.append(_scan_float(text, field))
        elif kind == "i":
            values.append(_scan_int(text, field))
        elif kind == "s":
            chars = []
            if field is not None:
                p = field
                while is_field(c := _at(text, p)):
                    chars.append(c)
                    p += 1
            values.append("".join(chars))
        elif kind == "t":
            if field is None or _at(text, field) != "$":
                raise ValueError("missing talker identifier")
            if not all(is_field(_at(text, field + 1 + f)) for f in range(5)):
                raise ValueError("invalid talker identifier")
            values.append(NmeaType(text[field + 1 : field + 3], text[field + 3 : field + 6]))
        elif kind == "D":
            values.append(_scan_date(text, field))
        elif kind == "T":
            values.append(_scan_time(text, field))
        elif kind == "_":
            pass
        else:
            raise ValueError(f"unknown format character {kind!r}")

        while is_field(_at(text, pos)):
            pos += 1
        if _at(text, pos) == ",":
            pos += 1
            field = pos
        else:
            field = None

    return values


def talker_id(sentence: str | bytes) -> str:
    """Return the two-character talker identifier of a sentence."""
    (kind,) = scan(sentence, "t")
    return kind.talker_id


_SENTENCE_NAMES = {
    "GBS": SentenceId.GBS,
    "GGA": SentenceId.GGA,
    "GLL": SentenceId.GLL,
    "GSA": SentenceId.GSA,
    "GST": SentenceId.GST,
    "GSV": SentenceId.GSV,
    "RMC": SentenceId.RMC,
    "VTG": SentenceId.VTG,
    "ZDA": SentenceId.ZDA,
}


def sentence_id(sentence: str | bytes, strict: bool = False) -> SentenceId:
    """Identify a sentence type; INVALID for malformed input, UNKNOWN for others."""
    if not check(sentence, strict):
        return SentenceId.INVALID
    try:
        (kind,) = scan(sentence, "t")
    except ValueError:
        return SentenceId.INVALID
    return _SENTENCE_NAMES.get(kind.sentence_id, SentenceId.UNKNOWN)