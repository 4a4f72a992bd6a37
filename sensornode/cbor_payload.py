"""CBOR encoding of sensor readings."""

from __future__ import annotations

import enum
import math
import struct
from dataclasses import dataclass, field
from typing import Iterable, Union

import cbor2

SENSOR_NAME_MAX_LEN = 16
SENSOR_FIELD_NAME_LEN = 16
SENSOR_MAX_FIELDS = 10

_BREAK = b"\xff"
_INDEFINITE_MAP = b"\xbf"
_UINT64_MASK = (1 << 64) - 1


class FieldType(enum.IntEnum):
    """Data type of a sensor field value."""

    INVALID = 0
    FLOAT = 1
    INT = 2
    LONG_INT = 3
    UINT = 4
    LONG_UINT = 5
    BOOL = 6


FieldValue = Union[float, int, bool, None]


@dataclass(frozen=True)
class SensorField:
    """A named value of one sensor reading."""

    name: str
    type: FieldType
    value: FieldValue = None

    def __post_init__(self) -> None:
        if len(self.name) >= SENSOR_FIELD_NAME_LEN:
            raise ValueError(f"field name longer than {SENSOR_FIELD_NAME_LEN - 1} characters")


@dataclass(frozen=True)
class SensorPayload:
    """One sensor reading with its timestamp and fields."""

    sensor: str
    timestamp: int
    fields: tuple[SensorField, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", tuple(self.fields))
        if len(self.sensor) >= SENSOR_NAME_MAX_LEN:
            raise ValueError(f"sensor name longer than {SENSOR_NAME_MAX_LEN - 1} characters")
        if len(self.fields) > SENSOR_MAX_FIELDS:
            raise ValueError(f"at most {SENSOR_MAX_FIELDS} fields are allowed")
        if self.timestamp < 0:
            raise ValueError("timestamp must not be negative")


def _float32(value: float) -> bytes:
    try:
        packed = struct.pack(">f", value)
    except OverflowError:
        packed = struct.pack(">f", math.copysign(math.inf, value))
    return b"\xfa" + packed


def _int64(value: int) -> int:
    value &= _UINT64_MASK
    return value - (1 << 64) if value >= 1 << 63 else value


def _encode_value(item: SensorField) -> bytes:
    kind = item.type
    if kind == FieldType.FLOAT:
        return _float32(float(item.value or 0.0))
    if kind in (FieldType.INT, FieldType.LONG_INT):
        return cbor2.dumps(_int64(int(item.value or 0)))
    if kind in (FieldType.UINT, FieldType.LONG_UINT):
        return cbor2.dumps(int(item.value or 0) & _UINT64_MASK)
    if kind == FieldType.BOOL:
        return cbor2.dumps(bool(item.value))
    return cbor2.dumps(None)


def encode_sensor_payload(payload: SensorPayload) -> bytes:
    """Encode one reading as an indefinite-length CBOR map."""
    parts = [
        _INDEFINITE_MAP,
        cbor2.dumps("sensor"),
        cbor2.dumps(payload.sensor),
        cbor2.dumps("timestamp"),
        cbor2.dumps(payload.timestamp & _UINT64_MASK),
        cbor2.dumps("fields"),
        _INDEFINITE_MAP,
    ]
    for item in payload.fields:
        parts.append(cbor2.dumps(item.name))
        parts.append(_encode_value(item))
    parts.append(_BREAK)
    parts.append(_BREAK)
    return b"".join(parts)


def _array_head(length: int) -> bytes:
    major = 4 << 5
    if length < 24:
        return bytes([major | length])
    if length < 1 << 8:
        return bytes([major | 24, length])
    if length < 1 << 16:
        return bytes([major | 25]) + struct.pack(">H", length)
    if length < 1 << 32:
        return bytes([major | 26]) + struct.pack(">I", length)
    return bytes([major | 27]) + struct.pack(">Q", length)


def encode_sensor_array(payloads: Iterable[SensorPayload]) -> bytes:
    """Encode several readings as a CBOR array of sensor maps."""
    encoded = [encode_sensor_payload(p) for p in payloads]
    return _array_head(len(encoded)) + b"".join(encoded)