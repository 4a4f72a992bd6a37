"""Typed parsers for the common NMEA 0183 sentence types."""

from __future__ import annotations

import calendar
import datetime as _dt
import enum
from dataclasses import dataclass, field

from .nmea import NmeaDate, NmeaFloat, NmeaTime, NmeaType, scan


class FaaMode(str, enum.Enum):
    """FAA mode indicator added to some sentences in NMEA 2.3."""

    AUTONOMOUS = "A"
    DIFFERENTIAL = "D"
    ESTIMATED = "E"
    MANUAL = "M"
    SIMULATED = "S"
    NOT_VALID = "N"
    PRECISE = "P"


@dataclass(frozen=True)
class GbsSentence:
    """GNSS satellite fault detection."""

    type: NmeaType
    time: NmeaTime
    err_latitude: NmeaFloat
    err_longitude: NmeaFloat
    err_altitude: NmeaFloat
    svid: int
    prob: NmeaFloat
    bias: NmeaFloat
    stddev: NmeaFloat


@dataclass(frozen=True)
class RmcSentence:
    """Recommended minimum navigation information."""

    type: NmeaType
    time: NmeaTime
    valid: bool
    latitude: NmeaFloat
    longitude: NmeaFloat
    speed: NmeaFloat
    course: NmeaFloat
    date: NmeaDate
    variation: NmeaFloat


@dataclass(frozen=True)
class GgaSentence:
    """Global positioning system fix data."""

    type: NmeaType
    time: NmeaTime
    latitude: NmeaFloat
    longitude: NmeaFloat
    fix_quality: int
    satellites_tracked: int
    hdop: NmeaFloat
    altitude: NmeaFloat
    altitude_units: str
    height: NmeaFloat
    height_units: str
    dgps_age: NmeaFloat


@dataclass(frozen=True)
class GllSentence:
    """Geographic position, latitude and longitude."""

    type: NmeaType
    latitude: NmeaFloat
    longitude: NmeaFloat
    time: NmeaTime
    status: str
    mode: str


@dataclass(frozen=True)
class GstSentence:
    """GNSS pseudorange error statistics."""

    type: NmeaType
    time: NmeaTime
    rms_deviation: NmeaFloat
    semi_major_deviation: NmeaFloat
    semi_minor_deviation: NmeaFloat
    semi_major_orientation: NmeaFloat
    latitude_error_deviation: NmeaFloat
    longitude_error_deviation: NmeaFloat
    altitude_error_deviation: NmeaFloat


@dataclass(frozen=True)
class GsaSentence:
    """GNSS DOP and active satellites."""

    type: NmeaType
    mode: str
    fix_type: int
    sats: tuple[int, ...]
    pdop: NmeaFloat
    hdop: NmeaFloat
    vdop: NmeaFloat


@dataclass(frozen=True)
class SatInfo:
    """One satellite entry of a GSV sentence."""

    nr: int = 0
    elevation: int = 0
    azimuth: int = 0
    snr: int = 0


@dataclass(frozen=True)
class GsvSentence:
    """GNSS satellites in view."""

    type: NmeaType
    total_msgs: int
    msg_nr: int
    total_sats: int
    sats: tuple[SatInfo, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class VtgSentence:
    """Track made good and ground speed."""

    type: NmeaType
    true_track_degrees: NmeaFloat
    magnetic_track_degrees: NmeaFloat
    speed_knots: NmeaFloat
    speed_kph: NmeaFloat
    faa_mode: FaaMode | None


@dataclass(frozen=True)
class ZdaSentence:
    """Time and date with local zone offset."""

    type: NmeaType
    time: NmeaTime
    date: NmeaDate
    hour_offset: int
    minute_offset: int


def _expect(kind: NmeaType, name: str) -> None:
    if kind.sentence_id != name:
        raise ValueError(f"expected a {name} sentence, got {kind.sentence_id!r}")


def _signed(value: NmeaFloat, direction: int) -> NmeaFloat:
    return NmeaFloat(value.value * direction, value.scale)


def _unless(value: NmeaFloat, unit: str, expected: str) -> NmeaFloat:
    """Keep a value only when its accompanying unit character matches."""
    return value if unit == expected else NmeaFloat(value.value, 0)


def parse_gbs(sentence: str | bytes) -> GbsSentence:
    """Parse a GBS sentence; raise ValueError when malformed."""
    kind, time, err_lat, err_lon, err_alt, svid, prob, bias, stddev = scan(
        sentence, "tTfffifff"
    )
    _expect(kind, "GBS")
    return GbsSentence(kind, time, err_lat, err_lon, err_alt, svid, prob, bias, stddev)


def parse_rmc(sentence: str | bytes) -> RmcSentence:
    """Parse an RMC sentence; raise ValueError when malformed."""
    (
        kind, time, validity, lat, lat_dir, lon, lon_dir,
        speed, course, date, variation, var_dir,
    ) = scan(sentence, "tTcfdfdffDfd")
    _expect(kind, "RMC")
    return RmcSentence(
        type=kind,
        time=time,
        valid=validity == "A",
        latitude=_signed(lat, lat_dir),
        longitude=_signed(lon, lon_dir),
        speed=speed,
        course=course,
        date=date,
        variation=_signed(variation, var_dir),
    )


def parse_gga(sentence: str | bytes) -> GgaSentence:
    """Parse a GGA sentence; raise ValueError when malformed."""
    (
        kind, time, lat, lat_dir, lon, lon_dir, fix_quality, sats,
        hdop, altitude, altitude_units, height, height_units, dgps_age,
    ) = scan(sentence, "tTfdfdiiffcfcf_")
    _expect(kind, "GGA")
    return GgaSentence(
        type=kind,
        time=time,
        latitude=_signed(lat, lat_dir),
        longitude=_signed(lon, lon_dir),
        fix_quality=fix_quality,
        satellites_tracked=sats,
        hdop=hdop,
        altitude=altitude,
        altitude_units=altitude_units,
        height=height,
        height_units=height_units,
        dgps_age=dgps_age,
    )


def parse_gll(sentence: str | bytes) -> GllSentence:
    """Parse a GLL sentence; raise ValueError when malformed."""
    kind, lat, lat_dir, lon, lon_dir, time, status, mode = scan(sentence, "tfdfdTc;c")
    _expect(kind, "GLL")
    return GllSentence(
        type=kind,
        latitude=_signed(lat, lat_dir),
        longitude=_signed(lon, lon_dir),
        time=time,
        status=status,
        mode=mode,
    )


def parse_gst(sentence: str | bytes) -> GstSentence:
    """Parse a GST sentence; raise ValueError when malformed."""
    kind, time, *deviations = scan(sentence, "tTfffffff")
    _expect(kind, "GST")
    return GstSentence(kind, time, *deviations)


def parse_gsa(sentence: str | bytes) -> GsaSentence:
    """Parse a GSA sentence; raise ValueError when malformed."""
    values = scan(sentence, "tciiiiiiiiiiiiifff")
    kind, mode, fix_type = values[:3]
    _expect(kind, "GSA")
    pdop, hdop, vdop = values[15:]
    return GsaSentence(kind, mode, fix_type, tuple(values[3:15]), pdop, hdop, vdop)


def parse_gsv(sentence: str | bytes) -> GsvSentence:
    """Parse a GSV sentence; raise ValueError when malformed."""
    values = scan(sentence, "tiii;iiiiiiiiiiiiiiii")
    kind, total_msgs, msg_nr, total_sats = values[:4]
    _expect(kind, "GSV")
    numbers = values[4:]
    sats = tuple(SatInfo(*numbers[i : i + 4]) for i in range(0, len(numbers), 4))
    return GsvSentence(kind, total_msgs, msg_nr, total_sats, sats)


def parse_vtg(sentence: str | bytes) -> VtgSentence:
    """Parse a VTG sentence; raise ValueError when malformed."""
    (
        kind, true_track, c_true, magnetic, c_magnetic,
        knots, c_knots, kph, c_kph, c_faa,
    ) = scan(sentence, "t;fcfcfcfcc")
    _expect(kind, "VTG")
    try:
        faa_mode: FaaMode | None = FaaMode(c_faa) if c_faa else None
    except ValueError:
        faa_mode = None
    return VtgSentence(
        type=kind,
        true_track_degrees=_unless(true_track, c_true, "T"),
        magnetic_track_degrees=_unless(magnetic, c_magnetic, "M"),
        speed_knots=_unless(knots, c_knots, "N"),
        speed_kph=_unless(kph, c_kph, "K"),
        faa_mode=faa_mode,
    )


def parse_zda(sentence: str | bytes) -> ZdaSentence:
    """Parse a ZDA sentence; raise ValueError when malformed or offsets are out of range."""
    kind, time, day, month, year, hour_offset, minute_offset = scan(sentence, "tTiiiii")
    _expect(kind, "ZDA")
    if abs(hour_offset) > 13 or not 0 <= minute_offset <= 59:
        raise ValueError("zone offset out of range")
    return ZdaSentence(kind, time, NmeaDate(day, month, year), hour_offset, minute_offset)


def _full_year(year: int) -> int:
    if year < 80:
        return 2000 + year
    if year >= 1900:
        return year
    return 1900 + year


def _require(date: NmeaDate, time: NmeaTime) -> None:
    if date.year == -1 or time.hours == -1:
        raise ValueError("date or time is missing")


def get_datetime(date: NmeaDate, time: NmeaTime) -> _dt.datetime:
    """Combine an NMEA date and time into a UTC datetime, to whole seconds."""
    _require(date, time)
    return _dt.datetime(
        _full_year(date.year),
        date.month,
        date.day,
        time.hours,
        time.minutes,
        time.seconds,
        tzinfo=_dt.timezone.utc,
    )


def get_time(date: NmeaDate, time: NmeaTime) -> tuple[int, int]:
    """Return ``(seconds, nanoseconds)`` since the UNIX epoch for an NMEA date and time."""
    _require(date, time)
    seconds = calendar.timegm(
        (
            _full_year(date.year),
            date.month,
            date.day,
            time.hours,
            time.minutes,
            time.seconds,
        )
    )
    return seconds, time.microseconds * 1000