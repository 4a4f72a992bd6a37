import math

import pytest

from sensornode.nmea import NmeaDate, NmeaFloat, NmeaTime
from sensornode.nmea_sentences import (
    FaaMode,
    SatInfo,
    get_datetime,
    get_time,
    parse_gbs,
    parse_gga,
    parse_gll,
    parse_gsa,
    parse_gst,
    parse_gsv,
    parse_rmc,
    parse_vtg,
    parse_zda,
)

RMC = "$GPRMC,081836,A,3751.65,S,14507.36,E,000.0,360.0,130998,011.3,E*62"
GGA = "$GPGGA,123519,4807.038,N,01131.000,E,1,08,0.9,545.4,M,46.9,M,,*47"


def test_parse_rmc():
    frame = parse_rmc(RMC)
    assert frame.type.talker_id == "GP"
    assert frame.type.sentence_id == "RMC"
    assert frame.time == NmeaTime(8, 18, 36, 0)
    assert frame.valid is True
    assert frame.latitude == NmeaFloat(-375165, 100)
    assert frame.longitude == NmeaFloat(1450736, 100)
    assert frame.speed == NmeaFloat(0, 10)
    assert frame.course == NmeaFloat(3600, 10)
    assert frame.date == NmeaDate(13, 9, 98)
    assert frame.variation == NmeaFloat(113, 10)


def test_parse_rmc_rejects_other_sentence():
    with pytest.raises(ValueError):
        parse_rmc(GGA)


def test_parse_rmc_rejects_bad_direction():
    with pytest.raises(ValueError):
        parse_rmc("$GPRMC,081836,A,3751.65,X,14507.36,E,000.0,360.0,130998,011.3,E")


def test_parse_gga():
    frame = parse_gga(GGA)
    assert frame.time == NmeaTime(12, 35, 19, 0)
    assert frame.latitude == NmeaFloat(4807038, 1000)
    assert frame.longitude == NmeaFloat(1131000, 1000)
    assert frame.fix_quality == 1
    assert frame.satellites_tracked == 8
    assert frame.hdop == NmeaFloat(9, 10)
    assert frame.altitude == NmeaFloat(5454, 10)
    assert frame.altitude_units == "M"
    assert frame.height == NmeaFloat(469, 10)
    assert frame.height_units == "M"
    assert frame.dgps_age == NmeaFloat(0, 0)
    assert math.isnan(frame.dgps_age.to_float())


def test_parse_gsa():
    frame = parse_gsa("$GPGSA,A,3,04,05,,09,12,,,24,,,,,2.5,1.3,2.1*39")
    assert frame.mode == "A"
    assert frame.fix_type == 3
    assert frame.sats == (4, 5, 0, 9, 12, 0, 0, 24, 0, 0, 0, 0)
    assert frame.pdop == NmeaFloat(25, 10)
    assert frame.hdop == NmeaFloat(13, 10)
    assert frame.vdop == NmeaFloat(21, 10)


def test_parse_gll():
    frame = parse_gll("$GPGLL,3723.2475,N,12158.3416,W,161229.487,A,A*41")
    assert frame.latitude == NmeaFloat(37232475, 10000)
    assert frame.longitude == NmeaFloat(-121583416, 10000)
    assert frame.time == NmeaTime(16, 12, 29, 487000)
    assert frame.status == "A"
    assert frame.mode == "A"


def test_parse_gll_without_mode():
    frame = parse_gll("$GPGLL,3723.2475,N,12158.3416,W,161229.487,A")
    assert frame.status == "A"
    assert frame.mode == ""


def test_parse_gst():
    frame = parse_gst("$GPGST,024603.00,3.2,6.6,4.7,47.3,5.8,5.6,22.0*58")
    assert frame.time == NmeaTime(2, 46, 3, 0)
    assert frame.rms_deviation == NmeaFloat(32, 10)
    assert frame.semi_major_deviation == NmeaFloat(66, 10)
    assert frame.semi_minor_deviation == NmeaFloat(47, 10)
    assert frame.semi_major_orientation == NmeaFloat(473, 10)
    assert frame.latitude_error_deviation == NmeaFloat(58, 10)
    assert frame.longitude_error_deviation == NmeaFloat(56, 10)
    assert frame.altitude_error_deviation == NmeaFloat(220, 10)


def test_parse_gsv_full():
    frame = parse_gsv(
        "$GPGSV,3,1,11,03,03,111,00,04,15,270,00,06,01,010,00,13,06,292,00*74"
    )
    assert (frame.total_msgs, frame.msg_nr, frame.total_sats) == (3, 1, 11)
    assert frame.sats == (
        SatInfo(3, 3, 111, 0),
        SatInfo(4, 15, 270, 0),
        SatInfo(6, 1, 10, 0),
        SatInfo(13, 6, 292, 0),
    )


def test_parse_gsv_without_satellites():
    frame = parse_gsv("$GPGSV,4,4,13*7B")
    assert (frame.total_msgs, frame.msg_nr, frame.total_sats) == (4, 4, 13)
    assert frame.sats == (SatInfo(),) * 4


def test_parse_vtg_without_mode():
    frame = parse_vtg("$GPVTG,054.7,T,034.4,M,005.5,N,010.2,K*48")
    assert frame.true_track_degrees == NmeaFloat(547, 10)
    assert frame.magnetic_track_degrees == NmeaFloat(344, 10)
    assert frame.speed_knots == NmeaFloat(55, 10)
    assert frame.speed_kph == NmeaFloat(102, 10)
    assert frame.faa_mode is None


def test_parse_vtg_with_mode_and_empty_field():
    frame = parse_vtg("$GPVTG,188.36,T,,M,0.820,N,1.519,K,A*3F")
    assert frame.true_track_degrees == NmeaFloat(18836, 100)
    assert frame.magnetic_track_degrees.scale == 0
    assert frame.speed_knots == NmeaFloat(820, 1000)
    assert frame.speed_kph == NmeaFloat(1519, 1000)
    assert frame.faa_mode is FaaMode.AUTONOMOUS


def test_parse_vtg_wrong_unit_marks_unknown():
    frame = parse_vtg("$GPVTG,054.7,X,034.4,M,005.5,N,010.2,K")
    assert frame.true_track_degrees.scale == 0
    assert frame.magnetic_track_degrees == NmeaFloat(344, 10)


def test_parse_zda():
    frame = parse_zda("$GPZDA,201530.00,04,07,2002,00,00*60")
    assert frame.time == NmeaTime(20, 15, 30, 0)
    assert frame.date == NmeaDate(4, 7, 2002)
    assert (frame.hour_offset, frame.minute_offset) == (0, 0)


@pytest.mark.parametrize(
    "sentence",
    [
        "$GPZDA,201530.00,04,07,2002,14,00",
        "$GPZDA,201530.00,04,07,2002,00,60",
        "$GPZDA,201530.00,04,07,2002,00,-1",
    ],
)
def test_parse_zda_rejects_bad_offsets(sentence):
    with pytest.raises(ValueError):
        parse_zda(sentence)


def test_parse_gbs():
    frame = parse_gbs("$GNGBS,170556.00,3.0,2.9,8.3,,,,*5C")
    assert frame.type.talker_id == "GN"
    assert frame.time == NmeaTime(17, 5, 56, 0)
    assert frame.err_latitude == NmeaFloat(30, 10)
    assert frame.err_longitude == NmeaFloat(29, 10)
    assert frame.err_altitude == NmeaFloat(83, 10)
    assert frame.svid == 0
    assert frame.prob.scale == 0
    assert frame.bias.scale == 0
    assert frame.stddev.scale == 0


def test_parse_gbs_rejects_truncated():
    with pytest.raises(ValueError):
        parse_gbs("$GNGBS,170556.00,3.0")


def test_get_datetime_from_rmc():
    frame = parse_rmc(RMC)
    when = get_datetime(frame.date, frame.time)
    assert (when.day, when.month) == (13, 9)
    assert (when.hour, when.minute, when.second) == (8, 18, 36)
    assert when.year % 100 == 98


def test_two_digit_and_four_digit_years_agree():
    t = NmeaTime(20, 15, 30, 0)
    assert get_datetime(NmeaDate(4, 7, 2), t) == get_datetime(NmeaDate(4, 7, 2002), t)


def test_get_time_matches_datetime():
    date = NmeaDate(4, 7, 2002)
    t = NmeaTime(20, 15, 30, 250000)
    seconds, nanos = get_time(date, t)
    assert seconds == int(get_datetime(date, t).timestamp())
    assert nanos == 250000000


def test_missing_date_or_time_raises():
    with pytest.raises(ValueError):
        get_time(NmeaDate(), NmeaTime(1, 2, 3, 0))
    with pytest.raises(ValueError):
        get_datetime(NmeaDate(1, 2, 3), NmeaTime())