"""Parsers for the individual NMEA 0183 sentence types."""

from __future__ import annotations

import calendar
from collections.abc import Callable
from datetime import datetime, timezone

from .nmea_scan import NmeaParseError, scan, sentence_id
from .nmea_types import (
    Date,
    FaaMode,
    FixedFloat,
    GbsSentence,
    GgaSentence,
    GllSentence,
    GsaSentence,
    GstSentence,
    GsvSentence,
    RmcSentence,
    SatInfo,
    SentenceId,
    Time,
    VtgSentence,
    ZdaSentence,
)

Sentence = (
    GbsSentence
    | RmcSentence
    | GgaSentence
    | GsaSentence
    | GllSentence
    | GstSentence
    | GsvSentence
    | VtgSentence
    | ZdaSentence
)


def _expect_type(kind: str, expected: str) -> None:
    if kind[2:] != expected:
        raise NmeaParseError(f"expected a {expected} sentence, got {kind!r}")


def _signed(value: FixedFloat, direction: int) -> FixedFloat:
    return FixedFloat(value.value * direction, value.scale)


def _unit_checked(value: FixedFloat, unit: str, expected: str) -> FixedFloat:
    """Mark a value unknown unless it carries the expected unit letter."""
    if unit == expected:
        return value
    return FixedFloat(value.value, 0)


def parse_gbs(sentence: str) -> GbsSentence:
    """Parse a GBS (satellite fault detection) sentence."""
    kind, time, err_lat, err_lon, err_alt, svid, prob, bias, stddev = scan(
        sentence, "tTfffifff"
    )
    _expect_type(kind, "GBS")
    return GbsSentence(time, err_lat, err_lon, err_alt, svid, prob, bias, stddev)


def parse_rmc(sentence: str) -> RmcSentence:
    """Parse an RMC (recommended minimum data) sentence."""
    (
        kind,
        time,
        validity,
        latitude,
        lat_dir,
        longitude,
        lon_dir,
        speed,
        course,
        date,
        variation,
        var_dir,
    ) = scan(sentence, "tTcfdfdffDfd")
    _expect_type(kind, "RMC")
    return RmcSentence(
        time=time,
        valid=validity == "A",
        latitude=_signed(latitude, lat_dir),
        longitude=_signed(longitude, lon_dir),
        speed=speed,
        course=course,
        date=date,
        variation=_signed(variation, var_dir),
    )


def parse_gga(sentence: str) -> GgaSentence:
    """Parse a GGA (fix data) sentence."""
    (
        kind,
        time,
        latitude,
        lat_dir,
        longitude,
        lon_dir,
        fix_quality,
        satellites,
        hdop,
        altitude,
        altitude_units,
        height,
        height_units,
        dgps_age,
    ) = scan(sentence, "tTfdfdiiffcfcf_")
    _expect_type(kind, "GGA")
    return GgaSentence(
        time=time,
        latitude=_signed(latitude, lat_dir),
        longitude=_signed(longitude, lon_dir),
        fix_quality=fix_quality,
        satellites_tracked=satellites,
        hdop=hdop,
        altitude=altitude,
        altitude_units=altitude_units,
        height=height,
        height_units=height_units,
        dgps_age=dgps_age,
    )


def parse_gsa(sentence: str) -> GsaSentence:
    """Parse a GSA (DOP and active satellites) sentence."""
    kind, mode, fix_type, *rest = scan(sentence, "tci" + "i" * 12 + "fff")
    _expect_type(kind, "GSA")
    sats, (pdop, hdop, vdop) = rest[:12], rest[12:]
    return GsaSentence(mode, fix_type, tuple(sats), pdop, hdop, vdop)


def parse_gll(sentence: str) -> GllSentence:
    """Parse a GLL (geographic position) sentence."""
    kind, latitude, lat_dir, longitude, lon_dir, time, status, mode = scan(
        sentence, "tfdfdTc;c"
    )
    _expect_type(kind, "GLL")
    return GllSentence(
        latitude=_signed(latitude, lat_dir),
        longitude=_signed(longitude, lon_dir),
        time=time,
        status=status,
        mode=mode,
    )


def parse_gst(sentence: str) -> GstSentence:
    """Parse a GST (pseudorange error statistics) sentence."""
    kind, time, *deviations = scan(sentence, "tTfffffff")
    _expect_type(kind, "GST")
    return GstSentence(time, *deviations)


def parse_gsv(sentence: str) -> GsvSentence:
    """Parse a GSV (satellites in view) sentence."""
    kind, total_msgs, msg_nr, total_sats, *numbers = scan(
        sentence, "tiii;" + "i" * 16
    )
    _expect_type(kind, "GSV")
    sats = tuple(SatInfo(*numbers[start:start + 4]) for start in range(0, 16, 4))
    return GsvSentence(total_msgs, msg_nr, total_sats, sats)


def parse_vtg(sentence: str) -> VtgSentence:
    """Parse a VTG (track and ground speed) sentence."""
    (
        kind,
        true_track,
        c_true,
        magnetic_track,
        c_magnetic,
        speed_knots,
        c_knots,
        speed_kph,
        c_kph,
        c_faa,
    ) = scan(sentence, "t;fcfcfcfcc")
    _expect_type(kind, "VTG")
    try:
        faa_mode: FaaMode | str = FaaMode(c_faa)
    except ValueError:
        faa_mode = c_faa
    return VtgSentence(
        true_track_degrees=_unit_checked(true_track, c_true, "T"),
        magnetic_track_degrees=_unit_checked(magnetic_track, c_magnetic, "M"),
        speed_knots=_unit_checked(speed_knots, c_knots, "N"),
        speed_kph=_unit_checked(speed_kph, c_kph, "K"),
        faa_mode=faa_mode,
    )


def parse_zda(sentence: str) -> ZdaSentence:
    """Parse a ZDA (time and date) sentence."""
    kind, time, day, month, year, hour_offset, minute_offset = scan(
        sentence, "tTiiiii"
    )
    _expect_type(kind, "ZDA")
    if abs(hour_offset) > 13 or not 0 <= minute_offset <= 59:
        raise NmeaParseError(
            f"invalid zone offset {hour_offset}:{minute_offset}"
        )
    return ZdaSentence(time, Date(day, month, year), hour_offset, minute_offset)


_PARSERS: dict[SentenceId, Callable[[str], Sentence]] = {
    SentenceId.GBS: parse_gbs,
    SentenceId.GGA: parse_gga,
    SentenceId.GLL: parse_gll,
    SentenceId.GSA: parse_gsa,
    SentenceId.GST: parse_gst,
    SentenceId.GSV: parse_gsv,
    SentenceId.RMC: parse_rmc,
    SentenceId.VTG: parse_vtg,
    SentenceId.ZDA: parse_zda,
}


def parse(sentence: str, strict: bool = False) -> Sentence:
    """Validate a sentence and parse it with the parser for its type."""
    kind = sentence_id(sentence, strict)
    if kind is SentenceId.INVALID:
        raise NmeaParseError("sentence failed validation")
    parser = _PARSERS.get(kind)
    if parser is None:
        raise NmeaParseError("unsupported sentence type")
    return parser(sentence)


def _full_year(year: int) -> int:
    if year < 80:
        return 2000 + year
    if year >= 1900:
        return year
    return 1900 + year


def get_datetime(date: Date, time: Time) -> datetime:
    """Combine a receiver date and time into a UTC datetime (whole seconds)."""
    if date.year == -1 or time.hours == -1:
        raise ValueError("date or time is empty")
    return datetime(
        _full_year(date.year),
        date.month,
        date.day,
        time.hours,
        time.minutes,
        time.seconds,
        tzinfo=timezone.utc,
    )


def get_time(date: Date, time: Time) -> tuple[int, int]:
    """Return the UNIX time as ``(seconds, nanoseconds)``."""
    if date.year == -1 or time.hours == -1:
        raise ValueError("date or time is empty")
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