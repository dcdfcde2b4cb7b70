"""Value types shared by the NMEA 0183 sentence parsers."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum, IntEnum

INT_LEAST32_MAX = 2**31 - 1
INT_LEAST32_MIN = -(2**31)


def _trunc_div(a: int, b: int) -> int:
    """Integer division rounding towards zero."""
    quotient = abs(a) // abs(b)
    return quotient if (a >= 0) == (b >= 0) else -quotient


def _trunc_mod(a: int, b: int) -> int:
    """Remainder that takes the sign of the dividend."""
    return a - b * _trunc_div(a, b)


class SentenceId(IntEnum):
    """Kinds of NMEA sentence the parser recognises."""

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


class GllStatus(str, Enum):
    DATA_VALID = "A"
    DATA_NOT_VALID = "V"


class FaaMode(str, Enum):
    """FAA mode indicator added in NMEA 2.3."""

    AUTONOMOUS = "A"
    DIFFERENTIAL = "D"
    ESTIMATED = "E"
    MANUAL = "M"
    SIMULATED = "S"
    NOT_VALID = "N"
    PRECISE = "P"


class GsaMode(str, Enum):
    AUTO = "A"
    FORCED = "M"


class GsaFixType(IntEnum):
    FIX_NONE = 1
    FIX_2D = 2
    FIX_3D = 3


@dataclass(frozen=True, slots=True)
class FixedFloat:
    """Fixed-point number: ``value / scale``; a scale of 0 means unknown."""

    value: int = 0
    scale: int = 0

    def rescale(self, new_scale: int) -> int:
        """Return the value expressed in ``new_scale``, rounding half away from zero."""
        if self.scale == 0:
            return 0
        if self.scale == new_scale:
            return self.value
        if self.scale > new_scale:
            sign = (self.value > 0) - (self.value < 0)
            half = _trunc_div(_trunc_div(sign * self.scale, new_scale), 2)
            return _trunc_div(self.value + half, _trunc_div(self.scale, new_scale))
        return self.value * _trunc_div(new_scale, self.scale)

    def to_float(self) -> float:
        """Return the value as a float, NaN when unknown."""
        if self.scale == 0:
            return math.nan
        return self.value / self.scale

    def to_coord(self) -> float:
        """Convert a DDDMM.MMMM coordinate to decimal degrees, NaN when unknown."""
        if self.scale == 0:
            return math.nan
        if self.scale > INT_LEAST32_MAX // 100:
            return math.nan
        if self.scale < _trunc_div(INT_LEAST32_MIN, 100):
            return math.nan
        unit = self.scale * 100
        degrees = _trunc_div(self.value, unit)
        minutes = _trunc_mod(self.value, unit)
        return degrees + minutes / (60 * self.scale)


@dataclass(frozen=True, slots=True)
class Date:
    """Calendar date as sent by the receiver; -1 marks an empty field."""

    day: int = -1
    month: int = -1
    year: int = -1


@dataclass(frozen=True, slots=True)
class Time:
    """UTC time of day; -1 marks an empty field."""

    hours: int = -1
    minutes: int = -1
    seconds: int = -1
    microseconds: int = -1


@dataclass(frozen=True, slots=True)
class SatInfo:
    nr: int = 0
    elevation: int = 0
    azimuth: int = 0
    snr: int = 0


@dataclass(slots=True)
class GbsSentence:
    time: Time = field(default_factory=Time)
    err_latitude: FixedFloat = field(default_factory=FixedFloat)
    err_longitude: FixedFloat = field(default_factory=FixedFloat)
    err_altitude: FixedFloat = field(default_factory=FixedFloat)
    svid: int = 0
    prob: FixedFloat = field(default_factory=FixedFloat)
    bias: FixedFloat = field(default_factory=FixedFloat)
    stddev: FixedFloat = field(default_factory=FixedFloat)


@dataclass(slots=True)
class RmcSentence:
    time: Time = field(default_factory=Time)
    valid: bool = False
    latitude: FixedFloat = field(default_factory=FixedFloat)
    longitude: FixedFloat = field(default_factory=FixedFloat)
    speed: FixedFloat = field(default_factory=FixedFloat)
    course: FixedFloat = field(default_factory=FixedFloat)
    date: Date = field(default_factory=Date)
    variation: FixedFloat = field(default_factory=FixedFloat)


@dataclass(slots=True)
class GgaSentence:
    time: Time = field(default_factory=Time)
    latitude: FixedFloat = field(default_factory=FixedFloat)
    longitude: FixedFloat = field(default_factory=FixedFloat)
    fix_quality: int = 0
    satellites_tracked: int = 0
    hdop: FixedFloat = field(default_factory=FixedFloat)
    altitude: FixedFloat = field(default_factory=FixedFloat)
    altitude_units: str = ""
    height: FixedFloat = field(default_factory=FixedFloat)
    height_units: str = ""
    dgps_age: FixedFloat = field(default_factory=FixedFloat)


@dataclass(slots=True)
class GllSentence:
    latitude: FixedFloat = field(default_factory=FixedFloat)
    longitude: FixedFloat = field(default_factory=FixedFloat)
    time: Time = field(default_factory=Time)
    status: str = ""
    mode: str = ""


@dataclass(slots=True)
class GstSentence:
    time: Time = field(default_factory=Time)
    rms_deviation: FixedFloat = field(default_factory=FixedFloat)
    semi_major_deviation: FixedFloat = field(default_factory=FixedFloat)
    semi_minor_deviation: FixedFloat = field(default_factory=FixedFloat)
    semi_major_orientation: FixedFloat = field(default_factory=FixedFloat)
    latitude_error_deviation: FixedFloat = field(default_factory=FixedFloat)
    longitude_error_deviation: FixedFloat = field(default_factory=FixedFloat)
    altitude_error_deviation: FixedFloat = field(default_factory=FixedFloat)


@dataclass(slots=True)
class GsaSentence:
    mode: str = ""
    fix_type: int = 0
    sats: tuple[int, ...] = (0,) * 12
    pdop: FixedFloat = field(default_factory=FixedFloat)
    hdop: FixedFloat = field(default_factory=FixedFloat)
    vdop: FixedFloat = field(default_factory=FixedFloat)


@dataclass(slots=True)
class GsvSentence:
    total_msgs: int = 0
    msg_nr: int = 0
    total_sats: int = 0
    sats: tuple[SatInfo, ...] = (SatInfo(),) * 4


@dataclass(slots=True)
class VtgSentence:
    true_track_degrees: FixedFloat = field(default_factory=FixedFloat)
    magnetic_track_degrees: FixedFloat = field(default_factory=FixedFloat)
    speed_knots: FixedFloat = field(default_factory=FixedFloat)
    speed_kph: FixedFloat = field(default_factory=FixedFloat)
    faa_mode: FaaMode | str = ""


@dataclass(slots=True)
class ZdaSentence:
    time: Time = field(default_factory=Time)
    date: Date = field(default_factory=Date)
    hour_offset: int = 0
    minute_offset: int = 0


def is_field(c: str) -> bool:
    """Tell whether ``c`` may appear inside a sentence data field."""
    return len(c) == 1 and " " <= c <= "~" and c not in ",*"