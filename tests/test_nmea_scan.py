import pytest

from antifurto.nmea_scan import (
    NmeaParseError,
    check,
    checksum,
    scan,
    sentence_id,
    talker_id,
)
from antifurto.nmea_types import INT_LEAST32_MAX, Date, FixedFloat, SentenceId, Time

GGA = "$GPGGA,123519,4807.038,N,01131.000,E,1,08,0.9,545.4,M,46.9,M,,*47"
RMC = "$GPRMC,081836,A,3751.65,S,14507.36,E,000.0,360.0,130998,011.3,E*62"


def _frame(body, lower=False):
    digits = format(checksum(body), "02x" if lower else "02X")
    return f"${body}*{digits}"


def test_checksum_matches_sample_sentence():
    assert checksum(GGA) == 0x47


def test_checksum_ignores_leading_dollar():
    assert checksum(GGA) == checksum(GGA[1:])


@pytest.mark.parametrize("sentence", [GGA, RMC, GGA + "\r\n", RMC + "\n"])
def test_check_accepts_sample_sentences(sentence):
    assert check(sentence, True) is True


def test_check_round_trip_with_computed_checksum():
    body = "GPXYZ,1,2,hello"
    assert check(_frame(body), True) is True
    assert check(_frame(body, lower=True), True) is True


def test_check_rejects_corruption():
    corrupted = GGA.replace("4807", "4808")
    assert check(corrupted) is False


@pytest.mark.parametrize(
    "sentence",
    [
        GGA[1:],
        GGA + "X",
        GGA[:-1],
        GGA[:-2] + "G7",
        "$GPGGA,1\x01,2",
    ],
)
def test_check_rejects_malformed(sentence):
    assert check(sentence) is False


def test_check_strict_requires_checksum():
    sentence = "$GPGGA,1,2"
    assert check(sentence, False) is True
    assert check(sentence, True) is False


def test_scan_talker_type():
    assert scan(GGA, "t") == ["GPGGA"]


def test_scan_gga_layout():
    values = scan(GGA, "tTfdfdiiffcfcf_")
    assert values == [
        "GPGGA",
        Time(12, 35, 19, 0),
        FixedFloat(4807038, 1000),
        1,
        FixedFloat(1131000, 1000),
        1,
        1,
        8,
        FixedFloat(9, 10),
        FixedFloat(5454, 10),
        "M",
        FixedFloat(469, 10),
        "M",
        FixedFloat(0, 0),
    ]


def test_scan_rmc_directions_and_date():
    values = scan(RMC, "tTcfdfdffDfd")
    assert values[2] == "A"
    assert values[4] == -1
    assert values[6] == 1
    assert values[9] == Date(13, 9, 98)


@pytest.mark.parametrize(
    "field, expected",
    [
        ("-12.5", FixedFloat(-125, 10)),
        ("+7", FixedFloat(7, 1)),
        ("", FixedFloat(0, 0)),
        (" 5", FixedFloat(5, 1)),
        ("0.9", FixedFloat(9, 10)),
    ],
)
def test_scan_float(field, expected):
    assert scan(f"$GPXXX,{field}", "tf")[1] == expected


@pytest.mark.parametrize("field", ["+", ".", "-.", "1.2.3", "5 ", "1a", "99999999999"])
def test_scan_float_rejects(field):
    with pytest.raises(NmeaParseError):
        scan(f"$GPXXX,{field}", "tf")


def test_scan_float_truncates_extra_precision():
    result = scan("$GPXXX,1.99999999999999", "tf")[1]
    assert result.value <= INT_LEAST32_MAX
    assert str(result.scale).strip("0") == "1"
    assert str(result.value).startswith("1999")


@pytest.mark.parametrize("field, expected", [("42", 42), ("-7", -7), ("", 0), (" 3", 3)])
def test_scan_int(field, expected):
    assert scan(f"$GPXXX,{field}", "ti")[1] == expected


@pytest.mark.parametrize("field", ["4x", "+", "  ", "1.5"])
def test_scan_int_rejects(field):
    with pytest.raises(NmeaParseError):
        scan(f"$GPXXX,{field}", "ti")


@pytest.mark.parametrize("field, expected", [("N", 1), ("E", 1), ("S", -1), ("W", -1), ("", 0)])
def test_scan_direction(field, expected):
    assert scan(f"$GPXXX,{field}", "td")[1] == expected


def test_scan_direction_rejects_unknown():
    with pytest.raises(NmeaParseError):
        scan("$GPXXX,X", "td")


def test_scan_char_and_string():
    assert scan("$GPXXX,A,,hello", "tccs") == ["GPXXX", "A", "", "hello"]


def test_scan_empty_date_and_time():
    assert scan("$GPXXX,,", "tDT") == ["GPXXX", Date(), Time()]


@pytest.mark.parametrize("fmt, field", [("tD", "1309"), ("tT", "12a519"), ("tD", "13o998")])
def test_scan_date_time_reject_short_or_bad(fmt, field):
    with pytest.raises(NmeaParseError):
        scan(f"$GPXXX,{field}", fmt)


def test_scan_fractional_time():
    assert scan("$GPXXX,081836.25", "tT")[1] == Time(8, 18, 36, 250000)
    assert scan("$GPXXX,081836.1234567", "tT")[1].microseconds == 123456


def test_scan_missing_required_field():
    with pytest.raises(NmeaParseError):
        scan("$GPGGA", "ti")


def test_scan_optional_fields_default():
    assert scan("$GPGSV,4,4,13", "tiii;ii") == ["GPGSV", 4, 4, 13, 0, 0]


def test_scan_skip_field():
    assert scan("$GPXXX,1,2", "t_i") == ["GPXXX", 2]


def test_scan_stops_at_checksum():
    assert scan("$GPXXX,1*00", "ti") == ["GPXXX", 1]
    with pytest.raises(NmeaParseError):
        scan("$GPXXX,1*00", "tii")


def test_scan_unknown_format_character():
    with pytest.raises(NmeaParseError):
        scan(GGA, "tq")


@pytest.mark.parametrize("sentence", ["GPGGA,1", "$GP,1", ""])
def test_scan_type_rejects(sentence):
    with pytest.raises(NmeaParseError):
        scan(sentence, "t")


def test_talker_id():
    assert talker_id(GGA) == "GP"
    with pytest.raises(NmeaParseError):
        talker_id("GPGGA")


@pytest.mark.parametrize(
    "sentence, expected",
    [
        (GGA, SentenceId.GGA),
        (RMC, SentenceId.RMC),
        (_frame("GNGBS,170556.00,3.0,2.9,8.3,,,,"), SentenceId.GBS),
        (_frame("GPXYZ,1"), SentenceId.UNKNOWN),
        (GGA.replace("4807", "4808"), SentenceId.INVALID),
        (_frame("GP"), SentenceId.INVALID),
    ],
)
def test_sentence_id(sentence, expected):
    assert sentence_id(sentence, False) is expected


def test_sentence_id_strict_needs_checksum():
    assert sentence_id("$GPGGA,1", False) is SentenceId.GGA
    assert sentence_id("$GPGGA,1", True) is SentenceId.INVALID