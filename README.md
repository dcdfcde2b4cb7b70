# antifurto

Building blocks for an anti-theft backpack: an NMEA 0183 sentence parser,
motion detection from MPU6050 accelerometer readings, a GSM modem driver for
SMS alerts, a GPS line reader, and the alarm state machine that ties the
buttons, reed switch and buzzer together.

The package has no runtime dependencies. Hardware access (I²C, serial ports,
GPIO) is left to the caller: the classes take the transport or callables they
talk to, so the logic runs and tests the same on a desk as on a device.

## Installing

```
pip install .
pip install ".[test]"   # with pytest, to run the test suite
```

## Parsing NMEA sentences

`antifurto.nmea_scan` holds the low-level pieces:

- `checksum(sentence)` – XOR of the characters between the optional leading
  `$` and `*`.
- `check(sentence, strict)` – validates the framing and, when present, the
  checksum; in strict mode a sentence without a checksum is rejected. Only
  trailing `\r` / `\n` may follow the checksum.
- `talker_id(sentence)` – the two-letter talker (`GP`, `GN`, …).
- `sentence_id(sentence, strict)` – the sentence type as a `SentenceId`;
  `SentenceId.INVALID` when validation fails, `SentenceId.UNKNOWN` for types
  it does not know.
- `scan(sentence, format)` – the field scanner the sentence parsers are built
  on; it returns a list with one value per format character.

Malformed input raises `NmeaParseError`, a subclass of `ValueError`.

`antifurto.nmea` parses whole sentences: `parse_gbs`, `parse_rmc`,
`parse_gga`, `parse_gsa`, `parse_gll`, `parse_gst`, `parse_gsv`, `parse_vtg`
and `parse_zda`, plus `parse(sentence, strict)`, which validates the sentence
and dispatches on its type (raising `NmeaParseError` for invalid or
unsupported sentences).

```python
from antifurto.nmea import parse_gga

gga = parse_gga("$GPGGA,123519,4807.038,N,01131.000,E,1,08,0.9,545.4,M,46.9,M,,*47")
gga.fix_quality              # 1
gga.latitude.to_coord()      # about 48.1173 (decimal degrees)
gga.altitude.to_float()      # 545.4
```

Numeric fields are kept as exact fixed-point `FixedFloat` values (a value and
a scale; a scale of 0 means the field was empty). `to_float()` and
`to_coord()` return NaN for empty fields, and `rescale(new_scale)` converts to
another scale, rounding half away from zero. South and west coordinates come
back negative. In VTG sentences a value whose unit letter is missing or wrong
is marked unknown.

Dates and times come back as `Date` and `Time`, with -1 in empty fields.
`get_datetime(date, time)` returns a UTC `datetime` (whole seconds) and
`get_time(date, time)` returns the UNIX time as `(seconds, nanoseconds)`;
both raise `ValueError` when the date or time is empty. Two-digit years below
80 are taken as 20xx, other years below 1900 as 19xx, and four-digit years are
used as they are.

The enums `SentenceId`, `GllStatus`, `FaaMode`, `GsaMode` and `GsaFixType`,
the records `Date`, `Time`, `SatInfo` and the sentence records
(`GgaSentence`, `RmcSentence`, …) live in `antifurto.nmea_types`, together
with `is_field(c)`, which tells whether a character may appear in a field.

## Motion detection

`antifurto.imu.decode_raw(data)` turns a 14-byte MPU6050 register dump into
an `ImuReading` in g and °/s, and `calibrate(frames)` averages raw frames into
a `Calibration`. `Mpu6050` wraps a device on an I²C bus object that offers
`write(address, data)` and `write_read(address, data, length)`; it has
`wake()`, `read_raw()`, `calibrate(samples)` and `read()`. `read()` subtracts
the calibration offsets and returns an all-zero reading if the bus raises
`OSError`.

`MotionDetector.update(reading)` implements the detector: a change in
acceleration above 0.2 g opens a window of 100 readings (ten seconds at
100 ms); if at least 60 % of those readings also moved, movement is
reported. `update` returns the verdict when a window closes and `None`
otherwise; the current phase is a `MotionState`.

## GSM alerts

`GsmModem` speaks AT commands over a serial object that offers
`write(data)` and `read(max_bytes, timeout)`:

- `init()` – checks the modem and the SIM and registers on the network;
  raises `ConnectionError` if the SIM is not ready or registration fails.
- `check_registration()` – one `AT+CREG?` query, returning the updated flag.
- `wait_for_network(attempts)` – polls registration, returning `True` or `False`.
- `wait_for_prompt()` – waits for the `>` prompt.
- `send_sms(number, message)` – sends a text SMS; raises `ConnectionError`
  without network and `TimeoutError` without a prompt.
- `check_signal()` – returns the RSSI, or `None` if the reply cannot be
  parsed; raises `TimeoutError` when the modem does not answer.
- `list_operators()` – returns the raw `AT+COPS=?` reply; raises
  `TimeoutError` when nothing arrives.

The helpers `is_registered(response)`, `parse_rssi(response)` and
`classify_signal(rssi)` (giving a `SignalQuality`) work on raw modem replies.

## GPS

`NmeaLineAssembler.feed(data)` collects serial bytes into complete NMEA
lines, dropping non-printable characters, empty lines and characters beyond
the line length limit. `fix_from_line(line)` returns a `GpsFix` for a GGA
sentence with a fix and `None` otherwise. `GpsReader.lines()` and
`GpsReader.fixes()` are endless generators over a serial stream.

## The alarm

`AlarmController` is the device's state machine over `GlobalState`
(`AWAIT`, `EMERGENCY_MODE`, `ANTI_THEFT_MODE`, `ALARMING`). It takes a
`set_buzzer(on)` callable and a `send_sms(text)` callable; SMS failures
reported as `OSError` are logged and do not stop the alarm.

- `handle_buttons(emergency_level, antitheft_level)` – buttons are active low
  (0 pressed, 1 released). Pressing the emergency button while waiting enters
  emergency mode and releasing it returns to waiting; the anti-theft button
  arms the alarm while waiting, and releasing it returns to waiting from
  anti-theft mode or from alarming.
- `antitheft_step(reed_level, motion_detected)` – while armed, an opened reed
  switch (level 1) or detected motion sounds the buzzer, sends an SMS and
  moves to `ALARMING`; while waiting, it switches the buzzer off. It returns
  the updated motion flag.
- `emergency_step()` – in emergency mode, sends the position text by SMS,
  waits nine seconds and sounds the buzzer; returns whether it acted.

## What it does not do

The package offers no command-line program and no main loop: nothing here
starts the periodic sensor, GPS, button and modem polling or wires the pieces
together. It contains no drivers for I²C, UART or GPIO either; the caller
supplies objects for those.