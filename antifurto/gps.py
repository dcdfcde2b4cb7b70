"""Assembling NMEA lines from a GPS serial stream and extracting fixes."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from typing import Protocol

from .nmea import parse_gga
from .nmea_scan import NmeaParseError, sentence_id
from .nmea_types import SentenceId, Time

log = logging.getLogger(__name__)

MAX_LINE_LENGTH = 127
READ_SIZE = 127
READ_TIMEOUT = 0.1
POLL_PAUSE = 0.01


class SerialPort(Protocol):
    """Byte source for the GPS receiver."""

    def read(self, max_bytes: int, timeout: float) -> bytes: ...


class NmeaLineAssembler:
    """Collect bytes into NMEA lines split on CR or LF.

    Empty lines are skipped, characters outside printable ASCII are
    dropped, and characters past ``max_length`` on a line are discarded.
    """

    def __init__(self, max_length: int = MAX_LINE_LENGTH) -> None:
        self.max_length = max_length
        self._chars: list[str] = []

    def feed(self, data: Iterable[int]) -> list[str]:
        """Consume ``data`` and return the lines it completed."""
        lines: list[str] = []
        for byte in data:
            if byte in (0x0A, 0x0D):
                if self._chars:
                    lines.append("".join(self._chars))
                    self._chars.clear()
            elif 32 <= byte <= 126 and len(self._chars) < self.max_length:
                self._chars.append(chr(byte))
        return lines


@dataclass(frozen=True, slots=True)
class GpsFix:
    """A position reported by a GGA sentence with a valid fix."""

    latitude: float
    longitude: float
    fix_quality: int
    satellites_tracked: int
    time: Time


def fix_from_line(line: str) -> GpsFix | None:
    """Return the fix carried by a GGA line, or None for anything else."""
    if sentence_id(line, False) is not SentenceId.GGA:
        return None
    try:
        frame = parse_gga(line)
    except NmeaParseError:
        log.warning("Failed to parse GGA")
        return None
    if frame.fix_quality <= 0:
        log.warning("No GPS fix (fix_quality = %d)", frame.fix_quality)
        return None
    fix = GpsFix(
        latitude=frame.latitude.to_float(),
        longitude=frame.longitude.to_float(),
        fix_quality=frame.fix_quality,
        satellites_tracked=frame.satellites_tracked,
        time=frame.time,
    )
    log.info("Location: Lat: %.5f, Lon: %.5f", fix.latitude, fix.longitude)
    return fix


class GpsReader:
    """Poll a serial port for NMEA data; the generators run indefinitely."""

    def __init__(
        self,
        port: SerialPort,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.port = port
        self.assembler = NmeaLineAssembler()
        self._sleep = sleep

    def lines(self) -> Iterator[str]:
        """Yield every complete line received."""
        while True:
            data = self.port.read(READ_SIZE, READ_TIMEOUT)
            if data:
                yield from self.assembler.feed(data)
            self._sleep(POLL_PAUSE)

    def fixes(self) -> Iterator[GpsFix]:
        """Yield every valid fix received."""
        for line in self.lines():
            fix = fix_from_line(line)
            if fix is not None:
                yield fix