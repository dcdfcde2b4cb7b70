"""AT-command control of a GSM modem: registration, signal and SMS."""

from __future__ import annotations

import logging
import re
import time
from collections.abc import Callable
from enum import Enum
from typing import Protocol

log = logging.getLogger(__name__)

RESPONSE_SIZE = 127
OPERATORS_RESPONSE_SIZE = 511
CTRL_Z = b"\x1a"

_RSSI = re.compile(r"\s*\+CSQ:\s*([+-]?\d+)")


class SerialPort(Protocol):
    """Byte transport to the modem."""

    def write(self, data: bytes) -> None: ...

    def read(self, max_bytes: int, timeout: float) -> bytes: ...


class SignalQuality(Enum):
    UNKNOWN = "unknown"
    ACCEPTABLE = "acceptable"
    WEAK = "weak"


def is_registered(response: str) -> bool:
    """Tell whether a +CREG reply reports home or roaming registration."""
    return "+CREG: 0,1" in response or "+CREG: 0,5" in response


def parse_rssi(response: str) -> int | None:
    """Extract the RSSI from a +CSQ reply, or None if it is not there."""
    match = _RSSI.match(response)
    return int(match.group(1)) if match else None


def classify_signal(rssi: int) -> SignalQuality:
    """Rate an RSSI value: 99 is unknown, 10 and above acceptable."""
    if rssi == 99:
        return SignalQuality.UNKNOWN
    if rssi >= 10:
        return SignalQuality.ACCEPTABLE
    return SignalQuality.WEAK


class GsmModem:
    """A modem driven by AT commands over a serial port."""

    def __init__(
        self, port: SerialPort, sleep: Callable[[float], None] = time.sleep
    ) -> None:
        self.port = port
        self.network_registered = False
        self._sleep = sleep

    def _command(self, command: str) -> None:
        self.port.write(command.encode("ascii"))

    def _read(self, timeout: float, max_bytes: int = RESPONSE_SIZE) -> str:
        data = self.port.read(max_bytes, timeout)
        return data.decode("latin-1").split("\0", 1)[0]

    def _log_response(self) -> str:
        response = self._read(1.0)
        if response:
            log.info("Response: %s", response)
        else:
            log.warning("No response received")
        return response

    def init(self) -> None:
        """Check the modem, the SIM and register on the network.

        Raises ConnectionError if the SIM is not ready or registration
        does not happen within 15 attempts.
        """
        for _ in range(3):
            self._command("AT\r")
            if "OK" in self._read(1.0):
                log.info("AT communication OK")
                break
            self._sleep(1.0)

        self._command("AT+CPIN?\r")
        if "READY" not in self._read(1.0):
            raise ConnectionError("SIM card not ready or PIN required")

        for attempt in range(1, 16):
            self._command("AT+CREG?\r")
            response = self._read(1.0)
            if response:
                log.info("CREG: %s", response)
                if is_registered(response):
                    self.network_registered = True
                    log.info("Registered on the cellular network")
                    return
            log.warning("Waiting for network registration (%d)...", attempt)
            self._sleep(2.0)
        raise ConnectionError("network registration failed after several attempts")

    def check_registration(self) -> bool:
        """Query registration once and return the updated flag.

        Without a reply the previous state is kept.
        """
        self._command("AT+CREG?\r")
        response = self._read(1.0)
        if response:
            log.info("CREG: %s", response)
            self.network_registered = is_registered(response)
            if not self.network_registered:
                log.warning("Still searching for network...")
        else:
            log.warning("No response from modem")
        return self.network_registered

    def wait_for_network(self, attempts: int = 10) -> bool:
        """Poll registration up to ``attempts`` times."""
        for _ in range(attempts):
            self._command("AT+CREG?\r")
            self._sleep(1.0)
            response = self._read(0.5)
            if response:
                log.info("CREG: %s", response)
                if is_registered(response):
                    return True
        log.error("Network registration failed")
        return False

    def wait_for_prompt(self) -> bool:
        """Wait for the '>' prompt that precedes an SMS body."""
        response = self._read(3.0)
        if not response:
            return False
        log.info("Prompt: %s", response)
        return ">" in response

    def send_sms(self, number: str, message: str) -> None:
        """Send ``message`` as a text SMS to ``number``.

        Raises ConnectionError without network, TimeoutError without prompt.
        """
        self._command("AT\r")
        self._log_response()
        self._command("AT+CSQ\r")
        self._log_response()

        if not self.wait_for_network():
            raise ConnectionError("cannot send SMS: no network")

        self._command("AT+CMGF=1\r")
        self._log_response()

        self._command(f'AT+CMGS="{number}"\r')
        if not self.wait_for_prompt():
            raise TimeoutError("no '>' prompt for the message body")

        self.port.write(message.encode("utf-8"))
        self.port.write(CTRL_Z)
        self._log_response()
        log.info("SMS sent: %s", message)

    def check_signal(self) -> int | None:
        """Query signal strength; return the RSSI or None if unparseable.

        Raises TimeoutError when the modem does not answer.
        """
        self._command("AT+CSQ\r")
        response = self._read(2.0)
        if not response:
            raise TimeoutError("timeout reading AT+CSQ response")
        log.info("AT+CSQ response: %s", response)
        rssi = parse_rssi(response)
        if rssi is None:
            log.warning("Could not parse RSSI")
            return None
        quality = classify_signal(rssi)
        log.info("Signal quality (RSSI): %d, %s", rssi, quality.value)
        return rssi

    def list_operators(self) -> str:
        """Ask for available operators; return the raw reply.

        Raises TimeoutError when nothing arrives within 30 seconds.
        """
        log.info("Requesting operator list...")
        self._command("AT+COPS=?\r")
        response = self._read(30.0, OPERATORS_RESPONSE_SIZE)
        if not response:
            raise TimeoutError("no COPS response")
        log.info("COPS response: %s", response)
        return response