"""The global alarm state machine: buttons, anti-theft and emergency modes."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from enum import Enum

log = logging.getLogger(__name__)

OPENING_ALERT = "Alerte : ouverture détectée !"
MOTION_ALERT = "Alerte : mouvement suspect détecté !"
UNKNOWN_POSITION = "Position inconnue"
EMERGENCY_BUZZER_DELAY = 9.0

PRESSED = 0
RELEASED = 1


class GlobalState(Enum):
    AWAIT = "await"
    EMERGENCY_MODE = "emergency_mode"
    ANTI_THEFT_MODE = "anti_theft_mode"
    ALARMING = "alarming"


class AlarmController:
    """Drive the buzzer and SMS alerts from buttons and sensors.

    ``set_buzzer`` switches the buzzer on (True) or off (False);
    ``send_sms`` sends a text and may raise OSError on failure.
    Button and reed levels are GPIO levels: buttons pull low when pressed,
    the reed switch reads high when the bag is opened.
    """

    def __init__(
        self,
        set_buzzer: Callable[[bool], None],
        send_sms: Callable[[str], None],
        position: str = UNKNOWN_POSITION,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.state = GlobalState.AWAIT
        self.position = position
        self._set_buzzer = set_buzzer
        self._send_sms = send_sms
        self._sleep = sleep

    def _alert(self, message: str) -> None:
        log.warning("%s", message)
        self._set_buzzer(True)
        try:
            self._send_sms(message)
        except OSError as exc:
            log.error("SMS not sent: %s", exc)
        self.state = GlobalState.ALARMING

    def handle_buttons(self, emergency_level: int, antitheft_level: int) -> GlobalState:
        """Apply one poll of the two buttons and return the new state."""
        if emergency_level == PRESSED:
            if self.state is GlobalState.AWAIT:
                log.info("Emergency button pressed, entering emergency mode.")
                self.state = GlobalState.EMERGENCY_MODE
        elif emergency_level == RELEASED:
            if self.state is GlobalState.EMERGENCY_MODE:
                log.info("Emergency button released, leaving emergency mode.")
                self.state = GlobalState.AWAIT

        if antitheft_level == PRESSED:
            if self.state is GlobalState.AWAIT:
                log.info("Anti-theft button pressed, entering anti-theft mode.")
                self.state = GlobalState.ANTI_THEFT_MODE
        elif antitheft_level == RELEASED:
            if self.state in (GlobalState.ANTI_THEFT_MODE, GlobalState.ALARMING):
                log.info("Anti-theft button released, leaving anti-theft mode.")
                self.state = GlobalState.AWAIT
        return self.state

    def antitheft_step(self, reed_level: int, motion_detected: bool) -> bool:
        """Run one anti-theft check and return the updated motion flag."""
        if self.state is GlobalState.ANTI_THEFT_MODE:
            if reed_level == 1:
                self._alert(OPENING_ALERT)
                return motion_detected
            if motion_detected:
                self._alert(MOTION_ALERT)
                return False
        elif self.state is GlobalState.AWAIT:
            self._set_buzzer(False)
            return False
        return motion_detected

    def emergency_step(self) -> bool:
        """In emergency mode send the position and sound the buzzer.

        Returns True when the emergency actions ran.
        """
        if self.state is not GlobalState.EMERGENCY_MODE:
            return False
        try:
            self._send_sms(self.position)
            log.info("Emergency SMS sent with GPS position.")
        except OSError as exc:
            log.error("Emergency SMS not sent: %s", exc)
        self._sleep(EMERGENCY_BUZZER_DELAY)
        self._set_buzzer(True)
        log.info("Buzzer on in emergency mode.")
        return True