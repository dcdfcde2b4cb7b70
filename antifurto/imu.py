"""MPU6050 inertial sensor access and motion detection."""

from __future__ import annotations

import logging
import math
import struct
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

log = logging.getLogger(__name__)

MPU6050_ADDR = 0x68
MPU6050_PWR_MGMT_1 = 0x6B
MPU6050_ACCEL_XOUT_H = 0x3B
FRAME_LENGTH = 14

ACCEL_LSB_PER_G = 16384.0
GYRO_LSB_PER_DPS = 131.0

DELTA_THRESHOLD = 0.2
MONITORING_DURATION_MS = 10000
CHECK_INTERVAL_MS = 100
TOTAL_READINGS = MONITORING_DURATION_MS // CHECK_INTERVAL_MS
MIN_MOTION_FRACTION = 0.6

# Big-endian: accel x/y/z, temperature, gyro x/y/z.
_FRAME = struct.Struct(">7h")


class I2cBus(Protocol):
    """Minimal I2C master interface used by the sensor driver."""

    def write(self, address: int, data: bytes) -> None: ...

    def write_read(self, address: int, data: bytes, length: int) -> bytes: ...


@dataclass(frozen=True, slots=True)
class ImuReading:
    """Acceleration in g and angular rate in degrees per second."""

    acc_x: float = 0.0
    acc_y: float = 0.0
    acc_z: float = 0.0
    gyro_x: float = 0.0
    gyro_y: float = 0.0
    gyro_z: float = 0.0

    @property
    def acceleration(self) -> tuple[float, float, float]:
        return (self.acc_x, self.acc_y, self.acc_z)


@dataclass(frozen=True, slots=True)
class Calibration:
    """Offsets subtracted from every reading."""

    acc_x: float = 0.0
    acc_y: float = 0.0
    acc_z: float = 0.0
    gyro_x: float = 0.0
    gyro_y: float = 0.0
    gyro_z: float = 0.0


def decode_raw(data: bytes) -> ImuReading:
    """Convert a 14-byte register dump into physical units, without offsets."""
    if len(data) != FRAME_LENGTH:
        raise ValueError(f"expected {FRAME_LENGTH} bytes, got {len(data)}")
    ax, ay, az, _temp, gx, gy, gz = _FRAME.unpack(bytes(data))
    return ImuReading(
        ax / ACCEL_LSB_PER_G,
        ay / ACCEL_LSB_PER_G,
        az / ACCEL_LSB_PER_G,
        gx / GYRO_LSB_PER_DPS,
        gy / GYRO_LSB_PER_DPS,
        gz / GYRO_LSB_PER_DPS,
    )


def calibrate(frames: Iterable[bytes]) -> Calibration:
    """Average raw frames into calibration offsets."""
    sums = [0] * 6
    count = 0
    for frame in frames:
        if len(frame) != FRAME_LENGTH:
            raise ValueError(f"expected {FRAME_LENGTH} bytes, got {len(frame)}")
        ax, ay, az, _temp, gx, gy, gz = _FRAME.unpack(bytes(frame))
        sums = [total + raw for total, raw in zip(sums, (ax, ay, az, gx, gy, gz))]
        count += 1
    if count == 0:
        raise ValueError("calibration needs at least one sample")
    ax, ay, az, gx, gy, gz = (total / count for total in sums)
    return Calibration(
        ax / ACCEL_LSB_PER_G,
        ay / ACCEL_LSB_PER_G,
        az / ACCEL_LSB_PER_G,
        gx / GYRO_LSB_PER_DPS,
        gy / GYRO_LSB_PER_DPS,
        gz / GYRO_LSB_PER_DPS,
    )


class Mpu6050:
    """Driver for an MPU6050 attached to an I2C bus."""

    def __init__(
        self,
        bus: I2cBus,
        address: int = MPU6050_ADDR,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.bus = bus
        self.address = address
        self.calibration = Calibration()
        self._sleep = sleep

    def wake(self) -> None:
        """Take the sensor out of sleep mode."""
        self.bus.write(self.address, bytes([MPU6050_PWR_MGMT_1, 0x00]))

    def read_raw(self) -> bytes:
        """Read the 14 measurement registers starting at ACCEL_XOUT_H."""
        return bytes(
            self.bus.write_read(self.address, bytes([MPU6050_ACCEL_XOUT_H]), FRAME_LENGTH)
        )

    def calibrate(self, samples: int = 100) -> Calibration:
        """Average ``samples`` readings at rest and store them as offsets."""
        frames = []
        for _ in range(samples):
            frames.append(self.read_raw())
            self._sleep(0.01)
        self.calibration = calibrate(frames)
        log.info("MPU6050 calibrated.")
        return self.calibration

    def read(self) -> ImuReading:
        """Return a calibrated reading; all zeros if the bus transfer fails."""
        try:
            raw = decode_raw(self.read_raw())
        except OSError as exc:
            log.error("MPU6050 read failed: %s", exc)
            return ImuReading()
        cal = self.calibration
        return ImuReading(
            raw.acc_x - cal.acc_x,
            raw.acc_y - cal.acc_y,
            raw.acc_z - cal.acc_z,
            raw.gyro_x - cal.gyro_x,
            raw.gyro_y - cal.gyro_y,
            raw.gyro_z - cal.gyro_z,
        )


class MotionState(Enum):
    AT_REST = "at_rest"
    MONITORING = "monitoring"


class MotionDetector:
    """Decide whether sustained movement happened over a window of readings.

    A change of acceleration above ``threshold`` opens a window of ``window``
    readings; the window counts as movement when at least ``min_fraction``
    of its readings exceeded the threshold.
    """

    def __init__(
        self,
        threshold: float = DELTA_THRESHOLD,
        window: int = TOTAL_READINGS,
        min_fraction: float = MIN_MOTION_FRACTION,
    ) -> None:
        self.threshold = threshold
        self.window = window
        self.min_fraction = min_fraction
        self.state = MotionState.AT_REST
        self.motion_detected = False
        self.delta = 0.0
        self._last: tuple[float, float, float] | None = None
        self._readings = 0
        self._moving = 0

    def update(self, reading: ImuReading) -> bool | None:
        """Feed one reading; return the verdict when a window closes, else None."""
        current = reading.acceleration
        if self._last is not None:
            self.delta = math.dist(current, self._last)
        self._last = current

        verdict: bool | None = None
        if self.state is MotionState.AT_REST:
            if self.delta > self.threshold:
                self.state = MotionState.MONITORING
                self._readings = 1
                self._moving = 1
                log.info("Possible movement started (delta=%.4f)", self.delta)
        else:
            self._readings += 1
            if self.delta > self.threshold:
                self._moving += 1
            if self._readings >= self.window:
                verdict = self._moving / self._readings >= self.min_fraction
                self.motion_detected = verdict
                if verdict:
                    log.warning(
                        "Suspicious movement detected (%d/%d)", self._moving, self._readings
                    )
                else:
                    log.info("Movement discarded (%d/%d)", self._moving, self._readings)
                self.state = MotionState.AT_REST
        return verdict