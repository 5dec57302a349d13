"""
Sensor Observations

Timestamped raw readings from the two supported sensors.

Measurement vectors:
    LASER: [px, py]                (Cartesian position, meters)
    RADAR: [rho, phi, rho_dot]     (range [m], bearing [rad], range rate [m/s])

Timestamps are integer microseconds.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

import numpy as np


class SensorType(Enum):
    """Observation source."""

    LASER = "L"
    RADAR = "R"

    @property
    def measurement_dim(self) -> int:
        """Length of the raw measurement vector."""
        return 2 if self is SensorType.LASER else 3


@dataclass(frozen=True)
class GroundTruth:
    """
    True object state recorded alongside an observation (evaluation only).

    Attributes:
        px, py: Position [m]
        vx, vy: Velocity components [m/s]
        yaw: Heading [rad]
        yaw_rate: Turn rate [rad/s]
    """

    px: float
    py: float
    vx: float
    vy: float
    yaw: float = 0.0
    yaw_rate: float = 0.0

    def to_array(self) -> np.ndarray:
        """Return [px, py, vx, vy] for RMSE computation."""
        return np.array([self.px, self.py, self.vx, self.vy], dtype=np.float64)


@dataclass(frozen=True)
class Observation:
    """
    A single sensor reading.

    Attributes:
        sensor_type: Which sensor produced the reading
        timestamp: Acquisition time [us]
        raw_measurements: Measurement vector (length depends on sensor_type)
        ground_truth: Optional true state, never read by the filter
    """

    sensor_type: SensorType
    timestamp: int
    raw_measurements: np.ndarray
    ground_truth: Optional[GroundTruth] = None

    def __post_init__(self):
        """Validate the measurement vector and freeze it."""
        z = np.array(self.raw_measurements, dtype=np.float64).reshape(-1)
        expected = self.sensor_type.measurement_dim
        if z.shape[0] != expected:
            raise ValueError(
                f"{self.sensor_type.name} observation needs {expected} values, got {z.shape[0]}"
            )
        if not np.all(np.isfinite(z)):
            raise ValueError(f"{self.sensor_type.name} observation has non-finite values: {z}")

        timestamp = self.timestamp
        if not isinstance(timestamp, (int, np.integer)):
            if not (isinstance(timestamp, (float, np.floating)) and float(timestamp).is_integer()):
                raise ValueError(f"Timestamp must be integer microseconds, got {timestamp!r}")

        z.setflags(write=False)
        object.__setattr__(self, "raw_measurements", z)
        object.__setattr__(self, "timestamp", int(timestamp))

    @classmethod
    def laser(cls, px: float, py: float, timestamp: int, **kwargs) -> "Observation":
        """Build a LASER observation."""
        return cls(SensorType.LASER, timestamp, np.array([px, py]), **kwargs)

    @classmethod
    def radar(
        cls, rho: float, phi: float, rho_dot: float, timestamp: int, **kwargs
    ) -> "Observation":
        """Build a RADAR observation."""
        return cls(SensorType.RADAR, timestamp, np.array([rho, phi, rho_dot]), **kwargs)
