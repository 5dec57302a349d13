"""
Filter Belief

State Vector: [px, py, v, yaw, yaw_rate]^T
    - px, py: Position in Cartesian coordinates (meters)
    - v: Speed magnitude (m/s)
    - yaw: Heading angle (radians)
    - yaw_rate: Turn rate (rad/s)
"""

from dataclasses import dataclass
from typing import Tuple

import numpy as np

STATE_DIM = 5


@dataclass(frozen=True)
class Belief:
    """
    Immutable mean/covariance snapshot.

    Attributes:
        x: State vector (5)
        P: State covariance matrix (5x5)
    """

    x: np.ndarray
    P: np.ndarray

    def __post_init__(self):
        """Copy to read-only float64 arrays and check shapes."""
        x = np.array(self.x, dtype=np.float64).reshape(-1)
        P = np.array(self.P, dtype=np.float64)
        if x.shape != (STATE_DIM,) or P.shape != (STATE_DIM, STATE_DIM):
            raise ValueError(f"Belief must be 5 / 5x5, got {x.shape} / {P.shape}")
        x.setflags(write=False)
        P.setflags(write=False)
        object.__setattr__(self, "x", x)
        object.__setattr__(self, "P", P)

    @property
    def position(self) -> Tuple[float, float]:
        return (float(self.x[0]), float(self.x[1]))

    @property
    def speed(self) -> float:
        return float(self.x[2])

    @property
    def yaw(self) -> float:
        return float(self.x[3])

    @property
    def yaw_rate(self) -> float:
        return float(self.x[4])

    @property
    def velocity(self) -> Tuple[float, float]:
        """Cartesian velocity (vx, vy) from speed and heading."""
        return (self.speed * np.cos(self.yaw), self.speed * np.sin(self.yaw))
