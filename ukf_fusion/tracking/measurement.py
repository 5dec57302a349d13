"""
Measurement Models

Maps CTRV state points into each sensor's measurement space.

LIDAR:
    z = [px, py]

RADAR:
    rho     = sqrt(px² + py²)
    phi     = atan2(py, px)
    rho_dot = (px*v*cos(yaw) + py*v*sin(yaw)) / rho

Near the sensor origin the range used as the range-rate denominator is
clamped to RANGE_EPSILON.
"""

from typing import Callable

import numpy as np

from .observation import SensorType

# Minimum range used as the range-rate denominator [m]
RANGE_EPSILON = 1e-4

LIDAR_DIM = 2
RADAR_DIM = 3

BEARING_INDEX = 1


def lidar_measurement(states: np.ndarray) -> np.ndarray:
    """
    Project state points onto LIDAR measurement space.

    Args:
        states: State points, shape (N, 5) or (5,)

    Returns:
        Positions, shape (N, 2) or (2,)
    """
    states = np.asarray(states, dtype=np.float64)
    return states[..., 0:2].copy()


def radar_measurement(states: np.ndarray, range_epsilon: float = RANGE_EPSILON) -> np.ndarray:
    """
    Project state points onto RADAR measurement space.

    Args:
        states: State points, shape (N, 5) or (5,)
        range_epsilon: Lower clamp on the range-rate denominator

    Returns:
        [rho, phi, rho_dot] per point, shape (N, 3) or (3,)
    """
    states = np.asarray(states, dtype=np.float64)
    px = states[..., 0]
    py = states[..., 1]
    v = states[..., 2]
    yaw = states[..., 3]

    rho = np.sqrt(px * px + py * py)
    phi = np.arctan2(py, px)
    rho_dot = (px * v * np.cos(yaw) + py * v * np.sin(yaw)) / np.maximum(rho, range_epsilon)

    return np.stack([rho, phi, rho_dot], axis=-1)


def lidar_noise_covariance(std_px: float, std_py: float) -> np.ndarray:
    """LIDAR measurement noise covariance R (2x2)."""
    return np.diag([std_px**2, std_py**2])


def radar_noise_covariance(std_range: float, std_bearing: float, std_range_rate: float) -> np.ndarray:
    """RADAR measurement noise covariance R (3x3)."""
    return np.diag([std_range**2, std_bearing**2, std_range_rate**2])


def measurement_function(
    sensor_type: SensorType, range_epsilon: float = RANGE_EPSILON
) -> Callable[[np.ndarray], np.ndarray]:
    """Return h(x) for the given sensor."""
    if sensor_type is SensorType.LASER:
        return lidar_measurement
    return lambda states: radar_measurement(states, range_epsilon)
