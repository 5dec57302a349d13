"""
Belief Initialization

Builds the first belief from a single raw observation.

LIDAR observes position only: speed, heading and yaw rate get the
placeholder variance. RADAR observes range, bearing and range rate: position
and speed uncertainty are obtained by pushing the measurement noise through
the polar-to-Cartesian conversion with a 3-D unscented transform
(lambda = 3 - 3 = 0). The sign of the speed cannot be recovered from a single
radial velocity, so v = |rho_dot|.
"""

import logging

import numpy as np

from .config import FilterConfig
from .observation import Observation, SensorType
from .sigma_points import generate_sigma_points, unscented_covariance, unscented_mean
from .state import STATE_DIM, Belief

logger = logging.getLogger(__name__)

RADAR_INIT_DIM = 3


def _uninformative_belief(config: FilterConfig) -> Belief:
    """Zero mean with placeholder variance on every component."""
    return Belief(
        x=np.zeros(STATE_DIM), P=config.huge_variance * np.eye(STATE_DIM)
    )


def initialize_from_lidar(observation: Observation, config: FilterConfig) -> Belief:
    """
    Initial belief from a LIDAR position fix.

    A fix exactly at the origin is treated as a cold-start sentinel.
    """
    px, py = observation.raw_measurements
    if px * px + py * py == 0:
        logger.info("LIDAR fix at origin, starting from uninformative belief")
        return _uninformative_belief(config)

    x = np.array([px, py, 0.0, 0.0, 0.0])
    P = np.diag(
        [
            config.std_laspx**2,
            config.std_laspy**2,
            config.huge_variance,
            config.huge_variance,
            config.huge_variance,
        ]
    )
    return Belief(x=x, P=P)


def _polar_to_cartesian(points: np.ndarray) -> np.ndarray:
    """[rho, phi, rho_dot] rows to [px, py, |rho_dot|] rows."""
    rho = points[:, 0]
    phi = points[:, 1]
    return np.column_stack([rho * np.cos(phi), rho * np.sin(phi), np.abs(points[:, 2])])


def initialize_from_radar(observation: Observation, config: FilterConfig) -> Belief:
    """
    Initial belief from a RADAR reading.

    A reading with zero range is treated as a cold-start sentinel.
    """
    z = observation.raw_measurements
    if z[0] == 0:
        logger.info("RADAR range is zero, starting from uninformative belief")
        return _uninformative_belief(config)

    sigma_points = generate_sigma_points(
        z, config.radar_noise, spread=config.spread(RADAR_INIT_DIM)
    )
    transformed = _polar_to_cartesian(sigma_points.points)

    # Mean weights are used for both moments here
    weights = sigma_points.mean_weights
    x3 = unscented_mean(transformed, weights)
    P3 = unscented_covariance(transformed, x3, weights)

    x = np.zeros(STATE_DIM)
    x[:RADAR_INIT_DIM] = x3
    P = np.zeros((STATE_DIM, STATE_DIM))
    P[:RADAR_INIT_DIM, :RADAR_INIT_DIM] = P3
    P[3, 3] = P[4, 4] = config.huge_variance
    return Belief(x=x, P=P)


def initialize(observation: Observation, config: FilterConfig) -> Belief:
    """
    Build the first belief from any observation.

    Args:
        observation: First observation received
        config: Filter configuration

    Returns:
        Initial Belief
    """
    if observation.sensor_type is SensorType.LASER:
        belief = initialize_from_lidar(observation, config)
    else:
        belief = initialize_from_radar(observation, config)

    logger.info(
        f"Initialized from {observation.sensor_type.name} at t={observation.timestamp}: "
        f"x={np.array2string(belief.x, precision=4)}"
    )
    return belief
