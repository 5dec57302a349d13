"""
UKF Fusion Source Package

Single-object state estimation from LIDAR and RADAR with:
- CTRV Unscented Kalman Filter (augmented process noise)
- LIDAR / RADAR measurement updates with NIS diagnostics
- YAML configuration and observation log I/O
- Synthetic scenarios and consistency metrics
"""

from ukf_fusion.tracking import (
    Belief,
    FilterConfig,
    GroundTruth,
    NumericalError,
    Observation,
    SensorType,
    UnscentedKalmanFilter,
    WeightPolicy,
)

__version__ = "1.0.0"
__author__ = "UKF Fusion Contributors"

__all__ = [
    "UnscentedKalmanFilter",
    "Belief",
    "FilterConfig",
    "WeightPolicy",
    "Observation",
    "GroundTruth",
    "SensorType",
    "NumericalError",
]
