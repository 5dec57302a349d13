"""
Tracking Module

Unscented Kalman filter for a single CTRV object observed by LIDAR and RADAR.

Components:
    - UnscentedKalmanFilter: Predict/update engine and observation ingestion
    - Belief: Immutable mean/covariance snapshot
    - FilterConfig: Noise and unscented transform tuning
    - Observation / SensorType: Timestamped sensor readings
    - NumericalError: Decomposition or inversion failure

Example:
    >>> from ukf_fusion.tracking import Observation, UnscentedKalmanFilter
    >>> ukf = UnscentedKalmanFilter()
    >>> belief = ukf.process_measurement(Observation.laser(1.0, 1.0, timestamp=0))
"""

from .config import FilterConfig
from .exceptions import NumericalError
from .observation import GroundTruth, Observation, SensorType
from .sigma_points import SigmaPointSet, WeightPolicy, generate_sigma_points
from .state import Belief
from .ukf import Prediction, UnscentedKalmanFilter

__all__ = [
    "UnscentedKalmanFilter",
    "Prediction",
    "Belief",
    "FilterConfig",
    "Observation",
    "GroundTruth",
    "SensorType",
    "SigmaPointSet",
    "WeightPolicy",
    "generate_sigma_points",
    "NumericalError",
]
