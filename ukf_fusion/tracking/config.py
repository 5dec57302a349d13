"""
Filter Configuration

Noise parameters and unscented transform tuning constants. Set once before
the first observation and read-only afterwards.
"""

from dataclasses import asdict, dataclass
from typing import Any, Dict

import numpy as np

from .measurement import RANGE_EPSILON, lidar_noise_covariance, radar_noise_covariance
from .motion import YAW_RATE_EPSILON
from .sigma_points import WeightPolicy


@dataclass(frozen=True)
class FilterConfig:
    """
    Complete filter configuration.

    Attributes:
        std_a: Process noise std dev, longitudinal acceleration [m/s²]
        std_yawdd: Process noise std dev, yaw acceleration [rad/s²]
        std_laspx: LIDAR noise std dev, x position [m]
        std_laspy: LIDAR noise std dev, y position [m]
        std_radr: RADAR noise std dev, range [m]
        std_radphi: RADAR noise std dev, bearing [rad]
        std_radrd: RADAR noise std dev, range rate [m/s]
        use_laser: Apply LIDAR updates (initialization always uses either sensor)
        use_radar: Apply RADAR updates
        huge_variance: Placeholder variance for unobservable components
        spread_offset: lambda = spread_offset - n
        beta: Distribution-shape correction of the zeroth covariance weight
        kappa: Secondary scaling for WeightPolicy.SCALED
        weight_policy: Zeroth covariance weight formula
        yaw_rate_epsilon: Straight-line motion threshold [rad/s]
        range_epsilon: Range-rate denominator clamp [m]
    """

    std_a: float = 0.5
    std_yawdd: float = 0.05
    std_laspx: float = 0.015
    std_laspy: float = 0.015
    std_radr: float = 0.03
    std_radphi: float = 0.003
    std_radrd: float = 0.03
    use_laser: bool = True
    use_radar: bool = True
    huge_variance: float = 1000.0
    spread_offset: float = 3.0
    beta: float = 2.0
    kappa: float = 0.0
    weight_policy: WeightPolicy = WeightPolicy.STANDARD
    yaw_rate_epsilon: float = YAW_RATE_EPSILON
    range_epsilon: float = RANGE_EPSILON

    def __post_init__(self):
        """Validate noise magnitudes."""
        for name in (
            "std_a",
            "std_yawdd",
            "std_laspx",
            "std_laspy",
            "std_radr",
            "std_radphi",
            "std_radrd",
            "huge_variance",
        ):
            value = getattr(self, name)
            if not np.isfinite(value) or value <= 0:
                raise ValueError(f"{name} must be positive and finite, got {value}")

        if self.yaw_rate_epsilon < 0 or self.range_epsilon <= 0:
            raise ValueError("yaw_rate_epsilon must be >= 0 and range_epsilon > 0")

        # n + lambda = spread_offset for every dimension n
        if not np.isfinite(self.spread_offset) or self.spread_offset <= 0:
            raise ValueError(f"spread_offset must be positive, got {self.spread_offset}")

        if not isinstance(self.weight_policy, WeightPolicy):
            object.__setattr__(self, "weight_policy", WeightPolicy(self.weight_policy))

        # Smallest distribution is the 3-D RADAR initialization
        if self.weight_policy is WeightPolicy.SCALED and 3 + self.kappa <= 0:
            raise ValueError(f"kappa must exceed -3 for the scaled policy, got {self.kappa}")

    @property
    def process_noise_covariance(self) -> np.ndarray:
        """Q for the augmented noise terms (2x2)."""
        return np.diag([self.std_a**2, self.std_yawdd**2])

    @property
    def lidar_noise(self) -> np.ndarray:
        """LIDAR measurement noise covariance (2x2)."""
        return lidar_noise_covariance(self.std_laspx, self.std_laspy)

    @property
    def radar_noise(self) -> np.ndarray:
        """RADAR measurement noise covariance (3x3)."""
        return radar_noise_covariance(self.std_radr, self.std_radphi, self.std_radrd)

    def spread(self, n: int) -> float:
        """Spread parameter lambda for an n-dimensional distribution."""
        return self.spread_offset - n

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        data = asdict(self)
        data["weight_policy"] = self.weight_policy.value
        return data
