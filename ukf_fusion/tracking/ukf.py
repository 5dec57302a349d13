"""
Unscented Kalman Filter for LIDAR/RADAR Fusion

Tracks a single object with a Constant Turn Rate and Velocity (CTRV) motion
model. Process noise (longitudinal and yaw acceleration) is propagated through
the nonlinear model by augmenting the state with the two noise terms.

State Vector: [px, py, v, yaw, yaw_rate]^T
Augmented:    [px, py, v, yaw, yaw_rate, nu_a, nu_yawdd]^T

Each observation is processed as:
    1. Initialization (first observation only)
    2. Prediction to the observation timestamp (augmented sigma points)
    3. Measurement update for the observation's sensor (if enabled)

Reference:
    - Julier, S. & Uhlmann, J. "Unscented Filtering and Nonlinear Estimation",
      Proc. IEEE, 2004
    - Bar-Shalom, Y. "Estimation with Applications to Tracking and Navigation", 2001
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import numpy as np
from scipy.linalg import LinAlgError, inv

from .config import FilterConfig
from .exceptions import NumericalError
from .initializer import initialize
from .measurement import BEARING_INDEX, measurement_function
from .motion import AUGMENTED_DIM, HEADING_INDEX, normalize_angle, propagate_sigma_points
from .observation import Observation, SensorType
from .sigma_points import (
    SigmaPointSet,
    cross_covariance,
    generate_sigma_points,
    unscented_covariance,
    unscented_mean,
    unscented_transform,
)
from .state import STATE_DIM, Belief

logger = logging.getLogger(__name__)

# Innovation covariances above this condition number are treated as singular
MAX_CONDITION_NUMBER = 1.0 / np.finfo(np.float64).eps


@dataclass(frozen=True)
class Prediction:
    """
    Result of the prediction step.

    Attributes:
        belief: Predicted belief
        sigma_points: Predicted state sigma points (2*7+1 rows of dimension 5)
            with the weights of the augmented set they came from
        dt: Prediction interval [s]
    """

    belief: Belief
    sigma_points: SigmaPointSet
    dt: float


class UnscentedKalmanFilter:
    """
    CTRV Unscented Kalman Filter fusing LIDAR and RADAR observations.

    The belief is replaced, never mutated, on every successful observation.
    A NumericalError leaves belief, timestamp and NIS values untouched.

    Example:
        >>> ukf = UnscentedKalmanFilter(FilterConfig(std_a=0.5))
        >>> ukf.process_measurement(Observation.laser(1.0, 1.0, timestamp=0))
        >>> ukf.process_measurement(Observation.radar(1.5, 0.7, 0.2, timestamp=100000))
        >>> print(ukf.x, ukf.nis_radar)
    """

    def __init__(self, config: Optional[FilterConfig] = None) -> None:
        """
        Initialize the filter.

        Args:
            config: Noise and tuning parameters (defaults if omitted)
        """
        self.config = config or FilterConfig()

        self._belief: Optional[Belief] = None
        self._previous_timestamp: Optional[int] = None
        self._last_prediction: Optional[Prediction] = None
        self._nis: Dict[SensorType, float] = {
            SensorType.LASER: float("nan"),
            SensorType.RADAR: float("nan"),
        }
        self._nis_history: Dict[SensorType, List[float]] = {
            SensorType.LASER: [],
            SensorType.RADAR: [],
        }

    # ------------------------------------------------------------------
    # Query API
    # ------------------------------------------------------------------

    @property
    def is_initialized(self) -> bool:
        return self._belief is not None

    @property
    def belief(self) -> Optional[Belief]:
        return self._belief

    @property
    def x(self) -> np.ndarray:
        """Copy of the current state mean."""
        self._require_initialized()
        return self._belief.x.copy()

    @property
    def P(self) -> np.ndarray:
        """Copy of the current state covariance."""
        self._require_initialized()
        return self._belief.P.copy()

    @property
    def previous_timestamp(self) -> Optional[int]:
        return self._previous_timestamp

    @property
    def last_prediction(self) -> Optional[Prediction]:
        return self._last_prediction

    @property
    def nis_laser(self) -> float:
        """Most recent LIDAR NIS (NaN before the first LIDAR update)."""
        return self._nis[SensorType.LASER]

    @property
    def nis_radar(self) -> float:
        """Most recent RADAR NIS (NaN before the first RADAR update)."""
        return self._nis[SensorType.RADAR]

    @property
    def nis_history(self) -> Dict[SensorType, List[float]]:
        """All NIS values recorded so far, per sensor."""
        return {sensor: list(values) for sensor, values in self._nis_history.items()}

    def _require_initialized(self) -> None:
        if self._belief is None:
            raise RuntimeError("Filter not initialized. Call process_measurement() first.")

    def sensor_enabled(self, sensor_type: SensorType) -> bool:
        if sensor_type is SensorType.LASER:
            return self.config.use_laser
        return self.config.use_radar

    def reset(self) -> None:
        """Forget the belief; the next observation re-initializes."""
        self._belief = None
        self._previous_timestamp = None
        self._last_prediction = None
        for sensor in self._nis:
            self._nis[sensor] = float("nan")
            self._nis_history[sensor].clear()

    # ------------------------------------------------------------------
    # Ingestion
    # ------------------------------------------------------------------

    def process_measurement(self, observation: Observation) -> Belief:
        """
        Incorporate one observation.

        Args:
            observation: Next observation in arrival order

        Returns:
            The belief after this observation

        Raises:
            NumericalError: If prediction or update fails numerically. The
                filter keeps its previous belief and timestamp.
        """
        if not self.is_initialized:
            self._belief = initialize(observation, self.config)
            self._previous_timestamp = observation.timestamp
            return self._belief

        dt = (observation.timestamp - self._previous_timestamp) / 1e6
        if dt < 0:
            logger.warning(
                f"Observation at t={observation.timestamp} is older than "
                f"t={self._previous_timestamp} (dt={dt:.6f} s)"
            )

        nis = None
        try:
            prediction = self.predict(self._belief, dt)
            belief = prediction.belief
            if self.sensor_enabled(observation.sensor_type):
                belief, nis = self.update(prediction, observation)
        except NumericalError as e:
            logger.warning(
                f"Skipping {observation.sensor_type.name} observation at "
                f"t={observation.timestamp}: {e}"
            )
            raise

        self._belief = belief
        self._previous_timestamp = observation.timestamp
        self._last_prediction = prediction
        if nis is not None:
            self._nis[observation.sensor_type] = nis
            self._nis_history[observation.sensor_type].append(nis)

        logger.debug(
            f"t={observation.timestamp} {observation.sensor_type.name} "
            f"x={np.array2string(belief.x, precision=4)} "
            f"P_diag={np.array2string(np.diag(belief.P), precision=4)}"
        )
        return belief

    # ------------------------------------------------------------------
    # Prediction
    # ------------------------------------------------------------------

    def _augment(self, belief: Belief) -> Tuple[np.ndarray, np.ndarray]:
        """Augmented mean (7) and block-diagonal covariance (7x7)."""
        x_aug = np.zeros(AUGMENTED_DIM)
        x_aug[:STATE_DIM] = belief.x

        P_aug = np.zeros((AUGMENTED_DIM, AUGMENTED_DIM))
        P_aug[:STATE_DIM, :STATE_DIM] = belief.P
        P_aug[STATE_DIM:, STATE_DIM:] = self.config.process_noise_covariance
        return x_aug, P_aug

    def predict(self, belief: Belief, dt: float) -> Prediction:
        """
        Predict the belief dt seconds ahead.

        Prediction steps:
            X_aug = sigma points of N([x, 0, 0], diag(P, Q)), lambda = 3 - 7
            X_pred_i = f(X_aug_i, dt)                  (CTRV)
            x_pred = sum Wm_i * X_pred_i
            P_pred = sum Wc_i * d_i d_i^T,   d_i = X_pred_i - x_pred (yaw wrapped)

        Args:
            belief: Current belief
            dt: Time step (seconds)

        Returns:
            Prediction with the predicted belief and sigma points

        Raises:
            NumericalError: If the augmented covariance has no Cholesky factor
                or the predicted belief is not finite
        """
        config = self.config
        x_aug, P_aug = self._augment(belief)

        augmented = generate_sigma_points(
            x_aug,
            P_aug,
            spread=config.spread(AUGMENTED_DIM),
            beta=config.beta,
            kappa=config.kappa,
            policy=config.weight_policy,
        )

        predicted_points = propagate_sigma_points(augmented.points, dt, config.yaw_rate_epsilon)

        x_pred = unscented_mean(predicted_points, augmented.mean_weights, (HEADING_INDEX,))
        P_pred = unscented_covariance(
            predicted_points, x_pred, augmented.covariance_weights, (HEADING_INDEX,)
        )
        P_pred = 0.5 * (P_pred + P_pred.T)
        if not (np.all(np.isfinite(x_pred)) and np.all(np.isfinite(P_pred))):
            raise NumericalError(f"Prediction over dt={dt} produced non-finite belief")

        sigma_points = SigmaPointSet(
            points=predicted_points,
            mean_weights=augmented.mean_weights,
            covariance_weights=augmented.covariance_weights,
            spread=augmented.spread,
        )
        return Prediction(belief=Belief(x=x_pred, P=P_pred), sigma_points=sigma_points, dt=dt)

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------

    def update(self, prediction: Prediction, observation: Observation) -> Tuple[Belief, float]:
        """
        Update a predicted belief with an observation.

        Update equations:
            Z_i = h(X_pred_i)
            z_pred = sum Wm_i * Z_i
            S = sum Wc_i * dz_i dz_i^T + R        (innovation covariance)
            T = sum Wc_i * dx_i dz_i^T            (cross-covariance)
            K = T * S^-1                          (Kalman gain)
            y = z - z_pred                        (innovation)
            x_new = x + K * y
            P_new = P - K * S * K^T
            NIS = y^T * S^-1 * y

        Heading deviations and RADAR bearing deviations are wrapped into (-pi, pi].

        Args:
            prediction: Output of predict()
            observation: Observation at the prediction time

        Returns:
            Tuple of (posterior belief, NIS)

        Raises:
            NumericalError: If S cannot be inverted or the posterior is not finite
        """
        sensor = observation.sensor_type
        sigma_points = prediction.sigma_points
        if sigma_points.dim != STATE_DIM:
            raise ValueError(f"Predicted sigma points must be {STATE_DIM}-D, got {sigma_points.dim}")

        if sensor is SensorType.LASER:
            R = self.config.lidar_noise
            angle_indices: Tuple[int, ...] = ()
        else:
            R = self.config.radar_noise
            angle_indices = (BEARING_INDEX,)

        h = measurement_function(sensor, self.config.range_epsilon)
        x_pred = prediction.belief.x
        P_pred = prediction.belief.P

        Z = h(sigma_points.points)
        z_pred, S = unscented_transform(sigma_points, Z, angle_indices, noise_covariance=R)
        T = cross_covariance(
            sigma_points.points,
            x_pred,
            Z,
            z_pred,
            sigma_points.covariance_weights,
            angle_indices_x=(HEADING_INDEX,),
            angle_indices_z=angle_indices,
        )

        S_inv = self._invert_innovation_covariance(S)
        K = T @ S_inv

        y = observation.raw_measurements - z_pred
        for index in angle_indices:
            y[index] = normalize_angle(y[index])

        x_new = x_pred + K @ y
        P_new = P_pred - K @ S @ K.T
        P_new = 0.5 * (P_new + P_new.T)

        nis = float(y @ S_inv @ y)
        if not (np.all(np.isfinite(x_new)) and np.all(np.isfinite(P_new)) and np.isfinite(nis)):
            raise NumericalError(f"{sensor.name} update produced non-finite belief or NIS")
        return Belief(x=x_new, P=P_new), nis

    @staticmethod
    def _invert_innovation_covariance(S: np.ndarray) -> np.ndarray:
        """Invert S, raising NumericalError when it is singular."""
        if not np.all(np.isfinite(S)):
            raise NumericalError("Innovation covariance contains non-finite values")
        if np.linalg.cond(S) > MAX_CONDITION_NUMBER:
            raise NumericalError("Innovation covariance is singular")
        try:
            return inv(S)
        except LinAlgError as e:
            raise NumericalError(f"Innovation covariance is singular: {e}") from e
