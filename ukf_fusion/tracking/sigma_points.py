"""
Sigma Point Generation

Deterministic sigma points and weights for the unscented transform.

For a mean x (n) and covariance P (n x n) with lower Cholesky factor L:
    X_0     = x
    X_i     = x + sqrt(n + lambda) * L[:, i]         i = 1..n
    X_{n+i} = x - sqrt(n + lambda) * L[:, i]

Weights:
    Wm_0 = lambda / (n + lambda)
    Wm_i = 1 / (2 (n + lambda))
    Wc_0 = Wm_0 + correction
    Wc_i = Wm_i

The correction on Wc_0 is selected by WeightPolicy.

Reference:
    - Julier, S. & Uhlmann, J. "Unscented Filtering and Nonlinear Estimation",
      Proc. IEEE, 2004
    - Wan, E. & van der Merwe, R. "The Unscented Kalman Filter for Nonlinear
      Estimation", AS-SPCC 2000
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence, Tuple

import numpy as np
from scipy.linalg import LinAlgError, cholesky

from .exceptions import NumericalError
from .motion import normalize_angle, normalize_angle_column


class WeightPolicy(Enum):
    """Correction term added to the zeroth covariance weight."""

    STANDARD = "standard"  # 1 - alpha² + beta with alpha = 1
    SCALED = "scaled"  # alpha² = (lambda + n) / (n + kappa)


@dataclass(frozen=True)
class SigmaPointSet:
    """
    Sigma points with their weights.

    Attributes:
        points: Array of shape (2n+1, n), one sigma point per row
        mean_weights: Weights for the mean, shape (2n+1,)
        covariance_weights: Weights for the covariance, shape (2n+1,)
        spread: Spread parameter lambda used to build the set
    """

    points: np.ndarray
    mean_weights: np.ndarray
    covariance_weights: np.ndarray
    spread: float

    @property
    def dim(self) -> int:
        return self.points.shape[1]

    @property
    def n_points(self) -> int:
        return self.points.shape[0]


def compute_weights(
    n: int,
    spread: float,
    beta: float = 2.0,
    kappa: float = 0.0,
    policy: WeightPolicy = WeightPolicy.STANDARD,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Compute mean and covariance weights for 2n+1 sigma points.

    Args:
        n: Dimension of the distribution
        spread: Spread parameter lambda (must satisfy n + lambda > 0)
        beta: Distribution-shape correction (2 is optimal for Gaussians)
        kappa: Secondary scaling used by WeightPolicy.SCALED
        policy: Zeroth covariance weight correction

    Returns:
        Tuple of (mean_weights, covariance_weights)
    """
    scale = n + spread
    if scale <= 0:
        raise ValueError(f"n + spread must be positive, got n={n}, spread={spread}")

    mean_weights = np.full(2 * n + 1, 0.5 / scale)
    mean_weights[0] = spread / scale

    if policy is WeightPolicy.SCALED:
        if n + kappa <= 0:
            raise ValueError(f"n + kappa must be positive, got n={n}, kappa={kappa}")
        alpha_sq = scale / (n + kappa)
    else:
        alpha_sq = 1.0

    covariance_weights = mean_weights.copy()
    covariance_weights[0] += 1.0 - alpha_sq + beta

    return mean_weights, covariance_weights


def generate_sigma_points(
    mean: np.ndarray,
    covariance: np.ndarray,
    spread: float,
    beta: float = 2.0,
    kappa: float = 0.0,
    policy: WeightPolicy = WeightPolicy.STANDARD,
) -> SigmaPointSet:
    """
    Generate 2n+1 sigma points for a Gaussian.

    Args:
        mean: Mean vector (n)
        covariance: Covariance matrix (n x n), positive definite
        spread: Spread parameter lambda
        beta: Distribution-shape correction
        kappa: Secondary scaling (WeightPolicy.SCALED only)
        policy: Zeroth covariance weight correction

    Returns:
        SigmaPointSet

    Raises:
        NumericalError: If the covariance has no Cholesky factor
    """
    x = np.asarray(mean, dtype=np.float64).reshape(-1)
    P = np.asarray(covariance, dtype=np.float64)
    n = x.shape[0]
    if P.shape != (n, n):
        raise ValueError(f"Covariance must be {n}x{n}, got {P.shape}")

    mean_weights, covariance_weights = compute_weights(n, spread, beta, kappa, policy)

    try:
        L = cholesky(P, lower=True)
    except (LinAlgError, ValueError) as e:
        raise NumericalError(f"Covariance is not positive definite: {e}") from e

    scaled_L = np.sqrt(n + spread) * L

    points = np.empty((2 * n + 1, n))
    points[0] = x
    points[1 : n + 1] = x + scaled_L.T
    points[n + 1 :] = x - scaled_L.T

    return SigmaPointSet(
        points=points,
        mean_weights=mean_weights,
        covariance_weights=covariance_weights,
        spread=float(spread),
    )


def unscented_mean(
    points: np.ndarray, weights: np.ndarray, angle_indices: Sequence[int] = ()
) -> np.ndarray:
    """
    Weighted mean of sigma points (rows).

    Angular components are averaged as wrapped offsets from the central
    point, so sets straddling the +-pi seam average correctly.
    """
    if not angle_indices:
        return weights @ points

    reference = points[0]
    mean = reference + weights @ _deviations(points, reference, angle_indices)
    for index in angle_indices:
        mean[index] = normalize_angle(mean[index])
    return mean


def _deviations(
    points: np.ndarray, mean: np.ndarray, angle_indices: Sequence[int]
) -> np.ndarray:
    """Row-wise deviations from the mean with angular components wrapped."""
    deviations = points - mean
    for index in angle_indices:
        deviations = normalize_angle_column(deviations, index)
    return deviations


def unscented_covariance(
    points: np.ndarray,
    mean: np.ndarray,
    weights: np.ndarray,
    angle_indices: Sequence[int] = (),
) -> np.ndarray:
    """
    Weighted outer-product covariance of sigma points.

    Args:
        points: Sigma points, shape (N, n)
        mean: Mean to take deviations from (n)
        weights: Covariance weights (N)
        angle_indices: Components whose deviations are wrapped into (-pi, pi]

    Returns:
        Covariance matrix (n x n)
    """
    deviations = _deviations(points, mean, angle_indices)
    return (weights[:, None] * deviations).T @ deviations


def cross_covariance(
    points_x: np.ndarray,
    mean_x: np.ndarray,
    points_z: np.ndarray,
    mean_z: np.ndarray,
    weights: np.ndarray,
    angle_indices_x: Sequence[int] = (),
    angle_indices_z: Sequence[int] = (),
) -> np.ndarray:
    """
    Weighted cross-covariance between two sets of transformed sigma points.

    Returns:
        Cross-covariance matrix (n_x x n_z)
    """
    dx = _deviations(points_x, mean_x, angle_indices_x)
    dz = _deviations(points_z, mean_z, angle_indices_z)
    return (weights[:, None] * dx).T @ dz


def unscented_transform(
    sigma_points: SigmaPointSet,
    transformed_points: np.ndarray,
    angle_indices: Sequence[int] = (),
    noise_covariance: Optional[np.ndarray] = None,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Recombine transformed sigma points into a mean and covariance.

    Args:
        sigma_points: Set the transformed points were derived from (for weights)
        transformed_points: Points after the nonlinear function, shape (N, m)
        angle_indices: Angular components of the transformed space
        noise_covariance: Additive noise covariance (m x m), optional

    Returns:
        Tuple of (mean, covariance)
    """
    mean = unscented_mean(transformed_points, sigma_points.mean_weights, angle_indices)
    covariance = unscented_covariance(
        transformed_points, mean, sigma_points.covariance_weights, angle_indices
    )
    if noise_covariance is not None:
        covariance = covariance + noise_covariance
    return mean, covariance
