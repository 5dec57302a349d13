"""
Filter Performance Metrics

Accuracy and consistency statistics for filter evaluation.

Includes:
    - RMSE of Cartesian position/velocity against ground truth
    - NIS (Normalized Innovation Squared) chi-square consistency test

For a consistent filter the NIS of an m-dimensional measurement is
chi-square distributed with m degrees of freedom, so its mean is m and about
(1 - confidence) of the samples exceed chi2.ppf(confidence, m).

References:
    - Bar-Shalom, Y. "Estimation with Applications to Tracking and Navigation",
      2001, Section 5.4
"""

from dataclasses import dataclass
from typing import Sequence, Tuple

import numpy as np
from scipy import stats


@dataclass
class NISConsistency:
    """Container for NIS consistency statistics."""

    n_samples: int
    dof: int
    mean_nis: float
    threshold: float  # chi2.ppf(confidence, dof)
    fraction_above: float  # Share of samples above threshold
    expected_fraction: float  # 1 - confidence
    mean_bounds: Tuple[float, float]  # Two-sided interval for mean_nis

    @property
    def is_consistent(self) -> bool:
        """Mean NIS inside its confidence interval."""
        return self.mean_bounds[0] <= self.mean_nis <= self.mean_bounds[1]


def state_to_cartesian(x: np.ndarray) -> np.ndarray:
    """
    Convert CTRV state(s) to [px, py, vx, vy].

    Args:
        x: State [px, py, v, yaw, yaw_rate], shape (5,) or (N, 5)

    Returns:
        Cartesian states, shape (4,) or (N, 4)
    """
    x = np.asarray(x, dtype=np.float64)
    px, py, v, yaw = x[..., 0], x[..., 1], x[..., 2], x[..., 3]
    return np.stack([px, py, v * np.cos(yaw), v * np.sin(yaw)], axis=-1)


def calculate_rmse(estimations: Sequence[np.ndarray], ground_truth: Sequence[np.ndarray]) -> np.ndarray:
    """
    Root mean squared error per component.

    Args:
        estimations: Estimated vectors, shape (N, k)
        ground_truth: True vectors, shape (N, k)

    Returns:
        RMSE per component, shape (k,)
    """
    est = np.asarray(estimations, dtype=np.float64)
    truth = np.asarray(ground_truth, dtype=np.float64)
    if est.shape != truth.shape or est.size == 0:
        raise ValueError(
            f"Estimations and ground truth must be non-empty and equal shape, "
            f"got {est.shape} and {truth.shape}"
        )
    return np.sqrt(np.mean((est - truth) ** 2, axis=0))


def nis_mean_bounds(n_samples: int, dof: int, confidence: float = 0.95) -> Tuple[float, float]:
    """
    Two-sided interval for the mean of n i.i.d. chi2(dof) samples.

    n * mean ~ chi2(n * dof).
    """
    alpha = 1.0 - confidence
    total_dof = n_samples * dof
    lower = stats.chi2.ppf(alpha / 2, total_dof) / n_samples
    upper = stats.chi2.ppf(1 - alpha / 2, total_dof) / n_samples
    return float(lower), float(upper)


def nis_consistency(
    nis_values: Sequence[float], dof: int, confidence: float = 0.95
) -> NISConsistency:
    """
    Chi-square consistency test of a NIS sequence.

    Args:
        nis_values: NIS samples
        dof: Measurement dimension (2 LIDAR, 3 RADAR)
        confidence: Confidence level

    Returns:
        NISConsistency
    """
    values = np.asarray(nis_values, dtype=np.float64)
    if values.size == 0:
        raise ValueError("No NIS samples")

    threshold = float(stats.chi2.ppf(confidence, dof))
    return NISConsistency(
        n_samples=int(values.size),
        dof=dof,
        mean_nis=float(np.mean(values)),
        threshold=threshold,
        fraction_above=float(np.mean(values > threshold)),
        expected_fraction=1.0 - confidence,
        mean_bounds=nis_mean_bounds(int(values.size), dof, confidence),
    )
