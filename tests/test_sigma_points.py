"""
Sigma Point Test Suite

Tests for sigma point generation, weights and unscented recombination.

Test ID | Description                         | Reference              | Tolerance
--------|-------------------------------------|------------------------|------------
1       | Mean/covariance round trip          | Julier & Uhlmann 2004  | 1e-9 rel
2       | Mean weights sum to one             | Wan & van der Merwe    | 1e-12
3       | Zeroth covariance weight policies   | Wan & van der Merwe    | Exact
4       | Non-positive-definite covariance    | Cholesky existence     | Raises

References:
    - Julier, S. & Uhlmann, J. (2004). "Unscented Filtering and Nonlinear Estimation"
    - Wan, E. & van der Merwe, R. (2000). "The Unscented Kalman Filter for Nonlinear Estimation"
"""

import os
import sys

import numpy as np
import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from ukf_fusion.tracking.exceptions import NumericalError
from ukf_fusion.tracking.sigma_points import (
    WeightPolicy,
    compute_weights,
    cross_covariance,
    generate_sigma_points,
    unscented_covariance,
    unscented_mean,
    unscented_transform,
)


def random_covariance(rng: np.random.Generator, n: int) -> np.ndarray:
    A = rng.normal(size=(n, n))
    return A @ A.T + n * np.eye(n)


# =============================================================================
# TEST 1: Round Trip
# =============================================================================


class TestRoundTrip:
    """
    Untransformed sigma points must reproduce the input moments.
    """

    @pytest.mark.parametrize("n", [2, 3, 5, 7])
    @pytest.mark.parametrize("spread_offset", [3.0, 1.0, 10.0])
    def test_mean_and_covariance_reconstructed(self, n, spread_offset):
        """Weighted mean/covariance equal the input mean/covariance"""
        rng = np.random.default_rng(n)
        mean = rng.normal(scale=10.0, size=n)
        covariance = random_covariance(rng, n)
        spread = spread_offset - n
        sigma = generate_sigma_points(mean, covariance, spread)

        reconstructed_mean = unscented_mean(sigma.points, sigma.mean_weights)
        reconstructed_cov = unscented_covariance(
            sigma.points, reconstructed_mean, sigma.covariance_weights
        )

        np.testing.assert_allclose(reconstructed_mean, mean, rtol=1e-9, atol=1e-9)
        np.testing.assert_allclose(reconstructed_cov, covariance, rtol=1e-9, atol=1e-9)

    def test_point_layout(self):
        """Point 0 is the mean and points i, n+i are symmetric about it"""
        mean = np.array([1.0, -2.0, 0.5])
        covariance = np.diag([4.0, 1.0, 9.0])
        sigma = generate_sigma_points(mean, covariance, spread=0.0)

        assert sigma.points.shape == (7, 3)
        np.testing.assert_array_equal(sigma.points[0], mean)
        np.testing.assert_allclose(sigma.points[1:4] + sigma.points[4:7], 2 * mean)
        # sqrt(n + lambda) * sqrt(var) along each axis
        np.testing.assert_allclose(sigma.points[1] - mean, [np.sqrt(3) * 2.0, 0.0, 0.0])

    def test_identity_transform(self):
        """unscented_transform of the identity returns the input moments plus noise"""
        rng = np.random.default_rng(7)
        mean = rng.normal(size=4)
        covariance = random_covariance(rng, 4)
        noise = 0.1 * np.eye(4)
        sigma = generate_sigma_points(mean, covariance, spread=-1.0)

        ut_mean, ut_cov = unscented_transform(sigma, sigma.points, noise_covariance=noise)

        np.testing.assert_allclose(ut_mean, mean, atol=1e-10)
        np.testing.assert_allclose(ut_cov, covariance + noise, rtol=1e-9)

    def test_cross_covariance_of_identity(self):
        """Cross-covariance of a set with itself is its covariance"""
        mean = np.array([0.0, 3.0])
        covariance = np.array([[2.0, 0.5], [0.5, 1.0]])
        sigma = generate_sigma_points(mean, covariance, spread=1.0)

        T = cross_covariance(
            sigma.points, mean, sigma.points, mean, sigma.covariance_weights
        )
        np.testing.assert_allclose(T, covariance, rtol=1e-9)

    def test_angle_deviation_wrapped(self):
        """Deviations across the +-pi seam are small once wrapped"""
        points = np.array([[np.pi - 0.1], [-np.pi + 0.1]])
        weights = np.array([0.5, 0.5])
        mean = np.array([np.pi])

        raw = unscented_covariance(points, mean, weights)
        wrapped = unscented_covariance(points, mean, weights, angle_indices=(0,))

        assert raw[0, 0] > 10.0
        assert wrapped[0, 0] == pytest.approx(0.01, abs=1e-9)

    def test_angle_mean_across_seam(self):
        """Mean of angles straddling +-pi stays at pi, not 0"""
        points = np.array([[np.pi], [np.pi - 0.1], [-np.pi + 0.1]])
        weights = np.array([0.0, 0.5, 0.5])

        assert unscented_mean(points, weights)[0] == pytest.approx(0.0, abs=1e-12)
        assert unscented_mean(points, weights, angle_indices=(0,))[0] == pytest.approx(np.pi)


# =============================================================================
# TEST 2: Weight Normalization
# =============================================================================


class TestWeights:
    """Mean weights sum to one for any spread > -n."""

    @pytest.mark.parametrize("n", [1, 2, 3, 5, 7])
    @pytest.mark.parametrize("offset", [0.5, 1.0, 3.0, 7.5])
    def test_mean_weights_sum_to_one(self, n, offset):
        spread = offset - n
        mean_weights, covariance_weights = compute_weights(n, spread)

        assert len(mean_weights) == 2 * n + 1
        assert np.sum(mean_weights) == pytest.approx(1.0, abs=1e-12)
        np.testing.assert_array_equal(covariance_weights[1:], mean_weights[1:])

    def test_augmented_weights(self):
        """n = 7, lambda = 3 - 7: Wm0 = -4/3, Wmi = 1/6"""
        mean_weights, _ = compute_weights(7, -4.0)

        assert mean_weights[0] == pytest.approx(-4.0 / 3.0)
        np.testing.assert_allclose(mean_weights[1:], 1.0 / 6.0)

    def test_invalid_spread(self):
        with pytest.raises(ValueError):
            compute_weights(3, -3.0)


# =============================================================================
# TEST 3: Covariance Weight Policies
# =============================================================================


class TestWeightPolicy:
    """Zeroth covariance weight correction."""

    def test_standard_policy(self):
        """STANDARD: Wc0 = Wm0 + beta"""
        mean_weights, covariance_weights = compute_weights(
            7, -4.0, beta=2.0, policy=WeightPolicy.STANDARD
        )
        assert covariance_weights[0] == pytest.approx(mean_weights[0] + 2.0)

    def test_scaled_policy(self):
        """SCALED: Wc0 = Wm0 + 1 - (lambda + n)/(n + kappa) + beta"""
        mean_weights, covariance_weights = compute_weights(
            7, -4.0, beta=2.0, kappa=0.0, policy=WeightPolicy.SCALED
        )
        expected = -4.0 / 3.0 + 1.0 - 3.0 / 7.0 + 2.0
        assert covariance_weights[0] == pytest.approx(expected)
        assert mean_weights[0] == pytest.approx(-4.0 / 3.0)

    def test_policies_agree_when_alpha_is_one(self):
        """SCALED reduces to STANDARD when (lambda + n) = (n + kappa)"""
        _, standard = compute_weights(5, 1.0, beta=2.0, policy=WeightPolicy.STANDARD)
        _, scaled = compute_weights(5, 1.0, beta=2.0, kappa=1.0, policy=WeightPolicy.SCALED)
        np.testing.assert_allclose(scaled, standard)


# =============================================================================
# TEST 4: Decomposition Failure
# =============================================================================


class TestDecompositionFailure:
    """Covariances without a Cholesky factor raise NumericalError."""

    def test_indefinite_covariance(self):
        covariance = np.array([[1.0, 2.0], [2.0, 1.0]])
        with pytest.raises(NumericalError):
            generate_sigma_points(np.zeros(2), covariance, spread=1.0)

    def test_non_finite_covariance(self):
        covariance = np.array([[np.nan, 0.0], [0.0, 1.0]])
        with pytest.raises(NumericalError):
            generate_sigma_points(np.zeros(2), covariance, spread=1.0)

    def test_shape_mismatch(self):
        with pytest.raises(ValueError):
            generate_sigma_points(np.zeros(3), np.eye(2), spread=0.0)
