"""
Measurement Model Test Suite

Test ID | Description                      | Reference            | Tolerance
--------|----------------------------------|----------------------|------------
1       | LIDAR projection                 | z = [px, py]         | Exact
2       | RADAR polar conversion           | rho, atan2, rho_dot  | 1e-12
3       | RADAR near origin                | Clamped denominator  | Finite
"""

import os
import sys

import numpy as np
import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from ukf_fusion.tracking.measurement import (
    RANGE_EPSILON,
    lidar_measurement,
    lidar_noise_covariance,
    measurement_function,
    radar_measurement,
    radar_noise_covariance,
)
from ukf_fusion.tracking.observation import Observation, SensorType

# =============================================================================
# TEST 1: LIDAR
# =============================================================================


class TestLidar:
    def test_projection(self):
        states = np.array([[1.0, 2.0, 3.0, 4.0, 5.0], [-1.0, 0.5, 0.0, 0.0, 0.0]])
        np.testing.assert_array_equal(lidar_measurement(states), [[1.0, 2.0], [-1.0, 0.5]])

    def test_noise(self):
        np.testing.assert_allclose(lidar_noise_covariance(0.1, 0.2), np.diag([0.01, 0.04]))


# =============================================================================
# TEST 2: RADAR
# =============================================================================


class TestRadar:
    def test_single_state(self):
        """Object at (3, 4) moving radially outward at 2 m/s"""
        heading = np.arctan2(4.0, 3.0)
        state = np.array([3.0, 4.0, 2.0, heading, 0.0])

        z = radar_measurement(state)

        assert z.shape == (3,)
        assert z[0] == pytest.approx(5.0)
        assert z[1] == pytest.approx(heading)
        assert z[2] == pytest.approx(2.0)

    def test_tangential_motion(self):
        """Motion perpendicular to line of sight has zero range rate"""
        state = np.array([0.0, 10.0, 5.0, 0.0, 0.0])
        z = radar_measurement(state)

        assert z[1] == pytest.approx(np.pi / 2)
        assert z[2] == pytest.approx(0.0, abs=1e-12)

    def test_batch(self):
        states = np.array([[1.0, 0.0, 1.0, 0.0, 0.0], [-1.0, 0.0, 1.0, 0.0, 0.0]])
        z = radar_measurement(states)

        assert z.shape == (2, 3)
        np.testing.assert_allclose(z[:, 1], [0.0, np.pi])
        np.testing.assert_allclose(z[:, 2], [1.0, -1.0])

    def test_noise(self):
        np.testing.assert_allclose(
            radar_noise_covariance(0.3, 0.03, 0.3), np.diag([0.09, 0.0009, 0.09])
        )


# =============================================================================
# TEST 3: Degenerate Range
# =============================================================================


class TestDegenerateRange:
    def test_origin_is_finite(self):
        z = radar_measurement(np.array([0.0, 0.0, 5.0, 1.0, 0.0]))
        assert np.all(np.isfinite(z))
        assert z[0] == 0.0
        assert z[2] == 0.0

    def test_clamped_denominator(self):
        """Below the clamp the range rate uses RANGE_EPSILON as denominator"""
        px = RANGE_EPSILON / 10
        z = radar_measurement(np.array([px, 0.0, 1.0, 0.0, 0.0]))
        assert z[2] == pytest.approx(px / RANGE_EPSILON)

    def test_measurement_function_dispatch(self):
        state = np.array([3.0, 4.0, 1.0, 0.0, 0.0])
        np.testing.assert_array_equal(measurement_function(SensorType.LASER)(state), [3.0, 4.0])
        assert measurement_function(SensorType.RADAR)(state)[0] == pytest.approx(5.0)


class TestObservation:
    def test_dimension_validated(self):
        with pytest.raises(ValueError):
            Observation(SensorType.LASER, 0, [1.0, 2.0, 3.0])
        with pytest.raises(ValueError):
            Observation(SensorType.RADAR, 0, [1.0, 2.0])

    def test_read_only(self):
        observation = Observation.laser(1.0, 2.0, timestamp=10)
        with pytest.raises(ValueError):
            observation.raw_measurements[0] = 5.0
        assert observation.timestamp == 10

    @pytest.mark.parametrize("values", [[np.nan, 1.0], [1.0, np.inf], [-np.inf, 0.0]])
    def test_non_finite_rejected(self, values):
        with pytest.raises(ValueError):
            Observation(SensorType.LASER, 0, values)

    def test_timestamp_must_be_integral(self):
        with pytest.raises(ValueError):
            Observation.laser(1.0, 2.0, timestamp=1.5)
        with pytest.raises(ValueError):
            Observation.laser(1.0, 2.0, timestamp="100")
        assert Observation.laser(1.0, 2.0, timestamp=np.int64(7)).timestamp == 7
        assert Observation.laser(1.0, 2.0, timestamp=100.0).timestamp == 100
