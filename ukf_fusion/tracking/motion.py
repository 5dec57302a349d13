"""
CTRV Motion Model

Constant Turn Rate and Velocity (CTRV) propagation of augmented sigma points.

State vector: [px, py, v, phi, omega]^T
    - px, py: Position [m]
    - v: Speed magnitude [m/s]
    - phi: Heading (yaw) [rad]
    - omega: Yaw rate [rad/s]

Augmented point: [px, py, v, phi, omega, nu_a, nu_yawdd]^T
    - nu_a: Longitudinal acceleration noise [m/s²]
    - nu_yawdd: Yaw acceleration noise [rad/s²]

Process model (omega != 0):
    px' = px + v/omega * (sin(phi + omega*dt) - sin(phi)) + 0.5*dt²*cos(phi)*nu_a
    py' = py + v/omega * (cos(phi) - cos(phi + omega*dt)) + 0.5*dt²*sin(phi)*nu_a
    v'  = v + dt*nu_a
    phi' = phi + omega*dt + 0.5*dt²*nu_yawdd
    omega' = omega + dt*nu_yawdd

Reference:
    - Schubert, R. et al. "Comparison and Evaluation of Advanced Motion Models
      for Vehicle Tracking", FUSION 2008
"""

import numba
import numpy as np

# Below this yaw rate the straight-line closed form is used
YAW_RATE_EPSILON = 1e-3

STATE_DIM = 5
AUGMENTED_DIM = 7

HEADING_INDEX = 3


@numba.jit(nopython=True, cache=True)
def normalize_angle(angle: float) -> float:
    """
    Wrap an angle into (-pi, pi].

    Angles already inside the interval are returned unchanged.

    Args:
        angle: Angle [rad]

    Returns:
        Equivalent angle in (-pi, pi]
    """
    if angle > -np.pi and angle <= np.pi:
        return angle
    wrapped = np.pi - np.mod(np.pi - angle, 2.0 * np.pi)
    if wrapped <= -np.pi:
        wrapped += 2.0 * np.pi
    return wrapped


@numba.jit(nopython=True, cache=True)
def _normalize_column(values: np.ndarray, column: int) -> None:
    """In-place wrap of one column of a 2D array."""
    for i in range(values.shape[0]):
        values[i, column] = normalize_angle(values[i, column])


@numba.jit(nopython=True, cache=True)
def _ctrv_kernel(point: np.ndarray, dt: float, yaw_rate_epsilon: float) -> np.ndarray:
    """
    JIT-compiled CTRV transition of a single augmented point.

    Args:
        point: Augmented state [px, py, v, phi, omega, nu_a, nu_yawdd]
        dt: Time step [s]
        yaw_rate_epsilon: Straight-line threshold on |omega| [rad/s]

    Returns:
        Predicted state [px, py, v, phi, omega]
    """
    px = point[0]
    py = point[1]
    v = point[2]
    phi = point[3]
    omega = point[4]
    nu_a = point[5]
    nu_yawdd = point[6]

    dt2 = dt * dt
    out = np.empty(5)

    if abs(omega) < yaw_rate_epsilon:
        out[0] = px + v * np.cos(phi) * dt
        out[1] = py + v * np.sin(phi) * dt
    else:
        out[0] = px + v / omega * (np.sin(phi + omega * dt) - np.sin(phi))
        out[1] = py + v / omega * (np.cos(phi) - np.cos(phi + omega * dt))

    out[0] += 0.5 * dt2 * np.cos(phi) * nu_a
    out[1] += 0.5 * dt2 * np.sin(phi) * nu_a
    out[2] = v + dt * nu_a
    out[3] = phi + omega * dt + 0.5 * dt2 * nu_yawdd
    out[4] = omega + dt * nu_yawdd
    return out


@numba.jit(nopython=True, cache=True)
def _ctrv_batch(points: np.ndarray, dt: float, yaw_rate_epsilon: float) -> np.ndarray:
    """JIT-compiled CTRV transition of every row of an (N, 7) array."""
    n_points = points.shape[0]
    out = np.empty((n_points, 5))
    for i in range(n_points):
        out[i, :] = _ctrv_kernel(points[i], dt, yaw_rate_epsilon)
    return out


def propagate(
    augmented_point: np.ndarray, dt: float, yaw_rate_epsilon: float = YAW_RATE_EPSILON
) -> np.ndarray:
    """
    Propagate one augmented sigma point through the CTRV model.

    Args:
        augmented_point: [px, py, v, phi, omega, nu_a, nu_yawdd]
        dt: Elapsed time [s]
        yaw_rate_epsilon: |omega| below which straight-line motion is assumed

    Returns:
        Predicted state point [px, py, v, phi, omega]
    """
    point = np.ascontiguousarray(augmented_point, dtype=np.float64)
    if point.shape != (AUGMENTED_DIM,):
        raise ValueError(f"Augmented point must have {AUGMENTED_DIM} elements, got {point.shape}")
    return _ctrv_kernel(point, float(dt), float(yaw_rate_epsilon))


def propagate_sigma_points(
    augmented_points: np.ndarray, dt: float, yaw_rate_epsilon: float = YAW_RATE_EPSILON
) -> np.ndarray:
    """
    Propagate a full set of augmented sigma points.

    Args:
        augmented_points: Array of shape (N, 7)
        dt: Elapsed time [s]
        yaw_rate_epsilon: Straight-line threshold

    Returns:
        Predicted state points, shape (N, 5)
    """
    points = np.ascontiguousarray(augmented_points, dtype=np.float64)
    if points.ndim != 2 or points.shape[1] != AUGMENTED_DIM:
        raise ValueError(f"Expected (N, {AUGMENTED_DIM}) sigma points, got {points.shape}")
    return _ctrv_batch(points, float(dt), float(yaw_rate_epsilon))


def normalize_angle_column(values: np.ndarray, column: int) -> np.ndarray:
    """
    Return a copy of a 2D array with one column wrapped into (-pi, pi].

    Args:
        values: Array of shape (N, M)
        column: Index of the angular column

    Returns:
        Wrapped copy
    """
    wrapped = np.array(values, dtype=np.float64, order="C")
    _normalize_column(wrapped, column)
    return wrapped
