"""
Observation File Loader

Reads whitespace separated sensor logs, one observation per line:

    L  px   py   timestamp  [px_gt py_gt vx_gt vy_gt [yaw_gt yawrate_gt]]
    R  rho  phi  rho_dot    timestamp  [px_gt py_gt vx_gt vy_gt [yaw_gt yawrate_gt]]

Timestamps are integer microseconds. Blank lines and lines starting with
'#' are ignored.

Usage:
    loader = ObservationLoader('data/obj_pose-laser-radar-synthetic-input.txt')
    for observation in loader:
        ukf.process_measurement(observation)
"""

import os
from typing import Iterator, List, Optional

from ..tracking.observation import GroundTruth, Observation, SensorType


def parse_line(line: str, line_number: int = 0) -> Optional[Observation]:
    """
    Parse one log line.

    Args:
        line: Raw text line
        line_number: Line number used in error messages

    Returns:
        Observation, or None for blank/comment lines

    Raises:
        ValueError: If the line is malformed
    """
    stripped = line.strip()
    if not stripped or stripped.startswith("#"):
        return None

    fields = stripped.split()
    try:
        sensor_type = SensorType(fields[0])
    except ValueError:
        raise ValueError(f"Line {line_number}: unknown sensor tag '{fields[0]}'") from None

    n_meas = sensor_type.measurement_dim
    if len(fields) < n_meas + 2:
        raise ValueError(
            f"Line {line_number}: {sensor_type.name} record needs {n_meas + 2} fields, "
            f"got {len(fields)}"
        )

    try:
        measurements = [float(value) for value in fields[1 : n_meas + 1]]
        timestamp = int(fields[n_meas + 1])
        truth_values = [float(value) for value in fields[n_meas + 2 :]]
    except ValueError as e:
        raise ValueError(f"Line {line_number}: {e}") from e

    ground_truth = None
    if truth_values:
        if len(truth_values) not in (4, 6):
            raise ValueError(
                f"Line {line_number}: expected 4 or 6 ground truth values, got {len(truth_values)}"
            )
        ground_truth = GroundTruth(*truth_values)

    try:
        return Observation(sensor_type, timestamp, measurements, ground_truth=ground_truth)
    except ValueError as e:
        raise ValueError(f"Line {line_number}: {e}") from e


class ObservationLoader:
    """
    Lazy reader for observation log files.

    Iterating yields Observation objects in file order.
    """

    def __init__(self, filepath: str):
        """
        Args:
            filepath: Path to the log file

        Raises:
            FileNotFoundError: If file doesn't exist
        """
        if not os.path.exists(filepath):
            raise FileNotFoundError(f"Observation file not found: {filepath}")
        self.filepath = filepath

    def __iter__(self) -> Iterator[Observation]:
        with open(self.filepath, "r", encoding="utf-8") as f:
            for line_number, line in enumerate(f, start=1):
                observation = parse_line(line, line_number)
                if observation is not None:
                    yield observation

    def load_all(self) -> List[Observation]:
        """Read the whole file into memory."""
        return list(self)


def write_observations(observations: List[Observation], filepath: str) -> None:
    """Write observations in the log format read by ObservationLoader."""
    with open(filepath, "w", encoding="utf-8") as f:
        for observation in observations:
            fields = [observation.sensor_type.value]
            fields += [repr(float(value)) for value in observation.raw_measurements]
            fields.append(str(observation.timestamp))
            truth = observation.ground_truth
            if truth is not None:
                fields += [
                    repr(float(v))
                    for v in (truth.px, truth.py, truth.vx, truth.vy, truth.yaw, truth.yaw_rate)
                ]
            f.write("\t".join(fields) + "\n")
