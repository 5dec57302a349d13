"""
Estimate Exporter

Writes per-observation filter output to CSV for offline analysis.

Columns:
    timestamp, sensor, px, py, v, yaw, yaw_rate, nis
    [, px_gt, py_gt, vx_gt, vy_gt]   (when ground truth is available)
"""

import csv
import os
from datetime import datetime
from typing import List, Sequence

from ..evaluation.runner import StepRecord

BASE_COLUMNS = ["timestamp", "sensor", "px", "py", "v", "yaw", "yaw_rate", "nis"]
TRUTH_COLUMNS = ["px_gt", "py_gt", "vx_gt", "vy_gt"]


def export_estimates_to_csv(records: Sequence[StepRecord], filepath: str) -> int:
    """
    Export filter estimates to CSV.

    Args:
        records: Step records from a filter run
        filepath: Output file path (parent directories are created)

    Returns:
        Number of rows written
    """
    has_truth = any(record.ground_truth is not None for record in records)
    columns: List[str] = BASE_COLUMNS + (TRUTH_COLUMNS if has_truth else [])

    directory = os.path.dirname(filepath)
    if directory:
        os.makedirs(directory, exist_ok=True)

    with open(filepath, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(columns)
        for record in records:
            row = [
                record.timestamp,
                record.sensor_type.value,
                *(f"{value:.6f}" for value in record.x),
                "" if record.nis is None else f"{record.nis:.6f}",
            ]
            if has_truth:
                truth = record.ground_truth
                row += [""] * 4 if truth is None else [f"{v:.6f}" for v in truth.to_array()]
            writer.writerow(row)

    return len(records)


def generate_output_filename(prefix: str = "estimates") -> str:
    """Timestamped CSV filename."""
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return f"{prefix}_{timestamp}.csv"
