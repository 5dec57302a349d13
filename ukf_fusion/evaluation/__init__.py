"""
UKF Fusion Evaluation Package

Headless filter runs, RMSE and NIS consistency metrics.
"""

from .metrics import NISConsistency, calculate_rmse, nis_consistency, state_to_cartesian
from .runner import FilterRunner, RunResult, StepRecord, monte_carlo_nis

__all__ = [
    "FilterRunner",
    "RunResult",
    "StepRecord",
    "monte_carlo_nis",
    "NISConsistency",
    "calculate_rmse",
    "nis_consistency",
    "state_to_cartesian",
]
