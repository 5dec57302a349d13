"""
UKF Fusion I/O Package

Configuration loading, observation logs and estimate export.
"""

from .config_loader import ConfigLoader, save_config
from .exporter import export_estimates_to_csv
from .observation_loader import ObservationLoader, parse_line, write_observations

__all__ = [
    "ConfigLoader",
    "save_config",
    "ObservationLoader",
    "parse_line",
    "write_observations",
    "export_estimates_to_csv",
]
