"""
UKF Fusion Simulation Package

Synthetic CTRV scenarios with noisy LIDAR/RADAR observations.
"""

from .synthetic import ScenarioConfig, generate_observations, simulate_truth

__all__ = ["ScenarioConfig", "generate_observations", "simulate_truth"]
