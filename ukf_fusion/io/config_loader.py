"""
Filter Config Loader

YAML-based configuration parser for the unscented Kalman filter.

File layout (every key optional, defaults from FilterConfig):

    process_noise:
      std_a: 0.5
      std_yawdd: 0.05
    lidar:
      enabled: true
      std_px: 0.015
      std_py: 0.015
    radar:
      enabled: true
      std_range: 0.03
      std_bearing: 0.003
      std_range_rate: 0.03
    unscented:
      spread_offset: 3
      beta: 2
      kappa: 0
      weight_policy: standard
    numerics:
      huge_variance: 1000
      yaw_rate_epsilon: 0.001
      range_epsilon: 0.0001

Usage:
    loader = ConfigLoader('configs/default.yaml')
    config = loader.get_config()
"""

import os
from typing import Any, Dict, Optional

import yaml

from ..tracking.config import FilterConfig
from ..tracking.sigma_points import WeightPolicy


class ConfigLoader:
    """
    Loads FilterConfig from YAML files.

    Usage:
        loader = ConfigLoader('configs/default.yaml')
        config = loader.get_config()
    """

    def __init__(self, filepath: Optional[str] = None):
        """
        Initialize config loader.

        Args:
            filepath: Path to YAML config file (optional)
        """
        self.filepath = filepath
        self.data: Dict[str, Any] = {}
        self._config: Optional[FilterConfig] = None

        if filepath:
            self.load(filepath)

    def load(self, filepath: str) -> FilterConfig:
        """
        Load configuration from YAML file.

        Args:
            filepath: Path to YAML config file

        Returns:
            Parsed FilterConfig

        Raises:
            FileNotFoundError: If file doesn't exist
            yaml.YAMLError: If YAML parsing fails
            ValueError: If a value is out of range
        """
        if not os.path.exists(filepath):
            raise FileNotFoundError(f"Config file not found: {filepath}")

        self.filepath = filepath

        with open(filepath, "r", encoding="utf-8") as f:
            self.data = yaml.safe_load(f) or {}

        self._config = self.parse(self.data)
        return self._config

    @staticmethod
    def parse(data: Dict[str, Any]) -> FilterConfig:
        """Parse a configuration dictionary into FilterConfig."""
        defaults = FilterConfig()
        process = data.get("process_noise", {}) or {}
        lidar = data.get("lidar", {}) or {}
        radar = data.get("radar", {}) or {}
        unscented = data.get("unscented", {}) or {}
        numerics = data.get("numerics", {}) or {}

        return FilterConfig(
            std_a=float(process.get("std_a", defaults.std_a)),
            std_yawdd=float(process.get("std_yawdd", defaults.std_yawdd)),
            std_laspx=float(lidar.get("std_px", defaults.std_laspx)),
            std_laspy=float(lidar.get("std_py", defaults.std_laspy)),
            use_laser=bool(lidar.get("enabled", defaults.use_laser)),
            std_radr=float(radar.get("std_range", defaults.std_radr)),
            std_radphi=float(radar.get("std_bearing", defaults.std_radphi)),
            std_radrd=float(radar.get("std_range_rate", defaults.std_radrd)),
            use_radar=bool(radar.get("enabled", defaults.use_radar)),
            spread_offset=float(unscented.get("spread_offset", defaults.spread_offset)),
            beta=float(unscented.get("beta", defaults.beta)),
            kappa=float(unscented.get("kappa", defaults.kappa)),
            weight_policy=WeightPolicy(
                unscented.get("weight_policy", defaults.weight_policy.value)
            ),
            huge_variance=float(numerics.get("huge_variance", defaults.huge_variance)),
            yaw_rate_epsilon=float(numerics.get("yaw_rate_epsilon", defaults.yaw_rate_epsilon)),
            range_epsilon=float(numerics.get("range_epsilon", defaults.range_epsilon)),
        )

    def get_config(self) -> FilterConfig:
        """Get parsed configuration (defaults if nothing loaded)."""
        if self._config is None:
            self._config = FilterConfig()
        return self._config


def config_to_dict(config: FilterConfig) -> Dict[str, Any]:
    """Inverse of ConfigLoader.parse, in the YAML file layout."""
    return {
        "process_noise": {"std_a": config.std_a, "std_yawdd": config.std_yawdd},
        "lidar": {
            "enabled": config.use_laser,
            "std_px": config.std_laspx,
            "std_py": config.std_laspy,
        },
        "radar": {
            "enabled": config.use_radar,
            "std_range": config.std_radr,
            "std_bearing": config.std_radphi,
            "std_range_rate": config.std_radrd,
        },
        "unscented": {
            "spread_offset": config.spread_offset,
            "beta": config.beta,
            "kappa": config.kappa,
            "weight_policy": config.weight_policy.value,
        },
        "numerics": {
            "huge_variance": config.huge_variance,
            "yaw_rate_epsilon": config.yaw_rate_epsilon,
            "range_epsilon": config.range_epsilon,
        },
    }


def save_config(config: FilterConfig, filepath: str) -> None:
    """Write a FilterConfig to YAML."""
    with open(filepath, "w", encoding="utf-8") as f:
        yaml.dump(config_to_dict(config), f, default_flow_style=False, sort_keys=False)
