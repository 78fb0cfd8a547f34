"""
Configuration system for GD.

Loads YAML configs with optimizer settings and, optionally, the cluster
layout used by `python -m gd train`.

Example config.yaml:
```
optimizer:
  step_size: 0.5
  num_iterations: 50
  reg_param: 0.01
  mini_batch_fraction: 0.0     # <= 0 selects per-partition sequential descent
  gradient: least_squares
  updater: lazy_squared_l2
  backend: numpy

cluster:
  host: localhost
  port: 9500
  num_workers: 4
  num_partitions: 8
```
"""

import yaml
import os
from typing import Any, Dict, Optional
from dataclasses import dataclass, fields


@dataclass
class OptimizerConfig:
    """Settings of a GradientDescent run."""
    step_size: float = 1.0
    num_iterations: int = 100
    reg_param: float = 0.0
    mini_batch_fraction: float = 1.0
    gradient: str = 'least_squares'
    updater: str = 'simple'
    backend: Optional[str] = None  # None = GD_BACKEND env var, else numpy


@dataclass
class ClusterConfig:
    """Where the data lives. port=None keeps everything in-process."""
    host: str = 'localhost'
    port: Optional[int] = None
    num_workers: int = 0  # Workers to wait for (0 = use whatever registered)
    num_partitions: Optional[int] = None


def _build(cls, section: str, values: Optional[Dict[str, Any]]):
    """Instantiate a config dataclass, rejecting unknown keys."""
    if values is None:
        return cls()
    if not isinstance(values, dict):
        raise ValueError(f"Config section '{section}' must be a mapping")
    known = {f.name for f in fields(cls)}
    unknown = set(values) - known
    if unknown:
        raise ValueError(f"Unknown key(s) in '{section}': {', '.join(sorted(unknown))}")
    return cls(**values)


class Config:
    """
    Global configuration manager for GD.
    """

    SECTIONS = ('optimizer', 'cluster')

    def __init__(self):
        self.optimizer = OptimizerConfig()
        self.cluster = ClusterConfig()
        self._config_file: Optional[str] = None

    def load(self, config_file: str):
        """Load configuration from YAML file."""
        if not os.path.exists(config_file):
            raise FileNotFoundError(f"Config file not found: {config_file}")

        with open(config_file, 'r') as f:
            raw_config = yaml.safe_load(f)

        self._config_file = config_file
        if raw_config is None:
            return
        if not isinstance(raw_config, dict):
            raise ValueError(f"Config file {config_file} must be a mapping of sections")

        unknown = set(raw_config) - set(self.SECTIONS)
        if unknown:
            raise ValueError(f"Unknown config section(s): {', '.join(sorted(unknown))}")

        self.optimizer = _build(OptimizerConfig, 'optimizer', raw_config.get('optimizer'))
        self.cluster = _build(ClusterConfig, 'cluster', raw_config.get('cluster'))

    def load_from_env(self, env_var: str = 'GD_CONFIG'):
        """
        Load configuration from environment variable.

        Args:
            env_var: Environment variable name (default: GD_CONFIG)
        """
        config_path = os.environ.get(env_var, None)
        if config_path:
            from gd.debug import verbose_print
            verbose_print(f"GD: Loading config from {config_path}")
            self.load(config_path)

    @property
    def config_file(self) -> Optional[str]:
        return self._config_file

    def clear(self):
        """Reset to defaults."""
        self.optimizer = OptimizerConfig()
        self.cluster = ClusterConfig()
        self._config_file = None


# Global config instance
_config = Config()


def load_config(config_file: str):
    """Load configuration from YAML file."""
    _config.load(config_file)


def get_config() -> Config:
    """Get the global config instance."""
    return _config
