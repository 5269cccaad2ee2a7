"""Configuration management."""

import json
import yaml
from typing import Dict, Any, List, Optional
from pathlib import Path
from dataclasses import dataclass, asdict, fields


@dataclass
class Config:
    """Simulation configuration."""
    # Simulation parameters
    n_bodies: int = 200
    dt: float = 0.1
    steps: int = 1000
    speed_scale: int = 1

    # Preset parameters
    preset: str = "random"
    preset_params: Dict[str, Any] = None

    # Engine parameters
    gravity: float = 1.0
    collision_divisor: float = 1.75
    min_distance: float = 1e-3
    trail_capacity: int = 1024
    trail_threshold: Optional[float] = 2.0

    # Bounded universe
    bounded: bool = False
    bounds: List[float] = None
    reflect_velocity: bool = True

    # Reproducibility
    seed: Optional[int] = None

    # Logging
    log_level: str = "INFO"

    def __post_init__(self):
        if self.preset_params is None:
            self.preset_params = {}
        if self.bounds is None:
            self.bounds = [0.0, 0.0, 800.0, 600.0]
        if len(self.bounds) != 4:
            raise ValueError(f"bounds must be [x0, y0, x1, y1], got {self.bounds}")


def load_config(config_path: str) -> Config:
    """Load configuration from file.

    Args:
        config_path: Path to config file (.json or .yaml)

    Returns:
        Config object
    """
    config_path = Path(config_path)

    with open(config_path, 'r') as f:
        if config_path.suffix in ('.yaml', '.yml'):
            data = yaml.safe_load(f)
        elif config_path.suffix == '.json':
            data = json.load(f)
        else:
            raise ValueError(f"Unsupported config format: {config_path.suffix}. Use .json or .yaml")

    data = data or {}
    known = {f.name for f in fields(Config)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"Unknown config keys: {unknown}. Available: {sorted(known)}")

    return Config(**data)


def save_config(config: Config, output_path: str):
    """Save configuration to file.

    Args:
        config: Config object
        output_path: Output file path (.json or .yaml)
    """
    output_path = Path(output_path)
    data = asdict(config)

    with open(output_path, 'w') as f:
        if output_path.suffix in ('.yaml', '.yml'):
            yaml.safe_dump(data, f, default_flow_style=False)
        elif output_path.suffix == '.json':
            json.dump(data, f, indent=2)
        else:
            raise ValueError(f"Unsupported config format: {output_path.suffix}. Use .json or .yaml")
