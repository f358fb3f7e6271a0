"""Configuration management."""

import json
from typing import Optional
from pathlib import Path
from dataclasses import dataclass, asdict, fields
from nbody_sim.errors import ParameterError
from nbody_sim.physics.force_calculator import GRAVITATIONAL_CONSTANT, SOFTENING
from nbody_sim.physics.scheduler import DEFAULT_CHUNK_SIZE


@dataclass
class Config:
    """Run configuration not covered by the positional CLI arguments."""
    # Physics constants
    gravitational_constant: float = GRAVITATIONAL_CONSTANT
    softening: float = SOFTENING
    
    # Scheduling (num_threads None: derive from CPU affinity)
    num_threads: Optional[int] = None
    chunk_size: int = DEFAULT_CHUNK_SIZE
    
    # Print momentum/energy drift after the run
    report: bool = False
    
    def __post_init__(self):
        # PyYAML reads exponents without a dot (1e-9) as strings
        try:
            self.gravitational_constant = float(self.gravitational_constant)
            self.softening = float(self.softening)
        except (TypeError, ValueError) as exc:
            raise ParameterError(f"Invalid physics constant: {exc}") from exc
        if self.gravitational_constant <= 0:
            raise ParameterError("gravitational_constant must be positive")
        if self.softening <= 0:
            raise ParameterError("softening must be positive")
        if self.num_threads is not None:
            _check_positive_int("num_threads", self.num_threads)
        _check_positive_int("chunk_size", self.chunk_size)
        if not isinstance(self.report, bool):
            raise ParameterError(f"report must be true or false, got {self.report!r}")


def _check_positive_int(name: str, value):
    if isinstance(value, bool) or not isinstance(value, int):
        raise ParameterError(f"{name} must be an integer, got {value!r}")
    if value <= 0:
        raise ParameterError(f"{name} must be positive")


def load_config(config_path: str) -> Config:
    """Load configuration from file.
    
    Args:
        config_path: Path to config file (.json or .yaml)
        
    Returns:
        Config object

    Raises:
        ParameterError: If the file has unknown keys or invalid values, or
            is YAML and PyYAML is not installed
    """
    config_path = Path(config_path)

    with open(config_path, 'r') as f:
        if config_path.suffix == '.yaml' or config_path.suffix == '.yml':
            try:
                import yaml
            except ImportError as exc:
                raise ParameterError(
                    "YAML config files require PyYAML. Install with: pip install pyyaml"
                ) from exc
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as exc:
                raise ParameterError(f"Invalid YAML in {config_path}: {exc}") from exc
        else:
            try:
                data = json.load(f)
            except json.JSONDecodeError as exc:
                raise ParameterError(f"Invalid JSON in {config_path}: {exc}") from exc
    
    data = data or {}
    if not isinstance(data, dict):
        raise ParameterError(f"Config file {config_path} must hold a mapping")
    known = {field.name for field in fields(Config)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ParameterError(f"Unknown config keys: {unknown}")
    try:
        return Config(**data)
    except TypeError as exc:
        raise ParameterError(f"Invalid config value: {exc}") from exc


def save_config(config: Config, output_path: str):
    """Save configuration to file.
    
    Args:
        config: Config object
        output_path: Output file path (.json or .yaml)
    """
    output_path = Path(output_path)
    data = asdict(config)
    
    with open(output_path, 'w') as f:
        if output_path.suffix == '.yaml' or output_path.suffix == '.yml':
            try:
                import yaml
            except ImportError:
                raise ImportError("YAML support requires PyYAML. Install with: pip install pyyaml")
            yaml.dump(data, f, default_flow_style=False)
        else:
            json.dump(data, f, indent=2)
