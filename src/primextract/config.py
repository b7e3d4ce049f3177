"""
Configuration management for primextract.

Detector parameters are frozen dataclasses built once and shared read-only
by every pipeline stage. YAML files override the defaults per section.
"""

import math
import os
from dataclasses import asdict, dataclass, field, fields, replace

import yaml

from primextract.exceptions import ConfigurationError


@dataclass(frozen=True)
class CornerConfig:
    """Configuration for Harris corner response and feature selection."""
    blur_kernel: int = 5
    block_size: int = 3
    ksize: int = 3
    k: float = 0.04
    max_corners: int = 100
    quality_level: float = 0.01
    min_distance: float = 10.0


@dataclass(frozen=True)
class LineConfig:
    """Configuration for Canny edges and the probabilistic Hough line transform."""
    canny_low: float = 50.0
    canny_high: float = 150.0
    rho: float = 1.0
    theta: float = math.pi / 180.0
    threshold: int = 50
    min_line_length: float = 30.0
    max_line_gap: float = 10.0


@dataclass(frozen=True)
class CircleConfig:
    """Configuration for the Hough gradient circle transform."""
    blur_kernel: int = 9
    blur_sigma: float = 2.0
    dp: float = 1.0
    min_dist: float = 30.0
    param1: float = 50.0
    param2: float = 30.0
    min_radius: int = 5
    max_radius: int = 100


@dataclass(frozen=True)
class ArcConfig:
    """Configuration for the feature-triple arc fitter."""
    min_angle: float = 30.0  # degrees, exclusive
    max_angle: float = 150.0  # degrees, exclusive
    collinear_tolerance: float = 1e-6
    batch_size: int = 65536


@dataclass(frozen=True)
class TracingConfig:
    """Configuration for runtime tracing."""
    enabled: bool = False
    level: str = "INFO"
    file_path: str = None
    json_output: bool = False


@dataclass(frozen=True)
class DetectorConfig:
    """Complete detector configuration."""
    corner: CornerConfig = field(default_factory=CornerConfig)
    line: LineConfig = field(default_factory=LineConfig)
    circle: CircleConfig = field(default_factory=CircleConfig)
    arc: ArcConfig = field(default_factory=ArcConfig)
    tracing: TracingConfig = field(default_factory=TracingConfig)


SECTIONS = ("corner", "line", "circle", "arc", "tracing")


def load_config(config_path=None):
    """
    Load configuration from YAML file.
    
    Falls back to defaults for any missing values.
    """
    config = DetectorConfig()
    
    if config_path and os.path.exists(config_path):
        with open(config_path, "r", encoding="utf-8") as f:
            try:
                yaml_data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Invalid YAML: {e}", config_path=config_path) from e
        
        if not isinstance(yaml_data, dict):
            raise ConfigurationError(
                f"Top level must be a mapping of sections, got {type(yaml_data).__name__}",
                config_path=config_path,
            )
        
        config = _merge_config(config, yaml_data)
    
    return config


def _merge_config(config, yaml_data):
    """Return a new config with YAML sections applied over `config`."""
    updates = {}
    for section in SECTIONS:
        values = yaml_data.get(section)
        if not isinstance(values, dict):
            continue
        current = getattr(config, section)
        known = {f.name for f in fields(current)}
        overrides = {k: v for k, v in values.items() if k in known}
        if overrides:
            updates[section] = replace(current, **overrides)
    
    return replace(config, **updates)


def save_default_config(path):
    """Save default configuration to YAML file for reference."""
    yaml_data = asdict(DetectorConfig())
    
    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(yaml_data, f, default_flow_style=False, sort_keys=False)
