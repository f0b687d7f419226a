"""
Configuration loading for fiducial SLAM.

Bridges:
1. YAML configuration files (config/fiducial_slam.yaml)
2. Pydantic validation model (common/param_models.py)
3. ROS 2 parameter system

Usage:
    from fiducial_slam.config import load_slam_config, validate_slam_params

    # Load from YAML
    params = load_slam_config("/path/to/fiducial_slam.yaml")

    # Validate ROS params against model
    params = validate_slam_params(node)
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional, TYPE_CHECKING

import yaml
from pydantic import ValidationError

from fiducial_slam.common.param_models import SlamParams

if TYPE_CHECKING:
    from rclpy.node import Node

NODE_NAME = "fiducial_slam"


def load_yaml_config(config_path: str | Path) -> Dict[str, Any]:
    """
    Load YAML configuration file.

    Args:
        config_path: Path to YAML file

    Returns:
        Dictionary with configuration values

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If config file is invalid YAML
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r") as f:
        return yaml.safe_load(f) or {}


def merge_configs(*configs: Dict[str, Any]) -> Dict[str, Any]:
    """
    Merge multiple configuration dictionaries (later configs override earlier).
    """
    result: Dict[str, Any] = {}
    for config in configs:
        if config:
            _deep_merge(result, config)
    return result


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> None:
    """Deep merge override dict into base dict (mutates base)."""
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value


def _node_section(full_config: Dict[str, Any]) -> Dict[str, Any]:
    """Extract ros__parameters for this node (named section or /** wildcard)."""
    for key in (NODE_NAME, "/**"):
        section = full_config.get(key)
        if isinstance(section, dict) and "ros__parameters" in section:
            return section["ros__parameters"] or {}
    return {}


def load_slam_config(
    base_path: Optional[str | Path] = None,
    preset_path: Optional[str | Path] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> SlamParams:
    """
    Load and validate configuration from YAML files.

    Args:
        base_path: Path to base configuration YAML (fiducial_slam.yaml)
        preset_path: Optional path to a preset override YAML
        overrides: Optional dictionary of parameter overrides

    Returns:
        Validated SlamParams model

    Raises:
        ValidationError: If configuration is invalid
    """
    base_config: Dict[str, Any] = {}
    if base_path:
        base_config = _node_section(load_yaml_config(base_path))

    preset_config: Dict[str, Any] = {}
    if preset_path:
        preset_config = _node_section(load_yaml_config(preset_path))

    merged = merge_configs(base_config, preset_config, overrides or {})
    return SlamParams(**merged)


def declare_slam_params(node: "Node") -> None:
    """Declare every SlamParams field as a ROS parameter with its model default."""
    defaults = SlamParams()
    for name in SlamParams.model_fields:
        if not node.has_parameter(name):
            node.declare_parameter(name, getattr(defaults, name))


def validate_slam_params(node: "Node") -> SlamParams:
    """
    Validate ROS 2 node parameters against the SlamParams model.

    Raises:
        ValidationError: If parameters are invalid
    """
    values: Dict[str, Any] = {}
    for name in SlamParams.model_fields:
        if node.has_parameter(name):
            values[name] = node.get_parameter(name).value

    try:
        return SlamParams(**values)
    except ValidationError as exc:
        node.get_logger().error(f"Invalid fiducial_slam parameters: {exc}")
        raise


def get_default_config_path() -> Path:
    """Path to the packaged base configuration, relative to the source tree."""
    pkg_root = Path(__file__).parent.parent
    return pkg_root / "config" / "fiducial_slam.yaml"
