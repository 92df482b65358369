"""YAML configuration loader."""
from pathlib import Path

import yaml

from .schemas import IntrospectionConfig


def load_config(config_path: str | Path) -> IntrospectionConfig:
    """
    Load and validate introspection configuration from YAML file.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Validated IntrospectionConfig instance

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If the file is not valid YAML, is empty, does not hold a
            mapping, or fails validation
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path) as f:
            config_dict = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Malformed YAML in {config_path}: {e}") from e

    if config_dict is None:
        raise ValueError(f"Empty configuration file: {config_path}")
    if not isinstance(config_dict, dict):
        raise ValueError(
            f"Configuration in {config_path} must be a mapping, "
            f"got {type(config_dict).__name__}"
        )

    try:
        return IntrospectionConfig.from_dict(config_dict)
    except Exception as e:
        raise ValueError(f"Invalid configuration: {e}") from e
