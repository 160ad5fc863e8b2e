"""
Configuration loader for YAML-based game configurations.
"""

import logging
from dataclasses import fields
from pathlib import Path
from typing import Optional

import yaml

from .game_config import GameConfig

logger = logging.getLogger(__name__)


def load_config_from_yaml(config_path: str) -> GameConfig:
    """
    Load game configuration from a YAML file.
    
    Args:
        config_path: Path to the YAML configuration file
        
    Returns:
        GameConfig instance with values from YAML file
        
    Raises:
        FileNotFoundError: If the config file doesn't exist
        yaml.YAMLError: If the YAML file is invalid
        ConfigurationError: If a value is invalid
    """
    config_file = Path(config_path)
    
    if not config_file.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")
    
    with open(config_file, 'r') as f:
        config_dict = yaml.safe_load(f)
    
    if config_dict is None:
        return GameConfig()
    
    known = {f.name for f in fields(GameConfig)}
    values = {}
    for key, value in config_dict.items():
        if key in known:
            values[key] = value
        else:
            # Warn about unknown keys but don't fail
            logger.warning("Unknown config key '%s' in %s", key, config_path)
    
    return GameConfig(**values)


def load_config(config_path: Optional[str] = None) -> GameConfig:
    """
    Load configuration from YAML file or return defaults.
    
    Args:
        config_path: Optional path to YAML config file. If None, returns a default config.
        
    Returns:
        GameConfig instance
    """
    if config_path is None:
        return GameConfig()
    
    return load_config_from_yaml(config_path)
