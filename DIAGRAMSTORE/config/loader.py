"""Load configuration from YAML file."""

import os
import yaml
from pathlib import Path
from typing import Any, Dict, Optional


CONFIG_ENV_VAR = "DIAGRAMSTORE_CONFIG"


def find_config_file() -> Path:
    """Find config.yaml, honouring the DIAGRAMSTORE_CONFIG override."""
    override = os.getenv(CONFIG_ENV_VAR)
    if override:
        config_file = Path(override)
    else:
        config_file = Path(__file__).parent / "config.yaml"
    
    if not config_file.exists():
        raise FileNotFoundError(
            f"config.yaml not found at {config_file}. "
            f"Please create the configuration file."
        )
    
    return config_file


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load configuration from config.yaml.
    
    Args:
        path: Explicit config file path. If None, uses find_config_file().
    
    Returns:
        dict: Configuration dictionary
        
    Raises:
        FileNotFoundError: If config.yaml is not found
        yaml.YAMLError: If YAML parsing fails
    """
    config_file = Path(path) if path else find_config_file()
    
    with open(config_file, "r", encoding="utf-8") as f:
        config = yaml.safe_load(f)
    
    return config or {}


def get_config(section: Optional[str] = None) -> Any:
    """
    Get configuration value(s).
    
    Args:
        section: Optional section name (e.g., "storage", "logging")
                 If None, returns entire config
        
    Returns:
        Configuration value or dictionary
    """
    config = load_config()
    
    if section is None:
        return config
    
    return config.get(section, {})
