"""Configuration management"""
import yaml
import os
from pathlib import Path
from typing import Dict, Any, Optional
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

DEFAULT_CONFIG_PATH = "config/config.yaml"

# Values used when neither the YAML file nor the environment sets them
BUCKET_DEFAULTS = {
    "refill_rate": 5,
    "capacity": 5,
    "tick_interval": 1.0,
}

ENV_OVERRIDES = {
    "refill_rate": ("LIMITER_REFILL_RATE", int),
    "capacity": ("LIMITER_CAPACITY", int),
    "tick_interval": ("LIMITER_TICK_INTERVAL", float),
}


class Config:
    """Centralized configuration manager"""

    def __init__(self, config_path: Optional[str] = None):
        if config_path is None:
            config_path = os.getenv("LIMITER_CONFIG", DEFAULT_CONFIG_PATH)
        self.config_path = Path(config_path)
        self.config: Dict[str, Any] = {}
        self.load_config()

    def load_config(self):
        """Load YAML configuration file"""
        if self.config_path.exists():
            with open(self.config_path, 'r', encoding='utf-8') as f:
                self.config = yaml.safe_load(f) or {}
        else:
            self.config = {}

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value using dot notation (e.g., 'limiter.capacity')"""
        keys = key.split('.')
        value = self.config
        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
                if value is None:
                    return default
            else:
                return default
        return value if value is not None else default

    def get_env(self, key: str, default: Any = None) -> str:
        """Get environment variable"""
        return os.getenv(key, default)

    def bucket_settings(self) -> Dict[str, Any]:
        """Bucket parameters from the `limiter` section, environment taking precedence"""
        settings = {}
        for name, default in BUCKET_DEFAULTS.items():
            env_key, cast = ENV_OVERRIDES[name]
            raw = self.get_env(env_key)
            if raw is not None and raw != "":
                try:
                    settings[name] = cast(raw)
                except ValueError:
                    raise ValueError(f"{env_key} must be a {cast.__name__}, got {raw!r}")
            else:
                settings[name] = self.get(f"limiter.{name}", default)
        return settings

    def reload(self):
        """Reload configuration from file"""
        self.load_config()

    def set(self, key: str, value: Any):
        """Set configuration value in memory (does not persist to file)"""
        keys = key.split('.')
        config_dict = self.config
        for k in keys[:-1]:
            if k not in config_dict:
                config_dict[k] = {}
            config_dict = config_dict[k]
        config_dict[keys[-1]] = value


# Global config instance
config = Config()
