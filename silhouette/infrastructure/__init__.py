"""Silhouette Infrastructure Layer.

Services used by the engine:
- ConfigManager: Hierarchical configuration (defaults, YAML files, environment)
- Logger: Structured logging system
"""

from .config_manager import ConfigError
from .config_manager import ConfigManager as Config
from .config_manager import ConfigManager, ConfigSource, ConfigValue, get_config_manager, set_global_config
from .logger import Logger, LogLevel, get_logger, set_global_logger

__all__ = [
    # Logger exports
    "Logger",
    "LogLevel",
    "get_logger",
    "set_global_logger",
    # ConfigManager exports
    "Config",
    "ConfigManager",
    "ConfigError",
    "ConfigSource",
    "ConfigValue",
    "get_config_manager",
    "set_global_config",
]
