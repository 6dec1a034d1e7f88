"""Configuration - environment settings and YAML analysis constants."""

from .settings import Settings, LogLevel, get_settings, reset_settings
from .loader import Config, DEFAULT_CONFIG_PATH

__all__ = [
    'Settings',
    'LogLevel',
    'get_settings',
    'reset_settings',
    'Config',
    'DEFAULT_CONFIG_PATH',
]
