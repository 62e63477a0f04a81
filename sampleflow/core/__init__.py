"""
Core Infrastructure for sampleflow

Provides configuration loading and logging setup shared by the filter engines.
"""

from .config_manager import (
    ConfigurationManager, ConfigurationError, FilterSettings, Environment,
    get_config_manager, set_config_manager, get_settings, get_effective_settings, reload_settings
)
from .logging_config import configure_logging, LOG_FORMAT

__all__ = [
    'ConfigurationManager',
    'ConfigurationError',
    'FilterSettings',
    'Environment',
    'get_config_manager',
    'set_config_manager',
    'get_settings',
    'get_effective_settings',
    'reload_settings',
    'configure_logging',
    'LOG_FORMAT'
]
