"""
Configuration Management for sampleflow
"""

import os
import logging
from pathlib import Path
from typing import Dict, Any, Optional
from enum import Enum

import yaml
from pydantic import BaseModel, ValidationError, field_validator

logger = logging.getLogger('sampleflow.core.config_manager')

class Environment(Enum):
    """Supported deployment environments"""
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    TESTING = "testing"

class ConfigurationError(Exception):
    """Raised when configuration is invalid or cannot be loaded"""
    pass

class FilterSettings(BaseModel):
    """Library-wide defaults for the filter engines"""

    # Engine defaults
    default_precision: str = "float64"
    track_performance: bool = True
    comparison_tolerance: Optional[float] = None

    # Logging Configuration
    log_level: str = "INFO"
    log_file_path: Optional[str] = None
    log_max_bytes: int = 32 * 1024 * 1024  # 32MB
    log_backup_count: int = 5

    @field_validator('default_precision')
    @classmethod
    def validate_precision(cls, v):
        aliases = {'float32': 'float32', 'single': 'float32', 'float64': 'float64', 'double': 'float64'}
        key = str(v).lower()
        if key not in aliases:
            raise ValueError(f'default_precision must be one of {sorted(aliases)}')
        return aliases[key]

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f'log_level must be one of {valid_levels}')
        return v.upper()

    @field_validator('comparison_tolerance')
    @classmethod
    def validate_tolerance(cls, v):
        if v is not None and not v > 0:
            raise ValueError('comparison_tolerance must be positive')
        return v

class ConfigurationManager:
    """
    Loads filter engine settings from layered sources.

    Order of precedence (lowest first): config/default.yaml,
    config/<environment>.yaml, SAMPLEFLOW_* environment variables.
    """

    ENV_MAPPINGS = {
        'SAMPLEFLOW_DEFAULT_PRECISION': 'default_precision',
        'SAMPLEFLOW_TRACK_PERFORMANCE': 'track_performance',
        'SAMPLEFLOW_COMPARISON_TOLERANCE': 'comparison_tolerance',
        'SAMPLEFLOW_LOG_LEVEL': 'log_level',
        'SAMPLEFLOW_LOG_FILE_PATH': 'log_file_path',
    }

    def __init__(self, base_path: Optional[Path] = None):
        self.base_path = Path(base_path) if base_path is not None else Path.cwd()
        self.config_dir = self.base_path / "config"
        self.environment = self._detect_environment()
        self._settings: Optional[FilterSettings] = None

        logger.debug(f"ConfigurationManager initialized for environment: {self.environment.value}")

    def load_settings(self) -> FilterSettings:
        """
        Load and validate settings from all sources.

        Returns:
            Validated settings object

        Raises:
            ConfigurationError: If a source is unreadable or the merged settings are invalid
        """
        config_data = self._load_base_configuration()
        config_data = self._apply_environment_overrides(config_data)
        config_data = self._apply_environment_variables(config_data)

        try:
            self._settings = FilterSettings(**config_data)
        except ValidationError as e:
            logger.error(f"Invalid filter settings: {e}")
            raise ConfigurationError(f"Invalid filter settings: {e}") from e

        logger.debug("Filter settings loaded")
        return self._settings

    def get_settings(self) -> FilterSettings:
        """Get current settings, loading if necessary"""
        if self._settings is None:
            return self.load_settings()
        return self._settings

    def get_settings_or_defaults(self) -> FilterSettings:
        """
        Get current settings, falling back to defaults if the sources are broken.

        A bad config file or environment variable shouldn't stop filters from
        being built; the defaults are installed until reload_settings() is called.
        """
        try:
            return self.get_settings()
        except ConfigurationError as e:
            logger.warning(f"Using default filter settings: {e}")
            self._settings = FilterSettings()
            return self._settings

    def reload_settings(self) -> FilterSettings:
        """Reload settings from sources"""
        self._settings = None
        return self.load_settings()

    def validate_configuration(self, config_data: Dict[str, Any]) -> bool:
        """Check a settings dictionary without installing it"""
        try:
            FilterSettings(**config_data)
            return True
        except ValidationError:
            return False

    def _detect_environment(self) -> Environment:
        """Detect current environment from SAMPLEFLOW_ENVIRONMENT"""
        env_var = os.getenv('SAMPLEFLOW_ENVIRONMENT', '').lower()
        if env_var:
            try:
                return Environment(env_var)
            except ValueError:
                logger.warning(f"Unknown environment '{env_var}', using development")
        return Environment.DEVELOPMENT

    def _load_base_configuration(self) -> Dict[str, Any]:
        """Load base configuration from config/default.yaml"""
        default_config_path = self.config_dir / "default.yaml"
        if default_config_path.exists():
            logger.debug(f"Loading base configuration from {default_config_path}")
            return self._load_yaml_file(default_config_path)
        return {}

    def _apply_environment_overrides(self, config_data: Dict[str, Any]) -> Dict[str, Any]:
        """Apply environment-specific configuration overrides"""
        env_config_path = self.config_dir / f"{self.environment.value}.yaml"
        if env_config_path.exists():
            env_config = self._load_yaml_file(env_config_path)
            config_data = self._deep_merge(config_data, env_config)
            logger.debug(f"Applied environment overrides from {env_config_path}")
        return config_data

    def _apply_environment_variables(self, config_data: Dict[str, Any]) -> Dict[str, Any]:
        """Apply environment variable overrides"""
        for env_var, config_key in self.ENV_MAPPINGS.items():
            env_value = os.getenv(env_var)
            if env_value is None:
                continue

            if config_key == 'track_performance':
                config_data[config_key] = env_value.lower() in ('true', '1', 'yes', 'on')
            elif config_key == 'comparison_tolerance':
                try:
                    config_data[config_key] = float(env_value)
                except ValueError:
                    logger.warning(f"Invalid float value for {env_var}: {env_value}")
            else:
                config_data[config_key] = env_value

            logger.debug(f"Applied environment variable {env_var} -> {config_key}")

        return config_data

    def _load_yaml_file(self, path: Path) -> Dict[str, Any]:
        """Load a YAML mapping from disk"""
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to load YAML file {path}: {e}")
            raise ConfigurationError(f"Failed to load {path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"{path} must contain a mapping, got {type(data).__name__}")
        return data

    def _deep_merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Deep merge two dictionaries"""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result


# Global configuration manager instance
_global_config_manager: Optional[ConfigurationManager] = None

def get_config_manager() -> ConfigurationManager:
    """Get the global configuration manager instance"""
    global _global_config_manager
    if _global_config_manager is None:
        _global_config_manager = ConfigurationManager()
    return _global_config_manager

def set_config_manager(manager: Optional[ConfigurationManager]) -> None:
    """Install a configuration manager as the global one (None to drop it)"""
    global _global_config_manager
    _global_config_manager = manager

def get_settings() -> FilterSettings:
    """Get the current filter settings"""
    return get_config_manager().get_settings()

def get_effective_settings() -> FilterSettings:
    """Get the current filter settings, or defaults when they can't be loaded"""
    return get_config_manager().get_settings_or_defaults()

def reload_settings() -> FilterSettings:
    """Reload the filter settings from sources"""
    return get_config_manager().reload_settings()
