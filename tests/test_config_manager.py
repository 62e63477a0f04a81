"""
Configuration and logging setup tests
"""

import logging

import numpy as np
import pytest

from sampleflow import FIRFilter, IIRFilter, Precision
from sampleflow.core import (
    ConfigurationManager, ConfigurationError, FilterSettings, Environment,
    configure_logging, set_config_manager, get_settings, get_effective_settings,
    reload_settings
)


def write_config(base_path, name, text):
    config_dir = base_path / "config"
    config_dir.mkdir(exist_ok=True)
    (config_dir / name).write_text(text, encoding='utf-8')


class TestFilterSettings:
    """Test settings model validation"""

    def test_defaults(self):
        settings = FilterSettings()

        assert settings.default_precision == "float64"
        assert settings.track_performance is True
        assert settings.comparison_tolerance is None
        assert settings.log_level == "INFO"

    @pytest.mark.parametrize("alias, expected", [
        ("single", "float32"), ("FLOAT32", "float32"), ("double", "float64")
    ])
    def test_precision_aliases(self, alias, expected):
        assert FilterSettings(default_precision=alias).default_precision == expected

    def test_log_level_normalized(self):
        assert FilterSettings(log_level="debug").log_level == "DEBUG"

    @pytest.mark.parametrize("field, value", [
        ("default_precision", "float16"),
        ("log_level", "LOUD"),
        ("comparison_tolerance", -1.0),
    ])
    def test_invalid_values(self, field, value):
        manager = ConfigurationManager()
        assert manager.validate_configuration({field: value}) is False


class TestConfigurationManager:
    """Test layered configuration loading"""

    def test_no_sources_gives_defaults(self, tmp_path):
        settings = ConfigurationManager(base_path=tmp_path).load_settings()

        assert settings == FilterSettings()

    def test_default_yaml(self, tmp_path):
        write_config(tmp_path, "default.yaml", "default_precision: float32\ntrack_performance: false\n")

        settings = ConfigurationManager(base_path=tmp_path).load_settings()

        assert settings.default_precision == "float32"
        assert settings.track_performance is False

    def test_environment_file_overrides_default(self, tmp_path, monkeypatch):
        write_config(tmp_path, "default.yaml", "log_level: INFO\ndefault_precision: float32\n")
        write_config(tmp_path, "testing.yaml", "log_level: WARNING\n")
        monkeypatch.setenv("SAMPLEFLOW_ENVIRONMENT", "testing")

        manager = ConfigurationManager(base_path=tmp_path)
        settings = manager.load_settings()

        assert manager.environment is Environment.TESTING
        assert settings.log_level == "WARNING"
        assert settings.default_precision == "float32"

    def test_environment_variables_override_files(self, tmp_path, monkeypatch):
        write_config(tmp_path, "default.yaml", "default_precision: float32\n")
        monkeypatch.setenv("SAMPLEFLOW_DEFAULT_PRECISION", "double")
        monkeypatch.setenv("SAMPLEFLOW_TRACK_PERFORMANCE", "no")
        monkeypatch.setenv("SAMPLEFLOW_COMPARISON_TOLERANCE", "1e-3")

        settings = ConfigurationManager(base_path=tmp_path).load_settings()

        assert settings.default_precision == "float64"
        assert settings.track_performance is False
        assert settings.comparison_tolerance == 1e-3

    def test_unknown_environment_falls_back(self, tmp_path, monkeypatch):
        monkeypatch.setenv("SAMPLEFLOW_ENVIRONMENT", "staging")

        assert ConfigurationManager(base_path=tmp_path).environment is Environment.DEVELOPMENT

    def test_invalid_settings_raise(self, tmp_path):
        write_config(tmp_path, "default.yaml", "log_level: LOUD\n")

        with pytest.raises(ConfigurationError):
            ConfigurationManager(base_path=tmp_path).load_settings()

    def test_non_mapping_yaml_raises(self, tmp_path):
        write_config(tmp_path, "default.yaml", "- just\n- a list\n")

        with pytest.raises(ConfigurationError):
            ConfigurationManager(base_path=tmp_path).load_settings()

    def test_malformed_yaml_raises(self, tmp_path):
        write_config(tmp_path, "default.yaml", "log_level: [unclosed\n")

        with pytest.raises(ConfigurationError):
            ConfigurationManager(base_path=tmp_path).load_settings()

    def test_settings_are_cached_until_reload(self, tmp_path):
        manager = ConfigurationManager(base_path=tmp_path)
        set_config_manager(manager)
        first = get_settings()

        write_config(tmp_path, "default.yaml", "log_level: ERROR\n")

        assert get_settings() is first
        assert reload_settings().log_level == "ERROR"

    def test_broken_sources_fall_back_to_defaults_until_reload(self, tmp_path):
        write_config(tmp_path, "default.yaml", "log_level: [unclosed\n")
        manager = ConfigurationManager(base_path=tmp_path)
        set_config_manager(manager)

        fallback = get_effective_settings()

        assert fallback == FilterSettings()
        assert manager.get_settings() is fallback
        with pytest.raises(ConfigurationError):
            reload_settings()

        write_config(tmp_path, "default.yaml", "log_level: ERROR\n")
        assert reload_settings().log_level == "ERROR"
        assert get_effective_settings().log_level == "ERROR"


class TestSettingsDriveFilters:
    """Test that filters pick up configured defaults"""

    def test_default_precision_from_config(self, tmp_path):
        write_config(tmp_path, "default.yaml", "default_precision: single\n")
        set_config_manager(ConfigurationManager(base_path=tmp_path))

        assert FIRFilter([1.0]).precision is Precision.SINGLE
        assert IIRFilter([1.0], [1.0]).precision is Precision.SINGLE
        assert FIRFilter([1.0], precision=Precision.DOUBLE).precision is Precision.DOUBLE

    def test_tolerance_override(self, tmp_path):
        write_config(tmp_path, "default.yaml", "comparison_tolerance: 0.01\n")
        set_config_manager(ConfigurationManager(base_path=tmp_path))

        assert Precision.DOUBLE.tolerance == 0.01

    def test_performance_tracking_disabled(self, tmp_path):
        """Blocks are still counted but not timed"""
        write_config(tmp_path, "default.yaml", "track_performance: false\n")
        set_config_manager(ConfigurationManager(base_path=tmp_path))

        fir = FIRFilter([1.0, 1.0])
        fir.process([1.0, 2.0, 3.0])
        stats = fir.get_performance_stats()

        assert stats['samples_processed'] == 3
        assert stats['total_block_time_ms'] == 0.0

    def test_invalid_config_in_working_directory_falls_back(self, tmp_path, monkeypatch, caplog):
        """A broken config/default.yaml doesn't stop filters from being built"""
        write_config(tmp_path, "default.yaml", "log_level: verbose\n")
        monkeypatch.chdir(tmp_path)
        set_config_manager(None)

        with caplog.at_level(logging.WARNING, logger='sampleflow.core.config_manager'):
            fir = FIRFilter([1.0, 0.5])

        assert fir.precision is Precision.DOUBLE
        assert "Using default filter settings" in caplog.text
        np.testing.assert_array_equal(fir.process([1.0, 0.0]), [1.0, 0.5])

    def test_invalid_environment_variable_falls_back(self, tmp_path, monkeypatch):
        monkeypatch.setenv("SAMPLEFLOW_DEFAULT_PRECISION", "half")
        set_config_manager(ConfigurationManager(base_path=tmp_path))

        iir = IIRFilter([1.0], [1.0, -0.5])

        assert iir.precision is Precision.DOUBLE
        assert iir.process(1.0) == 1.0

    def test_non_mapping_config_with_explicit_precision(self, tmp_path, monkeypatch):
        write_config(tmp_path, "default.yaml", "- a\n- b\n")
        monkeypatch.chdir(tmp_path)
        set_config_manager(None)

        fir = FIRFilter([1.0], precision=Precision.DOUBLE)

        assert fir.precision is Precision.DOUBLE
        assert Precision.SINGLE.tolerance == pytest.approx(np.sqrt(np.finfo(np.float32).eps))


class TestConfigureLogging:
    """Test logging handler setup"""

    @pytest.fixture
    def package_logger(self):
        package_logger = logging.getLogger('sampleflow')
        level = package_logger.level
        yield package_logger
        for handler in list(package_logger.handlers):
            package_logger.removeHandler(handler)
            handler.close()
        package_logger.setLevel(level)

    def test_console_handler(self, package_logger):
        configured = configure_logging(FilterSettings(log_level="WARNING"))

        assert configured is package_logger
        assert package_logger.level == logging.WARNING
        assert len(package_logger.handlers) == 1

    def test_file_handler(self, package_logger, tmp_path):
        log_path = tmp_path / "sampleflow.log"
        configure_logging(FilterSettings(log_level="DEBUG", log_file_path=str(log_path)))

        logging.getLogger('sampleflow.filters.fir_filter').debug("hello from the test")
        for handler in package_logger.handlers:
            handler.flush()

        assert len(package_logger.handlers) == 2
        assert "hello from the test" in log_path.read_text(encoding='utf-8')

    def test_reconfigure_does_not_duplicate_handlers(self, package_logger):
        configure_logging(FilterSettings())
        configure_logging(FilterSettings())

        assert len(package_logger.handlers) == 1

    def test_uses_global_settings_by_default(self, package_logger, tmp_path):
        write_config(tmp_path, "default.yaml", "log_level: ERROR\n")
        set_config_manager(ConfigurationManager(base_path=tmp_path))

        configure_logging()

        assert package_logger.level == logging.ERROR
