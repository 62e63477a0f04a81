"""
Shared fixtures for the sampleflow test suite.
"""

import os
import pytest

from sampleflow import Precision
from sampleflow.core import ConfigurationManager, set_config_manager


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Give every test default settings, untouched by the caller's environment or cwd"""
    for var in list(os.environ):
        if var.startswith('SAMPLEFLOW_'):
            monkeypatch.delenv(var)

    manager = ConfigurationManager(base_path=tmp_path)
    set_config_manager(manager)
    yield manager
    set_config_manager(None)


@pytest.fixture(params=[Precision.SINGLE, Precision.DOUBLE], ids=['float32', 'float64'])
def precision(request):
    """Run a test once per supported sample type"""
    return request.param


@pytest.fixture
def rng():
    """Deterministic random source"""
    import numpy as np
    return np.random.default_rng(1234)
