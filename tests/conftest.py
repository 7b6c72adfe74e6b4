"""
Pytest configuration for the ED network tests.

Provides small networks and pattern sets shared across test modules.
"""

import matplotlib

matplotlib.use("Agg")

import numpy as np
import pytest

from edla.ed_network import EDNetwork
from edla.pattern_generation import xor_patterns


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "slow: mark test as slow (deselect with '-m \"not slow\"')"
    )


@pytest.fixture
def xor_data():
    """XOR inputs and targets."""
    return xor_patterns()


@pytest.fixture
def small_network():
    """Two logical inputs, one output, four hidden neurons."""
    return EDNetwork(n_input=2, n_output=1, n_hidden=4, seed=7)


@pytest.fixture
def two_output_network():
    """Three logical inputs, two independent sub-networks."""
    return EDNetwork(n_input=3, n_output=2, n_hidden=5, seed=11)


@pytest.fixture
def rng():
    return np.random.RandomState(0)
