# tests/conftest.py
import os
import sys

# Ensure project root is importable (so Core.* imports work when running from repo root)
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

import numpy as np
import pytest

@pytest.fixture
def rng():
    return np.random.default_rng(1234)

@pytest.fixture
def spiral(rng):
    from Utils.data_utils import DataHandler
    return DataHandler.create_spiral_data(20, 3, rng=rng)

@pytest.fixture
def layer_factory():
    from Core.layers import DenseLayer
    def make(weights, biases):
        return DenseLayer.from_params(weights, biases)
    return make

@pytest.fixture
def network_factory(rng):
    from Core.models import Network
    def make(sizes=(2, 8, 3), **kwargs):
        kwargs.setdefault("rng", rng)
        return Network(layer_sizes=list(sizes), **kwargs)
    return make
