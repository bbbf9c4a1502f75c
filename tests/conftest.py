import matplotlib

matplotlib.use("Agg")

import pytest

from lassonet_viz.config import SimulationConfig
from lassonet_viz.engine import initialize_weights


@pytest.fixture
def config():
    return SimulationConfig()


@pytest.fixture
def features(config):
    return initialize_weights(config.num_features, config.hidden_size, config)
