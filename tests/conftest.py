import copy

import pytest

from diversification_engine.data.definitions.regions import default_classifier
from diversification_engine.models.portfolio import AnalysisSettings
from tests.fixtures.synthetic_data import (
    SAMPLE_INFLATION_TABLE,
    SAMPLE_MULTICHAIN_PORTFOLIO,
    make_classifier,
)


@pytest.fixture
def settings():
    return AnalysisSettings()


@pytest.fixture
def synthetic_classifier():
    return make_classifier()


@pytest.fixture
def classifier():
    return default_classifier()


@pytest.fixture
def sample_portfolio():
    return copy.deepcopy(SAMPLE_MULTICHAIN_PORTFOLIO)


@pytest.fixture
def sample_inflation():
    return copy.deepcopy(SAMPLE_INFLATION_TABLE)
