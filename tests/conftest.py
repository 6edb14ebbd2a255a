"""Shared fixtures for the spatial market tests."""

import pytest
import numpy as np

from spatial_market.config import SimulationConfig
from spatial_market.model import CostModel, Market, MarketGrid, Seller


def build_market(width, height, sellers, transport_cost=1.0, price_sensitivity=1.0,
                 max_price=20, revenue_unit="price", price_term="raw"):
    """Market from a list of (x, y, price) or (x, y, price, aggressiveness)."""
    seller_objs = []
    for i, entry in enumerate(sellers):
        agg = entry[3] if len(entry) > 3 else 1.0
        seller_objs.append(Seller(i, (entry[0], entry[1]), entry[2], agg))
    cost_model = CostModel(transport_cost, price_sensitivity, price_term, revenue_unit)
    return Market(MarketGrid(width, height), seller_objs, cost_model, max_price)


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def small_config():
    config = SimulationConfig()
    config.grid.width = 12
    config.grid.height = 10
    config.sellers.count = 4
    config.max_ticks = 5
    config.seed = 7
    return config


@pytest.fixture
def make_market():
    return build_market
