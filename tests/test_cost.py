"""Tests for the customer cost model."""

import numpy as np
import pytest

from spatial_market.model import Candidate, CostModel, MarketGrid


class TestCostModel:

    def test_cost_combines_distance_and_price(self):
        model = CostModel(transport_cost=2.0, price_sensitivity=0.5)
        seller = Candidate(3, 4, 10)
        # distance 5 from the origin
        assert model.customer_cost(0, 0, seller) == pytest.approx(2.0 * 5 + 0.5 * 10)

    def test_own_cell_costs_only_price(self):
        model = CostModel(transport_cost=1.0, price_sensitivity=1.0)
        assert model.customer_cost(2, 2, Candidate(2, 2, 7)) == 7.0

    def test_absolute_price_term(self):
        raw = CostModel(price_term="raw")
        absolute = CostModel(price_term="absolute")
        seller = Candidate(0, 0, -3)
        assert raw.customer_cost(0, 0, seller) == -3.0
        assert absolute.customer_cost(0, 0, seller) == 3.0

    def test_matrix_matches_scalar_cost(self):
        model = CostModel(transport_cost=1.5, price_sensitivity=0.7)
        grid = MarketGrid(4, 3)
        sellers = [Candidate(0, 0, 5), Candidate(3, 2, 8), Candidate(1, 2, 2)]
        matrix = model.cost_matrix(grid.cells,
                                   [[s.x, s.y] for s in sellers],
                                   [s.price for s in sellers])

        assert matrix.shape == (12, 3)
        for row, (x, y) in enumerate(grid.cells.astype(int)):
            for col, seller in enumerate(sellers):
                assert matrix[row, col] == model.customer_cost(x, y, seller)

    def test_unit_values(self):
        prices = np.array([4.0, 9.0])
        assert list(CostModel(revenue_unit="price").unit_values(prices)) == [4.0, 9.0]
        assert list(CostModel(revenue_unit="points").unit_values(prices)) == [1.0, 1.0]

    def test_rejects_unknown_variants(self):
        with pytest.raises(ValueError):
            CostModel(price_term="log")
        with pytest.raises(ValueError):
            CostModel(revenue_unit="volume")
