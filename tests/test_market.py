"""Tests for customer assignment and day simulation."""

import numpy as np
import pytest

from spatial_market.model import (Candidate, CostModel, Market, MarketGrid, Seller,
                                  initialize_market)


def _replace(market, index, candidate):
    """Copy of ``market`` with one seller moved to ``candidate``."""
    sellers = []
    for i, s in enumerate(market.sellers):
        state = candidate if i == index else s.as_candidate()
        sellers.append(Seller(s.id, state.position, state.price))
    return Market(market.grid, sellers, market.cost_model, max_price=None)


class TestAssignment:

    def test_two_cell_market_splits_evenly(self, make_market):
        market = make_market(2, 1, [(0, 0, 10), (1, 0, 10)],
                             transport_cost=1.0, price_sensitivity=0.0)

        a, b = market.sellers
        assert market.assign_cell(0, 0) is a
        assert market.assign_cell(1, 0) is b
        assert market.daily_revenues() == {0: 10.0, 1: 10.0}

    def test_single_seller_wins_everything(self, make_market):
        market = make_market(5, 4, [(2, 1, 17)])

        for x in range(5):
            for y in range(4):
                assert market.assign_cell(x, y) is market.sellers[0]
        assert market.daily_revenues() == {0: 20 * 17.0}

    def test_exact_tie_goes_to_first_seller(self, make_market):
        market = make_market(3, 1, [(0, 0, 5), (2, 0, 5)])
        assert market.assign_cell(1, 0) is market.sellers[0]
        assert market.owner_map()[0, 1] == 0

        reversed_market = make_market(3, 1, [(2, 0, 5), (0, 0, 5)])
        assert reversed_market.assign_cell(1, 0) is reversed_market.sellers[0]
        assert reversed_market.owner_map()[0, 1] == 0

    def test_cheaper_seller_takes_contested_cells(self, make_market):
        market = make_market(5, 1, [(0, 0, 10), (4, 0, 8)])
        owners = market.owner_map()[0]
        # cell 1: 1+10 vs 3+8 tie -> first seller; cell 2: 12 vs 10
        assert list(owners) == [0, 0, 1, 1, 1]

    def test_every_cell_assigned_to_a_cheapest_seller(self, rng):
        market = initialize_market(6, 9, 7, None, rng=rng,
                                   cost_model=CostModel(1.0, 0.5), max_price=15)
        owners = market.owner_map()

        for y in range(market.height):
            for x in range(market.width):
                costs = [market.cost_model.customer_cost(x, y, s) for s in market.sellers]
                winner = market.assign_cell(x, y)
                assert winner is market.sellers[owners[y, x]]
                assert costs[winner.id] == min(costs)
                assert winner.id == costs.index(min(costs))

    def test_assign_cell_does_not_touch_revenue(self, make_market):
        market = make_market(4, 4, [(0, 0, 3), (3, 3, 4)])
        market.sellers[0].revenue = 99.0
        market.assign_cell(1, 1)
        assert market.sellers[0].revenue == 99.0

    def test_assign_cell_outside_grid(self, make_market):
        market = make_market(2, 2, [(0, 0, 1)])
        with pytest.raises(ValueError):
            market.assign_cell(2, 0)


class TestDaySimulation:

    def test_simulate_day_accumulates(self, make_market):
        market = make_market(2, 1, [(0, 0, 10), (1, 0, 10)], price_sensitivity=0.0)
        market.simulate_day()
        market.simulate_day()
        assert [s.revenue for s in market.sellers] == [20.0, 20.0]

        market.recompute_revenues()
        assert [s.revenue for s in market.sellers] == [10.0, 10.0]

    def test_price_weighted_conservation(self, rng):
        market = initialize_market(5, 10, 8, None, rng=rng, max_price=20)
        market.recompute_revenues()

        prices = market.prices()
        expected = prices[market.owner_map()].sum()
        assert sum(s.revenue for s in market.sellers) == pytest.approx(expected)

    def test_points_conservation(self, rng):
        market = initialize_market(5, 10, 8, None, rng=rng, max_price=20,
                                   cost_model=CostModel(revenue_unit="points"))
        assert sum(market.daily_revenues().values()) == 10 * 8

    def test_daily_revenues_is_transient(self, make_market):
        market = make_market(3, 3, [(0, 0, 2), (2, 2, 2)])
        market.reset_revenues()
        revenues = market.daily_revenues()
        assert sum(revenues.values()) > 0
        assert all(s.revenue == 0.0 for s in market.sellers)


class TestCandidateScorer:

    def test_score_matches_full_day_simulation(self, rng):
        market = initialize_market(5, 7, 6, None, rng=rng,
                                   cost_model=CostModel(1.0, 1.0), max_price=12)
        for index, seller in enumerate(market.sellers):
            scorer = market.scorer(index)
            for dx, dy, dp in [(0, 0, 0), (1, 0, 0), (0, -1, 1), (-1, 1, -1), (2, 2, 3)]:
                candidate = seller.as_candidate().shifted(dx, dy, dp)
                if not market.grid.in_bounds(candidate.x, candidate.y) or candidate.price < 0:
                    continue
                full = _replace(market, index, candidate).daily_revenues()[seller.id]
                assert scorer.score(candidate) == full

    def test_score_respects_tie_priority(self, make_market):
        # Equidistant middle cell goes to whoever comes first
        market = make_market(3, 1, [(0, 0, 5), (2, 0, 5)], price_sensitivity=0.0)
        assert market.scorer(0).score(Candidate(0, 0, 5)) == 10.0
        assert market.scorer(1).score(Candidate(2, 0, 5)) == 5.0

    def test_scoring_leaves_market_untouched(self, make_market):
        market = make_market(4, 4, [(0, 0, 5), (3, 3, 5)])
        market.scorer(0).score(Candidate(2, 2, 1))
        assert market.sellers[0].position == (0, 0)
        assert market.sellers[0].price == 5


class TestMarketConstruction:

    def test_rejects_empty_seller_list(self):
        with pytest.raises(ValueError):
            Market(MarketGrid(3, 3), [])

    def test_rejects_out_of_bounds_seller(self):
        with pytest.raises(ValueError):
            Market(MarketGrid(3, 3), [Seller(0, (3, 0), 1)])

    def test_rejects_price_above_cap(self):
        with pytest.raises(ValueError):
            Market(MarketGrid(3, 3), [Seller(0, (0, 0), 21)], max_price=20)

    def test_rejects_non_positive_grid(self):
        with pytest.raises(ValueError):
            MarketGrid(0, 5)

    def test_occupied_by_others_excludes_self(self, make_market):
        market = make_market(4, 4, [(0, 0, 1), (1, 1, 1), (2, 2, 1)])
        assert market.occupied_by_others(1) == {(0, 0), (2, 2)}


class TestInitializeMarket:

    def test_distinct_cells_by_default(self, rng):
        market = initialize_market(4, 2, 2, 5, rng=rng)
        assert len({s.position for s in market.sellers}) == 4
        assert not market.has_collisions()

    def test_too_many_sellers_for_distinct_cells(self, rng):
        with pytest.raises(ValueError):
            initialize_market(5, 2, 2, 5, rng=rng)

    def test_collisions_allowed_when_requested(self, rng):
        market = initialize_market(5, 2, 2, 5, rng=rng, allow_collisions=True)
        assert len(market.sellers) == 5
        assert market.has_collisions()

    def test_zero_sellers(self, rng):
        with pytest.raises(ValueError):
            initialize_market(0, 5, 5, rng=rng)

    def test_fixed_and_random_prices(self, rng):
        fixed = initialize_market(3, 6, 6, 10, rng=rng, max_price=20)
        assert [s.price for s in fixed.sellers] == [10, 10, 10]

        random = initialize_market(30, 10, 10, None, rng=rng, max_price=4)
        assert all(0 <= s.price <= 4 for s in random.sellers)

    def test_aggressiveness_range(self, rng):
        market = initialize_market(20, 10, 10, 1, rng=rng, aggressiveness=(0.3, 0.6))
        assert all(0.3 <= s.movement_aggressiveness <= 0.6 for s in market.sellers)

    def test_same_seed_same_market(self):
        a = initialize_market(4, 8, 8, None, rng=np.random.default_rng(3))
        b = initialize_market(4, 8, 8, None, rng=np.random.default_rng(3))
        assert [(s.position, s.price) for s in a.sellers] == \
            [(s.position, s.price) for s in b.sellers]
