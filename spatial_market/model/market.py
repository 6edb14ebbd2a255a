"""Market: seller collection, customer assignment and revenue aggregation."""

import logging
from typing import Dict, List, Optional, Sequence, Set, Tuple, Union
import numpy as np

from .cost import CostModel
from .grid import MarketGrid
from .seller import Candidate, Seller

logger = logging.getLogger(__name__)

# Upper bound for random initial prices when the market has no price cap
DEFAULT_PRICE_CEILING = 20


class Market:
    """
    All sellers plus grid bounds and cost parameters.

    Assignment ties are broken by collection order: the first seller with
    minimal cost wins the customer.
    """

    def __init__(self, grid: MarketGrid, sellers: List[Seller],
                 cost_model: Optional[CostModel] = None,
                 max_price: Optional[int] = None):
        if not sellers:
            raise ValueError("Market requires at least one seller")
        if max_price is not None and max_price < 0:
            raise ValueError(f"Max price must be non-negative, got {max_price}")
        self.grid = grid
        self.sellers = sellers
        self.cost_model = cost_model if cost_model is not None else CostModel()
        self.max_price = max_price

        for seller in sellers:
            if not grid.in_bounds(seller.x, seller.y):
                raise ValueError(f"{seller!r} lies outside the {grid.width}x{grid.height} grid")
            if not self.price_in_range(seller.price):
                raise ValueError(f"{seller!r} has a price outside [0, {max_price}]")

    @property
    def width(self) -> int:
        return self.grid.width

    @property
    def height(self) -> int:
        return self.grid.height

    def positions(self) -> np.ndarray:
        return np.array([s.position for s in self.sellers], dtype=np.float64)

    def prices(self) -> np.ndarray:
        return np.array([s.price for s in self.sellers], dtype=np.float64)

    def price_in_range(self, price: int) -> bool:
        if price < 0:
            return False
        return self.max_price is None or price <= self.max_price

    def occupied_by_others(self, index: int) -> Set[Tuple[int, int]]:
        """Cells held by every seller except ``sellers[index]``."""
        return MarketGrid.occupied_cells(
            s.position for i, s in enumerate(self.sellers) if i != index
        )

    def is_legal(self, candidate: Candidate, occupied: Set[Tuple[int, int]]) -> bool:
        """In bounds, price in range and not on another seller's cell."""
        if candidate.position in occupied:
            return False
        if not self.grid.in_bounds(candidate.x, candidate.y):
            return False
        return self.price_in_range(candidate.price)

    def has_collisions(self) -> bool:
        return len(MarketGrid.occupied_cells(s.position for s in self.sellers)) < len(self.sellers)

    # ------------------------------------------------------------------
    # Assignment
    # ------------------------------------------------------------------

    def assign_cell(self, x: int, y: int) -> Seller:
        """Return the seller the customer at (x, y) buys from."""
        if not self.grid.in_bounds(x, y):
            raise ValueError(f"Cell ({x}, {y}) outside the grid")
        closest = None
        min_cost = np.inf
        for seller in self.sellers:
            cost = self.cost_model.customer_cost(x, y, seller)
            if cost < min_cost:
                min_cost = cost
                closest = seller
        return closest

    def _winners(self, positions: np.ndarray, prices: np.ndarray) -> np.ndarray:
        costs = self.cost_model.cost_matrix(self.grid.cells, positions, prices)
        # argmin returns the first minimum, matching collection-order priority
        return np.argmin(costs, axis=1)

    def owner_map(self) -> np.ndarray:
        """Index of the winning seller for every cell, as a [y, x] array."""
        return self.grid.reshape(self._winners(self.positions(), self.prices()))

    # ------------------------------------------------------------------
    # Day simulation
    # ------------------------------------------------------------------

    def _revenue_vector(self, positions: np.ndarray, prices: np.ndarray) -> np.ndarray:
        winners = self._winners(positions, prices)
        counts = np.bincount(winners, minlength=len(self.sellers))
        return counts * self.cost_model.unit_values(prices)

    def reset_revenues(self) -> None:
        for seller in self.sellers:
            seller.revenue = 0.0

    def simulate_day(self) -> None:
        """Accumulate one trading day of revenue into each seller.

        Adds to ``Seller.revenue``; call ``reset_revenues`` first for a
        fresh total.
        """
        revenues = self._revenue_vector(self.positions(), self.prices())
        for seller, revenue in zip(self.sellers, revenues):
            seller.revenue += float(revenue)

    def recompute_revenues(self) -> None:
        self.reset_revenues()
        self.simulate_day()

    def daily_revenues(self) -> Dict[int, float]:
        """Revenue per seller id for the current configuration.

        Transient: ``Seller.revenue`` is left untouched.
        """
        revenues = self._revenue_vector(self.positions(), self.prices())
        return {s.id: float(r) for s, r in zip(self.sellers, revenues)}

    def scorer(self, index: int) -> "CandidateScorer":
        return CandidateScorer(self, index)


class CandidateScorer:
    """
    Scores candidate states for one seller against a frozen view of the others.

    A day simulation in which only ``sellers[index]`` changes credits that
    seller exactly the cells where its cost is strictly below every earlier
    seller's and no greater than every later seller's, so the other sellers'
    best costs are computed once per turn.
    """

    def __init__(self, market: Market, index: int):
        self.market = market
        self.index = index
        cells = market.grid.cells
        costs = market.cost_model.cost_matrix(cells, market.positions(), market.prices())
        no_rival = np.full(len(cells), np.inf)
        self._best_before = costs[:, :index].min(axis=1) if index > 0 else no_rival
        self._best_after = (costs[:, index + 1:].min(axis=1)
                            if index < len(market.sellers) - 1 else no_rival)

    def score(self, candidate: Candidate) -> float:
        """Revenue ``sellers[index]`` would earn in state ``candidate``."""
        model = self.market.cost_model
        cost = model.cost_matrix(self.market.grid.cells,
                                 [[candidate.x, candidate.y]],
                                 [candidate.price])[:, 0]
        won = np.count_nonzero((cost < self._best_before) & (cost <= self._best_after))
        return float(won * model.unit_values([candidate.price])[0])


def initialize_market(num_sellers: int, width: int, height: int,
                      initial_price: Optional[int] = None,
                      *,
                      rng: Optional[np.random.Generator] = None,
                      cost_model: Optional[CostModel] = None,
                      max_price: Optional[int] = None,
                      aggressiveness: Union[float, Sequence[float]] = 1.0,
                      allow_collisions: bool = False) -> Market:
    """
    Create a market with randomly placed sellers.

    ``initial_price=None`` draws each price uniformly from
    ``[0, max_price]``. ``aggressiveness`` is a fixed probability or a
    ``(low, high)`` range sampled per seller. Unless ``allow_collisions`` is
    set, sellers start on distinct cells.
    """
    if num_sellers <= 0:
        raise ValueError("Market requires at least one seller")
    grid = MarketGrid(width, height)
    if not allow_collisions and num_sellers > grid.cell_count:
        raise ValueError(
            f"Cannot place {num_sellers} sellers on {grid.cell_count} distinct cells")
    if rng is None:
        rng = np.random.default_rng()

    ceiling = max_price if max_price is not None else DEFAULT_PRICE_CEILING
    if np.ndim(aggressiveness) == 0:
        low = high = float(aggressiveness)
    else:
        low, high = (float(v) for v in aggressiveness)

    taken: Set[Tuple[int, int]] = set()
    sellers = []
    for seller_id in range(num_sellers):
        position = grid.random_cell(rng)
        if not allow_collisions:
            while position in taken:
                position = grid.random_cell(rng)
        taken.add(position)

        if initial_price is None:
            price = int(rng.integers(0, ceiling + 1))
        else:
            price = initial_price
        agg = low if low == high else float(rng.uniform(low, high))
        sellers.append(Seller(seller_id, position, price, agg))

    market = Market(grid, sellers, cost_model, max_price)
    logger.debug("Initialized market %dx%d with %d sellers", width, height, num_sellers)
    return market
