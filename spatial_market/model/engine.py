"""Simulation engine for the spatial market."""

import logging
import numpy as np
from itertools import combinations
from typing import Dict, List, Optional, TYPE_CHECKING

from .cost import CostModel
from .market import Market, initialize_market
from .optimizer import MoveResult, SellerOptimizer
from .state import MarketState, SellerSnapshot

if TYPE_CHECKING:
    from ..config import SimulationConfig

logger = logging.getLogger(__name__)


class SimulationEngine:
    """
    Orchestrates the discrete-time simulation loop.

    Implements:
    1. Market initialization from config
    2. Sequential per-seller local search each tick
    3. Authoritative revenue recomputation after each tick
    4. State snapshot generation
    """

    def __init__(self, config: "SimulationConfig", market: Optional[Market] = None):
        self.config = config
        self.current_tick = 0
        self.rng = np.random.default_rng(config.seed)

        if market is None:
            market = self._build_market()
        self.market = market
        self.market.recompute_revenues()

        self.optimizer = SellerOptimizer(
            config.optimizer.moves,
            rng=self.rng,
            aggressiveness_decay=config.optimizer.aggressiveness_decay,
            inactive_threshold=config.optimizer.inactive_threshold
        )
        if not self.optimizer.includes_stay:
            logger.info("Move set has no stay move; active sellers must move when able")

        self.last_results: List[MoveResult] = []
        self.total_moves = 0
        self.total_reprices = 0

    def _build_market(self) -> Market:
        """Create sellers from config."""
        cfg = self.config
        cost_model = CostModel(
            transport_cost=cfg.market.transport_cost,
            price_sensitivity=cfg.market.price_sensitivity,
            price_term=cfg.market.price_term,
            revenue_unit=cfg.market.revenue_unit
        )
        market = initialize_market(
            cfg.sellers.count, cfg.grid.width, cfg.grid.height,
            cfg.sellers.start_price,
            rng=self.rng,
            cost_model=cost_model,
            max_price=cfg.market.max_price,
            aggressiveness=cfg.sellers.aggressiveness,
            allow_collisions=cfg.sellers.allow_collisions
        )
        if market.has_collisions():
            logger.warning("Sellers share cells at tick 0")
        return market

    def step(self) -> MarketState:
        """
        Execute one tick.

        1. Each seller in order searches its move set and commits its best move
        2. Revenues are recomputed for the final configuration
        3. Return current state snapshot
        """
        self.current_tick += 1
        self.last_results = self.optimizer.tick(self.market)

        moved = sum(r.moved for r in self.last_results)
        repriced = sum(r.repriced for r in self.last_results)
        self.total_moves += moved
        self.total_reprices += repriced
        logger.debug("Tick %d: %d moved, %d repriced", self.current_tick, moved, repriced)

        return self.snapshot()

    def snapshot(self) -> MarketState:
        """Create immutable snapshot of current market state."""
        moved_ids = {r.seller_id for r in self.last_results if r.moved}
        seller_snapshots = [
            SellerSnapshot(
                seller_id=s.id,
                x=s.x,
                y=s.y,
                price=s.price,
                revenue=s.revenue,
                aggressiveness=s.movement_aggressiveness,
                moved=s.id in moved_ids
            )
            for s in self.market.sellers
        ]
        return MarketState(
            tick=self.current_tick,
            width=self.market.width,
            height=self.market.height,
            sellers=seller_snapshots,
            owner_map=self.market.owner_map(),
            metrics=self._metrics()
        )

    def _metrics(self) -> Dict[str, float]:
        sellers = self.market.sellers
        prices = self.market.prices()
        return {
            'total_revenue': float(sum(s.revenue for s in sellers)),
            'mean_price': float(prices.mean()),
            'min_price': float(prices.min()),
            'max_price': float(prices.max()),
            'active_sellers': sum(1 for s in sellers if s.is_active),
            'mean_distance': self.mean_pairwise_distance(),
            'moved': sum(r.moved for r in self.last_results),
            'repriced': sum(r.repriced for r in self.last_results)
        }

    def mean_pairwise_distance(self) -> float:
        """Average Euclidean distance between sellers (clustering measure)."""
        positions = self.market.positions()
        pairs = list(combinations(range(len(positions)), 2))
        if not pairs:
            return 0.0
        return float(np.mean([np.linalg.norm(positions[i] - positions[j]) for i, j in pairs]))

    def is_finished(self) -> bool:
        """Check if simulation should terminate."""
        return (self.current_tick >= self.config.max_ticks or
                not any(s.is_active for s in self.market.sellers))

    def get_summary(self) -> Dict:
        """Get summary statistics for the simulation."""
        return {
            'total_ticks': self.current_tick,
            'sellers': len(self.market.sellers),
            'active_sellers': sum(1 for s in self.market.sellers if s.is_active),
            'total_moves': self.total_moves,
            'total_reprices': self.total_reprices,
            'revenues': self.market.daily_revenues(),
            'prices': {s.id: s.price for s in self.market.sellers},
            'mean_distance': self.mean_pairwise_distance()
        }
