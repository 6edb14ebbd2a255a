"""Model package for the spatial market simulation."""

from .state import SellerSnapshot, MarketState
from .grid import MarketGrid
from .cost import CostModel
from .seller import Seller, Candidate
from .market import Market, CandidateScorer, initialize_market
from .optimizer import SellerOptimizer, MoveResult, MOVE_SETS, resolve_move_set, tick
from .engine import SimulationEngine

__all__ = [
    'SellerSnapshot',
    'MarketState',
    'MarketGrid',
    'CostModel',
    'Seller',
    'Candidate',
    'Market',
    'CandidateScorer',
    'initialize_market',
    'SellerOptimizer',
    'MoveResult',
    'MOVE_SETS',
    'resolve_move_set',
    'tick',
    'SimulationEngine',
]
