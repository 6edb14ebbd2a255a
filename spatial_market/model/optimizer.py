"""Sequential hill-climbing search over seller position and price."""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple, Union
import numpy as np

from .market import Market
from .seller import Candidate

logger = logging.getLogger(__name__)

Move = Tuple[int, int, int]  # (dx, dy, dprice)

_CROSS = [(0, 1), (1, 0), (-1, 0), (0, -1)]

MOVE_SETS: Dict[str, Tuple[Move, ...]] = {
    # Four steps without repricing, then reprice in place (down, stay, up)
    "cross_price": (
        (0, 1, 0), (1, 0, 0), (-1, 0, 0), (0, -1, 0),
        (0, 0, -1), (0, 0, 0), (0, 0, 1),
    ),
    # Every von Neumann step (plus staying) crossed with a price step
    "cross_full_price": tuple(
        (dx, dy, dp) for dx, dy in _CROSS + [(0, 0)] for dp in (-1, 0, 1)
    ),
    # King moves, fixed price, no stay
    "moore": (
        (-1, -1, 0), (-1, 0, 0), (-1, 1, 0),
        (0, -1, 0), (0, 1, 0),
        (1, -1, 0), (1, 0, 0), (1, 1, 0),
    ),
}

STAY: Move = (0, 0, 0)


def resolve_move_set(moves: Union[str, Sequence[Sequence[int]]]) -> Tuple[Move, ...]:
    """Look up a preset by name or normalize an explicit list of triples."""
    if isinstance(moves, str):
        try:
            return MOVE_SETS[moves]
        except KeyError:
            raise ValueError(
                f"Unknown move set: {moves} (expected one of {sorted(MOVE_SETS)})") from None
    resolved = []
    for move in moves:
        if len(move) != 3:
            raise ValueError(f"Move must be (dx, dy, dprice), got {move!r}")
        resolved.append(tuple(int(v) for v in move))
    if not resolved:
        raise ValueError("Move set must not be empty")
    return tuple(resolved)


@dataclass(frozen=True)
class MoveResult:
    """Outcome of one seller's turn within a tick."""
    seller_id: int
    attempted: bool
    original: Candidate
    committed: Candidate
    best_score: Optional[float]
    legal_candidates: int

    @property
    def moved(self) -> bool:
        return self.committed.position != self.original.position

    @property
    def repriced(self) -> bool:
        return self.committed.price != self.original.price


class SellerOptimizer:
    """
    Runs the per-seller local search for a whole tick.

    Sellers are visited in collection order and each commit is visible to the
    sellers after it in the same tick.
    """

    def __init__(self, moves: Union[str, Sequence[Sequence[int]]] = "cross_price",
                 rng: Optional[np.random.Generator] = None,
                 aggressiveness_decay: float = 1.0,
                 inactive_threshold: float = 0.05):
        if not 0.0 <= aggressiveness_decay <= 1.0:
            raise ValueError(f"Aggressiveness decay must be in [0, 1], got {aggressiveness_decay}")
        self.moves = resolve_move_set(moves)
        self.rng = rng if rng is not None else np.random.default_rng()
        self.aggressiveness_decay = aggressiveness_decay
        self.inactive_threshold = inactive_threshold

    @property
    def includes_stay(self) -> bool:
        return STAY in self.moves

    def candidates(self, origin: Candidate) -> List[Candidate]:
        """Candidate states in enumeration order, legality unchecked."""
        return [origin.shifted(*move) for move in self.moves]

    def search(self, market: Market, index: int) -> Tuple[Candidate, Optional[float], int]:
        """
        Best legal candidate for ``sellers[index]`` with all others fixed.

        Returns (best, score, legal_count). With no legal candidate the
        seller's current state comes back with score None.
        """
        seller = market.sellers[index]
        origin = seller.as_candidate()
        occupied = market.occupied_by_others(index)
        scorer = market.scorer(index)

        best = origin
        best_score = None
        legal = 0
        for candidate in self.candidates(origin):
            if not market.is_legal(candidate, occupied):
                continue
            legal += 1
            score = scorer.score(candidate)
            # Strict improvement only: earlier candidates win ties
            if best_score is None or score > best_score:
                best, best_score = candidate, score
        return best, best_score, legal

    def optimize_seller(self, market: Market, index: int) -> MoveResult:
        """Run one seller's turn and commit its best candidate."""
        seller = market.sellers[index]
        seller.deactivate_if_below(self.inactive_threshold)
        original = seller.as_candidate()

        if not seller.wants_to_move(self.rng):
            return MoveResult(seller.id, False, original, original, None, 0)
        seller.decay(self.aggressiveness_decay)

        best, best_score, legal = self.search(market, index)
        seller.apply(best)
        if best_score is not None:
            seller.revenue = best_score
        else:
            logger.debug("Seller %d has no legal move at %s", seller.id, original)
        return MoveResult(seller.id, True, original, best, best_score, legal)

    def tick(self, market: Market) -> List[MoveResult]:
        """Advance the market by one tick; revenues are recomputed at the end."""
        results = [self.optimize_seller(market, i) for i in range(len(market.sellers))]
        market.recompute_revenues()
        logger.debug("Tick done: %d moved, %d repriced",
                     sum(r.moved for r in results), sum(r.repriced for r in results))
        return results


def tick(market: Market, optimizer: SellerOptimizer) -> Market:
    """Advance ``market`` in place by one tick and return it."""
    optimizer.tick(market)
    return market
