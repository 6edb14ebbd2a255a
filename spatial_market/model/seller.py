"""Seller entity for the spatial market simulation."""

from dataclasses import dataclass
from typing import Any, Hashable, Optional, Tuple
import numpy as np


@dataclass(frozen=True)
class Candidate:
    """Tentative (position, price) state of a seller, scored without mutation."""
    x: int
    y: int
    price: int

    @property
    def position(self) -> Tuple[int, int]:
        return (self.x, self.y)

    def shifted(self, dx: int, dy: int, dprice: int) -> "Candidate":
        return Candidate(self.x + dx, self.y + dy, self.price + dprice)


class Seller:
    """
    A competitor occupying one grid cell and charging an integer price.

    Movement aggressiveness is the probability of attempting a move in a
    given tick. Once it drops below ``inactive_threshold`` it is clamped to 0
    and the seller never moves again.
    """

    def __init__(self, seller_id: int,
                 position: Tuple[int, int],
                 price: int,
                 movement_aggressiveness: float = 1.0,
                 tag: Optional[Hashable] = None):
        if not 0.0 <= movement_aggressiveness <= 1.0:
            raise ValueError(
                f"Movement aggressiveness must be in [0, 1], got {movement_aggressiveness}")
        self.id = seller_id
        self.x, self.y = int(position[0]), int(position[1])
        self.price = int(price)
        self.revenue = 0.0
        self.movement_aggressiveness = float(movement_aggressiveness)
        # Opaque identity for collaborators (e.g. color lookup)
        self.tag: Any = seller_id if tag is None else tag

    @property
    def position(self) -> Tuple[int, int]:
        return (self.x, self.y)

    @property
    def is_active(self) -> bool:
        return self.movement_aggressiveness > 0.0

    def as_candidate(self) -> Candidate:
        return Candidate(self.x, self.y, self.price)

    def apply(self, candidate: Candidate) -> None:
        """Commit a candidate state."""
        self.x, self.y, self.price = candidate.x, candidate.y, candidate.price

    def deactivate_if_below(self, threshold: float) -> None:
        if self.movement_aggressiveness < threshold:
            self.movement_aggressiveness = 0.0

    def wants_to_move(self, rng: np.random.Generator) -> bool:
        """Stochastic gate: attempt a move with probability = aggressiveness."""
        if not self.is_active:
            return False
        return rng.random() < self.movement_aggressiveness

    def decay(self, factor: float) -> None:
        self.movement_aggressiveness *= factor

    def __repr__(self) -> str:
        return (f"Seller(id={self.id}, pos={self.position}, price={self.price}, "
                f"revenue={self.revenue:g})")
