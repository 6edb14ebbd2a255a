"""State snapshot dataclasses for the spatial market simulation."""

from dataclasses import dataclass
from typing import List, Dict
import numpy as np


@dataclass(frozen=True)
class SellerSnapshot:
    """Immutable snapshot of a seller at a given tick."""
    seller_id: int
    x: int
    y: int
    price: int
    revenue: float
    aggressiveness: float
    moved: bool = False


@dataclass
class MarketState:
    """Complete snapshot of the market after a tick."""
    tick: int
    width: int
    height: int
    sellers: List[SellerSnapshot]
    owner_map: np.ndarray        # [y, x] index of the winning seller
    metrics: Dict[str, float]    # total revenue, mean price, etc.

    def to_csv_rows(self) -> List[Dict]:
        """Convert to CSV-compatible format."""
        return [
            {
                "tick": self.tick,
                "seller_id": s.seller_id,
                "x": s.x,
                "y": s.y,
                "price": s.price,
                "revenue": s.revenue,
                "aggressiveness": round(s.aggressiveness, 6)
            }
            for s in self.sellers
        ]

    def revenues(self) -> Dict[int, float]:
        return {s.seller_id: s.revenue for s in self.sellers}
