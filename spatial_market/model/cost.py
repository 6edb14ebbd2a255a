"""Customer cost model: travel distance plus price."""

from dataclasses import dataclass
import numpy as np
from scipy.spatial.distance import cdist


PRICE_TERMS = ("raw", "absolute")
REVENUE_UNITS = ("price", "points")


@dataclass(frozen=True)
class CostModel:
    """
    Cost to a customer of buying from a seller:

        cost = transport_cost * ||customer - seller|| + price_sensitivity * f(price)

    where f is the raw price or its absolute value. A cell won by a seller
    credits it its price, or a single point when ``revenue_unit == "points"``.
    """
    transport_cost: float = 1.0
    price_sensitivity: float = 1.0
    price_term: str = "raw"
    revenue_unit: str = "price"

    def __post_init__(self):
        if self.price_term not in PRICE_TERMS:
            raise ValueError(f"Unknown price term: {self.price_term}")
        if self.revenue_unit not in REVENUE_UNITS:
            raise ValueError(f"Unknown revenue unit: {self.revenue_unit}")

    def price_cost(self, prices):
        """Price component of the cost, scalar or vectorized."""
        prices = np.asarray(prices, dtype=np.float64)
        if self.price_term == "absolute":
            prices = np.abs(prices)
        return self.price_sensitivity * prices

    def customer_cost(self, x: int, y: int, seller) -> float:
        """Cost for the customer at (x, y) to buy from ``seller``.

        ``seller`` is anything exposing ``x``, ``y`` and ``price``.
        """
        dx = float(x - seller.x)
        dy = float(y - seller.y)
        distance = np.sqrt(dx * dx + dy * dy)
        return float(self.transport_cost * distance + self.price_cost(seller.price))

    def cost_matrix(self, cells: np.ndarray, positions: np.ndarray,
                    prices: np.ndarray) -> np.ndarray:
        """Costs of shape (n_cells, n_sellers)."""
        distances = cdist(cells, np.asarray(positions, dtype=np.float64),
                          metric='euclidean')
        return self.transport_cost * distances + self.price_cost(prices)[np.newaxis, :]

    def unit_values(self, prices: np.ndarray) -> np.ndarray:
        """Revenue credited to each seller per customer won."""
        prices = np.asarray(prices, dtype=np.float64)
        if self.revenue_unit == "points":
            return np.ones_like(prices)
        return prices
