"""Configuration dataclasses and YAML loader for the spatial market simulation."""

from dataclasses import dataclass, field
from typing import List, Tuple, Optional, Union
from pathlib import Path
import yaml

from .model.cost import PRICE_TERMS, REVENUE_UNITS
from .model.optimizer import resolve_move_set


@dataclass
class GridConfig:
    width: int = 50
    height: int = 50


@dataclass
class MarketConfig:
    transport_cost: float = 1.0     # weight on travel distance
    price_sensitivity: float = 1.0  # weight on price
    max_price: Optional[int] = 20   # None = uncapped
    price_term: str = "raw"         # "raw" or "absolute"
    revenue_unit: str = "price"     # "price" or "points"


@dataclass
class SellerConfig:
    count: int = 2
    start_price: Optional[int] = 10  # None = random in [0, max_price]
    aggressiveness: Union[float, Tuple[float, float]] = 1.0
    allow_collisions: bool = False


@dataclass
class OptimizerConfig:
    moves: Union[str, List[Tuple[int, int, int]]] = "cross_price"
    aggressiveness_decay: float = 1.0
    inactive_threshold: float = 0.05


@dataclass
class SimulationConfig:
    grid: GridConfig = field(default_factory=GridConfig)
    market: MarketConfig = field(default_factory=MarketConfig)
    sellers: SellerConfig = field(default_factory=SellerConfig)
    optimizer: OptimizerConfig = field(default_factory=OptimizerConfig)
    max_ticks: int = 500

    # Export flags (can be overridden by CLI)
    csv_enabled: bool = True
    snapshot_enabled: bool = True
    snapshot_every: int = 100  # 0 = final snapshot only
    gif_enabled: bool = False
    quiet: bool = False
    seed: Optional[int] = None
    out_dir: Path = field(default_factory=lambda: Path("./output"))

    def validate(self) -> None:
        """Reject parameter combinations the simulation cannot run."""
        if self.grid.width <= 0 or self.grid.height <= 0:
            raise ValueError(f"Grid must be positive-sized, got {self.grid.width}x{self.grid.height}")
        if self.sellers.count <= 0:
            raise ValueError("At least one seller is required")
        if self.max_ticks < 0:
            raise ValueError("max_ticks must be non-negative")
        if self.snapshot_every < 0:
            raise ValueError("snapshot_every must be non-negative")
        agg = self.sellers.aggressiveness
        bounds = agg if isinstance(agg, tuple) else (agg, agg)
        if not all(0.0 <= v <= 1.0 for v in bounds) or bounds[0] > bounds[1]:
            raise ValueError(f"Invalid aggressiveness: {agg}")
        if self.market.price_term not in PRICE_TERMS:
            raise ValueError(f"Unknown price term: {self.market.price_term}")
        if self.market.revenue_unit not in REVENUE_UNITS:
            raise ValueError(f"Unknown revenue unit: {self.market.revenue_unit}")
        resolve_move_set(self.optimizer.moves)
        start = self.sellers.start_price
        cap = self.market.max_price
        if start is not None and (start < 0 or (cap is not None and start > cap)):
            raise ValueError(f"Start price {start} outside [0, {cap}]")


def _parse_aggressiveness(raw) -> Union[float, Tuple[float, float]]:
    """Accept a fixed probability or a {min, max} / [min, max] range."""
    if isinstance(raw, dict):
        return (float(raw['min']), float(raw['max']))
    if isinstance(raw, (list, tuple)):
        if len(raw) != 2:
            raise ValueError(f"Aggressiveness range needs two values, got {raw}")
        return (float(raw[0]), float(raw[1]))
    return float(raw)


def _parse_moves(raw) -> Union[str, List[Tuple[int, int, int]]]:
    """Parse a move-set preset name or explicit list of [dx, dy, dprice]."""
    if isinstance(raw, str):
        return raw
    return [tuple(int(v) for v in m) for m in raw]


def load_config(config_path: Path) -> SimulationConfig:
    """Load and validate YAML configuration file."""
    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    grid_raw = raw.get('grid', {})
    grid = GridConfig(
        width=grid_raw.get('width', 50),
        height=grid_raw.get('height', 50)
    )

    market_raw = raw.get('market', {})
    market = MarketConfig(
        transport_cost=market_raw.get('transport_cost', 1.0),
        price_sensitivity=market_raw.get('price_sensitivity', 1.0),
        max_price=market_raw.get('max_price', 20),
        price_term=market_raw.get('price_term', 'raw'),
        revenue_unit=market_raw.get('revenue_unit', 'price')
    )

    sellers_raw = raw.get('sellers', {})
    sellers = SellerConfig(
        count=sellers_raw.get('count', 2),
        start_price=sellers_raw.get('start_price', 10),
        aggressiveness=_parse_aggressiveness(sellers_raw.get('aggressiveness', 1.0)),
        allow_collisions=sellers_raw.get('allow_collisions', False)
    )

    optimizer_raw = raw.get('optimizer', {})
    optimizer = OptimizerConfig(
        moves=_parse_moves(optimizer_raw.get('moves', 'cross_price')),
        aggressiveness_decay=optimizer_raw.get('aggressiveness_decay', 1.0),
        inactive_threshold=optimizer_raw.get('inactive_threshold', 0.05)
    )

    sim_raw = raw.get('simulation', {})
    export_raw = raw.get('export', {})

    config = SimulationConfig(
        grid=grid,
        market=market,
        sellers=sellers,
        optimizer=optimizer,
        max_ticks=sim_raw.get('max_ticks', 500),
        seed=sim_raw.get('seed'),
        csv_enabled=export_raw.get('csv', True),
        snapshot_enabled=export_raw.get('snapshot', True),
        snapshot_every=export_raw.get('snapshot_every', 100),
        gif_enabled=export_raw.get('gif', False)
    )
    config.validate()
    return config
