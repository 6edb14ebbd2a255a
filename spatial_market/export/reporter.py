"""Summary report generation for the spatial market simulation."""

from typing import List, Dict, Optional, TYPE_CHECKING
from pathlib import Path

if TYPE_CHECKING:
    from ..model.state import MarketState


class Reporter:
    """Generates summary statistics and formatted text report."""

    def __init__(self, config_path: str, seed: Optional[int]):
        self.config_path = config_path
        self.seed = seed
        self.tick_metrics: List[Dict] = []
        self.price_war_ticks = 0
        self.settled_at: Optional[int] = None
        self._prev_mean_price: Optional[float] = None

    def update(self, state: "MarketState") -> None:
        """Accumulate metrics per tick."""
        self.tick_metrics.append(state.metrics.copy())

        # Price war: average price fell this tick
        mean_price = state.metrics.get('mean_price', 0)
        if self._prev_mean_price is not None and mean_price < self._prev_mean_price:
            self.price_war_ticks += 1
        self._prev_mean_price = mean_price

        # First tick in which nobody moved or repriced
        still = state.metrics.get('moved', 0) == 0 and state.metrics.get('repriced', 0) == 0
        if still and self.settled_at is None:
            self.settled_at = state.tick
        elif not still:
            self.settled_at = None

    def generate_summary(self, final_state: "MarketState",
                         output_dir: Path,
                         csv_enabled: bool,
                         snapshot_enabled: bool,
                         gif_enabled: bool) -> str:
        """Returns formatted text report."""
        metrics = final_state.metrics
        total_revenue = metrics.get('total_revenue', 0)

        lines = [
            "",
            "=" * 80,
            "                    SPATIAL MARKET SIMULATION REPORT",
            "=" * 80,
            f"Configuration: {self.config_path}",
            f"Random Seed: {self.seed if self.seed is not None else 'None (random)'}",
            "",
            "SIMULATION METRICS",
            "-" * 40,
            f"Total Ticks:           {final_state.tick}",
            f"Grid:                  {final_state.width}x{final_state.height}",
            f"Active Sellers:        {int(metrics.get('active_sellers', 0))} / {len(final_state.sellers)}",
            f"Price Range:           {metrics.get('min_price', 0):.0f} - {metrics.get('max_price', 0):.0f}",
            f"Mean Seller Distance:  {metrics.get('mean_distance', 0):.2f} cells",
            f"Total Daily Revenue:   {total_revenue:.0f}",
            "",
            "SELLERS",
            "-" * 40,
        ]

        for s in final_state.sellers:
            share = (s.revenue / total_revenue * 100) if total_revenue > 0 else 0
            lines.append(f"  #{s.seller_id:<3} at ({s.x:>3}, {s.y:>3})  price {s.price:>4}  "
                         f"revenue {s.revenue:>10.0f} ({share:5.1f}%)")

        lines += [
            "",
            "EMERGENT BEHAVIORS DETECTED",
            "-" * 40,
            f"[{'X' if self.price_war_ticks > 0 else ' '}] Price Cuts: "
            f"{self.price_war_ticks} ticks with falling mean price",
            f"[{'X' if self.settled_at is not None else ' '}] Settled: "
            + (f"no moves since tick {self.settled_at}" if self.settled_at is not None
               else "sellers still moving"),
            "",
            "OUTPUT FILES",
            "-" * 40,
        ]

        if csv_enabled:
            lines.append(f"CSV Log:    {output_dir / 'simulation_log.csv'}")
        else:
            lines.append("CSV Log:    (disabled)")

        if snapshot_enabled:
            lines.append(f"Snapshots:  {output_dir}")
        else:
            lines.append("Snapshots:  (disabled)")

        if gif_enabled:
            lines.append(f"Animation:  {output_dir / 'simulation.gif'}")
        else:
            lines.append("Animation:  (disabled)")

        lines.append("=" * 80)

        return "\n".join(lines)
