"""Visualization and export for the spatial market simulation."""

import numpy as np
import matplotlib
matplotlib.use('Agg')  # Use non-interactive backend
import matplotlib.pyplot as plt
from matplotlib.colors import ListedColormap
from matplotlib.ticker import MaxNLocator
from pathlib import Path
from typing import List, Optional, TYPE_CHECKING
from PIL import Image
import io

if TYPE_CHECKING:
    from ..model.state import MarketState


class Visualizer:
    """
    Generates visual outputs using matplotlib.

    Each figure shows the territory map (every cell tinted with the color of
    the seller it buys from, sellers drawn in full color and labeled with
    their price) next to a bar chart of daily revenue per seller.

    Supports:
    - Single PNG snapshots
    - Animated GIF compilation
    """

    BACKGROUND = '#000000'
    TEXT = '#FFFFFF'

    def __init__(self, grid_width: int, grid_height: int, num_sellers: int,
                 seed: Optional[int] = None):
        self.width = grid_width
        self.height = grid_height
        self.colors = self.random_colors(num_sellers, np.random.default_rng(seed))
        self.frames: List[Image.Image] = []

    @staticmethod
    def random_colors(count: int, rng: np.random.Generator) -> np.ndarray:
        """One opaque RGB color per seller, shape (count, 3) in [0, 1]."""
        return rng.integers(0, 256, size=(count, 3)) / 255.0

    @staticmethod
    def snapshot_name(tick: int, num_sellers: int, transport_cost: float,
                      price_sensitivity: float, max_price: Optional[int],
                      start_price: Optional[int]) -> str:
        """File name that records the run parameters."""
        mp = 'None' if max_price is None else max_price
        sp = 'rand' if start_price is None else start_price
        return (f"Turn_{tick}_NS{num_sellers}_TC_{transport_cost:g}_PS_{price_sensitivity:g}"
                f"_MP_{mp}_SP_{sp}.png")

    def _create_figure(self, state: "MarketState") -> plt.Figure:
        """Create matplotlib figure for state visualization."""
        aspect = self.width / self.height
        fig_height = 6
        fig_width = max(6, fig_height * aspect) + 4
        fig, (ax, bar_ax) = plt.subplots(
            1, 2, figsize=(fig_width, fig_height),
            gridspec_kw={'width_ratios': [max(1.5, 3 * aspect), 1]}
        )
        fig.patch.set_facecolor(self.BACKGROUND)

        # Territories at half intensity
        territory = ListedColormap(self.colors / 2)
        ax.imshow(state.owner_map, cmap=territory, vmin=0, vmax=len(self.colors) - 1,
                  origin='upper', aspect='equal', interpolation='nearest',
                  extent=[-0.5, self.width - 0.5, self.height - 0.5, -0.5])

        # Sellers in full color with their price
        for s in state.sellers:
            ax.add_patch(plt.Rectangle((s.x - 0.5, s.y - 0.5), 1, 1,
                                       color=self.colors[s.seller_id]))
            ax.text(s.x, s.y, str(s.price), color=self.TEXT, fontsize=7,
                    ha='center', va='center')

        ax.set_title(f'Tick {state.tick} | Sellers: {len(state.sellers)} | '
                     f'Mean price: {state.metrics.get("mean_price", 0):.1f}',
                     color=self.TEXT)
        ax.set_xlim(-0.5, self.width - 0.5)
        ax.set_ylim(self.height - 0.5, -0.5)
        ax.set_xticks([])
        ax.set_yticks([])

        # Revenue bars
        revenues = [s.revenue for s in state.sellers]
        ids = [s.seller_id for s in state.sellers]
        bar_ax.bar(range(len(ids)), revenues, color=self.colors[ids] / 2)
        bar_ax.set_title('Daily Revenue per Seller', color=self.TEXT)
        bar_ax.set_facecolor(self.BACKGROUND)
        bar_ax.set_xticks([])
        bar_ax.set_ylim(0, max(max(revenues), 1.0))
        bar_ax.yaxis.set_major_locator(MaxNLocator(5))
        bar_ax.tick_params(colors=self.TEXT)
        for spine in bar_ax.spines.values():
            spine.set_color(self.TEXT)

        plt.tight_layout()
        return fig

    def buffer_frame(self, state: "MarketState") -> None:
        """Store frame for GIF generation."""
        fig = self._create_figure(state)

        # Convert to PIL Image
        buf = io.BytesIO()
        fig.savefig(buf, format='png', dpi=80, facecolor=fig.get_facecolor())
        buf.seek(0)
        img = Image.open(buf).copy()
        self.frames.append(img)
        buf.close()
        plt.close(fig)

    def save_snapshot(self, state: "MarketState", output_path: Path) -> None:
        """Save single PNG image of current state."""
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        fig = self._create_figure(state)
        fig.savefig(output_path, dpi=150, bbox_inches='tight',
                    facecolor=fig.get_facecolor())
        plt.close(fig)

    def generate_gif(self, output_path: Path, fps: int = 10) -> None:
        """Compile buffered frames into animated GIF."""
        if not self.frames:
            return

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        duration = int(1000 / fps)  # milliseconds per frame

        self.frames[0].save(
            output_path,
            save_all=True,
            append_images=self.frames[1:],
            duration=duration,
            loop=0
        )

    def clear_frames(self) -> None:
        """Clear buffered frames."""
        self.frames.clear()
