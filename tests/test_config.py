"""Tests for YAML configuration loading."""

from pathlib import Path

import pytest

from spatial_market.config import SimulationConfig, load_config

CONFIG_DIR = Path(__file__).resolve().parent.parent / "configs"


def _write(tmp_path, text):
    path = tmp_path / "config.yaml"
    path.write_text(text)
    return path


class TestLoadConfig:

    def test_shipped_configs_load(self):
        default = load_config(CONFIG_DIR / "default.yaml")
        assert default.grid.width == 50
        assert default.sellers.count == 2
        assert default.optimizer.moves == "cross_price"
        assert default.seed == 42

        points = load_config(CONFIG_DIR / "points_moore.yaml")
        assert points.market.max_price is None
        assert points.market.revenue_unit == "points"
        assert points.sellers.aggressiveness == (0.5, 1.0)

    def test_empty_file_gives_defaults(self, tmp_path):
        config = load_config(_write(tmp_path, ""))
        assert config.grid.width == 50 and config.grid.height == 50
        assert config.market.max_price == 20
        assert config.sellers.start_price == 10
        assert config.max_ticks == 500
        assert config.seed is None

    def test_explicit_move_list_and_random_prices(self, tmp_path):
        config = load_config(_write(tmp_path, """
sellers:
  start_price: null
  aggressiveness: [0.1, 0.4]
optimizer:
  moves: [[1, 0, 0], [0, 0, 1]]
"""))
        assert config.sellers.start_price is None
        assert config.sellers.aggressiveness == (0.1, 0.4)
        assert config.optimizer.moves == [(1, 0, 0), (0, 0, 1)]

    @pytest.mark.parametrize("text", [
        "grid: {width: 0, height: 5}",
        "sellers: {count: 0}",
        "sellers: {aggressiveness: 1.5}",
        "sellers: {start_price: 30}",
        "market: {price_term: squared}",
        "market: {revenue_unit: kg}",
        "optimizer: {moves: spiral}",
    ])
    def test_invalid_values_rejected(self, tmp_path, text):
        with pytest.raises(ValueError):
            load_config(_write(tmp_path, text))

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.yaml")

    def test_default_dataclass_is_valid(self):
        SimulationConfig().validate()
