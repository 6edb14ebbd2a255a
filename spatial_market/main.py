#!/usr/bin/env python3
"""
Spatial Price Competition Simulation

Sellers on a 2D grid relocate and reprice by local search to maximize
their own revenue (Hotelling-style competition).

Usage:
    python -m spatial_market.main --config configs/default.yaml [options]

Examples:
    python -m spatial_market.main --config configs/default.yaml
    python -m spatial_market.main --config configs/default.yaml --gif --out-dir results/
    python -m spatial_market.main --config configs/default.yaml --no-csv --no-snapshot --quiet
    python -m spatial_market.main --config configs/default.yaml --seed 42 --sellers 5
"""

import argparse
import logging
import sys
from pathlib import Path

from .config import load_config
from .model.engine import SimulationEngine
from .export.csv_writer import CSVWriter
from .export.visualizer import Visualizer
from .export.reporter import Reporter
from .utils.logger import setup_logger


def parse_args(argv=None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description='Spatial Price Competition Simulation',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    spatial-market --config configs/default.yaml
    spatial-market --config configs/default.yaml --gif --out-dir results/
    spatial-market --config configs/default.yaml --no-csv --no-snapshot --quiet
    spatial-market --config configs/default.yaml --seed 42 --sellers 5
        """
    )

    # Required arguments
    parser.add_argument('--config', type=Path, required=True,
                        help='Path to YAML configuration file')

    # Optional overrides
    parser.add_argument('--ticks', type=int, default=None,
                        help='Override max simulation ticks')
    parser.add_argument('--sellers', type=int, default=None,
                        help='Override number of sellers')
    parser.add_argument('--moves', type=str, default=None,
                        help='Override move set preset (cross_price, cross_full_price, moore)')
    parser.add_argument('--out-dir', type=Path, default=Path('./output'),
                        help='Output directory for exports (default: ./output)')

    # Export toggles
    parser.add_argument('--csv', dest='csv', action='store_true', default=None,
                        help='Enable CSV export (default)')
    parser.add_argument('--no-csv', dest='csv', action='store_false',
                        help='Disable CSV export')

    parser.add_argument('--snapshot', dest='snapshot', action='store_true', default=None,
                        help='Enable PNG snapshots (default)')
    parser.add_argument('--no-snapshot', dest='snapshot', action='store_false',
                        help='Disable PNG snapshots')
    parser.add_argument('--snapshot-every', type=int, default=None,
                        help='Save a snapshot every N ticks (0 = final only)')

    parser.add_argument('--gif', action='store_true', default=False,
                        help='Enable GIF animation export')

    parser.add_argument('--quiet', action='store_true', default=False,
                        help='Suppress stdout output')
    parser.add_argument('--log-level', default='WARNING',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Console log level (default: WARNING)')
    parser.add_argument('--log-dir', type=Path, default=None,
                        help='Also write a DEBUG log file to this directory')

    parser.add_argument('--seed', type=int, default=None,
                        help='Random seed for reproducibility')

    return parser.parse_args(argv)


def main(argv=None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    setup_logger(level=getattr(logging, args.log_level), log_dir=args.log_dir)

    # Load configuration
    try:
        config = load_config(args.config)
    except FileNotFoundError:
        print(f"Error: Configuration file not found: {args.config}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return 1

    # Apply CLI overrides
    if args.ticks is not None:
        config.max_ticks = args.ticks
    if args.sellers is not None:
        config.sellers.count = args.sellers
    if args.moves is not None:
        config.optimizer.moves = args.moves
    if args.csv is not None:
        config.csv_enabled = args.csv
    if args.snapshot is not None:
        config.snapshot_enabled = args.snapshot
    if args.snapshot_every is not None:
        config.snapshot_every = args.snapshot_every
    if args.gif:
        config.gif_enabled = True
    config.quiet = args.quiet
    if args.seed is not None:
        config.seed = args.seed
    config.out_dir = args.out_dir

    # Initialize engine
    if not config.quiet:
        print("Initializing simulation...")
        print(f"  Grid: {config.grid.width}x{config.grid.height}")
        print(f"  Sellers: {config.sellers.count}")
        print(f"  Max ticks: {config.max_ticks}")

    try:
        config.validate()
        engine = SimulationEngine(config)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    # Initialize exporters
    csv_writer = None
    if config.csv_enabled:
        csv_writer = CSVWriter(config.out_dir / 'simulation_log.csv')
        csv_writer.open()

    visualizer = Visualizer(config.grid.width, config.grid.height,
                            config.sellers.count, seed=config.seed)

    reporter = Reporter(str(args.config), config.seed)

    def snapshot_path(tick: int) -> Path:
        return config.out_dir / Visualizer.snapshot_name(
            tick, config.sellers.count,
            config.market.transport_cost, config.market.price_sensitivity,
            config.market.max_price, config.sellers.start_price
        )

    # Main simulation loop
    if not config.quiet:
        print("\nRunning simulation...")

    # Ticks complete before anything reads the state
    final_state = engine.snapshot()
    try:
        while not engine.is_finished():
            state = engine.step()
            final_state = state

            if csv_writer:
                csv_writer.append(state)

            if config.snapshot_enabled and config.snapshot_every and \
                    state.tick % config.snapshot_every == 0:
                visualizer.save_snapshot(state, snapshot_path(state.tick))

            # Buffer GIF frame (every N ticks to reduce memory)
            if config.gif_enabled:
                if state.tick % 5 == 0 or engine.is_finished():
                    visualizer.buffer_frame(state)

            reporter.update(state)

            if not config.quiet and state.tick % 100 == 0:
                print(f"  Tick {state.tick}: mean price {state.metrics['mean_price']:.1f}, "
                      f"{state.metrics['moved']} moved")

    except KeyboardInterrupt:
        if not config.quiet:
            print("\nSimulation interrupted by user.")

    # Cleanup and final exports
    if csv_writer:
        csv_writer.close()
        if not config.quiet:
            print(f"\nCSV saved: {config.out_dir / 'simulation_log.csv'}")

    if config.snapshot_enabled:
        final_path = config.out_dir / 'final_state.png'
        visualizer.save_snapshot(final_state, final_path)
        if not config.quiet:
            print(f"Snapshot saved: {final_path}")

    if config.gif_enabled:
        gif_path = config.out_dir / 'simulation.gif'
        if not config.quiet:
            print(f"Generating GIF ({len(visualizer.frames)} frames)...")
        visualizer.generate_gif(gif_path, fps=10)
        if not config.quiet:
            print(f"Animation saved: {gif_path}")

    if not config.quiet:
        report = reporter.generate_summary(
            final_state,
            config.out_dir,
            config.csv_enabled,
            config.snapshot_enabled,
            config.gif_enabled
        )
        print(report)

    return 0


if __name__ == '__main__':
    sys.exit(main())
