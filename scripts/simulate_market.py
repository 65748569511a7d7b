#!/usr/bin/env python3
"""Simulate a lot market and export its events.

Runs the rental marketplace scenario (mint, list, sell, rent, settle,
reclaim) and writes every lot event plus the final lot snapshots to one
sink:
- console: one line per event on stdout (full JSON with --verbose)
- json: JSON Lines files under --output-dir
- kafka: the market's event topic on --kafka-bootstrap
- postgres: ``lot_events`` and ``lots`` tables on --postgres-url
"""

import argparse
import sys
from dataclasses import replace
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from lot_market.config import LotMarketConfig, ScenarioConfig
from lot_market.logging import get_logger, setup_logging
from lot_market.scenarios import RentalMarketplaceScenario
from lot_market.sinks import ConsoleSink, JsonFileSink, KafkaSink, PostgresSink

logger = get_logger(__name__)


def build_sink(args: argparse.Namespace, config: LotMarketConfig):
    """Create the sink selected on the command line."""
    if args.sink == "console":
        return ConsoleSink(verbose=args.verbose, max_records=args.max_records)
    if args.sink == "json":
        return JsonFileSink(
            args.output_dir or config.output_dir,
            pretty=config.pretty_json,
        )
    if args.sink == "kafka":
        kafka = config.kafka
        if args.kafka_bootstrap:
            kafka = replace(kafka, bootstrap_servers=args.kafka_bootstrap)
        return KafkaSink(kafka)
    return PostgresSink(args.postgres_url or config.postgres.connection_string)


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Simulate a lot market and export its events")
    parser.add_argument(
        "--owners",
        type=int,
        default=10,
        help="Number of wallets that mint lots (default: 10)",
    )
    parser.add_argument(
        "--lots-per-owner",
        type=int,
        default=2,
        help="Lots minted per owner (default: 2)",
    )
    parser.add_argument(
        "--renters",
        type=int,
        default=20,
        help="Number of wallets that rent or buy (default: 20)",
    )
    parser.add_argument(
        "--rental-days",
        type=int,
        default=2,
        help="Length of each rental in days (default: 2)",
    )
    parser.add_argument(
        "--late-rate",
        type=float,
        default=0.1,
        help="Share of renters that miss the grace window (default: 0.1)",
    )
    parser.add_argument(
        "--sale-rate",
        type=float,
        default=0.2,
        help="Share of lots sold instead of rented (default: 0.2)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for reproducibility (default: SEED env or none)",
    )
    parser.add_argument(
        "--sink",
        choices=["console", "json", "kafka", "postgres"],
        default="console",
        help="Where to write events (default: console)",
    )
    parser.add_argument("--output-dir", type=Path, default=None, help="Directory for --sink json")
    parser.add_argument("--kafka-bootstrap", type=str, default=None, help="Kafka bootstrap servers")
    parser.add_argument("--postgres-url", type=str, default=None, help="PostgreSQL connection string")
    parser.add_argument(
        "--max-records",
        type=int,
        default=None,
        help="Maximum records printed per batch with --sink console",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Print full JSON records with --sink console",
    )
    parser.add_argument("--log-level", type=str, default=None, help="Log level (default: LOG_LEVEL env or INFO)")
    parser.add_argument("--log-format", choices=["standard", "json"], default="standard")
    args = parser.parse_args()

    config = LotMarketConfig.from_env()
    setup_logging(args.log_level or config.log_level, args.log_format)

    scenario_config = ScenarioConfig(
        name="cli",
        num_owners=args.owners,
        lots_per_owner=args.lots_per_owner,
        num_renters=args.renters,
        rental_days=args.rental_days,
        late_rate=args.late_rate,
        sale_rate=args.sale_rate,
    )
    seed = args.seed if args.seed is not None else config.seed

    sink = build_sink(args, config)
    scenario = RentalMarketplaceScenario(
        seed=seed,
        config=scenario_config,
        market_config=config.market,
        sinks=[sink],
    )
    market = scenario.generate()
    sink.write_batch("lots", market.get_lots())
    market.close()

    print("\nSummary:")
    for key, value in scenario.summary().items():
        print(f"  {key}: {value}")


if __name__ == "__main__":
    main()
