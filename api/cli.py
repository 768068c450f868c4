#!/usr/bin/env python3
"""
FuelEU Ledger CLI Tool.

Command-line interface for administrative tasks:
- Database operations
- Sample route seeding
- Target table inspection

Usage:
    python -m api.cli init-db
    python -m api.cli seed-routes
    python -m api.cli show-targets
"""
import argparse
import sys

from fueleu.config import settings as domain_settings
from fueleu.records import Route


# Sample routes; R001 becomes the comparison baseline
SAMPLE_ROUTES = [
    Route("R001", "Container", "HFO", 2024, 91.0, 5000.0, 12000.0, 4500.0),
    Route("R002", "BulkCarrier", "LNG", 2024, 88.0, 4800.0, 11500.0, 4200.0),
    Route("R003", "Tanker", "MGO", 2024, 93.5, 5100.0, 12500.0, 4700.0),
    Route("R004", "RoRo", "HFO", 2025, 89.2, 4900.0, 11800.0, 4300.0),
    Route("R005", "Container", "LNG", 2025, 90.5, 4950.0, 11900.0, 4400.0),
]


def init_db() -> None:
    """Initialize the database."""
    from api.database import init_db as do_init

    print("Initializing database...")
    do_init()
    print("Database initialized successfully.")


def seed_routes(baseline: str = "R001") -> None:
    """Insert the sample routes that are missing and set the baseline."""
    from api.database import get_db_context
    from api.repositories import SqlRouteStore
    from fueleu.compliance import RouteComparisonService

    with get_db_context() as db:
        service = RouteComparisonService(SqlRouteStore(db))
        created = 0
        for route in SAMPLE_ROUTES:
            if service.store.get(route.route_id) is None:
                service.create_route(route)
                created += 1
        service.set_baseline(baseline)

    print(f"\nSeeded {created} route(s); baseline is {baseline}.")


def show_targets() -> None:
    """Print the GHG intensity target table in use."""
    from fueleu.compliance import get_target_table

    print("\n" + "=" * 40)
    print("GHG INTENSITY TARGETS")
    print("=" * 40)
    print(f"{'From year':<12} {'Target (gCO2eq/MJ)':<20}")
    print("-" * 40)
    for row in get_target_table().limits():
        print(f"{row['year']:<12} {row['target']:<20}")
    print("=" * 40 + "\n")


def main():
    parser = argparse.ArgumentParser(
        description="FuelEU Ledger CLI Tool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  Initialize database:
    python -m api.cli init-db

  Seed sample routes with R003 as baseline:
    python -m api.cli seed-routes --baseline R003

  Show target table:
    python -m api.cli show-targets
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # init-db
    subparsers.add_parser("init-db", help="Initialize the database")

    # seed-routes
    seed_parser = subparsers.add_parser("seed-routes", help="Insert sample routes")
    seed_parser.add_argument(
        "--baseline",
        default="R001",
        help="Route id to use as comparison baseline (default: R001)"
    )

    # show-targets
    subparsers.add_parser("show-targets", help="Print the GHG intensity target table")

    args = parser.parse_args()
    domain_settings.configure_logging()

    if args.command == "init-db":
        init_db()
    elif args.command == "seed-routes":
        seed_routes(args.baseline)
    elif args.command == "show-targets":
        show_targets()
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
