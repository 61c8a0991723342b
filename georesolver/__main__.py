"""Command line entry point for the coordinate resolver."""

import argparse
import asyncio
import json
import sys
from typing import Any

from georesolver.core.config import settings
from georesolver.core.errors import GeoResolverError
from georesolver.core.logging import configure_logging, get_logger
from georesolver.integration.service import (
    CoordinateIntegrationService,
    get_integration_service,
)


def parse_args(args: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments.

    Args:
        args: Optional list of arguments for testing

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        prog="georesolver",
        description="Resolve destinations to validated coordinates",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose/debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    validate = subparsers.add_parser(
        "validate", help="Validate one or more destinations"
    )
    validate.add_argument("destinations", nargs="+", help="Destination names")

    geocode = subparsers.add_parser("geocode", help="Geocode a single address")
    geocode.add_argument("address", help="Address or place name")
    geocode.add_argument(
        "--client-id", default="cli", help="Caller id used for rate limiting"
    )

    subparsers.add_parser("stats", help="Print resolver statistics")

    return parser.parse_args(args)


def _print_json(payload: Any) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False, default=str))


async def run(args: argparse.Namespace, service: CoordinateIntegrationService) -> int:
    if args.command == "validate":
        results = await service.validate_destinations(args.destinations)
        _print_json([result.model_dump(mode="json") for result in results])
        return 0 if all(result.is_valid for result in results) else 1

    if args.command == "geocode":
        try:
            result = await service.geocoding.geocode(args.address, client_id=args.client_id)
        except GeoResolverError as e:
            _print_json({"error": e.code, "message": str(e)})
            return 1
        _print_json(result.model_dump(mode="json"))
        return 0

    _print_json(service.get_coordinate_stats())
    return 0


def main(argv: list[str] | None = None) -> int:
    """Parse arguments, configure logging and run the requested command."""
    args = parse_args(argv)
    configure_logging(
        testing=not settings.JSON_LOGS,
        level="debug" if args.verbose else settings.LOG_LEVEL,
    )

    logger = get_logger(__name__, module="cli")
    logger.debug(f"Running command: {args.command}")

    return asyncio.run(run(args, get_integration_service()))


if __name__ == "__main__":
    sys.exit(main())
