"""Look up parking near a coordinate from the command line."""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Optional

from parking_finder.config import AppConfig, load_config
from parking_finder.discovery.service import DiscoveryService
from parking_finder.geo import Coordinate
from parking_finder.overpass.client import OverpassClient
from parking_finder.ranking import distance_to, format_distance, rank_spots
from parking_finder.state.models import ParkingSpot


def format_row(spot: ParkingSpot, origin: Optional[Coordinate]) -> str:
    """One list line: name, type, capacity, fee, access and distance."""
    details = [spot.type.label]
    if spot.capacity is not None:
        details.append(f"{spot.capacity} spaces")
    if spot.fee_label:
        details.append(spot.fee_label)
    if spot.access_label:
        details.append(spot.access_label)

    line = f"{spot.name} ({' · '.join(details)})"

    distance = distance_to(spot, origin)
    if distance is not None:
        line = f"{format_distance(distance):>8}  {line}"
    return line


async def find_parking(
    center: Coordinate,
    config: AppConfig,
    radius_meters: Optional[int] = None,
) -> DiscoveryService:
    """
    Run a single discovery cycle around ``center``.

    Args:
        center: Search center
        config: Application configuration
        radius_meters: Override for the configured search radius

    Returns:
        The service after the fetch finished
    """
    async with OverpassClient(
        url=config.overpass.url,
        timeout_seconds=config.overpass.timeout_seconds,
        user_agent=config.overpass.user_agent,
    ) as client:
        service = DiscoveryService(
            client,
            search_radius_meters=radius_meters or config.discovery.search_radius_meters,
            min_refetch_distance_meters=config.discovery.min_refetch_distance_meters,
            server_timeout_seconds=config.overpass.server_timeout_seconds,
        )
        await service.on_position_update(center)
        return service


def main(argv: Optional[list[str]] = None) -> int:
    """CLI entry point for a one-off parking lookup."""
    parser = argparse.ArgumentParser(description="List parking near a coordinate.")
    parser.add_argument("lat", type=float)
    parser.add_argument("lon", type=float)
    parser.add_argument("--radius", type=int, default=None, help="Search radius in meters")
    parser.add_argument("--query", default="", help="Filter by name or type")
    parser.add_argument("--config", type=Path, default=None, help="Path to config.yaml")
    args = parser.parse_args(argv)

    config = load_config(args.config) if args.config else AppConfig()
    center = Coordinate(lat=args.lat, lon=args.lon)

    service = asyncio.run(find_parking(center, config, args.radius))

    if service.error_message:
        print(f"Error: {service.error_message}", file=sys.stderr)
        return 1

    spots = rank_spots(service.spots, query=args.query, origin=center)
    if not spots:
        print("No parking found.")
        return 0

    print(f"{len(spots)} parking spot(s) near {center.lat:.5f}, {center.lon:.5f}:\n")
    for spot in spots:
        print(format_row(spot, center))
    return 0


if __name__ == "__main__":
    sys.exit(main())
