"""Main application entry point."""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from .api.router import init_router, router
from .config import AppConfig, get_config_path, load_config
from .discovery.service import DiscoveryService
from .location.tracker import LocationTracker, PositionFix
from .overpass.client import OverpassClient

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Global state
overpass_client: OverpassClient | None = None
discovery_service: DiscoveryService | None = None
location_tracker: LocationTracker | None = None
config: AppConfig | None = None


def build_components(cfg: AppConfig) -> tuple[OverpassClient, DiscoveryService, LocationTracker]:
    """
    Wire the Overpass client, discovery service and location tracker.

    Accepted position fixes from the tracker go straight to the service.
    """
    client = OverpassClient(
        url=cfg.overpass.url,
        timeout_seconds=cfg.overpass.timeout_seconds,
        user_agent=cfg.overpass.user_agent,
    )

    service = DiscoveryService(
        client,
        search_radius_meters=cfg.discovery.search_radius_meters,
        min_refetch_distance_meters=cfg.discovery.min_refetch_distance_meters,
        server_timeout_seconds=cfg.overpass.server_timeout_seconds,
    )

    async def forward_fix(fix: PositionFix) -> bool:
        return await service.on_position_update(fix.coordinate)

    tracker = LocationTracker(
        max_horizontal_accuracy_meters=cfg.location.max_horizontal_accuracy_meters,
        distance_filter_meters=cfg.location.distance_filter_meters,
        on_location=forward_fix,
    )

    return client, service, tracker


def load_app_config() -> AppConfig:
    """Load config/config.yaml, falling back to defaults when it is absent."""
    config_path = get_config_path()
    if not config_path.exists():
        logger.warning(f"Configuration file not found: {config_path}, using defaults")
        return AppConfig()

    cfg = load_config(config_path)
    logger.info(f"Loaded configuration from {config_path}")
    return cfg


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    global overpass_client, discovery_service, location_tracker, config

    logger.info("Starting Parking Finder...")

    config = load_app_config()
    overpass_client, discovery_service, location_tracker = build_components(config)
    await overpass_client.connect()

    init_router(discovery_service, location_tracker)

    logger.info(
        f"Search radius {config.discovery.search_radius_meters}m, "
        f"refetch after {config.discovery.min_refetch_distance_meters:g}m"
    )
    logger.info(f"Parking Finder ready on http://{config.api.host}:{config.api.port}")

    yield  # Application runs here

    # Shutdown
    logger.info("Shutting down...")

    if overpass_client:
        await overpass_client.close()

    logger.info("Shutdown complete")


# Create FastAPI app
app = FastAPI(
    title="Parking Finder",
    description="API for discovering parking facilities near a moving user via OpenStreetMap",
    version="1.0.0",
    lifespan=lifespan,
)

app.include_router(router, prefix="/api/v1")


def main():
    """Run the application."""
    # Load config just to get API settings
    cfg = load_app_config()

    uvicorn.run(
        "parking_finder.main:app",
        host=cfg.api.host,
        port=cfg.api.port,
        reload=False,
    )


if __name__ == "__main__":
    main()
