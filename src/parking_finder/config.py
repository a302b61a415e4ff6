"""Configuration models and loading utilities."""

import os
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator


class OverpassConfig(BaseModel):
    """Overpass API connection configuration."""

    url: str = "https://overpass-api.de/api/interpreter"
    timeout_seconds: float = Field(default=30.0, gt=0)  # Client-side request timeout
    server_timeout_seconds: int = Field(default=25, gt=0)  # [timeout:N] hint in the query
    user_agent: str = "parking-finder/1.0"

    @field_validator("url", mode="before")
    @classmethod
    def resolve_env_var(cls, v: str) -> str:
        """Resolve environment variable references like ${VAR_NAME}."""
        if isinstance(v, str) and v.startswith("${") and v.endswith("}"):
            env_var = v[2:-1]
            return os.environ.get(env_var, "")
        return v


class DiscoveryConfig(BaseModel):
    """Discovery pipeline configuration."""

    search_radius_meters: int = Field(default=1000, gt=0)
    min_refetch_distance_meters: float = Field(default=300.0, ge=0)


class LocationConfig(BaseModel):
    """Position source configuration."""

    max_horizontal_accuracy_meters: float = 100.0  # Fixes at or above this are dropped
    distance_filter_meters: float = 20.0  # Minimum movement between accepted fixes


class APIConfig(BaseModel):
    """API server configuration."""

    host: str = "0.0.0.0"
    port: int = 8000


class AppConfig(BaseModel):
    """Main application configuration."""

    overpass: OverpassConfig = OverpassConfig()
    discovery: DiscoveryConfig = DiscoveryConfig()
    location: LocationConfig = LocationConfig()
    api: APIConfig = APIConfig()


def load_config(path: str | Path) -> AppConfig:
    """
    Load configuration from a YAML file.

    Args:
        path: Path to the configuration file

    Returns:
        Validated AppConfig instance

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If config is invalid
    """
    config_path = Path(path)

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path) as f:
        data = yaml.safe_load(f)

    return AppConfig(**(data or {}))


def get_config_path() -> Path:
    """Get the default configuration file path."""
    # Check for config in current directory first
    local_config = Path("config/config.yaml")
    if local_config.exists():
        return local_config

    # Check for config in parent directory (for Docker)
    parent_config = Path("/app/config/config.yaml")
    if parent_config.exists():
        return parent_config

    return local_config  # Return default even if doesn't exist
