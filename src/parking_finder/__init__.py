"""Find parking facilities near a moving user using OpenStreetMap data."""

__version__ = "1.0.0"
