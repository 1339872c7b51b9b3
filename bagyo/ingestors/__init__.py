"""Data ingestors for Bagyo Watch."""

from .location import DEFAULT_LOCATION, LocationIngestor
from .weather import OpenWeatherIngestor, bucket_forecast_days

__all__ = [
    "DEFAULT_LOCATION",
    "LocationIngestor",
    "OpenWeatherIngestor",
    "bucket_forecast_days",
]
