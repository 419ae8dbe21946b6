"""
Catalog module for Tuner.

This package contains the station/track value types and the clients
that fetch them (remote JSON API or local directory tree).
"""

from tuner.catalog.models import AudioUrl, Station, Track, TrackAudio
from tuner.catalog.client import CatalogClient, HttpCatalogClient
from tuner.catalog.local import LocalCatalogClient

__all__ = [
    "AudioUrl",
    "Station",
    "Track",
    "TrackAudio",
    "CatalogClient",
    "HttpCatalogClient",
    "LocalCatalogClient",
]
