"""Geocoding collaborator client."""

from .nominatim import NominatimClient

__all__ = ["NominatimClient"]
