"""Route group exports."""

from . import health, reports, routes

__all__ = ["health", "reports", "routes"]
