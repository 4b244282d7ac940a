"""Safety-ranked route planning service."""
