"""Persistence for safety reports."""
