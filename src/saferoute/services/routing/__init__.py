"""Routing collaborator client and planning orchestration."""
