"""API routes for the Load Consolidation Service."""

from . import loads

__all__ = ["loads"]
