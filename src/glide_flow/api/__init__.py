"""HTTP API for Glide flows.

Exposes flow creation, step splitting and step progress over FastAPI.
"""

from __future__ import annotations

from .app import create_app

__all__ = ["create_app"]
