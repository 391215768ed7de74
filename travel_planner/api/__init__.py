"""HTTP API for travel planner."""
from .routes import router

__all__ = ["router"]
