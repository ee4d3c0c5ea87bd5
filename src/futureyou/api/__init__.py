"""HTTP boundary for the generation collaborator."""

from .routes import create_app, create_router

__all__ = ["create_app", "create_router"]
