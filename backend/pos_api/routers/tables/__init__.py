"""Tables router package."""

from .routes import router, get_move_collaborators

__all__ = ["router", "get_move_collaborators"]
