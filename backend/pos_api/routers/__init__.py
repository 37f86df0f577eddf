"""
API routers.
"""

from .tables import router as tables_router

__all__ = ["tables_router"]
