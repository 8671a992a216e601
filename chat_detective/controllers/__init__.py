"""FastAPI routers acting as controllers in the MVC architecture."""

from . import analysis

__all__ = ["analysis"]
