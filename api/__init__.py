"""REST API for libraryapi.

Serves /api/books and /api/loans.
"""

from .books import router as books_router
from .loans import router as loans_router

__all__ = ["books_router", "loans_router"]
