"""
API Routes Package

Contains all route modules for the statement API.
"""

from .bank import router as bank_router
from .insights import router as insights_router
from .transactions import router as transactions_router

__all__ = [
    "bank_router",
    "insights_router",
    "transactions_router",
]
