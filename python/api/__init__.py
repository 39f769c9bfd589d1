"""
FastAPI Backend for Statement Processing

Provides REST API endpoints for statement uploads, transactions and insights.
"""

from .main import app, create_app

__all__ = ["app", "create_app"]
