"""
Database Connection Module

Resolves the transaction store used by the API.
"""

import os

from fastapi import Request

from statement_processor.store import Store, create_store

# Database URL from environment
DATABASE_URL = os.getenv(
    "DATABASE_URL",
    f"postgresql://{os.getenv('POSTGRES_USER', 'statements')}:"
    f"{os.getenv('POSTGRES_PASSWORD', 'password')}@"
    f"{os.getenv('POSTGRES_HOST', 'localhost')}:"
    f"{os.getenv('POSTGRES_PORT', '5432')}/"
    f"{os.getenv('POSTGRES_DB', 'statement_processor')}"
)


def get_store(request: Request) -> Store:
    """Get the application's store for FastAPI dependency injection.

    The default SQL store is created on first use so importing the app never
    opens a database connection.

    Returns:
        Store bound to the application
    """
    state = request.app.state
    if state.store is None:
        state.store = create_store(DATABASE_URL)
    return state.store
