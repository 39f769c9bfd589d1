"""
FastAPI Main Application

Entry point for the statement processing API.
"""

import asyncio
import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from statement_processor.advice import AdviceProvider
from statement_processor.config import IngestionSettings
from statement_processor.pdf_extractor import PdfPlumberTextExtractor, TextExtractor
from statement_processor.store import Store

from .auth import AuthProvider
from .routes import bank_router, insights_router, transactions_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info("Starting Statement Processor API...")

    extractor = app.state.text_extractor
    if isinstance(extractor, PdfPlumberTextExtractor) and not extractor.is_available():
        settings = app.state.settings
        available = await asyncio.to_thread(
            extractor.initialize_with_retry,
            settings.pdf_init_retries,
            settings.pdf_init_delay,
        )
        if not available:
            logger.warning("PDF parsing unavailable; PDF uploads will get the JSON template")

    yield
    logger.info("Shutting down Statement Processor API...")


def create_app(
    store: Store | None = None,
    auth_provider: AuthProvider | None = None,
    text_extractor: TextExtractor | None = None,
    advice_provider: AdviceProvider | None = None,
    settings: IngestionSettings | None = None,
) -> FastAPI:
    """Build the API application.

    Args:
        store: Transaction store (defaults to SqlStore on DATABASE_URL, created lazily)
        auth_provider: Token resolver (defaults to config/api_tokens.yaml)
        text_extractor: PDF text extractor (defaults to pdfplumber)
        advice_provider: Advice generator (defaults from ANTHROPIC_API_KEY)
        settings: Ingestion settings (defaults to IngestionSettings.load())

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title="Statement Processor API",
        description="Bank and wallet statement ingestion, transactions and insights",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.state.store = store
    app.state.auth_provider = auth_provider
    app.state.text_extractor = text_extractor or PdfPlumberTextExtractor()
    app.state.advice_provider = advice_provider
    app.state.settings = settings or IngestionSettings.load()
    app.state.orchestrator = None

    # CORS configuration
    cors_origins = os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(bank_router, prefix="/api")
    app.include_router(transactions_router, prefix="/api")
    app.include_router(insights_router, prefix="/api")

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "name": "Statement Processor API",
            "version": "1.0.0",
            "status": "running",
        }

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "pdf_parsing": app.state.text_extractor.is_available(),
        }

    @app.get("/api")
    async def api_info():
        """API information endpoint."""
        return {
            "endpoints": {
                "upload": "/api/bank/upload",
                "template": "/api/bank/template",
                "account": "/api/bank/account",
                "transactions": "/api/transactions",
                "summary": "/api/transactions/summary",
                "insights": "/api/insights",
            },
            "authentication": "Authorization: Bearer <token> required in production",
        }

    return app


logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=os.getenv("ENVIRONMENT", "development") == "development",
    )
