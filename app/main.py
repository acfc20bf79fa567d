"""
Process entry point for Personal Ledger.

Run with:
    uvicorn app.main:app

Required environment:
    AUTH_SECRET_KEY     signing secret for identity tokens
Optional:
    DATABASE_URL        SQLAlchemy URL (default sqlite:///./ledger.db)
    CORS_ORIGINS        comma-separated allowed origins
    LOG_LEVEL           structured log level

The database connection is opened lazily by the first request.
"""

from ledger.api import create_app
from ledger.audit import configure_logging
from ledger.config import get_settings


configure_logging(get_settings().app.log_level)

app = create_app()
