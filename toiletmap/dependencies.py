"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

import logging

from toiletmap.config import get_settings
from toiletmap.db import DbClient, InMemoryDbClient, SqlDbClient
from toiletmap.sample_data import seed_sample_data

logger = logging.getLogger(__name__)

_db_client: DbClient | None = None


def get_db_client() -> DbClient:
    """
    Return a singleton DB client so in-memory state persists across requests.
    """
    global _db_client
    if _db_client:
        return _db_client

    settings = get_settings()
    if settings.use_in_memory_backends or not settings.database_url:
        client = InMemoryDbClient()
        if settings.seed_sample_data:
            seed_sample_data(client)
        logger.info("Using in-memory database")
        _db_client = client
    else:
        _db_client = SqlDbClient(settings.database_url)
        logger.info(
            "Using SQL database at %s",
            _db_client.engine.url.render_as_string(hide_password=True),
        )
    return _db_client
