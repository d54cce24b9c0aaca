"""Liveness endpoint that also checks the database connection."""

import logging
import sqlite3

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from miqaat_api.app.core.db import get_connection

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("")
async def health() -> JSONResponse:
    try:
        conn = get_connection()
        try:
            conn.execute("SELECT 1").fetchone()
        finally:
            conn.close()
    except sqlite3.Error as e:
        logger.error("Health check failed: %s", e)
        return JSONResponse(status_code=503, content={"status": "unhealthy", "database": "disconnected"})
    return JSONResponse(content={"status": "healthy", "database": "connected"})
