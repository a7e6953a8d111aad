"""FastAPI application serving the static-site export download."""

from __future__ import annotations

import logging

from fastapi import FastAPI
from sqlalchemy import text

from .config import DATABASE_URL
from .db import engine
from .routers import export_router


logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="ssg-export",
    version="2.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.include_router(export_router)


@app.get("/health")
def health() -> dict:
    try:
        with engine.connect() as conn:
            conn.execute(text("select 1"))
        db_status = "ok"
    except Exception:
        logger.exception("event=health.db_error")
        db_status = "error"
    return {
        "status": "ok",
        "db": db_status,
        "driver": engine.dialect.name,
        "database_url_present": bool(DATABASE_URL),
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("ssg_export.main:app", host="0.0.0.0", port=8000, reload=True)
