"""Health check and ping endpoints.

Learn: /health verifies the server is running and the database is
reachable. /ping is a liveness probe with no dependencies at all.
"""

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from gatehouse import __version__
from gatehouse.db.engine import get_db

SERVICE_NAME = "gatehouse"

router = APIRouter()


@router.get("/health")
async def health_check(db: AsyncSession = Depends(get_db)):
    """Check server health and database connectivity."""
    checks = {"server": "ok", "version": __version__}

    try:
        await db.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except SQLAlchemyError as e:
        checks["database"] = f"error: {type(e).__name__}"

    status = "ok" if checks["database"] == "ok" else "degraded"
    return {"status": status, **checks}


@router.get("/ping")
async def ping():
    return {"message": "pong", "from": SERVICE_NAME}


@router.get("/ping/{name}")
async def ping_name(name: str):
    return {"message": "pong", "from": name}
