"""
==============================================================================
Health Check Endpoints
==============================================================================

    GET /health         database status, row counts and registered packages
    GET /health/ready   readiness probe
    GET /health/live    liveness probe

==============================================================================
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.db.database import get_db
from app.db.init_db import DatabaseInitializer
from app.plugins import get_registry


router = APIRouter(prefix="/health", tags=["Health"])


class HealthController:
    """Collects component status for /health."""

    def __init__(self, db: Session):
        self._db = db

    def database_ok(self) -> bool:
        try:
            self._db.execute(text("SELECT 1"))
        except SQLAlchemyError:
            return False
        return True

    def report(self) -> Dict[str, Any]:
        db_ok = self.database_ok()
        counts = (
            DatabaseInitializer(session=self._db).get_stats()
            if db_ok
            else {"products": 0, "catalog_entries": 0}
        )

        return {
            "status": "healthy" if db_ok else "degraded",
            "components": {
                "api": "healthy",
                "database": "healthy" if db_ok else "unhealthy",
            },
            "details": dict(counts, packages=get_registry().names()),
        }


@router.get("")
async def health_check(db: Session = Depends(get_db)):
    return HealthController(db).report()


@router.get("/ready")
async def readiness_check():
    return {"ready": True}


@router.get("/live")
async def liveness_check():
    return {"alive": True}
