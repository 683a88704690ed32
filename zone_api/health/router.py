from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..database.config import settings
from ..database.database import get_db

router = APIRouter(tags=["Health"])


def _base_health(status: str) -> dict:
    return {
        "status": status,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": settings.environment,
        "version": settings.version,
    }


def check_database(db: Session) -> dict:
    try:
        db.execute(text("SELECT 1"))
        return {"status": "ok"}
    except SQLAlchemyError as e:
        return {"status": "error", "message": str(e)}


@router.get("/health")
def health():
    return _base_health("ok")


@router.get("/health/detailed")
def health_detailed(db: Session = Depends(get_db)):
    checks = {"database": check_database(db)}
    healthy = all(check["status"] == "ok" for check in checks.values())

    body = _base_health("ok" if healthy else "degraded")
    body["checks"] = checks
    return JSONResponse(status_code=200 if healthy else 503, content=body)
