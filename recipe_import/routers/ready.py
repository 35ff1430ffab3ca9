import logging

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from ..deps import get_db, get_registry
from ..parsing import ParserRegistry

router = APIRouter()
logger = logging.getLogger("recipe_import.ready")


@router.get("/ready")
def ready(db: Session = Depends(get_db), registry: ParserRegistry = Depends(get_registry)):
    db_ok = False
    try:
        db.execute(text("SELECT 1"))
        db_ok = True
    except Exception as e:
        logger.warning(f"Readiness DB check failed: {e}")
    return {"ok": True, "db_ok": db_ok, "parsers": len(registry.parsers)}
