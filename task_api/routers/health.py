# task_api/routers/health.py
from fastapi import APIRouter, Depends
from sqlmodel import Session, text

from task_api.db.session import get_session

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
def health_app():
    return {"ok": True}


@router.get("/db")
def health_db(db: Session = Depends(get_session)):
    # Migration is a deployment concern. Runtime only verifies DB connectivity;
    # failures go through the shared error handlers as a 500.
    db.exec(text("SELECT 1"))
    return {"ok": True}
