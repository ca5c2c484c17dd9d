# backend/routes/logs.py
"""Admin audit trail: who changed which catalog item, and when."""
from datetime import date, datetime, time, timedelta
from typing import Any, List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, ConfigDict
from sqlalchemy.orm import Query as SqlQuery, Session

from database import get_db
from models.log import Log
from utils.tokenJWT import get_current_admin

router = APIRouter(prefix="/api/admin/logs", tags=["Logs"], dependencies=[Depends(get_current_admin)])

# Values written by the catalog, upload and auth handlers
AuditResource = Literal["product", "category", "set", "images", "auth"]


class AuditEntry(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    ts: datetime
    actor: Optional[str] = None
    action: str
    resource: str
    status: str
    ip: Optional[str] = None
    meta: Optional[Any] = None


class AuditPage(BaseModel):
    items: List[AuditEntry]
    total: int
    page: int
    page_size: int


def parse_bound(value: Optional[str], name: str, end_of_day: bool = False) -> Optional[datetime]:
    """ISO date or datetime; a bare date as upper bound covers that whole day."""
    if not value:
        return None
    try:
        if len(value) == 10:
            day = date.fromisoformat(value)
            return datetime.combine(day + timedelta(days=1) if end_of_day else day, time.min)
        return datetime.fromisoformat(value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid {name}: expected YYYY-MM-DD or ISO datetime")


def _page(query: SqlQuery, page: int, page_size: int) -> dict:
    query = query.order_by(Log.ts.desc(), Log.id.desc())
    return {
        "items": query.offset((page - 1) * page_size).limit(page_size).all(),
        "total": query.count(),
        "page": page,
        "page_size": page_size,
    }


@router.get("", response_model=AuditPage)
def list_audit_entries(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    resource: Optional[AuditResource] = Query(None),
    entity_id: Optional[str] = Query(None, alias="entityId", description="Catalog item id"),
    action: Optional[str] = Query(None, description="CREATE, UPDATE, DELETE, DUPLICATE, UPLOAD or LOGIN"),
    actor: Optional[str] = Query(None),
    status: Optional[Literal["SUCCESS", "FAIL"]] = Query(None),
    since: Optional[str] = Query(None, description="From date (YYYY-MM-DD or ISO datetime)"),
    until: Optional[str] = Query(None, description="To date, inclusive"),
    db: Session = Depends(get_db),
):
    start = parse_bound(since, "since")
    end = parse_bound(until, "until", end_of_day=True)
    if start and end and start >= end:
        raise HTTPException(status_code=400, detail="'since' must be before 'until'")

    query = db.query(Log)
    if resource:
        query = query.filter(Log.resource == resource)
    if entity_id:
        query = query.filter(Log.meta["id"].as_string() == entity_id)
    if action:
        query = query.filter(Log.action == action.upper())
    if actor:
        query = query.filter(Log.actor == actor)
    if status:
        query = query.filter(Log.status == status)
    if start:
        query = query.filter(Log.ts >= start)
    if end:
        query = query.filter(Log.ts < end)

    return _page(query, page, page_size)


# Edit history of one catalog item, newest first
@router.get("/{resource}/{entity_id}", response_model=AuditPage)
def entity_history(
    resource: Literal["product", "category", "set"],
    entity_id: str,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
):
    query = db.query(Log).filter(Log.resource == resource, Log.meta["id"].as_string() == entity_id)
    return _page(query, page, page_size)
