from typing import Optional

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from database import get_db
from models.log import Log
from schemas.auth import AdminIdentity
from utils.tokenJWT import get_current_admin


def write_log(db: Session, *, actor, action, resource, status="SUCCESS", ip=None, meta=None):
    entry = Log(actor=actor, action=action, resource=resource, status=status, ip=ip, meta=meta or {})
    db.add(entry)
    db.commit()


# Binds the audit log to the admin making the current request
class Auditor:
    def __init__(self, db: Session, actor: Optional[str], ip: Optional[str]):
        self.db = db
        self.actor = actor
        self.ip = ip

    def record(self, action: str, resource: str, status: str = "SUCCESS", meta: dict = None):
        write_log(self.db, actor=self.actor, action=action, resource=resource, status=status, ip=self.ip, meta=meta)


def get_auditor(
    request: Request,
    db: Session = Depends(get_db),
    current_admin: AdminIdentity = Depends(get_current_admin),
) -> Auditor:
    return Auditor(db, current_admin.username, request.client.host if request.client else None)


def get_no_auditor() -> Optional[Auditor]:
    return None
