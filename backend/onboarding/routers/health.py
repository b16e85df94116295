from fastapi import APIRouter, Depends
from sqlalchemy import inspect, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from onboarding.core.deps import get_db
from onboarding.models.audit_log import MerchantAuditLog

router = APIRouter()


@router.get("")
def health_check(db: Session = Depends(get_db)):
    """Database connectivity and whether the audit table has been migrated."""
    try:
        db.execute(text("SELECT 1"))
        audit_ready = inspect(db.get_bind()).has_table(MerchantAuditLog.__tablename__)
    except SQLAlchemyError:
        return {"status": "degraded", "database": "disconnected", "audit_log": "unknown"}
    return {
        "status": "ok" if audit_ready else "degraded",
        "database": "connected",
        "audit_log": "ready" if audit_ready else "missing",
    }
