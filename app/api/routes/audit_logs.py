from datetime import date, datetime, timezone

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.deps import require_permissions
from app.api.serializers import audit_log_out
from app.core.utils import success_response
from app.db.session import get_db
from app.models.permissions import Permission
from app.services.audit_service import list_audit_logs

router = APIRouter(tags=["audit"])


@router.get("/audit-logs")
def audit_logs(day: date | None = Query(default=None, alias="date"),
               db: Session = Depends(get_db),
               _auth=Depends(require_permissions(Permission.VIEW_AUDIT_LOGS))):
    day = day or datetime.now(timezone.utc).date()
    entries = list_audit_logs(db, day)
    return success_response("Audit logs", {"date": day.isoformat(), "logs": [audit_log_out(a) for a in entries]})
