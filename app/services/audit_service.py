import uuid
from datetime import date, datetime, time, timedelta, timezone

from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload

from app.models.audit_log import AuditLog
from app.models.employee import Employee


def log_audit(db: Session, description: str, performed_by: Employee | None = None,
              affected_resource_id: str | None = None, affected_resource_type: str | None = None) -> AuditLog:
    """Add an audit entry to the current unit of work. The caller commits."""
    entry = AuditLog(
        id=str(uuid.uuid4()),
        performed_by_id=performed_by.id if performed_by else None,
        affected_resource_id=affected_resource_id,
        affected_resource_type=affected_resource_type,
        description=description,
    )
    db.add(entry)
    return entry


def list_audit_logs(db: Session, day: date) -> list[AuditLog]:
    """Entries created on ``day`` (UTC), newest first."""
    start = datetime.combine(day, time.min, tzinfo=timezone.utc)
    end = start + timedelta(days=1)
    return list(db.execute(
        select(AuditLog)
        .options(joinedload(AuditLog.performed_by).joinedload(Employee.user))
        .where(AuditLog.created_at >= start, AuditLog.created_at < end)
        .order_by(AuditLog.created_at.desc())
    ).unique().scalars().all())
