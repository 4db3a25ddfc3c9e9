from sqlalchemy import String, DateTime, Text, ForeignKey, event
from sqlalchemy.orm import Mapped, mapped_column, relationship
from datetime import datetime, timezone
from app.db.session import Base

class AuditLog(Base):
    __tablename__ = "audit_logs"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    performed_by_id: Mapped[str | None] = mapped_column(String(36), ForeignKey("employees.id", ondelete="SET NULL"), nullable=True, index=True)
    affected_resource_id: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    affected_resource_type: Mapped[str | None] = mapped_column(String(40), nullable=True)  # Session, User, Employee, AirportPickupBooking, ...
    description: Mapped[str] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), index=True)

    performed_by = relationship("Employee")


@event.listens_for(AuditLog, "before_update")
def _refuse_update(mapper, connection, target):
    raise RuntimeError("audit log entries are append-only")


@event.listens_for(AuditLog, "before_delete")
def _refuse_delete(mapper, connection, target):
    raise RuntimeError("audit log entries are append-only")
