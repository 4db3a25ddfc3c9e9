from sqlalchemy import String, DateTime, Boolean, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from datetime import datetime, timezone
from app.db.session import Base

EMPLOYEE_TYPES = ("admin", "driver", "rider")

class Employee(Base):
    __tablename__ = "employees"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id", ondelete="RESTRICT"), unique=True, index=True)
    type: Mapped[str] = mapped_column(String(12), default="admin")  # admin|driver|rider
    role_id: Mapped[str | None] = mapped_column(String(36), ForeignKey("employee_roles.id", ondelete="SET NULL"), nullable=True, index=True)
    is_online: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    user = relationship("User", back_populates="employee_account")
    role = relationship("EmployeeRole", back_populates="employees")
