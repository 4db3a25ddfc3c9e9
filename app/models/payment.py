from decimal import Decimal
from sqlalchemy import String, DateTime, Numeric, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from datetime import datetime, timezone
from app.db.session import Base

PAYMENT_METHODS = ("cash", "mobile_money", "card")
PAYMENT_STATUSES = ("pending", "confirmed", "failed")

class AirportPickupBookingPayment(Base):
    __tablename__ = "airport_pickup_booking_payments"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    booking_id: Mapped[str] = mapped_column(String(36), ForeignKey("airport_pickup_bookings.id", ondelete="CASCADE"), unique=True, index=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    currency: Mapped[str] = mapped_column(String(3), default="UGX")
    method: Mapped[str | None] = mapped_column(String(20), nullable=True)  # cash, mobile_money, card
    status: Mapped[str] = mapped_column(String(20), default="pending")  # pending, confirmed, failed
    transaction_token: Mapped[str | None] = mapped_column(String(120), nullable=True, index=True)  # gateway TransToken
    gateway_reference: Mapped[str | None] = mapped_column(String(120), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    booking = relationship("AirportPickupBooking", back_populates="payment")
