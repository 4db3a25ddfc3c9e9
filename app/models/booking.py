import enum
from decimal import Decimal
from sqlalchemy import String, DateTime, Float, Numeric, Text, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from datetime import datetime, timezone
from app.db.session import Base


class BookingStatus(str, enum.Enum):
    PENDING_PAYMENT = "pending_payment"
    ACCEPTED = "accepted"
    DRIVER_EN_ROUTE_TO_PICKUP = "driver_en_route_to_pickup"
    DRIVER_ARRIVED_AT_PICKUP = "driver_arrived_at_pickup"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED_BY_CUSTOMER = "cancelled_by_customer"
    CANCELLED_BY_DRIVER = "cancelled_by_driver"
    CANCELLED_BY_ADMIN = "cancelled_by_admin"


class AirportPickupBooking(Base):
    __tablename__ = "airport_pickup_bookings"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    fare: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    currency: Mapped[str] = mapped_column(String(3), default="UGX")  # UGX|USD

    airport_id: Mapped[str] = mapped_column(String(36), ForeignKey("airports.id", ondelete="RESTRICT"), index=True)
    ride_option_id: Mapped[str] = mapped_column(String(36), ForeignKey("airport_pickup_ride_options.id", ondelete="RESTRICT"), index=True)
    customer_id: Mapped[str] = mapped_column(String(36), ForeignKey("customers.id"), index=True)
    driver_id: Mapped[str | None] = mapped_column(String(36), ForeignKey("employees.id"), nullable=True)
    vehicle_id: Mapped[str | None] = mapped_column(String(36), ForeignKey("vehicles.id"), nullable=True)

    status: Mapped[str] = mapped_column(String(40), default=BookingStatus.PENDING_PAYMENT.value, index=True)
    note: Mapped[str | None] = mapped_column(Text, nullable=True)

    drop_off_latitude: Mapped[float] = mapped_column(Float)
    drop_off_longitude: Mapped[float] = mapped_column(Float)
    drop_off_location_name: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    airport = relationship("Airport")
    ride_option = relationship("AirportPickupRideOption")
    customer = relationship("Customer")
    payment = relationship("AirportPickupBookingPayment", back_populates="booking", uselist=False)
