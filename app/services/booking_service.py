import logging
import uuid
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload

from app.core.exceptions import ForbiddenError, InvalidTransitionError, NotFoundError
from app.models.airport import Airport
from app.models.booking import AirportPickupBooking, BookingStatus
from app.models.customer import Customer
from app.models.payment import AirportPickupBookingPayment
from app.models.permissions import Permission
from app.models.ride_option import AirportPickupRideOption
from app.models.user import User
from app.services.audit_service import log_audit
from app.services.auth_service import has_permission

logger = logging.getLogger(__name__)

FORWARD_PATH = [
    BookingStatus.PENDING_PAYMENT,
    BookingStatus.ACCEPTED,
    BookingStatus.DRIVER_EN_ROUTE_TO_PICKUP,
    BookingStatus.DRIVER_ARRIVED_AT_PICKUP,
    BookingStatus.IN_PROGRESS,
    BookingStatus.COMPLETED,
]
CANCELLED = {
    BookingStatus.CANCELLED_BY_CUSTOMER,
    BookingStatus.CANCELLED_BY_DRIVER,
    BookingStatus.CANCELLED_BY_ADMIN,
}
TERMINAL = CANCELLED | {BookingStatus.COMPLETED}


def create_booking(db: Session, customer: Customer, airport_id: str, ride_option_id: str,
                   drop_off: dict, fare: Decimal, currency: str,
                   note: str | None = None) -> tuple[AirportPickupBooking, AirportPickupBookingPayment]:
    """Insert a booking and its pending payment in one transaction.

    ``drop_off`` carries ``latitude``, ``longitude`` and an optional ``name``.
    Nothing is persisted unless both rows commit together.
    """
    try:
        airport = db.get(Airport, airport_id)
        if not airport or not airport.is_active:
            raise NotFoundError("Airport not found")
        ride_option = db.get(AirportPickupRideOption, ride_option_id)
        if not ride_option or not ride_option.is_active:
            raise NotFoundError("Ride option not found")

        booking = AirportPickupBooking(
            id=str(uuid.uuid4()),
            fare=fare,
            currency=currency,
            airport_id=airport.id,
            ride_option_id=ride_option.id,
            customer_id=customer.id,
            status=BookingStatus.PENDING_PAYMENT.value,
            note=note,
            drop_off_latitude=drop_off["latitude"],
            drop_off_longitude=drop_off["longitude"],
            drop_off_location_name=drop_off.get("name"),
        )
        db.add(booking)
        db.flush()

        payment = AirportPickupBookingPayment(
            id=str(uuid.uuid4()),
            booking_id=booking.id,
            amount=fare,
            currency=currency,
            method=None,
            status="pending",
        )
        db.add(payment)
        log_audit(db, f"Customer {customer.name} booked an airport pickup from {airport.code}",
                  affected_resource_id=booking.id, affected_resource_type="AirportPickupBooking")
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(booking)
    db.refresh(payment)
    logger.info("booking %s created for customer %s", booking.id, customer.id)
    return booking, payment


def get_booking(db: Session, booking_id: str) -> AirportPickupBooking:
    booking = db.execute(
        select(AirportPickupBooking)
        .options(joinedload(AirportPickupBooking.payment), joinedload(AirportPickupBooking.airport))
        .where(AirportPickupBooking.id == booking_id)
    ).unique().scalar_one_or_none()
    if not booking:
        raise NotFoundError("Booking not found")
    return booking


def list_bookings(db: Session, customer_id: str | None = None) -> list[AirportPickupBooking]:
    stmt = (
        select(AirportPickupBooking)
        .options(
            joinedload(AirportPickupBooking.payment),
            joinedload(AirportPickupBooking.airport),
            joinedload(AirportPickupBooking.ride_option),
            joinedload(AirportPickupBooking.customer),
        )
        .order_by(AirportPickupBooking.created_at.desc())
    )
    if customer_id is not None:
        stmt = stmt.where(AirportPickupBooking.customer_id == customer_id)
    return list(db.execute(stmt).unique().scalars().all())


def _check_transition(booking: AirportPickupBooking, target: BookingStatus, actor: User) -> None:
    current = BookingStatus(booking.status)
    if current in TERMINAL:
        raise InvalidTransitionError(f"Booking is already {current.value}")

    customer = actor.customer_account
    is_owner = customer is not None and customer.id == booking.customer_id
    is_staff = actor.employee_account is not None
    before_ride = FORWARD_PATH.index(current) < FORWARD_PATH.index(BookingStatus.IN_PROGRESS)

    if target == BookingStatus.CANCELLED_BY_CUSTOMER:
        if not is_owner:
            raise ForbiddenError()
        if not before_ride:
            raise InvalidTransitionError("A ride in progress cannot be cancelled by the customer")
        return

    # everything else is a staff action
    if not is_staff or not has_permission(actor, Permission.EDIT_AIRPORT_PICKUP_BOOKING):
        raise ForbiddenError()

    if target == BookingStatus.CANCELLED_BY_DRIVER:
        if not before_ride:
            raise InvalidTransitionError("A ride in progress cannot be cancelled by the driver")
        return
    if target == BookingStatus.CANCELLED_BY_ADMIN:
        return

    if FORWARD_PATH.index(target) != FORWARD_PATH.index(current) + 1:
        raise InvalidTransitionError(f"Cannot move booking from {current.value} to {target.value}")
    if target == BookingStatus.ACCEPTED and (booking.payment is None or booking.payment.status != "confirmed"):
        raise InvalidTransitionError("Booking payment has not been confirmed")


def transition_booking(db: Session, booking: AirportPickupBooking, target: BookingStatus,
                       actor: User) -> AirportPickupBooking:
    _check_transition(booking, target, actor)
    previous = booking.status
    booking.status = target.value
    log_audit(
        db,
        f"{actor.name} moved booking {booking.id} from {previous} to {target.value}",
        performed_by=actor.employee_account,
        affected_resource_id=booking.id,
        affected_resource_type="AirportPickupBooking",
    )
    db.commit()
    db.refresh(booking)
    return booking
