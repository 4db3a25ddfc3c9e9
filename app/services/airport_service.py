"""Airports and the ride options offered for pickups from them."""

import uuid
from decimal import Decimal

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import ConflictError, NotFoundError, ValidationError
from app.models.airport import Airport
from app.models.booking import AirportPickupBooking
from app.models.employee import Employee
from app.models.ride_option import AirportPickupRideOption
from app.services.audit_service import log_audit


# -------------------------
# AIRPORTS
# -------------------------
def list_airports(db: Session, active_only: bool = False) -> list[Airport]:
    stmt = select(Airport).order_by(Airport.name)
    if active_only:
        stmt = stmt.where(Airport.is_active.is_(True))
    return list(db.execute(stmt).scalars().all())


def get_airport(db: Session, airport_id: str) -> Airport:
    airport = db.get(Airport, airport_id)
    if not airport:
        raise NotFoundError("Airport not found")
    return airport


def _ensure_airport_unique(db: Session, name: str, code: str, exclude_id: str | None = None) -> None:
    stmt = select(Airport.id).where(or_(Airport.name == name, Airport.code == code))
    if exclude_id:
        stmt = stmt.where(Airport.id != exclude_id)
    if db.execute(stmt).first():
        raise ConflictError("An airport with this name or code already exists")


def create_airport(db: Session, actor: Employee, *, name: str, code: str, latitude: float, longitude: float,
                   is_active: bool = True) -> Airport:
    code = code.strip().upper()
    _ensure_airport_unique(db, name, code)
    airport = Airport(id=str(uuid.uuid4()), name=name, code=code, latitude=latitude, longitude=longitude,
                      is_active=is_active)
    db.add(airport)
    log_audit(db, f"{actor.user.name} created airport {code}", performed_by=actor,
              affected_resource_id=airport.id, affected_resource_type="Airport")
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise ConflictError("An airport with this name or code already exists") from e
    db.refresh(airport)
    return airport


def update_airport(db: Session, actor: Employee, airport_id: str, changes: dict) -> Airport:
    airport = get_airport(db, airport_id)
    if not changes:
        raise ValidationError("Nothing to update")
    if "code" in changes:
        changes["code"] = changes["code"].strip().upper()
    _ensure_airport_unique(db, changes.get("name", airport.name), changes.get("code", airport.code), exclude_id=airport.id)

    for field in ("name", "code", "latitude", "longitude", "is_active"):
        if field in changes:
            setattr(airport, field, changes[field])
    log_audit(db, f"{actor.user.name} updated airport {airport.code}", performed_by=actor,
              affected_resource_id=airport.id, affected_resource_type="Airport")
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise ConflictError("An airport with this name or code already exists") from e
    db.refresh(airport)
    return airport


def delete_airport(db: Session, actor: Employee, airport_id: str) -> None:
    airport = get_airport(db, airport_id)
    referenced = db.execute(
        select(AirportPickupBooking.id).where(AirportPickupBooking.airport_id == airport.id).limit(1)
    ).first()
    if referenced:
        raise ConflictError("Airport has bookings and cannot be deleted")
    db.delete(airport)
    log_audit(db, f"{actor.user.name} deleted airport {airport.code}", performed_by=actor,
              affected_resource_id=airport.id, affected_resource_type="Airport")
    db.commit()


# -------------------------
# RIDE OPTIONS
# -------------------------
def list_ride_options(db: Session) -> list[AirportPickupRideOption]:
    return list(db.execute(
        select(AirportPickupRideOption)
        .where(AirportPickupRideOption.is_active.is_(True))
        .order_by(AirportPickupRideOption.price_per_mile_usd)
    ).scalars().all())


def create_ride_option(db: Session, actor: Employee, *, name: str, price_per_mile_ugx: Decimal,
                       price_per_mile_usd: Decimal, photo_url: str) -> AirportPickupRideOption:
    option = AirportPickupRideOption(
        id=str(uuid.uuid4()),
        name=name,
        price_per_mile_ugx=price_per_mile_ugx,
        price_per_mile_usd=price_per_mile_usd,
        photo_url=photo_url,
        is_active=True,
    )
    db.add(option)
    log_audit(db, f"{actor.user.name} created ride option {name}", performed_by=actor,
              affected_resource_id=option.id, affected_resource_type="AirportPickupRideOption")
    db.commit()
    db.refresh(option)
    return option
