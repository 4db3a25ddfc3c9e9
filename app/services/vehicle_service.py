import uuid

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import ConflictError
from app.core.utils import slugify
from app.models.employee import Employee
from app.models.vehicle import Vehicle
from app.services.audit_service import log_audit


def list_vehicles(db: Session) -> list[Vehicle]:
    return list(db.execute(select(Vehicle).order_by(Vehicle.name)).scalars().all())


def create_vehicle(db: Session, actor: Employee, *, name: str, seats: int, plate_number: str, color: str | None,
                   photo_url: str) -> Vehicle:
    slug = slugify(name)
    plate_number = plate_number.strip().upper()
    exists = db.execute(
        select(Vehicle.id).where(or_(Vehicle.name == name, Vehicle.slug == slug, Vehicle.plate_number == plate_number))
    ).first()
    if exists:
        raise ConflictError("A vehicle with this name or plate number already exists")

    vehicle = Vehicle(
        id=str(uuid.uuid4()),
        name=name,
        slug=slug,
        seats=seats,
        plate_number=plate_number,
        color=color,
        primary_photo_url=photo_url,
        is_active=True,
    )
    db.add(vehicle)
    log_audit(db, f"{actor.user.name} added vehicle {name} ({plate_number})", performed_by=actor,
              affected_resource_id=vehicle.id, affected_resource_type="Vehicle")
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise ConflictError("A vehicle with this name or plate number already exists") from e
    db.refresh(vehicle)
    return vehicle
