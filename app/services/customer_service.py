import logging

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from app.core.exceptions import ConflictError, ValidationError
from app.models.customer import Customer
from app.models.user import User
from app.services.audit_service import log_audit

logger = logging.getLogger(__name__)


def list_customers(db: Session, page: int, limit: int) -> tuple[list[Customer], int]:
    total = db.scalar(select(func.count()).select_from(Customer)) or 0
    customers = db.execute(
        select(Customer)
        .options(joinedload(Customer.user))
        .order_by(Customer.created_at.desc(), Customer.id)
        .limit(limit)
        .offset((page - 1) * limit)
    ).unique().scalars().all()
    return list(customers), total


def update_profile(db: Session, user: User, *, name: str | None = None, phone_number: str | None = None,
                   photo_url: str | None = None) -> User:
    """Edit the signed-in customer's own profile. User and Customer rows stay in step."""
    customer = user.customer_account
    if name is None and phone_number is None and photo_url is None:
        raise ValidationError("Nothing to update")

    if phone_number is not None and phone_number != user.phone_number:
        taken = db.execute(
            select(User.id).where(User.phone_number == phone_number, User.id != user.id)
        ).first() or db.execute(
            select(Customer.id).where(Customer.phone_number == phone_number, Customer.id != customer.id)
        ).first()
        if taken:
            raise ConflictError("Phone number already in use")
        user.phone_number = phone_number
        customer.phone_number = phone_number
    if name is not None:
        user.name = name
        customer.name = name
    if photo_url is not None:
        user.photo_url = photo_url

    log_audit(db, f"Customer {user.name} updated their profile", affected_resource_id=user.id, affected_resource_type="User")
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise ConflictError("Phone number already in use") from e
    db.refresh(user)
    return user
