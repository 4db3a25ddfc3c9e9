import logging
import uuid
from collections.abc import Iterable
from datetime import datetime, timezone

from sqlalchemy import select, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session as DbSession, joinedload
from user_agents import parse as parse_user_agent

from app.core.exceptions import ConflictError, ForbiddenError, NotFoundError, UnauthenticatedError, ValidationError
from app.core.security import generate_session_token, hash_password, session_expiry, verify_password
from app.models.customer import Customer
from app.models.employee import Employee
from app.models.permissions import Permission
from app.models.session import Session
from app.models.user import User
from app.services.audit_service import log_audit

logger = logging.getLogger(__name__)


# -------------------------
# SESSIONS
# -------------------------
def create_session(db: DbSession, user: User, user_agent: str | None) -> Session:
    session = Session(
        id=generate_session_token(),
        user_id=user.id,
        expires_at=session_expiry(),
        user_agent=user_agent[:512] if user_agent else None,
    )
    db.add(session)
    try:
        db.flush()
    except IntegrityError as e:
        db.rollback()
        raise ConflictError("Session could not be created") from e
    return session


def validate_session(db: DbSession, token: str) -> tuple[User, Session]:
    """Resolve a session token to its user in a single joined query."""
    now = datetime.now(timezone.utc)
    session = db.execute(
        select(Session)
        .options(
            joinedload(Session.user).joinedload(User.employee_account).joinedload(Employee.role),
            joinedload(Session.user).joinedload(User.customer_account),
        )
        .where(Session.id == token, Session.expires_at > now)
    ).unique().scalar_one_or_none()
    if not session:
        raise UnauthenticatedError()
    if not session.user.is_active:
        raise ForbiddenError()
    return session.user, session


def delete_session(db: DbSession, user: User, session_id: str) -> Session:
    """Remove one of ``user``'s sessions. Sessions of other users are reported as missing."""
    session = db.execute(
        select(Session).where(Session.id == session_id, Session.user_id == user.id)
    ).scalar_one_or_none()
    if not session:
        raise NotFoundError("Session not found")
    db.delete(session)
    return session


def list_sessions(db: DbSession, user: User, current_session_id: str) -> list[dict]:
    sessions = db.execute(
        select(Session).where(Session.user_id == user.id).order_by(Session.created_at.desc())
    ).scalars().all()
    items = []
    for s in sessions:
        ua = parse_user_agent(s.user_agent or "")
        os_name = f"{ua.os.family or 'Unknown'} {ua.os.version_string or ''}".strip()
        items.append({
            "id": s.id,
            "os": os_name,
            "browser": ua.browser.family or "Unknown",
            "deviceType": "mobile" if ua.is_mobile else "desktop",
            "createdAt": s.created_at.isoformat(),
            "updatedAt": s.updated_at.isoformat(),
            "expiresAt": s.expires_at.isoformat(),
            "isCurrent": s.id == current_session_id,
        })
    return items


# -------------------------
# AUTHORIZATION
# -------------------------
def _role_permissions(user: User | None) -> list[str]:
    employee = getattr(user, "employee_account", None) if user is not None else None
    role = getattr(employee, "role", None) if employee is not None else None
    if role is None:
        return []
    return list(role.permissions or [])


def _permission_value(permission: Permission | str) -> str:
    return permission.value if isinstance(permission, Permission) else str(permission)


def has_permission(user: User | None, permission: Permission | str) -> bool:
    """True iff the user's employee role lists ``permission``. Never raises."""
    return _permission_value(permission) in _role_permissions(user)


def has_any_permission(user: User | None, permissions: Iterable[Permission | str]) -> bool:
    granted = _role_permissions(user)
    return any(_permission_value(p) in granted for p in permissions)


def has_all_permissions(user: User | None, permissions: Iterable[Permission | str]) -> bool:
    granted = _role_permissions(user)
    return all(_permission_value(p) in granted for p in permissions)


# -------------------------
# LOGIN / SIGNUP / LOGOUT
# -------------------------
def login_employee(db: DbSession, phone_number: str, password: str, user_agent: str | None) -> tuple[User, Session]:
    user = db.execute(
        select(User)
        .options(joinedload(User.employee_account).joinedload(Employee.role))
        .where(User.phone_number == phone_number)
    ).unique().scalar_one_or_none()

    if not user or not user.employee_account:
        log_audit(db, f"Unauthorized login attempt for phone number {phone_number}")
        db.commit()
        raise ValidationError("Invalid phone number or password")
    if not verify_password(password, user.password_hash):
        log_audit(db, f"Invalid login attempt for phone number {phone_number}")
        db.commit()
        raise ValidationError("Invalid phone number or password")
    if not user.is_active:
        log_audit(db, f"Login attempt on disabled account {phone_number}", performed_by=user.employee_account)
        db.commit()
        raise ForbiddenError("Account disabled")

    session = create_session(db, user, user_agent)
    log_audit(db, f"{user.name} logged into the dashboard", performed_by=user.employee_account,
              affected_resource_id=session.id, affected_resource_type="Session")
    db.commit()
    logger.info("employee %s logged in", user.id)
    return user, session


def login_customer(db: DbSession, email: str, password: str, user_agent: str | None) -> tuple[User, Session]:
    user = db.execute(
        select(User).options(joinedload(User.customer_account)).where(User.email == email.lower())
    ).unique().scalar_one_or_none()

    if not user or not user.customer_account or not verify_password(password, user.password_hash):
        log_audit(db, f"Invalid customer login attempt for email {email}")
        db.commit()
        raise ValidationError("Invalid email or password")
    if not user.is_active:
        raise ForbiddenError("Account disabled")

    session = create_session(db, user, user_agent)
    log_audit(db, f"Customer {user.name} logged in", affected_resource_id=session.id, affected_resource_type="Session")
    db.commit()
    return user, session


def signup_customer(db: DbSession, name: str, email: str, phone_number: str, password: str,
                    user_agent: str | None) -> tuple[User, Customer, Session]:
    """Create User + Customer (claiming a pre-registered customer by phone) and a session, atomically."""
    email = email.lower()
    existing = db.execute(
        select(User).where(or_(User.email == email, User.phone_number == phone_number))
    ).scalars().first()
    if existing:
        raise ConflictError("A user with this email or phone number already exists")

    customer = db.execute(select(Customer).where(Customer.phone_number == phone_number)).scalar_one_or_none()
    if customer and customer.user_id:
        raise ConflictError("A user with this email or phone number already exists")

    try:
        user = User(
            id=str(uuid.uuid4()),
            name=name,
            email=email,
            phone_number=phone_number,
            password_hash=hash_password(password),
            is_active=True,
        )
        db.add(user)
        db.flush()
        if customer:
            customer.name = name
            customer.user_id = user.id
        else:
            customer = Customer(id=str(uuid.uuid4()), name=name, phone_number=phone_number, user_id=user.id)
            db.add(customer)
        db.flush()
        session = create_session(db, user, user_agent)
        log_audit(db, f"Customer {name} signed up", affected_resource_id=user.id, affected_resource_type="User")
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise ConflictError("A user with this email or phone number already exists") from e
    except Exception:
        db.rollback()
        raise
    db.refresh(user)
    return user, customer, session


def logout(db: DbSession, user: User, session: Session) -> None:
    removed = delete_session(db, user, session.id)
    if user.employee_account:
        log_audit(db, f"{user.name} logged out of the dashboard", performed_by=user.employee_account,
                  affected_resource_id=removed.id, affected_resource_type="Session")
    else:
        log_audit(db, f"Customer {user.name} logged out", affected_resource_id=removed.id, affected_resource_type="Session")
    db.commit()
