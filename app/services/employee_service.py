import logging
import uuid

from sqlalchemy import func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from app.core.exceptions import ConflictError, NotFoundError, ValidationError
from app.core.security import hash_password
from app.core.utils import slugify
from app.models.employee import Employee
from app.models.employee_role import EmployeeRole
from app.models.permissions import Permission
from app.models.user import User
from app.services.audit_service import log_audit

logger = logging.getLogger(__name__)


# -------------------------
# EMPLOYEES
# -------------------------
def list_employees(db: Session, page: int, limit: int) -> tuple[list[Employee], int]:
    total = db.scalar(select(func.count()).select_from(Employee)) or 0
    employees = db.execute(
        select(Employee)
        .options(joinedload(Employee.user), joinedload(Employee.role))
        .order_by(Employee.created_at.desc(), Employee.id)
        .limit(limit)
        .offset((page - 1) * limit)
    ).unique().scalars().all()
    return list(employees), total


def get_employee(db: Session, employee_id: str) -> Employee:
    employee = db.execute(
        select(Employee)
        .options(joinedload(Employee.user), joinedload(Employee.role))
        .where(Employee.id == employee_id)
    ).unique().scalar_one_or_none()
    if not employee:
        raise NotFoundError("Employee not found")
    return employee


def create_employee(db: Session, actor: Employee, *, name: str, email: str | None, phone_number: str,
                    password: str, type: str, role_id: str | None, photo_url: str | None) -> Employee:
    """Create the User and its Employee account together."""
    email = email.lower() if email else None
    clauses = [User.phone_number == phone_number]
    if email:
        clauses.append(User.email == email)
    if db.execute(select(User.id).where(or_(*clauses))).first():
        raise ConflictError("A user with this email or phone number already exists")

    role = None
    if role_id:
        role = db.get(EmployeeRole, role_id)
        if not role:
            raise NotFoundError("Role not found")

    try:
        user = User(
            id=str(uuid.uuid4()),
            name=name,
            email=email,
            phone_number=phone_number,
            photo_url=photo_url,
            password_hash=hash_password(password),
            is_active=True,
        )
        db.add(user)
        db.flush()
        employee = Employee(id=str(uuid.uuid4()), user_id=user.id, type=type, role_id=role.id if role else None)
        db.add(employee)
        db.flush()
        log_audit(db, f"{actor.user.name} created employee {name}", performed_by=actor,
                  affected_resource_id=employee.id, affected_resource_type="Employee")
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise ConflictError("A user with this email or phone number already exists") from e
    except Exception:
        db.rollback()
        raise

    logger.info("employee %s created by %s", employee.id, actor.id)
    return get_employee(db, employee.id)


def update_employee(db: Session, actor: Employee, employee_id: str, *, role_id: str | None = None,
                    is_active: bool | None = None, type: str | None = None) -> Employee:
    employee = get_employee(db, employee_id)
    changes = []
    if role_id is not None:
        role = db.get(EmployeeRole, role_id)
        if not role:
            raise NotFoundError("Role not found")
        employee.role_id = role.id
        changes.append(f"role={role.name}")
    if is_active is not None:
        employee.user.is_active = is_active
        changes.append(f"active={is_active}")
    if type is not None:
        employee.type = type
        changes.append(f"type={type}")
    if not changes:
        raise ValidationError("Nothing to update")

    log_audit(db, f"{actor.user.name} updated employee {employee.user.name} ({', '.join(changes)})",
              performed_by=actor, affected_resource_id=employee.id, affected_resource_type="Employee")
    db.commit()
    db.expire_all()
    return get_employee(db, employee_id)


# -------------------------
# ROLES
# -------------------------
def _permission_values(permissions: list[Permission | str]) -> list[str]:
    """Catalog values in request order, duplicates dropped."""
    values: list[str] = []
    for p in permissions:
        try:
            value = Permission(p).value
        except ValueError as e:
            raise ValidationError("Invalid permission", errors=[{"field": "permissions", "message": f"Unknown permission: {p}"}]) from e
        if value not in values:
            values.append(value)
    return values


def _ensure_role_unique(db: Session, name: str, slug: str, exclude_id: str | None = None) -> None:
    stmt = select(EmployeeRole.id).where(or_(EmployeeRole.name == name, EmployeeRole.slug == slug))
    if exclude_id:
        stmt = stmt.where(EmployeeRole.id != exclude_id)
    if db.execute(stmt).first():
        raise ConflictError("A role with this name already exists")


def list_roles(db: Session, page: int, limit: int) -> tuple[list[EmployeeRole], int]:
    total = db.scalar(select(func.count()).select_from(EmployeeRole)) or 0
    roles = db.execute(
        select(EmployeeRole).order_by(EmployeeRole.name).limit(limit).offset((page - 1) * limit)
    ).scalars().all()
    return list(roles), total


def get_role_by_slug(db: Session, slug: str) -> EmployeeRole:
    role = db.execute(
        select(EmployeeRole)
        .options(joinedload(EmployeeRole.employees).joinedload(Employee.user))
        .where(EmployeeRole.slug == slug)
    ).unique().scalar_one_or_none()
    if not role:
        raise NotFoundError("Role not found")
    return role


def create_role(db: Session, actor: Employee, name: str, permissions: list[Permission | str]) -> EmployeeRole:
    name = name.strip()
    slug = slugify(name)
    if not slug:
        raise ValidationError("Invalid role name", errors=[{"field": "name", "message": "Name must contain letters or digits"}])
    values = _permission_values(permissions)
    _ensure_role_unique(db, name, slug)

    role = EmployeeRole(id=str(uuid.uuid4()), name=name, slug=slug, permissions=values)
    db.add(role)
    log_audit(db, f"{actor.user.name} created role {name}", performed_by=actor,
              affected_resource_id=role.id, affected_resource_type="EmployeeRole")
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise ConflictError("A role with this name already exists") from e
    db.refresh(role)
    return role


def update_role(db: Session, actor: Employee, slug: str, name: str, permissions: list[Permission | str]) -> EmployeeRole:
    """Full replace: the new permission list supersedes the old one."""
    role = get_role_by_slug(db, slug)
    name = name.strip()
    new_slug = slugify(name)
    if not new_slug:
        raise ValidationError("Invalid role name", errors=[{"field": "name", "message": "Name must contain letters or digits"}])
    values = _permission_values(permissions)
    _ensure_role_unique(db, name, new_slug, exclude_id=role.id)

    role.name = name
    role.slug = new_slug
    role.permissions = values
    log_audit(db, f"{actor.user.name} updated role {name}", performed_by=actor,
              affected_resource_id=role.id, affected_resource_type="EmployeeRole")
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise ConflictError("A role with this name already exists") from e
    db.refresh(role)
    return role


def delete_role(db: Session, actor: Employee, role_id: str) -> None:
    role = db.get(EmployeeRole, role_id)
    if not role:
        raise NotFoundError("Role not found")
    # SQLite ignores ON DELETE SET NULL unless foreign keys are enabled.
    db.execute(update(Employee).where(Employee.role_id == role.id).values(role_id=None))
    db.delete(role)
    log_audit(db, f"{actor.user.name} deleted role {role.name}", performed_by=actor,
              affected_resource_id=role.id, affected_resource_type="EmployeeRole")
    db.commit()
