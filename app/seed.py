"""
Seed the Admin role and, optionally, an admin employee.

    python -m app.seed                                  # ensure the Admin role only
    python -m app.seed --name "Jane" --phone 0772000000 [--email jane@example.com]
"""

import argparse
import getpass
import logging
import uuid

from sqlalchemy import text
from sqlalchemy.exc import OperationalError, ProgrammingError
from sqlalchemy.orm import Session

import app.db.base  # noqa: F401
from app.core.security import hash_password
from app.core.utils import normalize_phone_number
from app.db.session import SessionLocal
from app.models.employee import Employee
from app.models.employee_role import EmployeeRole
from app.models.permissions import ALL_PERMISSIONS
from app.models.user import User
from app.services.audit_service import log_audit

logger = logging.getLogger(__name__)

ADMIN_ROLE_NAME = "Admin"


def ensure_admin_role(db: Session) -> EmployeeRole:
    role = db.query(EmployeeRole).filter(EmployeeRole.slug == "admin").first()
    if role:
        # the catalog may have grown since the role was created
        if list(role.permissions or []) != ALL_PERMISSIONS:
            role.permissions = list(ALL_PERMISSIONS)
            db.commit()
        return role
    role = EmployeeRole(id=str(uuid.uuid4()), name=ADMIN_ROLE_NAME, slug="admin", permissions=list(ALL_PERMISSIONS))
    db.add(role)
    db.commit()
    logger.info("[seed] created %s role", ADMIN_ROLE_NAME)
    return role


def ensure_admin_employee(db: Session, name: str, phone_number: str, password: str, email: str | None = None) -> Employee:
    role = ensure_admin_role(db)
    phone_number = normalize_phone_number(phone_number)
    user = db.query(User).filter(User.phone_number == phone_number).first()
    if user and user.employee_account:
        logger.info("[seed] employee with phone %s already exists", phone_number)
        return user.employee_account
    if user is None:
        user = User(
            id=str(uuid.uuid4()),
            name=name,
            email=email.lower() if email else None,
            phone_number=phone_number,
            password_hash=hash_password(password),
            is_active=True,
        )
        db.add(user)
        db.flush()
    employee = Employee(id=str(uuid.uuid4()), user_id=user.id, type="admin", role_id=role.id)
    db.add(employee)
    db.flush()
    log_audit(db, f"Admin employee {name} created from the command line", affected_resource_id=employee.id,
              affected_resource_type="Employee")
    db.commit()
    logger.info("[seed] created admin employee %s", phone_number)
    return employee


def run(db=None):
    own_session = db is None
    if db is None:
        db = SessionLocal()
    try:
        # If migrations haven't been applied yet, seeding must not crash the API.
        try:
            db.execute(text("SELECT 1 FROM employee_roles LIMIT 1"))
        except (ProgrammingError, OperationalError):
            db.rollback()
            logger.warning("[seed] employee_roles table not found yet. Skipping seeding (run alembic upgrade head).")
            return
        ensure_admin_role(db)
    finally:
        if own_session:
            db.close()


def main(argv=None) -> None:
    parser = argparse.ArgumentParser(description="Seed the Admin role and optionally an admin employee.")
    parser.add_argument("--name")
    parser.add_argument("--phone")
    parser.add_argument("--email")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(message)s")
    if not (args.name and args.phone):
        run()
        return

    password = getpass.getpass("Password: ")
    if len(password) < 8 or password != getpass.getpass("Repeat password: "):
        raise SystemExit("Passwords must match and be at least 8 characters")
    db = SessionLocal()
    try:
        ensure_admin_employee(db, args.name, args.phone, password, args.email)
    finally:
        db.close()


if __name__ == "__main__":
    main()
