from dataclasses import dataclass

from fastapi import Depends, Header, UploadFile
from pydantic import BaseModel, ValidationError as PydanticValidationError
from sqlalchemy.orm import Session as DbSession

from app.core.exceptions import ForbiddenError, UnauthenticatedError, ValidationError
from app.core.utils import field_errors
from app.db.session import get_db
from app.models.customer import Customer
from app.models.employee import Employee
from app.models.permissions import Permission
from app.models.session import Session
from app.models.user import User
from app.services.auth_service import has_all_permissions, validate_session

SESSION_HEADER = "x-session-id"


@dataclass
class AuthContext:
    user: User
    session: Session

    @property
    def employee(self) -> Employee | None:
        return self.user.employee_account

    @property
    def customer(self) -> Customer | None:
        return self.user.customer_account


def get_current_auth(
    x_session_id: str | None = Header(default=None, alias=SESSION_HEADER),
    db: DbSession = Depends(get_db),
) -> AuthContext:
    if x_session_id is None or not x_session_id.strip():
        raise UnauthenticatedError()
    user, session = validate_session(db, x_session_id.strip())
    return AuthContext(user=user, session=session)


def require_employee(auth: AuthContext = Depends(get_current_auth)) -> AuthContext:
    if auth.employee is None:
        raise UnauthenticatedError()
    return auth


def require_customer(auth: AuthContext = Depends(get_current_auth)) -> AuthContext:
    if auth.customer is None:
        raise UnauthenticatedError()
    return auth


def require_permissions(*permissions: Permission):
    def _guard(auth: AuthContext = Depends(require_employee)) -> AuthContext:
        if not has_all_permissions(auth.user, permissions):
            raise ForbiddenError()
        return auth
    return _guard


def validate_form(model: type[BaseModel], **fields) -> BaseModel:
    """Validate multipart form fields against a schema, dropping fields that were not sent."""
    data = {k: v for k, v in fields.items() if v is not None and v != ""}
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(errors=field_errors(e.errors())) from e


def read_upload(upload: UploadFile | None, required: bool = True) -> bytes | None:
    if upload is None or not upload.filename:
        if required:
            raise ValidationError(errors=[{"field": "photo", "message": "Photo is required"}])
        return None
    return upload.file.read()
