from typing import Literal, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from app.core.utils import normalize_phone_number
from app.models.permissions import Permission


class RoleIn(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    permissions: list[Permission] = Field(min_length=1)


class EmployeePatch(BaseModel):
    roleId: Optional[str] = None
    isActive: Optional[bool] = None
    type: Optional[Literal["admin", "driver", "rider"]] = None


class EmployeeCreateForm(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    email: Optional[EmailStr] = None
    phoneNumber: str
    password: str = Field(min_length=8, max_length=128)
    type: Literal["admin", "driver", "rider"] = "admin"
    roleId: Optional[str] = None

    @field_validator("phoneNumber")
    @classmethod
    def phone(cls, v: str) -> str:
        return normalize_phone_number(v)
