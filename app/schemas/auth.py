from pydantic import BaseModel, EmailStr, Field, field_validator

from app.core.utils import normalize_phone_number


class EmployeeLoginIn(BaseModel):
    phoneNumber: str
    password: str = Field(min_length=1)

    @field_validator("phoneNumber")
    @classmethod
    def phone(cls, v: str) -> str:
        return normalize_phone_number(v)


class CustomerLoginIn(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class CustomerSignupIn(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    email: EmailStr
    phoneNumber: str
    password: str = Field(min_length=8, max_length=128)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        return v

    @field_validator("phoneNumber")
    @classmethod
    def phone(cls, v: str) -> str:
        return normalize_phone_number(v)
