from typing import Optional

from pydantic import BaseModel, Field, field_validator

from app.core.utils import normalize_phone_number


class CustomerPatchForm(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    phoneNumber: Optional[str] = None

    @field_validator("phoneNumber")
    @classmethod
    def phone(cls, v: str | None) -> str | None:
        return normalize_phone_number(v) if v is not None else None
