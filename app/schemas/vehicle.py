from typing import Optional

from pydantic import BaseModel, Field


class VehicleForm(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    seats: int = Field(ge=1, le=100)
    plateNumber: str = Field(min_length=1, max_length=30)
    color: Optional[str] = Field(default=None, max_length=40)
