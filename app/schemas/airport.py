from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class AirportIn(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    code: str = Field(min_length=2, max_length=10)
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    isActive: bool = True


class AirportPatch(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    code: Optional[str] = Field(default=None, min_length=2, max_length=10)
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    isActive: Optional[bool] = None


class RideOptionForm(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    pricePerMileUGX: Decimal = Field(ge=0, max_digits=12, decimal_places=2)
    pricePerMileUSD: Decimal = Field(ge=0, max_digits=12, decimal_places=2)
