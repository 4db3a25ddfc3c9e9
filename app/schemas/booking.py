from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, Field, model_validator

from app.models.booking import BookingStatus


class DropOffIn(BaseModel):
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    name: Optional[str] = Field(default=None, max_length=500)


class BookingCreate(BaseModel):
    airportId: str
    rideOptionId: str
    dropOff: DropOffIn
    fare: Decimal = Field(gt=0, max_digits=12, decimal_places=2)
    currency: Literal["UGX", "USD"] = "UGX"
    note: Optional[str] = Field(default=None, max_length=1000)

    @model_validator(mode="after")
    def whole_shillings(self) -> "BookingCreate":
        # the gateway only takes whole UGX amounts
        if self.currency == "UGX" and self.fare != self.fare.to_integral_value():
            raise ValueError("UGX fares must be whole numbers")
        return self


class BookingStatusIn(BaseModel):
    status: BookingStatus
