from typing import Optional
from pydantic import BaseModel, field_validator


def _as_text(value):
    # Form widgets send numbers and booleans for some fields
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, (int, float)):
        return str(value)
    raise ValueError("must be a string")


class BookingRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    contactNumber: Optional[str] = None

    # Property
    suburb: Optional[str] = None
    propertyType: Optional[str] = None
    bedrooms: Optional[str] = None
    bathrooms: Optional[str] = None
    furnished: Optional[str] = None

    # Extra services
    carpetCleaning: Optional[str] = None
    pestControl: Optional[str] = None

    date: Optional[str] = None
    message: Optional[str] = None

    @field_validator("*", mode="before")
    @classmethod
    def coerce_to_text(cls, value):
        return _as_text(value)


class QuickBookingRequest(BaseModel):
    email: Optional[str] = None
    phone: Optional[str] = None

    @field_validator("*", mode="before")
    @classmethod
    def coerce_to_text(cls, value):
        return _as_text(value)
