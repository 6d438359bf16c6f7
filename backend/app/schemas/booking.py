"""
Pydantic schemas for booking request/response validation.

The wire format is camelCase (`roomId`, `bookingId`, `hotelId`, ...) while
attribute names stay snake_case; FastAPI serializes responses by alias.
"""

from datetime import datetime
from pydantic import BaseModel, Field, field_validator


class BookingBody(BaseModel):
    room_id: int = Field(..., alias="roomId", gt=0)

    @field_validator("room_id", mode="before")
    @classmethod
    def reject_booleans(cls, value):
        # JSON true/false would otherwise coerce to room 1/0
        if isinstance(value, bool):
            raise ValueError("roomId must be an integer")
        return value


class RoomResponse(BaseModel):
    id: int
    name: str
    capacity: int
    hotel_id: int = Field(serialization_alias="hotelId")
    created_at: datetime = Field(serialization_alias="createdAt")
    updated_at: datetime = Field(serialization_alias="updatedAt")

    model_config = {"from_attributes": True}


class BookingResponse(BaseModel):
    id: int
    room: RoomResponse = Field(serialization_alias="Room")

    model_config = {"from_attributes": True}


class BookingIdResponse(BaseModel):
    booking_id: int = Field(serialization_alias="bookingId")
