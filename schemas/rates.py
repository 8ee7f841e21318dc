from typing import Optional
from pydantic import BaseModel, Field, ConfigDict, constr


class RoomRateBase(BaseModel):
    room_type: constr(strip_whitespace=True, min_length=1, max_length=100)
    rate: int = Field(..., ge=0)


class RoomRateCreate(RoomRateBase):
    room_no: constr(strip_whitespace=True, min_length=1, max_length=20)


class RoomRateUpdate(BaseModel):
    room_type: Optional[constr(strip_whitespace=True, min_length=1, max_length=100)] = None
    rate: Optional[int] = Field(None, ge=0)


class RoomRateRead(RoomRateCreate):
    model_config = ConfigDict(from_attributes=True)


class RateCardEntry(BaseModel):
    """Forma que consume el selector de habitaciones del formulario"""
    type: str
    rate: int
