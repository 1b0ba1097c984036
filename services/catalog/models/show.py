"""Modelos Pydantic para el catálogo de funciones"""
from pydantic import BaseModel, Field
from typing import List, Literal, Optional
from datetime import datetime


class SeatBand(BaseModel):
    """Rango contiguo de filas con la misma capacidad"""
    from_row: str = Field(..., pattern=r"^[A-Z]$")
    to_row: str = Field(..., pattern=r"^[A-Z]$")
    max_seats: int = Field(..., ge=1)


class CreateShowRequest(BaseModel):
    movie: str = Field(..., min_length=1)
    date: str = Field(..., pattern=r"^\d{4}-\d{2}-\d{2}$")
    time: str = Field(..., pattern=r"^\d{2}:\d{2}$")
    allowed_gender: Literal["male", "female"]
    rows: int = Field(..., ge=1, le=26)
    seat_bands: List[SeatBand]
    damaged_seats: List[str] = []


class UpdateDamagedSeatsRequest(BaseModel):
    """Marcar y/o desmarcar asientos dañados"""
    mark: List[str] = []
    unmark: List[str] = []


class ShowResponse(BaseModel):
    id: str
    movie: str
    date: str
    time: str
    allowed_gender: str
    rows: int
    seat_bands: List[SeatBand]
    damaged_seats: List[str]
    booked_count: Optional[int] = None
    created_at: Optional[datetime] = None


class ShowsListResponse(BaseModel):
    shows: List[ShowResponse]


class SeatMapResponse(BaseModel):
    show_id: str
    rows: int
    seat_bands: List[SeatBand]
    booked_seats: List[str]
    damaged_seats: List[str]
