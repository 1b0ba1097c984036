"""Modelos Pydantic para emisión y validación de tickets"""
from pydantic import BaseModel, ConfigDict, Field
from typing import Dict, List, Optional
from datetime import datetime


class TicketValidationRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    token: Optional[str] = None
    scanner_id: Optional[str] = Field(None, alias="scannerId")


class TicketValidationResponse(BaseModel):
    result: str = "ok"
    ticketId: str
    eventId: str
    userId: str


class CreateTicketRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    event_id: str = Field(..., alias="eventId", min_length=1)
    user_id: str = Field(..., alias="userId", min_length=1)
    metadata: Dict = {}


class IssuedTicketResponse(BaseModel):
    ticketId: str
    token: str
    scannableCode: str
    validationUrl: str


class TicketInfo(BaseModel):
    id: str
    booking_id: Optional[str] = None
    event_id: str
    user_id: str
    status: str
    metadata: Dict = {}
    issued_at: Optional[datetime] = None
    used_at: Optional[datetime] = None
    voided_at: Optional[datetime] = None
    scanned_by: Optional[str] = None


class ValidationLogInfo(BaseModel):
    ticket_id: Optional[str] = None
    ip: Optional[str] = None
    scanner_id: Optional[str] = None
    result: str
    reason: str
    created_at: datetime


class TicketDetailResponse(BaseModel):
    """Ticket con sus últimos intentos de validación (admin)"""
    ticket: TicketInfo
    logs: List[ValidationLogInfo]
