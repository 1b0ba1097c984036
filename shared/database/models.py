"""Modelos SQLAlchemy del auditorio: funciones, reservas, tickets y auditoría"""
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, JSON, Uuid, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from datetime import datetime, timezone
import uuid
from shared.database.connection import Base


# Estados de ticket: issued -> used | issued -> void (ambos terminales)
TICKET_STATUS_ISSUED = "issued"
TICKET_STATUS_USED = "used"
TICKET_STATUS_VOID = "void"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Show(Base):
    __tablename__ = "shows"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    movie = Column(String, nullable=False)
    date = Column(String, nullable=False)  # YYYY-MM-DD
    time = Column(String, nullable=False)  # HH:MM
    allowed_gender = Column(String, nullable=False)  # male, female
    rows = Column(Integer, nullable=False)
    # [{"from_row": "A", "to_row": "L", "max_seats": 38}, ...]
    seat_bands = Column(JSON, nullable=False)
    damaged_seats = Column(JSON, nullable=False, default=list)
    # Se incrementa en cada cambio de damaged_seats (UPDATE condicional)
    version = Column(Integer, nullable=False, default=0, server_default="0")
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)

    # Relaciones
    bookings = relationship("Booking", back_populates="show")
    damage_reports = relationship("DamageReport", back_populates="show")


class Booking(Base):
    __tablename__ = "bookings"
    __table_args__ = (
        # Ambos constraints ordenan las reservas concurrentes a nivel de base de datos
        UniqueConstraint("show_id", "seat_label", name="uq_bookings_show_seat"),
        UniqueConstraint("show_id", "student_id", name="uq_bookings_show_student"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    student_id = Column(String, nullable=False, index=True)
    show_id = Column(Uuid, ForeignKey("shows.id"), nullable=False)
    seat_label = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)

    # Relaciones
    show = relationship("Show", back_populates="bookings")


class Ticket(Base):
    __tablename__ = "tickets"

    id = Column(String, primary_key=True)  # TICK_<hex>, distinto del id de la reserva
    # Sin FK: el ticket sobrevive a la reserva como historial (void/used)
    booking_id = Column(Uuid, nullable=True, index=True)
    event_id = Column(String, nullable=False, index=True)
    user_id = Column(String, nullable=False, index=True)
    ticket_metadata = Column("metadata", JSON, nullable=False, default=dict)
    status = Column(String, nullable=False, default=TICKET_STATUS_ISSUED)
    issued_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    used_at = Column(DateTime(timezone=True), nullable=True)
    voided_at = Column(DateTime(timezone=True), nullable=True)
    scanned_by = Column(String, nullable=True)  # Scanner que consumió el ticket


class ValidationLogEntry(Base):
    """Registro append-only de cada intento de validación"""
    __tablename__ = "validation_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    ticket_id = Column(String, nullable=True, index=True)  # NULL si el token no se pudo leer
    ip = Column(String, nullable=True)
    scanner_id = Column(String, nullable=True)
    result = Column(String, nullable=False)  # ok, fail
    reason = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)


# Estados de reporte de daño
DAMAGE_REPORT_PENDING = "pending"
DAMAGE_REPORT_INVESTIGATING = "investigating"
DAMAGE_REPORT_RESOLVED = "resolved"
DAMAGE_REPORT_STATUSES = (DAMAGE_REPORT_PENDING, DAMAGE_REPORT_INVESTIGATING, DAMAGE_REPORT_RESOLVED)


class DamageReport(Base):
    __tablename__ = "damage_reports"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    show_id = Column(Uuid, ForeignKey("shows.id"), nullable=False, index=True)
    seat_label = Column(String, nullable=False)
    description = Column(String, nullable=False)
    photo_url = Column(String, nullable=True)  # Referencia opaca, la foto vive fuera del sistema
    reported_by = Column(String, nullable=False)
    status = Column(String, nullable=False, default=DAMAGE_REPORT_PENDING, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    # Relaciones
    show = relationship("Show", back_populates="damage_reports")
