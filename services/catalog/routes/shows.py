"""Rutas del catálogo de funciones"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Dict

from shared.database.connection import get_db
from shared.database.models import Show
from shared.auth.dependencies import get_current_user, get_current_student, get_current_admin
from shared.utils.errors import ShowNotFound
from services.catalog.models.show import (
    CreateShowRequest,
    UpdateDamagedSeatsRequest,
    ShowResponse,
    ShowsListResponse,
    SeatMapResponse
)
from services.catalog.services.show_service import ShowService


router = APIRouter()


def _show_response(show: Show, booked_count: int = None) -> ShowResponse:
    return ShowResponse(
        id=str(show.id),
        movie=show.movie,
        date=show.date,
        time=show.time,
        allowed_gender=show.allowed_gender,
        rows=show.rows,
        seat_bands=show.seat_bands,
        damaged_seats=list(show.damaged_seats or []),
        booked_count=booked_count,
        created_at=show.created_at
    )


@router.get("", response_model=ShowsListResponse)
async def list_shows(
    db: AsyncSession = Depends(get_db),
    current_user: Dict = Depends(get_current_student)
):
    """
    Listar funciones disponibles para el estudiante

    Sólo se devuelven funciones del género del estudiante
    """
    rows = await ShowService.list_shows_for_gender(db, current_user["gender"])
    return ShowsListResponse(shows=[_show_response(show, count) for show, count in rows])


@router.get("/{show_id}", response_model=ShowResponse)
async def get_show(
    show_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: Dict = Depends(get_current_user)
):
    """Obtener una función"""
    show = await ShowService.get_show(db, show_id)
    if not show:
        raise ShowNotFound()
    return _show_response(show)


@router.get("/{show_id}/seats", response_model=SeatMapResponse)
async def get_seat_map(
    show_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: Dict = Depends(get_current_user)
):
    """Mapa de asientos: geometría, reservados y dañados"""
    return SeatMapResponse(**await ShowService.get_seat_map(db, show_id))


@router.post("", response_model=ShowResponse, status_code=status.HTTP_201_CREATED)
async def create_show(
    request: CreateShowRequest,
    db: AsyncSession = Depends(get_db),
    current_user: Dict = Depends(get_current_admin)
):
    """
    Crear función

    Requiere autenticación de admin
    """
    show = await ShowService.create_show(db, request.model_dump())
    return _show_response(show, 0)


@router.put("/{show_id}/damaged-seats", response_model=ShowResponse)
async def update_damaged_seats(
    show_id: str,
    request: UpdateDamagedSeatsRequest,
    db: AsyncSession = Depends(get_db),
    current_user: Dict = Depends(get_current_admin)
):
    """
    Marcar/desmarcar asientos dañados

    Requiere autenticación de admin
    """
    show = await ShowService.set_damaged_seats(db, show_id, request.mark, request.unmark)
    return _show_response(show)
