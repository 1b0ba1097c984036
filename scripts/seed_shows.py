#!/usr/bin/env python3
"""Script para cargar funciones de ejemplo en la sala principal (A-L: 38, M-R: 34)"""
import sys
import os
import asyncio

# Agregar directorio raíz al path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv

load_dotenv()

from shared.database import connection
from services.catalog.services.show_service import ShowService

MAIN_HALL_BANDS = [
    {"from_row": "A", "to_row": "L", "max_seats": 38},
    {"from_row": "M", "to_row": "R", "max_seats": 34},
]

SHOWS = [
    {"movie": "Avengers", "date": "2025-12-15", "time": "18:00", "allowed_gender": "male"},
    {"movie": "Barbie", "date": "2025-12-16", "time": "19:00", "allowed_gender": "female"},
    {"movie": "Leo", "date": "2025-12-17", "time": "20:00", "allowed_gender": "male"},
    {"movie": "Jawan", "date": "2025-12-18", "time": "18:30", "allowed_gender": "female"},
]


async def seed():
    await connection.init_db(create_all=True)
    try:
        async with connection.async_session_maker() as session:
            for data in SHOWS:
                show = await ShowService.create_show(
                    session,
                    {**data, "rows": 18, "seat_bands": MAIN_HALL_BANDS, "damaged_seats": []}
                )
                print(f"✅ {show.movie} ({show.date} {show.time}, {show.allowed_gender}): {show.id}")
    finally:
        await connection.close_db()


if __name__ == "__main__":
    asyncio.run(seed())
