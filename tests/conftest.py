"""Fixtures compartidos: base SQLite por test, cliente HTTP y tokens de principal"""
import pytest
from datetime import timedelta
from httpx import AsyncClient, ASGITransport

from shared.database import connection
from shared.auth.jwt_handler import create_access_token
from shared.utils.rate_limiter import limiter
from services.catalog.services.show_service import ShowService

# Sala principal: filas A-L con 38 asientos, M-R con 34
MAIN_HALL_BANDS = [
    {"from_row": "A", "to_row": "L", "max_seats": 38},
    {"from_row": "M", "to_row": "R", "max_seats": 34},
]


@pytest.fixture
async def db(tmp_path):
    """Engine global apuntando a un archivo SQLite nuevo, con tablas creadas"""
    await connection.init_db(f"sqlite:///{tmp_path / 'auditorium.db'}", create_all=True)
    yield
    await connection.close_db()


@pytest.fixture
async def session(db):
    async with connection.async_session_maker() as s:
        yield s


@pytest.fixture(autouse=True)
def reset_rate_limits():
    limiter.reset()
    yield
    limiter.reset()


@pytest.fixture
async def client(db):
    from main import app

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c


@pytest.fixture
def make_show(session):
    """Factory de funciones en la sala principal"""
    async def _make_show(allowed_gender="male", damaged_seats=None, movie="Avengers", date="2025-12-15"):
        return await ShowService.create_show(session, {
            "movie": movie,
            "date": date,
            "time": "18:00",
            "allowed_gender": allowed_gender,
            "rows": 18,
            "seat_bands": MAIN_HALL_BANDS,
            "damaged_seats": damaged_seats or [],
        })
    return _make_show


@pytest.fixture
def student_headers():
    def _headers(user_id, gender="male"):
        token = create_access_token(
            {"sub": user_id, "email": f"{user_id}@example.com", "role": "student", "gender": gender},
            expires_delta=timedelta(minutes=10)
        )
        return {"Authorization": f"Bearer {token}"}
    return _headers


@pytest.fixture
def admin_headers():
    token = create_access_token(
        {"sub": "admin-1", "email": "admin@example.com", "role": "admin"},
        expires_delta=timedelta(minutes=10)
    )
    return {"Authorization": f"Bearer {token}"}
