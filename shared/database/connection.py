"""Conexión a la base de datos"""
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base
from typing import AsyncGenerator, Optional
import logging

from app.core.config import settings

logger = logging.getLogger(__name__)

# Base para modelos SQLAlchemy
Base = declarative_base()

# Engine y session factory
engine = None
async_session_maker = None


def _to_async_url(database_url: str) -> str:
    """Convertir la URL al driver async correspondiente"""
    if database_url.startswith("postgresql://"):
        return database_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if database_url.startswith("postgresql+psycopg://"):
        return database_url.replace("postgresql+psycopg://", "postgresql+asyncpg://", 1)
    if database_url.startswith("sqlite:///"):
        return database_url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
    return database_url


async def init_db(database_url: Optional[str] = None, create_all: Optional[bool] = None):
    """Inicializar conexión a la base de datos"""
    global engine, async_session_maker

    if engine is not None:
        logger.warning("Database engine already initialized, skipping...")
        return

    database_url = _to_async_url(database_url or settings.DATABASE_URL)
    is_sqlite = database_url.startswith("sqlite")

    logger.info(
        f"Initializing database connection to: "
        f"{database_url.split('@')[1] if '@' in database_url else database_url}"
    )

    if is_sqlite:
        # SQLite serializa escrituras; esperar el lock en vez de fallar de inmediato
        engine_kwargs = {"connect_args": {"timeout": 30}}
    else:
        engine_kwargs = {
            "pool_pre_ping": True,  # Verificar conexiones antes de usar
            "pool_recycle": 300,
            "pool_timeout": 30,
            "pool_use_lifo": True,
            "pool_size": settings.DATABASE_POOL_SIZE,
            "max_overflow": settings.DATABASE_MAX_OVERFLOW,
        }
        logger.info(
            f"Pool config: size={settings.DATABASE_POOL_SIZE}, overflow={settings.DATABASE_MAX_OVERFLOW}"
        )

    engine = create_async_engine(database_url, echo=settings.APP_DEBUG, **engine_kwargs)

    async_session_maker = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False
    )

    if create_all is None:
        create_all = settings.DB_CREATE_ALL
    if create_all:
        await create_tables()

    logger.info("Database engine initialized successfully")


async def create_tables():
    """Crear tablas (y constraints únicos) definidos en los modelos"""
    # Registrar modelos en Base.metadata
    import shared.database.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ensured")


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency para obtener sesión de base de datos"""
    if async_session_maker is None:
        logger.error("Database not initialized! Call init_db() first.")
        raise RuntimeError("Database not initialized. Please check application startup.")

    async with async_session_maker() as session:
        yield session


async def close_db():
    """Cerrar conexiones a la base de datos"""
    global engine, async_session_maker
    if engine:
        logger.info("Closing database connections...")
        await engine.dispose()
        engine = None
        async_session_maker = None
        logger.info("Database connections closed")
