"""API Gateway principal - Punto de entrada de la aplicación"""
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import SQLAlchemyError
from starlette.responses import JSONResponse
import logging
from contextlib import asynccontextmanager

from app.core.config import settings
from shared.database.connection import init_db, close_db
from shared.utils.errors import BookingSystemError, booking_error_handler
from shared.utils.rate_limiter import limiter, rate_limit_exceeded_handler

# Configurar logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifecycle events de la aplicación"""
    logger.info("Iniciando aplicación...")
    await init_db()
    logger.info("Aplicación iniciada")
    yield
    logger.info("Cerrando aplicación...")
    await close_db()
    logger.info("Aplicación cerrada")


app = FastAPI(
    title="Auditorium Booking API",
    description="Reserva de asientos por función y validación de tickets de entrada",
    version="1.0.0",
    lifespan=lifespan
)

# En desarrollo, permitir todos los orígenes para facilitar testing
if settings.APP_ENV == "development":
    allow_origins = ["*"]
    allow_credentials = False  # No se puede usar credentials con allow_origins=["*"]
else:
    allow_origins = [origin.strip() for origin in settings.CORS_ORIGINS.split(",") if origin.strip()]
    allow_credentials = True
    logger.info(f"CORS origins configurados: {allow_origins}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=allow_credentials,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
    max_age=3600,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
app.add_exception_handler(BookingSystemError, booking_error_handler)


def jsonable_errors(exc: RequestValidationError):
    return [
        {"loc": list(error.get("loc", [])), "msg": error.get("msg")}
        for error in exc.errors()
    ]


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    """Campos faltantes o mal formados: 400 bad-request"""
    return JSONResponse(
        status_code=400,
        content={"code": "bad-request", "detail": "Solicitud inválida", "errors": jsonable_errors(exc)},
    )


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    """Fallas de infraestructura: error genérico, el cliente puede reintentar"""
    logger.error(f"Database error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"code": "server-error", "detail": "Error interno, intenta nuevamente"},
    )


# Incluir routers de cada servicio
from services.catalog.routes.shows import router as shows_router
from services.booking.routes.booking import router as booking_router
from services.ticket_validation.routes.validation import router as validation_router
from services.admin.routes.admin import router as admin_router

app.include_router(shows_router, prefix="/api/v1/shows", tags=["shows"])
app.include_router(booking_router, prefix="/api/v1/book", tags=["booking"])
app.include_router(validation_router, prefix="/api/v1/tickets", tags=["tickets"])
app.include_router(admin_router, prefix="/api/v1/admin", tags=["admin"])


@app.get("/health")
async def health():
    """Health check endpoint"""
    return {"status": "ok", "service": "auditorium-api"}


@app.get("/ready")
async def ready():
    """Ready check endpoint - verifica conexión a la base de datos"""
    from sqlalchemy import text
    from shared.database import connection

    try:
        async with connection.async_session_maker() as session:
            await session.execute(text("SELECT 1"))
        return {"status": "ready", "database": "connected"}
    except (SQLAlchemyError, OSError, TypeError) as e:
        logger.error(f"Ready check failed: {e}")
        return JSONResponse(status_code=503, content={"status": "not ready", "error": str(e)})


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.APP_DEBUG
    )
