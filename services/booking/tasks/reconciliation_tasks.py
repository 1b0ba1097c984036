"""Tareas periódicas de reconciliación de tickets"""
import logging
import asyncio
from shared.cache.celery_app import celery_app

logger = logging.getLogger(__name__)


def run_async(coro):
    """Helper para ejecutar coroutines en contexto síncrono de Celery"""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


async def _void_orphan_tickets() -> int:
    from shared.database import connection
    from services.booking.services.cancellation_service import CancellationService

    # Cada ejecución usa su propio event loop: engine nuevo y cerrado al final
    await connection.init_db()
    try:
        async with connection.async_session_maker() as session:
            return await CancellationService.reconcile_orphan_tickets(session)
    finally:
        await connection.close_db()


@celery_app.task(
    name="void_orphan_tickets",
    bind=True,
    autoretry_for=(Exception,),
    retry_backoff=True,
    retry_kwargs={"max_retries": 3},
)
def void_orphan_tickets_task(self):
    """
    Anular tickets issued cuya reserva fue eliminada

    Cubre cancelaciones en las que se borró la reserva pero falló la anulación del ticket
    """
    logger.info("[CELERY] Iniciando barrido de tickets huérfanos")
    voided = run_async(_void_orphan_tickets())
    logger.info(f"[CELERY] Barrido terminado: {voided} tickets anulados")
    return {"voided_tickets": voided}
