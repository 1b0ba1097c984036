"""
Configuración de Celery para tareas periódicas

Worker: celery -A shared.cache.celery_app worker -B
"""
from celery import Celery
from kombu import Queue, Exchange
import logging

from app.core.config import settings

logger = logging.getLogger(__name__)

REDIS_URL = settings.REDIS_URL

celery_app = Celery(
    "auditorium",
    broker=REDIS_URL,
    backend=REDIS_URL,
    include=[
        "services.booking.tasks.reconciliation_tasks",
    ]
)

default_exchange = Exchange("default", type="direct")

celery_app.conf.task_queues = (
    Queue("default", default_exchange, routing_key="default"),
    # Barridos y operaciones batch
    Queue("low_priority", default_exchange, routing_key="low"),
)

celery_app.conf.task_routes = {
    "void_orphan_tickets": {"queue": "low_priority"},
}

celery_app.conf.beat_schedule = {
    "void-orphan-tickets": {
        "task": "void_orphan_tickets",
        "schedule": float(settings.RECONCILIATION_INTERVAL_SECONDS),
    },
}

celery_app.conf.update(
    # Serialización
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",

    # Timezone
    timezone="UTC",
    enable_utc=True,

    task_track_started=True,

    # Límites de tiempo
    task_time_limit=5 * 60,
    task_soft_time_limit=4 * 60,

    worker_prefetch_multiplier=1,
    broker_connection_retry_on_startup=True,

    # ACK late: confirmar tarea solo cuando termina
    task_acks_late=True,
    task_reject_on_worker_lost=True,

    result_expires=3600,

    task_default_queue="default",
    task_default_exchange="default",
    task_default_routing_key="default",
)

logger.info(
    "Celery configurado - Broker: %s, reconciliación cada %ds",
    REDIS_URL.split("@")[-1] if "@" in REDIS_URL else REDIS_URL,
    settings.RECONCILIATION_INTERVAL_SECONDS
)
