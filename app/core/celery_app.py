"""
Конфигурация Celery для фоновой валидации BOM.

Воркер запускается командой:
    celery -A app.core.celery_app worker -Q bom-validation
"""
from celery import Celery

from app.core.config import settings

celery_app = Celery(
    "bomaudit",
    broker=settings.CELERY_BROKER_URL or settings.REDIS_URL,
    backend=settings.CELERY_RESULT_BACKEND or settings.REDIS_URL,
    include=["app.tasks.validation_tasks"],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    result_expires=24 * 60 * 60,
    timezone="UTC",
    enable_utc=True,
    task_routes={"validate_bom_check": {"queue": settings.VALIDATION_QUEUE}},
    task_track_started=True,
    # BOM в пределах MAX_FILE_SIZE проверяется за секунды
    task_time_limit=5 * 60,
    task_soft_time_limit=4 * 60,
    worker_prefetch_multiplier=1,
    task_acks_late=True,
    task_reject_on_worker_lost=True,
)
