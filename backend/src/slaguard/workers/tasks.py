"""
Celery worker running the periodic assessment pass.

Provides:
- The ``assess`` task, scheduled by Celery beat every ``SLA_CHECK_PERIOD`` seconds
- A Redis lock so overlapping passes are skipped instead of run twice
"""

from typing import Any, Dict

import structlog
from celery import Celery
from celery.signals import worker_process_init

from slaguard.config import get_settings
from slaguard.observability.logging import configure_logging_once
from slaguard.observability.tracing import configure_tracing, get_tracer
from slaguard.repositories import build_repository
from slaguard.services.assessment import run_assessment_pass
from slaguard.utils.locks import RedisLockError, redis_lock

ASSESSMENT_LOCK = "assessment-pass"

settings = get_settings()

celery_app = Celery(
    "slaguard",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=["slaguard.workers.tasks"],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    worker_prefetch_multiplier=1,
    task_acks_late=True,
    result_expires=3600,
)

celery_app.conf.beat_schedule = {
    "assessment-pass": {
        "task": "slaguard.workers.tasks.assess",
        "schedule": settings.check_period,
    },
}

logger = structlog.get_logger(__name__)
tracer = get_tracer("slaguard.workers.tasks")


@worker_process_init.connect
def _init_worker_observability(**kwargs):
    configure_logging_once(get_settings().log_level)
    configure_tracing()


@celery_app.task(name="slaguard.workers.tasks.assess")
def assess() -> Dict[str, Any]:
    """Run one assessment pass unless another worker already holds the pass lock."""

    current = get_settings()
    with tracer.start_as_current_span("worker.assess"):
        try:
            with redis_lock(
                ASSESSMENT_LOCK,
                ttl=max(current.check_period, 1),
                wait_timeout=0,
                redis_url=current.redis_url,
            ):
                logger.info("worker.assess.started")
                summary = run_assessment_pass(current, build_repository(current))
        except RedisLockError:
            logger.info("worker.assess.skipped", reason="previous pass still running")
            return {"status": "skipped"}

    logger.info("worker.assess.completed", **summary.to_dict())
    return {"status": "completed", **summary.to_dict()}
