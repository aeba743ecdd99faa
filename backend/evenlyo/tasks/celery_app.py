# backend/evenlyo/tasks/celery_app.py
"""
Celery application configuration for Evenlyo.

Redis is both broker and result backend. Periodic jobs are registered from
``evenlyo.tasks.beat_schedule``.
"""

import logging
import os
from typing import Any

from celery import Celery, Task
from celery.signals import setup_logging

from evenlyo.core.config import settings


class BaseTask(Task):  # type: ignore[misc]
    """Base task with failure logging."""

    def on_failure(self, exc: Exception, task_id: str, args: Any, kwargs: Any, einfo: Any) -> None:
        logging.getLogger(__name__).error(
            f"Task {self.name}[{task_id}] failed with exception: {exc}",
            exc_info=True,
            extra={"task_id": task_id, "task_name": self.name},
        )


def create_celery_app() -> Celery:
    """
    Create and configure the Celery application.

    Returns:
        Celery: Configured Celery application instance
    """
    # Priority: CELERY_BROKER_URL -> settings.celery_broker_url -> settings.redis_url
    broker_url = (
        os.getenv("CELERY_BROKER_URL")
        or settings.celery_broker_url
        or settings.redis_url
        or "redis://localhost:6379"
    )
    if not any(broker_url.endswith(f"/{i}") for i in range(16)):
        broker_url = f"{broker_url}/0"

    result_backend = os.getenv("CELERY_RESULT_BACKEND") or broker_url

    celery_app = Celery("evenlyo", broker=broker_url, backend=result_backend, task_cls=BaseTask)

    celery_app.conf.update(
        {
            "task_serializer": "json",
            "accept_content": ["json"],
            "result_serializer": "json",
            "timezone": "Europe/Amsterdam",
            "enable_utc": True,
            "worker_prefetch_multiplier": 4,
            "worker_max_tasks_per_child": 1000,
            "task_soft_time_limit": 300,
            "task_time_limit": 600,
            "task_acks_late": True,
            "task_reject_on_worker_lost": True,
            "task_default_retry_delay": 60,
            "task_max_retries": 3,
            "worker_hijack_root_logger": False,
            "broker_transport_options": {"visibility_timeout": 3600},
            # Tests run tasks inline
            "task_always_eager": settings.environment == "test",
        }
    )

    celery_app.conf.imports = ("evenlyo.tasks.payment_tasks",)
    celery_app.conf.task_routes = {"evenlyo.tasks.payment_tasks.*": {"queue": "payments"}}

    from evenlyo.tasks.beat_schedule import get_beat_schedule

    celery_app.conf.beat_schedule = get_beat_schedule(settings.environment)
    return celery_app


@setup_logging.connect  # type: ignore[misc]
def config_loggers(*args: Any, **kwargs: Any) -> None:
    """Configure logging to integrate with the application's logging setup."""
    logging.basicConfig(
        level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


celery_app = create_celery_app()

