"""
Celery tasks for booking payments.

Sends balance reminders for escrow bookings and cancels bookings whose
remaining amount is still unpaid shortly before the event.
"""

import logging
from typing import Any, Callable, ParamSpec, Protocol, TypeVar, cast

from celery.result import AsyncResult
from sqlalchemy.orm import Session

from evenlyo.services.payment_reminder_service import PaymentReminderService, ReminderJobResults
from evenlyo.tasks.celery_app import celery_app

logger = logging.getLogger(__name__)

P = ParamSpec("P")
R = TypeVar("R", covariant=True)


class TaskWrapper(Protocol[P, R]):
    def __call__(self, *args: P.args, **kwargs: P.kwargs) -> R:
        ...

    delay: Callable[..., AsyncResult]
    apply_async: Callable[..., AsyncResult]


def typed_task(
    *task_args: Any, **task_kwargs: Any
) -> Callable[[Callable[P, R]], TaskWrapper[P, R]]:
    """Return a typed Celery task decorator for mypy."""

    return cast(
        Callable[[Callable[P, R]], TaskWrapper[P, R]],
        celery_app.task(*task_args, **task_kwargs),
    )


@typed_task(bind=True, max_retries=3, name="evenlyo.tasks.payment_tasks.process_payment_reminders")
def process_payment_reminders(self: Any) -> ReminderJobResults:
    """
    Daily run over escrow bookings with an outstanding balance.

    Returns:
        Counts of reminders sent and bookings cancelled
    """
    from evenlyo.database import SessionLocal

    db: Session = SessionLocal()
    try:
        return PaymentReminderService(db).process()
    except Exception as exc:
        logger.error(f"Payment reminder job failed: {exc}")
        raise self.retry(exc=exc, countdown=300)
    finally:
        db.close()
