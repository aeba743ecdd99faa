# backend/evenlyo/tasks/beat_schedule.py
"""Celery Beat schedule for Evenlyo periodic jobs."""

from typing import Any, Dict

from celery.schedules import crontab

CELERYBEAT_SCHEDULE: Dict[str, Dict[str, Any]] = {
    # Payment reminders and non-payment cancellations, daily at 09:00
    "process-payment-reminders": {
        "task": "evenlyo.tasks.payment_tasks.process_payment_reminders",
        "schedule": crontab(hour=9, minute=0),
        "options": {"queue": "payments", "priority": 5},
    },
}


def get_beat_schedule(environment: str) -> Dict[str, Dict[str, Any]]:
    """Beat schedule for ``environment``; nothing is scheduled under test."""
    if environment == "test":
        return {}
    return dict(CELERYBEAT_SCHEDULE)
