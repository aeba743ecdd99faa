"""
Celery tasks package for Evenlyo.

Importing the package registers every task with the Celery app.
"""

from evenlyo.tasks.celery_app import BaseTask, celery_app
from evenlyo.tasks.payment_tasks import process_payment_reminders

__all__ = ["BaseTask", "celery_app", "process_payment_reminders"]
