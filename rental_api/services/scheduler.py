"""
In-process scheduling of rent reminders.
Reminders are fire-and-forget asyncio tasks: no retry, and anything pending is lost on restart.
The daily reminder scan job covers what this misses.
"""

from datetime import date, datetime, time, timezone
from typing import Callable, Optional, Set
import asyncio
import logging
import uuid

from rental_api.database import AsyncSessionLocal

logger = logging.getLogger(__name__)


class ReminderScheduler:
    """
    Keeps a strong reference to every scheduled task until it finishes or is cancelled.
    """

    def __init__(self, session_factory: Optional[Callable] = None):
        self.session_factory = session_factory or AsyncSessionLocal
        self._tasks: Set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    @staticmethod
    def seconds_until(remind_on: date, now: Optional[datetime] = None) -> float:
        """Seconds from now until midnight UTC of the reminder day, never negative."""
        now = now or datetime.now(timezone.utc)
        remind_at = datetime.combine(remind_on, time.min, tzinfo=timezone.utc)
        return max(0.0, (remind_at - now).total_seconds())

    def schedule_rent_reminder(self, payment_id: uuid.UUID, remind_on: date) -> Optional[asyncio.Task]:
        """
        Schedule a reminder email for a payment.

        Args:
            payment_id: Payment to remind about
            remind_on: Day the reminder should go out

        Returns:
            The scheduled task, or None when the reminder day has already passed
        """
        delay = self.seconds_until(remind_on)
        if delay <= 0:
            logger.info(f"Reminder day {remind_on} for payment {payment_id} has passed, not scheduling")
            return None

        task = asyncio.create_task(self.deliver_rent_reminder(payment_id, delay))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        logger.info(f"Scheduled rent reminder for payment {payment_id} on {remind_on}")
        return task

    async def deliver_rent_reminder(self, payment_id: uuid.UUID, delay: float = 0) -> None:
        """
        Wait, then send the reminder in a fresh session.

        The payment may have been deleted or paid in the meantime; the payment
        service handles both cases.
        """
        from rental_api.repositories.unit_of_work import UnitOfWork
        from rental_api.services.payment import PaymentService

        if delay:
            await asyncio.sleep(delay)

        try:
            async with self.session_factory() as session:
                service = PaymentService(UnitOfWork(session))
                await service.send_rent_reminder(payment_id)
        except Exception as e:
            logger.warning(f"Rent reminder for payment {payment_id} failed: {e}")

    async def cancel_all(self) -> None:
        """Cancel every pending reminder (used on shutdown)."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
            logger.info(f"Cancelled {len(tasks)} pending reminders")
        self._tasks.clear()


reminder_scheduler = ReminderScheduler()
