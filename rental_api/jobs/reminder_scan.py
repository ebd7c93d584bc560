#!/usr/bin/env python3
"""
Daily reminder scan.

Generates next month's rent records, reminds tenants about payments due soon
and sends overdue notices for payments that fell due yesterday. The scan keeps
no state between runs; schedule it once a day with cron:

    0 8 * * * rental-reminders
"""

import argparse
import asyncio
import logging
from datetime import date, timedelta
from typing import Callable, Dict, Optional

from rental_api.config import settings
from rental_api.database import AsyncSessionLocal, close_db_connection
from rental_api.repositories.unit_of_work import UnitOfWork
from rental_api.services.email_service import EmailService
from rental_api.services.notifications import NotificationService
from rental_api.services.payment import PaymentService

logger = logging.getLogger(__name__)


async def run_reminder_scan(
    session_factory: Optional[Callable] = None,
    today: Optional[date] = None,
    email_service: Optional[EmailService] = None
) -> Dict[str, int]:
    """
    Run one reminder scan.

    Args:
        session_factory: Async session factory, defaults to the application's
        today: Reference day, defaults to today
        email_service: Email sender, defaults to one built from settings

    Returns:
        Counts of generated payments, reminders and overdue notices
    """
    session_factory = session_factory or AsyncSessionLocal
    today = today or date.today()
    notifications = NotificationService(email_service)

    async with session_factory() as session:
        async with UnitOfWork(session) as uow:
            service = PaymentService(uow, notifications=notifications)

            generated = await service.generate_monthly_rent_payments(today)

            reminders = 0
            due_soon = today + timedelta(days=settings.reminder_days_before)
            for payment in await service.get_payments_by_due_date(due_soon):
                if await service.send_rent_reminder(payment.id):
                    reminders += 1

            overdue_notices = 0
            for payment in await service.get_payments_by_due_date(today - timedelta(days=1)):
                if await service.send_overdue_reminder(payment.id, today):
                    overdue_notices += 1

    counts = {
        "generated_payments": len(generated),
        "rent_reminders": reminders,
        "overdue_notices": overdue_notices,
    }
    logger.info(f"Reminder scan for {today}: {counts}")
    return counts


async def _run(today: Optional[date]) -> Dict[str, int]:
    try:
        return await run_reminder_scan(today=today)
    finally:
        await close_db_connection()


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Send rent reminders and generate monthly rent payments")
    parser.add_argument(
        "--date",
        type=date.fromisoformat,
        default=None,
        help="Run the scan as if today were this date (YYYY-MM-DD)"
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    counts = asyncio.run(_run(args.date))
    print(
        f"Generated {counts['generated_payments']} payments, "
        f"sent {counts['rent_reminders']} reminders and {counts['overdue_notices']} overdue notices"
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
