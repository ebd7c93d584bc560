"""
Domain notifications sent by email.
Delivery is best-effort: failures are logged and never fail the business operation.
"""

from html import escape
from typing import Optional
import logging

from rental_api.config import settings
from rental_api.models.maintenance import MaintenanceRequest
from rental_api.models.payment import RentPayment
from rental_api.models.user import User
from rental_api.services.email_service import EmailService

logger = logging.getLogger(__name__)

SIGNATURE = "Best regards,<br/>House Rent Management System"


def _money(amount) -> str:
    return f"{float(amount):,.2f} {settings.currency}"


class NotificationService:
    """
    Renders notification emails and hands them to the email service.
    """

    def __init__(self, email_service: Optional[EmailService] = None):
        self.email_service = email_service or EmailService()

    async def _send(self, recipient: User, subject: str, body: str) -> bool:
        html = f"Dear {recipient.full_name},<br/><br/>{body}<br/><br/>{SIGNATURE}"
        try:
            return await self.email_service.send_email(recipient.email, subject, html)
        except Exception as e:
            logger.warning(f"Failed to send '{subject}' to {recipient.email}: {e}")
            return False

    async def send_rent_reminder(self, payment: RentPayment) -> bool:
        tenant = payment.lease.tenant
        property_obj = payment.lease.property_rel
        body = (
            f"This is a reminder that your rent payment of {_money(payment.amount)} "
            f"for {property_obj.address} is due on {payment.due_date.isoformat()}."
        )
        return await self._send(tenant, "Rent Payment Reminder", body)

    async def send_overdue_notice(self, payment: RentPayment, late_fee: float) -> bool:
        tenant = payment.lease.tenant
        body = (
            f"Your payment of {_money(payment.amount)} that was due on "
            f"{payment.due_date.isoformat()} is overdue. "
            f"A late fee of {_money(late_fee)} currently applies. Please pay as soon as possible."
        )
        return await self._send(tenant, "Overdue Rent Payment", body)

    async def send_payment_confirmation(self, payment: RentPayment) -> bool:
        tenant = payment.lease.tenant
        body = (
            f"We have received your payment of {_money(payment.amount)} "
            f"due on {payment.due_date.isoformat()}. Thank you."
        )
        return await self._send(tenant, "Payment Confirmation", body)

    async def notify_new_maintenance_request(self, request: MaintenanceRequest) -> bool:
        property_obj = request.property_rel
        body = (
            f"A new maintenance request was filed for {property_obj.address}, {property_obj.city}:"
            f"<br/>{escape(request.description)}"
        )
        return await self._send(property_obj.landlord, "New Maintenance Request", body)

    async def notify_maintenance_status(self, request: MaintenanceRequest) -> bool:
        status_label = request.status.value.replace("_", " ")
        body = (
            f"The status of your maintenance request for {request.property_rel.address} "
            f"is now: {status_label}."
        )
        return await self._send(request.tenant, "Maintenance Request Update", body)
