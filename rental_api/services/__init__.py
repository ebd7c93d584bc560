"""
Service layer for business logic implementation.
Contains the domain services plus storage, email, PDF, notification and error handling services.
"""

from .user import UserService
from .property import PropertyService
from .lease import LeaseService
from .payment import PaymentService
from .maintenance import MaintenanceService
from .storage import FileStorageService
from .email_service import EmailService
from .pdf import PdfService
from .notifications import NotificationService
from .scheduler import ReminderScheduler, reminder_scheduler
from .error_handler import ErrorHandlerService

__all__ = [
    "UserService",
    "PropertyService",
    "LeaseService",
    "PaymentService",
    "MaintenanceService",
    "FileStorageService",
    "EmailService",
    "PdfService",
    "NotificationService",
    "ReminderScheduler",
    "reminder_scheduler",
    "ErrorHandlerService",
]
