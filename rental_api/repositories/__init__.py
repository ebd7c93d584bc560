"""
Repository layer for data access operations.
Repositories queue changes; the unit of work commits them.
"""

from rental_api.repositories.base import BaseRepository
from rental_api.repositories.user import UserRepository
from rental_api.repositories.property import PropertyRepository, PropertySearchFilters
from rental_api.repositories.lease import LeaseRepository
from rental_api.repositories.payment import PaymentRepository
from rental_api.repositories.maintenance import MaintenanceRepository
from rental_api.repositories.image import ImageRepository
from rental_api.repositories.utility_bill import UtilityBillRepository
from rental_api.repositories.unit_of_work import UnitOfWork

__all__ = [
    "BaseRepository",
    "UserRepository",
    "PropertyRepository",
    "PropertySearchFilters",
    "LeaseRepository",
    "PaymentRepository",
    "MaintenanceRepository",
    "ImageRepository",
    "UtilityBillRepository",
    "UnitOfWork",
]
