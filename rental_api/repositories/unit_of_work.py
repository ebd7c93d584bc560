"""
Unit of work grouping repository changes into a single commit.
One instance wraps one AsyncSession; repositories are created lazily and cached.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from rental_api.repositories.user import UserRepository
from rental_api.repositories.property import PropertyRepository
from rental_api.repositories.lease import LeaseRepository
from rental_api.repositories.payment import PaymentRepository
from rental_api.repositories.maintenance import MaintenanceRepository
from rental_api.repositories.image import ImageRepository
from rental_api.repositories.utility_bill import UtilityBillRepository
from typing import Any, Callable, Dict
import logging

logger = logging.getLogger(__name__)


class UnitOfWork:
    """
    Owns the session for one request or job run and is the only place changes are committed.

    Outside an explicit transaction every save_changes() call commits. Between
    begin_transaction() and commit() it only flushes, so several saves land atomically.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self._repositories: Dict[str, Any] = {}
        self._in_transaction = False

    def _repository(self, name: str, factory: Callable[[AsyncSession], Any]) -> Any:
        if name not in self._repositories:
            self._repositories[name] = factory(self.session)
        return self._repositories[name]

    @property
    def users(self) -> UserRepository:
        return self._repository("users", UserRepository)

    @property
    def properties(self) -> PropertyRepository:
        return self._repository("properties", PropertyRepository)

    @property
    def leases(self) -> LeaseRepository:
        return self._repository("leases", LeaseRepository)

    @property
    def payments(self) -> PaymentRepository:
        return self._repository("payments", PaymentRepository)

    @property
    def maintenance_requests(self) -> MaintenanceRepository:
        return self._repository("maintenance_requests", MaintenanceRepository)

    @property
    def images(self) -> ImageRepository:
        return self._repository("images", ImageRepository)

    @property
    def utility_bills(self) -> UtilityBillRepository:
        return self._repository("utility_bills", UtilityBillRepository)

    @property
    def in_transaction(self) -> bool:
        return self._in_transaction

    async def save_changes(self) -> int:
        """
        Persist every queued change.

        Returns:
            Number of entities inserted, updated or deleted

        Raises:
            Exception: Whatever the database raised; the session is rolled back first
        """
        pending = len(self.session.new) + len(self.session.dirty) + len(self.session.deleted)
        try:
            if self._in_transaction:
                await self.session.flush()
            else:
                await self.session.commit()
            logger.debug(f"Saved {pending} changes")
            return pending
        except Exception as e:
            logger.error(f"Failed to save changes: {e}")
            await self.session.rollback()
            self._in_transaction = False
            raise

    async def begin_transaction(self) -> None:
        """
        Start an explicit transaction spanning several save_changes() calls.

        Raises:
            RuntimeError: If a transaction is already open on this unit of work
        """
        if self._in_transaction:
            raise RuntimeError("A transaction is already in progress")
        self._in_transaction = True
        logger.debug("Transaction started")

    async def commit(self) -> None:
        """
        Commit the explicit transaction, rolling back if the commit fails.

        Raises:
            RuntimeError: If no transaction was started
        """
        if not self._in_transaction:
            raise RuntimeError("No transaction in progress")
        try:
            await self.session.commit()
            logger.debug("Transaction committed")
        except Exception as e:
            logger.error(f"Transaction commit failed: {e}")
            await self.session.rollback()
            raise
        finally:
            self._in_transaction = False

    async def rollback(self) -> None:
        await self.session.rollback()
        self._in_transaction = False
        logger.debug("Transaction rolled back")

    async def __aenter__(self) -> "UnitOfWork":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None or self._in_transaction:
            await self.rollback()
