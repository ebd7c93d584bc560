"""
Test configuration and fixtures for the rental management API.
Provides database fixtures, test data factories, test doubles and common test utilities.
"""

import os
import tempfile

# Settings are read at import time, so the test environment must be in place first
os.environ["ENVIRONMENT"] = "testing"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["JWT_SECRET_KEY"] = "test-secret-key-for-the-rental-api-suite-0123456789"
os.environ["EMAIL_ENABLED"] = "false"
os.environ["LOGIN_RATE_LIMIT"] = "1000"
os.environ["STORAGE_DIR"] = tempfile.mkdtemp(prefix="rental-api-storage-")

import io
import uuid
from datetime import date, timedelta
from decimal import Decimal
from typing import AsyncGenerator, List, Optional

import pytest
from httpx import ASGITransport, AsyncClient
from PIL import Image
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import rental_api.models  # noqa: F401
from rental_api.database import Base, enable_sqlite_foreign_keys, get_db
from rental_api.main import app
from rental_api.models.lease import Lease
from rental_api.models.payment import RentPayment, PaymentStatus, PaymentType
from rental_api.models.property import Property
from rental_api.models.user import User, UserRole
from rental_api.repositories.unit_of_work import UnitOfWork
from rental_api.services.lease import LeaseService
from rental_api.services.maintenance import MaintenanceService
from rental_api.services.notifications import NotificationService
from rental_api.services.payment import PaymentService
from rental_api.services.pdf import PdfService
from rental_api.services.property import PropertyService
from rental_api.services.storage import FileStorageService
from rental_api.services.user import UserService
from rental_api.utils.auth import generate_token, hash_password
from rental_api.utils.dependencies import get_email_service, get_reminder_scheduler, get_storage


DEFAULT_PASSWORD = "Str0ng!Pass"


# Test doubles
class RecordingEmailService:
    """Email service double that keeps every message instead of sending it."""

    def __init__(self, fail: bool = False):
        self.sent: List[dict] = []
        self.fail = fail

    async def send_email(self, to_email: str, subject: str, html_body: str) -> bool:
        if self.fail:
            raise ConnectionError("SMTP server unreachable")
        self.sent.append({"to": to_email, "subject": subject, "body": html_body})
        return True

    async def send_email_with_attachment(
        self, to_email: str, subject: str, html_body: str, attachment: bytes, filename: str
    ) -> bool:
        self.sent.append({"to": to_email, "subject": subject, "body": html_body, "filename": filename})
        return True

    def subjects(self) -> List[str]:
        return [message["subject"] for message in self.sent]


class FakeReminderScheduler:
    """Scheduler double recording reminders instead of starting tasks."""

    def __init__(self):
        self.scheduled: List[tuple] = []

    def schedule_rent_reminder(self, payment_id: uuid.UUID, remind_on: date) -> None:
        self.scheduled.append((payment_id, remind_on))


# Database fixtures
@pytest.fixture
async def test_engine():
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    enable_sqlite_foreign_keys(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine) -> async_sessionmaker:
    return async_sessionmaker(bind=test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def uow(db_session: AsyncSession) -> UnitOfWork:
    return UnitOfWork(db_session)


# Collaborator fixtures
@pytest.fixture
def email_service() -> RecordingEmailService:
    return RecordingEmailService()


@pytest.fixture
def notifications(email_service: RecordingEmailService) -> NotificationService:
    return NotificationService(email_service)


@pytest.fixture
def fake_scheduler() -> FakeReminderScheduler:
    return FakeReminderScheduler()


@pytest.fixture
def storage(tmp_path) -> FileStorageService:
    return FileStorageService(base_dir=str(tmp_path / "storage"))


@pytest.fixture
def pdf_service() -> PdfService:
    return PdfService()


# Service fixtures
@pytest.fixture
def user_service(uow: UnitOfWork) -> UserService:
    return UserService(uow)


@pytest.fixture
def property_service(uow: UnitOfWork, storage: FileStorageService) -> PropertyService:
    return PropertyService(uow, storage)


@pytest.fixture
def payment_service(uow, storage, notifications, fake_scheduler, pdf_service) -> PaymentService:
    return PaymentService(
        uow,
        storage=storage,
        notifications=notifications,
        scheduler=fake_scheduler,
        pdf_service=pdf_service
    )


@pytest.fixture
def lease_service(uow, payment_service, storage, pdf_service) -> LeaseService:
    return LeaseService(uow, payment_service=payment_service, storage=storage, pdf_service=pdf_service)


@pytest.fixture
def maintenance_service(uow: UnitOfWork, notifications: NotificationService) -> MaintenanceService:
    return MaintenanceService(uow, notifications)


# HTTP client
@pytest.fixture
async def async_client(
    session_factory,
    email_service: RecordingEmailService,
    fake_scheduler: FakeReminderScheduler,
    storage: FileStorageService
) -> AsyncGenerator[AsyncClient, None]:
    """Async test client wired to the per-test database and test doubles."""
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_email_service] = lambda: email_service
    app.dependency_overrides[get_reminder_scheduler] = lambda: fake_scheduler
    app.dependency_overrides[get_storage] = lambda: storage

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


# Test data factories
def random_nid(length: int = 10) -> str:
    digits = str(uuid.uuid4().int)
    return digits[:length]


class UserFactory:
    """Factory for creating test users."""

    @staticmethod
    def create_user_data(
        email: Optional[str] = None,
        password: str = DEFAULT_PASSWORD,
        full_name: str = "Test User",
        role: UserRole = UserRole.TENANT,
        nid: Optional[str] = None
    ) -> dict:
        """Registration payload as the API expects it."""
        return {
            "email": email or f"user{uuid.uuid4().hex[:8]}@example.com",
            "password": password,
            "full_name": full_name,
            "phone_number": "+8801712345678",
            "nid": nid or random_nid(),
            "role": role.value,
        }

    @staticmethod
    async def create_user(
        uow: UnitOfWork,
        email: Optional[str] = None,
        password: str = DEFAULT_PASSWORD,
        full_name: str = "Test User",
        role: UserRole = UserRole.TENANT,
        nid: Optional[str] = None,
        is_nid_verified: bool = False
    ) -> User:
        """Create a test user in the database."""
        user = User(
            email=email or f"user{uuid.uuid4().hex[:8]}@example.com",
            hashed_password=hash_password(password),
            full_name=full_name,
            phone_number="+8801712345678",
            nid=nid or random_nid(),
            is_nid_verified=is_nid_verified,
            role=role,
        )
        uow.users.add(user)
        await uow.save_changes()
        return user


class PropertyFactory:
    """Factory for creating test properties."""

    @staticmethod
    def create_property_data(
        address: str = "House 12, Road 5, Dhanmondi",
        city: str = "Dhaka",
        rent_amount: int = 20000,
        security_deposit: int = 0,
        bedrooms: int = 3,
        bathrooms: int = 2
    ) -> dict:
        return {
            "address": address,
            "city": city,
            "description": "Bright flat close to the main road",
            "rent_amount": rent_amount,
            "security_deposit": security_deposit,
            "bedrooms": bedrooms,
            "bathrooms": bathrooms,
            "amenities": "Lift, Generator",
        }

    @staticmethod
    async def create_property(
        uow: UnitOfWork,
        landlord_id: uuid.UUID,
        address: str = "House 12, Road 5, Dhanmondi",
        city: str = "Dhaka",
        rent_amount: Decimal = Decimal("20000"),
        security_deposit: Decimal = Decimal("0"),
        bedrooms: int = 3,
        bathrooms: int = 2,
        is_available: bool = True
    ) -> Property:
        """Create a test property in the database."""
        property_obj = Property(
            address=address,
            city=city,
            rent_amount=rent_amount,
            security_deposit=security_deposit,
            bedrooms=bedrooms,
            bathrooms=bathrooms,
            is_available=is_available,
            landlord_id=landlord_id,
            images=[],
        )
        uow.properties.add(property_obj)
        await uow.save_changes()
        return await uow.properties.get_with_details(property_obj.id)


class LeaseFactory:
    """Factory for creating leases directly, bypassing the lease rules."""

    @staticmethod
    async def create_lease(
        uow: UnitOfWork,
        property_id: uuid.UUID,
        tenant_id: uuid.UUID,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        monthly_rent: Decimal = Decimal("20000"),
        is_active: bool = True
    ) -> Lease:
        lease = Lease(
            property_id=property_id,
            tenant_id=tenant_id,
            start_date=start_date or date.today(),
            end_date=end_date,
            monthly_rent=monthly_rent,
            is_active=is_active,
        )
        uow.leases.add(lease)
        await uow.save_changes()
        return await uow.leases.get_with_details(lease.id)


class PaymentFactory:
    """Factory for creating payments directly."""

    @staticmethod
    async def create_payment(
        uow: UnitOfWork,
        lease_id: uuid.UUID,
        amount: Decimal = Decimal("15000"),
        due_date: Optional[date] = None,
        status: PaymentStatus = PaymentStatus.PENDING,
        payment_type: PaymentType = PaymentType.RENT,
        slip_path: Optional[str] = None
    ) -> RentPayment:
        payment = RentPayment(
            lease_id=lease_id,
            amount=amount,
            due_date=due_date or date.today() + timedelta(days=10),
            status=status,
            payment_type=payment_type,
            slip_path=slip_path,
        )
        uow.payments.add(payment)
        await uow.save_changes()
        return await uow.payments.get_with_details(payment.id)


# Common test fixtures
@pytest.fixture
async def test_landlord(uow: UnitOfWork) -> User:
    return await UserFactory.create_user(
        uow, email="landlord@test.com", full_name="Karim Landlord", role=UserRole.LANDLORD
    )


@pytest.fixture
async def other_landlord(uow: UnitOfWork) -> User:
    return await UserFactory.create_user(
        uow, email="other.landlord@test.com", full_name="Other Landlord", role=UserRole.LANDLORD
    )


@pytest.fixture
async def test_tenant(uow: UnitOfWork) -> User:
    """NID-verified tenant."""
    return await UserFactory.create_user(
        uow, email="tenant@test.com", full_name="Rahim Tenant", role=UserRole.TENANT, is_nid_verified=True
    )


@pytest.fixture
async def test_admin(uow: UnitOfWork) -> User:
    return await UserFactory.create_user(
        uow, email="admin@test.com", full_name="Test Admin", role=UserRole.ADMIN
    )


@pytest.fixture
async def test_property(uow: UnitOfWork, test_landlord: User) -> Property:
    return await PropertyFactory.create_property(uow, landlord_id=test_landlord.id)


@pytest.fixture
async def test_lease(uow: UnitOfWork, test_property: Property, test_tenant: User) -> Lease:
    return await LeaseFactory.create_lease(
        uow,
        property_id=test_property.id,
        tenant_id=test_tenant.id,
        start_date=date.today() - timedelta(days=30),
        end_date=date.today() + timedelta(days=335),
    )


# Utility functions for tests
def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {generate_token(user)}"}


def make_image_bytes(image_format: str = "PNG", size: tuple = (8, 8)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color=(200, 30, 30)).save(buffer, format=image_format)
    return buffer.getvalue()
