"""
Shared fixtures: an in-memory SQLite database, an in-memory object store and
an HTTP client wired to the FastAPI app.
"""

import os
from datetime import date
from decimal import Decimal
from pathlib import Path

# Settings load at import time, so CONFIG has to point at the test file first
os.environ["CONFIG"] = str(Path(__file__).parent / "resources" / "test.yaml")

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from rentlink_backend.core.storage import get_storage  # noqa: E402
from rentlink_backend.database import Base, get_db, import_all_models  # noqa: E402
from rentlink_backend.main import app  # noqa: E402
from rentlink_backend.modules.auth import crud as auth_crud  # noqa: E402
from rentlink_backend.modules.auth.models import User, UserRole  # noqa: E402
from rentlink_backend.modules.leases import crud as lease_crud  # noqa: E402
from rentlink_backend.modules.leases.documents import build_default_document  # noqa: E402
from rentlink_backend.modules.leases.models import Lease, LeaseStatus  # noqa: E402
from rentlink_backend.modules.listings import crud as listing_crud  # noqa: E402
from rentlink_backend.modules.listings.models import (  # noqa: E402
    ApprovalStatus,
    Property,
)

from .helpers import PASSWORD, InMemoryStorage  # noqa: E402

import_all_models()


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
async def client(session_factory, storage):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage] = lambda: storage
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://testserver"
    ) as http_client:
        yield http_client
    app.dependency_overrides.clear()


# ----- Factories -----


@pytest.fixture
def make_user(db):
    async def _make_user(
        email: str, role: UserRole = UserRole.TENANT, first_name: str = "Test"
    ) -> User:
        user = await auth_crud.create_user(
            db,
            email=email,
            password=PASSWORD,
            first_name=first_name,
            last_name="User",
            role=role,
            is_verified=role != UserRole.TENANT,
        )
        await db.commit()
        return user

    return _make_user


@pytest.fixture
async def admin(make_user):
    return await make_user("admin@rentlink.co.za", UserRole.ADMIN, "Ada")


@pytest.fixture
async def landlord(make_user):
    return await make_user("landlord@rentlink.co.za", UserRole.LANDLORD, "Lena")


@pytest.fixture
async def tenant(make_user):
    return await make_user("tenant@rentlink.co.za", UserRole.TENANT, "Tom")


@pytest.fixture
def make_property(db):
    async def _make_property(
        landlord: User,
        approval_status: ApprovalStatus = ApprovalStatus.APPROVED,
        is_available: bool | None = None,
        title: str = "Sunny two bedroom flat",
        city: str = "Cape Town",
        price: Decimal = Decimal("12000.00"),
    ) -> Property:
        if is_available is None:
            is_available = approval_status == ApprovalStatus.APPROVED
        property_obj = await listing_crud.create_property(
            db,
            landlord_id=landlord.id,
            title=title,
            address="12 Long Street",
            city=city,
            price=price,
            bedrooms=2,
            amenities=["parking"],
            utilities_included=[],
            images=[],
            is_available=is_available,
            featured=False,
            approval_status=approval_status,
        )
        await db.commit()
        return property_obj

    return _make_property


@pytest.fixture
def make_lease(db):
    async def _make_lease(
        property_obj: Property,
        tenant: User,
        status: LeaseStatus = LeaseStatus.DRAFT,
        start_date: date = date(2024, 1, 1),
        end_date: date = date(2024, 6, 1),
        monthly_rent: Decimal = Decimal("1000.00"),
        deposit: Decimal = Decimal("2000.00"),
        **extra,
    ) -> Lease:
        lease = await lease_crud.create_lease(
            db,
            property_id=property_obj.id,
            tenant_id=tenant.id,
            landlord_id=property_obj.landlord_id,
            start_date=start_date,
            end_date=end_date,
            monthly_rent=monthly_rent,
            deposit=deposit,
            lease_document=build_default_document(
                monthly_rent, deposit, start_date, end_date, property_obj.title
            ),
            tenant_documents=extra.pop("tenant_documents", []),
            status=status,
            **extra,
        )
        await db.commit()
        return lease

    return _make_lease
