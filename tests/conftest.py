"""Test fixtures: fake backend, sessions, API clients, DTO factories."""
from typing import AsyncGenerator

import pytest_asyncio
from httpx import ASGITransport

from marketplace.api.client import ApiClient
from marketplace.core.session import ADMIN_ROLE, Session
from marketplace.main import MarketplaceClient, create_client
from tests.fake_backend import ADMIN_TOKEN, USER_TOKEN, FakeBackend, create_fake_backend

BASE_URL = "http://test/api"


@pytest_asyncio.fixture(scope="function")
async def backend() -> FakeBackend:
    return FakeBackend()


@pytest_asyncio.fixture(scope="function")
async def transport(backend: FakeBackend) -> ASGITransport:
    return ASGITransport(app=create_fake_backend(backend))


@pytest_asyncio.fixture(scope="function")
async def admin_session() -> Session:
    return Session(token=ADMIN_TOKEN, user_id="1", role=ADMIN_ROLE)


@pytest_asyncio.fixture(scope="function")
async def user_session() -> Session:
    return Session(token=USER_TOKEN, user_id="7", role="ROLE_USER")


@pytest_asyncio.fixture(scope="function")
async def admin_api(admin_session: Session, transport: ASGITransport) -> AsyncGenerator[ApiClient, None]:
    """ApiClient authenticated as an administrator."""
    async with ApiClient(admin_session, base_url=BASE_URL, transport=transport) as api:
        yield api


@pytest_asyncio.fixture(scope="function")
async def user_api(user_session: Session, transport: ASGITransport) -> AsyncGenerator[ApiClient, None]:
    """ApiClient authenticated as a regular user."""
    async with ApiClient(user_session, base_url=BASE_URL, transport=transport) as api:
        yield api


@pytest_asyncio.fixture(scope="function")
async def anonymous_api(transport: ASGITransport) -> AsyncGenerator[ApiClient, None]:
    async with ApiClient(Session(), base_url=BASE_URL, transport=transport) as api:
        yield api


@pytest_asyncio.fixture(scope="function")
async def admin_client(
    admin_session: Session, transport: ASGITransport
) -> AsyncGenerator[MarketplaceClient, None]:
    """Fully wired client (every store) for an administrator."""
    async with create_client(admin_session, base_url=BASE_URL, transport=transport) as client:
        yield client


def make_publication_dto(**overrides) -> dict:
    """Create a publication DTO as the backend serializes it."""
    defaults = {
        "id": 1,
        "propertyTitle": "Casa amplia con jardín",
        "typeName": "Casa",
        "propertyDescription": "Casa de dos plantas cerca del parque central.",
        "propertyPrice": 230000.00,
        "propertyAddress": "Calle 10 # 4-21",
        "neighborhood": "Centro",
        "municipality": "Medellín",
        "department": "Antioquia",
        "propertyBedrooms": 3,
        "propertyFloors": 2,
        "propertySize": 120.5,
        "propertyParking": 1,
        "propertyFurnished": False,
        "propertyImageUrls": ["https://cdn.example.com/1/a.jpg", "https://cdn.example.com/1/b.jpg"],
        "latitude": 6.2442,
        "longitude": -75.5812,
        "availableTimes": [
            {"id": 11, "dayOfWeek": 1, "startTime": "09:00:00", "endTime": "12:00:00"},
        ],
        "userId": 7,
        "userName": "Laura Gómez",
        "userEmail": "laura@example.com",
        "userPhoneNumber": "3001234567",
        "status": "ACTIVE",
        "isReported": False,
        "reportCount": 0,
        "createdAt": "2024-04-01T08:30:00",
        "updatedAt": "2024-04-02T09:15:00",
    }
    defaults.update(overrides)
    return defaults


def make_report_dto(**overrides) -> dict:
    """Create a report DTO as the admin reports page receives it."""
    defaults = {
        "id": 1,
        "publicationId": 1,
        "reporterName": "Carlos Ruiz",
        "reason": "FRAUD",
        "description": "El precio no coincide con el anuncio.",
        "reportDate": "2024-05-01T12:00:00",
        "status": "PENDING",
    }
    defaults.update(overrides)
    return defaults


def make_profile_dto(**overrides) -> dict:
    defaults = {
        "id": 7,
        "name": "Laura Gómez",
        "email": "laura@example.com",
        "phone": "3001234567",
        "bio": "Agente inmobiliaria",
        "showEmail": True,
        "showPhone": False,
        "joinDate": "2023-01-15",
        "totalPublications": 4,
    }
    defaults.update(overrides)
    return defaults
