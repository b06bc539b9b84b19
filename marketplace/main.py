"""Client factory: wires one Session and one ApiClient into every store.

    async with create_client(session) as client:
        await client.admin_publications.fetch_all_publications()
        await client.admin_publications.moderate(42, "INACTIVE")
"""
from typing import Optional

import httpx

from marketplace.api.client import ApiClient
from marketplace.config import settings
from marketplace.core.logging import get_logger, setup_logging
from marketplace.core.session import Session
from marketplace.stores import (
    AdminPublicationsStore,
    FavoritesStore,
    HomeListingsStore,
    PublicationsStore,
    ReportsStore,
    UserProfileStore,
)

logger = get_logger(__name__)


class MarketplaceClient:
    """Every store of the marketplace client, sharing one session."""

    def __init__(self, session: Session, api: ApiClient):
        self.session = session
        self.api = api
        self.publications = PublicationsStore(api)
        self.admin_publications = AdminPublicationsStore(api)
        self.reports = ReportsStore(api)
        self.favorites = FavoritesStore(api)
        self.home_listings = HomeListingsStore(api)
        self.user_profile = UserProfileStore(api)
        session.add_logout_listener(self._on_logout)

    def _on_logout(self) -> None:
        # Admin caches must not survive the session
        self.admin_publications.reset()
        self.reports.reset()

    async def __aenter__(self) -> "MarketplaceClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.api.aclose()
        logger.info("Shutting down %s", settings.app_name)


def create_client(
    session: Optional[Session] = None,
    base_url: Optional[str] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    configure_logging: bool = False,
) -> MarketplaceClient:
    """Create and configure the marketplace client."""
    if configure_logging:
        setup_logging()
    session = session or Session()
    api = ApiClient(session, base_url=base_url, transport=transport)
    logger.info("Starting %s v%s against %s", settings.app_name, settings.app_version, api.base_url)
    return MarketplaceClient(session, api)
