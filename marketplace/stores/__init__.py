from marketplace.stores.admin_publications_store import AdminPublicationsStore
from marketplace.stores.favorites_store import FavoritesStore
from marketplace.stores.home_listings_store import HomeListingsStore
from marketplace.stores.publications_store import PublicationsStore
from marketplace.stores.reports_store import ReportsStore
from marketplace.stores.user_profile_store import UserProfileStore

__all__ = [
    "AdminPublicationsStore",
    "FavoritesStore",
    "HomeListingsStore",
    "PublicationsStore",
    "ReportsStore",
    "UserProfileStore",
]
